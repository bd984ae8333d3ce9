"""Type definitions for Vote4Us."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, TypedDict

from .constants import MAX_SELECTION_SIZE, STATUS_EMPTY, STATUS_OK


class ProducerRow(TypedDict):
    """Type definition for a raw row of the producers table."""
    owner: str
    total_votes: str
    is_active: int


class Producer(TypedDict):
    """Type definition for an active producer candidate."""
    owner: str
    total_votes: str
    is_active: bool


class VoterInfo(TypedDict, total=False):
    """Type definition for the voter_info section of an account."""
    owner: str
    proxy: str
    producers: List[str]


class AccountInfo(TypedDict, total=False):
    """Type definition for a get_account response."""
    account_name: str
    voter_info: Optional[VoterInfo]


class TableRowsResponse(TypedDict, total=False):
    """Type definition for a get_table_rows response."""
    rows: List[ProducerRow]
    more: bool
    next_key: str


class VoteAction(TypedDict):
    """Type definition for a voteproducer action."""
    account: str
    name: str
    authorization: List[Dict[str, str]]
    data: Dict[str, Any]


@dataclass(frozen=True)
class ProducerStatistics:
    """Ranked statistics of one producer among the active producers."""
    rank: int = 0
    votes: int = 0
    total_votes: int = 0
    percentage: str = ''
    list: Tuple[str, ...] = ()
    status: str = STATUS_EMPTY

    @property
    def found(self) -> bool:
        return self.status == STATUS_OK


EMPTY_STATISTICS = ProducerStatistics()


@dataclass(frozen=True)
class VoteSelection:
    """The producers a voter has voted for and the working copy being edited."""
    original: Tuple[str, ...] = ()
    modified: Tuple[str, ...] = ()
    room_for_more: int = MAX_SELECTION_SIZE

    @classmethod
    def from_voted(cls, producers: List[str]) -> 'VoteSelection':
        original = tuple(producers)
        return cls(
            original=original,
            modified=original,
            room_for_more=MAX_SELECTION_SIZE - len(original)
        )


@dataclass(frozen=True)
class LoggedAccount:
    """Identity of the authenticated voter.

    ``session`` is whatever the wallet integration hands back; it is kept
    only so the transaction collaborator can be built from it.
    """
    name: str
    permission: str
    session: Any = field(default=None, compare=False, repr=False)
