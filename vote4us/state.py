"""Observable state of a voting session."""

from dataclasses import dataclass, field, replace
from typing import Callable, Iterable, List, Optional
from .exceptions import StateError
from .types import EMPTY_STATISTICS, LoggedAccount, ProducerStatistics, VoteSelection
import logging

logger = logging.getLogger('vote4us.state')

Subscriber = Callable[['VotingSessionState'], None]


@dataclass(frozen=True)
class VotingSessionState:
    """Snapshot of everything a voting session knows.

    Snapshots are never modified; every change publishes a new one.
    """
    statistics: ProducerStatistics = EMPTY_STATISTICS
    selection: VoteSelection = field(default_factory=VoteSelection)
    logged: Optional[LoggedAccount] = None
    show_dialog: bool = False
    thanks: bool = False
    has_voted_for_us: bool = False
    add_recommended: bool = True
    error: str = ''

    @property
    def is_logged_in(self) -> bool:
        return self.logged is not None


def has_voted_for(target_owner: str, voted: Iterable[str], active_list: Iterable[str]) -> bool:
    """Whether ``target_owner`` is among the voted producers that are still active."""
    return target_owner in set(voted) and target_owner in set(active_list)


class StateStore:
    """Holds the current session state and notifies subscribers of changes.

    Subscribers are called synchronously, in subscription order, with the
    new snapshot. They must not change the state from inside the callback.
    A subscriber that raises is logged and the remaining ones still run.
    """

    def __init__(self, initial: Optional[VotingSessionState] = None) -> None:
        self._state = initial or VotingSessionState()
        self._subscribers: List[Subscriber] = []
        self._notifying = False

    @property
    def state(self) -> VotingSessionState:
        return self._state

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` and call it with the current state.

        Returns:
            A function that removes the subscription
        """
        self._subscribers.append(callback)
        self._deliver(callback, self._state)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    @staticmethod
    def _deliver(callback: Subscriber, state: VotingSessionState) -> None:
        try:
            callback(state)
        except Exception:
            logger.exception(f"State subscriber {callback!r} failed")

    def set(self, state: VotingSessionState) -> VotingSessionState:
        """Replace the state with ``state`` and notify subscribers."""
        if self._notifying:
            raise StateError("State changed while subscribers were being notified")
        self._state = state
        logger.debug(f"State changed: {state}")
        self._notifying = True
        try:
            for callback in list(self._subscribers):
                self._deliver(callback, state)
        finally:
            self._notifying = False
        return state

    def update(self, **changes) -> VotingSessionState:
        """Publish a copy of the current state with ``changes`` applied."""
        return self.set(replace(self._state, **changes))
