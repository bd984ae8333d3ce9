"""Reconciliation of the producer set submitted in a vote."""

from typing import Iterable, List, Optional, Sequence
import numpy as np
from .exceptions import VoteSelectionError
from .types import VoteAction
from .constants import MAX_SELECTION_SIZE, SYSTEM_ACCOUNT, VOTE_ACTION_NAME
import logging

logger = logging.getLogger('vote4us.reconciler')


def _unique(producers: Iterable[str]) -> List[str]:
    """Drop repeated producers, keeping the first occurrence."""
    seen = set()
    result = []
    for producer in producers:
        if producer not in seen:
            seen.add(producer)
            result.append(producer)
    return result


class VoteSetReconciler:
    """Builds the final producer list for a voteproducer action.

    The random part of the recommendation fill comes from ``rng``; pass a
    seeded ``numpy.random.Generator`` to make it reproducible.
    """

    def __init__(self, rng: Optional[np.random.Generator] = None, max_selection_size: int = MAX_SELECTION_SIZE) -> None:
        self.rng = rng if rng is not None else np.random.default_rng()
        self.max_selection_size = max_selection_size

    def _shuffled(self, pool: List[str]) -> List[str]:
        if len(pool) < 2:
            return list(pool)
        order = self.rng.permutation(len(pool))
        return [pool[i] for i in order]

    def _fill(self, selected: List[str], pool: List[str]) -> List[str]:
        """Append random members of ``pool`` to ``selected`` up to the cap."""
        remaining = self.max_selection_size - len(selected)
        if remaining <= 0 or not pool:
            return selected
        picked = self._shuffled(pool)[:remaining]
        logger.debug(f"Filling {len(picked)} of {remaining} free slots from a pool of {len(pool)}")
        return selected + picked

    def reconcile(
        self,
        original: Sequence[str],
        target_owner: str,
        room_for_more: int,
        modified: Sequence[str],
        add_recommended: bool,
        suggested: Sequence[str],
        not_suggested: Sequence[str],
        known_active_list: Sequence[str]
    ) -> List[str]:
        """Compute the producers to submit for the voter.

        Args:
            original: Producers the voter currently votes for
            target_owner: Producer the vote is for
            room_for_more: Free slots left in ``original``
            modified: The voter's edited selection, used when there is no room
            add_recommended: Whether to fill free slots with recommendations
            suggested: Producers recommended first when filling
            not_suggested: Producers never used to fill the remaining slots
            known_active_list: Currently active producers

        Returns:
            Sorted list of unique producers, at most the selection cap long

        Raises:
            VoteSelectionError: when there is no room and ``modified`` does not
                include the target, or the result would exceed the cap
        """
        if room_for_more < 0:
            raise VoteSelectionError(f"room_for_more cannot be negative, got {room_for_more}")

        if room_for_more == 0:
            if target_owner not in modified:
                raise VoteSelectionError(
                    f"No room left: one producer must be replaced by {target_owner} first"
                )
            producers = _unique(modified)
        else:
            producers = _unique(original)
            if target_owner not in producers:
                producers.append(target_owner)

            if room_for_more > 1 and add_recommended:
                active = set(known_active_list)
                recommended = [
                    bp for bp in _unique(suggested)
                    if bp not in producers and bp in active
                ]
                producers = self._fill(producers, recommended)

                if len(producers) < self.max_selection_size:
                    excluded = set(producers) | set(not_suggested)
                    others = [bp for bp in _unique(known_active_list) if bp not in excluded]
                    producers = self._fill(producers, others)

        if len(producers) > self.max_selection_size:
            raise VoteSelectionError(
                f"Selection has {len(producers)} producers, the limit is {self.max_selection_size}"
            )

        return sorted(producers)


def build_vote_action(voter: str, permission: str, producers: Sequence[str], proxy: str = '') -> VoteAction:
    """Build the voteproducer action for a signer.

    Args:
        voter: Voting account
        permission: Permission the voter signs with
        producers: Producer list, already reconciled and sorted
        proxy: Proxy account; empty when voting for producers directly

    Returns:
        The action descriptor
    """
    return {
        'account': SYSTEM_ACCOUNT,
        'name': VOTE_ACTION_NAME,
        'authorization': [
            {
                'actor': voter,
                'permission': permission
            }
        ],
        'data': {
            'proxy': proxy,
            'voter': voter,
            'producers': list(producers)
        }
    }
