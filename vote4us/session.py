"""Voting session tying producer data, vote reconciliation and the wallet together."""

import time
from typing import Any, Callable, Dict, List, Optional, Protocol
import numpy as np
from .analytics import ProducerAnalytics
from .chain_client import ChainClientWrapper
from .config import Vote4UsConfig
from .data_fetcher import ProducerDataFetcher, RetryPolicy
from .exceptions import Vote4UsError, VoteSelectionError
from .reconciler import VoteSetReconciler, build_vote_action
from .state import StateStore, VotingSessionState, has_voted_for
from .types import EMPTY_STATISTICS, LoggedAccount, ProducerStatistics, VoteSelection
from .constants import CANCELLED_MARKER
import logging

# Configure logger
logger = logging.getLogger('vote4us.session')


class Transactor(Protocol):
    """Signs and broadcasts transactions for the logged voter."""

    def transact(self, transaction: Dict[str, Any]) -> Any:
        ...


class Vote4Us:
    """A voter's session for voting for the configured producer.

    All changes go through ``store``; subscribe to it to follow the session.
    """

    def __init__(
        self,
        config: Vote4UsConfig,
        client: Optional[ChainClientWrapper] = None,
        transactor_factory: Optional[Callable[[LoggedAccount], Transactor]] = None,
        rng: Optional[np.random.Generator] = None,
        sleep: Callable[[float], None] = time.sleep,
        retry_policy: Optional[RetryPolicy] = None
    ) -> None:
        self.config = config
        self.fetcher = ProducerDataFetcher(
            client=client or ChainClientWrapper(config.rpc_endpoint),
            retry_policy=retry_policy,
            expected_count=config.expected_bps,
            sleep=sleep
        )
        self.reconciler = VoteSetReconciler(rng=rng)
        self.store = StateStore()
        self._transactor_factory = transactor_factory
        self._statistics_generation = 0

    @property
    def state(self) -> VotingSessionState:
        return self.store.state

    def start_fetching_statistics(self) -> ProducerStatistics:
        """Refresh the statistics of the configured producer.

        Only the most recently started refresh publishes its result.
        """
        self._statistics_generation += 1
        generation = self._statistics_generation
        self.store.update(statistics=EMPTY_STATISTICS)

        producers = self.fetcher.fetch_active_producers(self.config.expected_bps)
        statistics = ProducerAnalytics.compute_statistics(producers, self.config.current_producer)

        if generation != self._statistics_generation:
            logger.info(f"Discarding statistics from refresh {generation}, refresh {self._statistics_generation} started since")
            return statistics

        self.store.update(statistics=statistics)
        return statistics

    def get_voted_producers(self, account_name: str) -> List[str]:
        """Get the active producers ``account_name`` currently votes for."""
        return self.fetcher.get_voted_producers(account_name, self.state.statistics.list)

    def update_voted_producers(self) -> VoteSelection:
        """Reload the logged voter's selection from chain."""
        logged = self.state.logged
        voted = self.get_voted_producers(logged.name) if logged else []
        selection = VoteSelection.from_voted(voted)
        self.store.update(
            selection=selection,
            has_voted_for_us=has_voted_for(self.config.current_producer, voted, self.state.statistics.list)
        )
        return selection

    def login(self, account: LoggedAccount) -> None:
        """Start the session of a voter authenticated by the wallet."""
        logger.info(f"Logged in as {account.name}@{account.permission}")
        self.store.update(logged=account)
        self.update_voted_producers()
        self.store.update(show_dialog=True)

    def drop_bp(self, bp: str) -> VoteSelection:
        """Replace ``bp`` with the configured producer in the working selection."""
        selection = self.state.selection
        producers = list(selection.original)
        if bp not in producers:
            raise VoteSelectionError(f"{bp} is not in the current selection")
        producers[producers.index(bp)] = self.config.current_producer
        new_selection = VoteSelection(
            original=selection.original,
            modified=tuple(producers),
            room_for_more=selection.room_for_more
        )
        self.store.update(selection=new_selection)
        return new_selection

    def reset_modified_selection(self) -> None:
        selection = self.state.selection
        self.store.update(selection=VoteSelection(
            original=selection.original,
            modified=selection.original,
            room_for_more=selection.room_for_more
        ))

    def set_add_recommended(self, add_recommended: bool) -> None:
        self.store.update(add_recommended=bool(add_recommended))

    def open_dialog(self) -> None:
        self.store.update(show_dialog=True)

    def close_dialog(self) -> None:
        """Hide the dialog, ending the session once there is nothing left to do."""
        state = self.state
        if state.thanks or state.has_voted_for_us or state.error:
            self.reset_all()
        else:
            self.store.update(show_dialog=False)

    def reset_all(self) -> None:
        """Log the voter out and start over, keeping the statistics."""
        if self.state.is_logged_in:
            logger.info(f"Logging out {self.state.logged.name}")
        self.store.set(VotingSessionState(statistics=self.state.statistics))

    def preview_vote(self) -> List[str]:
        """Producers a vote would submit right now."""
        state = self.state
        selection = state.selection
        return self.reconciler.reconcile(
            original=selection.original,
            target_owner=self.config.current_producer,
            room_for_more=selection.room_for_more,
            modified=selection.modified,
            add_recommended=state.add_recommended,
            suggested=self.config.suggested_bps,
            not_suggested=self.config.not_suggested_bps,
            known_active_list=state.statistics.list
        )

    def _transactor(self, account: LoggedAccount) -> Transactor:
        if self._transactor_factory is not None:
            return self._transactor_factory(account)
        if account.session is None:
            raise Vote4UsError(f"No wallet session to sign the vote of {account.name}")
        return account.session

    def vote_for_us(self) -> Any:
        """Cast the vote for the configured producer.

        Returns:
            The transactor's result, or None when nothing was submitted

        Raises:
            VoteSelectionError: when the selection has no room for the producer
            Vote4UsError: when there is no wallet session to sign with
        """
        self.store.update(error='')
        if not self.state.is_logged_in:
            logger.error("No user logged in")
            return None
        logged = self.state.logged

        producers = self.preview_vote()
        action = build_vote_action(logged.name, logged.permission, producers)
        transactor = self._transactor(logged)

        try:
            result = transactor.transact({'actions': [action]})
        except Exception as e:
            self.update_voted_producers()
            message = str(e)
            if CANCELLED_MARKER in message:
                logger.info("User cancelled the transaction")
                return None
            logger.error(f"Error casting vote: {message}")
            self.store.update(error=message or 'An error occurred while casting your vote.')
            return None

        logger.info(f"Vote successful: {result}")
        self.store.update(thanks=True)
        self.start_fetching_statistics()
        self.update_voted_producers()
        return result
