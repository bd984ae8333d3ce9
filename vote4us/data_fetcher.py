"""Data fetcher for producer and voter data."""

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional
import pandas as pd
from tenacity import (
    Retrying,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_fixed
)
from .chain_client import ChainClientWrapper
from .exceptions import RPCError
from .types import Producer, ProducerRow
from .constants import (
    DEFAULT_EXPECTED_BPS,
    PRODUCERS_TABLE_LIMIT,
    RPC_RETRY_ATTEMPTS,
    RPC_RETRY_DELAY
)
import logging

# Configure logger
logger = logging.getLogger('vote4us.data_fetcher')


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with a fixed delay between attempts."""
    max_attempts: int = RPC_RETRY_ATTEMPTS
    delay: float = RPC_RETRY_DELAY

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.delay < 0:
            raise ValueError("delay must not be negative")


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a producer fetch.

    ``producers`` is best effort: it may hold fewer producers than expected
    when every attempt came back truncated or failed.
    """
    producers: List[Producer]
    attempts: int
    rows_received: int
    complete: bool


def _active_producers_by_weight(rows: List[ProducerRow]) -> List[Producer]:
    """Keep the active rows and sort them by vote weight, highest first."""
    if not rows:
        return []

    df = pd.DataFrame(rows)
    for column in ('owner', 'total_votes', 'is_active'):
        if column not in df.columns:
            logger.error(f"Producer rows have no {column} column")
            return []

    df = df[pd.to_numeric(df['is_active'], errors='coerce').fillna(0).astype(int) == 1].copy()
    df['weight'] = pd.to_numeric(df['total_votes'], errors='coerce')
    invalid = df['weight'].isna()
    if invalid.any():
        logger.warning(f"Ignoring unparsable total_votes for: {df.loc[invalid, 'owner'].tolist()}")
        df.loc[invalid, 'weight'] = 0.0

    # Numeric sort; stable so equal weights keep the table order
    df = df.sort_values('weight', ascending=False, kind='stable')

    return [
        {
            'owner': str(row.owner),
            'total_votes': str(row.total_votes),
            'is_active': True
        }
        for row in df.itertuples(index=False)
    ]


class ProducerDataFetcher:
    """Handles fetching of producer and voter data."""

    def __init__(
        self,
        client: Optional[ChainClientWrapper] = None,
        retry_policy: Optional[RetryPolicy] = None,
        expected_count: int = DEFAULT_EXPECTED_BPS,
        sleep: Callable[[float], None] = time.sleep
    ) -> None:
        """Initialize the data fetcher.

        Args:
            client: Chain client, created from the environment when omitted
            retry_policy: Retry policy for the producer table scan
            expected_count: Row count at which a table scan is taken as complete
            sleep: Function used to wait between attempts
        """
        self.client = client or ChainClientWrapper()
        self.retry_policy = retry_policy or RetryPolicy()
        self.expected_count = expected_count
        self._sleep = sleep

    def fetch_active_producers_with_report(self, expected_count: Optional[int] = None) -> FetchResult:
        """Fetch the active producers, retrying while the table looks truncated.

        Args:
            expected_count: Row count that ends the retries early. Defaults to
                the count given at construction.

        Returns:
            FetchResult with the active producers sorted by vote weight
        """
        expected = self.expected_count if expected_count is None else expected_count
        policy = self.retry_policy
        received: Dict[str, Any] = {'rows': [], 'attempts': 0}

        def fetch_rows() -> List[ProducerRow]:
            received['attempts'] += 1
            attempt = received['attempts']
            try:
                rows = self.client.get_producer_rows(limit=PRODUCERS_TABLE_LIMIT)
            except RPCError as e:
                logger.error(f"Error fetching producers data (attempt {attempt}/{policy.max_attempts}): {e}")
                raise
            received['rows'] = rows
            logger.debug(f"Attempt {attempt} returned {len(rows)} producer rows")
            if len(rows) < expected:
                logger.warning(f"Got {len(rows)} producer rows, expected {expected}")
            return rows

        # The last rows received are kept when every attempt falls short
        retrying = Retrying(
            stop=stop_after_attempt(policy.max_attempts),
            wait=wait_fixed(policy.delay),
            retry=(
                retry_if_exception_type(RPCError)
                | retry_if_result(lambda rows: len(rows) < expected)
            ),
            sleep=self._sleep,
            retry_error_callback=lambda retry_state: received['rows'],
        )
        rows = retrying(fetch_rows)
        attempts = received['attempts']

        complete = len(rows) >= expected
        if not complete:
            logger.warning(
                f"Producer table still incomplete after {attempts} attempts "
                f"({len(rows)} of {expected} rows), using what was received"
            )

        producers = _active_producers_by_weight(rows)
        logger.info(f"Fetched {len(producers)} active producers from {len(rows)} rows")
        return FetchResult(
            producers=producers,
            attempts=attempts,
            rows_received=len(rows),
            complete=complete
        )

    def fetch_active_producers(self, expected_count: Optional[int] = None) -> List[Producer]:
        """Fetch the active producers sorted by vote weight, highest first.

        The list may be incomplete; see fetch_active_producers_with_report.
        """
        return self.fetch_active_producers_with_report(expected_count).producers

    def get_voted_producers(self, account_name: str, active_list: Iterable[str]) -> List[str]:
        """Get the producers an account currently votes for.

        Args:
            account_name: The voter's account
            active_list: Currently active producers; votes for anything else
                are dropped

        Returns:
            The voted producers in on-chain order, or an empty list when the
            account has not voted or could not be fetched
        """
        try:
            account_info = self.client.get_account(account_name)
        except RPCError as e:
            logger.error(f"Error fetching voted producers for {account_name}: {e}")
            return []

        voter_info = account_info.get('voter_info') or {}
        producers = voter_info.get('producers') or []
        active = set(active_list)
        voted = [producer for producer in producers if producer in active]
        if len(voted) != len(producers):
            logger.info(f"{account_name} votes for {len(producers) - len(voted)} inactive producers, ignoring them")
        return voted
