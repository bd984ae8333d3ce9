"""Vote4Us: producer statistics and vote reconciliation for the vote-for-producer feature."""

from .chain_client import ChainClientWrapper
from .data_fetcher import ProducerDataFetcher, RetryPolicy, FetchResult
from .analytics import ProducerAnalytics
from .reconciler import VoteSetReconciler, build_vote_action
from .state import StateStore, VotingSessionState
from .config import Vote4UsConfig
from .session import Vote4Us

__all__ = [
    'ChainClientWrapper',
    'ProducerDataFetcher',
    'RetryPolicy',
    'FetchResult',
    'ProducerAnalytics',
    'VoteSetReconciler',
    'build_vote_action',
    'StateStore',
    'VotingSessionState',
    'Vote4UsConfig',
    'Vote4Us',
]
