"""Configuration for a Vote4Us session."""

import os
from dataclasses import dataclass
from typing import Optional, Tuple
from dotenv import load_dotenv
from .exceptions import ConfigError
from .constants import DEFAULT_APP_NAME, DEFAULT_CHAIN_ID, DEFAULT_EXPECTED_BPS, DEFAULT_RPC_URL


def _split_list(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return ()
    return tuple(item.strip() for item in value.split(',') if item.strip())


@dataclass(frozen=True)
class Vote4UsConfig:
    """Settings of a voting session."""
    current_producer: str
    suggested_bps: Tuple[str, ...] = ()
    not_suggested_bps: Tuple[str, ...] = ()
    rpc_endpoint: str = DEFAULT_RPC_URL
    chain_id: str = DEFAULT_CHAIN_ID
    expected_bps: int = DEFAULT_EXPECTED_BPS
    app_name: str = DEFAULT_APP_NAME

    def __post_init__(self) -> None:
        if not self.current_producer:
            raise ConfigError("current_producer is required")
        if self.expected_bps < 0:
            raise ConfigError(f"expected_bps must not be negative, got {self.expected_bps}")
        object.__setattr__(self, "suggested_bps", tuple(self.suggested_bps))
        object.__setattr__(self, "not_suggested_bps", tuple(self.not_suggested_bps))

    @classmethod
    def from_env(cls, **overrides) -> 'Vote4UsConfig':
        """Load the configuration from the environment (and a .env file).

        Keyword arguments take precedence over the environment.
        """
        load_dotenv()
        expected = os.getenv('VOTE4US_EXPECTED_BPS')
        try:
            expected_bps = int(expected) if expected else DEFAULT_EXPECTED_BPS
        except ValueError:
            raise ConfigError(f"VOTE4US_EXPECTED_BPS must be an integer, got {expected!r}")

        values = {
            'current_producer': os.getenv('VOTE4US_CURRENT_PRODUCER', ''),
            'suggested_bps': _split_list(os.getenv('VOTE4US_SUGGESTED_BPS')),
            'not_suggested_bps': _split_list(os.getenv('VOTE4US_NOT_SUGGESTED_BPS')),
            'rpc_endpoint': os.getenv('VOTE4US_RPC_URL', DEFAULT_RPC_URL),
            'chain_id': os.getenv('VOTE4US_CHAIN_ID', DEFAULT_CHAIN_ID),
            'expected_bps': expected_bps,
            'app_name': os.getenv('VOTE4US_APP_NAME', DEFAULT_APP_NAME),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)
