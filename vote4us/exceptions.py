"""Exception types raised by Vote4Us."""

from typing import Optional


class Vote4UsError(Exception):
    """Base class for all Vote4Us errors."""
    pass


class RPCError(Vote4UsError):
    """Custom exception for RPC errors."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConfigError(Vote4UsError):
    """Raised when the configuration is missing a required value."""
    pass


class VoteSelectionError(Vote4UsError, ValueError):
    """Raised when a vote selection would break the voting rules."""
    pass


class StateError(Vote4UsError):
    """Raised on invalid use of the state store."""
    pass
