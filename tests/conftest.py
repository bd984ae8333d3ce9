"""Shared fixtures for the Vote4Us tests."""

from typing import Any, Dict, List
from unittest.mock import MagicMock

import numpy as np
import pytest

from vote4us.chain_client import ChainClientWrapper


def make_row(owner: str, total_votes: str, is_active: int = 1) -> Dict[str, Any]:
    """A producers table row as the chain returns it."""
    return {'owner': owner, 'total_votes': total_votes, 'is_active': is_active}


def make_rows(count: int, prefix: str = 'bp') -> List[Dict[str, Any]]:
    """``count`` active rows with distinct, decreasing vote weights."""
    return [make_row(f"{prefix}{i:02d}", f"{(count - i) * 1000}.0000") for i in range(count)]


@pytest.fixture
def fake_client() -> MagicMock:
    """A chain client that never touches the network."""
    client = MagicMock(spec=ChainClientWrapper)
    client.get_producer_rows.return_value = []
    client.get_account.return_value = {'account_name': 'voter'}
    return client


@pytest.fixture
def sleeps() -> List[float]:
    """Records the delays requested between retries."""
    return []


@pytest.fixture
def record_sleep(sleeps):
    return sleeps.append


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)
