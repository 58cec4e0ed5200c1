"""
Shared fixtures for the kvsim tests.
"""

import os
import sys

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from kvsim import Store, configure_logging

SAMPLE_ENTRIES = [
    {"key": "site1", "value": "https://www.google.com"},
    {"key": "site2", "value": "https://www.apple.com", "expiry": 1530800000000},
    {"key": "site3", "value": "https://www.amazon.com"},
    {"key": "site4", "value": "https://www.twitter.com"},
    {"key": "user1", "value": "jeswin"},
    {"key": "user2", "value": "deeps"},
    {"key": "user3", "value": "tommi"},
    {"key": "countries", "value": ["vietnam", "france", "belgium"]},
    {"key": "total", "value": 1000},
    {"key": "user:99", "value": {"username": "janie", "country": "India", "verified": 1}},
]


class FakeClock:
    """Controllable millisecond clock for expiry tests."""

    def __init__(self, start_ms: int = 1735689600000):
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, seconds: float = 1.0) -> None:
        self.now_ms += int(seconds * 1000)

@pytest.fixture(scope="session", autouse=True)
def quiet_logging():
    """Route kvsim events through stdlib logging at WARNING for the test run."""
    configure_logging("WARNING", json=False)

@pytest.fixture
def sample_entries():
    """A fresh copy of the sample dataset."""
    return [dict(entry) for entry in SAMPLE_ENTRIES]

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()

@pytest.fixture
def store(sample_entries, clock) -> Store:
    """A store loaded with the sample dataset and a fake clock."""
    return Store(sample_entries, clock=clock)

@pytest.fixture
def all_keys():
    """Keys of the sample dataset, in insertion order."""
    return [entry["key"] for entry in SAMPLE_ENTRIES]
