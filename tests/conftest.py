"""Shared fixtures."""

import pytest

from regionmetrics.metrics import RecordingSink

MB = 1024 * 1024


class ManualClock:
    """Millisecond clock that only moves when told to."""
    
    def __init__(self, start: float = 1_000_000.0):
        self.now = start
    
    def __call__(self) -> float:
        return self.now
    
    def advance(self, millis: float) -> None:
        self.now += millis


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def memory_probe():
    return lambda: (512 * MB, 2048 * MB)
