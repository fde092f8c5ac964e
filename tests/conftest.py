"""
Shared fixtures for GrumbleJar tests.

Each test gets its own SQLite file and a hand-driven undo clock.
"""

import sys
from pathlib import Path

import pytest

# Add parent to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from grumblejar.core.config import Config
from grumblejar.core.db import LedgerStore
from grumblejar.ledger import retention
from grumblejar.ledger.undo import UndoController
from grumblejar.service import PointsJar


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTimer:
    """Stands in for threading.Timer; fires only when the test says so."""

    created = []

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.started = False
        self.cancelled = False
        self.daemon = False
        FakeTimer.created.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        """Run the callback even if cancelled, like a timer thread that lost the race."""
        self.function(*self.args, **self.kwargs)


@pytest.fixture
def config(tmp_path):
    return Config(database_path=str(tmp_path / "jar.db"), undo_window_seconds=4.0)


@pytest.fixture
def store(config):
    store = LedgerStore.open(config)
    yield store
    store.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def undo(clock):
    FakeTimer.created = []
    return UndoController(window=4.0, clock=clock, timer_factory=FakeTimer)


@pytest.fixture
def timers(undo):
    """Timers created by the undo fixture, oldest first."""
    return FakeTimer.created


@pytest.fixture
def jar(store, config, undo):
    retention.reset()
    return PointsJar(store, config, undo=undo)
