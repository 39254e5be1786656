"""Pytest configuration and shared fixtures."""

import math

import pytest

from playtrack.config import AnalyticsSettings
from playtrack.player import PlayerStateSource
from playtrack.scheduling import ManualScheduler
from playtrack.sinks import RecordingSink
from playtrack.trackers import PlaybackTracker


class FakePlayer(PlayerStateSource):
    """Player whose state the test sets directly."""

    def __init__(self, duration: float = 100.0, position: float = 0.0, ready: bool = True):
        self.length = duration
        self.position = position
        self.ready = ready

    def is_ready(self) -> bool:
        return self.ready

    def duration(self) -> float:
        return self.length

    def current_time(self) -> float:
        return self.position


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep host PLAYTRACK_* variables out of the tests."""
    for name in (
        "PLAYTRACK_SEGMENT_ENABLED",
        "PLAYTRACK_SEGMENT_ACCOUNT_ID",
        "PLAYTRACK_SEGMENT_ACCOUNT_NAME",
        "PLAYTRACK_SEGMENT_WRITE_KEY",
        "PLAYTRACK_HEARTBEAT_SECONDS",
        "PLAYTRACK_SEGMENT_ENDPOINT",
        "PLAYTRACK_LOG_DIR",
        "PLAYTRACK_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def settings():
    return AnalyticsSettings(enabled=True, account_id="416418724", account_name="People")


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def make_player():
    return FakePlayer


@pytest.fixture
def player():
    return FakePlayer(duration=100.0, position=0.0)


@pytest.fixture
def live_player():
    return FakePlayer(duration=math.nan, position=0.0)


@pytest.fixture
def tracker(sink, settings, scheduler):
    return PlaybackTracker(sink, settings=settings, scheduler=scheduler, heartbeat_interval=5.0)
