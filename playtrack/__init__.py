"""Playback lifecycle analytics for video players."""

from .config import AnalyticsSettings
from .events import Attribute, EventType
from .payload import PayloadError, PlaytrackError, VideoAttributes
from .player import PlayerStateSource, PlayerStatus, SimulatedPlayer
from .sinks import EventSink, LoggingSink, RecordingSink
from .trackers import PlaybackSession, PlaybackTracker

__version__ = "0.1.0"

__all__ = [
    "AnalyticsSettings",
    "Attribute",
    "EventSink",
    "EventType",
    "LoggingSink",
    "PayloadError",
    "PlaybackSession",
    "PlaybackTracker",
    "PlayerStateSource",
    "PlayerStatus",
    "PlaytrackError",
    "RecordingSink",
    "SimulatedPlayer",
    "VideoAttributes",
]
