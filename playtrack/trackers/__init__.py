"""Playback tracking components."""

from .playback_tracker import PlaybackTracker
from .session import PlaybackSession

__all__ = ["PlaybackTracker", "PlaybackSession"]
