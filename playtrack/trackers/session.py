"""Per-playback session state."""

from __future__ import annotations

import math
import uuid
import weakref
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from ..config import DEFAULT_HEARTBEAT_SECONDS
from ..events import Attribute, EventType
from ..player import PlayerStateSource


def _player_ref(player: PlayerStateSource) -> Callable[[], Optional[PlayerStateSource]]:
    try:
        return weakref.ref(player)
    except TypeError:
        # Objects without __weakref__ (slotted classes) are held strongly.
        return lambda: player


def finite_or_zero(value: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    return value if math.isfinite(value) else 0.0


@dataclass(eq=False)
class PlaybackSession:
    """Timing state and base payload for one playback.

    The player is referenced weakly; `player` returns None once it is gone.
    """

    payload: Dict[str, Any]
    player_ref: Callable[[], Optional[PlayerStateSource]]
    is_live_stream: bool = False
    is_resuming_playback: bool = False
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    total_length: float = 0.0
    current_position: float = 0.0
    progress: float = 0.0
    heartbeat_interval: float = DEFAULT_HEARTBEAT_SECONDS

    def __post_init__(self):
        self.payload[Attribute.SESSION_ID.value] = self.session_id

    @classmethod
    def open(cls, player: PlayerStateSource, payload: Dict[str, Any], is_live: bool, is_resuming: bool) -> "PlaybackSession":
        return cls(
            payload=payload,
            player_ref=_player_ref(player),
            is_live_stream=is_live,
            is_resuming_playback=is_resuming,
        )

    @property
    def player(self) -> Optional[PlayerStateSource]:
        return self.player_ref()

    def update_position(self, duration: float, position: float) -> bool:
        """Apply a non-live player reading.

        Args:
            duration: Media length in seconds; unknown values read as 0
            position: Playhead in seconds; negative values read as 0

        Returns:
            False when the duration is unknown and progress was left alone
        """
        self.total_length = finite_or_zero(duration)
        self.current_position = max(0.0, finite_or_zero(position))
        if self.total_length <= 0:
            return False
        self.progress = self.current_position / self.total_length * 100.0
        return True

    def event_data(self, kind: EventType) -> Dict[str, Any]:
        """Copy the payload and overlay position, percent complete and live flag.

        Args:
            kind: Completion reports the full length at 100%

        Returns:
            Properties for one event; the session payload is left untouched
        """
        data = dict(self.payload)
        if kind is EventType.PLAYER_COMPLETE:
            data[Attribute.VIDEO_CONTENT_POSITION.value] = int(self.total_length)
            data[Attribute.VIDEO_CONTENT_PERCENT_COMPLETE.value] = 100
        else:
            data[Attribute.VIDEO_CONTENT_POSITION.value] = int(self.current_position)
            data[Attribute.VIDEO_CONTENT_PERCENT_COMPLETE.value] = int(self.progress)
        data[Attribute.LIVESTREAM.value] = self.is_live_stream
        return data

    def clear(self) -> None:
        """Drop the payload and player, zero the timing state."""
        self.payload = {}
        self.player_ref = lambda: None
        self.is_live_stream = False
        self.is_resuming_playback = False
        self.total_length = 0.0
        self.current_position = 0.0
        self.progress = 0.0
