"""Player-state sources read by the tracker on every heartbeat."""

from __future__ import annotations

import math
import threading
import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Optional


class PlayerStatus(str, Enum):
    UNKNOWN = "unknown"
    READY_TO_PLAY = "readyToPlay"
    FAILED = "failed"


class PlayerStateSource(ABC):
    """Synchronous view onto a media player.

    Values may be stale or unavailable before the media loads; callers check
    `is_ready()` first.
    """

    @abstractmethod
    def is_ready(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def duration(self) -> float:
        """Total media length in seconds. NaN or <= 0 when unknown."""
        raise NotImplementedError

    @abstractmethod
    def current_time(self) -> float:
        raise NotImplementedError


class SimulatedPlayer(PlayerStateSource):
    """In-process player with a controllable clock.

    The playhead moves with `clock` (wall time by default) scaled by `speed`
    while playing, or explicitly through `advance()`. A live player reports an
    indefinite (NaN) duration and a running playhead.
    """

    def __init__(
        self,
        duration: float,
        start_at: float = 0.0,
        live: bool = False,
        load_delay: float = 0.0,
        speed: float = 1.0,
        clock: Optional[Callable[[], float]] = None,
    ):
        self._duration = float(duration)
        self._position = float(start_at)
        self.live = live
        self.speed = speed
        self._clock = clock or time.monotonic
        self._created = self._clock()
        self._load_delay = load_delay
        self._playing_since: Optional[float] = None
        self.status = PlayerStatus.UNKNOWN if load_delay > 0 else PlayerStatus.READY_TO_PLAY
        self._lock = threading.Lock()

    def _sync(self) -> None:
        now = self._clock()
        if self.status is PlayerStatus.UNKNOWN and now - self._created >= self._load_delay:
            self.status = PlayerStatus.READY_TO_PLAY
        if self._playing_since is not None:
            self._position += (now - self._playing_since) * self.speed
            self._playing_since = now
        if not self.live:
            self._position = min(self._position, self._duration)

    def is_ready(self) -> bool:
        with self._lock:
            self._sync()
            return self.status is PlayerStatus.READY_TO_PLAY

    def duration(self) -> float:
        if self.live:
            return math.nan
        return self._duration

    def current_time(self) -> float:
        with self._lock:
            self._sync()
            return self._position

    @property
    def is_playing(self) -> bool:
        return self._playing_since is not None

    @property
    def finished(self) -> bool:
        return not self.live and self.current_time() >= self._duration

    def play(self) -> None:
        with self._lock:
            self._sync()
            if self._playing_since is None:
                self._playing_since = self._clock()

    def pause(self) -> None:
        with self._lock:
            self._sync()
            self._playing_since = None

    def seek(self, position: float) -> None:
        with self._lock:
            self._sync()
            self._position = max(0.0, float(position))
            if not self.live:
                self._position = min(self._position, self._duration)

    def advance(self, seconds: float) -> None:
        """Move the playhead forward without consulting the clock."""
        with self._lock:
            self._sync()
            self._position += seconds * self.speed
            if not self.live:
                self._position = min(self._position, self._duration)

    def fail(self) -> None:
        self.status = PlayerStatus.FAILED

    def mark_ready(self) -> None:
        self.status = PlayerStatus.READY_TO_PLAY
