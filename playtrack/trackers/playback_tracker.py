"""Start / playing / complete event lifecycle for one playback session."""

from __future__ import annotations

import logging
import math
import threading
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

from ..config import DEFAULT_HEARTBEAT_SECONDS, AnalyticsSettings
from ..events import EventType
from ..payload import VideoAttributes, build_session_payload
from ..player import PlayerStateSource
from ..scheduling import Dispatcher, ImmediateDispatcher, Scheduler, ThreadScheduler, TickHandle
from ..sinks import EventSink
from .session import PlaybackSession

logger = logging.getLogger("playtrack.tracker")

SettingsProvider = Callable[[], AnalyticsSettings]
Event = Tuple[str, Dict[str, Any]]


class PlaybackTracker:
    """Emits playback lifecycle events for a single session at a time.

    Every public operation re-reads the analytics settings and is a silent
    no-op when analytics is disabled. Nothing here raises at runtime: a missing
    session, a player that is not ready, or content with unknown duration all
    end in a logged skip.
    """

    def __init__(
        self,
        sink: EventSink,
        settings: Union[AnalyticsSettings, SettingsProvider, None] = None,
        scheduler: Optional[Scheduler] = None,
        dispatcher: Optional[Dispatcher] = None,
        heartbeat_interval: Optional[float] = None,
    ):
        """Initialize the tracker.

        Args:
            sink: Destination for tracked events
            settings: Fixed settings, or a callable returning fresh settings on
                every call. Defaults to reading the environment each time.
            scheduler: Creates the recurring heartbeat. Defaults to a timer thread.
            dispatcher: Context that event emission and teardown run on.
            heartbeat_interval: Seconds between ticks; defaults to the settings value
        """
        self.sink = sink
        if settings is None:
            self._settings_provider: SettingsProvider = AnalyticsSettings.from_env
        elif isinstance(settings, AnalyticsSettings):
            self._settings_provider = lambda: settings
        else:
            self._settings_provider = settings
        self.scheduler = scheduler or ThreadScheduler()
        self.dispatcher = dispatcher or ImmediateDispatcher()
        self.heartbeat_interval = heartbeat_interval
        self._session: Optional[PlaybackSession] = None
        self._tick: Optional[TickHandle] = None
        self._lock = threading.RLock()

    # ----- state -----

    @property
    def session(self) -> Optional[PlaybackSession]:
        return self._session

    @property
    def is_tracking(self) -> bool:
        return self._tick is not None and self._tick.active

    def is_enabled(self) -> bool:
        """Check the analytics flag and account id as they are right now.

        Returns:
            True when events should be tracked
        """
        settings = self._resolve_settings()
        return settings is not None and settings.is_enabled

    def _resolve_settings(self) -> Optional[AnalyticsSettings]:
        try:
            return self._settings_provider()
        except Exception:
            logger.exception("Could not resolve analytics settings; treating analytics as disabled")
            return None

    # ----- public operations -----

    def configure(
        self,
        player: PlayerStateSource,
        payload: Union[VideoAttributes, Mapping[str, Any]],
        is_live: bool = False,
        is_resuming: bool = False,
    ) -> None:
        """Start a new session, replacing any existing one without emitting.

        The heartbeat interval is resolved here and stays fixed until the
        session ends.

        Args:
            player: Source of ready-state, duration and current time. Held weakly.
            payload: Base attributes sent with every event
            is_live: Report position 0 and never complete from progress
            is_resuming: Defer the start event to the first heartbeat

        Raises:
            PayloadError: if a structured payload fails validation
        """
        settings = self._resolve_settings()
        if settings is None or not settings.is_enabled:
            return
        session_payload = build_session_payload(payload, settings.account_id, settings.account_name)
        interval = self._session_interval(settings)
        with self._lock:
            self._cancel_tick()
            if self._session is not None:
                logger.info(f"Replacing session {self._session.session_id} without reset")
                self._session.clear()
            self._session = PlaybackSession.open(player, session_payload, is_live, is_resuming)
            self._session.heartbeat_interval = interval
            logger.info(
                f"Configured session {self._session.session_id} (live={is_live}, resuming={is_resuming})"
            )

    def track_start(self, resumed_by_ad: bool = False) -> None:
        """Send the start event (unless resuming) and start the heartbeat.

        A resuming session sends its start event from the first heartbeat
        instead. Nothing starts when no session is configured.

        Args:
            resumed_by_ad: Playback continues after an ad break
        """
        if not self.is_enabled():
            return
        event = None
        with self._lock:
            if resumed_by_ad:
                logger.debug("Playback resumed after an ad break")
            session = self._session
            if session is None or not session.is_resuming_playback:
                event = self._build_event(EventType.PLAYER_START, "track_start")
                if event is None:
                    return
            self._start_tick()
        self._send(event)

    def track_pause(self) -> None:
        """Stop the heartbeat. The session is kept for a later `track_start`."""
        if not self.is_enabled():
            return
        with self._lock:
            self._cancel_tick()

    def track_complete(self) -> None:
        """Send the completion event at 100% and tear the session down."""
        if not self.is_enabled():
            return
        with self._lock:
            event = self._complete_locked("track_complete")
        self._send(event)

    def reset(self) -> None:
        """Tear down the session and heartbeat. Safe to call repeatedly."""
        with self._lock:
            self._cancel_tick()
            if self._session is not None:
                logger.debug(f"Reset session {self._session.session_id}")
                self._session.clear()
            self._session = None

    def event_data(self, kind: EventType) -> Optional[Dict[str, Any]]:
        """Build the properties for `kind`, or None when no session is configured."""
        session = self._session
        if session is None:
            return None
        return session.event_data(kind)

    # ----- heartbeat -----

    def _session_interval(self, settings: AnalyticsSettings) -> float:
        interval = self.heartbeat_interval if self.heartbeat_interval is not None else settings.heartbeat_interval
        if not interval or not math.isfinite(interval) or interval <= 0:
            logger.warning(f"Invalid heartbeat interval {interval!r}, using {DEFAULT_HEARTBEAT_SECONDS}s")
            return DEFAULT_HEARTBEAT_SECONDS
        return float(interval)

    def _start_tick(self) -> None:
        self._cancel_tick()
        self._tick = self.scheduler.schedule_repeating(self._session.heartbeat_interval, self._on_tick)

    def _cancel_tick(self) -> None:
        if self._tick is not None:
            self._tick.cancel()
            self._tick = None

    def _is_current(self, tick: TickHandle) -> bool:
        return tick.active and tick is self._tick

    def _on_tick(self, tick: TickHandle) -> None:
        """Read the player on the scheduler's context and post the decision."""
        session = self._session
        if not self._is_current(tick):
            logger.debug("Heartbeat from a cancelled timer, skipping")
            return
        if session is None:
            logger.debug("Heartbeat with no session, skipping")
            return
        player = session.player
        if player is None:
            logger.debug("Player released, skipping heartbeat")
            return
        try:
            if not player.is_ready():
                logger.debug("Player item is not ready to play, skipping heartbeat")
                return
            if session.is_live_stream:
                duration, position = 0.0, 0.0
            else:
                duration, position = player.duration(), player.current_time()
        except Exception:
            logger.exception("Failed to read player state")
            return
        self.dispatcher.post(lambda: self._decide(session, tick, duration, position))

    def _decide(self, session: PlaybackSession, tick: TickHandle, duration: float, position: float) -> None:
        event = None
        with self._lock:
            if session is not self._session or not self._is_current(tick):
                logger.debug("Stale heartbeat after pause or reset, skipping")
                return
            if session.is_live_stream:
                logger.debug("Live stream detected, reporting position 0")
                session.current_position = 0.0
            elif not session.update_position(duration, position):
                logger.info("Content duration is unknown or zero, not calculating percent complete")

            if session.progress >= 100:
                if self.is_enabled():
                    event = self._complete_locked("heartbeat")
            elif session.is_resuming_playback:
                event = self._build_event(EventType.PLAYER_START, "heartbeat")
                if event is not None:
                    session.is_resuming_playback = False
            else:
                event = self._build_event(EventType.PLAYER_PLAYING, "heartbeat")
        self._send(event)

    # ----- emission -----

    def _complete_locked(self, source: str) -> Optional[Event]:
        event = self._build_event(EventType.PLAYER_COMPLETE, source)
        if event is not None:
            self.reset()
        return event

    def _build_event(self, kind: EventType, source: str) -> Optional[Event]:
        data = self.event_data(kind)
        if data is None:
            logger.info(f"{source}: no session payload, not sending '{kind.value}'")
            return None
        return kind.value, data

    def _send(self, event: Optional[Event]) -> None:
        # Called without the lock held so a slow sink never blocks pause/reset.
        if event is None:
            return
        name, data = event
        logger.debug(f"{name} - {data}")
        try:
            self.sink.track(name, data)
        except Exception:
            logger.exception(f"Event sink failed for '{name}'")
