"""Recurring heartbeat timers and the serial context decisions run on.

A tick fires on the scheduler's context (a timer thread for ThreadScheduler).
Anything that emits events or tears a session down is posted to a Dispatcher,
which runs posted work one item at a time.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, List

logger = logging.getLogger("playtrack.scheduling")


class TickHandle(ABC):
    @abstractmethod
    def cancel(self) -> None:
        """Stop future ticks. Safe to call more than once."""
        raise NotImplementedError

    @property
    @abstractmethod
    def active(self) -> bool:
        raise NotImplementedError


# Receives the handle that fired, so a callback can tell a cancelled timer apart.
TickCallback = Callable[[TickHandle], None]


class Scheduler(ABC):
    @abstractmethod
    def schedule_repeating(self, interval: float, callback: TickCallback) -> TickHandle:
        raise NotImplementedError


class Dispatcher(ABC):
    @abstractmethod
    def post(self, fn: Callable[[], None]) -> None:
        raise NotImplementedError


def _run_logged(fn: Callable[[], None]) -> None:
    try:
        fn()
    except Exception:
        logger.exception("Posted playback decision failed")


class _ThreadTick(TickHandle):
    def __init__(self, interval: float, callback: TickCallback):
        self.interval = interval
        self._callback = callback
        self._cancelled = threading.Event()
        self._thread = threading.Thread(target=self._run, name="playtrack-heartbeat", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def _run(self) -> None:
        while not self._cancelled.wait(self.interval):
            try:
                self._callback(self)
            except Exception:
                logger.exception("Heartbeat tick failed")

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def active(self) -> bool:
        return not self._cancelled.is_set()


class ThreadScheduler(Scheduler):
    """Runs each recurring tick on its own daemon thread."""

    def schedule_repeating(self, interval: float, callback: TickCallback) -> TickHandle:
        if interval <= 0:
            raise ValueError("interval must be positive")
        tick = _ThreadTick(interval, callback)
        tick.start()
        logger.debug(f"Started heartbeat every {interval}s")
        return tick


class _ManualTick(TickHandle):
    def __init__(self, interval: float, callback: TickCallback):
        self.interval = interval
        self.callback = callback
        self._active = True

    def cancel(self) -> None:
        self._active = False

    @property
    def active(self) -> bool:
        return self._active


class ManualScheduler(Scheduler):
    """Ticks fire only when `fire()` is called. Used by tests and simulations."""

    def __init__(self):
        self.handles: List[_ManualTick] = []

    def schedule_repeating(self, interval: float, callback: TickCallback) -> TickHandle:
        self.handles = self.active_handles
        tick = _ManualTick(interval, callback)
        self.handles.append(tick)
        return tick

    @property
    def active_handles(self) -> List[_ManualTick]:
        return [h for h in self.handles if h.active]

    def fire(self) -> int:
        """Fire every active tick once; returns how many fired."""
        fired = 0
        for tick in self.active_handles:
            tick.callback(tick)
            fired += 1
        return fired


class ImmediateDispatcher(Dispatcher):
    """Runs posted work inline on the caller's thread."""

    def post(self, fn: Callable[[], None]) -> None:
        _run_logged(fn)


class SerialDispatcher(Dispatcher):
    """Single worker thread acting as the main context."""

    def __init__(self, name: str = "playtrack-main"):
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)

    def post(self, fn: Callable[[], None]) -> None:
        self._executor.submit(_run_logged, fn)

    def drain(self, timeout: float = 5.0) -> None:
        """Block until everything posted so far has run."""
        marker: Future = self._executor.submit(lambda: None)
        marker.result(timeout=timeout)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)
