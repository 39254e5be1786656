"""Event sinks: where tracked events go.

Sinks are fire-and-forget. Delivery, batching and retry are out of scope; the
HTTP sink makes a single attempt and logs failures.
"""

from __future__ import annotations

import json
import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import httpx
from rich.console import Console
from rich.table import Table

from .events import Attribute

logger = logging.getLogger("playtrack.sinks")
analytics_logger = logging.getLogger("playtrack.analytics")

console = Console()


class EventSink(ABC):
    @abstractmethod
    def track(self, event_name: str, properties: Dict[str, Any]) -> None:
        """Hand one event to the analytics backend. Fire-and-forget.

        Args:
            event_name: Wire name, e.g. "Video Content Playing"
            properties: Attribute name to value
        """
        raise NotImplementedError


class RecordingSink(EventSink):
    """Keeps every event in memory, in emission order."""

    def __init__(self):
        self._events: List[Tuple[str, Dict[str, Any]]] = []
        self._lock = threading.Lock()

    def track(self, event_name: str, properties: Dict[str, Any]) -> None:
        """Record a copy of the event."""
        with self._lock:
            self._events.append((event_name, dict(properties)))

    @property
    def events(self) -> List[Tuple[str, Dict[str, Any]]]:
        with self._lock:
            return list(self._events)

    @property
    def names(self) -> List[str]:
        return [name for name, _ in self.events]

    def clear(self) -> None:
        """Forget every recorded event."""
        with self._lock:
            self._events.clear()


class LoggingSink(EventSink):
    """Writes each event as one JSON line on the analytics logger."""

    def track(self, event_name: str, properties: Dict[str, Any]) -> None:
        """Log the event with a UTC timestamp."""
        entry = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "event": event_name,
            "properties": properties,
        }
        analytics_logger.info("[ANALYTICS] %s", json.dumps(entry, default=str))


class ConsoleSink(EventSink):
    """Renders each event as a rich table."""

    def __init__(self, output: Optional[Console] = None):
        self.console = output or console

    def track(self, event_name: str, properties: Dict[str, Any]) -> None:
        """Print the event's properties sorted by attribute name."""
        table = Table(title=f"📺 {event_name}", show_header=True, header_style="bold cyan")
        table.add_column("Attribute", style="dim", width=30)
        table.add_column("Value", style="white")
        for key in sorted(properties):
            table.add_row(key, str(properties[key]))
        self.console.print(table)


class SegmentHttpSink(EventSink):
    """Posts one event per call to the Segment HTTP tracking API."""

    def __init__(
        self,
        write_key: str,
        endpoint: str = "https://api.segment.io/v1/track",
        timeout: float = 5.0,
        client: Optional[httpx.Client] = None,
    ):
        """Create the sink.

        Args:
            write_key: Segment source write key, sent as the basic-auth user
            endpoint: Tracking API URL
            timeout: Seconds before a request is abandoned
            client: Preconfigured httpx client, mainly for tests
        """
        if not write_key:
            raise ValueError("write_key is required for the Segment sink")
        self.write_key = write_key
        self.endpoint = endpoint
        self._client = client or httpx.Client(timeout=timeout)

    def _body(self, event_name: str, properties: Dict[str, Any]) -> Dict[str, Any]:
        session_id = properties.get(Attribute.SESSION_ID.value) or "anonymous"
        return {
            "event": event_name,
            "anonymousId": str(session_id),
            "properties": properties,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    def track(self, event_name: str, properties: Dict[str, Any]) -> None:
        """POST the event once. HTTP errors are logged, never raised.

        Args:
            event_name: Segment event name
            properties: Event properties; `session_id` becomes the anonymous id
        """
        try:
            resp = self._client.post(
                self.endpoint,
                json=self._body(event_name, properties),
                auth=(self.write_key, ""),
            )
            resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to send '{event_name}' to Segment: {e}")

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()


class FanOutSink(EventSink):
    """Forwards each event to several sinks; one failing sink does not stop the rest."""

    def __init__(self, *sinks: EventSink):
        self.sinks = list(sinks)

    def track(self, event_name: str, properties: Dict[str, Any]) -> None:
        """Send a separate copy of the event to each sink."""
        for sink in self.sinks:
            try:
                sink.track(event_name, dict(properties))
            except Exception:
                logger.exception(f"Sink {type(sink).__name__} failed for '{event_name}'")
