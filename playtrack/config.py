"""Analytics settings resolved from the environment.

Settings are resolved on every public tracker call rather than cached, so
flipping PLAYTRACK_SEGMENT_ENABLED or clearing the account id takes effect on
the next call.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace

DEFAULT_HEARTBEAT_SECONDS = 5.0
DEFAULT_SEGMENT_ENDPOINT = "https://api.segment.io/v1/track"


def _env_flag(name: str, default: str = "") -> bool:
    return (os.getenv(name) or default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class AnalyticsSettings:
    enabled: bool = False
    account_id: str = ""
    account_name: str = ""
    write_key: str = ""
    heartbeat_interval: float = DEFAULT_HEARTBEAT_SECONDS
    endpoint: str = DEFAULT_SEGMENT_ENDPOINT

    @property
    def is_enabled(self) -> bool:
        """Analytics runs only with the flag on and a non-empty account id."""
        return bool(self.enabled) and len(self.account_id) > 0

    @classmethod
    def from_env(cls) -> "AnalyticsSettings":
        interval_raw = os.getenv("PLAYTRACK_HEARTBEAT_SECONDS")
        try:
            interval = float(interval_raw) if interval_raw else DEFAULT_HEARTBEAT_SECONDS
        except ValueError:
            interval = DEFAULT_HEARTBEAT_SECONDS
        if interval <= 0:
            interval = DEFAULT_HEARTBEAT_SECONDS
        return cls(
            enabled=_env_flag("PLAYTRACK_SEGMENT_ENABLED"),
            account_id=(os.getenv("PLAYTRACK_SEGMENT_ACCOUNT_ID") or "").strip(),
            account_name=(os.getenv("PLAYTRACK_SEGMENT_ACCOUNT_NAME") or "").strip(),
            write_key=os.getenv("PLAYTRACK_SEGMENT_WRITE_KEY") or "",
            heartbeat_interval=interval,
            endpoint=os.getenv("PLAYTRACK_SEGMENT_ENDPOINT") or DEFAULT_SEGMENT_ENDPOINT,
        )

    def with_overrides(self, **changes) -> "AnalyticsSettings":
        return replace(self, **changes)

    def masked_write_key(self) -> str:
        if not self.write_key:
            return ""
        if len(self.write_key) <= 4:
            return "*" * len(self.write_key)
        return "*" * (len(self.write_key) - 4) + self.write_key[-4:]
