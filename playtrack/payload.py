"""Structured event payload for a playback session."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Union

from .events import Attribute, DERIVED_ATTRIBUTES, KNOWN_ATTRIBUTES


class PlaytrackError(Exception):
    """Base error for playtrack."""


class PayloadError(PlaytrackError):
    """Raised when a session payload fails validation at configuration time."""


_SCALAR_TYPES = (str, int, float, bool)


def _is_valid_extra(value: Any) -> bool:
    if value is None or isinstance(value, _SCALAR_TYPES):
        return True
    if isinstance(value, (list, tuple)):
        return all(isinstance(v, str) for v in value)
    return False


def _iso(value: Union[str, date, datetime, None]) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    return value.isoformat()


@dataclass
class VideoAttributes:
    """Known video attributes plus an open `extras` map.

    Only `video_id` is required. Unset optional fields are left out of the
    rendered payload, except `videoFranchise`, which the backend expects as an
    explicit null when unknown.
    """

    video_id: str
    video_name: str = ""
    cms_categories: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    thumbnail_url: Optional[str] = None
    duration: Optional[float] = None
    published_at: Union[str, datetime, None] = None
    created_at: Union[str, datetime, None] = None
    updated_at: Union[str, datetime, None] = None
    syndicate: Optional[str] = None
    franchise: Optional[str] = None
    streaming_device: Optional[str] = None
    platform: str = "ott"
    account_id: Optional[str] = None
    account_name: Optional[str] = None
    ad_type: Optional[str] = None
    ad_duration: Optional[float] = None
    ad_volume: Optional[float] = None
    extras: Dict[str, Any] = field(default_factory=dict)

    def validate(self) -> None:
        if not self.video_id:
            raise PayloadError("video_id is required")
        for key, value in self.extras.items():
            if key in KNOWN_ATTRIBUTES or key in DERIVED_ATTRIBUTES:
                raise PayloadError(f"extra attribute '{key}' collides with a known attribute")
            if not _is_valid_extra(value):
                raise PayloadError(
                    f"extra attribute '{key}' has unsupported type {type(value).__name__}"
                )

    def to_payload(self) -> Dict[str, Any]:
        """Render to the wire dictionary keyed by attribute name."""
        optional = {
            Attribute.VIDEO_NAME: self.video_name or None,
            Attribute.CONTENT_CMS_CATEGORY: "|".join(self.cms_categories) if self.cms_categories else None,
            Attribute.VIDEO_TAGS: list(self.tags) if self.tags else None,
            Attribute.VIDEO_THUMBNAIL: self.thumbnail_url,
            Attribute.VIDEO_CONTENT_DURATION: int(self.duration) if self.duration is not None else None,
            Attribute.VIDEO_PUBLISHED_AT: _iso(self.published_at),
            Attribute.VIDEO_CREATED_AT: _iso(self.created_at),
            Attribute.VIDEO_UPDATED_AT: _iso(self.updated_at),
            Attribute.VIDEO_SYNDICATE: self.syndicate,
            Attribute.STREAMING_DEVICE: self.streaming_device,
            Attribute.VIDEO_ACCOUNT_ID: self.account_id,
            Attribute.VIDEO_ACCOUNT_NAME: self.account_name,
            Attribute.AD_TYPE: self.ad_type,
            Attribute.VIDEO_AD_DURATION: self.ad_duration,
            Attribute.VIDEO_AD_VOLUME: self.ad_volume,
        }
        payload: Dict[str, Any] = {
            Attribute.VIDEO_ID.value: self.video_id,
            Attribute.CONTENT_SHOWN_ON_PLATFORM.value: self.platform,
            Attribute.VIDEO_FRANCHISE.value: self.franchise,
        }
        for key, value in optional.items():
            if value is not None:
                payload[key.value] = value
        for key, value in self.extras.items():
            payload[key] = list(value) if isinstance(value, tuple) else value
        return payload


def build_session_payload(
    payload: Union[VideoAttributes, Mapping[str, Any]],
    account_id: str = "",
    account_name: str = "",
) -> Dict[str, Any]:
    """Validate and copy a configuration payload into a fresh dictionary.

    Structured payloads pick up the configured account when they do not carry
    their own. Plain mappings are copied as-is.
    """
    if isinstance(payload, VideoAttributes):
        payload.validate()
        rendered = payload.to_payload()
        if account_id:
            rendered.setdefault(Attribute.VIDEO_ACCOUNT_ID.value, account_id)
        if account_name:
            rendered.setdefault(Attribute.VIDEO_ACCOUNT_NAME.value, account_name)
        return rendered
    if not isinstance(payload, Mapping):
        raise PayloadError(f"unsupported payload type {type(payload).__name__}")
    return dict(payload)
