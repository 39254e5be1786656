"""Event names and attribute keys shared with the analytics backend."""

from enum import Enum


class EventType(str, Enum):
    PLAYER_START = "Video Content Started"
    PLAYER_PLAYING = "Video Content Playing"
    PLAYER_COMPLETE = "Video Content Completed"


class Attribute(str, Enum):
    """Payload keys. The values are the wire names and must not change."""

    CONTENT_CMS_CATEGORY = "contentCmsCategory"  # pipe separated
    AD_TYPE = "Ad Type"  # pre-roll / mid-roll / post-roll
    CONTENT_SHOWN_ON_PLATFORM = "contentShownOnPlatform"
    STREAMING_DEVICE = "streaming_device"
    VIDEO_ACCOUNT_ID = "videoAccountId"
    VIDEO_ACCOUNT_NAME = "videoAccountName"
    VIDEO_AD_DURATION = "videoAdDuration"
    VIDEO_AD_VOLUME = "videoAdVolume"
    SESSION_ID = "session_id"
    VIDEO_ID = "videoId"
    VIDEO_NAME = "videoName"
    VIDEO_CONTENT_POSITION = "videoContentPosition"
    VIDEO_CONTENT_DURATION = "videoContentDuration"
    VIDEO_CONTENT_PERCENT_COMPLETE = "videoContentPercentComplete"
    LIVESTREAM = "livestream"
    VIDEO_PUBLISHED_AT = "videoPublishedAt"
    VIDEO_CREATED_AT = "videoCreatedAt"
    VIDEO_SYNDICATE = "videoSyndicate"
    VIDEO_FRANCHISE = "videoFranchise"
    VIDEO_TAGS = "videoTags"
    VIDEO_THUMBNAIL = "videoThumbnail"
    VIDEO_UPDATED_AT = "videoUpdatedAt"


# Overlaid on every event from live player state; never configured directly.
DERIVED_ATTRIBUTES = frozenset(
    {
        Attribute.VIDEO_CONTENT_POSITION.value,
        Attribute.VIDEO_CONTENT_PERCENT_COMPLETE.value,
        Attribute.LIVESTREAM.value,
    }
)

KNOWN_ATTRIBUTES = frozenset(a.value for a in Attribute)
