from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict


class MountTrigger(str, Enum):
    """Source that started a reconciliation pass or mount attempt."""

    STARTUP = "startup"
    PERIODIC = "periodic"
    MANUAL = "manual"
    SETTINGS_CHANGED = "settings_changed"
    RETRY = "retry"


class MountHealth(str, Enum):
    """
    Coarse health signal derived from (mounted, enabled) counts.

    ALL_GOOD: every enabled location is mounted
    PARTIAL: some but not all enabled locations are mounted
    NONE_MOUNTED: locations are enabled but none is mounted
    NOTHING_CONFIGURED: no location is enabled
    """

    ALL_GOOD = "AllGood"
    PARTIAL = "Partial"
    NONE_MOUNTED = "NoneMounted"
    NOTHING_CONFIGURED = "NothingConfigured"


class BookmarkEntry(BaseModel):
    """A raw line from the bookmark list: URI plus optional display name."""

    uri: str = Field(..., description="Remote resource address, e.g. smb://nas/media")
    raw_name: Optional[str] = Field(
        default=None, description="Name written after the URI in the bookmark file"
    )


class LocationSettings(BaseModel):
    """Persisted per-URI settings, written by the settings editor."""

    enabled: bool = Field(default=True, description="Auto-mount policy applies")
    alias_name: Optional[str] = Field(
        default=None, description="Explicit alias filename, overrides the display name"
    )
    create_alias: bool = Field(
        default=True, description="Keep an alias for this location while mounted"
    )


class Location(BaseModel):
    """
    One remote storage location tracked by the agent.

    Rebuilt from the bookmark list on every reconciliation pass. Only the
    runtime counters (fail_count, last_attempt_at) are carried over between
    passes, keyed by uri.
    """

    uri: str = Field(..., frozen=True, description="Stable key, never mutated")

    display_name: str = Field(..., description="Human label for menus and aliases")

    enabled: bool = Field(default=True, description="Auto-mount policy applies")

    alias_name: Optional[str] = Field(
        default=None, description="Explicit alias filename override"
    )

    create_alias: bool = Field(
        default=True, description="Keep an alias while mounted"
    )

    fail_count: int = Field(
        default=0, ge=0, description="Consecutive mount failures since last success"
    )

    last_attempt_at: Optional[datetime] = Field(
        default=None, description="When the last mount attempt completed"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "uri": "smb://nas.local/media",
                "display_name": "Media NAS",
                "enabled": True,
                "alias_name": None,
                "create_alias": True,
                "fail_count": 0,
                "last_attempt_at": "2026-10-19T08:15:00",
            }
        }
    )


class ObservedMountState(BaseModel):
    """What the mount provider reports for a URI right now. Never cached."""

    mounted: bool = Field(..., description="Provider reports an active mount")
    root_path: Optional[str] = Field(
        default=None, description="Local path of the mounted location"
    )


class AliasResult(BaseModel):
    """Outcome of an alias create/remove. Alias failures never fail a mount."""

    success: bool
    alias_path: Optional[str] = None
    changed: bool = Field(default=False, description="Filesystem was modified")
    error_message: Optional[str] = None


class StatusSnapshot(BaseModel):
    """Aggregated mount status published after every pass and mount change."""

    mounted_count: int = Field(..., ge=0)
    enabled_count: int = Field(..., ge=0)
    health: MountHealth
    check_interval_minutes: int = Field(..., ge=1)
    timestamp: datetime = Field(default_factory=datetime.now)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "mounted_count": 2,
                "enabled_count": 3,
                "health": "Partial",
                "check_interval_minutes": 5,
                "timestamp": "2026-10-19T08:15:00",
            }
        }
    )


class LocationView(BaseModel):
    """Read model combining a Location with its observed state and alias."""

    location: Location
    mounted: bool
    root_path: Optional[str] = None
    alias_path: Optional[str] = None
    in_flight: Optional[str] = Field(
        default=None, description="'mount' or 'unmount' while an operation runs"
    )
    retry_pending: bool = False
