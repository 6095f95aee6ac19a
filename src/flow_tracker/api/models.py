"""Pydantic models for RPC and HTTP requests and responses.

Field names are snake_case in Python and camelCase on the wire, matching
the persisted document. Both spellings are accepted on input.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field  # type: ignore[import-untyped]

from flow_tracker.core.models import (
    SPACE_COLORS,
    AppSettings,
    RunningApp,
    TimeEntry,
    TrackingSpace,
)

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


class WireModel(BaseModel):
    """Base model using camelCase aliases."""

    model_config = ConfigDict(populate_by_name=True)


# ============================================================================
# Domain payloads
# ============================================================================


class SpacePayload(WireModel):
    """A tracking space."""

    id: str
    name: str
    apps: list[str] = Field(default_factory=list)
    is_active: bool = Field(False, alias="isActive")
    color: str = SPACE_COLORS[0]

    @classmethod
    def from_space(cls, space: TrackingSpace) -> "SpacePayload":
        return cls(
            id=space.id,
            name=space.name,
            apps=list(space.apps),
            is_active=space.is_active,
            color=space.color,
        )

    def to_space(self) -> TrackingSpace:
        return TrackingSpace(
            id=self.id,
            name=self.name,
            apps=list(self.apps),
            is_active=self.is_active,
            color=self.color,
        )


class TimeEntryPayload(WireModel):
    """Accumulated time for one space, app and day."""

    space_id: str = Field(alias="spaceId")
    app_name: str = Field(alias="appName")
    date: str
    duration: int

    @classmethod
    def from_entry(cls, entry: TimeEntry) -> "TimeEntryPayload":
        return cls(
            space_id=entry.space_id,
            app_name=entry.app_name,
            date=entry.date,
            duration=entry.duration,
        )


class SettingsPayload(WireModel):
    """User settings."""

    enable_dnd: bool = Field(False, alias="enableDND")
    muted_apps: list[str] = Field(default_factory=list, alias="mutedApps")

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "SettingsPayload":
        return cls(enable_dnd=settings.enable_dnd, muted_apps=list(settings.muted_apps))

    def to_settings(self) -> AppSettings:
        return AppSettings(enable_dnd=self.enable_dnd, muted_apps=list(self.muted_apps))


class RunningAppPayload(WireModel):
    """Focused application."""

    name: str
    process_id: int = Field(alias="processId")

    @classmethod
    def from_app(cls, app: RunningApp) -> "RunningAppPayload":
        return cls(name=app.name, process_id=app.process_id)


class MenuItemPayload(WireModel):
    """Tray menu entry."""

    id: str
    label: str = ""
    checkable: bool = False
    checked: bool = False


class SessionInfo(WireModel):
    """Live tracking session."""

    space_id: Optional[str] = Field(None, alias="spaceId")
    session_duration: int = Field(0, alias="sessionDuration")
    is_tracking: bool = Field(False, alias="isTracking")


# ============================================================================
# Requests
# ============================================================================


class CreateSpaceRequest(WireModel):
    """Create a space."""

    name: str = Field(..., min_length=1, max_length=200)
    color: Optional[str] = Field(None, pattern=r"^#[0-9a-fA-F]{6}$")


class SaveSpaceRequest(WireModel):
    """Upsert a space."""

    space: SpacePayload


class SpaceIdRequest(WireModel):
    """Request naming one space."""

    space_id: str = Field(..., alias="spaceId", min_length=1)


class TimeEntriesQuery(WireModel):
    """Filters for time entries; absent filters match everything."""

    space_id: Optional[str] = Field(None, alias="spaceId")
    date_from: Optional[str] = Field(None, alias="dateFrom", pattern=DATE_PATTERN)
    date_to: Optional[str] = Field(None, alias="dateTo", pattern=DATE_PATTERN)


class SaveSettingsRequest(WireModel):
    """Replace settings."""

    settings: SettingsPayload


class MenuClickRequest(WireModel):
    """Tray menu click."""

    item_id: str = Field(..., alias="itemId", min_length=1)


# ============================================================================
# System and analytics
# ============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    version: str


class StatusResponse(WireModel):
    """Engine status."""

    version: str
    tracking: bool
    active_space_id: Optional[str] = Field(None, alias="activeSpaceId")
    spaces: int
    entries: int
    store_file: str = Field(alias="storeFile")


class DurationRow(BaseModel):
    """Named duration."""

    name: str
    duration: int


class AnalyticsResponse(WireModel):
    """Totals for a date range."""

    range: str
    date_from: str = Field(alias="dateFrom")
    date_to: str = Field(alias="dateTo")
    total: int
    by_app: list[DurationRow] = Field(alias="byApp")
    by_date: list[DurationRow] = Field(alias="byDate")
    by_space: list[DurationRow] = Field(alias="bySpace")


class ErrorResponse(BaseModel):
    """Error response."""

    detail: str


class ToggleResponse(WireModel):
    """Result of toggling a space."""

    space_id: str = Field(alias="spaceId")
    is_active: bool = Field(alias="isActive")
