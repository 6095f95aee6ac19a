"""Core data models for space tracking.

The persisted shape uses the camelCase keys of the original store document
(``isActive``, ``spaceId``, ``appName``...), so existing ``store.json`` files
stay readable.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional
from uuid import uuid4

SPACE_COLORS = (
    "#3b82f6",
    "#8b5cf6",
    "#ec4899",
    "#f97316",
    "#22c55e",
    "#06b6d4",
    "#eab308",
    "#ef4444",
)

DATE_FORMAT = "%Y-%m-%d"


def format_day(day: Optional[date] = None) -> str:
    """Format a calendar day (local time) as YYYY-MM-DD.

    Args:
        day: Day to format. Defaults to today in the local timezone.

    Returns:
        Date string
    """
    if day is None:
        day = datetime.now().date()
    return day.strftime(DATE_FORMAT)


@dataclass
class TrackingSpace:
    """User-defined bucket of applications to track.

    Attributes:
        id: Unique identifier, assigned at creation
        name: Display label
        apps: App-name patterns matched against the focused application
        is_active: Whether this space is currently being tracked
        color: Display color (hex), no effect on tracking
    """

    name: str
    id: str = field(default_factory=lambda: str(uuid4()))
    apps: list[str] = field(default_factory=list)
    is_active: bool = False
    color: str = SPACE_COLORS[0]

    def tracks(self, app_name: str) -> bool:
        """Check if an observed application belongs to this space.

        A pattern matches when either string contains the other, ignoring
        case, so both "chrome" and "Google Chrome Canary" match an observed
        "Google Chrome" / "chrome" respectively.

        Args:
            app_name: Name of the focused application

        Returns:
            True if any pattern matches
        """
        observed = app_name.lower()
        for pattern in self.apps:
            wanted = pattern.lower()
            if wanted in observed or observed in wanted:
                return True
        return False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "apps": list(self.apps),
            "isActive": self.is_active,
            "color": self.color,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TrackingSpace":
        """Create TrackingSpace from dictionary (JSON deserialization)."""
        return cls(
            id=str(data["id"]),
            name=data["name"],
            apps=[str(a) for a in data.get("apps") or []],
            is_active=bool(data.get("isActive", False)),
            color=data.get("color") or SPACE_COLORS[0],
        )


@dataclass
class TimeEntry:
    """Accumulated seconds for one (space, app, day).

    Attributes:
        space_id: Owning space
        app_name: Observed application name
        date: Local calendar day, YYYY-MM-DD
        duration: Accumulated seconds, never decremented
    """

    space_id: str
    app_name: str
    date: str
    duration: int = 0

    @property
    def key(self) -> tuple[str, str, str]:
        """Identity of this entry."""
        return (self.space_id, self.app_name, self.date)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "spaceId": self.space_id,
            "appName": self.app_name,
            "date": self.date,
            "duration": self.duration,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TimeEntry":
        """Create TimeEntry from dictionary (JSON deserialization)."""
        return cls(
            space_id=str(data["spaceId"]),
            app_name=data["appName"],
            date=data["date"],
            duration=max(0, int(data.get("duration", 0))),
        )


@dataclass
class AppSettings:
    """User settings stored with the application state.

    Attributes:
        enable_dnd: Do-not-disturb while tracking
        muted_apps: Applications whose notifications are muted
    """

    enable_dnd: bool = False
    muted_apps: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"enableDND": self.enable_dnd, "mutedApps": list(self.muted_apps)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AppSettings":
        """Create AppSettings from dictionary (JSON deserialization)."""
        return cls(
            enable_dnd=bool(data.get("enableDND", False)),
            muted_apps=[str(a) for a in data.get("mutedApps") or []],
        )


@dataclass
class AppState:
    """The persisted application document."""

    spaces: list[TrackingSpace] = field(default_factory=list)
    entries: list[TimeEntry] = field(default_factory=list)
    settings: AppSettings = field(default_factory=AppSettings)

    def get_space(self, space_id: str) -> Optional[TrackingSpace]:
        """Find a space by id."""
        for space in self.spaces:
            if space.id == space_id:
                return space
        return None

    @property
    def active_space(self) -> Optional[TrackingSpace]:
        """First space flagged active, if any."""
        for space in self.spaces:
            if space.is_active:
                return space
        return None

    def add_duration(self, space_id: str, app_name: str, day: str, seconds: int) -> TimeEntry:
        """Add seconds to the entry for (space, app, day), creating it if needed.

        Args:
            space_id: Space the time belongs to
            app_name: Observed application name
            day: Calendar day, YYYY-MM-DD
            seconds: Seconds to add (must be positive)

        Returns:
            The updated or created entry

        Raises:
            ValueError: If seconds is not positive
        """
        if seconds <= 0:
            raise ValueError("seconds must be positive")

        for entry in self.entries:
            if entry.key == (space_id, app_name, day):
                entry.duration += seconds
                return entry

        entry = TimeEntry(space_id=space_id, app_name=app_name, date=day, duration=seconds)
        self.entries.append(entry)
        return entry

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "spaces": [s.to_dict() for s in self.spaces],
            "entries": [e.to_dict() for e in self.entries],
            "settings": self.settings.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AppState":
        """Create AppState from dictionary (JSON deserialization)."""
        return cls(
            spaces=[TrackingSpace.from_dict(s) for s in data.get("spaces") or []],
            entries=[TimeEntry.from_dict(e) for e in data.get("entries") or []],
            settings=AppSettings.from_dict(data.get("settings") or {}),
        )


@dataclass(frozen=True)
class RunningApp:
    """Identity of the focused application."""

    name: str
    process_id: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"name": self.name, "processId": self.process_id}
