"""API endpoints.

This package contains all API endpoint routers organized by resource type.
Each module defines a FastAPI router that is included in the main application.

Available routers:
- system: Health checks and engine status
- apps: Focused application
- spaces: Space management and toggling
- tracking: Stop, live session and tray menu
- entries: Time entries and today's stats
- settings: User settings
- analytics: Totals over a day, week or month
"""

__all__ = ["analytics", "apps", "entries", "settings", "spaces", "system", "tracking"]

from flow_tracker.api.endpoints import (  # noqa: F401
    analytics,
    apps,
    entries,
    settings,
    spaces,
    system,
    tracking,
)
