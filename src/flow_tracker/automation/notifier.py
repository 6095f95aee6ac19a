"""One-way event sink towards the presentation layer."""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

TRACKING_CHANGED = "tracking-changed"
MENU_UPDATED = "menu-updated"
MENU_ACTION = "menu-action"


@dataclass(frozen=True)
class Event:
    """Notification emitted by the engine."""

    name: str
    payload: dict[str, Any] = field(default_factory=dict)


Listener = Callable[[Event], None]


class Notifier:
    """Fire-and-forget event sink.

    Listeners are called synchronously; a failing listener is logged and
    never affects the caller. Desktop notifications for tracking changes
    are sent through plyer when enabled.
    """

    def __init__(self, desktop: bool = False, backend: str = "auto"):
        """Initialize notifier.

        Args:
            desktop: Whether to show desktop notifications
            backend: Notification backend ('auto', 'plyer')
        """
        self.desktop = desktop
        self.backend = backend
        self.sent = 0
        self._listeners: list[Listener] = []
        self._lock = threading.Lock()
        self._desktop_notifier = self._init_desktop_notifier()

    def _init_desktop_notifier(self) -> Any:
        """Initialize platform-specific notifier.

        Returns:
            Notification handler or None if not available
        """
        if not self.desktop:
            return None

        try:
            from plyer import notification  # type: ignore[import-not-found]

            return notification
        except ImportError:
            logger.warning("plyer is not installed, desktop notifications disabled")
            return None

    def subscribe(self, listener: Listener) -> None:
        """Register a listener for all events."""
        with self._lock:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        """Remove a listener; unknown listeners are ignored."""
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def notify(self, event: Event) -> None:
        """Deliver an event to every listener."""
        with self._lock:
            listeners = list(self._listeners)

        logger.debug(f"Event {event.name}: {event.payload}")
        for listener in listeners:
            try:
                listener(event)
            except Exception as e:
                logger.warning(f"Listener failed for {event.name}: {e}")

        if event.name == TRACKING_CHANGED:
            self._show_tracking_change(event)

    def tracking_changed(self, space_id: Optional[str], active: bool, space_name: str = "") -> None:
        """Emit a tracking-changed event.

        Args:
            space_id: Space the change concerns (None for stop-all)
            active: Resulting tracking flag
            space_name: Display name for the desktop notification
        """
        self.notify(
            Event(
                TRACKING_CHANGED,
                {"spaceId": space_id, "active": active, "spaceName": space_name},
            )
        )

    def _show_tracking_change(self, event: Event) -> None:
        """Show a desktop notification for a tracking change."""
        if not self._desktop_notifier:
            return

        name = event.payload.get("spaceName") or "space"
        message = f"Tracking {name}" if event.payload.get("active") else "Tracking stopped"
        try:
            self._desktop_notifier.notify(title="Flow", message=message, app_name="Flow", timeout=5)
            self.sent += 1
        except Exception as e:
            # Notifications are non-critical
            logger.debug(f"Desktop notification failed: {e}")
