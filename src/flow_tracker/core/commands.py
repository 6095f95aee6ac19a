"""Commands invoked by the interactive layer (tray, CLI, RPC clients)."""

import logging
import threading
from collections import defaultdict
from typing import Any, Callable, Optional

from flow_tracker.automation.notifier import MENU_ACTION, MENU_UPDATED, Event, Notifier
from flow_tracker.automation.window_probe import WindowProbe
from flow_tracker.core.coordinator import TrackingCoordinator
from flow_tracker.core.menu import MenuItem, build_tray_menu, space_id_from_item
from flow_tracker.core.models import (
    SPACE_COLORS,
    AppSettings,
    RunningApp,
    TimeEntry,
    TrackingSpace,
    format_day,
)
from flow_tracker.core.storage import StateStore

logger = logging.getLogger(__name__)


class TrackingCommands:
    """Short transactions over the stored document and the coordinator.

    Each command loads the document fresh, mutates it, saves it, then
    refreshes the tray menu and updates the coordinator where relevant.
    Commands that change which space is active hold a lock until the
    coordinator matches the saved document.
    """

    def __init__(
        self,
        store: StateStore,
        coordinator: TrackingCoordinator,
        notifier: Optional[Notifier] = None,
        probe: Optional[WindowProbe] = None,
        deactivate_on_delete: bool = True,
        today: Callable[[], str] = format_day,
    ):
        """Initialize commands.

        Args:
            store: Store holding the application document
            coordinator: Shared tracking state
            notifier: Event sink for menu and tracking changes
            probe: Focused-window query
            deactivate_on_delete: Stop tracking when the active space is deleted
            today: Returns the current local day as YYYY-MM-DD
        """
        self.store = store
        self.coordinator = coordinator
        self.notifier = notifier or Notifier()
        self.probe = probe or WindowProbe()
        self.deactivate_on_delete = deactivate_on_delete
        self.today = today
        self._lock = threading.RLock()

    # Focused application

    def get_running_apps(self) -> list[RunningApp]:
        """Focused application as a list (empty if none)."""
        return self.probe.get_running_apps()

    def get_active_window_info(self) -> Optional[RunningApp]:
        """Focused application, or None."""
        return self.probe.get_active_window_info()

    # Spaces

    def get_spaces(self) -> list[TrackingSpace]:
        """List all spaces."""
        return self.store.load().spaces

    def save_space(self, space: TrackingSpace) -> list[TrackingSpace]:
        """Replace a space by id, or append it if the id is unknown.

        The active flag is owned by toggle/stop: an existing space keeps its
        stored flag and a new space is stored inactive.

        Args:
            space: Space to store

        Returns:
            All spaces after the change
        """
        with self._lock:
            with self.store.transaction() as state:
                existing = state.get_space(space.id)
                stored = TrackingSpace(
                    id=space.id,
                    name=space.name,
                    apps=list(space.apps),
                    is_active=existing.is_active if existing else False,
                    color=space.color,
                )
                if existing:
                    state.spaces[state.spaces.index(existing)] = stored
                else:
                    state.spaces.append(stored)
                spaces = state.spaces

        logger.info(f"Saved space {space.name} ({space.id})")
        self._refresh_menu(spaces)
        return spaces

    def create_space(self, name: str, color: Optional[str] = None) -> TrackingSpace:
        """Create an empty, inactive space.

        Args:
            name: Display name
            color: Display color. Defaults to the next palette color

        Returns:
            The created space
        """
        with self._lock:
            with self.store.transaction() as state:
                if color is None:
                    color = SPACE_COLORS[len(state.spaces) % len(SPACE_COLORS)]
                space = TrackingSpace(name=name, color=color)
                state.spaces.append(space)
                spaces = state.spaces

        logger.info(f"Created space {name} ({space.id})")
        self._refresh_menu(spaces)
        return space

    def delete_space(self, space_id: str) -> list[TrackingSpace]:
        """Delete a space and all of its entries.

        Unknown ids are a no-op. If the space was being tracked and
        ``deactivate_on_delete`` is set, tracking stops.

        Args:
            space_id: Space to delete

        Returns:
            Remaining spaces
        """
        with self._lock:
            with self.store.transaction() as state:
                removed = state.get_space(space_id)
                state.spaces = [s for s in state.spaces if s.id != space_id]
                before = len(state.entries)
                state.entries = [e for e in state.entries if e.space_id != space_id]
                dropped = before - len(state.entries)
                spaces = state.spaces

            if removed is None:
                logger.debug(f"Delete of unknown space {space_id} ignored")
            else:
                logger.info(f"Deleted space {removed.name} ({space_id}) and {dropped} entries")

            self._refresh_menu(spaces)

            if self.deactivate_on_delete and self.coordinator.deactivate_if(space_id):
                self.notifier.tracking_changed(space_id, False)

        return spaces

    # Tracking

    def toggle_tracking(self, space_id: str) -> bool:
        """Flip a space's active flag, deactivating every other space.

        Args:
            space_id: Space to toggle. An unknown id leaves every space inactive

        Returns:
            Whether the space is now active
        """
        with self._lock:
            is_now_active = False
            name = ""
            with self.store.transaction() as state:
                for space in state.spaces:
                    if space.id == space_id:
                        space.is_active = not space.is_active
                        is_now_active = space.is_active
                        name = space.name
                    else:
                        space.is_active = False
                spaces = state.spaces

            self._refresh_menu(spaces)

            if is_now_active:
                self.coordinator.activate(space_id)
            else:
                self.coordinator.deactivate_all()

            self.notifier.tracking_changed(space_id, is_now_active, name)

        return is_now_active

    def stop_all_tracking(self) -> None:
        """Mark every space inactive and stop tracking."""
        with self._lock:
            with self.store.transaction() as state:
                for space in state.spaces:
                    space.is_active = False
                spaces = state.spaces

            self._refresh_menu(spaces)
            self.coordinator.deactivate_all()
            self.notifier.tracking_changed(None, False)

    def restore_tracking(self) -> Optional[str]:
        """Point the coordinator at the space the document marks active.

        Used at start-up, when the coordinator is empty but the document may
        still say a space is being tracked.

        Returns:
            The restored space id, or None
        """
        with self._lock:
            state = self.store.load()
            space = state.active_space
            if space is None:
                self.coordinator.deactivate_all()
                return None
            self.coordinator.activate(space.id)

        logger.info(f"Restored tracking for {space.name} ({space.id})")
        self._refresh_menu(state.spaces)
        return space.id

    def get_current_session_info(self) -> dict[str, Any]:
        """Live session timer for the presentation layer."""
        snapshot = self.coordinator.snapshot()
        return {
            "spaceId": snapshot.active_space_id,
            "sessionDuration": self.coordinator.session_seconds(),
            "isTracking": snapshot.is_tracking,
        }

    # Entries and statistics

    def get_time_entries(
        self,
        space_id: Optional[str] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
    ) -> list[TimeEntry]:
        """Get entries matching every given filter.

        Args:
            space_id: Only entries of this space
            date_from: Only entries on or after this day (YYYY-MM-DD)
            date_to: Only entries on or before this day (YYYY-MM-DD)

        Returns:
            Filtered list of entries
        """
        filtered = []
        for entry in self.store.load().entries:
            if space_id is not None and entry.space_id != space_id:
                continue

            # YYYY-MM-DD compares chronologically as a string
            if date_from is not None and entry.date < date_from:
                continue
            if date_to is not None and entry.date > date_to:
                continue

            filtered.append(entry)

        return filtered

    def get_today_stats(self) -> dict[str, int]:
        """Seconds per app today, summed across spaces."""
        today = self.today()
        stats: dict[str, int] = defaultdict(int)
        for entry in self.store.load().entries:
            if entry.date == today:
                stats[entry.app_name] += entry.duration
        return dict(stats)

    # Settings

    def get_settings(self) -> AppSettings:
        return self.store.load().settings

    def save_settings(self, settings: AppSettings) -> AppSettings:
        """Replace the stored settings."""
        with self.store.transaction() as state:
            state.settings = settings
        return settings

    # Tray menu

    def get_tray_menu(self) -> list[MenuItem]:
        """Current tray menu representation."""
        return build_tray_menu(self.get_spaces())

    def handle_menu_click(self, item_id: str) -> Optional[bool]:
        """Handle a tray menu click.

        Space items toggle tracking; other items are forwarded to the
        presentation layer as menu-action events.

        Args:
            item_id: Id of the clicked item

        Returns:
            Resulting tracking flag for space items, otherwise None
        """
        space_id = space_id_from_item(item_id)
        if space_id is not None:
            return self.toggle_tracking(space_id)

        self.notifier.notify(Event(MENU_ACTION, {"itemId": item_id}))
        return None

    def _refresh_menu(self, spaces: list[TrackingSpace]) -> None:
        """Publish the rebuilt tray menu."""
        menu = build_tray_menu(spaces)
        self.notifier.notify(Event(MENU_UPDATED, {"menu": [item.to_dict() for item in menu]}))
