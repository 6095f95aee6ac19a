"""Wiring of store, coordinator, polling loop and commands."""

import logging
import threading
from pathlib import Path
from typing import Callable, Optional

from flow_tracker.automation.notifier import Notifier
from flow_tracker.automation.window_probe import WindowProbe
from flow_tracker.core.commands import TrackingCommands
from flow_tracker.core.config import ConfigManager
from flow_tracker.core.coordinator import TrackingCoordinator
from flow_tracker.core.storage import StateStore
from flow_tracker.core.tracker import ActivityTracker, TickResult

logger = logging.getLogger(__name__)


class FlowEngine:
    """One tracking engine: a polling thread plus the commands that steer it."""

    def __init__(
        self,
        config: Optional[ConfigManager] = None,
        data_dir: Optional[Path] = None,
        probe: Optional[WindowProbe] = None,
        notifier: Optional[Notifier] = None,
        on_tick: Optional[Callable[[TickResult], None]] = None,
    ):
        """Initialize engine components.

        Args:
            config: Configuration manager (default: load from default location)
            data_dir: Data directory (default: from config)
            probe: Focused-window query (default: platform probe)
            notifier: Event sink (default: from notification config)
            on_tick: Called with the result of every tick
        """
        self.config = config or ConfigManager()
        self.data_dir = data_dir or self.config.data_dir

        self.store = StateStore(self.data_dir, self.config.get("general.store_file", "store.json"))
        self.coordinator = TrackingCoordinator()
        self.probe = probe or WindowProbe()
        self.notifier = notifier or Notifier(
            desktop=self.config.get("notifications.enabled", False),
            backend=self.config.get("notifications.backend", "auto"),
        )
        self.commands = TrackingCommands(
            self.store,
            self.coordinator,
            notifier=self.notifier,
            probe=self.probe,
            deactivate_on_delete=self.config.get("tracking.deactivate_on_delete", True),
        )
        self.tracker = ActivityTracker(
            self.store,
            self.coordinator,
            self.probe,
            interval=float(self.config.get("tracking.poll_interval", 1)),
            on_tick=on_tick,
        )

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the polling thread."""
        if self.running:
            logger.warning("Engine already running")
            return

        if self.config.get("advanced.backup_on_start", True):
            backup = self.store.backup()
            if backup:
                logger.info(f"Store backed up to {backup}")

        if self.config.get("tracking.restore_on_start", True):
            self.commands.restore_tracking()

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.tracker.run, args=(self._stop_event,), name="flow-tracker", daemon=True
        )
        self._thread.start()
        logger.info(f"Engine started (store: {self.store.store_file})")

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the polling thread."""
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=timeout)
            self._thread = None
        logger.info("Engine stopped")
