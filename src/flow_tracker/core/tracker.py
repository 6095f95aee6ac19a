"""Polling loop that turns focused-app samples into time entries."""

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from flow_tracker.automation.window_probe import ProbeError, WindowProbe
from flow_tracker.core.coordinator import TrackingCoordinator
from flow_tracker.core.models import format_day
from flow_tracker.core.storage import StateStore

logger = logging.getLogger(__name__)


class TickOutcome(Enum):
    """What a single tick did."""

    IDLE = "idle"
    SPACE_MISSING = "space_missing"
    NO_SIGNAL = "no_signal"
    UNTRACKED = "untracked"
    BASELINE = "baseline"
    RECORDED = "recorded"
    STALE = "stale"
    ERROR = "error"


@dataclass(frozen=True)
class TickResult:
    """Outcome of a tick and the time it committed."""

    outcome: TickOutcome
    app_name: Optional[str] = None
    seconds: int = 0


class ActivityTracker:
    """Sample the focused application and accumulate time for the active space."""

    def __init__(
        self,
        store: StateStore,
        coordinator: TrackingCoordinator,
        probe: WindowProbe,
        interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        today: Callable[[], str] = format_day,
        on_tick: Optional[Callable[[TickResult], None]] = None,
    ):
        """Initialize the tracker.

        Args:
            store: Store holding the application document
            coordinator: Shared tracking state
            probe: Focused-window query
            interval: Seconds between ticks
            clock: Monotonic clock used for elapsed time
            today: Returns the current local day as YYYY-MM-DD
            on_tick: Called with the result of every tick
        """
        self.store = store
        self.coordinator = coordinator
        self.probe = probe
        self.interval = interval
        self.clock = clock
        self.today = today
        self.on_tick = on_tick

    def tick(self, now: Optional[float] = None) -> TickResult:
        """Run one polling iteration.

        Args:
            now: Observation time (monotonic seconds). Defaults to the clock

        Returns:
            Result of the tick
        """
        snapshot = self.coordinator.snapshot()
        space_id = snapshot.active_space_id
        if space_id is None:
            return TickResult(TickOutcome.IDLE)

        # Reloaded every tick so edits from commands are seen immediately
        space = self.store.load().get_space(space_id)
        if space is None:
            return TickResult(TickOutcome.SPACE_MISSING)

        try:
            app = self.probe.get_active_window()
        except ProbeError:
            return TickResult(TickOutcome.NO_SIGNAL)

        if not space.tracks(app.name):
            return TickResult(TickOutcome.UNTRACKED, app.name)

        if now is None:
            now = self.clock()
        elapsed = self.coordinator.observe(space_id, app.name, now)
        if elapsed is None:
            return TickResult(TickOutcome.STALE, app.name)
        if elapsed == 0:
            return TickResult(TickOutcome.BASELINE, app.name)

        if not self.record_time(space_id, app.name, elapsed):
            return TickResult(TickOutcome.SPACE_MISSING, app.name)
        return TickResult(TickOutcome.RECORDED, app.name, elapsed)

    def record_time(self, space_id: str, app_name: str, seconds: int) -> bool:
        """Add seconds to today's entry for (space, app).

        Args:
            space_id: Space to credit
            app_name: Focused application
            seconds: Seconds to add

        Returns:
            False if the space was deleted meanwhile and nothing was written
        """
        if seconds <= 0:
            return True

        day = self.today()
        with self.store.transaction() as state:
            if state.get_space(space_id) is None:
                return False
            entry = state.add_duration(space_id, app_name, day, seconds)

        logger.debug(f"Recorded {seconds}s for {app_name} in {space_id} ({entry.duration}s today)")
        return True

    def run(self, stop_event: threading.Event) -> None:
        """Tick every interval until ``stop_event`` is set.

        Errors never end the loop; the failing tick is forfeited.

        Note:
            This is a blocking call. Run in a separate thread for background tracking.
        """
        logger.info(f"Tracking loop started (interval {self.interval}s)")
        while not stop_event.wait(self.interval):
            try:
                result = self.tick()
            except Exception as e:
                logger.error(f"Tick failed: {e}")
                result = TickResult(TickOutcome.ERROR)

            logger.debug(f"Tick: {result.outcome.value} {result.app_name or ''}".rstrip())
            if self.on_tick:
                try:
                    self.on_tick(result)
                except Exception as e:
                    logger.warning(f"Tick callback failed: {e}")
        logger.info("Tracking loop stopped")
