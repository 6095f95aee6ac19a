"""Shared runtime state of the space being tracked."""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrackingSnapshot:
    """Consistent copy of the coordinator fields."""

    active_space_id: Optional[str] = None
    last_app: Optional[str] = None
    last_check: Optional[float] = None
    activated_at: Optional[float] = None

    @property
    def is_tracking(self) -> bool:
        """Whether a space is active."""
        return self.active_space_id is not None


class TrackingCoordinator:
    """Which space, if any, is being measured right now.

    All fields change together under one lock and are only handed out as a
    ``TrackingSnapshot``. Times are monotonic seconds from ``clock``.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._lock = threading.Lock()
        self._state = TrackingSnapshot()

    def activate(self, space_id: str, now: Optional[float] = None) -> None:
        """Start measuring a space, discarding any previous baseline.

        Args:
            space_id: Space now active in the persisted document
            now: Activation time. Defaults to the clock
        """
        if now is None:
            now = self._clock()
        with self._lock:
            self._state = TrackingSnapshot(
                active_space_id=space_id,
                last_app=None,
                last_check=now,
                activated_at=now,
            )
        logger.info(f"Tracking activated for space {space_id}")

    def deactivate_all(self) -> None:
        """Stop measuring."""
        with self._lock:
            previous = self._state.active_space_id
            self._state = TrackingSnapshot()
        if previous is not None:
            logger.info(f"Tracking deactivated (was {previous})")

    def deactivate_if(self, space_id: str) -> bool:
        """Stop measuring only if ``space_id`` is the active space.

        Returns:
            True if tracking was stopped
        """
        with self._lock:
            if self._state.active_space_id != space_id:
                return False
            self._state = TrackingSnapshot()
        logger.info(f"Tracking deactivated for removed space {space_id}")
        return True

    def snapshot(self) -> TrackingSnapshot:
        """Read all fields atomically."""
        with self._lock:
            return self._state

    def observe(self, space_id: str, app_name: str, now: Optional[float] = None) -> Optional[int]:
        """Record that a tracked app was focused and work out what to commit.

        Time is only owed when the same app was observed on the previous
        tracked tick; the first observation after activation or after a
        focus switch only sets the baseline.

        Args:
            space_id: Space the caller sampled as active
            app_name: Focused application, already matched against the space
            now: Observation time. Defaults to the clock

        Returns:
            Whole seconds to commit (0 for a baseline), or None if the space
            is no longer the active one and the observation was discarded
        """
        if now is None:
            now = self._clock()
        with self._lock:
            state = self._state
            if state.active_space_id != space_id:
                return None

            elapsed = 0
            if state.last_check is not None and state.last_app == app_name:
                elapsed = max(0, int(now - state.last_check))

            self._state = TrackingSnapshot(
                active_space_id=space_id,
                last_app=app_name,
                last_check=now,
                activated_at=state.activated_at,
            )
            return elapsed

    def session_seconds(self, now: Optional[float] = None) -> int:
        """Seconds since the active space was activated (0 when idle)."""
        if now is None:
            now = self._clock()
        state = self.snapshot()
        if state.activated_at is None:
            return 0
        return max(0, int(now - state.activated_at))
