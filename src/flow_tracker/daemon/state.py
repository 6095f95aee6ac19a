"""Daemon state file and PID file.

The state file is a JSON snapshot the CLI reads for ``flow daemon status``:
process metadata, the current tracking target and per-outcome tick counters.
"""

import json
import logging
import threading
import time
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import psutil  # type: ignore[import-untyped]

from flow_tracker import __version__
from flow_tracker.core.tracker import TickOutcome, TickResult

logger = logging.getLogger(__name__)


def _empty_counts() -> Dict[str, int]:
    return dict.fromkeys((outcome.value for outcome in TickOutcome), 0)


@dataclass
class DaemonState:
    """Snapshot of a running daemon."""

    started_at: str
    pid: int
    version: str = __version__

    tracking: bool = False
    active_space_id: Optional[str] = None
    last_app: Optional[str] = None
    last_tick_at: Optional[str] = None

    tick_counts: Dict[str, int] = field(default_factory=_empty_counts)
    seconds_recorded: int = 0
    notifications_sent: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DaemonState":
        """Build from a state file, dropping keys this version does not know."""
        names = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in names})


class StateManager:
    """Keeps the daemon state in memory and mirrors it to a JSON file.

    Tick results arrive once per poll, so they only reach the disk every
    ``flush_interval`` seconds. Explicit updates are written at once.
    """

    def __init__(self, state_file: Path, flush_interval: float = 5.0):
        self.state_file = state_file
        self.flush_interval = flush_interval
        self._state: Optional[DaemonState] = None
        self._lock = threading.Lock()
        self._last_flush = 0.0

    def initialize(self, pid: int) -> DaemonState:
        """Start a fresh state for the process ``pid``."""
        with self._lock:
            self._state = DaemonState(started_at=datetime.now().isoformat(), pid=pid)
            self._save()
        logger.info(f"Daemon state initialized at {self.state_file}")
        return self._state

    def load(self) -> Optional[DaemonState]:
        """Read the state file.

        Returns:
            The stored state, or None if the file is missing or unreadable
        """
        try:
            data = json.loads(self.state_file.read_text(encoding="utf-8"))
            self._state = DaemonState.from_dict(data)
        except FileNotFoundError:
            return None
        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Failed to load daemon state: {e}")
            return None
        return self._state

    def save(self) -> None:
        with self._lock:
            self._save()

    def _save(self) -> None:
        # Caller holds the lock
        if self._state is None:
            return
        temp_file = self.state_file.with_suffix(".tmp")
        try:
            self.state_file.parent.mkdir(parents=True, exist_ok=True)
            temp_file.write_text(json.dumps(self._state.to_dict(), indent=2), encoding="utf-8")
            temp_file.replace(self.state_file)
        except OSError as e:
            logger.error(f"Failed to save daemon state: {e}")
            return
        self._last_flush = time.monotonic()

    def update(self, **changes: Any) -> None:
        """Set state fields by name and write the file.

        Unknown field names are logged and skipped.
        """
        with self._lock:
            if self._state is None:
                logger.warning("Cannot update uninitialized state")
                return
            for name, value in changes.items():
                if not hasattr(self._state, name):
                    logger.warning(f"Unknown state field: {name}")
                    continue
                setattr(self._state, name, value)
            self._save()

    def record_tick(self, result: TickResult) -> None:
        """Fold one poll result into the counters."""
        with self._lock:
            state = self._state
            if state is None:
                return

            outcome = result.outcome.value
            state.tick_counts[outcome] = state.tick_counts.get(outcome, 0) + 1
            state.seconds_recorded += result.seconds
            state.last_tick_at = datetime.now().isoformat()
            state.last_app = result.app_name or state.last_app

            if time.monotonic() - self._last_flush >= self.flush_interval:
                self._save()

    def get(self) -> Optional[DaemonState]:
        with self._lock:
            return self._state

    def get_dict(self) -> Dict[str, Any]:
        """Current state as a dictionary, empty when not initialized."""
        with self._lock:
            return self._state.to_dict() if self._state is not None else {}

    def clear(self) -> None:
        """Forget the state and delete the file."""
        with self._lock:
            self._state = None
            self.state_file.unlink(missing_ok=True)
        logger.info("Daemon state cleared")


class PIDFileManager:
    """PID file of the running daemon."""

    def __init__(self, pid_file: Path):
        self.pid_file = pid_file
        self.pid_file.parent.mkdir(parents=True, exist_ok=True)

    def write(self, pid: int) -> None:
        try:
            self.pid_file.write_text(str(pid))
        except OSError as e:
            logger.error(f"Failed to write PID file: {e}")
            return
        logger.debug(f"PID {pid} written to {self.pid_file}")

    def read(self) -> Optional[int]:
        """PID stored in the file, or None if missing or garbled."""
        try:
            return int(self.pid_file.read_text().strip())
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read PID file: {e}")
            return None

    def remove(self) -> None:
        try:
            self.pid_file.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to remove PID file: {e}")

    def is_running(self) -> bool:
        """Whether the process named in the PID file exists."""
        pid = self.read()
        return pid is not None and bool(psutil.pid_exists(pid))
