"""The Flow daemon: tracking engine, IPC server and state file in one process."""

import logging
import logging.handlers
import os
import signal
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from flow_tracker.automation.notifier import TRACKING_CHANGED, Event
from flow_tracker.automation.window_probe import WindowProbe
from flow_tracker.core.config import ConfigManager
from flow_tracker.core.engine import FlowEngine
from flow_tracker.daemon.handlers import build_handlers
from flow_tracker.daemon.ipc import IPCServer
from flow_tracker.daemon.platform import (
    get_log_file_path,
    get_pid_file_path,
    get_state_file_path,
    is_daemon_supported,
)
from flow_tracker.daemon.state import PIDFileManager, StateManager

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class DaemonError(Exception):
    """Daemon-related error."""

    pass


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None, console: bool = True) -> None:
    """Send records from every logger to the log file and, optionally, stderr.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR)
        log_file: File to append to; rotated at 1 MB, three backups kept
        console: Also log to stderr
    """
    handlers: list[logging.Handler] = []
    if log_file is not None:
        handlers.append(
            logging.handlers.RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=3)
        )
    if console:
        handlers.append(logging.StreamHandler())

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in handlers:
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(handler)


def daemonize() -> None:
    """Detach from the terminal with the Unix double fork.

    Only the grandchild returns; stdio is redirected to /dev/null.
    """
    try:
        if os.fork() > 0:
            os._exit(0)
        os.chdir("/")
        os.setsid()
        os.umask(0o022)
        if os.fork() > 0:
            os._exit(0)
    except OSError as e:
        raise DaemonError(f"Failed to daemonize: {e}")

    sys.stdout.flush()
    sys.stderr.flush()
    with open(os.devnull, "rb") as devnull_in, open(os.devnull, "ab") as devnull_out:
        os.dup2(devnull_in.fileno(), sys.stdin.fileno())
        os.dup2(devnull_out.fileno(), sys.stdout.fileno())
        os.dup2(devnull_out.fileno(), sys.stderr.fileno())


class FlowDaemon:
    """Runs the polling loop in the background and serves the CLI over IPC.

    Besides every tracking command, the IPC interface answers ``ping``,
    ``status`` and ``stop``. The state file mirrors the tracking target and
    counts tick outcomes for ``flow daemon status -v``.
    """

    def __init__(
        self,
        config: Optional[ConfigManager] = None,
        data_dir: Optional[Path] = None,
        socket_path: Optional[Path] = None,
        probe: Optional[WindowProbe] = None,
    ):
        """Initialize daemon.

        Args:
            config: Configuration manager (default: load from default location)
            data_dir: Data directory (default: from config)
            socket_path: IPC socket path (default: platform-specific)
            probe: Focused-window query (default: platform probe)

        Raises:
            DaemonError: If daemon is not supported on this platform
        """
        supported, reason = is_daemon_supported()
        if not supported:
            raise DaemonError(reason)

        self.config = config or ConfigManager()
        self.state_manager = StateManager(get_state_file_path())
        self.pid_manager = PIDFileManager(get_pid_file_path())
        self.ipc_server = IPCServer(socket_path)
        self.engine = FlowEngine(
            self.config, data_dir=data_dir, probe=probe, on_tick=self.state_manager.record_tick
        )
        self.engine.notifier.subscribe(self._on_event)

        self.running = False
        self._stopped = threading.Event()
        self._stop_lock = threading.Lock()

    def start(self, foreground: bool = False) -> None:
        """Start the daemon and block until it is stopped.

        Args:
            foreground: Stay attached to the terminal and log to stderr

        Raises:
            DaemonError: If daemon is already running or fails to start
        """
        if self.pid_manager.is_running():
            raise DaemonError("Daemon is already running")

        if not foreground:
            daemonize()

        setup_logging(
            self.config.get("advanced.log_level", "INFO"),
            log_file=get_log_file_path(),
            console=foreground,
        )
        pid = os.getpid()
        logger.info(f"Starting Flow daemon (PID: {pid})")

        self.pid_manager.write(pid)
        self.state_manager.initialize(pid)
        for signum in (signal.SIGTERM, signal.SIGINT):
            signal.signal(signum, self._signal_handler)

        for method, handler in self._ipc_handlers().items():
            self.ipc_server.register_handler(method, handler)
        try:
            self.ipc_server.start()
        except OSError as e:
            logger.error(f"Failed to start IPC server: {e}")
            self.cleanup()
            raise DaemonError(f"Failed to start IPC server: {e}")

        self.engine.start()
        self.running = True
        self._sync_tracking_state()
        logger.info("Daemon started")

        self._stopped.wait()

    def stop(self) -> None:
        """Stop the engine and the IPC server, then release ``start``."""
        with self._stop_lock:
            if self._stopped.is_set():
                return
            logger.info("Stopping daemon...")
            self.running = False
            self.ipc_server.stop()
            self.engine.stop()
            self.cleanup()
            self._stopped.set()
        logger.info("Daemon stopped")

    def cleanup(self) -> None:
        """Remove the PID file and the state file."""
        self.pid_manager.remove()
        self.state_manager.clear()

    def _stop_in_background(self) -> None:
        # stop() joins threads that may be the caller's own
        threading.Thread(target=self.stop, daemon=True).start()

    def _signal_handler(self, signum: int, frame: Any) -> None:
        logger.info(f"Received signal {signum}, shutting down...")
        self._stop_in_background()

    def _on_event(self, event: Event) -> None:
        if event.name == TRACKING_CHANGED:
            self._sync_tracking_state()

    def _sync_tracking_state(self) -> None:
        """Copy the coordinator's target into the state file."""
        snapshot = self.engine.coordinator.snapshot()
        self.state_manager.update(
            tracking=snapshot.is_tracking,
            active_space_id=snapshot.active_space_id,
            notifications_sent=self.engine.notifier.sent,
        )

    def _ipc_handlers(self) -> Dict[str, Any]:
        handlers: Dict[str, Any] = dict(build_handlers(self.engine.commands))
        handlers.update(ping=self._handle_ping, status=self._handle_status, stop=self._handle_stop)
        return handlers

    def _handle_ping(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"pong": True, "timestamp": datetime.now().isoformat()}

    def _handle_status(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "running": self.running,
            "storeFile": str(self.engine.store.store_file),
            "session": self.engine.commands.get_current_session_info(),
            "state": self.state_manager.get_dict(),
        }

    def _handle_stop(self, params: Dict[str, Any]) -> Dict[str, Any]:
        self._stop_in_background()
        return {"stopping": True}
