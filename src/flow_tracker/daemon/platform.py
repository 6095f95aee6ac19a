"""Platform-specific utilities for daemon operations."""

import os
import platform
from enum import Enum
from pathlib import Path
from typing import Tuple


class Platform(Enum):
    """Supported platforms."""

    LINUX = "linux"
    MACOS = "darwin"
    WINDOWS = "windows"
    UNKNOWN = "unknown"


def get_platform() -> Platform:
    """Detect the current platform."""
    try:
        return Platform(platform.system().lower())
    except ValueError:
        return Platform.UNKNOWN


def get_flow_home() -> Path:
    """Base directory for runtime files (~/.flow, or $FLOW_HOME)."""
    return Path(os.environ.get("FLOW_HOME", Path.home() / ".flow")).expanduser()


def get_runtime_dir() -> Path:
    """Directory for the socket and PID file."""
    runtime_dir = get_flow_home() / "runtime"
    runtime_dir.mkdir(parents=True, exist_ok=True)
    return runtime_dir


def get_ipc_socket_path() -> Path:
    """Get the IPC socket path.

    Raises:
        RuntimeError: If platform has no Unix domain sockets
    """
    if get_platform() not in (Platform.LINUX, Platform.MACOS):
        raise RuntimeError(f"Unsupported platform: {platform.system()}")
    return get_runtime_dir() / "daemon.sock"


def get_pid_file_path() -> Path:
    return get_runtime_dir() / "daemon.pid"


def get_state_file_path() -> Path:
    state_dir = get_flow_home() / "state"
    state_dir.mkdir(parents=True, exist_ok=True)
    return state_dir / "daemon.json"


def get_log_file_path() -> Path:
    """Get the daemon log file path."""
    log_dir = get_flow_home() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / "daemon.log"


def is_daemon_supported() -> Tuple[bool, str]:
    """Check if daemon is supported on this platform.

    Returns:
        Tuple of (is_supported, reason)
    """
    plat = get_platform()

    if plat == Platform.UNKNOWN:
        return False, f"Unsupported platform: {platform.system()}"

    if plat == Platform.WINDOWS:
        return (
            False,
            "The daemon needs Unix domain sockets. On Windows run 'flow serve' instead.",
        )

    return True, "Platform supported"
