"""Focused application detection."""

import logging
import platform
import subprocess
from typing import Optional

import psutil  # type: ignore[import-untyped]

from flow_tracker.core.models import RunningApp

logger = logging.getLogger(__name__)


class ProbeError(Exception):
    """No focused application could be determined."""

    pass


class WindowProbe:
    """Query the currently focused application.

    Platform-specific implementation:
    - Linux: xdotool, then xprop (X11 only)
    - macOS: NSWorkspace APIs (requires pyobjc)
    - Windows: win32gui (requires pywin32)
    """

    def __init__(self, command_timeout: float = 1.0):
        """Initialize window probe.

        Args:
            command_timeout: Timeout for helper commands on Linux, in seconds
        """
        self.command_timeout = command_timeout
        self._system = platform.system()

    def get_active_window(self) -> RunningApp:
        """Get the focused application.

        Returns:
            Name and process id of the focused application

        Raises:
            ProbeError: If no focused application can be resolved
        """
        if self._system == "Linux":
            return self._get_active_window_linux()
        elif self._system == "Darwin":
            return self._get_active_window_macos()
        elif self._system == "Windows":
            return self._get_active_window_windows()
        raise ProbeError(f"Unsupported platform: {self._system}")

    def get_active_window_info(self) -> Optional[RunningApp]:
        """Get the focused application, or None if it cannot be resolved."""
        try:
            return self.get_active_window()
        except ProbeError as e:
            logger.debug(f"No focused application: {e}")
            return None

    def get_running_apps(self) -> list[RunningApp]:
        """List the focused application, if any."""
        active = self.get_active_window_info()
        return [active] if active else []

    def _run(self, args: list[str]) -> Optional[str]:
        """Run a helper command, returning stdout or None on failure."""
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=self.command_timeout,
            )
        except (FileNotFoundError, subprocess.TimeoutExpired):
            return None
        if result.returncode != 0:
            return None
        return result.stdout.strip()

    def _app_for_pid(self, pid: int) -> RunningApp:
        """Resolve a process id to a RunningApp."""
        try:
            return RunningApp(name=str(psutil.Process(pid).name()), process_id=pid)
        except (psutil.NoSuchProcess, psutil.AccessDenied) as e:
            raise ProbeError(f"Cannot inspect process {pid}: {e}") from e

    def _get_active_window_linux(self) -> RunningApp:
        """Get focused application on Linux (X11)."""
        output = self._run(["xdotool", "getactivewindow", "getwindowpid"])
        if output and output.isdigit():
            return self._app_for_pid(int(output))

        # xprop output: _NET_ACTIVE_WINDOW(WINDOW): window id # 0x3a00007
        output = self._run(["xprop", "-root", "_NET_ACTIVE_WINDOW"])
        if output and "#" in output:
            window_id = output.split("#", 1)[1].strip().split(",")[0]
            if window_id and window_id != "0x0":
                pid_output = self._run(["xprop", "-id", window_id, "_NET_WM_PID"])
                # _NET_WM_PID(CARDINAL) = 4242
                if pid_output and "=" in pid_output:
                    pid = pid_output.split("=", 1)[1].strip()
                    if pid.isdigit():
                        return self._app_for_pid(int(pid))

        raise ProbeError("No active window found (xdotool/xprop unavailable or no focus)")

    def _get_active_window_macos(self) -> RunningApp:
        """Get focused application on macOS."""
        try:
            from AppKit import NSWorkspace  # type: ignore[import-not-found]
        except ImportError as e:
            raise ProbeError("pyobjc is required for window detection on macOS") from e

        active_app = NSWorkspace.sharedWorkspace().activeApplication()
        if not active_app:
            raise ProbeError("No active application")
        return RunningApp(
            name=str(active_app.get("NSApplicationName")),
            process_id=int(active_app.get("NSApplicationProcessIdentifier", 0)),
        )

    def _get_active_window_windows(self) -> RunningApp:
        """Get focused application on Windows."""
        try:
            import win32gui  # type: ignore[import-untyped]
            import win32process  # type: ignore[import-untyped]
        except ImportError as e:
            raise ProbeError("pywin32 is required for window detection on Windows") from e

        hwnd = win32gui.GetForegroundWindow()
        if not hwnd:
            raise ProbeError("No foreground window")
        _, pid = win32process.GetWindowThreadProcessId(hwnd)
        return self._app_for_pid(pid)
