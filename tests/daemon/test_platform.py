"""Tests for platform detection utilities."""

import platform
from pathlib import Path
from unittest.mock import patch

import pytest  # type: ignore[import-not-found]

from flow_tracker.daemon.platform import (
    Platform,
    get_flow_home,
    get_ipc_socket_path,
    get_log_file_path,
    get_pid_file_path,
    get_platform,
    get_state_file_path,
    is_daemon_supported,
)


@pytest.fixture(autouse=True)  # type: ignore[misc]
def flow_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home = tmp_path / "flow"
    monkeypatch.setenv("FLOW_HOME", str(home))
    return home


class TestPlatformDetection:
    """Test platform detection."""

    def test_get_platform_matches_system(self) -> None:
        """Test platform detection matches system platform."""
        plat = get_platform()
        system = platform.system().lower()

        if system == "linux":
            assert plat == Platform.LINUX
        elif system == "darwin":
            assert plat == Platform.MACOS
        elif system == "windows":
            assert plat == Platform.WINDOWS

    @patch("flow_tracker.daemon.platform.platform.system", return_value="BeOS")
    def test_unknown_platform(self, mock_system) -> None:
        assert get_platform() == Platform.UNKNOWN


class TestPaths:
    """Test path utilities."""

    def test_flow_home_from_environment(self, flow_home: Path) -> None:
        assert get_flow_home() == flow_home

    def test_runtime_files_live_under_flow_home(self, flow_home: Path) -> None:
        """Test that runtime paths are created under FLOW_HOME."""
        assert get_pid_file_path() == flow_home / "runtime" / "daemon.pid"
        assert get_state_file_path() == flow_home / "state" / "daemon.json"
        assert get_log_file_path() == flow_home / "logs" / "daemon.log"
        assert (flow_home / "logs").is_dir()

    @patch("flow_tracker.daemon.platform.platform.system", return_value="Linux")
    def test_socket_path_on_unix(self, mock_system, flow_home: Path) -> None:
        assert get_ipc_socket_path() == flow_home / "runtime" / "daemon.sock"

    @patch("flow_tracker.daemon.platform.platform.system", return_value="Windows")
    def test_socket_path_on_windows(self, mock_system) -> None:
        with pytest.raises(RuntimeError):
            get_ipc_socket_path()


class TestDaemonSupport:
    """Test daemon support check."""

    @patch("flow_tracker.daemon.platform.platform.system", return_value="Linux")
    def test_supported_on_linux(self, mock_system) -> None:
        supported, _ = is_daemon_supported()
        assert supported is True

    @patch("flow_tracker.daemon.platform.platform.system", return_value="Windows")
    def test_unsupported_on_windows(self, mock_system) -> None:
        """Test that Windows points users at the HTTP server instead."""
        supported, reason = is_daemon_supported()
        assert supported is False
        assert "flow serve" in reason
