"""Tests for daemon state management."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest  # type: ignore[import-not-found]

from flow_tracker import __version__
from flow_tracker.core.tracker import TickOutcome, TickResult
from flow_tracker.daemon.state import DaemonState, PIDFileManager, StateManager


class TestDaemonState:
    """Test DaemonState dataclass."""

    def test_create_daemon_state(self) -> None:
        """Test creating daemon state."""
        state = DaemonState(started_at="2026-10-19T10:00:00", pid=12345)

        assert state.version == __version__
        assert state.tracking is False
        assert state.active_space_id is None
        assert set(state.tick_counts) == {outcome.value for outcome in TickOutcome}
        assert all(count == 0 for count in state.tick_counts.values())

    def test_from_dict_ignores_unknown_keys(self) -> None:
        """Test loading a state file written by another version."""
        state = DaemonState.from_dict(
            {"started_at": "2026-10-19T10:00:00", "pid": 1, "idle_checks_count": 3}
        )
        assert state.pid == 1

    def test_round_trip(self) -> None:
        state = DaemonState(started_at="2026-10-19T10:00:00", pid=1, tracking=True)
        assert DaemonState.from_dict(state.to_dict()) == state


class TestStateManager:
    """Test StateManager."""

    @pytest.fixture  # type: ignore[misc]
    def manager(self, tmp_path: Path) -> StateManager:
        return StateManager(tmp_path / "daemon.json", flush_interval=0)

    def test_initialize_writes_file(self, manager: StateManager) -> None:
        manager.initialize(pid=42)

        data = json.loads(manager.state_file.read_text())
        assert data["pid"] == 42

    def test_update(self, manager: StateManager) -> None:
        manager.initialize(pid=42)
        manager.update(tracking=True, active_space_id="s")

        loaded = StateManager(manager.state_file).load()
        assert loaded is not None
        assert loaded.tracking is True
        assert loaded.active_space_id == "s"

    def test_update_uninitialized_is_ignored(self, manager: StateManager) -> None:
        manager.update(tracking=True)
        assert manager.get() is None

    def test_record_tick_counts_outcomes(self, manager: StateManager) -> None:
        """Test that tick results feed the counters."""
        manager.initialize(pid=42)
        manager.record_tick(TickResult(TickOutcome.BASELINE, "Code"))
        manager.record_tick(TickResult(TickOutcome.RECORDED, "Code", 1))
        manager.record_tick(TickResult(TickOutcome.RECORDED, "Code", 2))
        manager.record_tick(TickResult(TickOutcome.IDLE))

        state = manager.get_dict()
        assert state["tick_counts"]["recorded"] == 2
        assert state["tick_counts"]["baseline"] == 1
        assert state["tick_counts"]["idle"] == 1
        assert state["seconds_recorded"] == 3
        assert state["last_app"] == "Code"
        assert state["last_tick_at"] is not None

    def test_record_tick_flush_is_throttled(self, tmp_path: Path) -> None:
        """Test that ticks do not write the file more than once per interval."""
        manager = StateManager(tmp_path / "daemon.json", flush_interval=60)
        manager.initialize(pid=42)

        with patch.object(manager, "_save") as mock_save:
            for _ in range(5):
                manager.record_tick(TickResult(TickOutcome.IDLE))

        mock_save.assert_not_called()
        assert manager.get_dict()["tick_counts"]["idle"] == 5

    def test_load_corrupt_file(self, manager: StateManager) -> None:
        manager.state_file.write_text("{broken")
        assert manager.load() is None

    def test_clear(self, manager: StateManager) -> None:
        manager.initialize(pid=42)
        manager.clear()

        assert not manager.state_file.exists()
        assert manager.get_dict() == {}


class TestPIDFileManager:
    """Test PIDFileManager."""

    def test_write_read_remove(self, tmp_path: Path) -> None:
        pid_manager = PIDFileManager(tmp_path / "run" / "daemon.pid")

        pid_manager.write(1234)
        assert pid_manager.read() == 1234

        pid_manager.remove()
        assert pid_manager.read() is None

    def test_is_running(self, tmp_path: Path) -> None:
        pid_manager = PIDFileManager(tmp_path / "daemon.pid")
        assert pid_manager.is_running() is False

        with patch("flow_tracker.daemon.state.psutil.pid_exists", return_value=True):
            pid_manager.write(1234)
            assert pid_manager.is_running() is True

    def test_invalid_pid_file(self, tmp_path: Path) -> None:
        pid_manager = PIDFileManager(tmp_path / "daemon.pid")
        pid_manager.pid_file.write_text("not a pid")
        assert pid_manager.read() is None
