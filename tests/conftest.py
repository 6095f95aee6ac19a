"""Pytest configuration and shared fixtures."""

from pathlib import Path
from typing import Optional

import pytest  # type: ignore[import-not-found]

from flow_tracker.automation.notifier import Event, Notifier
from flow_tracker.automation.window_probe import ProbeError, WindowProbe
from flow_tracker.core.commands import TrackingCommands
from flow_tracker.core.coordinator import TrackingCoordinator
from flow_tracker.core.models import RunningApp
from flow_tracker.core.storage import StateStore


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest."""
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")


class FakeProbe(WindowProbe):
    """Probe reporting whatever app a test sets; None means no focus."""

    def __init__(self, app: Optional[str] = None, pid: int = 4242):
        super().__init__()
        self.app = app
        self.pid = pid

    def get_active_window(self) -> RunningApp:
        if self.app is None:
            raise ProbeError("no focus")
        return RunningApp(name=self.app, process_id=self.pid)


class FakeClock:
    """Monotonic clock moved by hand."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class RecordingNotifier(Notifier):
    """Notifier that keeps every event."""

    def __init__(self) -> None:
        super().__init__()
        self.events: list[Event] = []
        self.subscribe(self.events.append)

    def named(self, name: str) -> list[Event]:
        return [e for e in self.events if e.name == name]


@pytest.fixture  # type: ignore[misc]
def store(tmp_path: Path) -> StateStore:
    """Store in a temporary directory."""
    return StateStore(tmp_path / "data")


@pytest.fixture  # type: ignore[misc]
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture  # type: ignore[misc]
def coordinator(clock: FakeClock) -> TrackingCoordinator:
    return TrackingCoordinator(clock=clock)


@pytest.fixture  # type: ignore[misc]
def probe() -> FakeProbe:
    return FakeProbe("Code")


@pytest.fixture  # type: ignore[misc]
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture  # type: ignore[misc]
def commands(
    store: StateStore,
    coordinator: TrackingCoordinator,
    notifier: RecordingNotifier,
    probe: FakeProbe,
) -> TrackingCommands:
    """Commands over a temporary store with a fixed day."""
    return TrackingCommands(
        store, coordinator, notifier=notifier, probe=probe, today=lambda: "2026-10-19"
    )
