"""Tests for the tracking coordinator."""

from conftest import FakeClock

from flow_tracker.core.coordinator import TrackingCoordinator


class TestTrackingCoordinator:
    """Test TrackingCoordinator."""

    def test_starts_idle(self, coordinator: TrackingCoordinator) -> None:
        snapshot = coordinator.snapshot()
        assert snapshot.is_tracking is False
        assert snapshot.last_app is None

    def test_activate_sets_baseline(self, coordinator: TrackingCoordinator, clock: FakeClock) -> None:
        """Test that activation resets the last app and stamps the time."""
        clock.now = 10.0
        coordinator.activate("s")

        snapshot = coordinator.snapshot()
        assert snapshot.active_space_id == "s"
        assert snapshot.last_app is None
        assert snapshot.last_check == 10.0

    def test_first_observation_is_baseline(self, coordinator: TrackingCoordinator) -> None:
        coordinator.activate("s", now=0)
        assert coordinator.observe("s", "Foo", now=1) == 0

    def test_same_app_owes_elapsed(self, coordinator: TrackingCoordinator) -> None:
        coordinator.activate("s", now=0)
        coordinator.observe("s", "Foo", now=0)
        assert coordinator.observe("s", "Foo", now=1.7) == 1
        assert coordinator.observe("s", "Foo", now=3.7) == 2

    def test_focus_switch_resets_baseline(self, coordinator: TrackingCoordinator) -> None:
        coordinator.activate("s", now=0)
        coordinator.observe("s", "Foo", now=0)
        assert coordinator.observe("s", "Bar", now=1) == 0
        assert coordinator.observe("s", "Bar", now=2) == 1

    def test_observation_for_inactive_space_is_discarded(
        self, coordinator: TrackingCoordinator
    ) -> None:
        """Test that a tick sampled before a toggle commits nothing."""
        coordinator.activate("a", now=0)
        coordinator.observe("a", "Foo", now=0)
        coordinator.activate("b", now=1)

        assert coordinator.observe("a", "Foo", now=2) is None
        assert coordinator.snapshot().last_app is None

    def test_observation_after_deactivate_is_discarded(
        self, coordinator: TrackingCoordinator
    ) -> None:
        coordinator.activate("a", now=0)
        coordinator.deactivate_all()
        assert coordinator.observe("a", "Foo", now=1) is None

    def test_reactivation_forgets_last_app(self, coordinator: TrackingCoordinator) -> None:
        """Test that toggling off and on again never credits the gap."""
        coordinator.activate("s", now=0)
        coordinator.observe("s", "Foo", now=0)
        coordinator.deactivate_all()
        coordinator.activate("s", now=100)

        assert coordinator.observe("s", "Foo", now=101) == 0

    def test_deactivate_if(self, coordinator: TrackingCoordinator) -> None:
        coordinator.activate("a", now=0)

        assert coordinator.deactivate_if("b") is False
        assert coordinator.snapshot().active_space_id == "a"
        assert coordinator.deactivate_if("a") is True
        assert coordinator.snapshot().is_tracking is False

    def test_session_seconds(self, coordinator: TrackingCoordinator, clock: FakeClock) -> None:
        assert coordinator.session_seconds() == 0

        coordinator.activate("s", now=5)
        clock.now = 70.5
        assert coordinator.session_seconds() == 65

        coordinator.deactivate_all()
        assert coordinator.session_seconds() == 0
