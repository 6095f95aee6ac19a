"""Tests for the event notifier."""

from unittest.mock import Mock

from flow_tracker.automation.notifier import MENU_UPDATED, TRACKING_CHANGED, Event, Notifier


class TestNotifier:
    """Test Notifier."""

    def test_initialization_disabled(self) -> None:
        """Test that no desktop backend is loaded by default."""
        notifier = Notifier()

        assert not notifier.desktop
        assert notifier._desktop_notifier is None

    def test_listeners_receive_events(self) -> None:
        notifier = Notifier()
        received: list[Event] = []
        notifier.subscribe(received.append)

        notifier.notify(Event(MENU_UPDATED, {"menu": []}))

        assert received == [Event(MENU_UPDATED, {"menu": []})]

    def test_unsubscribe(self) -> None:
        notifier = Notifier()
        received: list[Event] = []
        notifier.subscribe(received.append)
        notifier.unsubscribe(received.append)
        notifier.unsubscribe(received.append)

        notifier.notify(Event(MENU_UPDATED))

        assert received == []

    def test_failing_listener_is_isolated(self) -> None:
        """Test that one broken listener affects neither the caller nor others."""
        notifier = Notifier()
        received: list[Event] = []
        notifier.subscribe(Mock(side_effect=RuntimeError("boom")))
        notifier.subscribe(received.append)

        notifier.notify(Event(MENU_UPDATED))

        assert len(received) == 1

    def test_tracking_changed_payload(self) -> None:
        notifier = Notifier()
        received: list[Event] = []
        notifier.subscribe(received.append)

        notifier.tracking_changed("s", True, "Deep Work")

        assert received[0].name == TRACKING_CHANGED
        assert received[0].payload == {"spaceId": "s", "active": True, "spaceName": "Deep Work"}

    def test_desktop_notification_on_tracking_change(self) -> None:
        """Test that the desktop backend is called for tracking changes only."""
        notifier = Notifier()
        mock_notif = Mock()
        notifier._desktop_notifier = mock_notif

        notifier.notify(Event(MENU_UPDATED))
        notifier.tracking_changed("s", True, "Deep Work")

        mock_notif.notify.assert_called_once()
        call_kwargs = mock_notif.notify.call_args[1]
        assert call_kwargs["title"] == "Flow"
        assert call_kwargs["message"] == "Tracking Deep Work"
        assert notifier.sent == 1

    def test_desktop_notification_failure_is_ignored(self) -> None:
        notifier = Notifier()
        notifier._desktop_notifier = Mock()
        notifier._desktop_notifier.notify.side_effect = Exception("no dbus")

        notifier.tracking_changed(None, False)

        assert notifier.sent == 0
