"""Tests for the tray menu representation."""

from flow_tracker.core.menu import (
    OPEN_ITEM_ID,
    QUIT_ITEM_ID,
    MenuItem,
    build_tray_menu,
    space_id_from_item,
)
from flow_tracker.core.models import TrackingSpace


class TestTrayMenu:
    """Test build_tray_menu."""

    def test_empty_menu(self) -> None:
        """Test that the menu always ends with a separator, Open and Quit."""
        menu = build_tray_menu([])

        assert menu[0].is_separator
        assert menu[1] == MenuItem(id=OPEN_ITEM_ID, label="Open Flow")
        assert menu[2] == MenuItem(id=QUIT_ITEM_ID, label="Quit")

    def test_space_items(self) -> None:
        spaces = [TrackingSpace(name="A", id="a"), TrackingSpace(name="B", id="b", is_active=True)]

        items = build_tray_menu(spaces)[:2]

        assert items == [
            MenuItem(id="space_a", label="A", checkable=True, checked=False),
            MenuItem(id="space_b", label="B", checkable=True, checked=True),
        ]

    def test_space_id_from_item(self) -> None:
        assert space_id_from_item("space_abc") == "abc"
        assert space_id_from_item("space_") is None
        assert space_id_from_item("quit") is None

    def test_to_dict(self) -> None:
        assert MenuItem(id="open", label="Open Flow").to_dict() == {
            "id": "open",
            "label": "Open Flow",
            "checkable": False,
            "checked": False,
        }
