"""Tray menu representation."""

from dataclasses import dataclass
from typing import Any, Optional

from flow_tracker.core.models import TrackingSpace

SPACE_ITEM_PREFIX = "space_"
SEPARATOR_ID = "separator"
OPEN_ITEM_ID = "open"
QUIT_ITEM_ID = "quit"


@dataclass(frozen=True)
class MenuItem:
    """One entry of the tray menu."""

    id: str
    label: str = ""
    checkable: bool = False
    checked: bool = False

    @property
    def is_separator(self) -> bool:
        return self.id == SEPARATOR_ID

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "checkable": self.checkable,
            "checked": self.checked,
        }


def build_tray_menu(spaces: list[TrackingSpace]) -> list[MenuItem]:
    """Build the tray menu: one checkable item per space, then open/quit."""
    items = [
        MenuItem(
            id=f"{SPACE_ITEM_PREFIX}{space.id}",
            label=space.name,
            checkable=True,
            checked=space.is_active,
        )
        for space in spaces
    ]
    items.append(MenuItem(id=SEPARATOR_ID))
    items.append(MenuItem(id=OPEN_ITEM_ID, label="Open Flow"))
    items.append(MenuItem(id=QUIT_ITEM_ID, label="Quit"))
    return items


def space_id_from_item(item_id: str) -> Optional[str]:
    """Extract the space id from a ``space_<id>`` menu item id."""
    if item_id.startswith(SPACE_ITEM_PREFIX) and len(item_id) > len(SPACE_ITEM_PREFIX):
        return item_id[len(SPACE_ITEM_PREFIX) :]
    return None
