"""Tests for the JSON-RPC handler table."""

from unittest.mock import patch

import pytest  # type: ignore[import-not-found]

from flow_tracker.core.commands import TrackingCommands
from flow_tracker.core.storage import StorageError
from flow_tracker.daemon.handlers import Handler, build_handlers
from flow_tracker.daemon.ipc import INVALID_PARAMS, SERVER_ERROR, RPCError

COMMAND_NAMES = {
    "get_running_apps",
    "get_active_window_info",
    "get_spaces",
    "save_space",
    "create_space",
    "delete_space",
    "toggle_tracking",
    "stop_all_tracking",
    "get_time_entries",
    "get_settings",
    "save_settings",
    "get_today_stats",
}


@pytest.fixture  # type: ignore[misc]
def handlers(commands: TrackingCommands) -> dict[str, Handler]:
    return build_handlers(commands)


class TestHandlerTable:
    """Test the method table."""

    def test_every_command_is_exposed(self, handlers: dict[str, Handler]) -> None:
        assert COMMAND_NAMES <= set(handlers)
        assert {"get_current_session_info", "get_tray_menu", "menu_click"} <= set(handlers)


class TestSpaceHandlers:
    """Test space methods."""

    def test_create_and_list(self, handlers: dict[str, Handler]) -> None:
        """Test that results use the camelCase wire format."""
        created = handlers["create_space"]({"name": "Deep Work"})
        spaces = handlers["get_spaces"]({})

        assert spaces == [created]
        assert created["isActive"] is False
        assert created["apps"] == []

    def test_save_space(self, handlers: dict[str, Handler]) -> None:
        created = handlers["create_space"]({"name": "A"})

        spaces = handlers["save_space"]({"space": {**created, "apps": ["Code"]}})

        assert spaces[0]["apps"] == ["Code"]

    def test_toggle_and_stop(self, handlers: dict[str, Handler]) -> None:
        created = handlers["create_space"]({"name": "A"})

        assert handlers["toggle_tracking"]({"spaceId": created["id"]}) is True
        assert handlers["get_current_session_info"]({})["isTracking"] is True
        assert handlers["stop_all_tracking"]({}) is None
        assert handlers["get_spaces"]({})[0]["isActive"] is False

    def test_delete_space(self, handlers: dict[str, Handler]) -> None:
        created = handlers["create_space"]({"name": "A"})
        assert handlers["delete_space"]({"spaceId": created["id"]}) == []

    def test_menu_click(self, handlers: dict[str, Handler]) -> None:
        created = handlers["create_space"]({"name": "A"})

        assert handlers["menu_click"]({"itemId": f"space_{created['id']}"}) is True
        menu = handlers["get_tray_menu"]({})
        assert menu[0]["checked"] is True


class TestValidation:
    """Test parameter validation."""

    @pytest.mark.parametrize(  # type: ignore[misc]
        "method,params",
        [
            ("create_space", {}),
            ("create_space", {"name": ""}),
            ("create_space", {"name": "A", "color": "blue"}),
            ("toggle_tracking", {}),
            ("delete_space", {"spaceId": ""}),
            ("get_time_entries", {"dateFrom": "19/10/2026"}),
            ("save_space", {"space": {"name": "no id"}}),
            ("save_settings", {"settings": {"enableDND": "maybe"}}),
        ],
    )
    def test_invalid_params(self, handlers: dict[str, Handler], method: str, params: dict) -> None:
        with pytest.raises(RPCError) as exc_info:
            handlers[method](params)
        assert exc_info.value.code == INVALID_PARAMS

    def test_storage_error_is_server_error(
        self, handlers: dict[str, Handler], commands: TrackingCommands
    ) -> None:
        with patch.object(commands.store, "save", side_effect=StorageError("disk full")):
            with pytest.raises(RPCError) as exc_info:
                handlers["create_space"]({"name": "A"})

        assert exc_info.value.code == SERVER_ERROR
        assert "disk full" in exc_info.value.message


class TestQueryHandlers:
    """Test read-only methods."""

    def test_time_entries_and_stats(
        self, handlers: dict[str, Handler], commands: TrackingCommands
    ) -> None:
        with commands.store.transaction() as state:
            state.add_duration("s1", "Code", "2026-10-19", 30)
            state.add_duration("s1", "Code", "2026-10-18", 5)

        entries = handlers["get_time_entries"]({"spaceId": "s1", "dateFrom": "2026-10-19"})

        assert entries == [
            {"spaceId": "s1", "appName": "Code", "date": "2026-10-19", "duration": 30}
        ]
        assert handlers["get_today_stats"]({}) == {"Code": 30}

    def test_settings(self, handlers: dict[str, Handler]) -> None:
        saved = handlers["save_settings"]({"settings": {"enableDND": True, "mutedApps": ["Slack"]}})

        assert saved == {"enableDND": True, "mutedApps": ["Slack"]}
        assert handlers["get_settings"]({}) == saved

    def test_focused_app(self, handlers: dict[str, Handler]) -> None:
        assert handlers["get_active_window_info"]({}) == {"name": "Code", "processId": 4242}
        assert handlers["get_running_apps"]({}) == [{"name": "Code", "processId": 4242}]
