"""JSON-RPC handlers exposing the tracking commands.

Method names and parameter names match the commands the presentation layer
invokes (``toggle_tracking {spaceId}``, ``get_time_entries {spaceId, dateFrom,
dateTo}``...). Results are plain JSON values in the camelCase wire format.
"""

import functools
from typing import Any, Callable

from pydantic import ValidationError  # type: ignore[import-untyped]

from flow_tracker.api.models import (
    CreateSpaceRequest,
    MenuClickRequest,
    RunningAppPayload,
    SaveSettingsRequest,
    SaveSpaceRequest,
    SettingsPayload,
    SpaceIdRequest,
    SpacePayload,
    TimeEntriesQuery,
    TimeEntryPayload,
)
from flow_tracker.core.commands import TrackingCommands
from flow_tracker.core.models import TrackingSpace
from flow_tracker.core.storage import StorageError
from flow_tracker.daemon.ipc import INVALID_PARAMS, SERVER_ERROR, RPCError

Handler = Callable[[dict[str, Any]], Any]


def _rpc_errors(handler: Handler) -> Handler:
    """Translate validation and storage failures into RPC errors."""

    @functools.wraps(handler)
    def wrapper(params: dict[str, Any]) -> Any:
        try:
            return handler(params)
        except ValidationError as e:
            raise RPCError(INVALID_PARAMS, f"Invalid params: {e.errors(include_url=False)}")
        except StorageError as e:
            raise RPCError(SERVER_ERROR, str(e))

    return wrapper


def _spaces(spaces: list[TrackingSpace]) -> list[dict[str, Any]]:
    return [SpacePayload.from_space(s).model_dump(by_alias=True) for s in spaces]


def build_handlers(commands: TrackingCommands) -> dict[str, Handler]:
    """Map RPC method names to handlers bound to ``commands``.

    Args:
        commands: Command surface of the engine

    Returns:
        Dictionary of method name to handler
    """

    def get_running_apps(params: dict[str, Any]) -> Any:
        return [
            RunningAppPayload.from_app(a).model_dump(by_alias=True)
            for a in commands.get_running_apps()
        ]

    def get_active_window_info(params: dict[str, Any]) -> Any:
        app = commands.get_active_window_info()
        return RunningAppPayload.from_app(app).model_dump(by_alias=True) if app else None

    def get_spaces(params: dict[str, Any]) -> Any:
        return _spaces(commands.get_spaces())

    def save_space(params: dict[str, Any]) -> Any:
        request = SaveSpaceRequest.model_validate(params)
        return _spaces(commands.save_space(request.space.to_space()))

    def create_space(params: dict[str, Any]) -> Any:
        request = CreateSpaceRequest.model_validate(params)
        space = commands.create_space(request.name, request.color)
        return SpacePayload.from_space(space).model_dump(by_alias=True)

    def delete_space(params: dict[str, Any]) -> Any:
        request = SpaceIdRequest.model_validate(params)
        return _spaces(commands.delete_space(request.space_id))

    def toggle_tracking(params: dict[str, Any]) -> Any:
        request = SpaceIdRequest.model_validate(params)
        return commands.toggle_tracking(request.space_id)

    def stop_all_tracking(params: dict[str, Any]) -> Any:
        commands.stop_all_tracking()
        return None

    def get_time_entries(params: dict[str, Any]) -> Any:
        query = TimeEntriesQuery.model_validate(params)
        entries = commands.get_time_entries(query.space_id, query.date_from, query.date_to)
        return [TimeEntryPayload.from_entry(e).model_dump(by_alias=True) for e in entries]

    def get_settings(params: dict[str, Any]) -> Any:
        return SettingsPayload.from_settings(commands.get_settings()).model_dump(by_alias=True)

    def save_settings(params: dict[str, Any]) -> Any:
        request = SaveSettingsRequest.model_validate(params)
        saved = commands.save_settings(request.settings.to_settings())
        return SettingsPayload.from_settings(saved).model_dump(by_alias=True)

    def get_today_stats(params: dict[str, Any]) -> Any:
        return commands.get_today_stats()

    def get_current_session_info(params: dict[str, Any]) -> Any:
        return commands.get_current_session_info()

    def get_tray_menu(params: dict[str, Any]) -> Any:
        return [item.to_dict() for item in commands.get_tray_menu()]

    def menu_click(params: dict[str, Any]) -> Any:
        request = MenuClickRequest.model_validate(params)
        return commands.handle_menu_click(request.item_id)

    handlers: dict[str, Handler] = {
        "get_running_apps": get_running_apps,
        "get_active_window_info": get_active_window_info,
        "get_spaces": get_spaces,
        "save_space": save_space,
        "create_space": create_space,
        "delete_space": delete_space,
        "toggle_tracking": toggle_tracking,
        "stop_all_tracking": stop_all_tracking,
        "get_time_entries": get_time_entries,
        "get_settings": get_settings,
        "save_settings": save_settings,
        "get_today_stats": get_today_stats,
        "get_current_session_info": get_current_session_info,
        "get_tray_menu": get_tray_menu,
        "menu_click": menu_click,
    }
    return {name: _rpc_errors(handler) for name, handler in handlers.items()}
