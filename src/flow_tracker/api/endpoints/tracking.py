"""Tracking endpoints: stop, live session and tray menu."""

from fastapi import APIRouter, Depends  # type: ignore[import-untyped]

from flow_tracker.api.dependencies import get_commands
from flow_tracker.api.models import MenuItemPayload, SessionInfo
from flow_tracker.core.commands import TrackingCommands

router = APIRouter()


@router.post("/stop", response_model=SessionInfo)
async def stop_all_tracking(commands: TrackingCommands = Depends(get_commands)) -> SessionInfo:
    """Stop tracking every space. Safe to call when nothing is tracked."""
    commands.stop_all_tracking()
    return SessionInfo.model_validate(commands.get_current_session_info())


@router.get("/session", response_model=SessionInfo)
async def get_current_session(
    commands: TrackingCommands = Depends(get_commands),
) -> SessionInfo:
    """Live session of the tracked space.

    Example:
        >>> GET /api/v1/tracking/session
        {"spaceId": "uuid", "sessionDuration": 125, "isTracking": true}
    """
    return SessionInfo.model_validate(commands.get_current_session_info())


@router.get("/menu", response_model=list[MenuItemPayload])
async def get_tray_menu(commands: TrackingCommands = Depends(get_commands)) -> list[MenuItemPayload]:
    """Tray menu: one checkable item per space, a separator, Open and Quit."""
    return [MenuItemPayload.model_validate(item.to_dict()) for item in commands.get_tray_menu()]
