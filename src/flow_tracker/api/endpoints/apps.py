"""Focused application endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends  # type: ignore[import-untyped]

from flow_tracker.api.dependencies import get_commands
from flow_tracker.api.models import RunningAppPayload
from flow_tracker.core.commands import TrackingCommands

router = APIRouter()


@router.get("/active", response_model=Optional[RunningAppPayload])
async def get_active_window_info(
    commands: TrackingCommands = Depends(get_commands),
) -> Optional[RunningAppPayload]:
    """Focused application, or null when it cannot be determined."""
    app = commands.get_active_window_info()
    return RunningAppPayload.from_app(app) if app else None


@router.get("/running", response_model=list[RunningAppPayload])
async def get_running_apps(
    commands: TrackingCommands = Depends(get_commands),
) -> list[RunningAppPayload]:
    """Focused application as a list.

    Only the focused application is reported; the list is empty when none
    can be determined.
    """
    return [RunningAppPayload.from_app(a) for a in commands.get_running_apps()]
