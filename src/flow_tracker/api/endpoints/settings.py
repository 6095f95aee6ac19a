"""Settings endpoints."""

from fastapi import APIRouter, Depends  # type: ignore[import-untyped]

from flow_tracker.api.dependencies import get_commands
from flow_tracker.api.models import SettingsPayload
from flow_tracker.core.commands import TrackingCommands

router = APIRouter()


@router.get("", response_model=SettingsPayload)
async def get_settings(commands: TrackingCommands = Depends(get_commands)) -> SettingsPayload:
    return SettingsPayload.from_settings(commands.get_settings())


@router.put("", response_model=SettingsPayload)
async def save_settings(
    payload: SettingsPayload,
    commands: TrackingCommands = Depends(get_commands),
) -> SettingsPayload:
    """Replace the stored settings."""
    return SettingsPayload.from_settings(commands.save_settings(payload.to_settings()))
