"""Space endpoints.

This module provides CRUD operations for tracking spaces plus the toggle
that starts and stops tracking a space.
"""

from fastapi import APIRouter, Depends, status  # type: ignore[import-untyped]

from flow_tracker.api.dependencies import get_commands
from flow_tracker.api.models import CreateSpaceRequest, SpacePayload, ToggleResponse
from flow_tracker.core.commands import TrackingCommands

router = APIRouter()


@router.get("", response_model=list[SpacePayload])
async def list_spaces(commands: TrackingCommands = Depends(get_commands)) -> list[SpacePayload]:
    """List all spaces."""
    return [SpacePayload.from_space(s) for s in commands.get_spaces()]


@router.post("", response_model=SpacePayload, status_code=status.HTTP_201_CREATED)
async def create_space(
    request: CreateSpaceRequest,
    commands: TrackingCommands = Depends(get_commands),
) -> SpacePayload:
    """Create an empty, inactive space.

    Example:
        >>> POST /api/v1/spaces
        {"name": "Deep Work", "color": "#3b82f6"}
    """
    space = commands.create_space(request.name, request.color)
    return SpacePayload.from_space(space)


@router.put("/{space_id}", response_model=list[SpacePayload])
async def save_space(
    space_id: str,
    payload: SpacePayload,
    commands: TrackingCommands = Depends(get_commands),
) -> list[SpacePayload]:
    """Replace a space, or add it if the id is unknown.

    The id in the path wins over the id in the body. The active flag in the
    body is ignored; use the toggle endpoint to change it.

    Returns:
        All spaces after the change
    """
    space = payload.model_copy(update={"id": space_id}).to_space()
    return [SpacePayload.from_space(s) for s in commands.save_space(space)]


@router.delete("/{space_id}", response_model=list[SpacePayload])
async def delete_space(
    space_id: str,
    commands: TrackingCommands = Depends(get_commands),
) -> list[SpacePayload]:
    """Delete a space and its time entries. Unknown ids are a no-op.

    Returns:
        Remaining spaces
    """
    return [SpacePayload.from_space(s) for s in commands.delete_space(space_id)]


@router.post("/{space_id}/toggle", response_model=ToggleResponse)
async def toggle_tracking(
    space_id: str,
    commands: TrackingCommands = Depends(get_commands),
) -> ToggleResponse:
    """Start or stop tracking a space; every other space stops."""
    is_active = commands.toggle_tracking(space_id)
    return ToggleResponse(space_id=space_id, is_active=is_active)
