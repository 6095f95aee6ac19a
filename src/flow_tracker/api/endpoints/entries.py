"""Time entry and statistics endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query  # type: ignore[import-untyped]

from flow_tracker.api.dependencies import get_commands
from flow_tracker.api.models import DATE_PATTERN, TimeEntryPayload
from flow_tracker.core.commands import TrackingCommands

router = APIRouter()


@router.get("/entries", response_model=list[TimeEntryPayload])
async def get_time_entries(
    space_id: Optional[str] = Query(None, alias="spaceId", description="Filter by space"),
    date_from: Optional[str] = Query(
        None, alias="dateFrom", pattern=DATE_PATTERN, description="First day (YYYY-MM-DD)"
    ),
    date_to: Optional[str] = Query(
        None, alias="dateTo", pattern=DATE_PATTERN, description="Last day (YYYY-MM-DD)"
    ),
    commands: TrackingCommands = Depends(get_commands),
) -> list[TimeEntryPayload]:
    """List time entries. Both date bounds are inclusive.

    Example:
        >>> GET /api/v1/entries?spaceId=uuid&dateFrom=2026-10-01
        [{"spaceId": "uuid", "appName": "Code", "date": "2026-10-02", "duration": 1800}]
    """
    entries = commands.get_time_entries(space_id, date_from, date_to)
    return [TimeEntryPayload.from_entry(e) for e in entries]


@router.get("/stats/today", response_model=dict[str, int])
async def get_today_stats(commands: TrackingCommands = Depends(get_commands)) -> dict[str, int]:
    """Seconds per app today, summed across spaces."""
    return commands.get_today_stats()
