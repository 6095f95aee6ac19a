"""Analytics endpoints: totals by app, day and space over a range."""

from typing import Optional

from fastapi import APIRouter, Depends, Query  # type: ignore[import-untyped]

from flow_tracker.analysis.reports import date_range, group_by_app, group_by_date, group_by_space
from flow_tracker.api.dependencies import get_commands
from flow_tracker.api.models import AnalyticsResponse, DurationRow
from flow_tracker.core.commands import TrackingCommands

router = APIRouter()


def _rows(pairs: list[tuple[str, int]]) -> list[DurationRow]:
    return [DurationRow(name=name, duration=duration) for name, duration in pairs]


@router.get("", response_model=AnalyticsResponse)
async def get_analytics(
    range_name: str = Query("week", alias="range", pattern="^(day|week|month)$"),
    space_id: Optional[str] = Query(None, alias="spaceId", description="Filter by space"),
    commands: TrackingCommands = Depends(get_commands),
) -> AnalyticsResponse:
    """Totals for today, the last 7 days or the last 30 days.

    Args:
        range_name: day, week or month
        space_id: Only count this space
        commands: Tracking commands (injected)

    Returns:
        Total plus breakdowns by app (longest first), by day (every day of
        the range, zero-filled) and by space

    Example:
        >>> GET /api/v1/analytics?range=week
        {
            "range": "week",
            "dateFrom": "2026-10-13",
            "dateTo": "2026-10-19",
            "total": 5400,
            "byApp": [{"name": "Code", "duration": 3600}, ...],
            "byDate": [{"name": "2026-10-13", "duration": 0}, ...],
            "bySpace": [{"name": "Deep Work", "duration": 5400}]
        }
    """
    date_from, date_to = date_range(range_name)
    entries = commands.get_time_entries(space_id, date_from, date_to)

    return AnalyticsResponse(
        range=range_name,
        date_from=date_from,
        date_to=date_to,
        total=sum(e.duration for e in entries),
        by_app=_rows(group_by_app(entries)),
        by_date=_rows(group_by_date(entries, date_from, date_to)),
        by_space=_rows(group_by_space(entries, commands.get_spaces())),
    )
