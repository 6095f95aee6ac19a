"""Aggregation and reports over time entries."""

from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Optional

from rich.console import Console  # type: ignore[import-not-found]
from rich.table import Table  # type: ignore[import-not-found]

from flow_tracker.core.models import DATE_FORMAT, TimeEntry, TrackingSpace, format_day

RANGE_DAYS = {"day": 1, "week": 7, "month": 30}


def format_duration(seconds: int) -> str:
    """Format seconds as "45s", "12m" or "2h 5m"."""
    if seconds < 60:
        return f"{seconds}s"
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def format_live_duration(seconds: int) -> str:
    """Format seconds as a running clock, "m:ss" or "h:mm:ss"."""
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def date_range(range_name: str, today: Optional[date] = None) -> tuple[str, str]:
    """Inclusive (from, to) days for a named range ending today.

    Args:
        range_name: 'day', 'week' (last 7 days) or 'month' (last 30 days)
        today: Last day of the range. Defaults to today

    Returns:
        Tuple of YYYY-MM-DD strings

    Raises:
        ValueError: If the range name is unknown
    """
    if range_name not in RANGE_DAYS:
        raise ValueError(f"Unknown range: {range_name}. Use one of: {', '.join(RANGE_DAYS)}")
    if today is None:
        today = datetime.now().date()
    start = today - timedelta(days=RANGE_DAYS[range_name] - 1)
    return format_day(start), format_day(today)


def group_by_app(entries: list[TimeEntry]) -> list[tuple[str, int]]:
    """Total seconds per app, longest first."""
    totals: dict[str, int] = defaultdict(int)
    for entry in entries:
        totals[entry.app_name] += entry.duration
    return sorted(totals.items(), key=lambda x: (-x[1], x[0]))


def group_by_date(entries: list[TimeEntry], date_from: str, date_to: str) -> list[tuple[str, int]]:
    """Total seconds per day between two days, including days with no time."""
    start = datetime.strptime(date_from, DATE_FORMAT).date()
    end = datetime.strptime(date_to, DATE_FORMAT).date()

    totals: dict[str, int] = {}
    day = start
    while day <= end:
        totals[format_day(day)] = 0
        day += timedelta(days=1)

    for entry in entries:
        if date_from <= entry.date <= date_to:
            totals[entry.date] = totals.get(entry.date, 0) + entry.duration

    return sorted(totals.items())


def group_by_space(
    entries: list[TimeEntry], spaces: list[TrackingSpace]
) -> list[tuple[str, int]]:
    """Total seconds per space name, longest first."""
    names = {space.id: space.name for space in spaces}
    totals: dict[str, int] = defaultdict(int)
    for entry in entries:
        totals[names.get(entry.space_id, entry.space_id)] += entry.duration
    return sorted(totals.items(), key=lambda x: (-x[1], x[0]))


class ReportGenerator:
    """Render reports from time entries."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize report generator.

        Args:
            console: Rich console for output. Creates default if None.
        """
        self.console = console or Console()

    def summary_report(
        self,
        entries: list[TimeEntry],
        spaces: list[TrackingSpace],
        date_from: str,
        date_to: str,
        period_label: str = "Summary",
    ) -> None:
        """Display totals by space, by app and by day.

        Args:
            entries: Entries to analyze
            spaces: Spaces used to name entries
            date_from: First day of the period
            date_to: Last day of the period
            period_label: Label for the report period
        """
        entries = [e for e in entries if date_from <= e.date <= date_to]
        if not entries:
            self.console.print("[yellow]No time recorded for this period[/yellow]")
            return

        total = sum(e.duration for e in entries)
        self.console.print(f"\n[bold cyan]Flow - {period_label}[/bold cyan]")
        self.console.print(f"[dim]{date_from} to {date_to}[/dim]  Total: [bold]{format_duration(total)}[/bold]\n")

        self._breakdown_table("Time by Space", "Space", group_by_space(entries, spaces), total)
        self._breakdown_table("Time by App", "App", group_by_app(entries), total)

        daily = Table(title="Time by Day")
        daily.add_column("Date", style="cyan")
        daily.add_column("Duration", style="magenta", justify="right")
        daily.add_column("Bar", style="blue")
        busiest = max((d for _, d in group_by_date(entries, date_from, date_to)), default=0)
        for day, duration in group_by_date(entries, date_from, date_to):
            pct = (duration / busiest) * 100 if busiest else 0
            daily.add_row(day, format_duration(duration), self._create_bar(pct))
        self.console.print(daily)

    def _breakdown_table(
        self, title: str, label: str, rows: list[tuple[str, int]], total: int
    ) -> None:
        table = Table(title=title)
        table.add_column(label, style="cyan")
        table.add_column("Duration", style="magenta", justify="right")
        table.add_column("% Total", style="green", justify="right")
        table.add_column("Bar", style="blue")

        for name, duration in rows:
            pct = (duration / total) * 100 if total > 0 else 0
            table.add_row(name, format_duration(duration), f"{pct:.1f}%", self._create_bar(pct))

        self.console.print(table)
        self.console.print()

    def _create_bar(self, percentage: float, width: int = 20) -> str:
        """Create a text-based progress bar."""
        filled = int((percentage / 100) * width)
        return "█" * filled + "░" * (width - filled)
