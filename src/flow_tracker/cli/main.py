"""Main CLI application."""

import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from flow_tracker import __version__
from flow_tracker.analysis.reports import (
    RANGE_DAYS,
    ReportGenerator,
    date_range,
    format_duration,
    format_live_duration,
)
from flow_tracker.cli.backend import Backend, BackendError
from flow_tracker.cli.config_commands import config
from flow_tracker.cli.daemon_commands import daemon
from flow_tracker.core.models import DATE_FORMAT, TimeEntry, TrackingSpace

console = Console()
error_console = Console(stderr=True)


def get_backend(ctx: click.Context) -> Backend:
    """Backend for this invocation, created on first use."""
    if "backend" not in ctx.obj:
        data_dir = ctx.obj.get("data_dir")
        ctx.obj["backend"] = Backend(Path(data_dir) if data_dir else None)
    backend: Backend = ctx.obj["backend"]
    return backend


def fail(message: Any) -> None:
    """Print an error and exit with status 1."""
    error_console.print(f"[red]Error:[/red] {message}")
    sys.exit(1)


def check_date(value: Optional[str], option: str) -> None:
    if value is None:
        return
    try:
        datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        fail(f"Invalid date format for {option}. Use YYYY-MM-DD")


def save_space(backend: Backend, space: dict[str, Any], **changes: Any) -> None:
    backend.call("save_space", {"space": {**space, **changes}})


@click.group()
@click.version_option(version=__version__)
@click.option("--data-dir", help="Custom data directory (skips the daemon)", type=click.Path())
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.pass_context
def cli(ctx: click.Context, data_dir: Optional[str], no_color: bool) -> None:
    """Flow - track time spent in apps, grouped into spaces.

    Toggle a space on and the time you spend in its apps is recorded, once
    per second, per app and per day.
    """
    ctx.ensure_object(dict)
    ctx.obj["data_dir"] = data_dir

    if no_color:
        console.no_color = True


cli.add_command(config)
cli.add_command(daemon)


# ============================================================================
# Spaces
# ============================================================================


@cli.group()
def spaces() -> None:
    """Manage tracking spaces."""
    pass


@spaces.command("list")
@click.pass_context
def spaces_list(ctx: click.Context) -> None:
    """List all spaces.

    Example:
        flow spaces list
    """
    try:
        items = get_backend(ctx).call("get_spaces")
    except BackendError as e:
        fail(e)
        return

    if not items:
        console.print("[yellow]No spaces yet. Create one with 'flow spaces create NAME'[/yellow]")
        return

    table = Table(title="Spaces")
    table.add_column("Name", style="cyan")
    table.add_column("Apps", style="white")
    table.add_column("Tracking", style="green")
    table.add_column("Color")
    table.add_column("ID", style="dim")

    for space in items:
        table.add_row(
            space["name"],
            ", ".join(space["apps"]) or "-",
            "●" if space["isActive"] else "",
            f"[{space['color']}]■[/] {space['color']}",
            space["id"],
        )

    console.print(table)


@spaces.command("create")
@click.argument("name")
@click.option("--color", help="Hex color, e.g. #3b82f6 (default: next palette color)")
@click.option("-a", "--app", "apps", multiple=True, help="App to track (repeatable)")
@click.pass_context
def spaces_create(ctx: click.Context, name: str, color: Optional[str], apps: tuple[str, ...]) -> None:
    """Create a space.

    Example:
        flow spaces create "Deep Work" -a Code -a Terminal
    """
    backend = get_backend(ctx)
    try:
        space = backend.call("create_space", {"name": name, "color": color})
        if apps:
            save_space(backend, space, apps=list(apps))
    except BackendError as e:
        fail(e)
        return

    console.print(f"[green]✓[/green] Created space: {name}")
    console.print(f"  ID: {space['id']}")
    if apps:
        console.print(f"  Apps: {', '.join(apps)}")


@spaces.command("delete")
@click.argument("space")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
def spaces_delete(ctx: click.Context, space: str, yes: bool) -> None:
    """Delete a space and all of its recorded time.

    Example:
        flow spaces delete "Deep Work" --yes
    """
    backend = get_backend(ctx)
    try:
        target = backend.resolve_space(space)
        if not yes and not click.confirm(
            f"Delete '{target['name']}' and all of its recorded time?"
        ):
            console.print("Cancelled")
            return
        backend.call("delete_space", {"spaceId": target["id"]})
    except BackendError as e:
        fail(e)
        return

    console.print(f"[green]✓[/green] Deleted space: {target['name']}")


@spaces.command("rename")
@click.argument("space")
@click.argument("new_name")
@click.pass_context
def spaces_rename(ctx: click.Context, space: str, new_name: str) -> None:
    """Rename a space."""
    backend = get_backend(ctx)
    try:
        target = backend.resolve_space(space)
        save_space(backend, target, name=new_name)
    except BackendError as e:
        fail(e)
        return

    console.print(f"[green]✓[/green] Renamed '{target['name']}' to '{new_name}'")


@spaces.command("add-app")
@click.argument("space")
@click.argument("app")
@click.pass_context
def spaces_add_app(ctx: click.Context, space: str, app: str) -> None:
    """Add an app to a space.

    Apps match loosely: "chrome" tracks "Google Chrome" and vice versa.

    Example:
        flow spaces add-app "Deep Work" Code
    """
    backend = get_backend(ctx)
    try:
        target = backend.resolve_space(space)
        if app in target["apps"]:
            console.print(f"[yellow]{app} is already in {target['name']}[/yellow]")
            return
        save_space(backend, target, apps=target["apps"] + [app])
    except BackendError as e:
        fail(e)
        return

    console.print(f"[green]✓[/green] Added {app} to {target['name']}")


@spaces.command("remove-app")
@click.argument("space")
@click.argument("app")
@click.pass_context
def spaces_remove_app(ctx: click.Context, space: str, app: str) -> None:
    """Remove an app from a space."""
    backend = get_backend(ctx)
    try:
        target = backend.resolve_space(space)
        if app not in target["apps"]:
            fail(f"{app} is not in {target['name']}")
            return
        save_space(backend, target, apps=[a for a in target["apps"] if a != app])
    except BackendError as e:
        fail(e)
        return

    console.print(f"[green]✓[/green] Removed {app} from {target['name']}")


@spaces.command("color")
@click.argument("space")
@click.argument("color")
@click.pass_context
def spaces_color(ctx: click.Context, space: str, color: str) -> None:
    """Change the display color of a space."""
    backend = get_backend(ctx)
    try:
        target = backend.resolve_space(space)
        save_space(backend, target, color=color)
    except BackendError as e:
        fail(e)
        return

    console.print(f"[green]✓[/green] {target['name']} is now [{color}]■[/] {color}")


# ============================================================================
# Tracking
# ============================================================================


@cli.command()
@click.argument("space")
@click.pass_context
def toggle(ctx: click.Context, space: str) -> None:
    """Start or stop tracking a space.

    Starting one space stops every other space.

    Example:
        flow toggle "Deep Work"
    """
    backend = get_backend(ctx)
    try:
        target = backend.resolve_space(space)
        active = backend.call("toggle_tracking", {"spaceId": target["id"]})
    except BackendError as e:
        fail(e)
        return

    if active:
        console.print(f"[green]✓[/green] Tracking: {target['name']}")
        if not backend.remote:
            console.print("[dim]Daemon not running; time is recorded once it starts[/dim]")
    else:
        console.print(f"[green]✓[/green] Stopped tracking: {target['name']}")


@cli.command()
@click.pass_context
def stop(ctx: click.Context) -> None:
    """Stop tracking every space."""
    try:
        get_backend(ctx).call("stop_all_tracking")
    except BackendError as e:
        fail(e)
        return

    console.print("[green]✓[/green] Tracking stopped")


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show what is being tracked right now."""
    backend = get_backend(ctx)
    try:
        items = backend.call("get_spaces")
        session = backend.call("get_current_session_info")
    except BackendError as e:
        fail(e)
        return

    active = next((s for s in items if s["isActive"]), None)
    if active is None:
        console.print("[yellow]Not tracking[/yellow]")
        return

    lines = [f"[bold]{active['name']}[/bold]"]
    if backend.remote and session.get("isTracking"):
        lines.append(f"Session: {format_live_duration(session['sessionDuration'])}")
    elif not backend.remote:
        lines.append("[dim]Daemon not running[/dim]")
    lines.append(f"Apps: {', '.join(active['apps']) or '-'}")

    console.print(Panel("\n".join(lines), title="Tracking", border_style="green"))


# ============================================================================
# Apps
# ============================================================================


@cli.group()
def apps() -> None:
    """Inspect the focused application."""
    pass


@apps.command("active")
@click.pass_context
def apps_active(ctx: click.Context) -> None:
    """Show the focused application."""
    try:
        app = get_backend(ctx).call("get_active_window_info")
    except BackendError as e:
        fail(e)
        return

    if app is None:
        console.print("[yellow]No focused application detected[/yellow]")
        return

    console.print(f"{app['name']} [dim](PID {app['processId']})[/dim]")


# ============================================================================
# Entries and reports
# ============================================================================


@cli.command()
@click.option("-s", "--space", help="Space id or name")
@click.option("--from", "from_date", help="First day (YYYY-MM-DD)")
@click.option("--to", "to_date", help="Last day (YYYY-MM-DD)")
@click.pass_context
def entries(
    ctx: click.Context, space: Optional[str], from_date: Optional[str], to_date: Optional[str]
) -> None:
    """List recorded time per space, app and day.

    Example:
        flow entries --space "Deep Work" --from 2026-10-01
    """
    check_date(from_date, "--from")
    check_date(to_date, "--to")

    backend = get_backend(ctx)
    try:
        items = backend.call("get_spaces")
        space_id = backend.resolve_space(space)["id"] if space else None
        rows = backend.call(
            "get_time_entries", {"spaceId": space_id, "dateFrom": from_date, "dateTo": to_date}
        )
    except BackendError as e:
        fail(e)
        return

    if not rows:
        console.print("[yellow]No entries found[/yellow]")
        return

    names = {s["id"]: s["name"] for s in items}
    table = Table(title="Time Entries")
    table.add_column("Date", style="cyan")
    table.add_column("Space", style="green")
    table.add_column("App", style="white")
    table.add_column("Duration", style="magenta", justify="right")

    for row in sorted(rows, key=lambda r: (r["date"], -r["duration"])):
        table.add_row(
            row["date"],
            names.get(row["spaceId"], row["spaceId"]),
            row["appName"],
            format_duration(row["duration"]),
        )

    console.print(table)


@cli.command()
@click.pass_context
def today(ctx: click.Context) -> None:
    """Show today's time per app, across all spaces."""
    try:
        stats = get_backend(ctx).call("get_today_stats")
    except BackendError as e:
        fail(e)
        return

    if not stats:
        console.print("[yellow]No time recorded today[/yellow]")
        return

    table = Table(title="Today")
    table.add_column("App", style="cyan")
    table.add_column("Duration", style="magenta", justify="right")

    for app, seconds in sorted(stats.items(), key=lambda x: (-x[1], x[0])):
        table.add_row(app, format_duration(seconds))

    console.print(table)
    console.print(f"\nTotal: [bold]{format_duration(sum(stats.values()))}[/bold]")


@cli.command()
@click.option(
    "-r",
    "--range",
    "range_name",
    type=click.Choice(list(RANGE_DAYS)),
    default="week",
    help="day = today, week = last 7 days, month = last 30 days",
)
@click.option("-s", "--space", help="Space id or name")
@click.pass_context
def report(ctx: click.Context, range_name: str, space: Optional[str]) -> None:
    """Summarize time by space, app and day.

    Examples:
        flow report
        flow report --range month --space "Deep Work"
    """
    date_from, date_to = date_range(range_name)

    backend = get_backend(ctx)
    try:
        items = backend.call("get_spaces")
        space_id = backend.resolve_space(space)["id"] if space else None
        rows = backend.call(
            "get_time_entries", {"spaceId": space_id, "dateFrom": date_from, "dateTo": date_to}
        )
    except BackendError as e:
        fail(e)
        return

    labels = {"day": "Today", "week": "Last 7 Days", "month": "Last 30 Days"}
    ReportGenerator(console).summary_report(
        [TimeEntry.from_dict(r) for r in rows],
        [TrackingSpace.from_dict(s) for s in items],
        date_from,
        date_to,
        labels[range_name],
    )


# ============================================================================
# Settings
# ============================================================================


@cli.group()
def settings() -> None:
    """Manage user settings."""
    pass


@settings.command("show")
@click.pass_context
def settings_show(ctx: click.Context) -> None:
    """Show user settings."""
    try:
        current = get_backend(ctx).call("get_settings")
    except BackendError as e:
        fail(e)
        return

    console.print(f"Do not disturb: {'on' if current['enableDND'] else 'off'}")
    console.print(f"Muted apps: {', '.join(current['mutedApps']) or '-'}")


def _update_settings(ctx: click.Context, **changes: Any) -> None:
    backend = get_backend(ctx)
    try:
        current = backend.call("get_settings")
        backend.call("save_settings", {"settings": {**current, **changes}})
    except BackendError as e:
        fail(e)


@settings.command("set-dnd")
@click.argument("state", type=click.Choice(["on", "off"]))
@click.pass_context
def settings_set_dnd(ctx: click.Context, state: str) -> None:
    """Turn do-not-disturb on or off."""
    _update_settings(ctx, enableDND=state == "on")
    console.print(f"[green]✓[/green] Do not disturb {state}")


@settings.command("mute")
@click.argument("app")
@click.pass_context
def settings_mute(ctx: click.Context, app: str) -> None:
    """Add an app to the muted list."""
    backend = get_backend(ctx)
    try:
        muted = backend.call("get_settings")["mutedApps"]
    except BackendError as e:
        fail(e)
        return
    if app not in muted:
        _update_settings(ctx, mutedApps=muted + [app])
    console.print(f"[green]✓[/green] Muted {app}")


@settings.command("unmute")
@click.argument("app")
@click.pass_context
def settings_unmute(ctx: click.Context, app: str) -> None:
    """Remove an app from the muted list."""
    backend = get_backend(ctx)
    try:
        muted = backend.call("get_settings")["mutedApps"]
    except BackendError as e:
        fail(e)
        return
    _update_settings(ctx, mutedApps=[a for a in muted if a != app])
    console.print(f"[green]✓[/green] Unmuted {app}")


# ============================================================================
# HTTP API
# ============================================================================


@cli.command()
@click.option("--host", default=None, help="Host address (default: from config)")
@click.option("--port", type=int, default=None, help="Port number (default: from config)")
@click.pass_context
def serve(ctx: click.Context, host: Optional[str], port: Optional[int]) -> None:
    """Run the tracking engine behind the HTTP API.

    Do not run it next to the daemon: both would record the same seconds.

    Examples:
        flow serve
        flow serve --port 9000
    """
    from flow_tracker.api.server import run_server
    from flow_tracker.core.config import ConfigManager

    config = ConfigManager()
    final_host = host or config.get("api.host", "localhost")
    final_port = port or config.get("api.port", 8765)

    console.print(f"[cyan]Flow API on http://{final_host}:{final_port}[/cyan]")
    console.print(f"Docs: http://{final_host}:{final_port}/docs")
    data_dir = ctx.obj.get("data_dir")
    run_server(
        host=final_host,
        port=final_port,
        config=config,
        data_dir=Path(data_dir) if data_dir else None,
    )


if __name__ == "__main__":
    cli(obj={})
