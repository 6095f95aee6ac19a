"""CLI commands for daemon management."""

import subprocess
import sys
from collections import deque
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from flow_tracker.analysis.reports import format_duration, format_live_duration
from flow_tracker.daemon.ipc import IPCClient, IPCError

console = Console()


def _client() -> IPCClient:
    try:
        return IPCClient()
    except RuntimeError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


def _details(status_data: dict[str, Any]) -> Table:
    """Full status table, including the tick counters."""
    state = status_data.get("state", {})
    session = status_data.get("session", {})
    na = "N/A"

    rows: list[tuple[str, str]] = [
        ("Status", "Running" if status_data.get("running") else "Stopped"),
        ("PID", str(state.get("pid", na))),
        ("Started At", state.get("started_at", na)),
        ("Version", state.get("version", na)),
        ("Store", status_data.get("storeFile", na)),
        ("", ""),
        ("Currently Tracking", "Yes" if state.get("tracking") else "No"),
    ]
    if state.get("tracking"):
        rows.append(("Active Space", state.get("active_space_id") or na))
        rows.append(("Session", format_live_duration(session.get("sessionDuration", 0))))
    rows += [
        ("Last App", state.get("last_app") or na),
        ("Last Tick", state.get("last_tick_at") or na),
        ("", ""),
    ]
    rows += [(f"Ticks: {name}", str(n)) for name, n in state.get("tick_counts", {}).items()]
    rows.append(("Time Recorded", format_duration(state.get("seconds_recorded", 0))))
    rows.append(("Notifications Sent", str(state.get("notifications_sent", 0))))

    table = Table(title="Daemon Status")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    for row in rows:
        table.add_row(*row)
    return table


@click.group()
def daemon() -> None:
    """Manage the Flow background daemon.

    The daemon runs the 1-second polling loop and answers the CLI over a
    Unix socket. Without it, commands still edit spaces and settings, but no
    time is recorded.
    """
    pass


@daemon.command()
@click.option("--foreground", "-f", is_flag=True, help="Stay attached to the terminal")
@click.pass_context
def start(ctx: click.Context, foreground: bool) -> None:
    """Start the background daemon.

    The global --data-dir option sets where the daemon records time.
    """
    from flow_tracker.daemon import DaemonError, FlowDaemon

    if _client().is_daemon_running():
        console.print("[yellow]Daemon is already running[/yellow]")
        return

    mode = "foreground" if foreground else "background"
    console.print(f"[cyan]Starting daemon in {mode}...[/cyan]")

    try:
        data_dir = (ctx.obj or {}).get("data_dir")
        FlowDaemon(data_dir=Path(data_dir) if data_dir else None).start(foreground=foreground)
    except KeyboardInterrupt:
        console.print("\n[yellow]Daemon stopped by user[/yellow]")
    except DaemonError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@daemon.command()
def stop() -> None:
    """Stop the background daemon."""
    console.print("[cyan]Stopping daemon...[/cyan]")
    try:
        _client().call("stop")
    except IPCError as e:
        console.print(f"[red]Error: {e}[/red]")
        console.print("[yellow]Daemon may not be running[/yellow]")
        sys.exit(1)
    console.print("[green]✓[/green] Daemon stopped")


@daemon.command()
@click.option("--verbose", "-v", is_flag=True, help="Show tick statistics")
def status(verbose: bool) -> None:
    """Show daemon status."""
    client = _client()
    if not client.is_daemon_running():
        console.print("[yellow]Daemon is not running[/yellow]")
        return

    try:
        status_data = client.call("status")
    except IPCError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if verbose:
        console.print(_details(status_data))
        return

    state = status_data.get("state", {})
    summary = "\n".join(
        [
            "[green]●[/green] Daemon is running",
            f"  PID: {state.get('pid', 'N/A')}",
            f"  Started: {state.get('started_at', 'N/A')}",
            f"  Tracking: {'Yes' if state.get('tracking') else 'No'}",
        ]
    )
    console.print(Panel(summary, title="Daemon Status"))


@daemon.command()
@click.option("--lines", "-n", default=50, help="Number of log lines to show")
@click.option("--follow", "-f", is_flag=True, help="Follow log output")
def logs(lines: int, follow: bool) -> None:
    """View daemon logs."""
    from flow_tracker.daemon.platform import get_log_file_path

    log_file = get_log_file_path()
    if not log_file.exists():
        console.print("[yellow]No log file found[/yellow]")
        return

    if follow:
        try:
            subprocess.run(["tail", "-f", "-n", str(lines), str(log_file)])
        except KeyboardInterrupt:
            pass
        return

    with open(log_file, encoding="utf-8", errors="replace") as f:
        tail = deque(f, maxlen=lines)
    console.print("".join(tail), end="", markup=False, highlight=False)
