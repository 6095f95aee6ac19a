"""CLI commands for configuration management."""

import json
import shutil
import sys
from typing import Any

import click  # type: ignore[import-not-found]
from rich.console import Console  # type: ignore[import-not-found]
from rich.table import Table  # type: ignore[import-not-found]

from flow_tracker.core.config import ConfigManager

console = Console()
error_console = Console(stderr=True)


def _convert(value: str) -> Any:
    """Convert a command-line string to bool, None, int, float or str."""
    if value.lower() in ("true", "yes", "on"):
        return True
    if value.lower() in ("false", "no", "off"):
        return False
    if value.lower() == "null":
        return None
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value


def _load() -> ConfigManager:
    try:
        return ConfigManager()
    except ValueError as e:
        error_console.print(f"[yellow]Warning:[/yellow] {e}")
        return ConfigManager()


@click.group()  # type: ignore[misc]
def config() -> None:
    """Manage Flow configuration.

    Configuration is stored in ~/.flow/config.yml
    """
    pass


@config.command("show")  # type: ignore[misc]
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")  # type: ignore[misc]
def config_show(as_json: bool) -> None:
    """Show all configuration settings.

    Example:
        flow config show
        flow config show --json
    """
    config_mgr = _load()

    if as_json:
        click.echo(json.dumps(config_mgr.to_dict(), indent=2))
        return

    table = Table(title="Flow Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    for key in config_mgr.get_all_keys():
        table.add_row(key, str(config_mgr.get(key)))

    console.print(table)
    console.print(f"\nConfig file: {config_mgr.config_path}")


@config.command("get")  # type: ignore[misc]
@click.argument("key")  # type: ignore[misc]
def config_get(key: str) -> None:
    """Get a specific configuration value.

    Uses dot notation to access nested values.

    Example:
        flow config get tracking.poll_interval
    """
    value = _load().get(key)

    if value is None:
        error_console.print(f"[red]Error:[/red] Configuration key '{key}' not found")
        sys.exit(1)

    if isinstance(value, (dict, list)):
        click.echo(json.dumps(value, indent=2))
    else:
        click.echo(str(value))


@config.command("set")  # type: ignore[misc]
@click.argument("key")  # type: ignore[misc]
@click.argument("value")  # type: ignore[misc]
def config_set(key: str, value: str) -> None:
    """Set a configuration value.

    Values are converted to booleans ('true'/'false') and numbers where
    possible. The daemon reads its configuration at start.

    Example:
        flow config set notifications.enabled true
        flow config set api.port 9000
    """
    config_mgr = _load()
    converted_value = _convert(value)

    try:
        config_mgr.set(key, converted_value)
        console.print(f"[green]✓[/green] Set {key} = {converted_value}")
    except ValueError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


@config.command("reset")  # type: ignore[misc]
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")  # type: ignore[misc]
def config_reset(yes: bool) -> None:
    """Reset configuration to defaults.

    Example:
        flow config reset --yes
    """
    config_mgr = _load()

    if not yes:
        console.print("[yellow]Warning:[/yellow] This will reset all configuration to defaults.")
        if not click.confirm("Continue?"):
            console.print("Cancelled")
            return

    backup_path = config_mgr.config_path.with_suffix(".yml.backup")
    if config_mgr.config_path.exists():
        shutil.copy(config_mgr.config_path, backup_path)
        console.print(f"Backed up current config to {backup_path}")

    config_mgr.reset()
    console.print("[green]✓[/green] Configuration reset to defaults")


@config.command("path")  # type: ignore[misc]
def config_path() -> None:
    """Show path to configuration file."""
    click.echo(str(_load().config_path))
