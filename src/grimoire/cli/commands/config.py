"""Configuration management commands."""

import json

import typer
from rich.console import Console
from rich.table import Table

from grimoire.config import get_config_file, load_config, set_config_value
from grimoire.errors import ConfigError

config_app = typer.Typer(
    name="config",
    help="Manage grimoire configuration",
)
console = Console()


@config_app.command("show")
def config_show() -> None:
    """Display current configuration."""
    try:
        config = load_config()
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from e

    if not config:
        console.print("[yellow]No configuration found.[/yellow]")
        console.print(f"Config file: [dim]{get_config_file()}[/dim]")
        return

    table = Table(title="Grimoire Configuration", show_header=True, header_style="bold magenta")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")

    for key, value in sorted(config.items()):
        rendered = value if isinstance(value, str) else json.dumps(value)
        table.add_row(key, rendered)

    console.print(table)
    console.print(f"\nConfig file: [dim]{get_config_file()}[/dim]")


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Configuration key to set"),
    value: str = typer.Argument(..., help="Value to set"),
) -> None:
    """Set a configuration value.

    Examples:
        grimoire config set profileMarker false
        grimoire config set defaultHarness claude-code
    """
    try:
        set_config_value(key, value)
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from e
    console.print(f"[green]✓[/green] Set [cyan]{key}[/cyan] = [green]{value}[/green]")
    console.print(f"Config file: [dim]{get_config_file()}[/dim]")
