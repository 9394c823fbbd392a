"""Model listing command."""

from __future__ import annotations

import anyio
import typer
from rich.console import Console
from rich.table import Table

from grimoire.errors import GrimoireError
from grimoire.providers import ProviderModels, list_models, load_providers

console = Console()


def models_command() -> None:
    """List models offered by the configured LLM providers."""
    try:
        providers = load_providers()
    except GrimoireError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from e

    if not providers:
        console.print("[yellow]No providers configured.[/yellow] Add a 'providers' list with:")
        console.print('  grimoire config set providers \'[{"name": "local", "kind": "ollama"}]\'')
        raise typer.Exit(code=1)

    async def _list() -> list[ProviderModels]:
        return await list_models(providers)

    try:
        results = anyio.run(_list)
    except GrimoireError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from e

    table = Table(title="Models", show_header=True, header_style="bold magenta")
    table.add_column("Provider", style="cyan", no_wrap=True)
    table.add_column("Model", style="green")
    for result in results:
        for model in result.models:
            table.add_row(result.provider, model)
    console.print(table)
