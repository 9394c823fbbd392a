"""Skills CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from grimoire.errors import GrimoireError
from grimoire.models.skill import AgentType, InstallScope
from grimoire.skills.engine import SkillEngine

skills_app = typer.Typer(name="skills", help="Cache skills and enable them in projects")
console = Console()
PATH_OPTION = typer.Option(Path("."), "--path", "-p", help="Project directory")


def _fail(error: Exception) -> NoReturn:
    console.print(f"[red]{escape(str(error))}[/red]")
    raise typer.Exit(code=1)


def _engine() -> SkillEngine:
    return SkillEngine()


@skills_app.command("init")
def skills_init(
    path: Path = PATH_OPTION,
    agent: AgentType | None = typer.Option(None, "--agent", help="Agent (default: detect)"),
) -> None:
    """Initialize a project for skills."""
    try:
        state = _engine().init_project(path.resolve(), agent)
    except GrimoireError as e:
        _fail(e)
    console.print(
        f"[green]✓[/green] Initialized [cyan]{path.resolve()}[/cyan] for [cyan]{state.agent.value}[/cyan]"
    )


@skills_app.command("add")
def skills_add(
    source: Path = typer.Argument(..., help="Local skill directory containing SKILL.md"),
    version: str | None = typer.Option(None, "--version", help="Version label"),
) -> None:
    """Add a skill to the local cache."""
    try:
        skill = _engine().cache.add_local(source, version=version)
    except GrimoireError as e:
        _fail(e)
    console.print(f"[green]✓[/green] Cached skill [cyan]{skill.name}[/cyan]")


@skills_app.command("list")
def skills_list(path: Path = PATH_OPTION) -> None:
    """List cached skills and whether they are enabled in the project."""
    engine = _engine()
    try:
        cached = engine.cache.list_cached()
        enabled = set(engine.list_enabled(path.resolve()))
    except GrimoireError as e:
        _fail(e)

    if not cached:
        console.print("No cached skills. Add one with 'grimoire skills add <path>'.")
        return

    table = Table(title="Skills", show_header=True, header_style="bold magenta")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Enabled", style="green")
    table.add_column("Description", style="dim")
    for skill in cached:
        table.add_row(
            skill.name,
            "yes" if skill.name in enabled else "-",
            skill.manifest.description.splitlines()[0][:60],
        )
    console.print(table)


@skills_app.command("enable")
def skills_enable(
    name: str = typer.Argument(..., help="Skill name"),
    path: Path = PATH_OPTION,
    global_scope: bool = typer.Option(False, "--global", help="Install to the agent's global dir"),
    link: bool = typer.Option(False, "--link", help="Symlink from the global install"),
) -> None:
    """Enable a cached skill in the project."""
    scope = InstallScope.GLOBAL if global_scope else InstallScope.PROJECT
    try:
        result = _engine().enable(path.resolve(), name, scope=scope, link=link)
    except GrimoireError as e:
        _fail(e)

    actions = []
    if result.linked:
        actions.append("linked")
    elif result.skill_file_copied:
        actions.append("copied")
    if result.injected:
        actions.append("injected")
    if result.plugin_installed:
        actions.append("plugin installed")
    if result.mcp_configured:
        actions.append("MCP configured")
    how = ", ".join(actions) or "no changes"
    console.print(f"[green]✓[/green] Enabled [cyan]{name}[/cyan] ({how})")


@skills_app.command("disable")
def skills_disable(
    name: str = typer.Argument(..., help="Skill name"),
    path: Path = PATH_OPTION,
) -> None:
    """Disable a skill in the project."""
    try:
        _engine().disable(path.resolve(), name)
    except GrimoireError as e:
        _fail(e)
    console.print(f"[green]✓[/green] Disabled [cyan]{name}[/cyan]")


@skills_app.command("remove")
def skills_remove(name: str = typer.Argument(..., help="Skill name")) -> None:
    """Remove a skill from the local cache."""
    try:
        _engine().cache.remove(name)
    except GrimoireError as e:
        _fail(e)
    console.print(f"[green]✓[/green] Removed [cyan]{name}[/cyan] from cache")
