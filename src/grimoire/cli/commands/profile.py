"""Profile CLI commands."""

from __future__ import annotations

from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from grimoire.errors import GrimoireError
from grimoire.harnesses.registry import parse_harness_list
from grimoire.models.profile import ApplyResult, HarnessId, ProfileDiff
from grimoire.profiles.service import ProfileService

profile_app = typer.Typer(name="profile", help="Manage harness-agnostic configuration profiles")
console = Console()

CHANGE_STYLES = {"added": "green", "removed": "red", "modified": "yellow"}


def _fail(error: Exception) -> NoReturn:
    console.print(f"[red]{escape(str(error))}[/red]")
    raise typer.Exit(code=1)


def _service() -> ProfileService:
    try:
        return ProfileService()
    except GrimoireError as e:
        _fail(e)


def _format_harnesses(harnesses: list[HarnessId]) -> str:
    return ", ".join(harness.value for harness in harnesses) if harnesses else "(none)"


def _parse_harnesses(value: str) -> list[HarnessId]:
    try:
        harnesses = parse_harness_list(value)
    except GrimoireError as e:
        _fail(e)
    if not harnesses:
        console.print(f"[red]No valid harnesses in: {value}[/red]")
        raise typer.Exit(code=1)
    return harnesses


def _render_results(action: str, results: list[ApplyResult]) -> None:
    for result in results:
        report = result.report
        line = (
            f"[green]✓[/green] {action} [cyan]{result.harness_id.value}[/cyan]: "
            f"{len(report.copied) + len(report.removed)} done, {len(report.skipped)} skipped"
        )
        if report.failed:
            line += f", [red]{len(report.failed)} failed[/red]"
        console.print(line)
        if result.backup:
            console.print(f"  Backup: [dim]{result.backup.path}[/dim]")
        for outcome in report.outcomes:
            if outcome.status == "failed":
                console.print(f"  [red]failed[/red] {outcome.entry}: {outcome.reason}")
        for warning in result.warnings:
            console.print(f"  [yellow]{warning}[/yellow]")


def _render_diff(diff: ProfileDiff, title: str) -> None:
    if diff.identical:
        console.print(f"{title}: [green]identical[/green]")
        return

    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Category", style="cyan", no_wrap=True)
    table.add_column("Item", style="white")
    table.add_column("Change")
    table.add_column("Details", style="dim")
    for item in diff.differences:
        style = CHANGE_STYLES[item.change_type]
        table.add_row(
            item.category, item.item, f"[{style}]{item.change_type}[/{style}]", item.details or ""
        )
    console.print(table)


@profile_app.command("list")
def profile_list() -> None:
    """List all profiles."""
    try:
        profiles = _service().list()
    except GrimoireError as e:
        _fail(e)

    if not profiles:
        console.print("No profiles configured.")
        console.print("Use 'grimoire profile create <name>' to create one.")
        return

    table = Table(title="Profiles", show_header=True, header_style="bold magenta")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Skills", style="green", justify="right")
    table.add_column("Cmds", style="green", justify="right")
    table.add_column("MCP", style="green", justify="right")
    table.add_column("Applied To", style="yellow")
    table.add_column("Description", style="dim")
    for item in profiles:
        table.add_row(
            item.name,
            str(item.skill_count),
            str(item.command_count),
            str(item.mcp_server_count),
            _format_harnesses(item.applied_to),
            item.description or "",
        )
    console.print(table)


@profile_app.command("show")
def profile_show(name: str = typer.Argument(..., help="Profile name")) -> None:
    """Show profile details."""
    try:
        profile = _service().get(name)
    except GrimoireError as e:
        _fail(e)

    metadata = profile.metadata
    lines = [
        f"[bold green]Name:[/bold green] {metadata.name}",
        f"[bold cyan]Description:[/bold cyan] {metadata.description or '-'}",
        f"[bold]Created:[/bold] {metadata.created.isoformat()}",
        f"[bold]Updated:[/bold] {metadata.updated.isoformat()}",
        f"[bold yellow]Applied to:[/bold yellow] {_format_harnesses(metadata.applied_to)}",
    ]
    if metadata.tags:
        lines.append(f"[bold]Tags:[/bold] {', '.join(metadata.tags)}")
    if profile.default_model:
        lines.append(f"[bold]Model:[/bold] {profile.default_model}")
    if metadata.theme:
        lines.append(f"[bold]Theme:[/bold] {metadata.theme}")

    for label, values in (("Skills", profile.skills), ("Commands", profile.commands)):
        lines.append("")
        lines.append(f"[bold]{label} ({len(values)}):[/bold]")
        if values:
            lines.extend(f"  - {value}" for value in values)
        else:
            lines.append("  (none)")

    lines.append("")
    lines.append(f"[bold]MCP Servers ({len(profile.mcp_servers)}):[/bold]")
    if profile.mcp_servers:
        for server in profile.mcp_servers:
            status = "enabled" if server.enabled else "disabled"
            lines.append(f"  - {server.name} ({status})")
    else:
        lines.append("  (none)")

    console.print(Panel("\n".join(lines), title=f"Profile: {metadata.name}", border_style="cyan"))


@profile_app.command("create")
def profile_create(
    name: str = typer.Argument(..., help="Profile name (kebab-case)"),
    description: str | None = typer.Option(None, "--desc", help="Profile description"),
    from_harness: str | None = typer.Option(
        None, "--from", help="Seed the profile from a harness's current config"
    ),
) -> None:
    """Create a new profile."""
    try:
        profile = _service().create(name, description=description, from_harness=from_harness)
    except GrimoireError as e:
        _fail(e)

    console.print(f"[green]✓[/green] Created profile [cyan]{profile.metadata.name}[/cyan]")
    if from_harness:
        console.print(
            f"  Extracted {len(profile.skills)} skills, {len(profile.commands)} commands, "
            f"{len(profile.mcp_servers)} MCP servers"
        )


@profile_app.command("delete")
def profile_delete(name: str = typer.Argument(..., help="Profile name")) -> None:
    """Delete a profile."""
    try:
        _service().delete(name)
    except GrimoireError as e:
        _fail(e)
    console.print(f"[green]✓[/green] Deleted profile [cyan]{name}[/cyan]")


@profile_app.command("update")
def profile_update(
    name: str = typer.Argument(..., help="Profile name"),
    description: str | None = typer.Option(None, "--desc", help="New description"),
    tags: list[str] | None = typer.Option(None, "--tag", help="Replace tags (repeatable)"),
) -> None:
    """Update profile metadata."""
    try:
        _service().update(name, description=description, tags=tags or None)
    except GrimoireError as e:
        _fail(e)
    console.print(f"[green]✓[/green] Updated profile [cyan]{name}[/cyan]")


@profile_app.command("apply")
def profile_apply(
    name: str = typer.Argument(..., help="Profile name"),
    harnesses: str | None = typer.Argument(
        None, help="Comma-separated harnesses (default: all installed)"
    ),
    skip_backup: bool = typer.Option(False, "--skip-backup", help="Do not back up first"),
) -> None:
    """Apply a profile to harnesses."""
    service = _service()
    if harnesses:
        targets = _parse_harnesses(harnesses)
    else:
        targets = [info.id for info in service.list_harnesses() if info.installed]
        if not targets:
            console.print("[yellow]No harnesses installed.[/yellow]")
            raise typer.Exit(code=1)

    try:
        results = service.apply(name, list(targets), skip_backup=skip_backup)
    except GrimoireError as e:
        _fail(e)
    _render_results("Applied to", results)


@profile_app.command("remove")
def profile_remove(
    name: str = typer.Argument(..., help="Profile name"),
    harnesses: str = typer.Argument(..., help="Comma-separated harnesses"),
    skip_backup: bool = typer.Option(False, "--skip-backup", help="Do not back up first"),
) -> None:
    """Remove a profile from harnesses."""
    targets = _parse_harnesses(harnesses)
    try:
        results = _service().remove(name, list(targets), skip_backup=skip_backup)
    except GrimoireError as e:
        _fail(e)
    _render_results("Removed from", results)


@profile_app.command("diff")
def profile_diff(
    first: str = typer.Argument(..., help="Profile to compare"),
    second: str | None = typer.Argument(None, help="Profile to compare against"),
    harness: str | None = typer.Option(
        None, "--harness", help="Compare against a harness's live config instead"
    ),
) -> None:
    """Compare two profiles, or a profile with a harness."""
    service = _service()
    try:
        if harness:
            diff = service.diff_with_harness(first, harness)
            title = f"{first} vs {harness}"
        else:
            diff = service.diff(first, second)
            title = f"{first} vs {second or first}"
    except GrimoireError as e:
        _fail(e)
    _render_diff(diff, title)


@profile_app.command("harnesses")
def profile_harnesses() -> None:
    """List supported harnesses and their install status."""
    table = Table(title="Harnesses", show_header=True, header_style="bold magenta")
    table.add_column("Harness", style="cyan", no_wrap=True)
    table.add_column("Status")
    table.add_column("Active Profile", style="yellow")
    table.add_column("Config Path", style="dim")
    for info in _service().list_harnesses():
        status = "[green]installed[/green]" if info.installed else "[yellow]not found[/yellow]"
        table.add_row(info.id.value, status, info.active_profile or "-", info.config_path)
    console.print(table)


@profile_app.command("backups")
def profile_backups(harness: str = typer.Argument(..., help="Harness id")) -> None:
    """List backups for a harness, newest first."""
    try:
        backups = _service().list_backups(harness)
    except GrimoireError as e:
        _fail(e)

    if not backups:
        console.print(f"No backups for {harness}.")
        return

    table = Table(title=f"Backups ({harness})", show_header=True, header_style="bold magenta")
    table.add_column("Timestamp", style="cyan", no_wrap=True)
    table.add_column("Profile", style="green")
    table.add_column("Reason", style="yellow")
    table.add_column("Path", style="dim")
    for backup in backups:
        table.add_row(
            backup.timestamp.isoformat(), backup.profile_name, backup.reason or "-", backup.path
        )
    console.print(table)


@profile_app.command("restore")
def profile_restore(
    harness: str = typer.Argument(..., help="Harness id"),
    backup_path: str = typer.Argument(..., help="Backup directory to restore"),
) -> None:
    """Restore a harness from a backup."""
    try:
        report = _service().restore(harness, backup_path)
    except GrimoireError as e:
        _fail(e)

    console.print(
        f"[green]✓[/green] Restored {len(report.copied)} entries to [cyan]{harness}[/cyan]"
    )
    for outcome in report.outcomes:
        if outcome.status == "failed":
            console.print(f"  [red]failed[/red] {outcome.entry}: {outcome.reason}")
