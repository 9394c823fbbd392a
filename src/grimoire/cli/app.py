"""Main CLI application using Typer."""

import typer
from rich.console import Console

from grimoire import __version__
from grimoire.cli.commands.config import config_app
from grimoire.cli.commands.models import models_command
from grimoire.cli.commands.profile import profile_app
from grimoire.cli.commands.skills import skills_app
from grimoire.logging_setup import configure_logging

app = typer.Typer(
    name="grimoire",
    help="Grimoire - Portable profiles and skills for AI coding assistants",
    epilog="Commands exit with status 1 when an operation fails.",
    add_completion=False,
)
console = Console()

# Register subcommands
app.add_typer(profile_app, name="profile")
app.add_typer(skills_app, name="skills")
app.add_typer(config_app, name="config")
app.command("models")(models_command)


def version_callback(value: bool) -> None:
    """Show version information."""
    if value:
        console.print(f"Grimoire version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Grimoire CLI - Sync profiles and skills into your coding assistants."""
    configure_logging(verbose)


if __name__ == "__main__":
    app()
