"""Tests for profile CLI commands."""

from pathlib import Path

from typer.testing import CliRunner

from grimoire.cli.app import app

runner = CliRunner()


def test_version() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert "Grimoire version" in result.stdout


def test_help_documents_exit_status() -> None:
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    assert "exit with status 1" in result.stdout


def test_profile_create_and_list(home: Path) -> None:
    result = runner.invoke(app, ["profile", "create", "work", "--desc", "Work setup"])
    assert result.exit_code == 0
    assert "Created profile" in result.stdout

    result = runner.invoke(app, ["profile", "list"])
    assert result.exit_code == 0
    assert "work" in result.stdout


def test_profile_list_empty(home: Path) -> None:
    result = runner.invoke(app, ["profile", "list"])

    assert result.exit_code == 0
    assert "No profiles configured" in result.stdout


def test_profile_create_invalid_name(home: Path) -> None:
    result = runner.invoke(app, ["profile", "create", "Bad_Name"])

    assert result.exit_code == 1
    assert "Invalid profile name" in result.stdout


def test_profile_show_missing(home: Path) -> None:
    result = runner.invoke(app, ["profile", "show", "nope"])

    assert result.exit_code == 1
    assert "Profile not found" in result.stdout


def test_profile_show(home: Path) -> None:
    runner.invoke(app, ["profile", "create", "work"])

    result = runner.invoke(app, ["profile", "show", "work"])

    assert result.exit_code == 0
    assert "Skills (0)" in result.stdout
    assert "MCP Servers (0)" in result.stdout


def test_profile_apply_and_remove(home: Path) -> None:
    (home / ".claude").mkdir()
    runner.invoke(app, ["profile", "create", "work"])

    result = runner.invoke(app, ["profile", "apply", "work", "claude"])
    assert result.exit_code == 0
    assert "claude-code" in result.stdout
    assert (home / ".claude" / "GRIMOIRE_PROFILE_work").exists()

    result = runner.invoke(app, ["profile", "remove", "work", "claude-code", "--skip-backup"])
    assert result.exit_code == 0
    assert not (home / ".claude" / "GRIMOIRE_PROFILE_work").exists()


def test_profile_apply_defaults_to_installed(home: Path) -> None:
    (home / ".gemini").mkdir()
    runner.invoke(app, ["profile", "create", "work"])

    result = runner.invoke(app, ["profile", "apply", "work", "--skip-backup"])

    assert result.exit_code == 0
    assert (home / ".gemini" / "GRIMOIRE_PROFILE_work").exists()


def test_profile_apply_unknown_harness(home: Path) -> None:
    runner.invoke(app, ["profile", "create", "work"])

    result = runner.invoke(app, ["profile", "apply", "work", "vscode"])

    assert result.exit_code == 1
    assert "Unknown harness" in result.stdout


def test_profile_apply_not_installed(home: Path) -> None:
    runner.invoke(app, ["profile", "create", "work"])

    result = runner.invoke(app, ["profile", "apply", "work", "cursor"])

    assert result.exit_code == 1
    assert "Harness not installed" in result.stdout


def test_profile_diff_identical(home: Path) -> None:
    runner.invoke(app, ["profile", "create", "work"])
    runner.invoke(app, ["profile", "create", "home"])

    result = runner.invoke(app, ["profile", "diff", "work", "home"])

    assert result.exit_code == 0
    assert "identical" in result.stdout


def test_profile_harnesses(home: Path) -> None:
    (home / ".claude").mkdir()

    result = runner.invoke(app, ["profile", "harnesses"])

    assert result.exit_code == 0
    assert "claude-code" in result.stdout
    assert "installed" in result.stdout


def test_profile_update_and_delete(home: Path) -> None:
    runner.invoke(app, ["profile", "create", "work"])

    result = runner.invoke(app, ["profile", "update", "work", "--desc", "Changed", "--tag", "x"])
    assert result.exit_code == 0

    result = runner.invoke(app, ["profile", "delete", "work"])
    assert result.exit_code == 0
    assert not (home / ".grimoire" / "profiles" / "work").exists()


def test_profile_backups_empty(home: Path) -> None:
    result = runner.invoke(app, ["profile", "backups", "claude-code"])

    assert result.exit_code == 0
    assert "No backups" in result.stdout
