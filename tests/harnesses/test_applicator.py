"""Tests for backup, apply, remove and restore on harness directories."""

import json
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import patch

import pytest

from grimoire.errors import (
    HarnessNotInstalledError,
    ProfileBackupError,
    ProfileNotFoundError,
    ProfileSwitchError,
)
from grimoire.harnesses.applicator import BACKUP_METADATA_FILE, HarnessApplicator
from grimoire.models.profile import HarnessId, McpServerConfig, create_empty_profile
from grimoire.profiles.store import ProfileStore


@pytest.fixture
def store(home: Path) -> ProfileStore:
    store = ProfileStore(home / "profiles")
    profile = create_empty_profile("work", "Work setup")
    profile.skills = ["beads", "missing"]
    profile.commands = ["review"]
    profile.mcp_servers = [McpServerConfig(name="beads", command="bd", args=["mcp"])]
    store.save(profile)

    skill_dir = store.skills_dir("work") / "beads"
    skill_dir.mkdir(parents=True)
    (skill_dir / "SKILL.md").write_text("---\nname: beads\ndescription: x\n---\n")
    (store.commands_dir("work") / "review.md").write_text("Review the diff")
    return store


@pytest.fixture
def applicator(store: ProfileStore, home: Path) -> HarnessApplicator:
    return HarnessApplicator(store, backups_dir=home / "backups")


@pytest.fixture
def claude_root(home: Path) -> Path:
    root = home / ".claude"
    root.mkdir()
    (root / "settings.json").write_text('{"model": "opus"}')
    return root


def test_apply_copies_profile_content(applicator: HarnessApplicator, claude_root: Path) -> None:
    result = applicator.apply("work", "claude-code")

    assert (claude_root / "skills" / "beads" / "SKILL.md").exists()
    assert (claude_root / "commands" / "review.md").read_text() == "Review the diff"
    assert (claude_root / "GRIMOIRE_PROFILE_work").exists()

    servers = json.loads((claude_root / ".mcp.json").read_text())["mcpServers"]
    assert servers["beads"] == {"command": "bd", "args": ["mcp"]}

    assert result.harness_id == HarnessId.CLAUDE_CODE
    assert result.report.copied == ["skills/beads", "commands/review.md"]
    assert result.report.skipped == ["skills/missing"]
    assert result.report.failed == []


def test_apply_backs_up_first(applicator: HarnessApplicator, claude_root: Path) -> None:
    result = applicator.apply("work", "claude-code")

    assert result.backup is not None
    assert result.backup.reason == "apply"
    backup_dir = Path(result.backup.path)
    assert json.loads((backup_dir / "settings.json").read_text()) == {"model": "opus"}
    assert not (backup_dir / "skills").exists()
    assert result.backup_report is not None
    assert result.backup_report.copied == ["settings.json"]
    assert "skills" in result.backup_report.skipped


def test_apply_skip_backup(applicator: HarnessApplicator, claude_root: Path, home: Path) -> None:
    result = applicator.apply("work", "claude-code", skip_backup=True)

    assert result.backup is None
    assert not (home / "backups").exists()


def test_apply_to_missing_harness_creates_nothing(
    applicator: HarnessApplicator, home: Path
) -> None:
    with pytest.raises(HarnessNotInstalledError):
        applicator.apply("work", "claude-code")

    assert not (home / "backups").exists()
    assert not (home / ".claude").exists()


def test_apply_missing_profile(applicator: HarnessApplicator, claude_root: Path) -> None:
    with pytest.raises(ProfileNotFoundError):
        applicator.apply("nope", "claude-code")


def test_apply_without_marker(store: ProfileStore, home: Path, claude_root: Path) -> None:
    applicator = HarnessApplicator(store, backups_dir=home / "backups", profile_marker=False)

    applicator.apply("work", "claude-code", skip_backup=True)

    assert not (claude_root / "GRIMOIRE_PROFILE_work").exists()
    assert applicator.read_marker("claude-code") is None


def test_marker_replaces_previous_profile(
    applicator: HarnessApplicator, store: ProfileStore, claude_root: Path
) -> None:
    store.save(create_empty_profile("home"))

    applicator.apply("work", "claude-code", skip_backup=True)
    applicator.apply("home", "claude-code", skip_backup=True)

    assert applicator.read_marker("claude-code") == "home"
    assert not (claude_root / "GRIMOIRE_PROFILE_work").exists()


def test_opencode_mcp_written_to_jsonc(applicator: HarnessApplicator, home: Path) -> None:
    root = home / ".config" / "opencode"
    root.mkdir(parents=True)
    (root / "opencode.jsonc").write_text('{\n  // keep theme\n  "theme": "dark",\n}\n')

    applicator.apply("work", "opencode", skip_backup=True)

    data = json.loads((root / "opencode.jsonc").read_text())
    assert data["theme"] == "dark"
    assert data["mcp"]["beads"]["command"] == ["bd", "mcp"]


def test_harness_without_mcp_writer_warns(applicator: HarnessApplicator, home: Path) -> None:
    (home / ".codex").mkdir()

    result = applicator.apply("work", "codex", skip_backup=True)

    assert len(result.warnings) == 1
    assert "codex" in result.warnings[0]
    assert (home / ".codex" / "skills" / "beads").exists()


def test_remove_deletes_profile_content(applicator: HarnessApplicator, claude_root: Path) -> None:
    applicator.apply("work", "claude-code", skip_backup=True)
    (claude_root / "skills" / "mine").mkdir()

    result = applicator.remove("work", "claude-code")

    assert result.backup is not None
    assert result.backup.reason == "remove"
    assert result.report.removed == ["skills/beads", "commands/review.md"]
    assert result.report.skipped == ["skills/missing"]
    assert not (claude_root / "skills" / "beads").exists()
    assert (claude_root / "skills" / "mine").exists()
    assert not (claude_root / "GRIMOIRE_PROFILE_work").exists()


def test_restore_backup(applicator: HarnessApplicator, claude_root: Path) -> None:
    result = applicator.apply("work", "claude-code")
    assert result.backup is not None
    (claude_root / "settings.json").write_text('{"model": "haiku"}')

    report = applicator.restore_backup("claude-code", result.backup.path)

    assert json.loads((claude_root / "settings.json").read_text()) == {"model": "opus"}
    assert report.copied == ["settings.json"]
    assert ".mcp.json" in report.skipped


def test_restore_missing_backup(applicator: HarnessApplicator, home: Path) -> None:
    with pytest.raises(ProfileSwitchError):
        applicator.restore_backup("claude-code", home / "backups" / "nope")


def test_list_backups_newest_first(applicator: HarnessApplicator, claude_root: Path) -> None:
    older = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)
    newer = datetime(2025, 1, 2, 12, 0, tzinfo=UTC)

    with patch("grimoire.harnesses.applicator.utc_now", side_effect=[older, newer]):
        applicator.create_backup("claude-code", "work")
        applicator.create_backup("claude-code", "home")

    backups = applicator.list_backups("claude-code")

    assert [backup.profile_name for backup in backups] == ["home", "work"]
    assert backups[0].timestamp == newer
    assert Path(backups[1].path).name == "2025-01-01T12-00-00-000Z"


def test_list_backups_empty(applicator: HarnessApplicator) -> None:
    assert applicator.list_backups("gemini") == []


def test_backup_dir_failure_aborts_apply(
    applicator: HarnessApplicator, claude_root: Path, home: Path
) -> None:
    (home / "backups").write_text("not a directory")

    with pytest.raises(ProfileBackupError, match="backup directory"):
        applicator.apply("work", "claude-code")

    assert not (claude_root / "GRIMOIRE_PROFILE_work").exists()
    assert not (claude_root / "skills").exists()


def test_backup_sidecar_failure(
    applicator: HarnessApplicator, claude_root: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _fail_write(path, data):
        raise OSError("disk full")

    monkeypatch.setattr("grimoire.harnesses.applicator.write_json", _fail_write)

    with pytest.raises(ProfileBackupError, match="disk full"):
        applicator.create_backup("claude-code", "work")


def test_backup_entry_failure_is_reported(
    applicator: HarnessApplicator, claude_root: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """A file that cannot be copied is recorded and the backup still completes."""

    def _fail_copy(source, destination, **kwargs):
        raise PermissionError(f"cannot read {source}")

    monkeypatch.setattr("grimoire.harnesses.applicator.shutil.copy2", _fail_copy)

    backup, report = applicator.create_backup("claude-code", "work", reason="apply")

    assert report.failed == ["settings.json"]
    assert report.copied == []
    backup_dir = Path(backup.path)
    assert not (backup_dir / "settings.json").exists()
    meta = json.loads((backup_dir / BACKUP_METADATA_FILE).read_text())
    assert meta["profileName"] == "work"
    assert meta["reason"] == "apply"
