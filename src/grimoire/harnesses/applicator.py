"""Backup, apply, remove and restore of profiles on harness directories.

Every operation runs its filesystem steps sequentially and is not
transactional; a backup taken before apply/remove is the only undo.
"""

from __future__ import annotations

import json
import logging
import shutil
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from grimoire.adapters.base import remove_path
from grimoire.config import get_grimoire_dir
from grimoire.errors import HarnessNotInstalledError, ProfileBackupError, ProfileSwitchError
from grimoire.harnesses.registry import (
    COMMANDS_DIR,
    PROFILE_MARKER_PREFIX,
    SKILLS_DIR,
    HarnessSpec,
    get_harness,
    marker_file_name,
)
from grimoire.jsonio import merge_json_section, write_json
from grimoire.mcp import to_opencode_entry, to_standard_entry
from grimoire.models.profile import (
    ApplyResult,
    CopyReport,
    HarnessId,
    McpServerConfig,
    ProfileBackup,
    utc_now,
)
from grimoire.profiles.store import ProfileStore

logger = logging.getLogger(__name__)

BACKUPS_DIR = "backups"
BACKUP_METADATA_FILE = ".backup-meta.json"

McpWriter = Callable[[Path, list[McpServerConfig]], None]


def _write_claude_code_mcp(root: Path, servers: list[McpServerConfig]) -> None:
    merge_json_section(
        root / ".mcp.json", ("mcpServers",), {s.name: to_standard_entry(s) for s in servers}
    )


def _write_opencode_mcp(root: Path, servers: list[McpServerConfig]) -> None:
    path = root / "opencode.jsonc"
    if not path.exists() and (root / "opencode.json").exists():
        path = root / "opencode.json"
    merge_json_section(path, ("mcp",), {s.name: to_opencode_entry(s) for s in servers}, jsonc=True)


def _write_amp_mcp(root: Path, servers: list[McpServerConfig]) -> None:
    merge_json_section(
        root / "settings.json",
        ("amp", "mcpServers"),
        {s.name: to_standard_entry(s) for s in servers},
        jsonc=True,
    )


def _write_cursor_mcp(root: Path, servers: list[McpServerConfig]) -> None:
    merge_json_section(
        root / "mcp.json", ("mcpServers",), {s.name: to_standard_entry(s) for s in servers}
    )


def _write_gemini_mcp(root: Path, servers: list[McpServerConfig]) -> None:
    merge_json_section(
        root / "settings.json", ("mcpServers",), {s.name: to_standard_entry(s) for s in servers}
    )


MCP_WRITERS: dict[HarnessId, McpWriter] = {
    HarnessId.CLAUDE_CODE: _write_claude_code_mcp,
    HarnessId.OPENCODE: _write_opencode_mcp,
    HarnessId.AMP: _write_amp_mcp,
    HarnessId.CURSOR: _write_cursor_mcp,
    HarnessId.GEMINI: _write_gemini_mcp,
}


def _backup_dir_name(timestamp: datetime) -> str:
    iso = timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return iso.replace(":", "-").replace(".", "-")


def _copy_entry(source: Path, destination: Path) -> None:
    """Copy a file or directory tree, replacing whatever is at the destination."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    remove_path(destination)
    if source.is_dir():
        shutil.copytree(source, destination, symlinks=True)
    else:
        shutil.copy2(source, destination)


class HarnessApplicator:
    """Applies profiles to harness config directories."""

    def __init__(
        self,
        store: ProfileStore | None = None,
        backups_dir: Path | None = None,
        profile_marker: bool = True,
    ) -> None:
        self.store = store or ProfileStore()
        self._backups_dir = backups_dir
        self.profile_marker = profile_marker

    @property
    def backups_dir(self) -> Path:
        return self._backups_dir or get_grimoire_dir() / BACKUPS_DIR

    def _require_installed(self, harness_id: HarnessId | str) -> HarnessSpec:
        harness = get_harness(harness_id)
        if not harness.is_installed():
            raise HarnessNotInstalledError(harness.id.value, harness.config_path)
        return harness

    def create_backup(
        self, harness_id: HarnessId | str, profile_name: str, reason: str | None = None
    ) -> tuple[ProfileBackup, CopyReport]:
        """
        Back up the harness's allowlisted files before a destructive write.

        Args:
            harness_id: Harness to back up
            profile_name: Profile the backup is taken for
            reason: Free-form reason stored in the sidecar (e.g. "apply")

        Returns:
            The backup metadata and a per-entry copy report.

        Raises:
            HarnessNotInstalledError: If the harness directory does not exist.
            ProfileBackupError: If the backup directory or sidecar cannot be written.
        """
        harness = self._require_installed(harness_id)
        root = harness.config_path
        timestamp = utc_now()

        harness_backups = self.backups_dir / harness.id.value
        backup_dir = harness_backups / _backup_dir_name(timestamp)
        suffix = 1
        while backup_dir.exists():
            backup_dir = harness_backups / f"{_backup_dir_name(timestamp)}-{suffix}"
            suffix += 1

        try:
            backup_dir.mkdir(parents=True)
        except OSError as e:
            raise ProfileBackupError(f"Failed to create backup directory {backup_dir}: {e}") from e

        report = CopyReport()
        for entry in harness.backup_entries:
            source = root / entry
            if not source.exists():
                report.record(entry, "skipped", "not present")
                continue
            try:
                _copy_entry(source, backup_dir / entry)
            except OSError as e:
                logger.warning(f"Failed to back up {source}: {e}")
                report.record(entry, "failed", str(e))
            else:
                report.record(entry, "copied")

        backup = ProfileBackup(
            harness_id=harness.id,
            profile_name=profile_name,
            timestamp=timestamp,
            path=str(backup_dir),
            reason=reason,
        )
        try:
            write_json(
                backup_dir / BACKUP_METADATA_FILE,
                backup.model_dump(mode="json", by_alias=True, exclude_none=True),
            )
        except OSError as e:
            raise ProfileBackupError(f"Failed to write backup metadata in {backup_dir}: {e}") from e

        logger.info(f"Backed up {harness.id.value} to {backup_dir}")
        return backup, report

    def apply(
        self,
        profile_name: str,
        harness_id: HarnessId | str,
        skip_backup: bool = False,
        create_marker: bool = True,
    ) -> ApplyResult:
        """
        Copy a profile's skills, commands and MCP servers into a harness.

        Missing skill or command sources are skipped and reported.

        Raises:
            HarnessNotInstalledError: If the harness directory does not exist.
            ProfileNotFoundError: If the profile does not exist.
            ProfileBackupError: If the pre-apply backup fails.
            ProfileSwitchError: If MCP servers or the marker file cannot be written.
        """
        harness = self._require_installed(harness_id)
        profile = self.store.load(profile_name)
        root = harness.config_path
        result = ApplyResult(harness_id=harness.id)

        if not skip_backup:
            result.backup, result.backup_report = self.create_backup(
                harness.id, profile_name, reason="apply"
            )

        for skill in profile.skills:
            self._copy_into(
                self.store.skills_dir(profile_name) / skill,
                root / SKILLS_DIR / skill,
                f"{SKILLS_DIR}/{skill}",
                result.report,
            )
        for command in profile.commands:
            self._copy_into(
                self.store.commands_dir(profile_name) / f"{command}.md",
                root / COMMANDS_DIR / f"{command}.md",
                f"{COMMANDS_DIR}/{command}.md",
                result.report,
            )

        if profile.mcp_servers:
            self._apply_mcp_servers(harness.id, root, profile.mcp_servers, result)

        if create_marker and self.profile_marker:
            self._write_marker(root, profile_name)

        logger.info(
            f"Applied profile {profile_name} to {harness.id.value}: "
            f"{len(result.report.copied)} copied, {len(result.report.skipped)} skipped, "
            f"{len(result.report.failed)} failed"
        )
        return result

    def remove(
        self, profile_name: str, harness_id: HarnessId | str, skip_backup: bool = False
    ) -> ApplyResult:
        """Delete a profile's skills, commands and marker from a harness."""
        harness = self._require_installed(harness_id)
        profile = self.store.load(profile_name)
        root = harness.config_path
        result = ApplyResult(harness_id=harness.id)

        if not skip_backup:
            result.backup, result.backup_report = self.create_backup(
                harness.id, profile_name, reason="remove"
            )

        targets = [f"{SKILLS_DIR}/{skill}" for skill in profile.skills]
        targets += [f"{COMMANDS_DIR}/{command}.md" for command in profile.commands]
        for entry in targets:
            try:
                removed = remove_path(root / entry)
            except OSError as e:
                logger.warning(f"Failed to remove {root / entry}: {e}")
                result.report.record(entry, "failed", str(e))
                continue
            result.report.record(entry, "removed" if removed else "skipped")

        marker = root / marker_file_name(profile_name)
        if marker.exists():
            try:
                marker.unlink()
            except OSError as e:
                raise ProfileSwitchError(f"Failed to remove marker {marker}: {e}") from e

        logger.info(f"Removed profile {profile_name} from {harness.id.value}")
        return result

    def list_backups(self, harness_id: HarnessId | str) -> list[ProfileBackup]:
        """Return backups for a harness, newest first."""
        harness = get_harness(harness_id)
        harness_backups = self.backups_dir / harness.id.value
        if not harness_backups.is_dir():
            return []

        backups: list[ProfileBackup] = []
        for meta_path in harness_backups.glob(f"*/{BACKUP_METADATA_FILE}"):
            try:
                data = json.loads(meta_path.read_text(encoding="utf-8"))
                backups.append(ProfileBackup.model_validate(data))
            except (OSError, json.JSONDecodeError, ValidationError) as e:
                logger.warning(f"Ignoring unreadable backup metadata {meta_path}: {e}")
        return sorted(backups, key=lambda backup: backup.timestamp, reverse=True)

    def restore_backup(self, harness_id: HarnessId | str, backup_path: Path | str) -> CopyReport:
        """
        Restore allowlisted entries from a backup directory.

        Directory entries replace the live directory wholesale.

        Raises:
            ProfileSwitchError: If the backup path does not exist.
        """
        harness = get_harness(harness_id)
        backup_path = Path(backup_path)
        if not backup_path.is_dir():
            raise ProfileSwitchError(f"Backup not found: {backup_path}")

        root = harness.config_path
        report = CopyReport()
        for entry in harness.backup_entries:
            source = backup_path / entry
            if not source.exists():
                report.record(entry, "skipped", "not in backup")
                continue
            try:
                _copy_entry(source, root / entry)
            except OSError as e:
                logger.warning(f"Failed to restore {entry} from {backup_path}: {e}")
                report.record(entry, "failed", str(e))
            else:
                report.record(entry, "copied")

        logger.info(f"Restored {harness.id.value} from {backup_path}")
        return report

    def read_marker(self, harness_id: HarnessId | str) -> str | None:
        """Return the name of the profile last applied to a harness, if any."""
        root = get_harness(harness_id).config_path
        if not root.is_dir():
            return None
        markers = sorted(
            entry.name for entry in root.iterdir() if entry.name.startswith(PROFILE_MARKER_PREFIX)
        )
        if not markers:
            return None
        return markers[0][len(PROFILE_MARKER_PREFIX) :]

    def _copy_into(self, source: Path, destination: Path, entry: str, report: CopyReport) -> None:
        if not source.exists():
            report.record(entry, "skipped", "not in profile storage")
            return
        try:
            _copy_entry(source, destination)
        except OSError as e:
            logger.warning(f"Failed to copy {source} to {destination}: {e}")
            report.record(entry, "failed", str(e))
        else:
            report.record(entry, "copied")

    def _apply_mcp_servers(
        self,
        harness_id: HarnessId,
        root: Path,
        servers: list[McpServerConfig],
        result: ApplyResult,
    ) -> None:
        writer = MCP_WRITERS.get(harness_id)
        if writer is None:
            message = f"MCP servers are not supported for {harness_id.value}; skipped {len(servers)}"
            logger.warning(message)
            result.warnings.append(message)
            return
        try:
            writer(root, servers)
        except (OSError, ValueError) as e:
            raise ProfileSwitchError(
                f"Failed to write MCP servers for {harness_id.value}: {e}"
            ) from e

    def _write_marker(self, root: Path, profile_name: str) -> None:
        try:
            for entry in root.iterdir():
                if entry.name.startswith(PROFILE_MARKER_PREFIX) and entry.is_file():
                    entry.unlink()
            (root / marker_file_name(profile_name)).write_text(
                f"Applied by grimoire at {utc_now().isoformat()}\n", encoding="utf-8"
            )
        except OSError as e:
            raise ProfileSwitchError(f"Failed to write profile marker in {root}: {e}") from e
