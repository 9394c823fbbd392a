"""Profile service - CRUD over profiles and application to harnesses."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from grimoire.config import load_profile_config
from grimoire.errors import (
    InvalidProfileNameError,
    ProfileAlreadyExistsError,
    ProfileExtractionError,
)
from grimoire.harnesses import extractor
from grimoire.harnesses.applicator import HarnessApplicator
from grimoire.harnesses.registry import (
    COMMANDS_DIR,
    HARNESSES,
    SKILLS_DIR,
    get_harness_path,
    resolve_harness,
)
from grimoire.models.profile import (
    ApplyResult,
    CopyReport,
    HarnessId,
    HarnessInfo,
    Profile,
    ProfileBackup,
    ProfileDiff,
    ProfileListItem,
    create_empty_profile,
    utc_now,
    validate_profile_name,
)
from grimoire.profiles.diff import diff_profiles, diff_with_config
from grimoire.profiles.store import ProfileStore

logger = logging.getLogger(__name__)


class ProfileService:
    """Service for managing profiles and applying them to harnesses."""

    def __init__(
        self,
        store: ProfileStore | None = None,
        applicator: HarnessApplicator | None = None,
    ) -> None:
        self.store = store or ProfileStore()
        if applicator is None:
            applicator = HarnessApplicator(
                self.store, profile_marker=load_profile_config().profile_marker
            )
        self.applicator = applicator

    def list(self) -> list[ProfileListItem]:
        """List all profiles sorted by name."""
        items = []
        for name in self.store.list_names():
            profile = self.store.load(name)
            items.append(
                ProfileListItem(
                    name=profile.metadata.name,
                    description=profile.metadata.description,
                    skill_count=len(profile.skills),
                    command_count=len(profile.commands),
                    mcp_server_count=len(profile.mcp_servers),
                    applied_to=list(profile.metadata.applied_to),
                    updated=profile.metadata.updated,
                )
            )
        return items

    def get(self, name: str) -> Profile:
        return self.store.load(name)

    def create(
        self,
        name: str,
        description: str | None = None,
        from_harness: HarnessId | str | None = None,
    ) -> Profile:
        """
        Create a profile, optionally seeded from a harness's live config.

        Args:
            name: Kebab-case profile name
            description: Optional description
            from_harness: Harness to extract skills, commands and MCP servers from

        Returns:
            The created profile.

        Raises:
            InvalidProfileNameError: If the name is not valid kebab-case.
            ProfileAlreadyExistsError: If the profile exists.
            UnknownHarnessError: If from_harness is not a known harness.
            HarnessNotInstalledError: If from_harness has no config directory.
        """
        reason = validate_profile_name(name)
        if reason:
            raise InvalidProfileNameError(name, reason)
        if self.store.exists(name):
            raise ProfileAlreadyExistsError(name)

        if from_harness is None:
            profile = create_empty_profile(name, description)
            self.store.save(profile)
        else:
            harness = resolve_harness(from_harness)
            profile = extractor.create_profile_from_harness(name, harness, description)
            self.store.save(profile)
            self._import_harness_content(profile, harness)

        logger.info(f"Created profile {name}")
        return profile

    def delete(self, name: str) -> None:
        self.store.delete(name)
        logger.info(f"Deleted profile {name}")

    def update(
        self, name: str, description: str | None = None, tags: list[str] | None = None
    ) -> Profile:
        """Update profile metadata; always refreshes the updated timestamp."""
        profile = self.store.load(name)
        if description is not None:
            profile.metadata.description = description
        if tags is not None:
            profile.metadata.tags = list(dict.fromkeys(tags))
        profile.metadata.updated = utc_now()
        self.store.save(profile)
        return profile

    def apply(
        self, name: str, harnesses: list[HarnessId | str], skip_backup: bool = False
    ) -> list[ApplyResult]:
        """
        Apply a profile to each harness in order.

        Harnesses applied before a failure stay recorded in ``applied_to``.

        Raises:
            ProfileNotFoundError: If the profile does not exist.
            UnknownHarnessError: If a harness id is invalid.
            HarnessNotInstalledError: If a harness has no config directory.
        """
        profile = self.store.load(name)
        targets = [resolve_harness(harness) for harness in harnesses]

        results: list[ApplyResult] = []
        try:
            for harness in targets:
                results.append(self.applicator.apply(name, harness, skip_backup=skip_backup))
        finally:
            if results:
                applied = [result.harness_id for result in results]
                profile.metadata.applied_to = list(
                    dict.fromkeys([*profile.metadata.applied_to, *applied])
                )
                profile.metadata.updated = utc_now()
                self.store.save(profile)
        return results

    def remove(
        self, name: str, harnesses: list[HarnessId | str], skip_backup: bool = False
    ) -> list[ApplyResult]:
        """Remove a profile from each harness and drop them from ``applied_to``."""
        profile = self.store.load(name)
        targets = [resolve_harness(harness) for harness in harnesses]

        results: list[ApplyResult] = []
        try:
            for harness in targets:
                results.append(self.applicator.remove(name, harness, skip_backup=skip_backup))
        finally:
            if results:
                removed = {result.harness_id for result in results}
                profile.metadata.applied_to = [
                    harness for harness in profile.metadata.applied_to if harness not in removed
                ]
                profile.metadata.updated = utc_now()
                self.store.save(profile)
        return results

    def get_applied_harnesses(self, name: str) -> list[HarnessId]:
        return list(self.store.load(name).metadata.applied_to)

    def list_harnesses(self) -> list[HarnessInfo]:
        """Report install status and active profile for every harness."""
        return [
            HarnessInfo(
                id=harness.id,
                installed=harness.is_installed(),
                config_path=str(harness.config_path),
                active_profile=self.applicator.read_marker(harness.id),
            )
            for harness in HARNESSES.values()
        ]

    def diff(self, first: str, second: str | None = None) -> ProfileDiff:
        profile = self.store.load(first)
        other = self.store.load(second) if second is not None else None
        return diff_profiles(profile, other)

    def diff_with_harness(self, name: str, harness: HarnessId | str) -> ProfileDiff:
        profile = self.store.load(name)
        return diff_with_config(profile, extractor.extract(harness))

    def list_backups(self, harness: HarnessId | str) -> list[ProfileBackup]:
        return self.applicator.list_backups(harness)

    def restore(self, harness: HarnessId | str, backup_path: Path | str) -> CopyReport:
        return self.applicator.restore_backup(harness, backup_path)

    def _import_harness_content(self, profile: Profile, harness: HarnessId) -> None:
        """Copy extracted skill directories and command files into profile storage."""
        root = get_harness_path(harness)
        name = profile.metadata.name
        try:
            for skill in profile.skills:
                source = root / SKILLS_DIR / skill
                if source.is_dir():
                    shutil.copytree(source, self.store.skills_dir(name) / skill, dirs_exist_ok=True)
            for command in profile.commands:
                source = root / COMMANDS_DIR / f"{command}.md"
                if source.is_file():
                    shutil.copy2(source, self.store.commands_dir(name) / source.name)
        except OSError as e:
            raise ProfileExtractionError(
                f"Failed to copy {harness.value} content into profile {name}: {e}"
            ) from e
