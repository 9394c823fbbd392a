"""Adapters for agents that discover skills from a skills directory."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from grimoire.adapters.base import AgentAdapter, remove_path
from grimoire.models.skill import CachedSkill, EnableResult, InstallScope
from grimoire.skills.manifest import SKILL_FILE_NAME, ensure_frontmatter

logger = logging.getLogger(__name__)

EXCLUDED_NAMES = (".git", "node_modules", ".DS_Store", ".meta.json", "skill.yaml")


class DirectorySkillAdapter(AgentAdapter):
    """Copies (or links) each skill into ``<skills dir>/<name>/``."""

    skills_subdir: str = ".skills"
    global_skills_subdir: str = ".skills"
    requires_frontmatter: bool = True

    def get_skills_dir(self, project_path: Path) -> Path:
        return project_path / self.skills_subdir

    def get_global_skills_dir(self) -> Path:
        return Path.home() / self.global_skills_subdir

    def init(self, project_path: Path) -> None:
        self.get_skills_dir(project_path).mkdir(parents=True, exist_ok=True)
        super().init(project_path)

    def enable_skill(
        self,
        project_path: Path,
        skill: CachedSkill,
        scope: InstallScope = InstallScope.PROJECT,
        link: bool = False,
    ) -> EnableResult:
        if not skill.agent_config(self.agent_type).skill_file:
            result = EnableResult()
        elif link and scope == InstallScope.PROJECT:
            result = self._link_skill(project_path, skill)
        else:
            result = self._copy_skill(project_path, skill, scope)
        return self.apply_agent_config(project_path, skill, result)

    def disable_skill(self, project_path: Path, name: str) -> None:
        skills_dir = self.get_skills_dir(project_path)
        try:
            removed = remove_path(skills_dir / name)
            removed = remove_path(skills_dir / f"{name}.md") or removed
        except OSError as e:
            raise self._error("disable", f"failed to remove skill '{name}': {e}") from e
        if removed:
            logger.info(f"Removed skill {name} from {skills_dir}")
        self.remove_injection(project_path, name)

    def remove_global_skill(self, name: str) -> bool:
        """Delete a globally installed skill; returns False if it was not there."""
        try:
            removed = remove_path(self.get_global_skills_dir() / name)
        except OSError as e:
            raise self._error("disable", f"failed to remove global skill '{name}': {e}") from e
        if removed:
            logger.info(f"Removed skill {name} from {self.get_global_skills_dir()}")
        return removed

    def _copy_skill(
        self, project_path: Path, skill: CachedSkill, scope: InstallScope
    ) -> EnableResult:
        source_dir = self._skill_md_path(skill).parent
        if scope == InstallScope.GLOBAL:
            destination_base = self.get_global_skills_dir()
        else:
            destination_base = self.get_skills_dir(project_path)
        destination = destination_base / skill.name

        try:
            destination_base.mkdir(parents=True, exist_ok=True)
            remove_path(destination)
            shutil.copytree(source_dir, destination, ignore=shutil.ignore_patterns(*EXCLUDED_NAMES))
            if self.requires_frontmatter:
                self._write_frontmatter(destination / SKILL_FILE_NAME, skill)
        except OSError as e:
            raise self._error("enable", f"failed to copy skill '{skill.name}': {e}") from e

        logger.info(f"Copied skill {skill.name} to {destination}")
        return EnableResult(skill_file_copied=True, linked=False)

    def _link_skill(self, project_path: Path, skill: CachedSkill) -> EnableResult:
        global_skill = self.get_global_skills_dir() / skill.name
        if not global_skill.exists():
            raise self._error(
                "link",
                f"skill '{skill.name}' is not installed globally at {global_skill}; "
                f"enable it with --global first",
            )

        skills_dir = self.get_skills_dir(project_path)
        destination = skills_dir / skill.name
        try:
            skills_dir.mkdir(parents=True, exist_ok=True)
            remove_path(destination)
            destination.symlink_to(global_skill, target_is_directory=True)
        except OSError as e:
            raise self._error("link", f"failed to link skill '{skill.name}': {e}") from e

        logger.info(f"Linked {destination} -> {global_skill}")
        return EnableResult(skill_file_copied=False, linked=True)

    def _write_frontmatter(self, skill_file: Path, skill: CachedSkill) -> None:
        if not skill_file.exists():
            return
        content = skill_file.read_text(encoding="utf-8")
        updated = ensure_frontmatter(content, skill.manifest)
        if updated != content:
            skill_file.write_text(updated, encoding="utf-8")
