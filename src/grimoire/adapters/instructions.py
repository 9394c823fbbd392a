"""Adapters for agents that only read a single instructions file."""

from __future__ import annotations

import logging
from pathlib import Path

from grimoire.adapters.base import AgentAdapter
from grimoire.models.skill import CachedSkill, EnableResult, InstallScope
from grimoire.skills.manifest import strip_frontmatter

logger = logging.getLogger(__name__)


class InstructionsFileAdapter(AgentAdapter):
    """Injects skill bodies into the managed section of the instructions file.

    These agents have no skills directory; the project root (where the
    instructions file lives) stands in for it.
    """

    global_config_subdir: str = ".config"

    def get_skills_dir(self, project_path: Path) -> Path:
        return project_path

    def get_global_skills_dir(self) -> Path:
        return Path.home() / self.global_config_subdir

    def enable_skill(
        self,
        project_path: Path,
        skill: CachedSkill,
        scope: InstallScope = InstallScope.PROJECT,
        link: bool = False,
    ) -> EnableResult:
        if scope == InstallScope.GLOBAL:
            raise self._error(
                "enable",
                f"global scope is not supported; skills are injected into {self.agent_md_name}",
            )

        # A configured inject block replaces the SKILL.md body.
        if skill.agent_config(self.agent_type).inject is None:
            try:
                content = self._skill_md_path(skill).read_text(encoding="utf-8")
            except OSError as e:
                raise self._error("enable", f"failed to read skill '{skill.name}': {e}") from e
            self.inject_content(project_path, skill.name, strip_frontmatter(content))

        result = self.apply_agent_config(project_path, skill, EnableResult(injected=True))
        logger.info(f"Injected skill {skill.name} into {self.get_agent_md_path(project_path)}")
        return result

    def disable_skill(self, project_path: Path, name: str) -> None:
        if self.remove_injection(project_path, name):
            logger.info(f"Removed injected skill {name} from {self.agent_md_name}")
