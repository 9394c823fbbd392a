"""Base classes for agent adapters."""

from __future__ import annotations

import logging
import shutil
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path

from grimoire.errors import AgentAdapterError, PluginInstallError
from grimoire.injection import (
    add_managed_section,
    add_skill_injection,
    remove_skill_injection,
)
from grimoire.models.profile import McpServerConfig
from grimoire.models.skill import AgentType, CachedSkill, EnableResult, InstallScope

logger = logging.getLogger(__name__)


class AgentAdapter(ABC):
    """Base class for agent adapters.

    Subclasses that support plugins or MCP configuration override
    ``install_plugin`` / ``configure_mcp`` with methods; callers check for None.
    """

    agent_md_name: str = "AGENTS.md"
    instructions_heading: str = "# Agent Instructions"
    detect_markers: tuple[str, ...] = ()

    install_plugin: Callable[[Path, str, str | None], bool] | None = None
    configure_mcp: Callable[[Path, McpServerConfig], bool] | None = None

    @property
    @abstractmethod
    def agent_type(self) -> AgentType:
        """Agent identifier."""

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human-friendly adapter name."""

    @abstractmethod
    def get_skills_dir(self, project_path: Path) -> Path:
        """Return the project-level skills directory."""

    @abstractmethod
    def get_global_skills_dir(self) -> Path:
        """Return the user-level skills directory."""

    @abstractmethod
    def enable_skill(
        self,
        project_path: Path,
        skill: CachedSkill,
        scope: InstallScope = InstallScope.PROJECT,
        link: bool = False,
    ) -> EnableResult:
        """Make a cached skill available to the agent."""

    @abstractmethod
    def disable_skill(self, project_path: Path, name: str) -> None:
        """Remove a skill from the project."""

    def remove_global_skill(self, name: str) -> bool:
        """Delete a user-level install of a skill; returns False if there was none."""
        return False

    @property
    def name(self) -> str:
        return self.agent_type.value

    def detect(self, project_path: Path) -> bool:
        """Return True if any of this agent's marker files exist in the project."""
        return any((project_path / marker).exists() for marker in self.detect_markers)

    def get_agent_md_path(self, project_path: Path) -> Path:
        return project_path / self.agent_md_name

    def init(self, project_path: Path) -> None:
        """Create the instructions file with an empty managed section."""
        path = self.get_agent_md_path(project_path)
        content = path.read_text(encoding="utf-8") if path.exists() else ""
        if not content:
            content = f"{self.instructions_heading}\n\n"
        updated = add_managed_section(content)
        if updated != content or not path.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(updated, encoding="utf-8")
            logger.info(f"Initialized {path} for {self.name}")

    def inject_content(self, project_path: Path, name: str, body: str) -> None:
        """Inject a skill body into the managed section of the instructions file."""
        path = self.get_agent_md_path(project_path)
        content = path.read_text(encoding="utf-8") if path.exists() else ""
        if not content:
            content = f"{self.instructions_heading}\n\n"
        content = add_managed_section(content)
        content = add_skill_injection(content, name, body, file=str(path))
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

    def remove_injection(self, project_path: Path, name: str) -> bool:
        """Remove a skill's injected block; returns True if the file changed."""
        path = self.get_agent_md_path(project_path)
        if not path.exists():
            return False
        content = path.read_text(encoding="utf-8")
        updated = remove_skill_injection(content, name, file=str(path))
        if updated == content:
            return False
        path.write_text(updated, encoding="utf-8")
        return True

    def apply_agent_config(
        self, project_path: Path, skill: CachedSkill, result: EnableResult
    ) -> EnableResult:
        """Install the plugin, MCP server and injected content a skill declares for this agent.

        Capabilities the adapter lacks are skipped and leave their flag unset.
        """
        config = skill.agent_config(self.agent_type)

        if config.plugin is not None and self.install_plugin is not None:
            try:
                installed = self.install_plugin(
                    project_path, config.plugin.name, config.plugin.marketplace
                )
            except PluginInstallError as e:
                raise self._error(
                    "enable", f"failed to install plugin '{config.plugin.name}': {e}"
                ) from e
            result.plugin_installed = installed

        if config.mcp is not None and self.configure_mcp is not None:
            server = McpServerConfig(
                name=skill.name,
                command=config.mcp.command,
                args=config.mcp.args,
                env=config.mcp.env,
            )
            try:
                result.mcp_configured = self.configure_mcp(project_path, server)
            except (OSError, ValueError) as e:
                raise self._error(
                    "enable", f"failed to configure MCP server '{skill.name}': {e}"
                ) from e
            logger.info(f"Configured MCP server {skill.name} for {self.name}")

        if config.inject is not None:
            self.inject_content(project_path, skill.name, config.inject.content)
            result.injected = True

        return result

    def _error(self, operation: str, message: str) -> AgentAdapterError:
        return AgentAdapterError(self.name, operation, message)

    def _skill_md_path(self, skill: CachedSkill) -> Path:
        if skill.skill_md_path is None or not skill.skill_md_path.exists():
            raise self._error("enable", f"cached skill '{skill.name}' has no SKILL.md on disk")
        return skill.skill_md_path


def remove_path(path: Path) -> bool:
    """Delete a file, symlink, or directory tree; returns False if nothing was there."""
    if path.is_symlink() or path.is_file():
        path.unlink()
        return True
    if path.is_dir():
        shutil.rmtree(path)
        return True
    return False
