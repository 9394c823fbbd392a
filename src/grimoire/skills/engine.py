"""Enable/disable workflow for skills inside a project.

Per (project, skill) the lifecycle is NotCached -> Cached -> Enabled, and
disabling returns the skill to Cached.

The adapter's filesystem changes happen before the state store is updated.
If the process dies in between, the skill is on disk but not recorded as
enabled; re-running enable repairs it because adapters replace existing
destinations.
"""

from __future__ import annotations

import logging
from pathlib import Path

from grimoire.adapters.base import AgentAdapter
from grimoire.adapters.registry import detect_agent, get_adapter
from grimoire.errors import (
    AgentAdapterError,
    AgentNotDetectedError,
    ProjectNotInitializedError,
    SkillAlreadyEnabledError,
    SkillNotEnabledError,
)
from grimoire.models.skill import (
    AgentType,
    EnableCheck,
    EnableResult,
    InstallScope,
    ProjectState,
)
from grimoire.skills.cache import SkillCache
from grimoire.skills.state import SkillStateStore

logger = logging.getLogger(__name__)


class SkillEngine:
    """Service for enabling and disabling cached skills in projects."""

    def __init__(
        self, cache: SkillCache | None = None, state: SkillStateStore | None = None
    ) -> None:
        self.cache = cache or SkillCache()
        self.state = state or SkillStateStore()

    def init_project(self, project_path: Path, agent: AgentType | None = None) -> ProjectState:
        """
        Initialize a project for skills.

        Args:
            project_path: Project root
            agent: Agent to use; detected from project markers when omitted

        Returns:
            The project's state (unchanged if it was already initialized).

        Raises:
            AgentNotDetectedError: If no agent is given and none is detected.
        """
        if agent is None:
            detected = detect_agent(project_path)
            if detected is None:
                raise AgentNotDetectedError(project_path)
            adapter = detected
        else:
            adapter = self._adapter(agent)

        adapter.init(project_path)
        return self.state.init_project(project_path, adapter.agent_type)

    def can_enable(self, project_path: Path, name: str) -> EnableCheck:
        if not self.cache.is_cached(name):
            return EnableCheck(can_enable=False, reason=f"Skill '{name}' is not cached")
        if not self.state.is_initialized(project_path):
            return EnableCheck(can_enable=False, reason="Project is not initialized")
        if name in self.state.get_enabled(project_path):
            return EnableCheck(can_enable=False, reason=f"Skill '{name}' is already enabled")
        return EnableCheck(can_enable=True)

    def enable(
        self,
        project_path: Path,
        name: str,
        scope: InstallScope = InstallScope.PROJECT,
        link: bool = False,
    ) -> EnableResult:
        """
        Enable a cached skill in a project.

        Raises:
            SkillNotCachedError: If the skill is not cached.
            ProjectNotInitializedError: If the project has no skills state.
            SkillAlreadyEnabledError: If the skill is already enabled.
            AgentAdapterError: If the adapter cannot install the skill.
        """
        skill = self.cache.get_cached(name)

        project = self.state.get_project(project_path)
        if project is None:
            raise ProjectNotInitializedError(project_path)
        if name in project.enabled:
            raise SkillAlreadyEnabledError(name)

        adapter = self._adapter(project.agent)
        result = adapter.enable_skill(project_path, skill, scope=scope, link=link)

        self.state.add_enabled(project_path, name)
        if scope == InstallScope.GLOBAL:
            self.state.add_global_enabled(project.agent, name)
        logger.info(f"Enabled skill {name} in {project_path} ({project.agent.value})")
        return result

    def disable(self, project_path: Path, name: str) -> None:
        """
        Disable an enabled skill.

        Raises:
            SkillNotEnabledError: If the skill is not enabled in the project.
        """
        project = self.state.get_project(project_path)
        if project is None or name not in project.enabled:
            raise SkillNotEnabledError(name)

        adapter = self._adapter(project.agent)
        adapter.disable_skill(project_path, name)
        adapter.remove_injection(project_path, name)
        is_global = name in self.state.get_global_enabled(project.agent)
        if is_global:
            adapter.remove_global_skill(name)

        self.state.remove_enabled(project_path, name)
        self.state.record_disable(project_path, name)
        if is_global:
            self.state.remove_global_enabled(project.agent, name)
        logger.info(f"Disabled skill {name} in {project_path}")

    def list_enabled(self, project_path: Path) -> list[str]:
        return self.state.get_enabled(project_path)

    def _adapter(self, agent: AgentType) -> AgentAdapter:
        adapter = get_adapter(agent)
        if adapter is None:
            raise AgentAdapterError(agent.value, "resolve", "no adapter registered")
        return adapter
