"""Fallback adapter for agents that read AGENTS.md."""

from __future__ import annotations

from grimoire.adapters.directory import DirectorySkillAdapter
from grimoire.adapters.registry import register_adapter
from grimoire.models.skill import AgentType


class GenericAdapter(DirectorySkillAdapter):
    """Copies skills into .skills/ without rewriting front-matter."""

    detect_markers = ("AGENTS.md", ".skills")
    skills_subdir = ".skills"
    global_skills_subdir = ".grimoire/skills"
    requires_frontmatter = False

    @property
    def agent_type(self) -> AgentType:
        return AgentType.GENERIC

    @property
    def display_name(self) -> str:
        return "Generic (AGENTS.md)"


register_adapter(GenericAdapter())
