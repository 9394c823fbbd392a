"""Codex CLI agent adapter."""

from __future__ import annotations

from grimoire.adapters.directory import DirectorySkillAdapter
from grimoire.adapters.registry import register_adapter
from grimoire.models.skill import AgentType


class CodexAdapter(DirectorySkillAdapter):
    """Adapter for Codex CLI projects (.codex/skills, AGENTS.md)."""

    detect_markers = (".codex",)
    skills_subdir = ".codex/skills"
    global_skills_subdir = ".codex/skills"

    @property
    def agent_type(self) -> AgentType:
        return AgentType.CODEX

    @property
    def display_name(self) -> str:
        return "Codex CLI"


register_adapter(CodexAdapter())
