"""Aider agent adapter."""

from __future__ import annotations

from grimoire.adapters.instructions import InstructionsFileAdapter
from grimoire.adapters.registry import register_adapter
from grimoire.models.skill import AgentType


class AiderAdapter(InstructionsFileAdapter):
    """Adapter for Aider projects; skills are injected into CONVENTIONS.md."""

    agent_md_name = "CONVENTIONS.md"
    instructions_heading = "# Conventions"
    detect_markers = (".aider.conf.yml", "CONVENTIONS.md")
    global_config_subdir = ".config/aider"

    @property
    def agent_type(self) -> AgentType:
        return AgentType.AIDER

    @property
    def display_name(self) -> str:
        return "Aider"


register_adapter(AiderAdapter())
