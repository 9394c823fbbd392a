"""Gemini CLI agent adapter."""

from __future__ import annotations

from pathlib import Path

from grimoire.adapters.instructions import InstructionsFileAdapter
from grimoire.adapters.registry import register_adapter
from grimoire.jsonio import merge_json_section
from grimoire.mcp import to_standard_entry
from grimoire.models.profile import McpServerConfig
from grimoire.models.skill import AgentType


class GeminiAdapter(InstructionsFileAdapter):
    """Adapter for Gemini CLI projects; skills are injected into GEMINI.md."""

    agent_md_name = "GEMINI.md"
    instructions_heading = "# Gemini Instructions"
    detect_markers = (".gemini", "GEMINI.md")
    global_config_subdir = ".gemini"

    @property
    def agent_type(self) -> AgentType:
        return AgentType.GEMINI

    @property
    def display_name(self) -> str:
        return "Gemini CLI"

    def configure_mcp(self, project_path: Path, server: McpServerConfig) -> bool:
        merge_json_section(
            project_path / ".gemini" / "settings.json",
            ("mcpServers",),
            {server.name: to_standard_entry(server)},
        )
        return True


register_adapter(GeminiAdapter())
