"""Amp agent adapter."""

from __future__ import annotations

from pathlib import Path

from grimoire.adapters.instructions import InstructionsFileAdapter
from grimoire.adapters.registry import register_adapter
from grimoire.jsonio import merge_json_section
from grimoire.mcp import to_standard_entry
from grimoire.models.profile import McpServerConfig
from grimoire.models.skill import AgentType


class AmpAdapter(InstructionsFileAdapter):
    """Adapter for Amp projects; skills are injected into AGENTS.md."""

    detect_markers = (".amp",)
    global_config_subdir = ".config/amp"

    @property
    def agent_type(self) -> AgentType:
        return AgentType.AMP

    @property
    def display_name(self) -> str:
        return "Amp"

    def configure_mcp(self, project_path: Path, server: McpServerConfig) -> bool:
        merge_json_section(
            project_path / ".amp" / "settings.json",
            ("amp", "mcpServers"),
            {server.name: to_standard_entry(server)},
        )
        return True


register_adapter(AmpAdapter())
