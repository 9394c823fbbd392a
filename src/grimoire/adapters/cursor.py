"""Cursor agent adapter."""

from __future__ import annotations

from pathlib import Path

from grimoire.adapters.directory import DirectorySkillAdapter
from grimoire.adapters.registry import register_adapter
from grimoire.jsonio import merge_json_section
from grimoire.mcp import to_standard_entry
from grimoire.models.profile import McpServerConfig
from grimoire.models.skill import AgentType


class CursorAdapter(DirectorySkillAdapter):
    """Adapter for Cursor projects (.cursor/skills, .cursorrules)."""

    agent_md_name = ".cursorrules"
    instructions_heading = "# Cursor Rules"
    detect_markers = (".cursor", ".cursorrules")
    skills_subdir = ".cursor/skills"
    global_skills_subdir = ".cursor/skills"

    @property
    def agent_type(self) -> AgentType:
        return AgentType.CURSOR

    @property
    def display_name(self) -> str:
        return "Cursor"

    def configure_mcp(self, project_path: Path, server: McpServerConfig) -> bool:
        merge_json_section(
            project_path / ".cursor" / "mcp.json",
            ("mcpServers",),
            {server.name: to_standard_entry(server)},
        )
        return True


register_adapter(CursorAdapter())
