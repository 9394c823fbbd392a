"""OpenCode agent adapter."""

from __future__ import annotations

from pathlib import Path

from grimoire.adapters.directory import DirectorySkillAdapter
from grimoire.adapters.registry import register_adapter
from grimoire.jsonio import merge_json_section
from grimoire.mcp import to_opencode_entry
from grimoire.models.profile import McpServerConfig
from grimoire.models.skill import AgentType


class OpenCodeAdapter(DirectorySkillAdapter):
    """Adapter for OpenCode projects (.opencode/skills, AGENTS.md)."""

    detect_markers = (".opencode", "opencode.json", "opencode.jsonc")
    skills_subdir = ".opencode/skills"
    global_skills_subdir = ".config/opencode/skills"

    @property
    def agent_type(self) -> AgentType:
        return AgentType.OPENCODE

    @property
    def display_name(self) -> str:
        return "OpenCode"

    def configure_mcp(self, project_path: Path, server: McpServerConfig) -> bool:
        """Register an MCP server under ``mcp`` in the project's opencode.json."""
        jsonc_path = project_path / "opencode.jsonc"
        path = jsonc_path if jsonc_path.exists() else project_path / "opencode.json"
        merge_json_section(path, ("mcp",), {server.name: to_opencode_entry(server)}, jsonc=True)
        return True


register_adapter(OpenCodeAdapter())
