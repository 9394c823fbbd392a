"""Claude Code agent adapter."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from grimoire.adapters.directory import DirectorySkillAdapter
from grimoire.adapters.registry import register_adapter
from grimoire.errors import PluginInstallError
from grimoire.jsonio import merge_json_section
from grimoire.mcp import to_standard_entry
from grimoire.models.profile import McpServerConfig
from grimoire.models.skill import AgentType

logger = logging.getLogger(__name__)


class ClaudeCodeAdapter(DirectorySkillAdapter):
    """Adapter for Claude Code projects (.claude/skills, CLAUDE.md)."""

    agent_md_name = "CLAUDE.md"
    instructions_heading = "# Claude Code Instructions"
    detect_markers = (".claude", "CLAUDE.md")
    skills_subdir = ".claude/skills"
    global_skills_subdir = ".claude/skills"

    @property
    def agent_type(self) -> AgentType:
        return AgentType.CLAUDE_CODE

    @property
    def display_name(self) -> str:
        return "Claude Code"

    def install_plugin(self, project_path: Path, plugin: str, marketplace: str | None) -> bool:
        """Install a Claude Code plugin, adding its marketplace first when given."""
        commands = []
        if marketplace:
            commands.append(["claude", "plugin", "marketplace", "add", marketplace])
        commands.append(["claude", "plugin", "install", plugin])

        for command in commands:
            try:
                result = subprocess.run(
                    command, cwd=project_path, capture_output=True, text=True, check=False
                )
            except FileNotFoundError as e:
                raise PluginInstallError("claude CLI not found on PATH") from e
            if result.returncode != 0:
                raise PluginInstallError(
                    f"'{' '.join(command)}' failed: {result.stderr.strip() or result.stdout.strip()}"
                )
        logger.info(f"Installed Claude Code plugin {plugin}")
        return True

    def configure_mcp(self, project_path: Path, server: McpServerConfig) -> bool:
        """Register an MCP server in the project's .mcp.json."""
        merge_json_section(
            project_path / ".mcp.json", ("mcpServers",), {server.name: to_standard_entry(server)}
        )
        return True


# Auto-register this adapter when module is imported
register_adapter(ClaudeCodeAdapter())
