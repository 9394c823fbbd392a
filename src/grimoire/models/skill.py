"""Skill, agent, and project state models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class AgentType(str, Enum):
    """Agents that skills can be enabled for."""

    CLAUDE_CODE = "claude_code"
    OPENCODE = "opencode"
    CURSOR = "cursor"
    CODEX = "codex"
    AMP = "amp"
    GEMINI = "gemini"
    AIDER = "aider"
    GENERIC = "generic"


class InstallScope(str, Enum):
    """Where an enabled skill is installed."""

    GLOBAL = "global"
    PROJECT = "project"


class SkillManifest(BaseModel):
    """Metadata parsed from a SKILL.md front-matter block."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Unique skill name")
    description: str = Field(..., min_length=1, description="What the skill does")
    allowed_tools: list[str] | None = Field(None, description="Tools the skill may use")


class PluginReference(BaseModel):
    """A plugin to install, optionally from a marketplace."""

    name: str = Field(..., min_length=1)
    marketplace: str | None = None


class SkillMcpConfig(BaseModel):
    """A stdio MCP server that a skill registers under its own name."""

    command: str = Field(..., min_length=1)
    args: list[str] | None = None
    env: dict[str, str] | None = None


class InjectConfig(BaseModel):
    """Content injected into the agent's instructions file."""

    content: str


class AgentSkillConfig(BaseModel):
    """Per-agent extras declared in a skill's optional skill.yaml."""

    plugin: PluginReference | None = None
    mcp: SkillMcpConfig | None = None
    inject: InjectConfig | None = None
    skill_file: bool = Field(True, description="Copy the skill directory for directory agents")


class CachedSkill(BaseModel):
    """A manifest together with its location in the skill cache."""

    manifest: SkillManifest
    cached_at: datetime
    source: str
    skill_md_path: Path | None = None
    agents: dict[AgentType, AgentSkillConfig] = Field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.manifest.name

    def agent_config(self, agent: AgentType) -> AgentSkillConfig:
        return self.agents.get(agent) or AgentSkillConfig()


class ProjectState(BaseModel):
    """Skills state for one project directory."""

    agent: AgentType
    enabled: list[str] = Field(default_factory=list)
    disabled_at: dict[str, datetime] = Field(default_factory=dict)
    initialized_at: datetime
    last_sync: datetime | None = None


class SkillsState(BaseModel):
    """Contents of skills-state.json."""

    model_config = ConfigDict(populate_by_name=True)

    version: int = 1
    projects: dict[str, ProjectState] = Field(default_factory=dict)
    global_enabled: dict[str, list[str]] = Field(default_factory=dict, alias="global")


class EnableResult(BaseModel):
    """What an adapter did when enabling a skill."""

    injected: bool = False
    skill_file_copied: bool = False
    linked: bool | None = None
    plugin_installed: bool | None = None
    mcp_configured: bool | None = None


class EnableCheck(BaseModel):
    """Whether a skill can be enabled, and why not."""

    can_enable: bool
    reason: str | None = None
