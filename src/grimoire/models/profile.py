"""Profile and harness models."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

PROFILE_NAME_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
PROFILE_NAME_MAX_LENGTH = 64


class HarnessId(str, Enum):
    """Supported harness identifiers."""

    CLAUDE_CODE = "claude-code"
    OPENCODE = "opencode"
    CURSOR = "cursor"
    CODEX = "codex"
    AIDER = "aider"
    AMP = "amp"
    GOOSE = "goose"
    GEMINI = "gemini"


McpServerType = Literal["stdio", "sse", "http"]
DiffCategory = Literal["skill", "command", "mcp", "model", "theme"]
ChangeType = Literal["added", "removed", "modified"]
CopyStatus = Literal["copied", "removed", "skipped", "failed"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class McpServerConfig(_CamelModel):
    """MCP server entry shared by profiles and harness configs."""

    name: str = Field(..., description="Server name, unique within a profile")
    enabled: bool = Field(True, description="Whether the server is active")
    server_type: McpServerType | None = Field(None, alias="serverType")
    command: str | None = Field(None, description="Executable for stdio servers")
    args: list[str] | None = Field(None, description="Command arguments")
    url: str | None = Field(None, description="Endpoint for sse/http servers")
    env: dict[str, str] | None = Field(None, description="Environment variables")


class ModelPreferences(_CamelModel):
    """Default model and per-harness overrides."""

    default: str | None = None
    harness: dict[str, str] | None = None


class ProfileMetadata(_CamelModel):
    """Profile metadata persisted in profile.json."""

    name: str
    description: str | None = None
    created: datetime
    updated: datetime
    applied_to: list[HarnessId] = Field(default_factory=list, alias="appliedTo")
    model_preferences: ModelPreferences | None = Field(None, alias="modelPreferences")
    theme: str | None = None
    tags: list[str] | None = None


class Profile(_CamelModel):
    """A portable bundle of skills, commands and MCP servers."""

    metadata: ProfileMetadata
    skills: list[str] = Field(default_factory=list)
    commands: list[str] = Field(default_factory=list)
    mcp_servers: list[McpServerConfig] = Field(default_factory=list, alias="mcpServers")
    agents: list[str] | None = None

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def default_model(self) -> str | None:
        if self.metadata.model_preferences is None:
            return None
        return self.metadata.model_preferences.default

    def to_json_dict(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ProfileListItem(BaseModel):
    """Summary row for profile listings."""

    name: str
    description: str | None = None
    skill_count: int
    command_count: int
    mcp_server_count: int
    applied_to: list[HarnessId]
    updated: datetime


class ExtractedConfig(BaseModel):
    """Canonical snapshot of a harness's live configuration."""

    model: str | None = None
    theme: str | None = None
    mcp_servers: list[McpServerConfig] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    commands: list[str] = Field(default_factory=list)
    agents: list[str] = Field(default_factory=list)
    plugins: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class ProfileBackup(_CamelModel):
    """Metadata for one backup, stored as the backup sidecar."""

    harness_id: HarnessId = Field(..., alias="harnessId")
    profile_name: str = Field(..., alias="profileName")
    timestamp: datetime
    path: str
    reason: str | None = None


class ProfileDiffItem(BaseModel):
    """A single difference between two configuration snapshots."""

    category: DiffCategory
    item: str
    change_type: ChangeType
    details: str | None = None


class ProfileDiff(BaseModel):
    """Result of comparing two configuration snapshots."""

    differences: list[ProfileDiffItem] = Field(default_factory=list)
    identical: bool = True


class HarnessInfo(BaseModel):
    """Installation status of a harness."""

    id: HarnessId
    installed: bool
    config_path: str
    active_profile: str | None = None


class CopyOutcome(BaseModel):
    """Outcome of copying or deleting a single entry."""

    entry: str
    status: CopyStatus
    reason: str | None = None


class CopyReport(BaseModel):
    """Per-entry outcomes of a backup, apply, remove or restore run."""

    outcomes: list[CopyOutcome] = Field(default_factory=list)

    def record(self, entry: str, status: CopyStatus, reason: str | None = None) -> None:
        self.outcomes.append(CopyOutcome(entry=entry, status=status, reason=reason))

    def by_status(self, status: CopyStatus) -> list[str]:
        return [outcome.entry for outcome in self.outcomes if outcome.status == status]

    @property
    def copied(self) -> list[str]:
        return self.by_status("copied")

    @property
    def removed(self) -> list[str]:
        return self.by_status("removed")

    @property
    def skipped(self) -> list[str]:
        return self.by_status("skipped")

    @property
    def failed(self) -> list[str]:
        return self.by_status("failed")


class ApplyResult(BaseModel):
    """Result of applying or removing a profile on one harness."""

    harness_id: HarnessId
    backup: ProfileBackup | None = None
    backup_report: CopyReport | None = None
    report: CopyReport = Field(default_factory=CopyReport)
    warnings: list[str] = Field(default_factory=list)


class ProfileGlobalConfig(_CamelModel):
    """Global profile settings from profile-config.json."""

    profile_marker: bool = Field(True, alias="profileMarker")
    editor: str | None = None
    default_harness: HarnessId | None = Field(None, alias="defaultHarness")


def utc_now() -> datetime:
    return datetime.now(UTC)


def validate_profile_name(name: str) -> str | None:
    """Return the reason a profile name is invalid, or None when it is valid."""
    if not name:
        return "name cannot be empty"
    if len(name) > PROFILE_NAME_MAX_LENGTH:
        return f"name must be at most {PROFILE_NAME_MAX_LENGTH} characters"
    if not PROFILE_NAME_PATTERN.match(name):
        return "name must be kebab-case (lowercase letters, digits and single hyphens)"
    return None


def create_empty_profile(name: str, description: str | None = None) -> Profile:
    now = utc_now()
    return Profile(
        metadata=ProfileMetadata(
            name=name,
            description=description,
            created=now,
            updated=now,
        )
    )
