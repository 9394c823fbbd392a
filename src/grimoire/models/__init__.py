"""Data models for profiles, harnesses and skills."""

from grimoire.models.profile import (
    ApplyResult,
    CopyReport,
    ExtractedConfig,
    HarnessId,
    HarnessInfo,
    McpServerConfig,
    ModelPreferences,
    Profile,
    ProfileBackup,
    ProfileDiff,
    ProfileDiffItem,
    ProfileGlobalConfig,
    ProfileListItem,
    ProfileMetadata,
)
from grimoire.models.skill import (
    AgentType,
    CachedSkill,
    EnableCheck,
    EnableResult,
    InstallScope,
    ProjectState,
    SkillManifest,
    SkillsState,
)

__all__ = [
    "AgentType",
    "ApplyResult",
    "CachedSkill",
    "CopyReport",
    "EnableCheck",
    "EnableResult",
    "ExtractedConfig",
    "HarnessId",
    "HarnessInfo",
    "InstallScope",
    "McpServerConfig",
    "ModelPreferences",
    "Profile",
    "ProfileBackup",
    "ProfileDiff",
    "ProfileDiffItem",
    "ProfileGlobalConfig",
    "ProfileListItem",
    "ProfileMetadata",
    "ProjectState",
    "SkillManifest",
    "SkillsState",
]
