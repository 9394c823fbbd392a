"""Exception hierarchy for grimoire."""

from __future__ import annotations

from pathlib import Path


class GrimoireError(Exception):
    """Base exception for grimoire errors."""

    pass


class ConfigError(GrimoireError):
    """Raised when the grimoire config file cannot be read."""

    pass


# Profile errors


class ProfileError(GrimoireError):
    """Base exception for profile operations."""

    pass


class ProfileNotFoundError(ProfileError):
    """Profile does not exist in profile storage."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Profile not found: {name}")
        self.name = name


class ProfileAlreadyExistsError(ProfileError):
    """Profile name is already taken."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Profile already exists: {name}")
        self.name = name


class InvalidProfileNameError(ProfileError):
    """Profile name does not satisfy naming rules."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Invalid profile name '{name}': {reason}")
        self.name = name
        self.reason = reason


class HarnessNotInstalledError(ProfileError):
    """Harness has no live configuration directory."""

    def __init__(self, harness_id: str, config_path: Path) -> None:
        super().__init__(f"Harness not installed: {harness_id} (expected {config_path})")
        self.harness_id = harness_id
        self.config_path = config_path


class UnknownHarnessError(ProfileError):
    """Harness identifier is not recognized."""

    def __init__(self, harness_id: str, valid_harnesses: list[str]) -> None:
        super().__init__(
            f"Unknown harness: {harness_id} (valid: {', '.join(valid_harnesses)})"
        )
        self.harness_id = harness_id
        self.valid_harnesses = valid_harnesses


class ProfileConfigError(ProfileError):
    """Persisted profile JSON is malformed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Invalid profile config at {path}: {reason}")
        self.path = path
        self.reason = reason


class ProfileSwitchError(ProfileError):
    """Apply, remove, or restore failed."""

    pass


class ProfileBackupError(ProfileError):
    """Backup creation failed."""

    pass


class ProfileExtractionError(ProfileError):
    """Harness configuration could not be extracted."""

    pass


# Skill errors


class SkillError(GrimoireError):
    """Base exception for skill operations."""

    pass


class SkillNotCachedError(SkillError):
    """Skill is not present in the local cache."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Skill not cached: {name}")
        self.name = name


class SkillAlreadyEnabledError(SkillError):
    """Skill is already enabled in the project."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Skill already enabled: {name}")
        self.name = name


class SkillNotEnabledError(SkillError):
    """Skill is not enabled in the project."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Skill not enabled: {name}")
        self.name = name


class SkillManifestError(SkillError):
    """SKILL.md front-matter is missing or invalid."""

    pass


class ProjectNotInitializedError(SkillError):
    """Project has not been initialized for skills."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Project not initialized: {path} (run 'grimoire skills init')")
        self.path = path


class AgentNotDetectedError(SkillError):
    """No agent could be detected for a project."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"No agent detected in {path}")
        self.path = path


class InjectionError(SkillError):
    """Managed markdown content is missing or malformed."""

    def __init__(self, file: str, message: str) -> None:
        super().__init__(f"{file}: {message}")
        self.file = file
        self.message = message


class AgentAdapterError(SkillError):
    """An agent adapter operation failed."""

    def __init__(self, agent: str, operation: str, message: str) -> None:
        super().__init__(f"[{agent}] {operation} failed: {message}")
        self.agent = agent
        self.operation = operation
        self.message = message


class PluginInstallError(SkillError):
    """Installing a harness plugin failed."""

    pass


class StateFileError(SkillError):
    """The skills state file could not be read or written."""

    pass


class ProviderError(GrimoireError):
    """Listing models from an LLM provider failed."""

    pass
