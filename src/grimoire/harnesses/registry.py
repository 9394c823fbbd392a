"""Static table of harness configuration roots and backup allowlists."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from grimoire.errors import UnknownHarnessError
from grimoire.models.profile import HarnessId

PROFILE_MARKER_PREFIX = "GRIMOIRE_PROFILE_"
SKILLS_DIR = "skills"
COMMANDS_DIR = "commands"

HARNESS_ALIASES: dict[str, HarnessId] = {
    "claude": HarnessId.CLAUDE_CODE,
    "cc": HarnessId.CLAUDE_CODE,
    "oc": HarnessId.OPENCODE,
}

DEFAULT_BACKUP_ENTRIES: tuple[str, ...] = (SKILLS_DIR, COMMANDS_DIR, "AGENTS.md", "CONVENTIONS.md")


@dataclass(frozen=True)
class HarnessSpec:
    """Where a harness keeps its configuration and what to back up."""

    id: HarnessId
    display_name: str
    root: str
    backup_entries: tuple[str, ...] = DEFAULT_BACKUP_ENTRIES

    @property
    def config_path(self) -> Path:
        return Path.home() / self.root

    def is_installed(self) -> bool:
        return self.config_path.is_dir()


HARNESSES: dict[HarnessId, HarnessSpec] = {
    spec.id: spec
    for spec in (
        HarnessSpec(
            HarnessId.CLAUDE_CODE,
            "Claude Code",
            ".claude",
            ("settings.json", ".mcp.json", SKILLS_DIR, COMMANDS_DIR),
        ),
        HarnessSpec(
            HarnessId.OPENCODE,
            "OpenCode",
            ".config/opencode",
            ("opencode.jsonc", "opencode.json", SKILLS_DIR, COMMANDS_DIR, "agents"),
        ),
        HarnessSpec(
            HarnessId.CURSOR,
            "Cursor",
            ".cursor",
            ("settings.json", "mcp.json", "rules", ".cursorrules", SKILLS_DIR, COMMANDS_DIR),
        ),
        HarnessSpec(
            HarnessId.CODEX,
            "Codex CLI",
            ".codex",
            ("config.toml", "AGENTS.md", SKILLS_DIR, COMMANDS_DIR),
        ),
        HarnessSpec(HarnessId.AIDER, "Aider", ".config/aider"),
        HarnessSpec(
            HarnessId.AMP,
            "Amp",
            ".config/amp",
            ("settings.json", SKILLS_DIR, COMMANDS_DIR),
        ),
        HarnessSpec(HarnessId.GOOSE, "Goose", ".config/goose"),
        HarnessSpec(
            HarnessId.GEMINI,
            "Gemini CLI",
            ".gemini",
            ("settings.json", "GEMINI.md", SKILLS_DIR, COMMANDS_DIR),
        ),
    )
}


def valid_harness_ids() -> list[str]:
    return [harness_id.value for harness_id in HarnessId]


def resolve_harness(value: str | HarnessId) -> HarnessId:
    """Resolve a harness id or alias.

    Raises:
        UnknownHarnessError: If the value names no known harness.
    """
    if isinstance(value, HarnessId):
        return value
    key = value.strip().lower()
    if key in HARNESS_ALIASES:
        return HARNESS_ALIASES[key]
    try:
        return HarnessId(key)
    except ValueError:
        raise UnknownHarnessError(value, valid_harness_ids()) from None


def parse_harness_list(value: str) -> list[HarnessId]:
    """Parse a comma-separated list of harness ids, keeping order and dropping repeats."""
    harnesses: list[HarnessId] = []
    for part in value.split(","):
        if not part.strip():
            continue
        harness_id = resolve_harness(part)
        if harness_id not in harnesses:
            harnesses.append(harness_id)
    return harnesses


def get_harness(harness_id: HarnessId | str) -> HarnessSpec:
    return HARNESSES[resolve_harness(harness_id)]


def get_harness_path(harness_id: HarnessId | str) -> Path:
    """Return the live configuration root for a harness."""
    return get_harness(harness_id).config_path


def get_files_to_backup(harness_id: HarnessId | str) -> tuple[str, ...]:
    return get_harness(harness_id).backup_entries


def marker_file_name(profile_name: str) -> str:
    return f"{PROFILE_MARKER_PREFIX}{profile_name}"
