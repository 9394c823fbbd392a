"""Read a harness's live configuration into an ExtractedConfig.

Readers never raise on malformed files: parse failures are recorded as
warnings and the affected fields are left unset.
"""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Any

from grimoire.errors import HarnessNotInstalledError
from grimoire.harnesses.registry import COMMANDS_DIR, SKILLS_DIR, get_harness, resolve_harness
from grimoire.jsonio import read_json_object
from grimoire.mcp import servers_from_section
from grimoire.models.profile import (
    ExtractedConfig,
    HarnessId,
    ModelPreferences,
    Profile,
    create_empty_profile,
)
from grimoire.skills.manifest import SKILL_FILE_NAME

logger = logging.getLogger(__name__)

Reader = Callable[[Path, ExtractedConfig], None]


def _read_json(path: Path, result: ExtractedConfig, jsonc: bool = False) -> dict[str, Any] | None:
    """Read a JSON object, recording a warning instead of raising."""
    if not path.is_file():
        return None
    try:
        return read_json_object(path, jsonc=jsonc)
    except (OSError, UnicodeDecodeError, ValueError) as e:
        result.warnings.append(f"Failed to parse {path.name}: {e}")
        logger.warning(f"Failed to parse {path}: {e}")
        return None


def _str_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def _get_nested(data: dict[str, Any], *keys: str) -> Any:
    current: Any = data
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def _scan_skills(skills_dir: Path) -> list[str]:
    """Names of skill subdirectories that contain a SKILL.md."""
    if not skills_dir.is_dir():
        return []
    return sorted(
        entry.name
        for entry in skills_dir.iterdir()
        if entry.is_dir() and (entry / SKILL_FILE_NAME).exists()
    )


def _scan_markdown(directory: Path, suffixes: tuple[str, ...] = (".md",)) -> list[str]:
    if not directory.is_dir():
        return []
    return sorted(
        entry.stem for entry in directory.iterdir() if entry.is_file() and entry.suffix in suffixes
    )


def _add_instruction_markers(root: Path, result: ExtractedConfig) -> None:
    if (root / "AGENTS.md").exists():
        result.skills.append("agents-md")
    if (root / "CONVENTIONS.md").exists():
        result.skills.append("conventions-md")


def _read_claude_code(root: Path, result: ExtractedConfig) -> None:
    settings = _read_json(root / "settings.json", result)
    if settings is not None:
        result.model = _str_or_none(settings.get("model"))
        result.theme = _str_or_none(settings.get("theme"))
        plugins = settings.get("enabledPlugins")
        if isinstance(plugins, dict):
            result.plugins.extend(sorted(name for name, on in plugins.items() if on))

    mcp = _read_json(root / ".mcp.json", result)
    if mcp is not None:
        result.mcp_servers.extend(servers_from_section(mcp.get("mcpServers")))

    result.skills.extend(_scan_skills(root / SKILLS_DIR))
    result.commands.extend(_scan_markdown(root / COMMANDS_DIR))


def _read_opencode(root: Path, result: ExtractedConfig) -> None:
    config_path = root / "opencode.jsonc"
    if not config_path.exists():
        config_path = root / "opencode.json"
    config = _read_json(config_path, result, jsonc=True)
    if config is not None:
        result.model = _str_or_none(config.get("model")) or _str_or_none(
            _get_nested(config, "agent", "general", "model")
        )
        result.theme = _str_or_none(config.get("theme"))
        result.mcp_servers.extend(servers_from_section(config.get("mcp")))
        plugins = config.get("plugin")
        if isinstance(plugins, list):
            result.plugins.extend(str(plugin) for plugin in plugins)

    result.skills.extend(_scan_skills(root / SKILLS_DIR))
    result.commands.extend(_scan_markdown(root / COMMANDS_DIR))
    result.agents.extend(_scan_markdown(root / "agents"))


def _read_cursor(root: Path, result: ExtractedConfig) -> None:
    settings = _read_json(root / "settings.json", result, jsonc=True)
    if settings is not None:
        result.model = _str_or_none(settings.get("cursor.general.model")) or _str_or_none(
            _get_nested(settings, "cursor", "general", "model")
        )
        result.theme = _str_or_none(settings.get("workbench.colorTheme"))

    mcp = _read_json(root / "mcp.json", result)
    if mcp is not None:
        result.mcp_servers.extend(servers_from_section(mcp.get("mcpServers")))

    result.skills.extend(_scan_markdown(root / "rules", (".md", ".mdc")))
    result.skills.extend(_scan_skills(root / SKILLS_DIR))
    if (root / ".cursorrules").exists():
        result.skills.append("cursorrules")
    result.commands.extend(_scan_markdown(root / COMMANDS_DIR))


def _read_amp(root: Path, result: ExtractedConfig) -> None:
    settings = _read_json(root / "settings.json", result, jsonc=True)
    if settings is not None:
        result.model = _str_or_none(_get_nested(settings, "amp", "model", "default"))
        result.theme = _str_or_none(_get_nested(settings, "amp", "theme"))
        result.mcp_servers.extend(servers_from_section(_get_nested(settings, "amp", "mcpServers")))

    result.skills.extend(_scan_skills(root / SKILLS_DIR))
    result.commands.extend(_scan_markdown(root / COMMANDS_DIR))


def _read_gemini(root: Path, result: ExtractedConfig) -> None:
    settings = _read_json(root / "settings.json", result)
    if settings is not None:
        model = settings.get("model")
        result.model = _str_or_none(model) or _str_or_none(_get_nested(settings, "model", "name"))
        result.theme = _str_or_none(settings.get("theme")) or _str_or_none(
            _get_nested(settings, "ui", "theme")
        )
        result.mcp_servers.extend(servers_from_section(settings.get("mcpServers")))

    _read_generic(root, result)


def _read_codex(root: Path, result: ExtractedConfig) -> None:
    config_path = root / "config.toml"
    if config_path.is_file():
        try:
            config = tomllib.loads(config_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
            result.warnings.append(f"Failed to parse config.toml: {e}")
            logger.warning(f"Failed to parse {config_path}: {e}")
        else:
            result.model = _str_or_none(config.get("model"))
            result.mcp_servers.extend(servers_from_section(config.get("mcp_servers")))

    _read_generic(root, result)


def _read_generic(root: Path, result: ExtractedConfig) -> None:
    result.skills.extend(_scan_skills(root / SKILLS_DIR))
    result.commands.extend(_scan_markdown(root / COMMANDS_DIR))
    _add_instruction_markers(root, result)


_READERS: dict[HarnessId, Reader] = {
    HarnessId.CLAUDE_CODE: _read_claude_code,
    HarnessId.OPENCODE: _read_opencode,
    HarnessId.CURSOR: _read_cursor,
    HarnessId.AMP: _read_amp,
    HarnessId.GEMINI: _read_gemini,
    HarnessId.CODEX: _read_codex,
}


def extract(harness_id: HarnessId | str) -> ExtractedConfig:
    """
    Extract the live configuration of a harness.

    Args:
        harness_id: Harness identifier or alias

    Returns:
        A possibly sparse ExtractedConfig; parse problems are in ``warnings``.

    Raises:
        UnknownHarnessError: If the harness id is not recognized.
        HarnessNotInstalledError: If the harness config directory is missing.
    """
    harness = get_harness(harness_id)
    root = harness.config_path
    if not root.is_dir():
        raise HarnessNotInstalledError(harness.id.value, root)

    result = ExtractedConfig()
    reader = _READERS.get(harness.id, _read_generic)
    reader(root, result)
    logger.debug(
        f"Extracted {harness.id.value}: {len(result.skills)} skills, "
        f"{len(result.commands)} commands, {len(result.mcp_servers)} MCP servers"
    )
    return result


def create_profile_from_harness(
    name: str, harness_id: HarnessId | str, description: str | None = None
) -> Profile:
    """Build a profile from a harness's current configuration."""
    harness = resolve_harness(harness_id)
    config = extract(harness)
    profile = create_empty_profile(
        name, description or f"Extracted from {harness.value}"
    )
    profile.skills = list(dict.fromkeys(config.skills))
    profile.commands = list(dict.fromkeys(config.commands))
    profile.mcp_servers = list(config.mcp_servers)
    if config.agents:
        profile.agents = list(config.agents)
    if config.model:
        profile.metadata.model_preferences = ModelPreferences(default=config.model)
    if config.theme:
        profile.metadata.theme = config.theme
    return profile
