"""Parsing of SKILL.md YAML front-matter and skill.yaml agent config."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from grimoire.errors import SkillManifestError
from grimoire.models.skill import AgentSkillConfig, AgentType, SkillManifest

logger = logging.getLogger(__name__)

SKILL_FILE_NAME = "SKILL.md"
AGENT_CONFIG_FILE_NAME = "skill.yaml"
FRONTMATTER_DELIMITER = "---"

_FRONTMATTER_RE = re.compile(r"^---\s*\n(.*?)\n---\s*(?:\n|$)", re.DOTALL)


def split_frontmatter(content: str) -> tuple[dict[str, Any] | None, str]:
    """Split content into parsed front-matter and body.

    Returns (None, content) when there is no front-matter block.

    Raises:
        SkillManifestError: If the front-matter is not valid YAML or not a mapping.
    """
    match = _FRONTMATTER_RE.match(content)
    if not match:
        return None, content

    try:
        metadata = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        raise SkillManifestError(f"Invalid YAML front-matter: {e}") from e

    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise SkillManifestError("YAML front-matter must be a mapping")
    return metadata, content[match.end() :]


def strip_frontmatter(content: str) -> str:
    """Return content without a leading front-matter block."""
    match = _FRONTMATTER_RE.match(content)
    if not match:
        return content
    return content[match.end() :].lstrip("\n")


def parse_manifest(content: str, source: str = SKILL_FILE_NAME) -> SkillManifest:
    """
    Parse a SkillManifest from SKILL.md content.

    Args:
        content: Raw SKILL.md text
        source: Label used in error messages

    Returns:
        The parsed manifest.

    Raises:
        SkillManifestError: If front-matter is missing or lacks name/description.
    """
    try:
        metadata, _ = split_frontmatter(content)
    except SkillManifestError as e:
        raise SkillManifestError(f"{source}: {e}") from e

    if metadata is None:
        raise SkillManifestError(f"No YAML front-matter found in {source}")

    allowed_tools = metadata.get("allowed-tools", metadata.get("allowed_tools"))
    if isinstance(allowed_tools, str):
        allowed_tools = [tool.strip() for tool in allowed_tools.split(",") if tool.strip()]

    try:
        return SkillManifest(
            name=str(metadata.get("name") or "").strip(),
            description=str(metadata.get("description") or "").strip(),
            allowed_tools=allowed_tools or None,
        )
    except ValidationError as e:
        raise SkillManifestError(f"{source}: 'name' and 'description' are required") from e


def parse_skill_file(file_path: Path) -> SkillManifest:
    """Read and parse a SKILL.md file."""
    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SkillManifestError(f"Failed to read {file_path}: {e}") from e
    return parse_manifest(content, source=str(file_path))


def ensure_frontmatter(content: str, manifest: SkillManifest) -> str:
    """Prepend discovery front-matter unless the content already has it."""
    if content.startswith(FRONTMATTER_DELIMITER):
        return content

    lines = [FRONTMATTER_DELIMITER, f"name: {manifest.name}"]
    if "\n" in manifest.description:
        lines.append("description: |")
        lines.extend(f"  {line}" for line in manifest.description.split("\n"))
    else:
        lines.append(f"description: {manifest.description}")
    if manifest.allowed_tools:
        lines.append(f"allowed-tools: {', '.join(manifest.allowed_tools)}")
    lines.append(FRONTMATTER_DELIMITER)

    return "\n".join(lines) + "\n\n" + content


def parse_agent_configs(file_path: Path) -> dict[AgentType, AgentSkillConfig]:
    """
    Read the ``agents`` table of an optional skill.yaml.

    Unknown agent keys are skipped. A missing file yields an empty mapping.

    Raises:
        SkillManifestError: If the file is not valid YAML or an agent entry is malformed.
    """
    if not file_path.is_file():
        return {}
    try:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        raise SkillManifestError(f"Failed to read {file_path}: {e}") from e

    agents = data.get("agents") if isinstance(data, dict) else None
    if agents is None:
        return {}
    if not isinstance(agents, dict):
        raise SkillManifestError(f"{file_path}: 'agents' must be a mapping")

    configs: dict[AgentType, AgentSkillConfig] = {}
    for key, value in agents.items():
        try:
            agent = AgentType(key)
        except ValueError:
            logger.warning(f"Ignoring unknown agent '{key}' in {file_path}")
            continue
        try:
            configs[agent] = AgentSkillConfig.model_validate(value or {})
        except ValidationError as e:
            raise SkillManifestError(f"{file_path}: invalid config for agent '{key}': {e}") from e
    return configs
