"""JSON and JSONC file helpers shared by adapters and harness services."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, cast

# Strings are matched first so comment markers inside them are preserved.
_JSONC_TOKEN_RE = re.compile(r'("(?:\\.|[^"\\])*")|//[^\n]*|/\*.*?\*/', re.DOTALL)
_TRAILING_COMMA_RE = re.compile(r'("(?:\\.|[^"\\])*")|,(\s*[}\]])')


def strip_jsonc_comments(content: str) -> str:
    """Remove // line comments and /* */ block comments outside strings."""
    return _JSONC_TOKEN_RE.sub(lambda m: m.group(1) or "", content)


def parse_jsonc(content: str) -> Any:
    """Parse JSON with comments and trailing commas."""
    cleaned = strip_jsonc_comments(content)
    cleaned = _TRAILING_COMMA_RE.sub(lambda m: m.group(1) or m.group(2), cleaned)
    return json.loads(cleaned)


def read_json_object(path: Path, jsonc: bool = False) -> dict[str, Any]:
    """Read a JSON object from disk; a missing file reads as an empty object.

    Raises:
        ValueError: If the file is not valid JSON or not an object.
    """
    if not path.exists():
        return {}
    content = path.read_text(encoding="utf-8")
    if not content.strip():
        return {}
    data = parse_jsonc(content) if jsonc else json.loads(content)
    if not isinstance(data, dict):
        raise ValueError(f"{path.name} must contain a JSON object")
    return cast(dict[str, Any], data)


def write_json(path: Path, data: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


def merge_json_section(
    path: Path, keys: tuple[str, ...], entries: dict[str, Any], jsonc: bool = False
) -> None:
    """Merge entries into the nested object at keys, creating parents as needed.

    Comments in a JSONC file are not preserved on rewrite.
    """
    data = read_json_object(path, jsonc=jsonc)
    section: dict[str, Any] = data
    for key in keys:
        child = section.get(key)
        if not isinstance(child, dict):
            child = {}
            section[key] = child
        section = child
    section.update(entries)
    write_json(path, data)
