"""Managed-section injection for free-form agent instruction files.

A managed section is a delimited region of a markdown file that grimoire owns.
Each enabled skill occupies its own delimited block inside that region:

    <!-- skills:managed:start -->
    <!-- skill:beads:start -->
    ...skill body...
    <!-- skill:beads:end -->
    <!-- skills:managed:end -->

Adding a skill and then removing it restores the file byte for byte.
"""

from __future__ import annotations

import re

from grimoire.errors import InjectionError

MANAGED_START = "<!-- skills:managed:start -->"
MANAGED_END = "<!-- skills:managed:end -->"

_SKILL_START_RE = re.compile(r"<!-- skill:([^\s:]+):start -->")


def skill_start_marker(name: str) -> str:
    return f"<!-- skill:{name}:start -->"


def skill_end_marker(name: str) -> str:
    return f"<!-- skill:{name}:end -->"


def _managed_bounds(content: str, file: str) -> tuple[int, int] | None:
    """Return (start, end) offsets of the managed markers, or None if absent."""
    start = content.find(MANAGED_START)
    if start == -1:
        if MANAGED_END in content:
            raise InjectionError(file, "managed section end marker without start marker")
        return None

    end = content.find(MANAGED_END, start)
    if end == -1:
        raise InjectionError(file, "managed section is missing its end marker")
    if content.count(MANAGED_START) > 1:
        raise InjectionError(file, "multiple managed sections found")
    return start, end


def _skill_block_pattern(name: str) -> re.Pattern[str]:
    return re.compile(
        re.escape(skill_start_marker(name)) + r".*?" + re.escape(skill_end_marker(name)) + r"\n?",
        re.DOTALL,
    )


def has_managed_section(content: str) -> bool:
    """Return True if the content contains a complete managed section."""
    start = content.find(MANAGED_START)
    return start != -1 and content.find(MANAGED_END, start) != -1


def add_managed_section(content: str) -> str:
    """Append an empty managed section unless one already exists."""
    if has_managed_section(content):
        return content

    trimmed = content.rstrip()
    prefix = "\n\n" if trimmed else ""
    return f"{trimmed}{prefix}{MANAGED_START}\n{MANAGED_END}\n"


def has_skill_injection(content: str, name: str) -> bool:
    return skill_start_marker(name) in content


def add_skill_injection(content: str, name: str, body: str, file: str = "<content>") -> str:
    """Insert or replace the block for a skill inside the managed section.

    Raises:
        InjectionError: If the managed section is missing or the skill's
            markers are malformed.
    """
    bounds = _managed_bounds(content, file)
    if bounds is None:
        raise InjectionError(file, "managed section not found; run init first")

    block = f"{skill_start_marker(name)}\n{body.rstrip()}\n{skill_end_marker(name)}"

    if has_skill_injection(content, name):
        _validate_skill_markers(content, name, file)
        pattern = _skill_block_pattern(name)
        match = pattern.search(content)
        assert match is not None
        trailing = "\n" if match.group(0).endswith("\n") else ""
        return content[: match.start()] + block + trailing + content[match.end() :]

    # Directly before the end marker, even when it shares a line with the start marker.
    _, end = bounds
    return content[:end] + block + "\n" + content[end:]


def remove_skill_injection(content: str, name: str, file: str = "<content>") -> str:
    """Remove the block for a skill; no-op when it is not present."""
    if not has_skill_injection(content, name):
        return content

    _validate_skill_markers(content, name, file)
    return _skill_block_pattern(name).sub("", content, count=1)


def list_injected_skills(content: str) -> list[str]:
    """Return sorted, unique names of skills injected in the content."""
    return sorted(set(_SKILL_START_RE.findall(content)))


def _validate_skill_markers(content: str, name: str, file: str) -> None:
    start_count = content.count(skill_start_marker(name))
    if start_count > 1:
        raise InjectionError(file, f"skill '{name}' is injected more than once")
    if skill_end_marker(name) not in content:
        raise InjectionError(file, f"skill '{name}' is missing its end marker")
