"""Comparison of profiles with each other and with live harness configs."""

from __future__ import annotations

from collections.abc import Iterable

from grimoire.models.profile import (
    DiffCategory,
    ExtractedConfig,
    McpServerConfig,
    Profile,
    ProfileDiff,
    ProfileDiffItem,
)


def _ordered_difference(left: Iterable[str], right: Iterable[str]) -> list[str]:
    """Items of left not in right, in left's order, without repeats."""
    right_set = set(right)
    return [item for item in dict.fromkeys(left) if item not in right_set]


def _set_diff(
    category: DiffCategory,
    first: list[str],
    second: list[str],
    added_details: str,
    removed_details: str,
) -> list[ProfileDiffItem]:
    items = [
        ProfileDiffItem(category=category, item=name, change_type="removed", details=removed_details)
        for name in _ordered_difference(first, second)
    ]
    items.extend(
        ProfileDiffItem(category=category, item=name, change_type="added", details=added_details)
        for name in _ordered_difference(second, first)
    )
    return items


def _mcp_enabled_changes(
    first: list[McpServerConfig],
    second: list[McpServerConfig],
    first_label: str,
    second_label: str,
) -> list[ProfileDiffItem]:
    second_by_name = {server.name: server for server in second}
    changes = []
    for server in first:
        other = second_by_name.get(server.name)
        if other is not None and other.enabled != server.enabled:
            changes.append(
                ProfileDiffItem(
                    category="mcp",
                    item=server.name,
                    change_type="modified",
                    details=(
                        f"{first_label}: {'enabled' if server.enabled else 'disabled'}, "
                        f"{second_label}: {'enabled' if other.enabled else 'disabled'}"
                    ),
                )
            )
    return changes


def _scalar_diff(
    category: DiffCategory,
    first: str | None,
    second: str | None,
    first_label: str,
    second_label: str,
) -> list[ProfileDiffItem]:
    if first == second:
        return []
    if first is None:
        change, details = "added", f"{second_label}: {second}"
    elif second is None:
        change, details = "removed", f"{first_label}: {first}"
    else:
        change, details = "modified", f"{first_label}: {first}, {second_label}: {second}"
    return [ProfileDiffItem(category=category, item=category, change_type=change, details=details)]


def _result(differences: list[ProfileDiffItem]) -> ProfileDiff:
    return ProfileDiff(differences=differences, identical=not differences)


def diff_profiles(first: Profile, second: Profile | None = None) -> ProfileDiff:
    """
    Compare two profiles.

    "added" means present only in ``second``; "removed" means present only
    in ``first``. Comparing against nothing is an identical self-comparison.
    """
    if second is None:
        return ProfileDiff(differences=[], identical=True)

    first_label = first.metadata.name
    second_label = second.metadata.name
    only_first = f"Only in {first_label}"
    only_second = f"Only in {second_label}"

    differences = _set_diff("skill", first.skills, second.skills, only_second, only_first)
    differences += _set_diff("command", first.commands, second.commands, only_second, only_first)
    differences += _set_diff(
        "mcp",
        [server.name for server in first.mcp_servers],
        [server.name for server in second.mcp_servers],
        only_second,
        only_first,
    )
    differences += _mcp_enabled_changes(
        first.mcp_servers, second.mcp_servers, first_label, second_label
    )
    differences += _scalar_diff(
        "model", first.default_model, second.default_model, first_label, second_label
    )
    differences += _scalar_diff(
        "theme", first.metadata.theme, second.metadata.theme, first_label, second_label
    )
    return _result(differences)


def diff_with_config(profile: Profile, config: ExtractedConfig) -> ProfileDiff:
    """
    Compare a profile with a harness's extracted configuration.

    "added" means applying the profile would introduce the item; "removed"
    means the harness has it but the profile does not cover it.
    """
    would_add = "Would add from profile"
    harness_only = "In harness but not in profile"

    differences = _set_diff("skill", config.skills, profile.skills, would_add, harness_only)
    differences += _set_diff("command", config.commands, profile.commands, would_add, harness_only)
    differences += _set_diff(
        "mcp",
        [server.name for server in config.mcp_servers],
        [server.name for server in profile.mcp_servers],
        would_add,
        harness_only,
    )
    differences += _mcp_enabled_changes(profile.mcp_servers, config.mcp_servers, "Profile", "Harness")

    for category, wanted, actual in (
        ("model", profile.default_model, config.model),
        ("theme", profile.metadata.theme, config.theme),
    ):
        if wanted == actual:
            continue
        if actual is None:
            change, details = "added", f"Would set to {wanted}"
        elif wanted is None:
            change, details = "removed", f"Harness has {actual}"
        else:
            change, details = "modified", f"Profile: {wanted}, Harness: {actual}"
        differences.append(
            ProfileDiffItem(category=category, item=category, change_type=change, details=details)
        )
    return _result(differences)
