"""Conversion between McpServerConfig and harness-native MCP entries."""

from __future__ import annotations

from typing import Any

from grimoire.models.profile import McpServerConfig


def to_standard_entry(server: McpServerConfig) -> dict[str, Any]:
    """Entry in the ``mcpServers`` shape used by Claude Code, Cursor, Gemini and Amp."""
    entry: dict[str, Any] = {}
    if server.command:
        entry["command"] = server.command
    if server.args:
        entry["args"] = list(server.args)
    if server.url:
        entry["url"] = server.url
    if server.server_type:
        entry["type"] = server.server_type
    if server.env:
        entry["env"] = dict(server.env)
    if not server.enabled:
        entry["disabled"] = True
    return entry


def to_opencode_entry(server: McpServerConfig) -> dict[str, Any]:
    """Entry in OpenCode's ``mcp`` shape."""
    entry: dict[str, Any] = {"enabled": server.enabled}
    if server.command:
        entry["type"] = "local"
        entry["command"] = [server.command, *(server.args or [])]
        if server.env:
            entry["environment"] = dict(server.env)
    elif server.url:
        entry["type"] = "remote"
        entry["url"] = server.url
    return entry


def from_native_entry(name: str, raw: dict[str, Any]) -> McpServerConfig:
    """Build an McpServerConfig from any supported native entry shape."""
    command = raw.get("command")
    args = raw.get("args")
    if isinstance(command, list):
        parts = [str(part) for part in command]
        command = parts[0] if parts else None
        args = parts[1:] or None

    url = raw.get("url") or raw.get("httpUrl")
    server_type = raw.get("type")
    if server_type not in ("stdio", "sse", "http"):
        if command:
            server_type = "stdio"
        elif url:
            server_type = "sse"
        else:
            server_type = None

    env = raw.get("env", raw.get("environment"))
    if "enabled" in raw:
        enabled = bool(raw["enabled"])
    else:
        enabled = not bool(raw.get("disabled", False))

    return McpServerConfig(
        name=name,
        enabled=enabled,
        server_type=server_type,
        command=str(command) if command else None,
        args=[str(arg) for arg in args] if isinstance(args, list) and args else None,
        url=str(url) if url else None,
        env={str(k): str(v) for k, v in env.items()} if isinstance(env, dict) and env else None,
    )


def servers_from_section(section: Any) -> list[McpServerConfig]:
    """Parse a ``{name: entry}`` mapping, ignoring entries that are not objects."""
    if not isinstance(section, dict):
        return []
    return [
        from_native_entry(str(name), raw) for name, raw in section.items() if isinstance(raw, dict)
    ]
