"""Tests for directory-based and injection-based agent adapters."""

import json
from pathlib import Path

import pytest

from grimoire.adapters.aider import AiderAdapter
from grimoire.adapters.claude_code import ClaudeCodeAdapter
from grimoire.adapters.cursor import CursorAdapter
from grimoire.adapters.gemini import GeminiAdapter
from grimoire.adapters.generic import GenericAdapter
from grimoire.adapters.opencode import OpenCodeAdapter
from grimoire.errors import AgentAdapterError, PluginInstallError
from grimoire.models.profile import McpServerConfig, utc_now
from grimoire.models.skill import (
    AgentSkillConfig,
    AgentType,
    CachedSkill,
    InstallScope,
    SkillManifest,
    SkillMcpConfig,
)

MANIFEST = SkillManifest(name="beads", description="Issue tracking", allowed_tools=["Bash"])


def _cached_skill(tmp_path: Path, content: str) -> CachedSkill:
    skill_dir = tmp_path / "cache" / "beads"
    skill_dir.mkdir(parents=True)
    (skill_dir / "SKILL.md").write_text(content)
    (skill_dir / ".meta.json").write_text("{}")
    (skill_dir / "node_modules").mkdir()
    return CachedSkill(
        manifest=MANIFEST,
        cached_at=utc_now(),
        source=str(skill_dir),
        skill_md_path=skill_dir / "SKILL.md",
    )


def test_directory_adapter_adds_frontmatter(tmp_path: Path) -> None:
    skill = _cached_skill(tmp_path, "# Beads\n")
    project = tmp_path / "project"
    project.mkdir()

    ClaudeCodeAdapter().enable_skill(project, skill)

    installed = project / ".claude" / "skills" / "beads"
    content = (installed / "SKILL.md").read_text()
    assert content.startswith("---\nname: beads\ndescription: Issue tracking\n")
    assert content.endswith("# Beads\n")
    assert not (installed / ".meta.json").exists()
    assert not (installed / "node_modules").exists()


def test_generic_adapter_keeps_content(tmp_path: Path) -> None:
    skill = _cached_skill(tmp_path, "# Beads\n")
    project = tmp_path / "project"
    project.mkdir()

    GenericAdapter().enable_skill(project, skill)

    assert (project / ".skills" / "beads" / "SKILL.md").read_text() == "# Beads\n"


def test_enable_replaces_existing_install(tmp_path: Path) -> None:
    skill = _cached_skill(tmp_path, "# Beads\n")
    project = tmp_path / "project"
    stale = project / ".cursor" / "skills" / "beads"
    stale.mkdir(parents=True)
    (stale / "old.md").write_text("stale")

    CursorAdapter().enable_skill(project, skill)

    assert not (stale / "old.md").exists()
    assert (stale / "SKILL.md").exists()


def test_link_from_global_install(tmp_path: Path, home: Path) -> None:
    skill = _cached_skill(tmp_path, "# Beads\n")
    project = tmp_path / "project"
    project.mkdir()
    adapter = OpenCodeAdapter()

    adapter.enable_skill(project, skill, scope=InstallScope.GLOBAL)
    result = adapter.enable_skill(project, skill, link=True)

    linked = project / ".opencode" / "skills" / "beads"
    assert result.linked is True
    assert linked.is_symlink()
    assert linked.resolve() == (home / ".config" / "opencode" / "skills" / "beads").resolve()

    adapter.disable_skill(project, "beads")
    assert not linked.exists()
    assert (home / ".config" / "opencode" / "skills" / "beads").exists()


def test_link_without_global_install(tmp_path: Path, home: Path) -> None:
    skill = _cached_skill(tmp_path, "# Beads\n")

    with pytest.raises(AgentAdapterError) as exc_info:
        ClaudeCodeAdapter().enable_skill(tmp_path, skill, link=True)

    assert exc_info.value.operation == "link"


def test_missing_skill_file(tmp_path: Path) -> None:
    skill = CachedSkill(manifest=MANIFEST, cached_at=utc_now(), source="x", skill_md_path=None)

    with pytest.raises(AgentAdapterError):
        ClaudeCodeAdapter().enable_skill(tmp_path, skill)


def test_injection_adapter_rejects_global_scope(tmp_path: Path) -> None:
    skill = _cached_skill(tmp_path, "---\nname: beads\ndescription: x\n---\nBody\n")

    with pytest.raises(AgentAdapterError, match="global scope"):
        AiderAdapter().enable_skill(tmp_path, skill, scope=InstallScope.GLOBAL)


def test_injection_creates_instructions_file(tmp_path: Path) -> None:
    skill = _cached_skill(tmp_path, "---\nname: beads\ndescription: x\n---\n\nBody text\n")
    project = tmp_path / "project"
    project.mkdir()
    adapter = GeminiAdapter()

    result = adapter.enable_skill(project, skill)

    content = (project / "GEMINI.md").read_text()
    assert result.injected is True
    assert "Body text" in content
    assert "description: x" not in content

    adapter.disable_skill(project, "beads")
    assert "Body text" not in (project / "GEMINI.md").read_text()


def test_init_preserves_existing_content(tmp_path: Path) -> None:
    (tmp_path / "CONVENTIONS.md").write_text("# House rules\n\n- tabs\n")

    AiderAdapter().init(tmp_path)
    AiderAdapter().init(tmp_path)

    content = (tmp_path / "CONVENTIONS.md").read_text()
    assert content.startswith("# House rules\n\n- tabs\n")
    assert content.count("skills:managed:start") == 1


def test_claude_configure_mcp_merges(tmp_path: Path) -> None:
    (tmp_path / ".mcp.json").write_text(json.dumps({"mcpServers": {"other": {"command": "x"}}}))
    adapter = ClaudeCodeAdapter()
    assert adapter.configure_mcp is not None

    adapter.configure_mcp(tmp_path, McpServerConfig(name="beads", command="bd", args=["mcp"]))

    servers = json.loads((tmp_path / ".mcp.json").read_text())["mcpServers"]
    assert servers["other"] == {"command": "x"}
    assert servers["beads"] == {"command": "bd", "args": ["mcp"]}


def test_opencode_configure_mcp(tmp_path: Path) -> None:
    OpenCodeAdapter().configure_mcp(tmp_path, McpServerConfig(name="beads", command="bd"))

    data = json.loads((tmp_path / "opencode.json").read_text())
    assert data["mcp"]["beads"] == {"enabled": True, "type": "local", "command": ["bd"]}


def test_optional_capabilities() -> None:
    assert AiderAdapter().install_plugin is None
    assert AiderAdapter().configure_mcp is None
    assert ClaudeCodeAdapter().install_plugin is not None


def test_claude_install_plugin_without_cli(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def _missing(*args, **kwargs):
        raise FileNotFoundError("claude")

    monkeypatch.setattr("grimoire.adapters.claude_code.subprocess.run", _missing)

    with pytest.raises(PluginInstallError, match="not found"):
        ClaudeCodeAdapter().install_plugin(tmp_path, "beads", None)


def test_remove_global_skill(home: Path) -> None:
    global_skill = home / ".cursor" / "skills" / "beads"
    global_skill.mkdir(parents=True)
    (global_skill / "SKILL.md").write_text("# Beads\n")

    assert CursorAdapter().remove_global_skill("beads") is True
    assert not global_skill.exists()
    assert CursorAdapter().remove_global_skill("beads") is False
    assert GeminiAdapter().remove_global_skill("beads") is False


def test_injection_adapter_configures_mcp(tmp_path: Path) -> None:
    skill = _cached_skill(tmp_path, "---\nname: beads\ndescription: x\n---\nUse bd.\n")
    skill.agents = {AgentType.GEMINI: AgentSkillConfig(mcp=SkillMcpConfig(command="bd"))}
    project = tmp_path / "project"
    project.mkdir()

    result = GeminiAdapter().enable_skill(project, skill)

    assert result.injected is True
    assert result.mcp_configured is True
    assert "Use bd." in (project / "GEMINI.md").read_text()
    settings = json.loads((project / ".gemini" / "settings.json").read_text())
    assert settings["mcpServers"]["beads"] == {"command": "bd"}
