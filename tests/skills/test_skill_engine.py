"""Tests for the skill enable/disable workflow."""

import json
from pathlib import Path
from types import SimpleNamespace

import pytest

from grimoire.errors import (
    AgentAdapterError,
    AgentNotDetectedError,
    ProjectNotInitializedError,
    SkillAlreadyEnabledError,
    SkillNotCachedError,
    SkillNotEnabledError,
)
from grimoire.injection import MANAGED_START, skill_start_marker
from grimoire.models.skill import AgentType, InstallScope
from grimoire.skills.cache import SkillCache
from grimoire.skills.engine import SkillEngine
from grimoire.skills.state import SkillStateStore


@pytest.fixture
def engine(home: Path) -> SkillEngine:
    return SkillEngine(
        cache=SkillCache(cache_dir=home / "cache"),
        state=SkillStateStore(state_file=home / "skills-state.json"),
    )


@pytest.fixture
def project(home: Path) -> Path:
    path = home / "project"
    path.mkdir()
    return path


def test_uncached_skill_fails_before_project_checks(engine: SkillEngine, project: Path) -> None:
    """A missing cache entry is reported even if the project is not initialized."""
    with pytest.raises(SkillNotCachedError):
        engine.enable(project, "beads")


def test_enable_requires_initialized_project(
    engine: SkillEngine, project: Path, skill_source: Path
) -> None:
    engine.cache.add_local(skill_source)

    with pytest.raises(ProjectNotInitializedError):
        engine.enable(project, "beads")


def test_init_project_detects_agent(engine: SkillEngine, project: Path) -> None:
    (project / "CLAUDE.md").write_text("# Notes\n")

    state = engine.init_project(project)

    assert state.agent == AgentType.CLAUDE_CODE
    assert (project / ".claude" / "skills").is_dir()
    assert MANAGED_START in (project / "CLAUDE.md").read_text()


def test_init_project_without_markers(engine: SkillEngine, project: Path) -> None:
    with pytest.raises(AgentNotDetectedError):
        engine.init_project(project)


def test_enable_and_disable_directory_agent(
    engine: SkillEngine, project: Path, skill_source: Path
) -> None:
    engine.cache.add_local(skill_source)
    engine.init_project(project, AgentType.CLAUDE_CODE)

    result = engine.enable(project, "beads")

    installed = project / ".claude" / "skills" / "beads"
    assert result.skill_file_copied is True
    assert (installed / "SKILL.md").exists()
    assert (installed / "reference.md").exists()
    assert not (installed / ".meta.json").exists()
    assert engine.list_enabled(project) == ["beads"]

    with pytest.raises(SkillAlreadyEnabledError):
        engine.enable(project, "beads")

    engine.disable(project, "beads")
    assert not installed.exists()
    assert engine.list_enabled(project) == []

    with pytest.raises(SkillNotEnabledError):
        engine.disable(project, "beads")


def test_enable_and_disable_injection_agent(
    engine: SkillEngine, project: Path, skill_source: Path
) -> None:
    """Disabling an injected skill restores the instructions file exactly."""
    engine.cache.add_local(skill_source)
    engine.init_project(project, AgentType.AIDER)
    conventions = project / "CONVENTIONS.md"
    before = conventions.read_text()

    result = engine.enable(project, "beads")

    content = conventions.read_text()
    assert result.injected is True
    assert skill_start_marker("beads") in content
    assert "Use bd." in content
    assert "description: Issue tracking" not in content

    engine.disable(project, "beads")
    assert conventions.read_text() == before


def test_enable_global_scope_records_global_state(
    engine: SkillEngine, project: Path, home: Path, skill_source: Path
) -> None:
    engine.cache.add_local(skill_source)
    engine.init_project(project, AgentType.CLAUDE_CODE)

    engine.enable(project, "beads", scope=InstallScope.GLOBAL)

    assert (home / ".claude" / "skills" / "beads" / "SKILL.md").exists()
    assert engine.state.get_global_enabled(AgentType.CLAUDE_CODE) == ["beads"]


def test_link_without_global_install_fails(
    engine: SkillEngine, project: Path, skill_source: Path
) -> None:
    engine.cache.add_local(skill_source)
    engine.init_project(project, AgentType.CLAUDE_CODE)

    with pytest.raises(AgentAdapterError, match="--global"):
        engine.enable(project, "beads", link=True)

    assert engine.list_enabled(project) == []


def test_can_enable_reasons(engine: SkillEngine, project: Path, skill_source: Path) -> None:
    assert engine.can_enable(project, "beads").can_enable is False

    engine.cache.add_local(skill_source)
    check = engine.can_enable(project, "beads")
    assert check.can_enable is False
    assert check.reason == "Project is not initialized"

    engine.init_project(project, AgentType.GENERIC)
    assert engine.can_enable(project, "beads").can_enable is True

    engine.enable(project, "beads")
    assert "already enabled" in (engine.can_enable(project, "beads").reason or "")


def test_disable_removes_global_install(
    engine: SkillEngine, project: Path, home: Path, skill_source: Path
) -> None:
    engine.cache.add_local(skill_source)
    engine.init_project(project, AgentType.CLAUDE_CODE)
    engine.enable(project, "beads", scope=InstallScope.GLOBAL)

    engine.disable(project, "beads")

    assert not (home / ".claude" / "skills" / "beads").exists()
    assert engine.state.get_global_enabled(AgentType.CLAUDE_CODE) == []
    assert engine.list_enabled(project) == []


CLAUDE_AGENT_CONFIG = """\
agents:
  claude_code:
    plugin:
      name: beads
      marketplace: steveyegge/beads
    mcp:
      command: bd
      args: [mcp]
    inject:
      content: Run bd ready before starting work.
"""


def test_enable_applies_agent_config(
    engine: SkillEngine, project: Path, skill_source: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Plugin, MCP and inject entries from skill.yaml are installed on enable."""
    (skill_source / "skill.yaml").write_text(CLAUDE_AGENT_CONFIG)
    engine.cache.add_local(skill_source)
    engine.init_project(project, AgentType.CLAUDE_CODE)
    commands: list[list[str]] = []

    def _run(command, **kwargs):
        commands.append(command)
        return SimpleNamespace(returncode=0, stdout="", stderr="")

    monkeypatch.setattr("grimoire.adapters.claude_code.subprocess.run", _run)

    result = engine.enable(project, "beads")

    assert result.skill_file_copied is True
    assert result.plugin_installed is True
    assert result.mcp_configured is True
    assert result.injected is True
    assert commands == [
        ["claude", "plugin", "marketplace", "add", "steveyegge/beads"],
        ["claude", "plugin", "install", "beads"],
    ]
    servers = json.loads((project / ".mcp.json").read_text())["mcpServers"]
    assert servers["beads"] == {"command": "bd", "args": ["mcp"]}
    assert "Run bd ready before starting work." in (project / "CLAUDE.md").read_text()
    assert not (project / ".claude" / "skills" / "beads" / "skill.yaml").exists()

    engine.disable(project, "beads")
    assert "Run bd ready" not in (project / "CLAUDE.md").read_text()


def test_enable_without_agent_config_leaves_capabilities_unset(
    engine: SkillEngine, project: Path, skill_source: Path
) -> None:
    (skill_source / "skill.yaml").write_text("agents:\n  opencode:\n    mcp:\n      command: bd\n")
    engine.cache.add_local(skill_source)
    engine.init_project(project, AgentType.CLAUDE_CODE)

    result = engine.enable(project, "beads")

    assert result.plugin_installed is None
    assert result.mcp_configured is None
    assert not (project / ".mcp.json").exists()


def test_plugin_failure_aborts_enable(
    engine: SkillEngine, project: Path, skill_source: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    (skill_source / "skill.yaml").write_text(CLAUDE_AGENT_CONFIG)
    engine.cache.add_local(skill_source)
    engine.init_project(project, AgentType.CLAUDE_CODE)
    monkeypatch.setattr(
        "grimoire.adapters.claude_code.subprocess.run",
        lambda command, **kwargs: SimpleNamespace(returncode=1, stdout="", stderr="no such plugin"),
    )

    with pytest.raises(AgentAdapterError, match="no such plugin"):
        engine.enable(project, "beads")

    assert engine.list_enabled(project) == []


def test_skill_file_false_skips_copy(
    engine: SkillEngine, project: Path, skill_source: Path
) -> None:
    (skill_source / "skill.yaml").write_text(
        "agents:\n  opencode:\n    skill_file: false\n    mcp:\n      command: bd\n"
    )
    engine.cache.add_local(skill_source)
    engine.init_project(project, AgentType.OPENCODE)

    result = engine.enable(project, "beads")

    assert result.skill_file_copied is False
    assert result.mcp_configured is True
    assert not (project / ".opencode" / "skills" / "beads").exists()
    data = json.loads((project / "opencode.json").read_text())
    assert data["mcp"]["beads"] == {"enabled": True, "type": "local", "command": ["bd"]}


def test_injection_agent_prefers_configured_content(
    engine: SkillEngine, project: Path, skill_source: Path
) -> None:
    (skill_source / "skill.yaml").write_text(
        "agents:\n  aider:\n    inject:\n      content: Track work with bd.\n"
        "    mcp:\n      command: bd\n"
    )
    engine.cache.add_local(skill_source)
    engine.init_project(project, AgentType.AIDER)

    result = engine.enable(project, "beads")

    content = (project / "CONVENTIONS.md").read_text()
    assert result.injected is True
    assert result.mcp_configured is None
    assert "Track work with bd." in content
    assert "Use bd." not in content
