"""Agent adapter registry and project detection."""

from __future__ import annotations

import importlib
import pkgutil
from pathlib import Path

from grimoire.adapters.base import AgentAdapter
from grimoire.models.skill import AgentType

_ADAPTERS: dict[AgentType, AgentAdapter] = {}
_AUTO_DISCOVERED = False

# Most specific markers first; several agents share AGENTS.md so generic goes last.
DETECTION_ORDER: tuple[AgentType, ...] = (
    AgentType.CLAUDE_CODE,
    AgentType.OPENCODE,
    AgentType.CURSOR,
    AgentType.CODEX,
    AgentType.AMP,
    AgentType.GEMINI,
    AgentType.AIDER,
    AgentType.GENERIC,
)

_SUPPORT_MODULES = ("base", "registry", "directory", "instructions")


def register_adapter(adapter: AgentAdapter) -> None:
    """Register an agent adapter."""
    _ADAPTERS[adapter.agent_type] = adapter


def get_adapter(agent: AgentType | str) -> AgentAdapter | None:
    """Return an agent adapter by type or name."""
    _ensure_auto_discovery()
    try:
        return _ADAPTERS.get(AgentType(agent))
    except ValueError:
        return None


def list_adapters() -> list[AgentAdapter]:
    """List registered adapters in detection order."""
    _ensure_auto_discovery()
    return [_ADAPTERS[agent] for agent in DETECTION_ORDER if agent in _ADAPTERS]


def detect_agent(project_path: Path) -> AgentAdapter | None:
    """Return the first adapter whose markers are present in the project."""
    for adapter in list_adapters():
        if adapter.detect(project_path):
            return adapter
    return None


def _ensure_auto_discovery() -> None:
    global _AUTO_DISCOVERED
    if not _AUTO_DISCOVERED:
        _auto_discover_adapters()
        _AUTO_DISCOVERED = True


def _auto_discover_adapters() -> None:
    """Import every adapter module in this package so each registers itself."""
    adapters_dir = Path(__file__).parent
    for module_info in pkgutil.iter_modules([str(adapters_dir)]):
        if module_info.name in _SUPPORT_MODULES:
            continue
        importlib.import_module(f"grimoire.adapters.{module_info.name}")
