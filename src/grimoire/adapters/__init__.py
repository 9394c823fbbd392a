"""Agent adapters - per-agent strategies for enabling skills."""

from grimoire.adapters.base import AgentAdapter
from grimoire.adapters.registry import (
    DETECTION_ORDER,
    detect_agent,
    get_adapter,
    list_adapters,
    register_adapter,
)

__all__ = [
    "DETECTION_ORDER",
    "AgentAdapter",
    "detect_agent",
    "get_adapter",
    "list_adapters",
    "register_adapter",
]
