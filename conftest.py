"""Pytest configuration and fixtures.

This module provides shared fixtures and configuration for the test suite.
Every test that touches harness or grimoire directories runs against a
temporary home directory.
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent
SRC_PATH = PROJECT_ROOT / "src"


if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point Path.home() at a temporary directory and clear GRIMOIRE_HOME."""
    monkeypatch.delenv("GRIMOIRE_HOME", raising=False)
    with patch("pathlib.Path.home", return_value=tmp_path):
        yield tmp_path


@pytest.fixture
def skill_source(tmp_path: Path) -> Path:
    """A local skill directory named 'beads'."""
    source = tmp_path / "sources" / "beads"
    source.mkdir(parents=True)
    (source / "SKILL.md").write_text(
        "---\nname: beads\ndescription: Issue tracking with bd\n---\n\n# Beads\n\nUse bd.\n"
    )
    (source / "reference.md").write_text("extra notes\n")
    return source
