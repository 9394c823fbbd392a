"""Persistent per-project skills state in ~/.grimoire/skills-state.json.

All mutations go through SkillStateStore so there is a single writer per
process. Writes are atomic (temp file + rename); concurrent CLI processes
are not coordinated.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from grimoire.config import get_grimoire_dir
from grimoire.errors import StateFileError
from grimoire.models.profile import utc_now
from grimoire.models.skill import AgentType, ProjectState, SkillsState

logger = logging.getLogger(__name__)

STATE_FILE = "skills-state.json"


def _project_key(project_path: Path) -> str:
    return str(project_path.expanduser().resolve())


class SkillStateStore:
    """Reads and writes skills-state.json."""

    def __init__(self, state_file: Path | None = None) -> None:
        self._state_file = state_file

    @property
    def state_file(self) -> Path:
        return self._state_file or get_grimoire_dir() / STATE_FILE

    def load(self) -> SkillsState:
        """
        Load the state file; a missing file is an empty state.

        Raises:
            StateFileError: If the file exists but cannot be parsed.
        """
        path = self.state_file
        if not path.exists():
            return SkillsState()
        try:
            return SkillsState.model_validate(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            raise StateFileError(f"Failed to read {path}: {e}") from e

    def save(self, state: SkillsState) -> None:
        path = self.state_file
        tmp_path = path.with_name(f"{path.name}.tmp")
        payload = state.model_dump(mode="json", by_alias=True, exclude_none=True)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as e:
            raise StateFileError(f"Failed to write {path}: {e}") from e

    def get_project(self, project_path: Path) -> ProjectState | None:
        return self.load().projects.get(_project_key(project_path))

    def is_initialized(self, project_path: Path) -> bool:
        return self.get_project(project_path) is not None

    def init_project(self, project_path: Path, agent: AgentType) -> ProjectState:
        """Record a project; an already initialized project is left as is."""
        state = self.load()
        key = _project_key(project_path)
        existing = state.projects.get(key)
        if existing is not None:
            return existing

        project = ProjectState(agent=agent, initialized_at=utc_now())
        state.projects[key] = project
        self.save(state)
        logger.info(f"Initialized skills state for {key} ({agent.value})")
        return project

    def get_enabled(self, project_path: Path) -> list[str]:
        project = self.get_project(project_path)
        return list(project.enabled) if project else []

    def add_enabled(self, project_path: Path, name: str) -> None:
        state = self.load()
        project = self._require(state, project_path)
        if name not in project.enabled:
            project.enabled.append(name)
        project.disabled_at.pop(name, None)
        project.last_sync = utc_now()
        self.save(state)

    def remove_enabled(self, project_path: Path, name: str) -> None:
        state = self.load()
        project = self._require(state, project_path)
        project.enabled = [skill for skill in project.enabled if skill != name]
        project.last_sync = utc_now()
        self.save(state)

    def record_disable(self, project_path: Path, name: str) -> None:
        state = self.load()
        project = self._require(state, project_path)
        project.disabled_at[name] = utc_now()
        self.save(state)

    def get_global_enabled(self, agent: AgentType) -> list[str]:
        return list(self.load().global_enabled.get(agent.value, []))

    def add_global_enabled(self, agent: AgentType, name: str) -> None:
        state = self.load()
        names = state.global_enabled.setdefault(agent.value, [])
        if name not in names:
            names.append(name)
            self.save(state)

    def remove_global_enabled(self, agent: AgentType, name: str) -> None:
        state = self.load()
        names = state.global_enabled.get(agent.value, [])
        if name in names:
            names.remove(name)
            self.save(state)

    def _require(self, state: SkillsState, project_path: Path) -> ProjectState:
        project = state.projects.get(_project_key(project_path))
        if project is None:
            raise StateFileError(f"Project not initialized in state: {project_path}")
        return project
