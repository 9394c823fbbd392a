"""On-disk profile storage under ~/.grimoire/profiles/."""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path

from pydantic import ValidationError

from grimoire.config import get_grimoire_dir
from grimoire.errors import ProfileConfigError, ProfileNotFoundError
from grimoire.jsonio import write_json
from grimoire.models.profile import Profile

logger = logging.getLogger(__name__)

PROFILES_DIR = "profiles"
PROFILE_METADATA_FILE = "profile.json"


class ProfileStore:
    """Reads and writes profile directories.

    Each profile lives in ``<base>/<name>/`` with ``profile.json`` plus
    ``skills/`` and ``commands/`` holding the content to copy into harnesses.
    """

    def __init__(self, base_dir: Path | None = None) -> None:
        self._base_dir = base_dir

    @property
    def profiles_dir(self) -> Path:
        return self._base_dir or get_grimoire_dir() / PROFILES_DIR

    def profile_dir(self, name: str) -> Path:
        return self.profiles_dir / name

    def skills_dir(self, name: str) -> Path:
        return self.profile_dir(name) / "skills"

    def commands_dir(self, name: str) -> Path:
        return self.profile_dir(name) / "commands"

    def metadata_path(self, name: str) -> Path:
        return self.profile_dir(name) / PROFILE_METADATA_FILE

    def exists(self, name: str) -> bool:
        return self.metadata_path(name).is_file()

    def list_names(self) -> list[str]:
        if not self.profiles_dir.is_dir():
            return []
        return sorted(
            entry.name
            for entry in self.profiles_dir.iterdir()
            if entry.is_dir() and (entry / PROFILE_METADATA_FILE).is_file()
        )

    def load(self, name: str) -> Profile:
        """
        Load a profile by name.

        Raises:
            ProfileNotFoundError: If the profile does not exist.
            ProfileConfigError: If profile.json is malformed.
        """
        path = self.metadata_path(name)
        if not path.is_file():
            raise ProfileNotFoundError(name)

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return Profile.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            raise ProfileConfigError(path, str(e)) from e

    def save(self, profile: Profile) -> None:
        """Write profile.json, creating the profile directory layout."""
        name = profile.metadata.name
        path = self.metadata_path(name)
        try:
            self.skills_dir(name).mkdir(parents=True, exist_ok=True)
            self.commands_dir(name).mkdir(parents=True, exist_ok=True)
            write_json(path, profile.to_json_dict())
        except OSError as e:
            raise ProfileConfigError(path, f"failed to write profile: {e}") from e

    def delete(self, name: str) -> None:
        if not self.exists(name):
            raise ProfileNotFoundError(name)
        shutil.rmtree(self.profile_dir(name))
        logger.info(f"Deleted profile directory {self.profile_dir(name)}")
