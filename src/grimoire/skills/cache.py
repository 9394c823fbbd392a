"""Local skill cache under ~/.grimoire/cache/."""

from __future__ import annotations

import json
import logging
import shutil
from datetime import datetime
from pathlib import Path

from grimoire.adapters.base import remove_path
from grimoire.config import get_grimoire_dir
from grimoire.errors import SkillManifestError, SkillNotCachedError
from grimoire.jsonio import write_json
from grimoire.models.profile import utc_now
from grimoire.models.skill import CachedSkill
from grimoire.skills.manifest import (
    AGENT_CONFIG_FILE_NAME,
    SKILL_FILE_NAME,
    parse_agent_configs,
    parse_skill_file,
)

logger = logging.getLogger(__name__)

CACHE_DIR = "cache"
CACHE_META_FILE = ".meta.json"

_SKIPPED_NAMES = {".git", "node_modules", ".DS_Store", ".gitignore"}


def _ignore_local(directory: str, names: list[str]) -> set[str]:
    return {name for name in names if name in _SKIPPED_NAMES or name.startswith(".")}


class SkillCache:
    """Stores fetched skills so they can be enabled offline."""

    def __init__(self, cache_dir: Path | None = None) -> None:
        self._cache_dir = cache_dir

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir or get_grimoire_dir() / CACHE_DIR

    def skill_dir(self, name: str) -> Path:
        return self.cache_dir / name

    def is_cached(self, name: str) -> bool:
        return (self.skill_dir(name) / SKILL_FILE_NAME).is_file()

    def get_cached(self, name: str) -> CachedSkill:
        """
        Load a cached skill.

        Raises:
            SkillNotCachedError: If the skill is not in the cache.
            SkillManifestError: If its SKILL.md or skill.yaml is invalid.
        """
        skill_dir = self.skill_dir(name)
        skill_md = skill_dir / SKILL_FILE_NAME
        if not skill_md.is_file():
            raise SkillNotCachedError(name)

        manifest = parse_skill_file(skill_md)
        meta = self._read_meta(skill_dir)
        cached_at = meta.get("cachedAt")
        return CachedSkill(
            manifest=manifest,
            cached_at=datetime.fromisoformat(str(cached_at)) if cached_at else utc_now(),
            source=str(meta.get("source", skill_dir)),
            skill_md_path=skill_md,
            agents=parse_agent_configs(skill_dir / AGENT_CONFIG_FILE_NAME),
        )

    def list_cached(self) -> list[CachedSkill]:
        if not self.cache_dir.is_dir():
            return []
        skills = []
        for entry in sorted(self.cache_dir.iterdir()):
            if not (entry / SKILL_FILE_NAME).is_file():
                continue
            try:
                skills.append(self.get_cached(entry.name))
            except SkillManifestError as e:
                logger.warning(f"Skipping invalid cached skill {entry.name}: {e}")
        return skills

    def add_local(self, source: Path, version: str | None = None) -> CachedSkill:
        """
        Cache a skill from a local directory containing SKILL.md.

        Args:
            source: Skill directory (or its SKILL.md file)
            version: Optional version label stored in the cache metadata

        Returns:
            The cached skill, keyed by its manifest name.

        Raises:
            SkillManifestError: If the source has no valid SKILL.md.
        """
        source = source.expanduser().resolve()
        if source.is_file():
            source = source.parent
        skill_md = source / SKILL_FILE_NAME
        if not skill_md.is_file():
            raise SkillManifestError(f"No {SKILL_FILE_NAME} found in {source}")

        manifest = parse_skill_file(skill_md)
        destination = self.skill_dir(manifest.name)
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        remove_path(destination)
        shutil.copytree(source, destination, ignore=_ignore_local)

        meta: dict[str, object] = {"source": str(source), "cachedAt": utc_now().isoformat()}
        if version:
            meta["version"] = version
        write_json(destination / CACHE_META_FILE, meta)
        logger.info(f"Cached skill {manifest.name} from {source}")
        return self.get_cached(manifest.name)

    def remove(self, name: str) -> None:
        if not remove_path(self.skill_dir(name)):
            raise SkillNotCachedError(name)
        logger.info(f"Removed cached skill {name}")

    def _read_meta(self, skill_dir: Path) -> dict[str, object]:
        meta_path = skill_dir / CACHE_META_FILE
        if not meta_path.is_file():
            return {}
        try:
            data = json.loads(meta_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable cache metadata {meta_path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}
