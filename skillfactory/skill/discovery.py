"""Skill discovery — scan the project's ``skills/`` directory."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Optional, Tuple

from skillfactory.constants import (
    MANIFEST_FILE,
    ROOT_MARKER_FILE,
    ROOT_SEARCH_DEPTH,
    SKILLS_DIR_NAME,
)
from skillfactory.errors import SkillDiscoveryError, SkillManifestError
from skillfactory.skill.manifest import Manifest, load_manifest

logger = logging.getLogger(__name__)


@dataclass
class SkillLoadError:
    """A skill directory whose manifest failed to load."""

    name: str
    path: str
    error: SkillManifestError

    @property
    def message(self) -> str:
        return str(self.error)


def discover_skills(base_dir: str) -> Tuple[List[Manifest], List[SkillLoadError]]:
    """Find all skills under ``<base_dir>/skills``.

    Returns the valid manifests and the skills that failed to load.
    Directories without a ``skill.yaml`` are ignored.
    """
    skills_dir = os.path.join(base_dir, SKILLS_DIR_NAME)

    try:
        entries = sorted(os.listdir(skills_dir))
    except OSError as exc:
        raise SkillDiscoveryError(f"failed to read skills directory: {exc}") from exc

    manifests: List[Manifest] = []
    errors: List[SkillLoadError] = []

    for entry in entries:
        skill_dir = os.path.join(skills_dir, entry)
        if not os.path.isdir(skill_dir):
            continue
        if not os.path.isfile(os.path.join(skill_dir, MANIFEST_FILE)):
            continue

        try:
            manifests.append(load_manifest(skill_dir))
        except SkillManifestError as exc:
            logger.warning("Skipping invalid skill at %s: %s", skill_dir, exc)
            errors.append(SkillLoadError(name=entry, path=skill_dir, error=exc))

    logger.info(
        "Discovered %d skill(s), %d failed to load", len(manifests), len(errors)
    )
    return manifests, errors


def find_project_root(start: Optional[str] = None) -> str:
    """Walk upwards from *start* looking for the SkillFactory project root.

    A root contains both ``pyproject.toml`` and a ``skills/`` directory.
    Falls back to *start* (default: CWD) when nothing matches.
    """
    origin = os.path.abspath(start or os.getcwd())
    current = origin
    for _ in range(ROOT_SEARCH_DEPTH):
        if os.path.isfile(os.path.join(current, ROOT_MARKER_FILE)) and os.path.isdir(
            os.path.join(current, SKILLS_DIR_NAME)
        ):
            return current
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent
    return origin
