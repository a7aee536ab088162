"""Skills — manifest parsing, discovery, build and deploy.

Provides:
- ``Manifest`` — parsed skill.yaml
- ``discover_skills`` / ``find_project_root`` — locating skills
- ``build_skill`` / ``deploy_skill`` — the build-then-deploy pipeline
"""

from skillfactory.skill.builder import (
    BuildResult,
    DeployResult,
    build_and_deploy,
    build_skill,
    deploy_skill,
)
from skillfactory.skill.discovery import SkillLoadError, discover_skills, find_project_root
from skillfactory.skill.manifest import Manifest, Variable, load_manifest

__all__ = [
    "BuildResult",
    "DeployResult",
    "Manifest",
    "SkillLoadError",
    "Variable",
    "build_and_deploy",
    "build_skill",
    "deploy_skill",
    "discover_skills",
    "find_project_root",
    "load_manifest",
]
