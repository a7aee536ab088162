"""Skill manifest — parsing and validation of skill.yaml.

A skill manifest describes a deployable skill package::

    name: vikunja
    version: 1.0.0
    description: Vikunja task management
    variables:
      - name: VIKUNJA_URL
        label: Vikunja URL
        required: true
        placeholder: https://vikunja.example.com/api/v1
      - name: VIKUNJA_TOKEN
        label: API Token
        required: true
        type: secret
    build:
      entry: ../../vikunja_skill
      binary: vikunja
    deploy:
      files:
        - source: bin/vikunja
          target: bin/vikunja
    docs:
      template: SKILL.md.tmpl
      output: SKILL.md
"""

from __future__ import annotations

import logging
import os
from typing import List, Literal, Optional

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from skillfactory.constants import MANIFEST_FILE
from skillfactory.errors import SkillManifestError

logger = logging.getLogger(__name__)


def _scalar_as_str(v: object) -> object:
    """Accept YAML scalars for text fields: numbers and booleans as text, null as empty."""
    if v is None:
        return ""
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, (int, float)):
        return str(v)
    return v


class Variable(BaseModel):
    """A configurable skill variable, written to the deployed ``.env``."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1)
    label: str = ""
    description: str = ""
    required: bool = False
    placeholder: str = ""
    default: str = ""
    type: Literal["string", "secret", "json"] = "string"

    _text = field_validator("label", "description", "placeholder", "default", mode="before")(
        _scalar_as_str
    )

    @property
    def display_label(self) -> str:
        return self.label or self.name

    @property
    def is_secret(self) -> bool:
        return self.type == "secret"


class BuildConfig(BaseModel):
    """Build step configuration."""

    model_config = ConfigDict(extra="ignore")

    entry: str = ""
    binary: str = ""
    main: str = Field(
        default="",
        description="zipapp entry point, defaults to '<package>.cli:main'.",
    )
    command: Optional[List[str]] = Field(
        default=None,
        description="Explicit build argv; supports {python} {entry} {binary} {output}.",
    )

    _text = field_validator("entry", "binary", "main", mode="before")(_scalar_as_str)

    @field_validator("command", mode="before")
    @classmethod
    def _command_as_str(cls, v: object) -> object:
        if isinstance(v, list):
            return [_scalar_as_str(part) for part in v]
        return v


class DeployFile(BaseModel):
    """A single file (or directory) copied into the deploy folder."""

    source: str = Field(..., min_length=1)
    target: str = Field(..., min_length=1)


class DeployConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    files: List[DeployFile] = Field(default_factory=list)
    wrapper: bool = False


class DocsConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    template: str = ""
    output: str = "SKILL.md"

    _text = field_validator("template", mode="before")(_scalar_as_str)


class Manifest(BaseModel):
    """Parsed ``skill.yaml``.

    ``path`` is set at load time and is not part of the YAML document.
    """

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1)
    description: str = ""
    skill_description: str = Field(
        default="",
        description="Longer description used for the SKILL.md frontmatter.",
    )
    version: str = ""
    variables: List[Variable] = Field(default_factory=list)
    build: BuildConfig = Field(default_factory=BuildConfig)
    deploy: DeployConfig = Field(default_factory=DeployConfig)
    docs: DocsConfig = Field(default_factory=DocsConfig)

    # Runtime only: directory the manifest was loaded from.
    path: str = Field(default="", exclude=True)

    # YAML reads "1.0" as a float
    _text = field_validator("description", "skill_description", "version", mode="before")(
        _scalar_as_str
    )

    @property
    def binary_name(self) -> str:
        return self.build.binary or self.name

    @property
    def has_build_step(self) -> bool:
        return bool(self.build.command) or bool(self.build.entry)

    def get_skill_description(self) -> str:
        """Return ``skill_description`` if set, otherwise ``description``."""
        if self.skill_description:
            return self.skill_description
        return self.description

    def required_variables(self) -> List[Variable]:
        return [v for v in self.variables if v.required]

    def optional_variables(self) -> List[Variable]:
        return [v for v in self.variables if not v.required]


def load_manifest(skill_dir: str) -> Manifest:
    """Load a skill manifest from *skill_dir*.

    Raises :class:`SkillManifestError` when the file cannot be read or
    does not describe a valid manifest.
    """
    manifest_path = os.path.join(skill_dir, MANIFEST_FILE)

    try:
        with open(manifest_path, "r", encoding="utf-8") as f:
            raw = f.read()
    except OSError as exc:
        raise SkillManifestError(f"failed to read {MANIFEST_FILE}: {exc}") from exc

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise SkillManifestError(f"failed to parse {MANIFEST_FILE}: {exc}") from exc

    if not isinstance(data, dict):
        raise SkillManifestError(
            f"failed to parse {MANIFEST_FILE}: top-level content must be a mapping"
        )

    try:
        manifest = Manifest.model_validate(data)
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in exc.errors()
        )
        raise SkillManifestError(f"failed to parse {MANIFEST_FILE}: {details}") from exc

    manifest.path = skill_dir
    logger.debug("Loaded manifest '%s' from %s", manifest.name, skill_dir)
    return manifest
