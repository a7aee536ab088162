"""Skill build and deploy pipeline.

The pipeline is strictly sequential: :func:`build_skill` runs the external
build command inside the skill directory, then :func:`deploy_skill` copies
the mapped files into the deploy folder, renders the docs template and
writes the ``bin/.env`` file with the configured variable values.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
import shutil
import stat
import sys
import tempfile
from dataclasses import dataclass, field
from string import Template
from typing import Dict, List, Optional

from dotenv import set_key

from skillfactory.constants import (
    BIN_DIR_NAME,
    BUILD_TIMEOUT,
    ENV_FILE_NAME,
    ZIPAPP_INTERPRETER,
)
from skillfactory.errors import BuildError, DeployError
from skillfactory.skill.manifest import Manifest

logger = logging.getLogger(__name__)

_PLACEHOLDER_RE = re.compile(r"\{(python|entry|binary|output)\}")

_WRAPPER_TEMPLATE = """#!/bin/sh
# Generated by SkillFactory for skill '{name}'
exec "$(dirname "$0")/{bin_dir}/{binary}" "$@"
"""


@dataclass
class BuildResult:
    """Outcome of a successful build step."""

    output: str = ""
    skipped: bool = False


@dataclass
class DeployResult:
    """Files written by a successful deploy."""

    deploy_path: str
    files: List[str] = field(default_factory=list)


# ── Build ────────────────────────────────────────────────────────────────


def _build_command(manifest: Manifest, staging_dir: Optional[str]) -> List[str]:
    """Resolve the argv for the build step of *manifest*."""
    output = os.path.join(BIN_DIR_NAME, manifest.binary_name)
    py_exec = sys.executable or "python"

    if manifest.build.command:
        subs = {
            "python": py_exec,
            "entry": manifest.build.entry,
            "binary": manifest.binary_name,
            "output": output,
        }
        argv = [
            _PLACEHOLDER_RE.sub(lambda m: subs[m.group(1)], part)
            for part in manifest.build.command
        ]
        if argv[0].lower() == "python":
            argv[0] = py_exec
        return argv

    package = os.path.basename(os.path.normpath(manifest.build.entry))
    main = manifest.build.main or f"{package}.cli:main"
    return [
        py_exec,
        "-m",
        "zipapp",
        staging_dir or "",
        "-o",
        output,
        "-p",
        sys.executable or ZIPAPP_INTERPRETER,
        "-m",
        main,
    ]


def _stage_entry(manifest: Manifest, staging_root: str) -> str:
    """Copy the entry package under its own name so zipapp keeps the import path."""
    entry_dir = os.path.normpath(os.path.join(manifest.path, manifest.build.entry))
    if not os.path.isdir(entry_dir):
        raise BuildError(
            f"entry '{manifest.build.entry}' is not a directory",
            skill_name=manifest.name,
        )
    package = os.path.basename(entry_dir)
    try:
        shutil.copytree(
            entry_dir,
            os.path.join(staging_root, package),
            ignore=shutil.ignore_patterns("__pycache__", "*.pyc"),
        )
    except OSError as exc:
        raise BuildError(
            f"failed to stage entry '{manifest.build.entry}': {exc}",
            skill_name=manifest.name,
        ) from exc
    return staging_root


async def _run_build(argv: List[str], cwd: str, skill_name: str, timeout: float) -> str:
    logger.info("[%s] Running build: %s", skill_name, " ".join(argv))
    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
    except FileNotFoundError as exc:
        raise BuildError(f"command '{argv[0]}' not found", skill_name=skill_name) from exc
    except OSError as exc:
        raise BuildError(
            f"failed to start '{argv[0]}': {exc}", skill_name=skill_name
        ) from exc

    try:
        out_bytes, _ = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError as exc:
        process.kill()
        await process.wait()
        raise BuildError(
            f"timed out after {timeout:g}s", skill_name=skill_name
        ) from exc

    output = (out_bytes or b"").decode(errors="replace").strip()
    if process.returncode != 0:
        logger.error("[%s] Build exited with code %s", skill_name, process.returncode)
        raise BuildError(
            f"exit status {process.returncode}", skill_name=skill_name, output=output
        )
    logger.info("[%s] Build finished.", skill_name)
    return output


async def build_skill(manifest: Manifest, timeout: float = BUILD_TIMEOUT) -> BuildResult:
    """Run the build step of *manifest* inside its skill directory.

    Skills without ``build.command`` or ``build.entry`` have nothing to
    build and return a skipped result.
    """
    if not manifest.has_build_step:
        logger.info("[%s] No build step configured, skipping.", manifest.name)
        return BuildResult(output="No build step configured", skipped=True)

    try:
        os.makedirs(os.path.join(manifest.path, BIN_DIR_NAME), exist_ok=True)
    except OSError as exc:
        raise BuildError(
            f"failed to create {BIN_DIR_NAME} directory: {exc}", skill_name=manifest.name
        ) from exc

    if manifest.build.command:
        argv = _build_command(manifest, None)
        output = await _run_build(argv, manifest.path, manifest.name, timeout)
        return BuildResult(output=output)

    with tempfile.TemporaryDirectory(prefix="skillfactory-") as staging_root:
        staging = _stage_entry(manifest, staging_root)
        argv = _build_command(manifest, staging)
        output = await _run_build(argv, manifest.path, manifest.name, timeout)

    built = os.path.join(manifest.path, BIN_DIR_NAME, manifest.binary_name)
    if os.path.isfile(built):
        try:
            _make_executable(built)
        except OSError as exc:
            raise BuildError(
                f"failed to mark {built} executable: {exc}", skill_name=manifest.name
            ) from exc
    return BuildResult(output=output or f"Built {BIN_DIR_NAME}/{manifest.binary_name}")


# ── Deploy ───────────────────────────────────────────────────────────────


def _make_executable(path: str) -> None:
    mode = os.stat(path).st_mode
    os.chmod(path, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def _safe_target(deploy_path: str, target: str) -> str:
    """Resolve *target* inside *deploy_path*, refusing anything outside it."""
    dest = os.path.join(deploy_path, target)
    real_dest = os.path.realpath(dest)
    real_base = os.path.realpath(deploy_path)
    if real_dest != real_base and not real_dest.startswith(real_base + os.sep):
        raise DeployError(f"Refusing to write '{target}': not within {deploy_path}")
    return dest


def _render_docs(manifest: Manifest, deploy_path: str) -> Optional[str]:
    if not manifest.docs.template:
        return None

    template_path = os.path.join(manifest.path, manifest.docs.template)
    try:
        with open(template_path, "r", encoding="utf-8") as fh:
            template = Template(fh.read())
    except OSError as exc:
        raise DeployError(f"failed to read docs template: {exc}") from exc

    rendered = template.safe_substitute(
        name=manifest.name,
        description=manifest.description,
        skill_description=manifest.get_skill_description(),
        version=manifest.version,
        binary=manifest.binary_name,
    )
    dest = _safe_target(deploy_path, manifest.docs.output)
    os.makedirs(os.path.dirname(dest) or deploy_path, exist_ok=True)
    with open(dest, "w", encoding="utf-8") as fh:
        fh.write(rendered)
    return dest


def _write_env(deploy_path: str, values: Dict[str, str]) -> str:
    env_path = os.path.join(deploy_path, BIN_DIR_NAME, ENV_FILE_NAME)
    os.makedirs(os.path.dirname(env_path), exist_ok=True)

    # Start from an empty file so stale keys from a previous deploy disappear.
    with open(env_path, "w", encoding="utf-8"):
        pass
    os.chmod(env_path, 0o600)

    for key, value in values.items():
        set_key(env_path, key, value, quote_mode="always")
    os.chmod(env_path, 0o600)
    return env_path


def _write_wrapper(manifest: Manifest, deploy_path: str) -> str:
    dest = _safe_target(deploy_path, manifest.binary_name)
    with open(dest, "w", encoding="utf-8") as fh:
        fh.write(
            _WRAPPER_TEMPLATE.format(
                name=manifest.name,
                bin_dir=BIN_DIR_NAME,
                binary=manifest.binary_name,
            )
        )
    _make_executable(dest)
    return dest


def deploy_skill(manifest: Manifest, values: Dict[str, str], deploy_path: str) -> DeployResult:
    """Copy a built skill into *deploy_path*.

    *values* are the effective variable values written to ``bin/.env``.
    """
    result = DeployResult(deploy_path=deploy_path)
    try:
        os.makedirs(deploy_path, exist_ok=True)

        for mapping in manifest.deploy.files:
            src = os.path.join(manifest.path, mapping.source)
            dest = _safe_target(deploy_path, mapping.target)
            if os.path.isdir(src):
                shutil.copytree(src, dest, dirs_exist_ok=True)
            elif os.path.isfile(src):
                os.makedirs(os.path.dirname(dest) or deploy_path, exist_ok=True)
                shutil.copy2(src, dest)
            else:
                raise DeployError(f"source '{mapping.source}' does not exist")
            result.files.append(dest)
            logger.debug("[%s] Copied %s -> %s", manifest.name, src, dest)

        docs = _render_docs(manifest, deploy_path)
        if docs:
            result.files.append(docs)

        result.files.append(_write_env(deploy_path, values))

        if manifest.deploy.wrapper:
            result.files.append(_write_wrapper(manifest, deploy_path))
    except OSError as exc:
        raise DeployError(f"deploy to {deploy_path} failed: {exc}") from exc

    logger.info(
        "Skill '%s' deployed to %s (%d file(s))",
        manifest.name,
        deploy_path,
        len(result.files),
    )
    return result


async def build_and_deploy(
    manifest: Manifest,
    values: Dict[str, str],
    deploy_path: str,
    timeout: float = BUILD_TIMEOUT,
) -> tuple[BuildResult, DeployResult]:
    """Run the full pipeline outside the TUI."""
    build = await build_skill(manifest, timeout=timeout)
    deploy = deploy_skill(manifest, values, deploy_path)
    return build, deploy
