"""CLI argument parsing and main entry point.

Provides three modes of operation:

* ``skillfactory tui``    — the interactive wizard (default).
* ``skillfactory list``   — print discovered skills and load errors.
* ``skillfactory deploy`` — headless build + deploy of one skill.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from typing import Dict, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from skillfactory.config import FactoryConfig, load_config, save_config
from skillfactory.constants import APP_NAME, APP_VERSION, DEFAULT_LOG_LEVEL, ROOT_ENV_VAR
from skillfactory.display.logging_config import setup_logging
from skillfactory.errors import SkillFactoryError
from skillfactory.skill.builder import build_and_deploy
from skillfactory.skill.discovery import discover_skills, find_project_root
from skillfactory.skill.manifest import Manifest
from skillfactory.wizard import Wizard

module_logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)


def _resolve_root(args: argparse.Namespace) -> str:
    """CLI flag → env var → auto-detect."""
    root = getattr(args, "root", None) or os.environ.get(ROOT_ENV_VAR)
    if root:
        return os.path.abspath(root)
    return find_project_root()


def _fail(message: str) -> None:
    err_console.print(f"[red]Error:[/red] {escape(message)}", highlight=False, soft_wrap=True)
    sys.exit(1)


# ── ``skillfactory tui`` ─────────────────────────────────────────────────


def _cmd_tui(args: argparse.Namespace) -> None:
    """Entry-point for ``skillfactory tui``."""
    setup_logging(args.log_level, quiet=True)
    project_root = _resolve_root(args)
    module_logger.info("---- %s v%s TUI starting (root: %s) ----", APP_NAME, APP_VERSION, project_root)

    from skillfactory.tui.app import SkillFactoryApp

    try:
        SkillFactoryApp.from_project(project_root).run()
    except KeyboardInterrupt:
        module_logger.info("%s TUI interrupted by KeyboardInterrupt.", APP_NAME)
    except Exception as e_fatal:
        module_logger.exception("%s TUI encountered an uncaught fatal error: %s", APP_NAME, e_fatal)
        _fail(f"running TUI: {e_fatal}")
    finally:
        module_logger.info("%s TUI finished.", APP_NAME)


# ── ``skillfactory list`` ────────────────────────────────────────────────


def _cmd_list(args: argparse.Namespace) -> None:
    """Entry-point for ``skillfactory list``."""
    project_root = _resolve_root(args)
    try:
        manifests, errors = discover_skills(project_root)
    except SkillFactoryError as exc:
        _fail(str(exc))
        return

    if not manifests and not errors:
        console.print(f"No skills found in {project_root}")
        return

    table = Table(title=f"Skills in {project_root}")
    table.add_column("Skill", style="bold")
    table.add_column("Version")
    table.add_column("Variables", justify="right")
    table.add_column("Description")
    for manifest in manifests:
        table.add_row(
            escape(manifest.name),
            escape(manifest.version),
            str(len(manifest.variables)),
            escape(manifest.description),
        )
    for err in errors:
        table.add_row(
            f"[red]{escape(err.name)}[/red]", "", "", f"[red]{escape(err.message)}[/red]"
        )
    console.print(table)


# ── ``skillfactory deploy`` ──────────────────────────────────────────────


def _parse_assignments(manifest: Manifest, pairs: List[str]) -> Dict[str, str]:
    declared = {v.name for v in manifest.variables}
    values: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise SkillFactoryError(f"invalid --set value '{pair}', expected KEY=VALUE")
        if key not in declared:
            raise SkillFactoryError(
                f"unknown variable '{key}' for skill '{manifest.name}'"
            )
        values[key] = value
    return values


def _prepare_wizard(
    manifest: Manifest,
    values: Dict[str, str],
    skills_folder: str,
    name: Optional[str],
) -> Wizard:
    """Fill a wizard exactly as the configure screen would."""
    wizard = Wizard(manifests=[manifest], config_values=dict(values))
    wizard.skills_folder = skills_folder
    wizard.skill_folder_name = name or ""
    wizard.select()
    if not wizard.submit_config():
        raise SkillFactoryError(wizard.error_msg)
    return wizard


def _cmd_deploy(args: argparse.Namespace) -> None:
    """Entry-point for ``skillfactory deploy``."""
    setup_logging(args.log_level, quiet=True)
    project_root = _resolve_root(args)

    try:
        manifests, _errors = discover_skills(project_root)
        manifest = next((m for m in manifests if m.name == args.skill), None)
        if manifest is None:
            raise SkillFactoryError(f"skill '{args.skill}' not found in {project_root}")

        skills_folder = args.skills_folder
        if not skills_folder:
            skills_folder = load_config().skills_folder

        wizard = _prepare_wizard(
            manifest,
            _parse_assignments(manifest, args.set or []),
            skills_folder,
            args.name,
        )
        if not wizard.confirm():
            if not args.force:
                raise SkillFactoryError(
                    f"{wizard.deploy_path()} already contains '{manifest.name}' "
                    "(use --force to overwrite)"
                )
            wizard.confirm_overwrite()

        with console.status(f"Building {manifest.name}…"):
            build, deploy = asyncio.run(
                build_and_deploy(manifest, wizard.variable_values(), wizard.deploy_path())
            )
        wizard.build_finished(build.output)
        wizard.deploy_finished()
        save_config(FactoryConfig(skills_folder=wizard.skills_folder))
    except SkillFactoryError as exc:
        output = getattr(exc, "output", "")
        if output:
            err_console.print(output, markup=False, highlight=False)
        _fail(str(exc))
        return

    if args.verbose and build.output:
        console.print(build.output, markup=False, highlight=False)
    console.print(f"[green]✓[/green] {wizard.status_msg}")
    console.print(f"  {deploy.deploy_path} ({len(deploy.files)} file(s))", highlight=False)


# ── CLI parser construction ──────────────────────────────────────────────


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser with tui/list/deploy subcommands."""
    parser = argparse.ArgumentParser(
        prog="skillfactory",
        description=f"{APP_NAME} v{APP_VERSION} — build & deploy skills",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"{APP_NAME} {APP_VERSION}",
    )
    parser.add_argument(
        "--root",
        type=str,
        default=None,
        metavar="PATH",
        help=f"Project root containing skills/ (or set {ROOT_ENV_VAR}; default: auto-detect)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=DEFAULT_LOG_LEVEL.lower(),
        choices=["debug", "info", "warning", "error", "critical"],
        help="Set file logging level (default: info)",
    )

    subparsers = parser.add_subparsers(dest="command")

    # ── tui ─────────────────────────────────────────────────────
    sp_tui = subparsers.add_parser("tui", help="Launch the interactive wizard (default)")
    sp_tui.set_defaults(func=_cmd_tui)

    # ── list ────────────────────────────────────────────────────
    sp_list = subparsers.add_parser("list", help="List discovered skills")
    sp_list.set_defaults(func=_cmd_list)

    # ── deploy ──────────────────────────────────────────────────
    sp_deploy = subparsers.add_parser("deploy", help="Build and deploy a skill without the TUI")
    sp_deploy.add_argument("skill", help="Skill name as declared in skill.yaml")
    sp_deploy.add_argument(
        "--skills-folder",
        type=str,
        default=None,
        metavar="DIR",
        help="Base folder for deployed skills (default: last used folder)",
    )
    sp_deploy.add_argument(
        "--name",
        type=str,
        default=None,
        help="Subfolder name for this skill (default: skill name)",
    )
    sp_deploy.add_argument(
        "--set",
        action="append",
        metavar="KEY=VALUE",
        help="Set a skill variable (repeatable)",
    )
    sp_deploy.add_argument(
        "--force",
        action="store_true",
        default=False,
        help="Overwrite an existing deployment",
    )
    sp_deploy.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Print the build output",
    )
    sp_deploy.set_defaults(func=_cmd_deploy)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Program entry point: parse arguments and dispatch to subcommand."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        _cmd_tui(args)
    else:
        args.func(args)
