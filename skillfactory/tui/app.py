"""SkillFactory Textual TUI application.

Renders the :class:`~skillfactory.wizard.Wizard` one screen per view and
runs the build-then-deploy pipeline in a single exclusive worker.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.screen import Screen
from textual.widgets import Footer, Header

from skillfactory.config import FactoryConfig, load_config, save_config
from skillfactory.constants import APP_NAME, APP_VERSION
from skillfactory.errors import (
    BuildError,
    ConfigurationError,
    DeployError,
    SkillDiscoveryError,
)
from skillfactory.skill.builder import build_skill, deploy_skill
from skillfactory.skill.discovery import discover_skills
from skillfactory.tui.events import BuildComplete, DeployComplete
from skillfactory.tui.screens import (
    BuildingScreen,
    ConfigScreen,
    ConfirmScreen,
    DoneScreen,
    OverwriteModal,
    SkillListScreen,
)
from skillfactory.wizard import View, Wizard

logger = logging.getLogger(__name__)

_SCREENS = {
    View.SKILL_LIST: SkillListScreen,
    View.CONFIG: ConfigScreen,
    View.CONFIRM: ConfirmScreen,
    View.BUILDING: BuildingScreen,
    View.DONE: DoneScreen,
}


def create_wizard(project_root: str, config: Optional[FactoryConfig] = None) -> Wizard:
    """Discover skills under *project_root* and seed a fresh wizard."""
    wizard = Wizard()
    try:
        wizard.manifests, wizard.skill_errors = discover_skills(project_root)
    except SkillDiscoveryError as exc:
        logger.error("Skill discovery failed: %s", exc)
        wizard.error_msg = str(exc)
    if config is not None:
        wizard.skills_folder = config.skills_folder
    return wizard


class SkillFactoryApp(App):
    """Textual TUI for building and deploying skills."""

    TITLE = f"{APP_NAME} v{APP_VERSION}"
    SUB_TITLE = "Build & deploy skills"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
    ]

    def __init__(
        self,
        wizard: Wizard,
        *,
        config_path: Optional[str] = None,
        project_root: str = "",
    ) -> None:
        super().__init__()
        self.wizard = wizard
        self._config_path = config_path
        self._project_root = project_root
        if project_root:
            self.sub_title = project_root

    @classmethod
    def from_project(cls, project_root: str, config_path: Optional[str] = None) -> SkillFactoryApp:
        try:
            config = load_config(config_path)
        except ConfigurationError as exc:
            logger.warning("Could not load config, using defaults: %s", exc)
            config = FactoryConfig()
        return cls(
            create_wizard(project_root, config),
            config_path=config_path,
            project_root=project_root,
        )

    # ── Compose (fallback, replaced by the list screen on mount) ──

    def compose(self) -> ComposeResult:
        yield Header()
        yield Footer()

    def on_mount(self) -> None:
        self.push_screen(SkillListScreen())

    # ── View switching ──────────────────────────────────────────

    def _make_screen(self, view: View) -> Screen:
        return _SCREENS[view]()

    def show_view(self) -> None:
        """Switch to the screen matching the wizard's current view."""
        view = self.wizard.view
        logger.debug("Switching to view %s", view.value)
        if view == View.OVERWRITE:
            self.push_screen(OverwriteModal(self.wizard.deploy_path()), self._on_overwrite_choice)
            return
        self.switch_screen(self._make_screen(view))

    def confirm_deploy(self) -> None:
        """Called from the confirm screen when the user accepts."""
        if self.wizard.confirm():
            self.show_view()
            self._start_pipeline()
        else:
            self.show_view()

    def _on_overwrite_choice(self, overwrite: Optional[bool]) -> None:
        if overwrite:
            self.wizard.confirm_overwrite()
            self.show_view()
            self._start_pipeline()
        else:
            # The confirm screen is still underneath the dismissed modal.
            self.wizard.cancel_overwrite()

    # ── Pipeline ────────────────────────────────────────────────

    def _start_pipeline(self) -> None:
        self.run_worker(self._run_build(), name="build", group="pipeline", exclusive=True)

    async def _run_build(self) -> None:
        manifest = self.wizard.selected_skill
        if manifest is None:
            self.post_message(BuildComplete(error="No skill selected"))
            return
        try:
            result = await build_skill(manifest)
        except BuildError as exc:
            self.post_message(BuildComplete(output=exc.output, error=str(exc)))
            return
        self.post_message(BuildComplete(output=result.output))

    async def _run_deploy(self) -> None:
        manifest = self.wizard.selected_skill
        deploy_path = self.wizard.deploy_path()
        if manifest is None:
            self.post_message(DeployComplete(deploy_path, error="No skill selected"))
            return
        try:
            await asyncio.to_thread(
                deploy_skill, manifest, self.wizard.variable_values(), deploy_path
            )
        except DeployError as exc:
            self.post_message(DeployComplete(deploy_path, error=str(exc)))
            return
        self.post_message(DeployComplete(deploy_path))

    def on_build_complete(self, message: BuildComplete) -> None:
        if self.wizard.build_finished(message.output, message.error):
            self.run_worker(self._run_deploy(), name="deploy", group="pipeline", exclusive=True)
        else:
            self.show_view()

    def on_deploy_complete(self, message: DeployComplete) -> None:
        self.wizard.deploy_finished(message.error)
        if message.error is None:
            self._remember_skills_folder()
        self.show_view()

    def _remember_skills_folder(self) -> None:
        try:
            save_config(FactoryConfig(skills_folder=self.wizard.skills_folder), self._config_path)
        except ConfigurationError as exc:
            logger.warning("Could not save config: %s", exc)
