"""Building and done screens."""

from __future__ import annotations

from rich.markup import escape
from textual.app import ComposeResult
from textual.containers import Vertical, VerticalScroll
from textual.widgets import LoadingIndicator, Static

from skillfactory.tui.screens.base import FactoryScreen


class BuildingScreen(FactoryScreen):
    """Shown while the build and deploy worker runs."""

    DEFAULT_CSS = """
    BuildingScreen #building-box {
        align: center middle;
        height: 1fr;
    }
    BuildingScreen #building-text {
        text-align: center;
        width: 1fr;
    }
    BuildingScreen LoadingIndicator {
        height: 3;
    }
    """

    def compose_content(self) -> ComposeResult:
        skill = self.wizard.selected_skill
        name = skill.name if skill else ""
        with Vertical(id="building-box"):
            yield LoadingIndicator()
            yield Static(
                f"Building and deploying [b]{escape(name)}[/b]…",
                id="building-text",
            )


class DoneScreen(FactoryScreen):
    """Result of the pipeline: success message or error, plus build output."""

    DEFAULT_CSS = """
    DoneScreen #done-box {
        padding: 1 2;
    }
    DoneScreen #done-status.success {
        color: $success;
        text-style: bold;
    }
    DoneScreen #done-status.failure {
        color: $error;
        text-style: bold;
    }
    DoneScreen #done-output {
        border: round $primary;
        margin-top: 1;
        height: 1fr;
    }
    DoneScreen #done-help {
        color: $text-muted;
        margin: 0 2;
    }
    """

    BINDINGS = [
        ("enter", "quit_app", "Quit"),
        ("q", "quit_app", "Quit"),
        ("escape", "quit_app", "Quit"),
        ("r", "restart", "Restart"),
    ]

    def compose_content(self) -> ComposeResult:
        wizard = self.wizard
        failed = bool(wizard.error_msg)
        if failed:
            status = f"✗ {escape(wizard.error_msg)}"
        else:
            status = f"✓ {escape(wizard.status_msg)}\n{escape(wizard.deploy_path())}"
        with Vertical(id="done-box"):
            yield Static(
                status,
                id="done-status",
                classes="failure" if failed else "success",
            )
            if wizard.build_output:
                with VerticalScroll(id="done-output"):
                    yield Static(wizard.build_output, markup=False)
        yield Static("[b]r[/b] restart  •  [b]enter/q[/b] quit", id="done-help")

    def action_quit_app(self) -> None:
        self.app.exit()

    def action_restart(self) -> None:
        self.wizard.restart()
        self.app.show_view()  # type: ignore[attr-defined]
