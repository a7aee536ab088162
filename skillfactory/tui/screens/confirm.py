"""Confirm screen — review the configuration before building."""

from __future__ import annotations

from rich.markup import escape
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Static

from skillfactory.tui.screens.base import FactoryScreen

_MASK = "••••••••"


class ConfirmScreen(FactoryScreen):
    """Summary of the entered values and the resolved deploy path."""

    DEFAULT_CSS = """
    ConfirmScreen #confirm-box {
        border: round $primary;
        padding: 1 2;
        margin: 1 2;
        height: auto;
    }
    ConfirmScreen #confirm-help {
        color: $text-muted;
        margin: 0 2;
    }
    """

    BINDINGS = [
        ("y", "deploy", "Deploy"),
        ("enter", "deploy", "Deploy"),
        ("n", "back", "Back"),
        ("escape", "back", "Back"),
    ]

    def compose_content(self) -> ComposeResult:
        with Vertical(id="confirm-box"):
            yield Static(self._summary(), id="confirm-summary")
        yield Static("Deploy now? [b]y[/b]/enter to deploy, [b]n[/b]/esc to edit", id="confirm-help")

    def _summary(self) -> str:
        wizard = self.wizard
        skill = wizard.selected_skill
        if skill is None:
            return "No skill selected"
        lines = [f"[b]{escape(skill.name)}[/b] {escape(skill.version)}", ""]
        for var in skill.variables:
            value = wizard.config_values.get(var.name, "")
            if value and var.is_secret:
                shown = _MASK
            elif value:
                shown = escape(value)
            elif var.default:
                shown = f"[dim]{escape(var.default)} (default)[/dim]"
            else:
                shown = "[dim](empty)[/dim]"
            lines.append(f"{escape(var.display_label)}: {shown}")
        lines.append("")
        lines.append(f"[b]Deploy to:[/b] {escape(wizard.deploy_path())}")
        return "\n".join(lines)

    def action_deploy(self) -> None:
        self.app.confirm_deploy()  # type: ignore[attr-defined]

    def action_back(self) -> None:
        self.wizard.back_to_config()
        self.app.show_view()  # type: ignore[attr-defined]
