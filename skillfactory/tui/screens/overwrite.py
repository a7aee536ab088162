"""Overwrite warning modal shown when the deploy path already holds the skill."""

from __future__ import annotations

from typing import Any

from rich.markup import escape
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Label, Static


class OverwriteModal(ModalScreen[bool]):
    """Ask before replacing an existing deployment."""

    DEFAULT_CSS = """
    OverwriteModal {
        align: center middle;
    }
    #overwrite-dialog {
        width: 64;
        height: auto;
        border: thick $warning;
        background: $surface;
        padding: 1 2;
    }
    #overwrite-title {
        text-style: bold;
        color: $warning;
        text-align: center;
        margin-bottom: 1;
    }
    #overwrite-info {
        margin-bottom: 1;
    }
    #overwrite-actions {
        height: 3;
        align: center middle;
    }
    #overwrite-actions Button {
        margin: 0 1;
    }
    """

    BINDINGS = [
        ("y", "overwrite", "Overwrite"),
        ("n", "cancel", "Cancel"),
        ("escape", "cancel", "Cancel"),
    ]

    def __init__(self, deploy_path: str, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._deploy_path = deploy_path

    def compose(self) -> ComposeResult:
        with Vertical(id="overwrite-dialog"):
            yield Label("[b]Skill already exists[/b]", id="overwrite-title")
            yield Static(
                f"{escape(self._deploy_path)} already contains this skill.\n"
                "Overwrite it? (y/n)",
                id="overwrite-info",
            )
            with Horizontal(id="overwrite-actions"):
                yield Button("Overwrite", variant="warning", id="btn-overwrite")
                yield Button("Cancel", variant="default", id="btn-overwrite-cancel")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-overwrite":
            self.action_overwrite()
        elif event.button.id == "btn-overwrite-cancel":
            self.action_cancel()

    def action_overwrite(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)
