"""Skill list screen — the wizard's starting point.

Valid skills are listed first, followed by skills whose manifest failed
to load.  Selecting a failed skill shows its error instead of opening
the configure view.
"""

from __future__ import annotations

from rich.markup import escape
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import DataTable, Static

from skillfactory.tui.screens.base import FactoryScreen


class SkillListScreen(FactoryScreen):
    """Table of discovered skills."""

    DEFAULT_CSS = """
    SkillListScreen #list-container {
        padding: 1 2;
    }
    SkillListScreen #list-title {
        text-style: bold;
        color: $accent;
        margin-bottom: 1;
    }
    SkillListScreen #skills-table {
        height: auto;
        max-height: 1fr;
    }
    SkillListScreen #list-error {
        color: $error;
        margin-top: 1;
    }
    """

    BINDINGS = [
        ("q", "quit_app", "Quit"),
        ("escape", "quit_app", "Quit"),
        ("k", "cursor_up", "Up"),
        ("j", "cursor_down", "Down"),
    ]

    def compose_content(self) -> ComposeResult:
        with Vertical(id="list-container"):
            yield Static("[b]Select a skill to deploy[/b]", id="list-title")
            yield DataTable(id="skills-table", cursor_type="row")
            yield Static("", id="list-error")

    def on_mount(self) -> None:
        table = self.query_one("#skills-table", DataTable)
        table.add_columns("Skill", "Version", "Description")
        wizard = self.wizard
        for manifest in wizard.manifests:
            table.add_row(
                escape(manifest.name), escape(manifest.version), escape(manifest.description)
            )
        for err in wizard.skill_errors:
            table.add_row(f"[red]✗ {escape(err.name)}[/red]", "", "[red]failed to load[/red]")
        if wizard.total_items:
            table.move_cursor(row=wizard.cursor)
        else:
            self._set_error(wizard.error_msg or "No skills found")
        table.focus()

    # ── Navigation ───────────────────────────────────────────────

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        self.wizard.cursor = event.cursor_row
        self.wizard.selected_error = None
        self._set_error("")

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        wizard = self.wizard
        wizard.cursor = event.cursor_row
        if wizard.select():
            self.app.show_view()  # type: ignore[attr-defined]
        else:
            self._set_error(wizard.error_msg)

    def action_cursor_up(self) -> None:
        self.query_one("#skills-table", DataTable).action_cursor_up()

    def action_cursor_down(self) -> None:
        self.query_one("#skills-table", DataTable).action_cursor_down()

    def action_quit_app(self) -> None:
        self.app.exit()

    def _set_error(self, text: str) -> None:
        self.query_one("#list-error", Static).update(escape(text))
