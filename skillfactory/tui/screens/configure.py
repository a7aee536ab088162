"""Configure screen — one input per skill variable plus the deploy target."""

from __future__ import annotations

from rich.markup import escape
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.widgets import Input, Label, Static

from skillfactory.tui.screens.base import FactoryScreen


def _field_index(widget_id: str | None) -> int:
    return int((widget_id or "field-0").rsplit("-", 1)[1])


class ConfigScreen(FactoryScreen):
    """Edit the selected skill's variables, skills folder and skill name."""

    DEFAULT_CSS = """
    ConfigScreen #config-form {
        padding: 1 2;
    }
    ConfigScreen #config-title {
        text-style: bold;
        color: $accent;
        margin-bottom: 1;
    }
    ConfigScreen .field-label {
        text-style: bold;
        color: $primary;
        margin-top: 1;
    }
    ConfigScreen .field-help {
        color: $text-muted;
    }
    ConfigScreen Input {
        width: 60;
    }
    ConfigScreen #config-error {
        color: $error;
        margin-top: 1;
    }
    """

    BINDINGS = [
        ("escape", "back", "Back"),
        Binding("ctrl+d", "submit", "Done", priority=True),
        ("down", "next_field", "Next"),
        ("up", "prev_field", "Previous"),
    ]

    def compose_content(self) -> ComposeResult:
        wizard = self.wizard
        skill = wizard.selected_skill
        with VerticalScroll(id="config-form"):
            yield Static(
                f"[b]Configure {escape(skill.name) if skill else ''}[/b]  •  enter / ctrl+d to continue",
                id="config-title",
            )
            for idx, fld in enumerate(wizard.fields):
                marker = " *" if fld.required else ""
                yield Label(f"{escape(fld.label)}{marker}", classes="field-label")
                if fld.description:
                    yield Static(escape(fld.description), classes="field-help")
                yield Input(
                    value=fld.value,
                    placeholder=fld.placeholder,
                    password=fld.secret,
                    max_length=fld.char_limit,
                    id=f"field-{idx}",
                )
            yield Static(escape(wizard.error_msg), id="config-error")

    def on_mount(self) -> None:
        self._focus_field(self.wizard.focus)

    # ── Field handling ───────────────────────────────────────────

    def on_input_changed(self, event: Input.Changed) -> None:
        self.wizard.set_value(_field_index(event.input.id), event.value)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.action_submit()

    def on_descendant_focus(self, event: object) -> None:
        focused = self.focused
        if isinstance(focused, Input):
            self.wizard.focus = _field_index(focused.id)

    def _focus_field(self, index: int) -> None:
        if self.wizard.fields:
            self.query_one(f"#field-{index}", Input).focus()

    def action_next_field(self) -> None:
        self.wizard.focus_next()
        self._focus_field(self.wizard.focus)

    def action_prev_field(self) -> None:
        self.wizard.focus_prev()
        self._focus_field(self.wizard.focus)

    # ── Actions ──────────────────────────────────────────────────

    def action_submit(self) -> None:
        if self.wizard.submit_config():
            self.app.show_view()  # type: ignore[attr-defined]
        else:
            self.query_one("#config-error", Static).update(escape(self.wizard.error_msg))

    def action_back(self) -> None:
        self.wizard.back_to_list()
        self.app.show_view()  # type: ignore[attr-defined]
