"""Base screen with shared chrome for all wizard views."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.screen import Screen
from textual.widgets import Footer, Header

from skillfactory.wizard import Wizard


class FactoryScreen(Screen):
    """Base screen providing shared chrome (Header, Footer).

    Subclasses override :meth:`compose_content` to supply view-specific
    widgets.  The chrome is rendered automatically.
    """

    def compose(self) -> ComposeResult:
        yield Header()
        yield from self.compose_content()
        yield Footer()

    def compose_content(self) -> ComposeResult:
        """Override in subclasses to add view-specific content."""
        return
        yield  # pragma: no cover

    @property
    def wizard(self) -> Wizard:
        return self.app.wizard  # type: ignore[attr-defined]
