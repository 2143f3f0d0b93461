"""Scrollable scoreboard body: the single render surface for the dashboard."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import ScrollableContainer, Vertical
from textual.widgets import Static


class Scoreboard(Vertical):
    """Full-buffer text view with a vertical scroll offset.

    Only call these methods from the app's event loop.
    """

    DEFAULT_CSS = """
    Scoreboard {
        height: 1fr;
        padding: 0 1;
    }
    Scoreboard #scores-scroll {
        height: 1fr;
        scrollbar-size-vertical: 1;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._lines: list[str] = []

    def compose(self) -> ComposeResult:
        with ScrollableContainer(id="scores-scroll"):
            yield Static("[dim]Loading scores...[/dim]", id="scores-content")

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    def show_lines(self, lines: list[str]) -> None:
        """Replace the whole buffer, keeping the current scroll offset."""
        self._lines = list(lines)
        try:
            content = self.query_one("#scores-content", Static)
            scroll = self.query_one("#scores-scroll", ScrollableContainer)
        except Exception:
            return
        saved_y = scroll.scroll_y
        content.update("\n".join(self._lines))
        scroll.call_after_refresh(scroll.scroll_to, y=saved_y, animate=False)

    def show_error(self, lines: list[str]) -> None:
        """Replace the buffer with an error view and jump to the top."""
        self._lines = list(lines)
        try:
            content = self.query_one("#scores-content", Static)
            scroll = self.query_one("#scores-scroll", ScrollableContainer)
        except Exception:
            return
        content.update("\n".join(self._lines))
        scroll.scroll_home(animate=False)

    # ScrollSurface

    def get_offset(self) -> int:
        try:
            scroll = self.query_one("#scores-scroll", ScrollableContainer)
        except Exception:
            return 0
        return int(scroll.scroll_y)

    def set_offset(self, offset: int) -> None:
        try:
            scroll = self.query_one("#scores-scroll", ScrollableContainer)
        except Exception:
            return
        scroll.scroll_to(y=max(0, offset), animate=False)
