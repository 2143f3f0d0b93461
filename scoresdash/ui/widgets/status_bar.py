"""Status bar: last refresh, live games, scroll state, key help."""

from __future__ import annotations

from datetime import datetime

from textual.widgets import Static

KEY_HELP = (
    "[dim]q:Quit  s:Pause  +/-:Speed  r:Reverse  "
    "j/k:Scroll  u:Refresh[/dim]"
)


class StatusBar(Static):
    """Bottom status bar."""

    DEFAULT_CSS = """
    StatusBar {
        height: 1;
        dock: bottom;
        background: #1a1a2e;
        color: #aaaaaa;
        padding: 0 1;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(KEY_HELP, **kwargs)
        self._last_refresh = ""
        self._live = 0
        self._scroll = ""
        self._warning = ""
        self._done = ""
        self._odds_failed = 0
        self._refreshing = False

    def update_refresh_time(self, when: datetime | None = None) -> None:
        when = when or datetime.now()
        self._last_refresh = f"Last: {when.strftime('%H:%M:%S')}"
        self._refresh_content()

    def update_live(self, count: int) -> None:
        self._live = count
        self._refresh_content()

    def update_done(self, leagues: list[str]) -> None:
        self._done = ", ".join(leagues)
        self._refresh_content()

    def update_odds_failed(self, count: int) -> None:
        self._odds_failed = count
        self._refresh_content()

    def update_scroll(self, status: str) -> None:
        self._scroll = status
        self._refresh_content()

    def set_warning(self, text: str) -> None:
        self._warning = text
        self._refresh_content()

    def set_refreshing(self, refreshing: bool) -> None:
        self._refreshing = refreshing
        self._refresh_content()

    def _refresh_content(self) -> None:
        parts: list[str] = []
        if self._live:
            parts.append(f"[bold green]● {self._live} LIVE[/bold green]")
        if self._done:
            parts.append(f"[grey50]Done: {self._done}[/grey50]")
        if self._refreshing:
            parts.append("[bold yellow]Refreshing...[/bold yellow]")
        if self._last_refresh:
            parts.append(self._last_refresh)
        if self._scroll:
            parts.append(self._scroll)
        if self._odds_failed:
            parts.append(f"[yellow]Odds unavailable: {self._odds_failed}[/yellow]")
        if self._warning:
            parts.append(f"[bold red]{self._warning}[/bold red]")
        parts.append(KEY_HELP)
        self.update("  |  ".join(parts))
