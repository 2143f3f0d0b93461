"""ScoresDashApp — top-level Textual application."""

from __future__ import annotations

import asyncio
import logging
import signal
from datetime import datetime, timedelta
from typing import Callable

from textual.app import App, ComposeResult
from textual.binding import Binding

from scoresdash.config import Settings, load_settings
from scoresdash.leagues import LEAGUE_TABLE
from scoresdash.services.data_service import DashboardSnapshot, DataService
from scoresdash.services.scheduler import RefreshScheduler
from scoresdash.services.scroller import ScrollCommand, ScrollController
from scoresdash.ui.render import render_dashboard, render_error
from scoresdash.ui.widgets.scoreboard import Scoreboard
from scoresdash.ui.widgets.status_bar import StatusBar

log = logging.getLogger(__name__)


class ScoresDashApp(App):
    """Live scores and odds, auto-scrolling."""

    TITLE = "Scores Dash"

    BINDINGS = [
        Binding("q", "quit", "Quit", priority=True),
        Binding("escape", "quit", "Quit", show=False, priority=True),
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
        Binding("s", "scroll_command('toggle')", "Pause", show=False),
        Binding("plus,equals_sign", "scroll_command('speed_up')", "Faster", show=False),
        Binding("minus,underscore", "scroll_command('slow_down')", "Slower", show=False),
        Binding("r", "scroll_command('reverse')", "Reverse", show=False),
        Binding("j", "scroll_command('scroll_down')", "Down", show=False),
        Binding("k", "scroll_command('scroll_up')", "Up", show=False),
        Binding("u", "refresh", "Refresh", show=False),
    ]

    def __init__(
        self,
        settings: Settings | None = None,
        data_service: DataService | None = None,
    ) -> None:
        super().__init__()
        self.settings: Settings = settings or load_settings()
        self.leagues = LEAGUE_TABLE
        self.data_service = data_service or DataService(self.settings, leagues=self.leagues)
        self.stop_event = asyncio.Event()
        self.scroller: ScrollController | None = None
        self.scheduler: RefreshScheduler | None = None
        self._snapshot: DashboardSnapshot | None = None
        self._quitting = False

    def compose(self) -> ComposeResult:
        yield Scoreboard(id="scoreboard")
        yield StatusBar(id="status-bar")

    def _dispatch(self, fn: Callable[[], None]) -> None:
        """Queue a screen mutation on the app's message loop."""
        self.call_later(fn)

    def on_mount(self) -> None:
        board = self.query_one("#scoreboard", Scoreboard)
        s = self.settings
        self.scroller = ScrollController(
            board,
            self._dispatch,
            speed_ms=s.scroll_speed_ms,
            min_speed_ms=s.scroll_min_ms,
            max_speed_ms=s.scroll_max_ms,
            step_ms=s.scroll_step_ms,
            reset_interval=s.scroll_reset_interval,
            on_change=lambda: self._dispatch(self._rerender),
        )
        self.scheduler = RefreshScheduler(
            self.data_service.build_snapshot,
            self.stop_event,
            interval=s.refresh_interval,
            on_snapshot=self._apply_snapshot,
            on_error=self._apply_error,
            dispatch=self._dispatch,
        )
        self.query_one("#status-bar", StatusBar).update_scroll(self.scroller.format_status())

        try:
            asyncio.get_running_loop().add_signal_handler(
                signal.SIGTERM, lambda: self.run_worker(self.action_quit()),
            )
        except (NotImplementedError, RuntimeError):
            log.debug("SIGTERM handler not supported here")

        self.run_worker(self.scroller.run(self.stop_event), group="scroller")
        self.run_worker(self.scheduler.run(), group="refresh")
        self._start_refresh()

    async def on_unmount(self) -> None:
        self.stop_event.set()
        await self.data_service.close()

    def _start_refresh(self) -> None:
        if self.scheduler is not None and self.scheduler.trigger():
            self.query_one("#status-bar", StatusBar).set_refreshing(True)

    # ── Rendering (UI loop only) ──

    def _rerender(self) -> None:
        """Redraw from the last snapshot without refetching."""
        if self.scroller is None:
            return
        status = self.query_one("#status-bar", StatusBar)
        status.update_scroll(self.scroller.format_status())
        if self._snapshot is None:
            return
        lines = render_dashboard(
            self._snapshot,
            self.scroller.format_status(),
            datetime.now().astimezone(),
            leagues=self.leagues,
            upcoming_window=timedelta(minutes=self.settings.upcoming_window_minutes),
        )
        self.query_one("#scoreboard", Scoreboard).show_lines(lines)

    def _apply_snapshot(self, snapshot: DashboardSnapshot) -> None:
        if self.stop_event.is_set():
            return
        self._snapshot = snapshot
        self._rerender()
        status = self.query_one("#status-bar", StatusBar)
        status.set_refreshing(False)
        status.set_warning("")
        status.update_live(snapshot.classification.live_count)
        status.update_done([lg.value for lg in snapshot.classification.done_for_today])
        status.update_odds_failed(len(snapshot.odds_failed))
        status.update_refresh_time(snapshot.fetched_at)

    def _apply_error(self, error: Exception) -> None:
        if self.stop_event.is_set():
            return
        self._snapshot = None
        self.query_one("#scoreboard", Scoreboard).show_error(render_error(error))
        status = self.query_one("#status-bar", StatusBar)
        status.set_refreshing(False)
        status.set_warning("Refresh failed")

    # ── Actions ──

    def action_scroll_command(self, command: str) -> None:
        if self.scroller is not None:
            self.scroller.send(ScrollCommand(command))

    def action_refresh(self) -> None:
        self._start_refresh()

    async def action_quit(self) -> None:
        if self._quitting:
            return
        self._quitting = True
        self.stop_event.set()
        # Let in-flight redraws settle before tearing the screen down.
        await asyncio.sleep(self.settings.shutdown_grace)
        self.exit()
