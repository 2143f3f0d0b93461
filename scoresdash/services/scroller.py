"""Auto-scroll state and the background tickers that drive it."""

from __future__ import annotations

import asyncio
import logging
import threading
from enum import Enum
from typing import Callable, Protocol

log = logging.getLogger(__name__)

Dispatch = Callable[[Callable[[], None]], None]


class ScrollSurface(Protocol):
    """The part of the display the scroller is allowed to touch."""

    def get_offset(self) -> int: ...

    def set_offset(self, offset: int) -> None: ...


class ScrollCommand(str, Enum):
    TOGGLE = "toggle"
    SPEED_UP = "speed_up"
    SLOW_DOWN = "slow_down"
    REVERSE = "reverse"
    SCROLL_UP = "scroll_up"
    SCROLL_DOWN = "scroll_down"


# Commands that change scroller state and so warrant a header redraw.
STATE_COMMANDS = frozenset({
    ScrollCommand.TOGGLE,
    ScrollCommand.SPEED_UP,
    ScrollCommand.SLOW_DOWN,
    ScrollCommand.REVERSE,
})


def run_now(fn: Callable[[], None]) -> None:
    fn()


async def wait_or_stop(stop: asyncio.Event, timeout: float) -> bool:
    """Sleep up to timeout; True if stop fired first."""
    try:
        await asyncio.wait_for(stop.wait(), timeout)
    except asyncio.TimeoutError:
        return stop.is_set()
    return True


class ScrollController:
    """Owns enabled/speed/direction and moves the surface offset.

    ``enabled`` means the user has paused the marquee: the fast ticker only
    advances while it is False. The reset ticker snaps back to the top on
    its own schedule either way.

    enabled, speed and direction are only read or written under ``_lock``.
    Offset changes never touch the surface directly; they are handed to
    ``dispatch`` so they run on the UI loop.
    """

    def __init__(
        self,
        surface: ScrollSurface,
        dispatch: Dispatch | None = None,
        *,
        speed_ms: int = 2000,
        min_speed_ms: int = 100,
        max_speed_ms: int = 2000,
        step_ms: int = 100,
        reset_interval: float = 100,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        if min_speed_ms > max_speed_ms:
            raise ValueError("min_speed_ms must not exceed max_speed_ms")
        self._surface = surface
        self._dispatch = dispatch or run_now
        self._lock = threading.Lock()
        self._enabled = False
        self._speed_ms = max(min_speed_ms, min(speed_ms, max_speed_ms))
        self._direction = 1
        self.min_speed_ms = min_speed_ms
        self.max_speed_ms = max_speed_ms
        self.step_ms = step_ms
        self.reset_interval = reset_interval
        self.on_change = on_change
        self._commands: asyncio.Queue[ScrollCommand | None] = asyncio.Queue()

    # ── State ──

    @property
    def enabled(self) -> bool:
        with self._lock:
            return self._enabled

    @property
    def speed_ms(self) -> int:
        with self._lock:
            return self._speed_ms

    @property
    def direction(self) -> int:
        with self._lock:
            return self._direction

    def toggle(self) -> None:
        with self._lock:
            self._enabled = not self._enabled

    def speed_up(self) -> None:
        with self._lock:
            self._speed_ms = max(self.min_speed_ms, self._speed_ms - self.step_ms)

    def slow_down(self) -> None:
        with self._lock:
            self._speed_ms = min(self.max_speed_ms, self._speed_ms + self.step_ms)

    def reverse(self) -> None:
        with self._lock:
            self._direction = -self._direction

    def format_status(self) -> str:
        with self._lock:
            enabled, speed, direction = self._enabled, self._speed_ms, self._direction
        if enabled:
            return "[grey50]scroll: paused[/]"
        arrow = "↓" if direction > 0 else "↑"
        return f"[green]scroll: on {arrow} ({speed}ms)[/]"

    # ── Surface mutations (always via dispatch) ──

    def _move(self, delta: int) -> None:
        offset = self._surface.get_offset()
        new_offset = offset + delta
        if new_offset >= 0 and new_offset != offset:
            self._surface.set_offset(new_offset)

    def _reset(self) -> None:
        self._surface.set_offset(0)

    def scroll_up(self) -> None:
        self._dispatch(lambda: self._move(-1))

    def scroll_down(self) -> None:
        self._dispatch(lambda: self._move(1))

    def tick(self) -> int:
        """One fast-ticker step. Returns the speed to wait before the next one."""
        with self._lock:
            enabled, speed, direction = self._enabled, self._speed_ms, self._direction
        if not enabled:
            self._dispatch(lambda: self._move(direction))
        return speed

    def reset(self) -> None:
        self._dispatch(self._reset)

    # ── Commands ──

    def send(self, command: ScrollCommand) -> None:
        """Queue a command for the running controller loop."""
        self._commands.put_nowait(command)

    def handle(self, command: ScrollCommand) -> None:
        handlers: dict[ScrollCommand, Callable[[], None]] = {
            ScrollCommand.TOGGLE: self.toggle,
            ScrollCommand.SPEED_UP: self.speed_up,
            ScrollCommand.SLOW_DOWN: self.slow_down,
            ScrollCommand.REVERSE: self.reverse,
            ScrollCommand.SCROLL_UP: self.scroll_up,
            ScrollCommand.SCROLL_DOWN: self.scroll_down,
        }
        handlers[command]()
        if command in STATE_COMMANDS and self.on_change is not None:
            self.on_change()

    # ── Loops ──

    async def _tick_loop(self, stop: asyncio.Event) -> None:
        while not stop.is_set():
            speed = self.tick()
            if await wait_or_stop(stop, speed / 1000):
                return

    async def _reset_loop(self, stop: asyncio.Event) -> None:
        while not await wait_or_stop(stop, self.reset_interval):
            self.reset()

    async def _command_loop(self) -> None:
        while True:
            command = await self._commands.get()
            if command is None:
                return
            try:
                self.handle(command)
            except Exception:
                log.exception("Scroll command %s failed", command.value)

    async def _stop_commands(self, stop: asyncio.Event) -> None:
        await stop.wait()
        self._commands.put_nowait(None)

    async def run(self, stop: asyncio.Event) -> None:
        """Run the tickers and the command loop until stop is set."""
        log.debug("Scroller started")
        await asyncio.gather(
            self._tick_loop(stop),
            self._reset_loop(stop),
            self._command_loop(),
            self._stop_commands(stop),
        )
        log.debug("Scroller stopped")
