"""Periodic refresh cycles with an in-flight guard and cooperative shutdown."""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Awaitable, Callable

from scoresdash.services.data_service import DashboardSnapshot
from scoresdash.services.scroller import Dispatch, run_now, wait_or_stop

log = logging.getLogger(__name__)

SnapshotSource = Callable[[], Awaitable[DashboardSnapshot]]


class RefreshScheduler:
    """Fires a fetch/enrich/classify cycle every ``interval`` seconds.

    At most one cycle is in flight; a tick that lands while one is still
    running is skipped. Results and errors are handed to the callbacks
    through ``dispatch`` so they are applied on the UI loop.
    """

    def __init__(
        self,
        source: SnapshotSource,
        stop: asyncio.Event,
        *,
        interval: float = 30,
        on_snapshot: Callable[[DashboardSnapshot], None],
        on_error: Callable[[Exception], None],
        dispatch: Dispatch | None = None,
    ) -> None:
        self._source = source
        self._stop = stop
        self.interval = interval
        self._on_snapshot = on_snapshot
        self._on_error = on_error
        self._dispatch = dispatch or run_now
        self._current: asyncio.Task | None = None
        self.cycles_skipped = 0

    @property
    def in_flight(self) -> bool:
        return self._current is not None and not self._current.done()

    def trigger(self) -> bool:
        """Start a cycle unless one is running. Returns True if started."""
        if self._stop.is_set():
            return False
        if self.in_flight:
            self.cycles_skipped += 1
            log.debug("Refresh still in flight, skipping tick")
            return False
        self._current = asyncio.create_task(self.run_cycle())
        return True

    async def run_cycle(self) -> None:
        if self._stop.is_set():
            return
        try:
            snapshot = await self._source()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if self._stop.is_set():
                return
            log.exception("Refresh cycle failed")
            self._dispatch(partial(self._on_error, exc))
            return
        if self._stop.is_set():
            return
        self._dispatch(partial(self._on_snapshot, snapshot))

    async def wait_idle(self) -> None:
        """Wait for the in-flight cycle, if any, to finish."""
        if self._current is not None:
            await asyncio.gather(self._current, return_exceptions=True)

    async def run(self) -> None:
        """Tick until the stop event fires."""
        while not await wait_or_stop(self._stop, self.interval):
            self.trigger()
        await self.wait_idle()
