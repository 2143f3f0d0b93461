"""In-memory TTL cache for per-day scoreboard probes, keyed by (league, date)."""

from __future__ import annotations

import time
from datetime import date

from scoresdash.api.models import Game
from scoresdash.leagues import League


class DayCache:
    """Caches a league's games for a future calendar day.

    Stored lists are copied on the way in and out so callers can enrich the
    games they get back without touching the cached entry.
    """

    def __init__(self, ttl: float = 600) -> None:
        self.ttl = ttl
        self._store: dict[tuple[League, date], tuple[list[Game], float]] = {}

    def get(self, league: League, day: date) -> list[Game] | None:
        entry = self._store.get((league, day))
        if entry is None:
            return None
        games, expires_at = entry
        if time.monotonic() > expires_at:
            del self._store[(league, day)]
            return None
        return [g.model_copy() for g in games]

    def set(self, league: League, day: date, games: list[Game]) -> None:
        self._store[(league, day)] = (
            [g.model_copy() for g in games],
            time.monotonic() + self.ttl,
        )

    def prune(self, before: date) -> None:
        """Drop entries for days that are already in the past."""
        for key in [k for k in self._store if k[1] < before]:
            del self._store[key]
