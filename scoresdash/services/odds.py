"""Concurrent odds enrichment for games that have no lines yet."""

from __future__ import annotations

import asyncio
import logging
from contextlib import nullcontext
from enum import Enum
from typing import AsyncContextManager, Awaitable, Callable

from pydantic import BaseModel, ConfigDict, Field

from scoresdash.api.models import Game, OddsItem

log = logging.getLogger(__name__)

# ESPN's default bookmaker entry; the first *other* provider is used.
DEFAULT_EXCLUDED_PROVIDER = "41"

OddsFetcher = Callable[[Game], Awaitable[list[OddsItem]]]


class OddsStatus(str, Enum):
    APPLIED = "applied"
    NO_ODDS = "no_odds"
    FAILED = "failed"


class OddsOutcome(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    event_id: str
    status: OddsStatus
    error: BaseException | None = None


class EnrichmentReport(BaseModel):
    """Per-game result of one enrichment pass."""

    outcomes: dict[str, OddsOutcome] = Field(default_factory=dict)

    @property
    def applied(self) -> list[str]:
        return self._ids(OddsStatus.APPLIED)

    @property
    def failed(self) -> list[str]:
        return self._ids(OddsStatus.FAILED)

    @property
    def missing(self) -> list[str]:
        return self._ids(OddsStatus.NO_ODDS)

    def _ids(self, status: OddsStatus) -> list[str]:
        return [eid for eid, o in self.outcomes.items() if o.status is status]


def format_moneyline(value: int) -> str:
    """American moneyline with explicit sign; zero means no line."""
    if value > 0:
        return f"+{value}"
    if value < 0:
        return str(value)
    return ""


def format_spread(value: float) -> str:
    return f"{value:.1f}"


def format_over_under(value: float) -> str:
    if value == 0:
        return ""
    return f"O/U {value:.1f}"


def select_odds_item(
    items: list[OddsItem], excluded_provider: str = DEFAULT_EXCLUDED_PROVIDER,
) -> OddsItem | None:
    """Return the first entry not from the excluded default provider."""
    for item in items:
        if item.provider.id == excluded_provider:
            continue
        return item
    return None


def apply_odds(game: Game, item: OddsItem) -> bool:
    """Merge an odds entry into a game without overwriting existing values.

    When either side is flagged favorite the home side gets the reported
    spread and the away side its negation. With no favorite flag both sides
    get the raw spread unchanged; this mirrors the provider feed's known
    anomaly and is kept as-is.

    Returns True when any field was written.
    """
    changed = False

    if item.spread != 0:
        if item.home_team_odds.favorite or item.away_team_odds.favorite:
            home, away = item.spread, -item.spread
        else:
            home = away = item.spread
        if not game.home_spread:
            game.home_spread = format_spread(home)
            changed = True
        if not game.away_spread:
            game.away_spread = format_spread(away)
            changed = True

    ou = format_over_under(item.over_under)
    if ou and not game.over_under:
        game.over_under = ou
        changed = True

    home_ml = format_moneyline(item.home_team_odds.money_line)
    if home_ml and not game.home_odds:
        game.home_odds = home_ml
        changed = True
    away_ml = format_moneyline(item.away_team_odds.money_line)
    if away_ml and not game.away_odds:
        game.away_odds = away_ml
        changed = True

    return changed


class OddsEnricher:
    """Fills missing odds on a cycle's games, one concurrent fetch per game."""

    def __init__(
        self,
        fetch_odds: OddsFetcher,
        *,
        excluded_provider: str = DEFAULT_EXCLUDED_PROVIDER,
        max_concurrent: int | None = None,
    ) -> None:
        self._fetch_odds = fetch_odds
        self.excluded_provider = excluded_provider
        self.max_concurrent = max_concurrent

    async def enrich(self, games: list[Game]) -> EnrichmentReport:
        """Enrich eligible games in place and wait for every fetch to finish.

        Fan-out equals the number of eligible games unless max_concurrent
        is set. A failed fetch leaves that game without odds for the cycle.
        """
        report = EnrichmentReport()
        eligible = [g for g in games if g.needs_odds]
        if not eligible:
            return report

        sem: AsyncContextManager = (
            asyncio.Semaphore(self.max_concurrent)
            if self.max_concurrent
            else nullcontext()
        )

        async def _enrich_one(game: Game) -> None:
            async with sem:
                try:
                    items = await self._fetch_odds(game)
                except Exception as exc:
                    log.debug("Odds fetch failed for %s: %s", game.event_id, exc)
                    report.outcomes[game.event_id] = OddsOutcome(
                        event_id=game.event_id, status=OddsStatus.FAILED, error=exc,
                    )
                    return
            item = select_odds_item(items, self.excluded_provider)
            if item is not None and apply_odds(game, item):
                status = OddsStatus.APPLIED
            else:
                status = OddsStatus.NO_ODDS
            report.outcomes[game.event_id] = OddsOutcome(
                event_id=game.event_id, status=status,
            )

        await asyncio.gather(*[_enrich_one(g) for g in eligible])
        log.debug(
            "Odds enrichment: %d applied, %d missing, %d failed",
            len(report.applied), len(report.missing), len(report.failed),
        )
        return report
