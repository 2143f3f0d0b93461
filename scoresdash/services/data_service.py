"""Orchestrator: fetch scoreboards, enrich odds, classify, find next games."""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timedelta
from typing import Mapping

from pydantic import BaseModel, Field

from scoresdash.api.client import ESPNClient
from scoresdash.api.endpoints import get_games, get_odds
from scoresdash.api.models import Game, OddsItem
from scoresdash.config import Settings
from scoresdash.errors import FetchError
from scoresdash.leagues import LEAGUE_TABLE, League, LeagueInfo
from scoresdash.services.cache import DayCache
from scoresdash.services.classifier import Classification, GameClassifier, NextGame
from scoresdash.services.odds import EnrichmentReport, OddsEnricher

log = logging.getLogger(__name__)


class DashboardSnapshot(BaseModel):
    """Everything the renderer needs from one refresh cycle."""

    fetched_at: datetime
    leagues: list[League]
    classification: Classification
    odds_failed: list[str] = Field(default_factory=list)


class DataService:
    """Runs the fetch → enrich → classify part of a refresh cycle."""

    def __init__(
        self,
        settings: Settings,
        client: ESPNClient | None = None,
        cache: DayCache | None = None,
        classifier: GameClassifier | None = None,
        leagues: Mapping[League, LeagueInfo] = LEAGUE_TABLE,
    ) -> None:
        self.settings = settings
        self.client = client or ESPNClient(timeout=settings.request_timeout)
        self.cache = cache or DayCache(ttl=settings.probe_cache_ttl)
        self.classifier = classifier or GameClassifier(
            active_window=timedelta(minutes=settings.active_window_minutes),
            next_game_days=settings.next_game_days,
        )
        self.leagues = leagues
        self.enricher = OddsEnricher(
            self._fetch_odds,
            excluded_provider=settings.excluded_odds_provider,
            max_concurrent=settings.odds_max_concurrent,
        )

    async def close(self) -> None:
        await self.client.close()

    async def _fetch_odds(self, game: Game) -> list[OddsItem]:
        return await get_odds(self.client, game, leagues=self.leagues)

    async def fetch_league(self, league: League, day: date) -> list[Game]:
        return await get_games(self.client, league, day, leagues=self.leagues)

    async def fetch_games(self, day: date) -> tuple[list[Game], EnrichmentReport]:
        """Fetch every configured league for a day and fill in missing odds.

        A league that fails is logged and left out. Raises FetchError only
        when no league could be fetched at all.
        """
        leagues = self.settings.leagues
        results = await asyncio.gather(
            *[self.fetch_league(lg, day) for lg in leagues],
            return_exceptions=True,
        )

        games: list[Game] = []
        errors: list[BaseException] = []
        for league, result in zip(leagues, results):
            if isinstance(result, BaseException):
                log.warning("Could not fetch games for %s: %s", league.value, result)
                errors.append(result)
                continue
            games.extend(result)

        if leagues and len(errors) == len(leagues):
            raise FetchError(str(errors[0])) from errors[0]

        report = await self.enricher.enrich(games)
        return games, report

    async def fetch_day(self, league: League, day: date) -> list[Game]:
        """Cached single-league probe used by the next-game lookahead."""
        cached = self.cache.get(league, day)
        if cached is not None:
            return cached
        games = await self.fetch_league(league, day)
        self.cache.set(league, day, games)
        return games

    async def _next_game(
        self,
        league: League,
        todays_games: list[Game],
        now: datetime,
        report: EnrichmentReport,
    ) -> NextGame | None:
        """Find the league's next game; odds are fetched only for probed days.

        A game from today was already tried in this cycle's enrichment pass
        and is not fetched again.
        """
        found = await self.classifier.find_next_game(
            league, todays_games, self.fetch_day, now,
        )
        if (
            found is not None
            and found.game.needs_odds
            and found.game.event_id not in report.outcomes
        ):
            await self.enricher.enrich([found.game])
        return found

    async def build_snapshot(self, now: datetime | None = None) -> DashboardSnapshot:
        """Run one full fetch/enrich/classify pass."""
        now = now or datetime.now().astimezone()
        games, report = await self.fetch_games(now.date())
        classification = self.classifier.build(games, now)

        self.cache.prune(now.date())
        idle = [
            lg for lg in self.settings.leagues
            if not classification.active_by_league.get(lg)
        ]
        found = await asyncio.gather(*[
            self._next_game(lg, classification.all_by_league.get(lg, []), now, report)
            for lg in idle
        ])
        for league, next_game in zip(idle, found):
            if next_game is not None:
                classification.next_games[league] = next_game

        log.info(
            "Fetched %d games, %d live, %d odds failures",
            len(games), classification.live_count, len(report.failed),
        )
        return DashboardSnapshot(
            fetched_at=now,
            leagues=list(self.settings.leagues),
            classification=classification,
            odds_failed=report.failed,
        )
