"""Typed fetch functions for ESPN's scoreboard and odds endpoints."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Mapping

from pydantic import ValidationError

from scoresdash.api.client import CORE_URL, SCOREBOARD_URL, ESPNClient
from scoresdash.api.models import (
    Game,
    OddsItem,
    OddsResponse,
    ScoreboardEvent,
    ScoreboardResponse,
    format_period,
    parse_score,
    parse_start_time,
    pick_record,
)
from scoresdash.errors import ProviderError
from scoresdash.leagues import LEAGUE_TABLE, League, LeagueInfo

log = logging.getLogger(__name__)


def _build_game(event: ScoreboardEvent, league: League, now: datetime) -> Game | None:
    """Map one scoreboard event to a Game. Events without two sides are skipped."""
    if not event.competitions or len(event.competitions[0].competitors) < 2:
        return None
    comp = event.competitions[0]

    home_team = away_team = ""
    home_record = away_record = ""
    home_score = away_score = 0
    for competitor in comp.competitors:
        record = pick_record(competitor.records)
        if competitor.home_away == "home":
            home_team = competitor.team.display_name
            home_record = record
            home_score = parse_score(competitor.score)
        else:
            away_team = competitor.team.display_name
            away_record = record
            away_score = parse_score(competitor.score)

    return Game(
        event_id=event.id,
        competition_id=comp.id or event.id,
        home_team=home_team,
        away_team=away_team,
        start_time=parse_start_time(event.date, now),
        league=league,
        status=event.status.type.description,
        home_score=home_score,
        away_score=away_score,
        home_record=home_record,
        away_record=away_record,
        clock=event.status.display_clock,
        period=format_period(event.status.period, league),
    )


async def get_games(
    client: ESPNClient,
    league: League,
    day: date,
    *,
    leagues: Mapping[League, LeagueInfo] = LEAGUE_TABLE,
) -> list[Game]:
    """Fetch one league's scoreboard for a calendar day."""
    info = leagues[league]
    url = f"{SCOREBOARD_URL}/{info.sport}/{league.slug}/scoreboard"
    data = await client.get(url, params={"dates": day.strftime("%Y%m%d")})
    try:
        payload = ScoreboardResponse.model_validate(data)
    except ValidationError as exc:
        raise ProviderError(f"failed to parse scoreboard for {league.value}: {exc}") from exc

    now = datetime.now(timezone.utc)
    games: list[Game] = []
    for raw in payload.events:
        try:
            event = ScoreboardEvent.model_validate(raw)
        except ValidationError as exc:
            log.warning("Skipping malformed %s event: %s", league.value, exc)
            continue
        if not event.id:
            continue
        game = _build_game(event, league, now)
        if game is not None:
            games.append(game)
    return games


async def get_odds(
    client: ESPNClient,
    game: Game,
    *,
    leagues: Mapping[League, LeagueInfo] = LEAGUE_TABLE,
) -> list[OddsItem]:
    """Fetch every bookmaker's odds entry for one game."""
    info = leagues[game.league]
    url = (
        f"{CORE_URL}/{info.sport}/leagues/{game.league.slug}"
        f"/events/{game.event_id}/competitions/{game.competition_id}/odds"
    )
    data = await client.get(url, params={"lang": "en", "region": "us"})
    try:
        return OddsResponse.model_validate(data).items
    except ValidationError as exc:
        raise ProviderError(f"failed to parse odds for {game.event_id}: {exc}") from exc
