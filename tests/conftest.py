"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from scoresdash.api.models import Game, OddsItem, OddsProvider, TeamOdds
from scoresdash.config import Settings
from scoresdash.leagues import League

LOCAL_TZ = timezone(timedelta(hours=-5))


@pytest.fixture
def now() -> datetime:
    """Sunday 1 March 2026, noon local."""
    return datetime(2026, 3, 1, 12, 0, tzinfo=LOCAL_TZ)


@pytest.fixture
def settings() -> Settings:
    return Settings(refresh_interval=0.05, probe_cache_ttl=60)


@pytest.fixture
def make_game():
    counter = {"n": 0}

    def _make(
        start: datetime,
        status: str = "Scheduled",
        league: League = League.NBA,
        **fields,
    ) -> Game:
        counter["n"] += 1
        data = {
            "event_id": f"evt{counter['n']}",
            "home_team": "Lakers",
            "away_team": "Celtics",
            "start_time": start,
            "league": league,
            "status": status,
        }
        data.update(fields)
        return Game(**data)

    return _make


def odds_item(
    provider_id: str = "58",
    spread: float = -3.5,
    over_under: float = 220.5,
    home_ml: int = -150,
    away_ml: int = 130,
    home_favorite: bool = True,
    away_favorite: bool = False,
) -> OddsItem:
    return OddsItem(
        provider=OddsProvider(id=provider_id, name=f"book{provider_id}"),
        spread=spread,
        over_under=over_under,
        home_team_odds=TeamOdds(favorite=home_favorite, money_line=home_ml),
        away_team_odds=TeamOdds(favorite=away_favorite, money_line=away_ml),
    )


def scoreboard_event(
    event_id: str,
    date: str,
    home: str = "Lakers",
    away: str = "Celtics",
    home_score: str = "",
    away_score: str = "",
    status: str = "Scheduled",
    period: int = 0,
    clock: str = "0:00",
    comp_id: str | None = None,
) -> dict:
    """Minimal ESPN scoreboard event as JSON."""
    return {
        "id": event_id,
        "name": f"{away} at {home}",
        "date": date,
        "status": {
            "type": {"description": status},
            "displayClock": clock,
            "period": period,
        },
        "competitions": [{
            "id": comp_id if comp_id is not None else event_id,
            "competitors": [
                {
                    "homeAway": "home",
                    "team": {"displayName": home},
                    "score": home_score,
                    "records": [
                        {"name": "Home", "summary": "20-10", "type": "home"},
                        {"name": "overall", "summary": "40-22", "type": "total"},
                    ],
                },
                {
                    "homeAway": "away",
                    "team": {"displayName": away},
                    "score": away_score,
                    "records": [{"name": "Road", "summary": "18-13", "type": "road"}],
                },
            ],
        }],
    }
