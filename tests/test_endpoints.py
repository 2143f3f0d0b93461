"""Tests for the ESPN client and endpoint functions via httpx.MockTransport."""

from __future__ import annotations

from datetime import date, datetime, timezone

import httpx
import pytest

from conftest import scoreboard_event
from scoresdash.api.client import ESPNClient
from scoresdash.api.endpoints import get_games, get_odds
from scoresdash.api.models import Game
from scoresdash.errors import ProviderError
from scoresdash.leagues import League


def _client(handler) -> ESPNClient:
    return ESPNClient(transport=httpx.MockTransport(handler))


async def test_get_games_builds_games():
    seen: list[httpx.URL] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url)
        return httpx.Response(200, json={"events": [
            scoreboard_event(
                "401", "2026-03-01T19:30Z", home_score="101", away_score="99",
                status="In Progress", period=4, clock="2:31", comp_id="",
            ),
        ]})

    client = _client(handler)
    games = await get_games(client, League.NBA, date(2026, 3, 1))
    await client.close()

    assert seen[0].path == "/apis/site/v2/sports/basketball/nba/scoreboard"
    assert seen[0].params["dates"] == "20260301"
    assert len(games) == 1
    game = games[0]
    assert game.event_id == "401"
    assert game.competition_id == "401"
    assert game.home_team == "Lakers"
    assert game.home_score == 101
    assert game.away_score == 99
    assert game.home_record == "40-22"
    assert game.away_record == "18-13"
    assert game.period == "4th Qtr"
    assert game.clock == "2:31"
    assert game.league is League.NBA
    assert game.start_time == datetime(2026, 3, 1, 19, 30, tzinfo=timezone.utc)


async def test_get_games_skips_events_without_two_sides():
    def handler(request: httpx.Request) -> httpx.Response:
        broken = scoreboard_event("1", "2026-03-01T19:30Z")
        broken["competitions"][0]["competitors"] = broken["competitions"][0]["competitors"][:1]
        return httpx.Response(200, json={"events": [
            broken,
            {"id": "2", "date": "2026-03-01T19:30Z", "competitions": []},
            scoreboard_event("3", "2026-03-01T19:30Z"),
        ]})

    client = _client(handler)
    games = await get_games(client, League.NHL, date(2026, 3, 1))
    await client.close()
    assert [g.event_id for g in games] == ["3"]


async def test_get_games_tolerates_nulls_and_skips_malformed_events():
    def handler(request: httpx.Request) -> httpx.Response:
        no_records = scoreboard_event("1", "2026-03-01T19:30Z")
        for competitor in no_records["competitions"][0]["competitors"]:
            competitor["records"] = None
        no_records["status"] = None
        return httpx.Response(200, json={"events": [
            no_records,
            {"id": "2", "competitions": "not-a-list"},
            scoreboard_event("3", "2026-03-01T19:30Z"),
        ]})

    client = _client(handler)
    games = await get_games(client, League.NBA, date(2026, 3, 1))
    await client.close()

    assert [g.event_id for g in games] == ["1", "3"]
    assert games[0].home_record == ""
    assert games[0].status == ""
    assert games[1].home_record == "40-22"


async def test_get_games_bad_status_raises_provider_error():
    client = _client(lambda request: httpx.Response(503))
    with pytest.raises(ProviderError, match="503"):
        await get_games(client, League.NFL, date(2026, 3, 1))
    await client.close()


async def test_get_games_bad_json_raises_provider_error():
    client = _client(lambda request: httpx.Response(200, content=b"<html>"))
    with pytest.raises(ProviderError):
        await get_games(client, League.MLB, date(2026, 3, 1))
    await client.close()


async def test_get_games_unexpected_shape_raises_provider_error():
    client = _client(lambda request: httpx.Response(200, json=[1, 2, 3]))
    with pytest.raises(ProviderError):
        await get_games(client, League.MLB, date(2026, 3, 1))
    await client.close()


async def test_get_odds_url_and_items():
    seen: list[httpx.URL] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url)
        return httpx.Response(200, json={"items": [
            {"provider": {"id": "41", "name": "DraftKings"}, "spread": -3.5},
            {"provider": {"id": "58", "name": "ESPN BET"}, "spread": -4.0, "overUnder": 47.5},
        ]})

    game = Game(
        event_id="401", competition_id="402", home_team="A", away_team="B",
        start_time=datetime(2026, 1, 1, tzinfo=timezone.utc), league=League.NFL,
    )
    client = _client(handler)
    items = await get_odds(client, game)
    await client.close()

    assert seen[0].host == "sports.core.api.espn.com"
    assert seen[0].path == (
        "/v2/sports/football/leagues/nfl/events/401/competitions/402/odds"
    )
    assert [i.provider.id for i in items] == ["41", "58"]
    assert items[1].over_under == 47.5


async def test_transport_error_is_provider_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    client = _client(handler)
    with pytest.raises(ProviderError, match="failed to fetch"):
        await client.get("https://example.invalid/x")
    await client.close()
