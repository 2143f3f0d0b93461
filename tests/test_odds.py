"""Tests for odds selection, merging and concurrent enrichment."""

from __future__ import annotations

import asyncio

import pytest

from conftest import odds_item
from scoresdash.errors import ProviderError
from scoresdash.services.odds import (
    OddsEnricher,
    OddsStatus,
    apply_odds,
    format_moneyline,
    format_over_under,
    select_odds_item,
)


class TestFormatting:
    @pytest.mark.parametrize("value,expected", [(150, "+150"), (-150, "-150"), (0, "")])
    def test_moneyline(self, value, expected):
        assert format_moneyline(value) == expected

    def test_over_under(self):
        assert format_over_under(45.5) == "O/U 45.5"
        assert format_over_under(220) == "O/U 220.0"
        assert format_over_under(0) == ""


class TestSelectOddsItem:
    def test_skips_excluded_default_provider(self):
        items = [odds_item("41", spread=-3.0), odds_item("58", spread=-3.5)]
        assert select_odds_item(items, "41").provider.id == "58"

    def test_first_entry_when_not_excluded(self):
        items = [odds_item("58"), odds_item("100")]
        assert select_odds_item(items, "41").provider.id == "58"

    def test_only_excluded_provider(self):
        assert select_odds_item([odds_item("41")], "41") is None

    def test_empty(self):
        assert select_odds_item([], "41") is None


class TestApplyOdds:
    def test_home_favorite(self, make_game, now):
        game = make_game(now)
        apply_odds(game, odds_item(spread=-3.5, home_favorite=True))
        assert game.home_spread == "-3.5"
        assert game.away_spread == "3.5"
        assert game.over_under == "O/U 220.5"
        assert game.home_odds == "-150"
        assert game.away_odds == "+130"

    def test_away_favorite_still_negates_for_away(self, make_game, now):
        game = make_game(now)
        apply_odds(game, odds_item(spread=2.5, home_favorite=False, away_favorite=True))
        assert game.home_spread == "2.5"
        assert game.away_spread == "-2.5"

    def test_no_favorite_copies_raw_spread_to_both_sides(self, make_game, now):
        game = make_game(now)
        apply_odds(game, odds_item(spread=-1.5, home_favorite=False, away_favorite=False))
        assert game.home_spread == "-1.5"
        assert game.away_spread == "-1.5"

    def test_zero_values_are_absent(self, make_game, now):
        game = make_game(now)
        changed = apply_odds(game, odds_item(spread=0, over_under=0, home_ml=0, away_ml=0))
        assert not changed
        assert game.home_spread == game.away_spread == ""
        assert game.over_under == ""
        assert game.home_odds == game.away_odds == ""

    def test_never_overwrites_existing_values(self, make_game, now):
        game = make_game(
            now, home_spread="-7.0", away_spread="7.0", over_under="O/U 50.0",
            home_odds="-300", away_odds="+250",
        )
        changed = apply_odds(game, odds_item(spread=-3.5, over_under=44.5))
        assert not changed
        assert game.home_spread == "-7.0"
        assert game.away_spread == "7.0"
        assert game.over_under == "O/U 50.0"
        assert game.home_odds == "-300"
        assert game.away_odds == "+250"


class TestOddsEnricher:
    async def test_only_games_without_odds_are_fetched(self, make_game, now):
        has_spread = make_game(now, home_spread="-2.0", away_spread="2.0")
        has_total = make_game(now, over_under="O/U 200.0")
        bare = make_game(now)
        fetched: list[str] = []

        async def fetch(game):
            fetched.append(game.event_id)
            return [odds_item()]

        report = await OddsEnricher(fetch).enrich([has_spread, has_total, bare])
        assert fetched == [bare.event_id]
        assert report.applied == [bare.event_id]
        assert has_spread.home_spread == "-2.0"
        assert has_total.over_under == "O/U 200.0"

    async def test_failures_are_absorbed_per_game(self, make_game, now):
        ok, broken, empty = make_game(now), make_game(now), make_game(now)

        async def fetch(game):
            if game is broken:
                raise ProviderError("API request failed with status: 500")
            if game is empty:
                return [odds_item("41")]
            return [odds_item()]

        report = await OddsEnricher(fetch, excluded_provider="41").enrich([ok, broken, empty])
        assert report.applied == [ok.event_id]
        assert report.failed == [broken.event_id]
        assert report.missing == [empty.event_id]
        assert isinstance(report.outcomes[broken.event_id].error, ProviderError)
        assert report.outcomes[broken.event_id].status is OddsStatus.FAILED
        assert broken.home_spread == "" and broken.over_under == ""
        assert ok.home_spread == "-3.5"

    async def test_enrich_joins_all_fetches_before_returning(self, make_game, now):
        games = [make_game(now) for _ in range(5)]
        in_flight = 0
        peak = 0

        async def slow_fetch(game):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            # Later games finish first
            await asyncio.sleep(0.01 * (10 - int(game.event_id[3:]) % 10))
            in_flight -= 1
            return [odds_item()]

        await OddsEnricher(slow_fetch).enrich(games)
        assert in_flight == 0
        assert peak == len(games)
        assert all(g.home_spread == "-3.5" for g in games)

    async def test_max_concurrent_caps_fan_out(self, make_game, now):
        games = [make_game(now) for _ in range(6)]
        in_flight = 0
        peak = 0

        async def slow_fetch(game):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return [odds_item()]

        await OddsEnricher(slow_fetch, max_concurrent=2).enrich(games)
        assert peak == 2
        assert all(g.over_under for g in games)

    async def test_no_eligible_games(self, make_game, now):
        async def fetch(game):
            raise AssertionError("should not be called")

        report = await OddsEnricher(fetch).enrich([make_game(now, over_under="O/U 9.5")])
        assert report.outcomes == {}
