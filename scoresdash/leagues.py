"""Static league table: provider sport names, display colors, order."""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, ConfigDict


class League(str, Enum):
    NFL = "NFL"
    NBA = "NBA"
    NHL = "NHL"
    MLB = "MLB"

    @property
    def slug(self) -> str:
        """Lower-case code used in provider URLs."""
        return self.value.lower()


class LeagueInfo(BaseModel):
    """Immutable per-league lookup record."""

    model_config = ConfigDict(frozen=True)

    league: League
    sport: str  # provider taxonomy name, e.g. "football"
    color: str  # Rich color name for the league header


def build_league_table() -> Mapping[League, LeagueInfo]:
    """Build the read-only league table. Called once at startup."""
    return MappingProxyType({
        League.NFL: LeagueInfo(league=League.NFL, sport="football", color="red"),
        League.NBA: LeagueInfo(league=League.NBA, sport="basketball", color="blue"),
        League.NHL: LeagueInfo(league=League.NHL, sport="hockey", color="dark_orange"),
        League.MLB: LeagueInfo(league=League.MLB, sport="baseball", color="green"),
    })


LEAGUE_TABLE: Mapping[League, LeagueInfo] = build_league_table()

# Display order; leagues with games today are moved ahead of empty ones.
LEAGUE_ORDER: tuple[League, ...] = (League.NFL, League.NBA, League.NHL, League.MLB)
