"""Game bucketing, next-game lookahead, and settled-bet grading."""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Awaitable, Callable, Iterable

from pydantic import BaseModel, Field

from scoresdash.api.models import Game
from scoresdash.leagues import League

log = logging.getLogger(__name__)

LIVE_STATUSES = frozenset({
    "STATUS_IN_PROGRESS",
    "In Progress",
    "STATUS_HALFTIME",
    "Halftime",
    "End of Period",
})

FINISHED_STATUSES = frozenset({
    "Final",
    "STATUS_FINAL",
    "Final/OT",
    "STATUS_FINAL_OT",
    "Final/2OT",
    "Final/3OT",
    "Postponed",
    "STATUS_POSTPONED",
    "Canceled",
    "STATUS_CANCELED",
})

_OVER_UNDER_RE = re.compile(r"^O/U\s+([+-]?\d+(?:\.\d+)?)")

DayFetcher = Callable[[League, date], Awaitable[list[Game]]]


class SpreadGrade(str, Enum):
    WIN = "win"
    LOSS = "loss"
    PUSH = "push"
    NOT_APPLICABLE = "n/a"


class OverUnderGrade(str, Enum):
    OVER = "over"
    UNDER = "under"
    PUSH = "push"
    NOT_APPLICABLE = "n/a"


class GameGrades(BaseModel):
    home_spread: SpreadGrade = SpreadGrade.NOT_APPLICABLE
    away_spread: SpreadGrade = SpreadGrade.NOT_APPLICABLE
    over_under: OverUnderGrade = OverUnderGrade.NOT_APPLICABLE


class NextGame(BaseModel):
    """First scheduled game found for a league with nothing active."""

    league: League
    game: Game


class Classification(BaseModel):
    """Per-league buckets for one refresh cycle."""

    active_by_league: dict[League, list[Game]] = Field(default_factory=dict)
    all_by_league: dict[League, list[Game]] = Field(default_factory=dict)
    finished_by_league: dict[League, list[Game]] = Field(default_factory=dict)
    grades: dict[str, GameGrades] = Field(default_factory=dict)  # by event_id
    next_games: dict[League, NextGame] = Field(default_factory=dict)
    # Leagues whose every game today is already over.
    done_for_today: list[League] = Field(default_factory=list)

    @property
    def live_count(self) -> int:
        return sum(
            count_live(games) for games in self.all_by_league.values()
        )


def is_live(status: str) -> bool:
    return status in LIVE_STATUSES


def is_finished(status: str) -> bool:
    return status in FINISHED_STATUSES


def is_upcoming(start_time: datetime, window: timedelta, now: datetime) -> bool:
    return now < start_time < now + window


def count_live(games: Iterable[Game]) -> int:
    return sum(1 for g in games if is_live(g.status))


def local_day_bounds(now: datetime) -> tuple[datetime, datetime]:
    """[midnight, next midnight) in now's timezone."""
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


def parse_over_under(text: str) -> float | None:
    """Numeric line out of an "O/U 45.5" string, or None."""
    m = _OVER_UNDER_RE.match(text.strip()) if text else None
    return float(m.group(1)) if m else None


def grade_spread(spread: str, score_diff: int, won: bool) -> SpreadGrade:
    """Grade a winning team against its own spread.

    Only winners are graded. A positive spread means the team was the
    underdog, so any win covers. A favorite at -n needs a margin over n;
    exactly n is a push.
    """
    if not spread or not won:
        return SpreadGrade.NOT_APPLICABLE
    try:
        value = float(spread)
    except ValueError:
        return SpreadGrade.NOT_APPLICABLE

    if value > 0:
        return SpreadGrade.WIN

    needed = -value
    if score_diff > needed:
        return SpreadGrade.WIN
    if score_diff == needed:
        return SpreadGrade.PUSH
    return SpreadGrade.LOSS


def grade_over_under(total: float, line: float | None) -> OverUnderGrade:
    if line is None:
        return OverUnderGrade.NOT_APPLICABLE
    if total > line:
        return OverUnderGrade.OVER
    if total < line:
        return OverUnderGrade.UNDER
    return OverUnderGrade.PUSH


def grade_game(game: Game) -> GameGrades:
    home_diff = game.home_score - game.away_score
    return GameGrades(
        home_spread=grade_spread(game.home_spread, home_diff, home_diff > 0),
        away_spread=grade_spread(game.away_spread, -home_diff, home_diff < 0),
        over_under=grade_over_under(
            game.home_score + game.away_score, parse_over_under(game.over_under),
        ),
    )


class GameClassifier:
    """Buckets a cycle's games by league and status."""

    def __init__(
        self,
        active_window: timedelta = timedelta(minutes=30),
        next_game_days: int = 6,
    ) -> None:
        self.active_window = active_window
        self.next_game_days = next_game_days

    def classify(
        self, games: list[Game], now: datetime,
    ) -> tuple[dict[League, list[Game]], dict[League, list[Game]]]:
        """Return (active_by_league, all_by_league) in fetch order."""
        active: dict[League, list[Game]] = {}
        all_games: dict[League, list[Game]] = {}
        for game in games:
            all_games.setdefault(game.league, []).append(game)
            if is_live(game.status) or is_upcoming(game.start_time, self.active_window, now):
                active.setdefault(game.league, []).append(game)
        return active, all_games

    @staticmethod
    def sort_active(games: list[Game]) -> list[Game]:
        """Live games first, then by start time; ties keep fetch order."""
        return sorted(games, key=lambda g: (not is_live(g.status), g.start_time))

    @staticmethod
    def finished_today(games: Iterable[Game], now: datetime) -> list[Game]:
        start, end = local_day_bounds(now)
        finished = [
            g for g in games
            if start <= g.start_time < end and is_finished(g.status)
        ]
        finished.sort(key=lambda g: g.start_time)
        return finished

    @staticmethod
    def all_finished_today(games: Iterable[Game], now: datetime) -> bool:
        """True when today had games and none is live or still to start."""
        start, end = local_day_bounds(now)
        has_games_today = False
        for game in games:
            if start <= game.start_time < end:
                has_games_today = True
                if game.start_time > now or is_live(game.status):
                    return False
        return has_games_today

    def build(self, games: list[Game], now: datetime) -> Classification:
        active, all_games = self.classify(games, now)
        result = Classification(
            active_by_league={lg: self.sort_active(gs) for lg, gs in active.items()},
            all_by_league=all_games,
        )
        for league, league_games in all_games.items():
            finished = self.finished_today(league_games, now)
            if finished:
                result.finished_by_league[league] = finished
            for game in finished:
                result.grades[game.event_id] = grade_game(game)
            if self.all_finished_today(league_games, now):
                result.done_for_today.append(league)
        return result

    async def find_next_game(
        self,
        league: League,
        todays_games: list[Game],
        fetch_day: DayFetcher,
        now: datetime,
    ) -> NextGame | None:
        """Find the league's next scheduled game.

        Today's games are searched in fetch order first. Otherwise each of
        the following days is probed in turn; a failed probe is skipped.
        """
        for game in todays_games:
            if game.league == league and game.start_time > now:
                return NextGame(league=league, game=game)

        today = now.date()
        for offset in range(1, self.next_game_days + 1):
            day = today + timedelta(days=offset)
            try:
                games = await fetch_day(league, day)
            except Exception as exc:
                log.debug("Next-game probe for %s on %s failed: %s", league.value, day, exc)
                continue
            if not games:
                continue
            future = sorted(
                (g for g in games if g.start_time > now), key=lambda g: g.start_time,
            )
            if future:
                return NextGame(league=league, game=future[0])
        return None
