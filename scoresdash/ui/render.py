"""Pure text rendering: classified games → Rich markup lines."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Mapping

from rich.markup import escape

from scoresdash.api.models import Game
from scoresdash.leagues import LEAGUE_ORDER, LEAGUE_TABLE, League, LeagueInfo
from scoresdash.services.classifier import (
    Classification,
    GameGrades,
    NextGame,
    OverUnderGrade,
    SpreadGrade,
    count_live,
    grade_game,
    is_live,
    is_upcoming,
)
from scoresdash.services.data_service import DashboardSnapshot

SPREAD_GLYPHS = {
    SpreadGrade.WIN: "[green]✓[/]",
    SpreadGrade.LOSS: "[red]✗[/]",
    SpreadGrade.PUSH: "[yellow]P[/]",
    SpreadGrade.NOT_APPLICABLE: "",
}

OVER_UNDER_GLYPHS = {
    OverUnderGrade.OVER: "[green]↑[/]",
    OverUnderGrade.UNDER: "[green]↓[/]",
    OverUnderGrade.PUSH: "[yellow]P[/]",
    OverUnderGrade.NOT_APPLICABLE: "",
}

UPCOMING_WINDOW = timedelta(minutes=45)


def _clock(t: datetime) -> str:
    return t.strftime("%-I:%M %p")


def _local(t: datetime, now: datetime) -> datetime:
    return t.astimezone(now.tzinfo)


def format_odds(spread: str, moneyline: str) -> str:
    """Bracketed odds summary, e.g. ``[-3.5 | -150]``."""
    if spread and moneyline:
        return f"[{spread} | {moneyline}]"
    if spread:
        return f"[{spread}]"
    if moneyline:
        return f"[{moneyline}]"
    return ""


def format_game_date(start: datetime, now: datetime) -> str:
    """"Today", "Tomorrow", or a short weekday date like "Mon, Jan 2"."""
    day = _local(start, now).date()
    today = now.date()
    if day == today:
        return "Today"
    if day == today + timedelta(days=1):
        return "Tomorrow"
    return _local(start, now).strftime("%a, %b %-d")


def format_game_status(
    game: Game, now: datetime, window: timedelta = UPCOMING_WINDOW,
) -> tuple[str, str]:
    """(color, text) for an active game; ("", "") when it shouldn't be shown."""
    if is_live(game.status):
        text = "LIVE"
        if game.clock and game.period:
            text = f"{game.clock} - {game.period}"
        return "green", text
    if is_upcoming(game.start_time, window, now):
        minutes = int((game.start_time - now).total_seconds() / 60)
        local = _clock(_local(game.start_time, now))
        return "yellow", f"Starts in {minutes}m ({local})"
    return "", ""


def sort_leagues_by_activity(
    leagues: list[League], all_by_league: Mapping[League, list[Game]],
) -> list[League]:
    """Fixed display order, leagues with games today first."""
    ordered = [lg for lg in LEAGUE_ORDER if lg in leagues]
    with_games = [lg for lg in ordered if all_by_league.get(lg)]
    without = [lg for lg in ordered if not all_by_league.get(lg)]
    return with_games + without


def render_header(fetched_at: datetime, scroll_status: str) -> str:
    return (
        f"[yellow]=== Scores Dash ===[/] "
        f"[grey50]Updated: {_clock(fetched_at)} | [/]{scroll_status}"
    )


def render_next_game(next_game: NextGame, now: datetime) -> str:
    game = next_game.game
    away_odds = format_odds(game.away_spread, game.away_odds)
    home_odds = format_odds(game.home_spread, game.home_odds)
    away = escape(game.away_team) + (f" {escape(away_odds)}" if away_odds else "")
    home = (f"{escape(home_odds)} " if home_odds else "") + escape(game.home_team)
    date_label = format_game_date(game.start_time, now)
    start = _clock(_local(game.start_time, now))
    return f"  [grey50]Next game: {away} @ {home} - {date_label} at {start}[/]"


def render_active_game(game: Game, now: datetime, window: timedelta = UPCOMING_WINDOW) -> str | None:
    color, status = format_game_status(game, now, window)
    if not color:
        return None

    away_info = f"{escape(game.away_team)} ({escape(game.away_record)})"
    if game.away_spread:
        away_info += f"[blue]{escape(format_odds(game.away_spread, game.away_odds))}[/]"
    home_info = ""
    if game.home_spread:
        home_info = f"[blue]{escape(format_odds(game.home_spread, game.home_odds))}[/] "
    home_info += f"{escape(game.home_team)} ({escape(game.home_record)})"

    over_under = f"[blue]{escape(game.over_under)}[/] " if game.over_under else ""
    return (
        f" {over_under}[white]{away_info}[/] [purple]{game.away_score}[/]"
        f"  @  [purple]{game.home_score}[/] {home_info}"
        f"  [{color}]{{{escape(status)}}}[/]"
    )


def render_finished_game(game: Game, grades: GameGrades | None = None) -> str:
    grades = grades or grade_game(game)
    if game.away_score > game.home_score:
        away_style, home_style = "green", "grey50"
    elif game.home_score > game.away_score:
        away_style, home_style = "grey50", "green"
    else:
        away_style = home_style = "white"

    away_odds = escape(format_odds(game.away_spread, game.away_odds))
    home_odds = escape(format_odds(game.home_spread, game.home_odds))
    away_glyph = SPREAD_GLYPHS[grades.away_spread]
    home_glyph = SPREAD_GLYPHS[grades.home_spread]

    ou_info = ""
    if game.over_under:
        ou_glyph = OVER_UNDER_GLYPHS[grades.over_under]
        ou_info = f" [blue]{escape(game.over_under)}[/] {ou_glyph}".rstrip()

    away = (
        f"[{away_style}]{escape(game.away_team)}({escape(game.away_record)})[/]"
        f" {away_glyph} [{away_style}]{away_odds} {game.away_score}[/]"
    )
    home = (
        f"[{home_style}]{game.home_score} {home_odds}[/] {home_glyph} "
        f"[{home_style}]{escape(game.home_team)}({escape(game.home_record)})[/]"
    )
    return f"  {away}  @ {home}{ou_info}"


def render_finished_block(games: list[Game], grades: Mapping[str, GameGrades]) -> list[str]:
    if not games:
        return []
    lines = ["[dark_orange]── Finished Games Results ──[/]"]
    lines.extend(render_finished_game(g, grades.get(g.event_id)) for g in games)
    return lines


def render_league(
    league: League,
    info: LeagueInfo,
    classification: Classification,
    now: datetime,
    window: timedelta = UPCOMING_WINDOW,
) -> list[str]:
    active = classification.active_by_league.get(league, [])
    finished = classification.finished_by_league.get(league, [])
    lines: list[str] = []

    if not active:
        lines.append(f"[{info.color}]▼ {league.value}[/][grey50] No games currently[/]")
        next_game = classification.next_games.get(league)
        if next_game is not None:
            lines.append(render_next_game(next_game, now))
        lines.extend(render_finished_block(finished, classification.grades))
        return lines

    live = count_live(active)
    if live:
        lines.append(f"[{info.color}]▼ {league.value}[/] [green]● {live} LIVE[/]")
    else:
        lines.append(f"[{info.color}]▼ {league.value}[/]")
    for game in active:
        line = render_active_game(game, now, window)
        if line is not None:
            lines.append(line)
    lines.extend(render_finished_block(finished, classification.grades))
    lines.append("")
    return lines


def render_dashboard(
    snapshot: DashboardSnapshot,
    scroll_status: str,
    now: datetime,
    *,
    leagues: Mapping[League, LeagueInfo] = LEAGUE_TABLE,
    upcoming_window: timedelta = UPCOMING_WINDOW,
) -> list[str]:
    """Every line of the main view for one snapshot."""
    classification = snapshot.classification
    lines = [render_header(snapshot.fetched_at, scroll_status)]
    for league in sort_leagues_by_activity(snapshot.leagues, classification.all_by_league):
        lines.extend(
            render_league(league, leagues[league], classification, now, upcoming_window)
        )
    return lines


def render_error(error: BaseException) -> list[str]:
    return [f"[red]Error fetching scores: {escape(str(error))}[/]"]
