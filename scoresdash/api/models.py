"""Pydantic models for ESPN responses and the merged Game record."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Annotated, Any, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from scoresdash.leagues import League

log = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
FALLBACK_TIME_FORMAT = "%Y-%m-%dT%H:%MZ"


def _to_float(value: Any) -> float:
    """Coerce a loosely typed numeric field; anything unusable becomes 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _to_int(value: Any) -> int:
    return int(_to_float(value))


def _to_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _to_bool(value: Any) -> Any:
    return False if value is None else value


def _none_to_list(value: Any) -> Any:
    return [] if value is None else value


def _none_to_dict(value: Any) -> Any:
    return {} if value is None else value


LenientFloat = Annotated[float, BeforeValidator(_to_float)]
LenientInt = Annotated[int, BeforeValidator(_to_int)]
LenientStr = Annotated[str, BeforeValidator(_to_str)]
LenientBool = Annotated[bool, BeforeValidator(_to_bool)]

T = TypeVar("T")
# A JSON null for a list or nested object reads as empty.
LenientList = Annotated[list[T], BeforeValidator(_none_to_list)]
LenientObj = Annotated[T, BeforeValidator(_none_to_dict)]


class _Raw(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ── Scoreboard payload ──


class StatusType(_Raw):
    description: LenientStr = ""


class EventStatus(_Raw):
    type: LenientObj[StatusType] = Field(default_factory=StatusType)
    display_clock: LenientStr = Field("", alias="displayClock")
    period: LenientInt = 0


class TeamInfo(_Raw):
    id: LenientStr = ""
    display_name: LenientStr = Field("", alias="displayName")
    abbreviation: LenientStr = ""


class RecordSummary(_Raw):
    name: LenientStr = ""
    summary: LenientStr = ""
    type: LenientStr = ""


class Competitor(_Raw):
    team: LenientObj[TeamInfo] = Field(default_factory=TeamInfo)
    home_away: LenientStr = Field("", alias="homeAway")
    score: Any = None
    records: LenientList[RecordSummary] = Field(default_factory=list)


class Competition(_Raw):
    id: LenientStr = ""
    competitors: LenientList[Competitor] = Field(default_factory=list)


class ScoreboardEvent(_Raw):
    id: LenientStr
    name: LenientStr = ""
    date: LenientStr = ""
    status: LenientObj[EventStatus] = Field(default_factory=EventStatus)
    competitions: LenientList[Competition] = Field(default_factory=list)


class ScoreboardResponse(_Raw):
    """Top-level scoreboard; events are validated one at a time by the caller."""

    events: LenientList[Any] = Field(default_factory=list)


# ── Odds payload ──


class OddsProvider(_Raw):
    id: LenientStr = ""
    name: LenientStr = ""


class TeamOdds(_Raw):
    favorite: LenientBool = False
    money_line: LenientInt = Field(0, alias="moneyLine")


class OddsItem(_Raw):
    provider: LenientObj[OddsProvider] = Field(default_factory=OddsProvider)
    spread: LenientFloat = 0.0
    over_under: LenientFloat = Field(0.0, alias="overUnder")
    home_team_odds: LenientObj[TeamOdds] = Field(default_factory=TeamOdds, alias="homeTeamOdds")
    away_team_odds: LenientObj[TeamOdds] = Field(default_factory=TeamOdds, alias="awayTeamOdds")


class OddsResponse(_Raw):
    items: LenientList[OddsItem] = Field(default_factory=list)


# ── Merged game ──


class Game(BaseModel):
    """One event with scores and, once enriched, odds."""

    event_id: str = Field(min_length=1)
    competition_id: str = ""
    home_team: str
    away_team: str
    start_time: datetime
    league: League
    status: str = ""
    home_score: int = 0
    away_score: int = 0
    home_record: str = ""
    away_record: str = ""
    clock: str = ""
    period: str = ""
    home_spread: str = ""
    away_spread: str = ""
    home_odds: str = ""  # moneyline
    away_odds: str = ""
    over_under: str = ""  # "O/U 45.5"

    def model_post_init(self, __context: Any) -> None:
        if not self.competition_id:
            self.competition_id = self.event_id

    @property
    def needs_odds(self) -> bool:
        return not self.home_spread and not self.over_under


# ── Field parsers ──


def parse_start_time(raw: str, now: datetime | None = None) -> datetime:
    """Parse an ISO-8601 start time, then ESPN's short form, then give up to now."""
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    except ValueError:
        pass
    try:
        return datetime.strptime(raw, FALLBACK_TIME_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        log.warning("Could not parse date %r, using now", raw)
        return now or datetime.now(timezone.utc)


def parse_score(raw: Any) -> int:
    """Leading integer of a score string; empty or malformed is 0."""
    if raw is None or isinstance(raw, bool):
        return 0
    if isinstance(raw, (int, float)):
        return int(raw)
    if isinstance(raw, dict):
        return parse_score(raw.get("value", raw.get("displayValue")))
    m = _LEADING_INT.match(str(raw))
    return int(m.group(1)) if m else 0


def pick_record(records: list[RecordSummary]) -> str:
    """Prefer the overall/total record, else the first one listed."""
    for record in records:
        if record.name == "overall" or record.type == "total":
            return record.summary
    if records:
        return records[0].summary
    return ""


_QUARTERS = {1: "1st Qtr", 2: "2nd Qtr", 3: "3rd Qtr", 4: "4th Qtr", 5: "OT"}
_PERIODS = {1: "1st Per", 2: "2nd Per", 3: "3rd Per", 4: "OT"}


def _ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def format_period(period: int, league: League) -> str:
    if league in (League.NFL, League.NBA):
        return _QUARTERS.get(period, "")
    if league == League.NHL:
        return _PERIODS.get(period, "")
    if league == League.MLB:
        if 1 <= period <= 9:
            return f"{_ordinal(period)} Inn"
        if period >= 10:
            return "Extra Inn"
        return f"{period}th"
    return ""
