# nba_tracker/models.py
"""
Domain models for the tracker.

Wire shapes (scoreboard, play-by-play, box score, schedule, standings) and the
derived series the UI draws (worm points, recent plays). Everything is frozen;
use dataclasses.replace (or the helpers below) to produce updated copies.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple

STATUS_SCHEDULED = 1
STATUS_LIVE = 2
STATUS_FINAL = 3


@dataclass(frozen=True)
class Period:
    """Points scored by one team in one period (5+ is overtime)."""
    period: int
    score: int
    period_type: str = "REGULAR"


@dataclass(frozen=True)
class Team:
    """One side of a game as reported on the scoreboard."""
    team_id: int
    team_name: str
    team_city: str
    team_tricode: str
    score: int = 0
    wins: int = 0
    losses: int = 0
    periods: Tuple[Period, ...] = ()


@dataclass(frozen=True)
class Game:
    """A single contest as shown on screen."""
    game_id: str
    game_code: str          # "YYYYMMDD/AWYHOM"
    game_status: int        # 1=scheduled, 2=live, 3=final
    game_status_text: str
    period: int
    game_clock: str
    home_team: Team
    away_team: Team
    game_time_utc: Optional[str] = None
    arena_name: Optional[str] = None

    def with_arena(self, arena_name: Optional[str]) -> "Game":
        """Return a copy of this game with the arena name populated."""
        return replace(self, arena_name=arena_name)

    def involves(self, team_code: str) -> bool:
        return team_code in (self.home_team.team_tricode, self.away_team.team_tricode)


@dataclass(frozen=True)
class Scoreboard:
    """Today's scoreboard: the league date plus every game on it."""
    game_date: str          # YYYY-MM-DD
    games: Tuple[Game, ...] = ()


@dataclass(frozen=True)
class GameAction:
    """A raw play-by-play event. Scores are strings and may be absent."""
    action_number: int
    period: int
    clock: str              # e.g. "PT11M58.00S"
    time_actual: Optional[str] = None
    score_home: Optional[str] = None
    score_away: Optional[str] = None
    action_type: Optional[str] = None
    shot_result: Optional[str] = None
    team_tricode: Optional[str] = None
    person_id: Optional[int] = None
    player_name_i: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class PlayByPlayGame:
    game_id: str
    actions: Tuple[GameAction, ...] = ()


@dataclass(frozen=True)
class BoxScoreInfo:
    """The slice of the box score we care about: where the game is played."""
    game_id: str
    arena_name: Optional[str] = None
    arena_city: Optional[str] = None
    arena_state: Optional[str] = None
    arena_country: Optional[str] = None


@dataclass(frozen=True)
class ScheduledTeam:
    """A schedule entry's team. Tricode is absent for TBD playoff slots."""
    team_id: int
    team_name: Optional[str] = None
    team_city: Optional[str] = None
    team_tricode: Optional[str] = None


@dataclass(frozen=True)
class ScheduledGame:
    game_id: str
    game_code: str
    game_date_time_utc: str
    home_team: ScheduledTeam
    away_team: ScheduledTeam
    game_label: Optional[str] = None
    arena_name: Optional[str] = None
    arena_city: Optional[str] = None
    arena_state: Optional[str] = None


@dataclass(frozen=True)
class Schedule:
    """Full-season league schedule, flattened across game dates."""
    season_year: str
    games: Tuple[ScheduledGame, ...] = ()


@dataclass(frozen=True)
class TeamStanding:
    team_id: int
    wins: int
    losses: int

    @property
    def win_pct(self) -> float:
        played = self.wins + self.losses
        return self.wins / played if played > 0 else 0.0


@dataclass(frozen=True)
class WormPoint:
    """One point of the score-differential series."""
    game_time_seconds: int  # seconds from tip-off
    period: int
    home_score: int
    away_score: int
    score_diff: int         # tracked team minus opponent


@dataclass(frozen=True)
class RecentPlay:
    description: str
    team_tricode: Optional[str]
    clock: str              # "m:ss"
    period: int
    game_time_seconds: int


@dataclass(frozen=True)
class PlayByPlayData:
    """Everything derived from one play-by-play document."""
    worm_data: Tuple[WormPoint, ...] = ()
    recent_plays: Tuple[RecentPlay, ...] = ()
