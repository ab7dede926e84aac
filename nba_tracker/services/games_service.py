# nba_tracker/services/games_service.py
"""
Today's game + next game logic.

Responsibilities:
  - find the tracked team's game on today's scoreboard
  - attach arena info from the box score (best effort)
  - decide whether a finished game is stale
  - find the team's next scheduled game from the season schedule
  - project a schedule entry into the Game shape the screen uses
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Set, Tuple

from dateutil import tz

from ..clock import format_game_time, is_stale, parse_utc
from ..errors import Result
from ..models import STATUS_LIVE, STATUS_SCHEDULED, Game, ScheduledGame, ScheduledTeam, Scoreboard, Team
from ..nba_client import NBAClient

logger = logging.getLogger(__name__)


@dataclass
class GamesService:
    """Service that resolves which game the tracked team is playing."""

    client: NBAClient
    tz_name: str
    stale_cutoff_hour: int = 10

    @property
    def app_tz(self):
        """Return the configured timezone object used for all local conversions."""
        return tz.gettz(self.tz_name)

    def _now_local(self) -> datetime:
        """Return the current time in the app timezone."""
        return datetime.now(tz=self.app_tz)

    def get_todays_team_game(self, team_code: str) -> Result[Tuple[Scoreboard, Optional[Game]]]:
        """
        Return today's scoreboard and the team's game on it, if any.

        Arena name comes from the box score; if that lookup fails the game is
        returned without one.
        """
        result = self.client.fetch_scoreboard()
        if result.is_failure:
            return Result.failure(result.error)

        scoreboard = result.value
        game = next((g for g in scoreboard.games if g.involves(team_code)), None)

        if game is not None:
            box = self.client.fetch_box_score(game.game_id)
            if box.is_success:
                game = game.with_arena(box.value.arena_name)
            else:
                logger.debug("No arena for %s: %s", game.game_id, box.message)

        return Result.success((scoreboard, game))

    def get_next_team_game(self, team_code: str, now: Optional[datetime] = None) -> Result[Optional[ScheduledGame]]:
        """
        Return the team's earliest game starting strictly after now.

        Placeholder matchups without both tricodes (playoff TBDs) are skipped, as
        is any game whose start time cannot be parsed.
        """
        result = self.client.fetch_schedule()
        if result.is_failure:
            return Result.failure(result.error)

        now = now or datetime.now(tz=timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=self.app_tz)

        best: Optional[ScheduledGame] = None
        best_start: Optional[datetime] = None
        for g in result.value.games:
            home = g.home_team.team_tricode
            away = g.away_team.team_tricode
            if not home or not away or team_code not in (home, away):
                continue

            start = parse_utc(g.game_date_time_utc)
            if start is None or start <= now:
                continue

            if best_start is None or start < best_start:
                best, best_start = g, start

        return Result.success(best)

    def _scheduled_team_to_team(self, t: ScheduledTeam) -> Team:
        return Team(
            team_id=t.team_id,
            team_name=t.team_name or "",
            team_city=t.team_city or "",
            team_tricode=t.team_tricode or "",
        )

    def scheduled_game_to_game(self, scheduled: ScheduledGame) -> Game:
        """
        Project a schedule entry into a display Game.

        Lossy: status is forced to scheduled, no period or clock, and the local
        start time stands in for the status text.
        """
        return Game(
            game_id=scheduled.game_id,
            game_code=scheduled.game_code,
            game_status=STATUS_SCHEDULED,
            game_status_text=format_game_time(scheduled.game_date_time_utc, self.tz_name),
            period=0,
            game_clock="",
            game_time_utc=scheduled.game_date_time_utc,
            home_team=self._scheduled_team_to_team(scheduled.home_team),
            away_team=self._scheduled_team_to_team(scheduled.away_team),
            arena_name=scheduled.arena_name,
        )

    def is_game_stale(self, game_date: str, now: Optional[datetime] = None) -> bool:
        """True once it's past the cutoff hour on the day after game_date (local time)."""
        now = now or self._now_local()
        if now.tzinfo is not None:
            now = now.astimezone(self.app_tz)
        return is_stale(game_date, now, cutoff_hour=self.stale_cutoff_hour)

    @staticmethod
    def is_team_home(game: Game, team_code: str) -> bool:
        return game.home_team.team_tricode == team_code

    @staticmethod
    def live_teams(scoreboard: Scoreboard) -> Set[str]:
        """Tricodes of every team currently playing a live game."""
        return {
            code
            for g in scoreboard.games
            if g.game_status == STATUS_LIVE
            for code in (g.home_team.team_tricode, g.away_team.team_tricode)
            if code
        }
