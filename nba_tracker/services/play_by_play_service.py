# nba_tracker/services/play_by_play_service.py
"""
Play-by-play -> worm chart logic.

Responsibilities:
  - fetch the play-by-play document (normal, forced, or cache-only)
  - turn scoring actions into a de-duplicated score-differential series
  - collect described actions as recent plays, most recent first
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..clock import elapsed_seconds, format_clock
from ..errors import Result
from ..models import GameAction, PlayByPlayData, PlayByPlayGame, RecentPlay, WormPoint
from ..nba_client import FetchMode, NBAClient


def _parse_score(raw: Optional[str]) -> Optional[int]:
    """Return the score as an int, or None when absent or non-numeric."""
    if raw is None:
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


def build_worm(actions: Sequence[GameAction], is_team_home: bool) -> List[WormPoint]:
    """
    Convert play-by-play actions into worm chart points.

    Only actions carrying both scores count. The differential is always
    tracked team minus opponent. One point per game second: the first action
    seen at a given second wins, and the feed's order is kept as-is.
    """
    seen: set[int] = set()
    out: List[WormPoint] = []

    for action in actions:
        home = _parse_score(action.score_home)
        away = _parse_score(action.score_away)
        if home is None or away is None:
            continue

        t = elapsed_seconds(action.period, action.clock)
        if t in seen:
            continue
        seen.add(t)

        team, opp = (home, away) if is_team_home else (away, home)
        out.append(
            WormPoint(
                game_time_seconds=t,
                period=action.period,
                home_score=home,
                away_score=away,
                score_diff=team - opp,
            )
        )

    return out


def build_recent_plays(actions: Sequence[GameAction]) -> List[RecentPlay]:
    """Every action with a description, most recent first."""
    return [
        RecentPlay(
            description=a.description.strip(),
            team_tricode=a.team_tricode,
            clock=format_clock(a.clock),
            period=a.period,
            game_time_seconds=elapsed_seconds(a.period, a.clock),
        )
        for a in reversed(actions)
        if a.description and a.description.strip()
    ]


def process_play_by_play(pbp: PlayByPlayGame, is_team_home: bool) -> PlayByPlayData:
    return PlayByPlayData(
        worm_data=tuple(build_worm(pbp.actions, is_team_home)),
        recent_plays=tuple(build_recent_plays(pbp.actions)),
    )


@dataclass
class PlayByPlayService:
    """Service that fetches play-by-play and derives worm data from it."""

    client: NBAClient

    def get_play_by_play_data(
        self,
        game_id: str,
        is_team_home: bool,
        mode: FetchMode = FetchMode.NORMAL,
    ) -> Result[PlayByPlayData]:
        """
        Fetch play-by-play and derive worm points + recent plays.

        Use FetchMode.FORCE_NETWORK while a game is live so new scoring shows up
        before the cached copy expires.
        """
        return self.client.fetch_play_by_play(game_id, mode).map(
            lambda pbp: process_play_by_play(pbp, is_team_home)
        )

    def restore_from_cache(
        self,
        game_id: str,
        is_team_home: bool,
    ) -> Result[Optional[Tuple[PlayByPlayData, int]]]:
        """
        Rebuild derived data from a cached play-by-play document, without network.

        Returns a success carrying (data, last period in the document), or a
        success carrying None when nothing is cached.
        """

        def restore(pbp: Optional[PlayByPlayGame]):
            if pbp is None:
                return None
            last_period = max((a.period for a in pbp.actions), default=0)
            return process_play_by_play(pbp, is_team_home), last_period

        return self.client.fetch_play_by_play_from_cache_only(game_id).map(restore)
