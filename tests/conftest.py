"""Shared fixtures: payload builders and fakes for the HTTP session and the NBA client."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import pytest

from nba_tracker.config import AppConfig
from nba_tracker.errors import NetworkError, Result
from nba_tracker.models import (
    BoxScoreInfo,
    Game,
    GameAction,
    PlayByPlayGame,
    Schedule,
    ScheduledGame,
    ScheduledTeam,
    Scoreboard,
    Team,
)
from nba_tracker.nba_client import FetchMode


# -------------------------
# Model builders
# -------------------------

def make_team(tricode: str, score: int = 0, team_id: int = 0, name: str = "", city: str = "") -> Team:
    return Team(team_id=team_id, team_name=name or tricode, team_city=city, team_tricode=tricode, score=score)


def make_game(
    status: int,
    home: str = "GSW",
    away: str = "POR",
    home_score: int = 0,
    away_score: int = 0,
    period: int = 0,
    game_id: str = "0022500250",
) -> Game:
    return Game(
        game_id=game_id,
        game_code=f"20251121/{away}{home}",
        game_status=status,
        game_status_text={1: "7:00 pm ET", 2: "Q2 5:00", 3: "Final"}.get(status, "?"),
        period=period,
        game_clock="PT05M00.00S" if status == 2 else "",
        game_time_utc="2025-11-22T03:00:00Z",
        home_team=make_team(home, home_score),
        away_team=make_team(away, away_score),
    )


def make_action(
    n: int,
    period: int,
    clock: str,
    home: Optional[str] = None,
    away: Optional[str] = None,
    description: Optional[str] = None,
    team: Optional[str] = None,
) -> GameAction:
    return GameAction(
        action_number=n,
        period=period,
        clock=clock,
        score_home=home,
        score_away=away,
        description=description,
        team_tricode=team,
    )


def make_scheduled(
    game_id: str,
    start_utc: str,
    home: Optional[str] = "GSW",
    away: Optional[str] = "POR",
) -> ScheduledGame:
    return ScheduledGame(
        game_id=game_id,
        game_code=f"{start_utc[:10].replace('-', '')}/{away or ''}{home or ''}",
        game_date_time_utc=start_utc,
        home_team=ScheduledTeam(team_id=1, team_name="Warriors", team_city="Golden State", team_tricode=home),
        away_team=ScheduledTeam(team_id=2, team_name="Trail Blazers", team_city="Portland", team_tricode=away),
        arena_name="Chase Center",
    )


# -------------------------
# HTTP session fake
# -------------------------

class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, reason: str = "OK", raw: Optional[bytes] = None):
        self.status_code = status_code
        self.reason = reason
        if raw is not None:
            self.content = raw
        else:
            self.content = json.dumps(body if body is not None else {}).encode("utf-8")
        self.headers = {"Content-Length": str(len(self.content))}


class FakeSession:
    """Maps URL substrings to a queue of responses (or exceptions to raise)."""

    def __init__(self) -> None:
        self.routes: Dict[str, List[Any]] = {}
        self.calls: List[str] = []

    def add(self, fragment: str, *responses: Any) -> None:
        self.routes.setdefault(fragment, []).extend(responses)

    def get(self, url: str, headers=None, timeout=None, **kwargs):
        self.calls.append(url)
        for fragment, queue in self.routes.items():
            if fragment in url and queue:
                item = queue.pop(0) if len(queue) > 1 else queue[0]
                if isinstance(item, Exception):
                    raise item
                return item
        return FakeResponse(404, reason="Not Found")


# -------------------------
# NBA client fake
# -------------------------

class FakeClient:
    """Stands in for NBAClient with canned Results and a call log."""

    def __init__(self) -> None:
        self.scoreboard: Result = Result.success(Scoreboard(game_date="2025-11-21", games=()))
        self.schedule: Result = Result.success(Schedule(season_year="2025-26", games=()))
        self.box_scores: Dict[str, Result] = {}
        self.play_by_play: List[Result] = []
        self.cached_play_by_play: Result = Result.success(None)
        self.standings: Result = Result.success([])
        self.bytes_used = 0
        self.calls: List[tuple] = []

    def reset_data_usage(self) -> None:
        self.bytes_used = 0

    def fetch_standings(self, season: Optional[str] = None) -> Result:
        self.calls.append(("standings", season))
        return self.standings

    def fetch_scoreboard(self) -> Result:
        self.calls.append(("scoreboard",))
        return self.scoreboard

    def fetch_box_score(self, game_id: str) -> Result:
        self.calls.append(("boxscore", game_id))
        return self.box_scores.get(game_id, Result.failure(NetworkError("offline")))

    def fetch_schedule(self) -> Result:
        self.calls.append(("schedule",))
        return self.schedule

    def fetch_play_by_play(self, game_id: str, mode: FetchMode = FetchMode.NORMAL) -> Result:
        self.calls.append(("playbyplay", game_id, mode))
        if not self.play_by_play:
            return Result.failure(NetworkError("no play-by-play queued"))
        if len(self.play_by_play) > 1:
            return self.play_by_play.pop(0)
        return self.play_by_play[0]

    def fetch_play_by_play_from_cache_only(self, game_id: str) -> Result:
        self.calls.append(("playbyplay-cache", game_id))
        return self.cached_play_by_play

    def calls_named(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]

    def set_games(self, *games: Game, game_date: str = "2025-11-21") -> None:
        self.scoreboard = Result.success(Scoreboard(game_date=game_date, games=tuple(games)))

    def set_arena(self, game_id: str, arena: str) -> None:
        self.box_scores[game_id] = Result.success(BoxScoreInfo(game_id=game_id, arena_name=arena))

    def queue_play_by_play(self, game_id: str, *actions: GameAction) -> None:
        self.play_by_play.append(Result.success(PlayByPlayGame(game_id=game_id, actions=tuple(actions))))


@pytest.fixture
def cfg() -> AppConfig:
    return AppConfig(tz="America/Los_Angeles", team_code="GSW")


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()
