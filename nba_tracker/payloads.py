# nba_tracker/payloads.py
"""
Tolerant decoders from raw NBA JSON payloads to domain models.

Unknown keys are ignored and missing optional keys fall back to defaults. Only
a missing top-level container ("scoreboard", "game", "leagueSchedule",
"resultSets") is treated as a decode failure; a single malformed entry inside
a list is skipped rather than failing the whole document.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from .errors import DecodeError
from .models import (
    BoxScoreInfo,
    Game,
    GameAction,
    Period,
    PlayByPlayGame,
    Schedule,
    ScheduledGame,
    ScheduledTeam,
    Scoreboard,
    Team,
    TeamStanding,
)

# leaguestandingsv3 rowSet columns
STANDINGS_TEAM_ID_COL = 2
STANDINGS_WINS_COL = 13
STANDINGS_LOSSES_COL = 14


def safe_int(v, default=0) -> int:
    """Convert a value to int safely; return default on failures."""
    try:
        return int(v)
    except Exception:
        return default


def get_nested(obj: Any, path: list[str], default=None):
    """Safely access nested dict keys by path; return default if missing."""
    cur = obj
    for k in path:
        if not isinstance(cur, dict):
            return default
        cur = cur.get(k)
    return cur if cur is not None else default


def _opt_str(v) -> Optional[str]:
    """Return v as a string, or None when absent."""
    if v is None:
        return None
    return str(v)


def _require_dict(payload: Any, key: str) -> Dict[str, Any]:
    """Return payload[key] as a dict, raising DecodeError when it is missing."""
    node = payload.get(key) if isinstance(payload, dict) else None
    if not isinstance(node, dict):
        raise DecodeError(f"missing '{key}' object")
    return node


def _dict_node(node: Any) -> Dict[str, Any]:
    """Return node when it is a dict, else an empty dict."""
    return node if isinstance(node, dict) else {}


def _dict_items(node: Any) -> List[Dict[str, Any]]:
    """Return only the dict entries of a list node (anything else yields [])."""
    if not isinstance(node, list):
        return []
    return [x for x in node if isinstance(x, dict)]


def decode_team(raw: Dict[str, Any]) -> Team:
    """Decode a scoreboard team node, line score included."""
    periods = tuple(
        Period(
            period=safe_int(p.get("period"), 0),
            score=safe_int(p.get("score"), 0),
            period_type=str(p.get("periodType") or "REGULAR"),
        )
        for p in _dict_items(raw.get("periods"))
    )
    return Team(
        team_id=safe_int(raw.get("teamId"), 0),
        team_name=str(raw.get("teamName") or ""),
        team_city=str(raw.get("teamCity") or ""),
        team_tricode=str(raw.get("teamTricode") or ""),
        score=max(safe_int(raw.get("score"), 0), 0),
        wins=max(safe_int(raw.get("wins"), 0), 0),
        losses=max(safe_int(raw.get("losses"), 0), 0),
        periods=periods,
    )


def decode_game(raw: Dict[str, Any]) -> Game:
    """Decode one scoreboard game; malformed team nodes decode as empty teams."""
    return Game(
        game_id=str(raw.get("gameId") or ""),
        game_code=str(raw.get("gameCode") or ""),
        game_status=safe_int(raw.get("gameStatus"), 0),
        game_status_text=str(raw.get("gameStatusText") or "").strip(),
        period=safe_int(raw.get("period"), 0),
        game_clock=str(raw.get("gameClock") or ""),
        game_time_utc=_opt_str(raw.get("gameTimeUTC")),
        home_team=decode_team(_dict_node(raw.get("homeTeam"))),
        away_team=decode_team(_dict_node(raw.get("awayTeam"))),
    )


def decode_scoreboard(payload: Any) -> Scoreboard:
    """Decode todaysScoreboard_00.json."""
    node = _require_dict(payload, "scoreboard")
    return Scoreboard(
        game_date=str(node.get("gameDate") or ""),
        games=tuple(decode_game(g) for g in _dict_items(node.get("games"))),
    )


def decode_action(raw: Dict[str, Any]) -> GameAction:
    """Decode one play-by-play action. Scores stay strings until the worm parses them."""
    person_id = raw.get("personId")
    return GameAction(
        action_number=safe_int(raw.get("actionNumber"), 0),
        period=safe_int(raw.get("period"), 0),
        clock=str(raw.get("clock") or ""),
        time_actual=_opt_str(raw.get("timeActual")),
        score_home=_opt_str(raw.get("scoreHome")),
        score_away=_opt_str(raw.get("scoreAway")),
        action_type=_opt_str(raw.get("actionType")),
        shot_result=_opt_str(raw.get("shotResult")),
        team_tricode=_opt_str(raw.get("teamTricode")),
        person_id=safe_int(person_id, 0) if person_id is not None else None,
        player_name_i=_opt_str(raw.get("playerNameI")),
        description=_opt_str(raw.get("description")),
    )


def decode_play_by_play(payload: Any) -> PlayByPlayGame:
    """Decode a playbyplay_{gameId}.json document."""
    node = _require_dict(payload, "game")
    return PlayByPlayGame(
        game_id=str(node.get("gameId") or ""),
        actions=tuple(decode_action(a) for a in _dict_items(node.get("actions"))),
    )


def decode_box_score(payload: Any) -> BoxScoreInfo:
    """Decode the arena details of a boxscore_{gameId}.json document."""
    node = _require_dict(payload, "game")
    return BoxScoreInfo(
        game_id=str(node.get("gameId") or ""),
        arena_name=_opt_str(get_nested(node, ["arena", "arenaName"])),
        arena_city=_opt_str(get_nested(node, ["arena", "arenaCity"])),
        arena_state=_opt_str(get_nested(node, ["arena", "arenaState"])),
        arena_country=_opt_str(get_nested(node, ["arena", "arenaCountry"])),
    )


def decode_scheduled_team(raw: Dict[str, Any]) -> ScheduledTeam:
    """Decode a schedule team; a blank tricode (TBD playoff slot) becomes None."""
    tricode = raw.get("teamTricode")
    return ScheduledTeam(
        team_id=safe_int(raw.get("teamId"), 0),
        team_name=_opt_str(raw.get("teamName")) or None,
        team_city=_opt_str(raw.get("teamCity")) or None,
        team_tricode=str(tricode) if tricode else None,
    )


def decode_scheduled_game(raw: Dict[str, Any]) -> ScheduledGame:
    """Decode one leagueSchedule game."""
    return ScheduledGame(
        game_id=str(raw.get("gameId") or ""),
        game_code=str(raw.get("gameCode") or ""),
        game_label=_opt_str(raw.get("gameLabel")),
        game_date_time_utc=str(raw.get("gameDateTimeUTC") or ""),
        home_team=decode_scheduled_team(_dict_node(raw.get("homeTeam"))),
        away_team=decode_scheduled_team(_dict_node(raw.get("awayTeam"))),
        arena_name=_opt_str(raw.get("arenaName")),
        arena_city=_opt_str(raw.get("arenaCity")),
        arena_state=_opt_str(raw.get("arenaState")),
    )


def decode_schedule(payload: Any) -> Schedule:
    """Decode scheduleLeagueV2.json, flattening every game date into one list."""
    node = _require_dict(payload, "leagueSchedule")
    games: List[ScheduledGame] = []
    for day in _dict_items(node.get("gameDates")):
        games.extend(decode_scheduled_game(g) for g in _dict_items(day.get("games")))
    return Schedule(season_year=str(node.get("seasonYear") or ""), games=tuple(games))


def decode_standings(payload: Any) -> List[TeamStanding]:
    """
    Read wins/losses per team id out of a stats.nba.com result set.

    The endpoint is tabular: each row is a positional array, so we pick the
    fixed team-id / wins / losses columns and skip rows too short to hold them.
    """
    result_sets = payload.get("resultSets") if isinstance(payload, dict) else None
    if not isinstance(result_sets, list) or not result_sets or not isinstance(result_sets[0], dict):
        raise DecodeError("missing 'resultSets'")

    out: List[TeamStanding] = []
    width = max(STANDINGS_TEAM_ID_COL, STANDINGS_WINS_COL, STANDINGS_LOSSES_COL) + 1
    rows = result_sets[0].get("rowSet")
    for row in rows if isinstance(rows, list) else []:
        if not isinstance(row, list) or len(row) < width:
            continue
        team_id = safe_int(row[STANDINGS_TEAM_ID_COL], 0)
        if not team_id:
            continue
        out.append(
            TeamStanding(
                team_id=team_id,
                wins=safe_int(row[STANDINGS_WINS_COL], 0),
                losses=safe_int(row[STANDINGS_LOSSES_COL], 0),
            )
        )
    return out
