# app.py
"""
Flask entrypoint for the NBA game tracker.

Routes (JSON):
  - GET  /api/game               current game state for the tracked team
  - POST /api/game/refresh       manual refresh (shows loading)
  - POST /api/team/<code>        switch the tracked team (e.g. GSW, LAL)
  - GET  /api/teams              selectable teams
  - GET  /api/standings          league records, best first
  - POST /api/data-usage/reset   zero the network byte counter
  - GET  /health

Notes:
  - One GamePoller per process owns the state; requests only read it or
    trigger its entry points.
  - The poller's first cycle runs in the background on the first request.
"""

from __future__ import annotations

import logging
import os
import re
import threading
from typing import Any, Dict, Optional

from flask import Flask, jsonify

from nba_tracker.cache import TTLCache
from nba_tracker.clock import format_game_date
from nba_tracker.config import AppConfig
from nba_tracker.game_state import Error, GameFinal, GameLive, GameScheduled, GameState, Loading, NoGameToday
from nba_tracker.handlers.game_poller import GamePoller
from nba_tracker.models import Game, RecentPlay, Team, WormPoint
from nba_tracker.nba_client import NBAClient
from nba_tracker.services import GamesService, PlayByPlayService, StandingsService

logger = logging.getLogger(__name__)

TEAM_RE = re.compile(r"^[A-Z]{3}$")

NBA_TEAM_NAMES = {
    "ATL": "Atlanta Hawks",
    "BOS": "Boston Celtics",
    "BKN": "Brooklyn Nets",
    "CHA": "Charlotte Hornets",
    "CHI": "Chicago Bulls",
    "CLE": "Cleveland Cavaliers",
    "DAL": "Dallas Mavericks",
    "DEN": "Denver Nuggets",
    "DET": "Detroit Pistons",
    "GSW": "Golden State Warriors",
    "HOU": "Houston Rockets",
    "IND": "Indiana Pacers",
    "LAC": "LA Clippers",
    "LAL": "Los Angeles Lakers",
    "MEM": "Memphis Grizzlies",
    "MIA": "Miami Heat",
    "MIL": "Milwaukee Bucks",
    "MIN": "Minnesota Timberwolves",
    "NOP": "New Orleans Pelicans",
    "NYK": "New York Knicks",
    "OKC": "Oklahoma City Thunder",
    "ORL": "Orlando Magic",
    "PHI": "Philadelphia 76ers",
    "PHX": "Phoenix Suns",
    "POR": "Portland Trail Blazers",
    "SAC": "Sacramento Kings",
    "SAS": "San Antonio Spurs",
    "TOR": "Toronto Raptors",
    "UTA": "Utah Jazz",
    "WAS": "Washington Wizards",
}


# -------------------------
# Serialization
# -------------------------

def team_to_dict(t: Team) -> Dict[str, Any]:
    """Serialize a Team snapshot into JSON-safe primitives."""
    return {
        "teamId": t.team_id,
        "teamName": t.team_name,
        "teamCity": t.team_city,
        "teamTricode": t.team_tricode,
        "score": t.score,
        "wins": t.wins,
        "losses": t.losses,
        "periods": [{"period": p.period, "periodType": p.period_type, "score": p.score} for p in t.periods],
    }


def game_to_dict(g: Optional[Game]) -> Optional[Dict[str, Any]]:
    """Serialize a Game (None passes through) with a display date derived from its game code."""
    if g is None:
        return None
    return {
        "gameId": g.game_id,
        "gameCode": g.game_code,
        "gameDate": format_game_date(g.game_code),
        "gameStatus": g.game_status,
        "gameStatusText": g.game_status_text,
        "period": g.period,
        "gameClock": g.game_clock,
        "gameTimeUTC": g.game_time_utc,
        "arenaName": g.arena_name,
        "homeTeam": team_to_dict(g.home_team),
        "awayTeam": team_to_dict(g.away_team),
    }


def worm_point_to_dict(p: WormPoint) -> Dict[str, Any]:
    return {
        "gameTimeSeconds": p.game_time_seconds,
        "period": p.period,
        "homeScore": p.home_score,
        "awayScore": p.away_score,
        "scoreDiff": p.score_diff,
    }


def recent_play_to_dict(p: RecentPlay) -> Dict[str, Any]:
    return {
        "description": p.description,
        "teamTricode": p.team_tricode,
        "clock": p.clock,
        "period": p.period,
        "gameTimeSeconds": p.game_time_seconds,
    }


def state_to_dict(state: GameState) -> Dict[str, Any]:
    """
    Serialize every GameState variant.

    Raises:
        TypeError for a state type this function does not know how to render.
    """
    if isinstance(state, Loading):
        return {"kind": state.kind}
    if isinstance(state, NoGameToday):
        return {"kind": state.kind, "nextGame": game_to_dict(state.next_game)}
    if isinstance(state, GameScheduled):
        return {"kind": state.kind, "game": game_to_dict(state.game)}
    if isinstance(state, GameLive):
        return {
            "kind": state.kind,
            "game": game_to_dict(state.game),
            "wormData": [worm_point_to_dict(p) for p in state.worm_data],
            "recentPlays": [recent_play_to_dict(p) for p in state.recent_plays],
            "lastFetchedPeriod": state.last_fetched_period,
        }
    if isinstance(state, GameFinal):
        return {
            "kind": state.kind,
            "game": game_to_dict(state.game),
            "wormData": [worm_point_to_dict(p) for p in state.worm_data],
            "lastFetchedPeriod": state.last_fetched_period,
            "nextGame": game_to_dict(state.next_game),
        }
    if isinstance(state, Error):
        return {"kind": state.kind, "message": state.message}
    raise TypeError(f"Unhandled game state: {type(state).__name__}")


def create_app(
    cfg: Optional[AppConfig] = None,
    poller: Optional[GamePoller] = None,
    client: Optional[NBAClient] = None,
    autostart: bool = True,
) -> Flask:
    """
    App factory.

    Builds shared dependencies (client + cache + services + poller) once per
    process. Tests pass their own poller/client and autostart=False.
    """
    cfg = cfg or AppConfig()
    client = client or NBAClient(cfg, cache=TTLCache())
    standings = StandingsService(client=client)

    if poller is None:
        games = GamesService(client=client, tz_name=cfg.tz, stale_cutoff_hour=cfg.stale_cutoff_hour)
        poller = GamePoller(
            games_service=games,
            play_by_play_service=PlayByPlayService(client=client),
            team_code=cfg.team_code,
            poll_interval_seconds=cfg.poll_interval_seconds,
        )

    app = Flask(__name__)
    app.config["POLLER"] = poller

    started = threading.Event()
    start_lock = threading.Lock()

    @app.before_request
    def ensure_started():
        """Kick off the first load once, without blocking the request."""
        if not autostart:
            return
        with start_lock:
            if started.is_set():
                return
            started.set()
        threading.Thread(target=poller.start, name="game-poller-start", daemon=True).start()

    def game_payload() -> Dict[str, Any]:
        team_code = poller.selected_team
        return {
            "team": team_code,
            "teamName": NBA_TEAM_NAMES.get(team_code, team_code),
            "state": state_to_dict(poller.state),
            "isPolling": poller.is_polling,
            "lastUpdateTime": poller.last_update_time,
            "liveTeams": sorted(poller.live_teams),
            "dataUsageBytes": client.bytes_used,
        }

    # -------------------------
    # Game routes
    # -------------------------

    @app.get("/api/game")
    def api_game():
        """Current state of the tracked team's game."""
        return jsonify(game_payload())

    @app.post("/api/game/refresh")
    def api_game_refresh():
        """Manual refresh; runs a loading-visible cycle before answering."""
        poller.refresh_game()
        return jsonify(game_payload())

    @app.post("/api/team/<code>")
    def api_select_team(code: str):
        """Switch the tracked team. Unknown codes are rejected."""
        team_code = (code or "").strip().upper()
        if not TEAM_RE.match(team_code) or team_code not in NBA_TEAM_NAMES:
            return jsonify({"error": f"Unknown team: {code}"}), 400

        if team_code == poller.selected_team:
            poller.refresh_game()
        else:
            logger.info("Switching tracked team %s -> %s", poller.selected_team, team_code)
            poller.select_team(team_code)
        return jsonify(game_payload())

    @app.get("/api/teams")
    def api_teams():
        return jsonify(
            [{"tricode": code, "name": name} for code, name in sorted(NBA_TEAM_NAMES.items())]
        )

    # -------------------------
    # Standings & data usage
    # -------------------------

    @app.get("/api/standings")
    def api_standings():
        """League records, best win pct first."""
        result = standings.get_sorted()
        if result.is_failure:
            return jsonify({"error": result.message}), 502
        return jsonify(
            [
                {"teamId": r.team_id, "wins": r.wins, "losses": r.losses, "winPct": round(r.win_pct, 3)}
                for r in result.value
            ]
        )

    @app.post("/api/data-usage/reset")
    def api_reset_data_usage():
        client.reset_data_usage()
        return jsonify({"dataUsageBytes": client.bytes_used})

    # -------------------------
    # Health
    # -------------------------

    @app.get("/health")
    def health():
        """Simple health endpoint for Docker/monitoring checks."""
        return {"ok": True}

    return app


# WSGI entrypoint for gunicorn (app:app)
app = create_app()

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    # Dev server (not for production).
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "8000")), debug=False)
