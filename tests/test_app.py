"""Tests for the Flask JSON surface."""

import threading
import time
from datetime import datetime, timezone

import pytest

from app import create_app, state_to_dict
from nba_tracker.errors import HttpError, Result
from nba_tracker.game_state import Error, GameFinal, GameLive, Loading, NoGameToday
from nba_tracker.handlers.game_poller import GamePoller
from nba_tracker.models import TeamStanding, WormPoint
from nba_tracker.services import GamesService, PlayByPlayService

from conftest import make_action, make_game


@pytest.fixture
def poller(fake_client):
    p = GamePoller(
        games_service=GamesService(client=fake_client, tz_name="America/Los_Angeles"),
        play_by_play_service=PlayByPlayService(client=fake_client),
        team_code="GSW",
        poll_interval_seconds=3600.0,
        now_fn=lambda: datetime(2025, 11, 20, 12, 0, tzinfo=timezone.utc),
    )
    yield p
    p.close()


@pytest.fixture
def http(cfg, poller, fake_client):
    app = create_app(cfg=cfg, poller=poller, client=fake_client, autostart=False)
    app.config["TESTING"] = True
    return app.test_client()


def test_game_before_first_load_is_loading(http):
    body = http.get("/api/game").get_json()
    assert body["team"] == "GSW"
    assert body["teamName"] == "Golden State Warriors"
    assert body["state"] == {"kind": "loading"}
    assert body["isPolling"] is False


def test_refresh_returns_live_state(http, fake_client):
    fake_client.set_games(make_game(2, home_score=2, away_score=0, period=1))
    fake_client.queue_play_by_play(
        "0022500250",
        make_action(1, 1, "PT11M40.00S", home="2", away="0", description="Curry Layup", team="GSW"),
    )
    fake_client.bytes_used = 2048

    body = http.post("/api/game/refresh").get_json()

    state = body["state"]
    assert state["kind"] == "live"
    assert state["game"]["homeTeam"]["teamTricode"] == "GSW"
    assert state["wormData"] == [
        {"gameTimeSeconds": 20, "period": 1, "homeScore": 2, "awayScore": 0, "scoreDiff": 2}
    ]
    assert state["recentPlays"][0]["clock"] == "11:40"
    assert body["isPolling"] is True
    assert body["liveTeams"] == ["GSW", "POR"]
    assert body["dataUsageBytes"] == 2048


def test_select_team(http, poller):
    body = http.post("/api/team/lal").get_json()
    assert body["team"] == "LAL"
    assert poller.selected_team == "LAL"
    assert body["state"]["kind"] == "no_game_today"


def test_select_unknown_team_is_rejected(http, poller):
    response = http.post("/api/team/XYZ")
    assert response.status_code == 400
    assert poller.selected_team == "GSW"


def test_teams_list(http):
    teams = http.get("/api/teams").get_json()
    assert len(teams) == 30
    assert {"tricode": "GSW", "name": "Golden State Warriors"} in teams


def test_standings_sorted(http, fake_client):
    fake_client.standings = Result.success(
        [TeamStanding(team_id=1, wins=5, losses=5), TeamStanding(team_id=2, wins=9, losses=1)]
    )
    rows = http.get("/api/standings").get_json()
    assert [r["teamId"] for r in rows] == [2, 1]
    assert rows[0]["winPct"] == 0.9


def test_standings_failure(http, fake_client):
    fake_client.standings = Result.failure(HttpError(403, "Forbidden"))
    response = http.get("/api/standings")
    assert response.status_code == 502
    assert "403" in response.get_json()["error"]


def test_reset_data_usage(http, fake_client):
    fake_client.bytes_used = 99
    assert http.post("/api/data-usage/reset").get_json() == {"dataUsageBytes": 0}


def test_health(http):
    assert http.get("/health").get_json() == {"ok": True}


def test_state_to_dict_covers_every_variant():
    game = make_game(3, period=4)
    point = WormPoint(game_time_seconds=30, period=1, home_score=3, away_score=0, score_diff=3)

    assert state_to_dict(Loading()) == {"kind": "loading"}
    assert state_to_dict(NoGameToday()) == {"kind": "no_game_today", "nextGame": None}
    assert state_to_dict(Error("boom")) == {"kind": "error", "message": "boom"}
    assert state_to_dict(GameLive(game=game))["recentPlays"] == []

    final = state_to_dict(GameFinal(game=game, worm_data=(point,), last_fetched_period=4))
    assert final["wormData"][0]["scoreDiff"] == 3
    assert final["nextGame"] is None


def test_state_to_dict_rejects_unknown_state():
    with pytest.raises(TypeError):
        state_to_dict(object())


def test_game_payload_includes_display_date(http, fake_client):
    fake_client.set_games(make_game(1))

    body = http.post("/api/game/refresh").get_json()

    assert body["state"]["kind"] == "scheduled"
    assert body["state"]["game"]["gameDate"] == "Friday, Nov 21"


def test_concurrent_first_requests_start_poller_once(cfg, poller, fake_client, monkeypatch):
    starts = []
    first_start = threading.Event()

    def counting_start():
        starts.append(threading.current_thread().name)
        first_start.set()

    monkeypatch.setattr(poller, "start", counting_start)
    app = create_app(cfg=cfg, poller=poller, client=fake_client, autostart=True)
    barrier = threading.Barrier(8)

    def hit():
        client = app.test_client()
        barrier.wait()
        client.get("/health")

    threads = [threading.Thread(target=hit) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5.0)

    assert first_start.wait(timeout=5.0)
    time.sleep(0.05)
    assert starts == ["game-poller-start"]
