"""Tests for tolerant decoding of NBA payloads."""

import pytest

from nba_tracker.errors import DecodeError
from nba_tracker.payloads import (
    decode_box_score,
    decode_play_by_play,
    decode_schedule,
    decode_scoreboard,
    decode_standings,
)


def test_scoreboard_defaults_and_unknown_fields():
    payload = {
        "meta": {"version": 1},
        "scoreboard": {
            "gameDate": "2025-11-21",
            "leagueId": "00",
            "games": [
                {
                    "gameId": "0022500250",
                    "gameCode": "20251121/PORGSW",
                    "gameStatus": 2,
                    "gameStatusText": "Q3 4:12 ",
                    "period": 3,
                    "gameClock": "PT04M12.00S",
                    "homeTeam": {
                        "teamId": 1610612744,
                        "teamName": "Warriors",
                        "teamCity": "Golden State",
                        "teamTricode": "GSW",
                        "score": 71,
                        "periods": [{"period": 1, "score": 30}, {"period": 2, "periodType": "REGULAR", "score": 25}],
                        "timeoutsRemaining": 3,
                    },
                    "awayTeam": {"teamId": 1610612757, "teamTricode": "POR"},
                },
                "not-a-game",
            ],
        },
    }
    board = decode_scoreboard(payload)

    assert len(board.games) == 1
    game = board.games[0]
    assert game.game_status_text == "Q3 4:12"
    assert game.game_time_utc is None
    assert game.arena_name is None
    assert game.home_team.periods[0].period_type == "REGULAR"
    assert game.home_team.score == 71
    assert game.away_team.score == 0
    assert game.away_team.team_name == ""


def test_scoreboard_without_container_fails():
    with pytest.raises(DecodeError):
        decode_scoreboard({"games": []})


def test_play_by_play_optional_fields():
    pbp = decode_play_by_play(
        {
            "game": {
                "gameId": "g",
                "actions": [
                    {"actionNumber": 4, "period": 1, "clock": "PT11M20.00S", "personId": 201939},
                    {"actionNumber": 5, "period": 1, "clock": "PT11M00.00S", "scoreHome": "2", "scoreAway": "0"},
                ],
            }
        }
    )
    first, second = pbp.actions
    assert first.score_home is None
    assert first.person_id == 201939
    assert second.score_home == "2"
    assert second.person_id is None


def test_box_score_without_arena():
    info = decode_box_score({"game": {"gameId": "g"}})
    assert info.arena_name is None

    info = decode_box_score({"game": {"gameId": "g", "arena": {"arenaName": "Chase Center", "arenaCity": "San Francisco"}}})
    assert info.arena_name == "Chase Center"
    assert info.arena_city == "San Francisco"


def test_schedule_flattens_game_dates_and_tbd_teams():
    schedule = decode_schedule(
        {
            "leagueSchedule": {
                "seasonYear": "2025-26",
                "gameDates": [
                    {"gameDate": "11/21/2025 00:00:00", "games": [{"gameId": "a", "homeTeam": {"teamTricode": "GSW"}}]},
                    {"gameDate": "04/20/2026 00:00:00", "games": [{"gameId": "b", "homeTeam": {"teamId": 0, "teamTricode": ""}}]},
                ],
            }
        }
    )
    assert [g.game_id for g in schedule.games] == ["a", "b"]
    assert schedule.games[1].home_team.team_tricode is None
    assert schedule.games[0].away_team.team_tricode is None


def test_standings_fixed_columns_and_short_rows():
    good = [None] * 15
    good[2], good[13], good[14] = 1610612744, "12", "3"
    standings = decode_standings({"resultSets": [{"rowSet": [good, [1, 2, 3]]}]})

    assert len(standings) == 1
    assert (standings[0].wins, standings[0].losses) == (12, 3)
    assert standings[0].win_pct == pytest.approx(0.8)


def test_standings_without_result_sets_fails():
    with pytest.raises(DecodeError):
        decode_standings({})
