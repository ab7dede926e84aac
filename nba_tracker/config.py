# nba_tracker/config.py
"""
Configuration for the NBA game tracker.

This module centralizes all tunable settings (timezone, tracked team, API base
URLs, per-endpoint cache TTLs, and polling cadence).
"""

from __future__ import annotations

from dataclasses import dataclass
import os


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable, returning default on missing/invalid values."""
    try:
        return int(os.getenv(name, str(default)))
    except Exception:
        return default


def _env_float(name: str, default: float) -> float:
    """Read a float environment variable, returning default on missing/invalid values."""
    try:
        return float(os.getenv(name, str(default)))
    except Exception:
        return default


def _env_str(name: str, default: str) -> str:
    """Read a string environment variable; blank values fall back to default."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


@dataclass(frozen=True)
class AppConfig:
    """
    Immutable app configuration.

    Notes on cache TTLs:
      - box score: arena name never changes for a game, so it is kept for a day.
      - play-by-play: long enough to restore the worm after a restart mid-game.
      - scoreboard/schedule/standings: short, these drive live state.
    """

    # Core settings
    tz: str = _env_str("TZ", "America/Los_Angeles")
    team_code: str = _env_str("TEAM_CODE", "GSW").upper()

    # API endpoints
    live_api_base: str = _env_str("NBA_LIVE_API_BASE", "https://cdn.nba.com/static/json/liveData")
    static_api_base: str = _env_str("NBA_STATIC_API_BASE", "https://cdn.nba.com/static/json/staticData")
    stats_api_base: str = _env_str("NBA_STATS_API_BASE", "https://stats.nba.com/stats")
    request_timeout_seconds: float = _env_float("REQUEST_TIMEOUT_SECONDS", 30.0)

    # Cache controls
    scoreboard_ttl_seconds: int = _env_int("SCOREBOARD_TTL_SECONDS", 60)
    schedule_ttl_seconds: int = _env_int("SCHEDULE_TTL_SECONDS", 60)
    play_by_play_ttl_seconds: int = _env_int("PLAY_BY_PLAY_TTL_SECONDS", 300)
    box_score_ttl_seconds: int = _env_int("BOX_SCORE_TTL_SECONDS", 86400)
    standings_ttl_seconds: int = _env_int("STANDINGS_TTL_SECONDS", 60)

    # Polling
    poll_interval_seconds: float = _env_float("POLL_INTERVAL_SECONDS", 15.0)
    stale_cutoff_hour: int = _env_int("STALE_CUTOFF_HOUR", 10)
