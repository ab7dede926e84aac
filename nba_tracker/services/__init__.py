# nba_tracker/services/__init__.py
"""
Services package exports.
"""
from .games_service import GamesService
from .play_by_play_service import PlayByPlayService
from .standings_service import StandingsService

__all__ = ["GamesService", "PlayByPlayService", "StandingsService"]
