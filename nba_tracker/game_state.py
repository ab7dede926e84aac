# nba_tracker/game_state.py
"""
What the screen should show, as a closed set of variants.

Only GameLive and GameFinal carry derived data across poll cycles; they are
updated by producing copies (dataclasses.replace), never in place.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple, Union

from .models import Game, RecentPlay, WormPoint


@dataclass(frozen=True)
class Loading:
    kind: ClassVar[str] = "loading"


@dataclass(frozen=True)
class NoGameToday:
    next_game: Optional[Game] = None
    kind: ClassVar[str] = "no_game_today"


@dataclass(frozen=True)
class GameScheduled:
    game: Game
    kind: ClassVar[str] = "scheduled"


@dataclass(frozen=True)
class GameLive:
    game: Game
    worm_data: Tuple[WormPoint, ...] = ()
    recent_plays: Tuple[RecentPlay, ...] = ()
    last_fetched_period: int = 0
    kind: ClassVar[str] = "live"


@dataclass(frozen=True)
class GameFinal:
    game: Game
    worm_data: Tuple[WormPoint, ...] = ()
    last_fetched_period: int = 0
    next_game: Optional[Game] = None
    kind: ClassVar[str] = "final"


@dataclass(frozen=True)
class Error:
    message: str
    kind: ClassVar[str] = "error"


GameState = Union[Loading, NoGameToday, GameScheduled, GameLive, GameFinal, Error]
