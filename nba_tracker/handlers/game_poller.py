# nba_tracker/handlers/game_poller.py
"""
Poller responsible for deciding what the screen shows.

Owns the current GameState and drives fetch-and-decide cycles:

  Loading -> resolve today's game
    - lookup failed           -> Error (polling stops)
    - no game / stale final   -> GameScheduled(next) or NoGameToday
    - status 1                -> GameScheduled
    - status 2                -> GameLive (+ play-by-play refresh, polling on)
    - status 3                -> GameFinal (+ worm, next game)
    - anything else           -> Error

Cycles never overlap. A cycle requested while one is in flight is skipped,
except a visible refresh, which is re-run once the current cycle ends.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import replace
from datetime import datetime
from typing import Callable, List, Optional, Set, Tuple

from ..game_state import Error, GameFinal, GameLive, GameScheduled, GameState, Loading, NoGameToday
from ..models import STATUS_FINAL, STATUS_LIVE, STATUS_SCHEDULED, Game
from ..nba_client import FetchMode
from ..services.games_service import GamesService
from ..services.play_by_play_service import PlayByPlayService

logger = logging.getLogger(__name__)

Subscriber = Callable[[GameState], None]


class GamePoller:
    """Single-writer owner of the tracked team's GameState."""

    def __init__(
        self,
        games_service: GamesService,
        play_by_play_service: PlayByPlayService,
        team_code: str,
        poll_interval_seconds: float = 15.0,
        now_fn: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.games_service = games_service
        self.play_by_play_service = play_by_play_service
        self.poll_interval_seconds = poll_interval_seconds
        self._now_fn = now_fn

        self._state: GameState = Loading()
        self._selected_team = team_code.strip().upper()
        self._generation = 0
        self._subscribers: List[Subscriber] = []
        self._state_lock = threading.RLock()

        self._cycle_lock = threading.Lock()
        self._rerun_requested = False
        self._closed = False

        self._poll_lock = threading.Lock()
        self._poll_thread: Optional[threading.Thread] = None
        self._poll_stop: Optional[threading.Event] = None
        self._is_polling = False
        self._last_update_time: Optional[float] = None

        self._current_game_id: Optional[str] = None
        self._last_known_score: Optional[Tuple[int, int]] = None  # (home, away)
        self._live_teams: Set[str] = set()

    # -------------------------
    # Observable state
    # -------------------------

    @property
    def state(self) -> GameState:
        """The last published state."""
        with self._state_lock:
            return self._state

    @property
    def selected_team(self) -> str:
        """Tricode of the tracked team."""
        return self._selected_team

    @property
    def is_polling(self) -> bool:
        """True while the background poll thread is scheduled."""
        return self._is_polling

    @property
    def last_update_time(self) -> Optional[float]:
        """Epoch seconds of the last cycle start while polling, else None."""
        return self._last_update_time

    @property
    def live_teams(self) -> Set[str]:
        """Tricodes of teams playing live on the last scoreboard."""
        return set(self._live_teams)

    @property
    def current_game_id(self) -> Optional[str]:
        """Game id of the last resolved game today, if any."""
        return self._current_game_id

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback invoked with every newly published state.

        Returns a function that removes the subscription.
        """
        with self._state_lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._state_lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _publish(self, state: GameState, generation: int) -> None:
        """Set the current state unless the cycle that produced it is outdated."""
        with self._state_lock:
            if generation != self._generation:
                logger.debug("Dropping %s from an outdated cycle", state.kind)
                return
            self._state = state
            subscribers = list(self._subscribers)

        logger.debug("State -> %s (%s)", state.kind, self._selected_team)
        for callback in subscribers:
            try:
                callback(state)
            except Exception:
                logger.exception("State subscriber failed")

    def _now(self) -> Optional[datetime]:
        """Injected clock for tests; None means "use the real time"."""
        return self._now_fn() if self._now_fn is not None else None

    # -------------------------
    # Entry points
    # -------------------------

    def start(self) -> None:
        """Run the first, loading-visible cycle."""
        self.fetch_game_data(show_loading=True)

    def select_team(self, team_code: str) -> None:
        """Track another team. Resets per-team bookkeeping and reloads from Loading."""
        code = team_code.strip().upper()
        if code == self._selected_team:
            return

        with self._state_lock:
            self._selected_team = code
            self._generation += 1
        self.stop_polling()
        self._current_game_id = None
        self.refresh_game()

    def refresh_game(self) -> bool:
        """Manually refresh; shows the loading state."""
        return self.fetch_game_data(show_loading=True)

    def fetch_game_data(self, show_loading: bool = False) -> bool:
        """
        Run one fetch-and-decide cycle.

        Args:
            show_loading: publish Loading first (initial load, manual refresh).
                Periodic polls pass False so the screen doesn't flicker.

        Returns:
            False if the cycle was skipped (closed, or another cycle in flight).
        """
        if self._closed:
            return False

        if not self._cycle_lock.acquire(blocking=False):
            if show_loading:
                self._rerun_requested = True
            logger.debug("Cycle already in flight; skipping")
            return False

        with self._state_lock:
            generation = self._generation
            team = self._selected_team
        try:
            self._run_cycle(show_loading, team, generation)
        except Exception as exc:
            logger.exception("Game cycle failed for %s", team)
            # is_polling must not outlive a cycle that blew up
            if generation == self._generation:
                self._publish(Error(f"Unexpected error: {exc}"), generation)
                self.stop_polling()
        finally:
            self._cycle_lock.release()

        if self._rerun_requested and not self._closed:
            self._rerun_requested = False
            return self.fetch_game_data(show_loading=True)
        return True

    def close(self) -> None:
        """Stop polling and ignore anything still in flight. The last state stays as-is."""
        self._closed = True
        with self._state_lock:
            self._generation += 1
        thread = self._poll_thread
        self.stop_polling()
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=1.0)

    # -------------------------
    # Cycle
    # -------------------------

    def _run_cycle(self, show_loading: bool, team: str, generation: int) -> None:
        if show_loading:
            self._publish(Loading(), generation)
        self._last_update_time = time.time()

        result = self.games_service.get_todays_team_game(team)
        if result.is_failure:
            logger.error("Error fetching today's game for %s: %s", team, result.message)
            self._publish(Error(result.message or "Failed to load game data"), generation)
            self.stop_polling()
            return

        scoreboard, game = result.value
        self._live_teams = self.games_service.live_teams(scoreboard)

        if game is None:
            self._show_next_game(team, generation)
        elif game.game_status == STATUS_FINAL and self.games_service.is_game_stale(scoreboard.game_date, self._now()):
            self._show_next_game(team, generation)
        else:
            self._current_game_id = game.game_id
            self._handle_game(game, team, generation)

    def _show_next_game(self, team: str, generation: int) -> None:
        result = self.games_service.get_next_team_game(team, self._now())
        if result.is_failure:
            # no schedule is not worth an error screen
            logger.warning("Error fetching schedule for %s: %s", team, result.message)
            self._publish(NoGameToday(next_game=None), generation)
        elif result.value is None:
            self._publish(NoGameToday(next_game=None), generation)
        else:
            game = self.games_service.scheduled_game_to_game(result.value)
            self._publish(GameScheduled(game=game), generation)
        self.stop_polling()

    def _handle_game(self, game: Game, team: str, generation: int) -> None:
        if game.game_status == STATUS_SCHEDULED:
            self._publish(GameScheduled(game=game), generation)
            self.stop_polling()
        elif game.game_status == STATUS_LIVE:
            self._handle_live_game(game, team, generation)
        elif game.game_status == STATUS_FINAL:
            self._handle_final_game(game, team, generation)
            self.stop_polling()
        else:
            self._publish(Error(f"Unknown game status: {game.game_status}"), generation)
            self.stop_polling()

    def _handle_live_game(self, game: Game, team: str, generation: int) -> None:
        is_home = self.games_service.is_team_home(game, team)

        # cached play-by-play survives a restart and costs no network
        cached = self.play_by_play_service.restore_from_cache(game.game_id, is_home).get_or_none()
        if cached is not None:
            data, last_fetched = cached
            worm_data, recent_plays = data.worm_data, data.recent_plays
        else:
            current = self.state
            if isinstance(current, GameLive) and current.game.game_id == game.game_id:
                worm_data, recent_plays = current.worm_data, current.recent_plays
                last_fetched = current.last_fetched_period
            else:
                worm_data, recent_plays, last_fetched = (), (), 0

        self._publish(
            GameLive(
                game=game,
                worm_data=worm_data,
                recent_plays=recent_plays,
                last_fetched_period=last_fetched,
            ),
            generation,
        )

        self._refresh_play_by_play_if_needed(game, is_home, generation)
        self._start_polling(generation)

    def _refresh_play_by_play_if_needed(self, game: Game, is_home: bool, generation: int) -> None:
        """Force a play-by-play fetch when the period moved on or the score changed."""
        current = self.state
        last_fetched = current.last_fetched_period if isinstance(current, GameLive) else 0
        score = (game.home_team.score, game.away_team.score)
        score_changed = self._last_known_score != score

        if (game.period != last_fetched and game.period > 0) or score_changed:
            self._last_known_score = score
            self._fetch_live_play_by_play(game, is_home, generation)

    def _fetch_live_play_by_play(self, game: Game, is_home: bool, generation: int) -> None:
        result = self.play_by_play_service.get_play_by_play_data(
            game.game_id, is_home, FetchMode.FORCE_NETWORK
        )
        if result.is_failure:
            logger.warning("Play-by-play refresh failed for %s: %s", game.game_id, result.message)
            return

        current = self.state
        if isinstance(current, GameLive):
            self._publish(
                replace(
                    current,
                    worm_data=result.value.worm_data,
                    recent_plays=result.value.recent_plays,
                    last_fetched_period=game.period,
                ),
                generation,
            )

    def _handle_final_game(self, game: Game, team: str, generation: int) -> None:
        is_home = self.games_service.is_team_home(game, team)

        next_game: Optional[Game] = None
        scheduled = self.games_service.get_next_team_game(team, self._now()).get_or_none()
        if scheduled is not None:
            next_game = self.games_service.scheduled_game_to_game(scheduled)

        result = self.play_by_play_service.get_play_by_play_data(
            game.game_id, is_home, FetchMode.FORCE_NETWORK
        )
        if result.is_success:
            final = GameFinal(
                game=game,
                worm_data=result.value.worm_data,
                last_fetched_period=game.period,
                next_game=next_game,
            )
        else:
            logger.warning("No worm data for final game %s: %s", game.game_id, result.message)
            final = GameFinal(game=game, worm_data=(), last_fetched_period=0, next_game=next_game)
        self._publish(final, generation)

    # -------------------------
    # Polling
    # -------------------------

    def _start_polling(self, generation: int) -> None:
        """Start the repeating poll unless it is already running."""
        with self._poll_lock:
            if self._closed or generation != self._generation:
                return
            if self._poll_thread is not None and self._poll_thread.is_alive():
                return

            stop = threading.Event()
            self._poll_stop = stop
            self._is_polling = True
            self._poll_thread = threading.Thread(
                target=self._poll_loop,
                args=(stop,),
                name="game-poller",
                daemon=True,
            )
            self._poll_thread.start()

    def _poll_loop(self, stop: threading.Event) -> None:
        """Run a background cycle every poll interval until stop is set."""
        while not stop.wait(self.poll_interval_seconds):
            self.fetch_game_data(show_loading=False)

    def stop_polling(self) -> None:
        """Cancel the pending poll and clear poll bookkeeping."""
        with self._poll_lock:
            self._is_polling = False
            self._last_update_time = None
            self._last_known_score = None
            if self._poll_stop is not None:
                self._poll_stop.set()
            self._poll_stop = None
            self._poll_thread = None
