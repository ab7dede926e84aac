# nba_tracker/nba_client.py
"""
HTTP client for the NBA CDN and stats endpoints.

Every fetch returns a Result instead of raising. Response bodies are kept in a
URL-keyed TTLCache with a per-endpoint freshness window, and each call picks a
FetchMode:

  - NORMAL: serve a fresh cached body if there is one, otherwise hit the network.
  - FORCE_NETWORK: hit the network first; on any failure fall back to NORMAL.
  - CACHE_ONLY: never touch the network; a miss is a success carrying None.
"""

from __future__ import annotations

import enum
import json
import logging
import threading
from datetime import date
from typing import Any, Callable, Dict, List, Optional, TypeVar

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .cache import TTLCache
from .config import AppConfig
from .errors import ApiError, DecodeError, HttpError, NetworkError, Result
from .models import BoxScoreInfo, PlayByPlayGame, Schedule, Scoreboard, TeamStanding
from .payloads import (
    decode_box_score,
    decode_play_by_play,
    decode_schedule,
    decode_scoreboard,
    decode_standings,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_HEADERS: Dict[str, str] = {
    "User-Agent": "nba-game-tracker/1.0",
    "Accept": "application/json, text/plain, */*",
    "Accept-Language": "en-US,en;q=0.9",
}

# stats.nba.com rejects requests that don't look like they come from nba.com
STATS_HEADERS: Dict[str, str] = {
    "Origin": "https://www.nba.com",
    "Referer": "https://www.nba.com/",
}

_RETRY = Retry(
    total=2,
    connect=2,
    read=2,
    backoff_factor=0.5,
    status_forcelist=[429, 500, 502, 503, 504],
    allowed_methods=False,
    raise_on_status=False,
)


class FetchMode(enum.Enum):
    """How a fetch may use the response cache."""
    NORMAL = "normal"
    FORCE_NETWORK = "force_network"
    CACHE_ONLY = "cache_only"


def build_session() -> requests.Session:
    """Build a session with JSON headers and retry on throttling/5xx."""
    session = requests.Session()
    session.headers.update(DEFAULT_HEADERS)
    adapter = HTTPAdapter(max_retries=_RETRY)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def season_for(day: date) -> str:
    """
    Return the stats.nba.com season string covering a date.

    October through December belong to the season starting that year
    (Oct 2025 -> "2025-26"); everything else, the off-season included, maps to
    the season that started the previous year (Jan 2026 -> "2025-26").
    """
    if day.month >= 10:
        return f"{day.year}-{(day.year + 1) % 100:02d}"
    return f"{day.year - 1}-{day.year % 100:02d}"


class NBAClient:
    """A small client for the scoreboard, play-by-play, box score, schedule and standings resources."""

    def __init__(
        self,
        cfg: AppConfig,
        cache: Optional[TTLCache] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Store endpoint config, the response cache and the HTTP session."""
        self.cfg = cfg
        self.cache = cache if cache is not None else TTLCache()
        self.session = session if session is not None else build_session()
        self.live_base = cfg.live_api_base.rstrip("/")
        self.static_base = cfg.static_api_base.rstrip("/")
        self.stats_base = cfg.stats_api_base.rstrip("/")
        self._bytes_used = 0
        self._usage_lock = threading.Lock()

    # -------------------------
    # URLs
    # -------------------------

    @property
    def scoreboard_url(self) -> str:
        """todaysScoreboard_00.json on the live CDN."""
        return f"{self.live_base}/scoreboard/todaysScoreboard_00.json"

    @property
    def schedule_url(self) -> str:
        """The full league schedule on the static CDN."""
        return f"{self.static_base}/scheduleLeagueV2.json"

    def play_by_play_url(self, game_id: str) -> str:
        """Play-by-play document for a game."""
        return f"{self.live_base}/playbyplay/playbyplay_{game_id}.json"

    def box_score_url(self, game_id: str) -> str:
        """Box score document for a game."""
        return f"{self.live_base}/boxscore/boxscore_{game_id}.json"

    def standings_url(self, season: str) -> str:
        """Regular-season standings for a season string like "2025-26"."""
        return (
            f"{self.stats_base}/leaguestandingsv3"
            f"?LeagueID=00&Season={season}&SeasonType=Regular+Season"
        )

    # -------------------------
    # Data usage
    # -------------------------

    @property
    def bytes_used(self) -> int:
        """Bytes received from the network (cache hits are free)."""
        return self._bytes_used

    def reset_data_usage(self) -> None:
        """Zero the byte counter."""
        with self._usage_lock:
            self._bytes_used = 0

    def _add_bytes(self, n: int) -> None:
        if n > 0:
            with self._usage_lock:
                self._bytes_used += n

    # -------------------------
    # Core fetch
    # -------------------------

    def _get_body(self, url: str, headers: Optional[Dict[str, str]] = None) -> bytes:
        """
        Execute a GET and return the raw body.

        Raises:
            NetworkError on transport failures, HttpError on non-2xx responses.
        """
        try:
            r = self.session.get(url, headers=headers, timeout=self.cfg.request_timeout_seconds)
        except requests.RequestException as exc:
            raise NetworkError(str(exc) or type(exc).__name__) from exc

        body = r.content or b""
        try:
            self._add_bytes(int(r.headers.get("Content-Length", "")))
        except (TypeError, ValueError):
            self._add_bytes(len(body))

        if not 200 <= r.status_code < 300:
            raise HttpError(r.status_code, r.reason or "")
        return body

    @staticmethod
    def _decode(body: bytes, decoder: Callable[[Any], T]) -> T:
        """Parse a JSON body and run the decoder, turning any malformed shape into DecodeError."""
        try:
            payload = json.loads(body)
        except ValueError as exc:
            raise DecodeError(f"invalid JSON: {exc}") from exc
        try:
            return decoder(payload)
        except ApiError:
            raise
        except (AttributeError, TypeError, KeyError, IndexError, ValueError) as exc:
            raise DecodeError(f"unexpected payload shape: {exc}") from exc
    def _fetch_network(
        self,
        url: str,
        ttl_seconds: float,
        decoder: Callable[[Any], T],
        headers: Optional[Dict[str, str]] = None,
    ) -> T:
        body = self._get_body(url, headers=headers)
        value = self._decode(body, decoder)
        # only bodies that decoded cleanly are worth serving again
        self.cache.set(url, body, ttl_seconds)
        return value

    def _fetch(
        self,
        url: str,
        ttl_seconds: float,
        decoder: Callable[[Any], T],
        mode: FetchMode = FetchMode.NORMAL,
        headers: Optional[Dict[str, str]] = None,
    ) -> Result[T]:
        if mode is FetchMode.CACHE_ONLY:
            body = self.cache.get(url)
            if body is None:
                return Result.success(None)
            try:
                return Result.success(self._decode(body, decoder))
            except ApiError as exc:
                return Result.failure(exc)

        if mode is FetchMode.FORCE_NETWORK:
            try:
                return Result.success(self._fetch_network(url, ttl_seconds, decoder, headers))
            except ApiError as exc:
                logger.info("Forced refresh failed for %s (%s); falling back to cache", url, exc)
                return self._fetch(url, ttl_seconds, decoder, FetchMode.NORMAL, headers)

        cached = self.cache.get(url)
        try:
            if cached is not None:
                return Result.success(self._decode(cached, decoder))
            return Result.success(self._fetch_network(url, ttl_seconds, decoder, headers))
        except ApiError as exc:
            logger.warning("Request failed: %s (%s)", url, exc)
            return Result.failure(exc)

    # -------------------------
    # Resources
    # -------------------------

    def fetch_scoreboard(self) -> Result[Scoreboard]:
        """Fetch today's scoreboard."""
        return self._fetch(self.scoreboard_url, self.cfg.scoreboard_ttl_seconds, decode_scoreboard)

    def fetch_play_by_play(self, game_id: str, mode: FetchMode = FetchMode.NORMAL) -> Result[PlayByPlayGame]:
        """Fetch the play-by-play document for a game. Value is None only for a CACHE_ONLY miss."""
        return self._fetch(
            self.play_by_play_url(game_id),
            self.cfg.play_by_play_ttl_seconds,
            decode_play_by_play,
            mode,
        )

    def fetch_play_by_play_from_cache_only(self, game_id: str) -> Result[PlayByPlayGame]:
        """Return cached play-by-play, or a success carrying None when nothing is cached."""
        return self.fetch_play_by_play(game_id, FetchMode.CACHE_ONLY)

    def fetch_box_score(self, game_id: str) -> Result[BoxScoreInfo]:
        """Fetch box score data for a game (used for arena info)."""
        return self._fetch(self.box_score_url(game_id), self.cfg.box_score_ttl_seconds, decode_box_score)

    def fetch_schedule(self) -> Result[Schedule]:
        """Fetch the full-season league schedule."""
        return self._fetch(self.schedule_url, self.cfg.schedule_ttl_seconds, decode_schedule)

    def fetch_standings(self, season: Optional[str] = None) -> Result[List[TeamStanding]]:
        """Fetch regular-season standings; defaults to the season covering today."""
        season = season or season_for(date.today())
        return self._fetch(
            self.standings_url(season),
            self.cfg.standings_ttl_seconds,
            decode_standings,
            headers=STATS_HEADERS,
        )
