# nba_tracker/clock.py
"""
Game clock and calendar helpers.

The live feed reports the time left in the current period as an ISO 8601
duration ("PT11M58.00S"); everything downstream wants seconds since tip-off.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from dateutil import tz

QUARTER_SECONDS = 12 * 60

_MINUTES_RE = re.compile(r"(\d+)M")
_SECONDS_RE = re.compile(r"(\d+(?:\.\d+)?)S")


def _remaining(clock: str) -> tuple[int, int]:
    """Return (minutes, whole seconds) left; missing components are 0."""
    clock = clock or ""
    m = _MINUTES_RE.search(clock)
    s = _SECONDS_RE.search(clock)
    minutes = int(m.group(1)) if m else 0
    # fractional seconds are truncated, never rounded
    seconds = int(float(s.group(1))) if s else 0
    return minutes, seconds


def elapsed_seconds(period: int, clock: str) -> int:
    """
    Convert a period and its remaining-time clock to seconds since tip-off.

    elapsed_seconds(1, "PT12M00.00S") == 0
    elapsed_seconds(2, "PT12M00.00S") == 720

    Malformed clocks are not clamped, so odd input can yield odd output.
    """
    minutes, seconds = _remaining(clock)
    remaining = minutes * 60 + seconds
    return (period - 1) * QUARTER_SECONDS + (QUARTER_SECONDS - remaining)


def format_clock(clock: str) -> str:
    """Render "PT05M03.40S" as "5:03"."""
    minutes, seconds = _remaining(clock)
    return f"{minutes}:{seconds:02d}"


def is_stale(game_date_iso: str, now: Optional[datetime] = None, cutoff_hour: int = 10) -> bool:
    """
    Return True once a finished game should give way to the next one.

    That happens at cutoff_hour:00 local wall-clock time on the day after the
    game. A date we cannot parse is never stale.
    """
    try:
        game_day = date.fromisoformat((game_date_iso or "").strip()[:10])
    except ValueError:
        return False

    now = now or datetime.now()
    cutoff = datetime.combine(game_day + timedelta(days=1), time(hour=cutoff_hour))
    return now.replace(tzinfo=None) >= cutoff


def parse_utc(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO timestamp ("2025-11-22T03:00:00Z"); naive values are taken as UTC."""
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_game_time(value: Optional[str], tz_name: str) -> str:
    """Local tip-off time such as "7:00 PM", or "" when the timestamp is unusable."""
    dt = parse_utc(value)
    if dt is None:
        return ""
    return dt.astimezone(tz.gettz(tz_name)).strftime("%-I:%M %p")


def format_game_date(game_code: str) -> str:
    """
    Human date from a game code.

    Game codes look like "20251122/PORGSW"; the first 8 characters are the date.
    """
    try:
        day = datetime.strptime((game_code or "")[:8], "%Y%m%d")
    except ValueError:
        return ""
    return day.strftime("%A, %b %-d")
