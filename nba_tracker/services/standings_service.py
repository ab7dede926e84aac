# nba_tracker/services/standings_service.py
"""
Standings logic.

Responsibilities:
  - fetch the league standings result set
  - sort team records for display
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from ..errors import Result
from ..models import TeamStanding
from ..nba_client import NBAClient


@dataclass
class StandingsService:
    """Service responsible for returning team records."""

    client: NBAClient

    def get_sorted(self, season: Optional[str] = None) -> Result[List[TeamStanding]]:
        """
        Return standings sorted for display.

        Sorting is win pct desc, then wins desc.
        """
        return self.client.fetch_standings(season).map(
            lambda rows: sorted(rows, key=lambda r: (r.win_pct, r.wins), reverse=True)
        )
