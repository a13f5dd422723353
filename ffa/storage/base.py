from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Protocol

GAMEWEEK_RESULTS = "gameweek_results"
SEASON_STANDINGS = "season_standings"
SEASON_TROPHIES = "season_trophies"
MANAGER_SEASON_STATS = "manager_season_stats"
H2H_STATS = "h2h_stats"

TABLES = (GAMEWEEK_RESULTS, SEASON_STANDINGS, SEASON_TROPHIES, MANAGER_SEASON_STATS, H2H_STATS)

# Sentinel for "any season" in pairwise reads; ``None`` means the all-seasons aggregate.
ALL_SEASONS = object()

Row = Mapping[str, Any]


@dataclass(frozen=True)
class ReplaceScope:
    """Rows a replace operation owns.

    ``season`` always applies; ``competition_type`` and ``max_gameweek``
    narrow the scope further when set (``gameweek <= max_gameweek``).
    """

    table: str
    season: str | None
    competition_type: str | None = None
    max_gameweek: int | None = None

    def __post_init__(self) -> None:
        if self.table not in TABLES:
            raise ValueError(f"Unknown table: {self.table}")

    def matches(self, row: Row) -> bool:
        if row.get("season") != self.season:
            return False
        if self.competition_type is not None and row.get("competition_type") != self.competition_type:
            return False
        if self.max_gameweek is not None:
            gw = row.get("gameweek")
            if gw is None or int(gw) > self.max_gameweek:
                return False
        return True


class RecordStore(Protocol):
    """Historical storage the engine reads and (for the live season) rewrites.

    Missing tables read as empty. ``replace_rows`` must delete the scope and
    insert the new rows as one atomic step.
    """

    def gameweek_results(self, season: str | None = None) -> list[dict]: ...

    def season_standings(
        self, season: str | None = None, competition_type: str | None = None
    ) -> list[dict]: ...

    def trophies(self) -> list[dict]: ...

    def season_stats(self) -> list[dict]: ...

    def pairwise(self, season: object = ALL_SEASONS) -> list[dict]: ...

    def replace_rows(self, scope: ReplaceScope, rows: Iterable[Row]) -> int: ...
