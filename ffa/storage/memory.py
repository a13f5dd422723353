from __future__ import annotations

import threading
from typing import Iterable

from .base import (
    ALL_SEASONS,
    GAMEWEEK_RESULTS,
    H2H_STATS,
    MANAGER_SEASON_STATS,
    SEASON_STANDINGS,
    SEASON_TROPHIES,
    TABLES,
    ReplaceScope,
    Row,
)


class MemoryStore:
    """In-process record store.

    Reads return copies; a single lock serializes writers so a replace is
    never observed half applied.
    """

    def __init__(self, tables: dict[str, Iterable[Row]] | None = None) -> None:
        self._lock = threading.Lock()
        self._tables: dict[str, list[dict]] = {}
        for name, rows in (tables or {}).items():
            self.import_rows(name, rows)

    def _read(self, table: str) -> list[dict]:
        with self._lock:
            return [dict(r) for r in self._tables.get(table, [])]

    def gameweek_results(self, season: str | None = None) -> list[dict]:
        rows = self._read(GAMEWEEK_RESULTS)
        if season is not None:
            rows = [r for r in rows if r.get("season") == season]
        return sorted(rows, key=lambda r: (str(r.get("season")), int(r.get("gameweek") or 0)))

    def season_standings(
        self, season: str | None = None, competition_type: str | None = None
    ) -> list[dict]:
        rows = self._read(SEASON_STANDINGS)
        if season is not None:
            rows = [r for r in rows if r.get("season") == season]
        if competition_type is not None:
            rows = [r for r in rows if r.get("competition_type") == competition_type]
        return rows

    def trophies(self) -> list[dict]:
        return self._read(SEASON_TROPHIES)

    def season_stats(self) -> list[dict]:
        return self._read(MANAGER_SEASON_STATS)

    def pairwise(self, season: object = ALL_SEASONS) -> list[dict]:
        rows = self._read(H2H_STATS)
        if season is not ALL_SEASONS:
            rows = [r for r in rows if r.get("season") == season]
        return rows

    def import_rows(self, table: str, rows: Iterable[Row]) -> int:
        """Append rows to a table (legacy import path)."""
        if table not in TABLES:
            raise ValueError(f"Unknown table: {table}")
        new = [dict(r) for r in rows]
        with self._lock:
            self._tables.setdefault(table, []).extend(new)
        return len(new)

    def replace_rows(self, scope: ReplaceScope, rows: Iterable[Row]) -> int:
        new = [dict(r) for r in rows]
        with self._lock:
            kept = [r for r in self._tables.get(scope.table, []) if not scope.matches(r)]
            self._tables[scope.table] = kept + new
        return len(new)

    def snapshot(self) -> dict[str, list[dict]]:
        with self._lock:
            return {name: [dict(r) for r in rows] for name, rows in self._tables.items()}
