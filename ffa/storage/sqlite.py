"""SQLite-backed record store.

Tables mirror the historical import layout: one table per record type, with
``season`` NULL in ``h2h_stats`` marking the all-seasons legacy aggregate.
Every replace runs inside a single ``BEGIN IMMEDIATE`` transaction so that
concurrent synchronizers serialize on the database write lock.

Tables carry no surrogate key, so a replace that writes the same rows leaves
the same table contents behind. Reads order by season and manager, falling
back to insertion order.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Any, Iterable

from ffa.errors import StorageError

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

logger = logging.getLogger(__name__)

COLUMNS: dict[str, tuple[str, ...]] = {
    GAMEWEEK_RESULTS: (
        "season",
        "gameweek",
        "manager_name",
        "opponent_name",
        "points_for",
        "points_against",
        "result",
    ),
    SEASON_STANDINGS: (
        "season",
        "manager_name",
        "final_rank",
        "wins",
        "draws",
        "losses",
        "points",
        "points_for",
        "points_against",
        "competition_type",
    ),
    SEASON_TROPHIES: ("season", "manager_name", "league_champion", "cup_winner", "goblet_winner"),
    MANAGER_SEASON_STATS: (
        "season",
        "manager_name",
        "total_transactions",
        "highest_gameweek",
        "lowest_gameweek",
        "fifty_plus_weeks",
        "sub_twenty_weeks",
    ),
    H2H_STATS: (
        "manager_name",
        "opponent_name",
        "season",
        "wins",
        "draws",
        "losses",
        "games_played",
        "avg_points",
    ),
}

SCHEMA = """
CREATE TABLE IF NOT EXISTS gameweek_results (
    season TEXT NOT NULL,
    gameweek INTEGER NOT NULL,
    manager_name TEXT NOT NULL,
    opponent_name TEXT,
    points_for REAL NOT NULL DEFAULT 0,
    points_against REAL NOT NULL DEFAULT 0,
    result TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS season_standings (
    season TEXT NOT NULL,
    manager_name TEXT NOT NULL,
    final_rank INTEGER,
    wins INTEGER NOT NULL DEFAULT 0,
    draws INTEGER NOT NULL DEFAULT 0,
    losses INTEGER NOT NULL DEFAULT 0,
    points INTEGER,
    points_for REAL NOT NULL DEFAULT 0,
    points_against REAL NOT NULL DEFAULT 0,
    competition_type TEXT NOT NULL DEFAULT 'league'
);

CREATE TABLE IF NOT EXISTS season_trophies (
    season TEXT NOT NULL,
    manager_name TEXT NOT NULL,
    league_champion INTEGER NOT NULL DEFAULT 0,
    cup_winner INTEGER NOT NULL DEFAULT 0,
    goblet_winner INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS manager_season_stats (
    season TEXT NOT NULL,
    manager_name TEXT NOT NULL,
    total_transactions INTEGER DEFAULT 0,
    highest_gameweek INTEGER,
    lowest_gameweek INTEGER,
    fifty_plus_weeks INTEGER DEFAULT 0,
    sub_twenty_weeks INTEGER DEFAULT 0
);

CREATE TABLE IF NOT EXISTS h2h_stats (
    manager_name TEXT NOT NULL,
    opponent_name TEXT NOT NULL,
    season TEXT,
    wins INTEGER NOT NULL DEFAULT 0,
    draws INTEGER NOT NULL DEFAULT 0,
    losses INTEGER NOT NULL DEFAULT 0,
    games_played INTEGER NOT NULL DEFAULT 0,
    avg_points REAL
);

CREATE INDEX IF NOT EXISTS idx_gw_results_season ON gameweek_results(season, gameweek);
CREATE INDEX IF NOT EXISTS idx_standings_season ON season_standings(season, competition_type);
CREATE INDEX IF NOT EXISTS idx_h2h_season ON h2h_stats(season);
"""


def _is_missing_table(exc: sqlite3.OperationalError) -> bool:
    return "no such table" in str(exc).lower()


class SqliteStore:
    def __init__(self, db_path: str | Path, create: bool = True, timeout: float = 30.0) -> None:
        self.db_path = str(db_path)
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        # Autocommit mode: transactions are opened explicitly in replace_rows.
        self.conn = sqlite3.connect(self.db_path, timeout=timeout, isolation_level=None)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute(f"PRAGMA busy_timeout = {int(timeout * 1000)}")
        if create:
            self.conn.executescript(SCHEMA)

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> "SqliteStore":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _select(self, table: str, where: str = "", params: tuple[Any, ...] = (), order: str = "rowid") -> list[dict]:
        cols = ", ".join(COLUMNS[table])
        sql = f"SELECT {cols} FROM {table}"
        if where:
            sql += f" WHERE {where}"
        sql += f" ORDER BY {order}"
        try:
            return [dict(r) for r in self.conn.execute(sql, params).fetchall()]
        except sqlite3.OperationalError as exc:
            if _is_missing_table(exc):
                logger.debug("Table %s missing; treating as empty", table)
                return []
            raise StorageError(f"Failed to read {table}: {exc}") from exc

    def gameweek_results(self, season: str | None = None) -> list[dict]:
        if season is None:
            return self._select(GAMEWEEK_RESULTS, order="season, gameweek, manager_name, rowid")
        return self._select(GAMEWEEK_RESULTS, "season = ?", (season,), order="gameweek, manager_name, rowid")

    def season_standings(
        self, season: str | None = None, competition_type: str | None = None
    ) -> list[dict]:
        clauses: list[str] = []
        params: list[Any] = []
        if season is not None:
            clauses.append("season = ?")
            params.append(season)
        if competition_type is not None:
            clauses.append("competition_type = ?")
            params.append(competition_type)
        return self._select(
            SEASON_STANDINGS, " AND ".join(clauses), tuple(params), order="season, final_rank, manager_name, rowid"
        )

    def trophies(self) -> list[dict]:
        return self._select(SEASON_TROPHIES, order="season, manager_name, rowid")

    def season_stats(self) -> list[dict]:
        return self._select(MANAGER_SEASON_STATS, order="season, manager_name, rowid")

    def pairwise(self, season: object = ALL_SEASONS) -> list[dict]:
        if season is ALL_SEASONS:
            return self._select(H2H_STATS)
        if season is None:
            return self._select(H2H_STATS, "season IS NULL")
        return self._select(H2H_STATS, "season = ?", (season,))

    def _insert(self, table: str, rows: list[Row]) -> None:
        cols = COLUMNS[table]
        sql = f"INSERT INTO {table} ({', '.join(cols)}) VALUES ({', '.join('?' for _ in cols)})"
        self.conn.executemany(sql, [tuple(_to_sql(r.get(c)) for c in cols) for r in rows])

    def import_rows(self, table: str, rows: Iterable[Row]) -> int:
        """Append rows to a table (legacy import path)."""
        if table not in TABLES:
            raise ValueError(f"Unknown table: {table}")
        batch = list(rows)
        try:
            self.conn.execute("BEGIN IMMEDIATE")
            self._insert(table, batch)
            self.conn.execute("COMMIT")
        except sqlite3.Error as exc:
            if self.conn.in_transaction:
                self.conn.execute("ROLLBACK")
            raise StorageError(f"Failed to import into {table}: {exc}") from exc
        return len(batch)

    def replace_rows(self, scope: ReplaceScope, rows: Iterable[Row]) -> int:
        batch = list(rows)
        clauses = ["season IS ?"]
        params: list[Any] = [scope.season]
        if scope.competition_type is not None:
            clauses.append("competition_type = ?")
            params.append(scope.competition_type)
        if scope.max_gameweek is not None:
            clauses.append("gameweek <= ?")
            params.append(scope.max_gameweek)
        try:
            self.conn.execute("BEGIN IMMEDIATE")
            self.conn.execute(f"DELETE FROM {scope.table} WHERE {' AND '.join(clauses)}", tuple(params))
            self._insert(scope.table, batch)
            self.conn.execute("COMMIT")
        except sqlite3.Error as exc:
            if self.conn.in_transaction:
                self.conn.execute("ROLLBACK")
            raise StorageError(f"Failed to replace rows in {scope.table}: {exc}") from exc
        return len(batch)


def _to_sql(value: Any) -> Any:
    if isinstance(value, bool):
        return int(value)
    return value
