"""Pairwise head-to-head tables.

Every physical match updates both directions of a pair in the same step, so
``wins(A, B) == losses(B, A)`` and ``draws(A, B) == draws(B, A)`` hold by
construction rather than by mirroring a one-sided table afterwards.
"""

from __future__ import annotations

from typing import Iterable

from .models import GameweekResult, PairwiseH2H, invert_result


class _Acc:
    __slots__ = ("wins", "draws", "losses")

    def __init__(self) -> None:
        self.wins = 0
        self.draws = 0
        self.losses = 0

    def add(self, result: str) -> None:
        if result == "W":
            self.wins += 1
        elif result == "L":
            self.losses += 1
        else:
            self.draws += 1


def avg_points(wins: int, draws: int, games: int) -> float | None:
    if games <= 0:
        return None
    return round((wins * 3 + draws) / games, 2)


def _record_match(table: dict[tuple[str, str], _Acc], manager: str, opponent: str, result: str) -> None:
    table.setdefault((manager, opponent), _Acc()).add(result)
    table.setdefault((opponent, manager), _Acc()).add(invert_result(result))


def _matches_from_results(results: Iterable[GameweekResult]) -> list[GameweekResult]:
    """One perspective per physical match.

    Result rows come in complementary pairs; the row whose manager sorts first
    stands in for the match. A lone row (its partner was lost upstream) still
    counts once.
    """
    seen: dict[tuple[str, int, str, str], GameweekResult] = {}
    for r in results:
        a, b = sorted((r.manager, r.opponent))
        key = (r.season, r.gameweek, a, b)
        if key not in seen or r.manager == a:
            seen[key] = r
    return [seen[k] for k in sorted(seen)]


def pairwise_from_results(
    results: Iterable[GameweekResult], season: str | None = None
) -> list[PairwiseH2H]:
    table: dict[tuple[str, str], _Acc] = {}
    for r in _matches_from_results(results):
        _record_match(table, r.manager, r.opponent, r.result)
    return _finish(table, season)


def _finish(
    table: dict[tuple[str, str], _Acc], season: str | None, manager: str | None = None
) -> list[PairwiseH2H]:
    rows = []
    for (m, o), acc in sorted(table.items()):
        if manager is not None and m != manager:
            continue
        games = acc.wins + acc.draws + acc.losses
        rows.append(
            PairwiseH2H(
                manager=m,
                opponent=o,
                season=season,
                wins=acc.wins,
                draws=acc.draws,
                losses=acc.losses,
                games_played=games,
                avg_points=avg_points(acc.wins, acc.draws, games),
            )
        )
    return rows


def merge_pairwise(
    legacy_rows: Iterable[PairwiseH2H],
    current_results: Iterable[GameweekResult],
    manager: str | None = None,
) -> list[PairwiseH2H]:
    """All-time table: legacy all-seasons aggregates plus the live season.

    Only legacy rows with no season are the all-seasons aggregate; per-season
    legacy rows are ignored here. ``avg_points`` is recomputed from the merged
    win/draw counts.
    """
    table: dict[tuple[str, str], _Acc] = {}
    for row in legacy_rows:
        if row.season is not None:
            continue
        acc = table.setdefault((row.manager, row.opponent), _Acc())
        acc.wins += row.wins
        acc.draws += row.draws
        acc.losses += row.losses
    for r in _matches_from_results(current_results):
        _record_match(table, r.manager, r.opponent, r.result)
    return _finish(table, None, manager)


def season_pairwise(
    rows: Iterable[PairwiseH2H], season: str, manager: str | None = None
) -> list[PairwiseH2H]:
    """Per-season table from stored rows, folding duplicate alias rows together."""
    table: dict[tuple[str, str], _Acc] = {}
    for row in rows:
        if row.season != season:
            continue
        acc = table.setdefault((row.manager, row.opponent), _Acc())
        acc.wins += row.wins
        acc.draws += row.draws
        acc.losses += row.losses
    return _finish(table, season, manager)
