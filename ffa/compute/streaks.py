"""Streak and peak analytics over a manager's gameweek history.

Rows span several seasons and the calendar is irregular: a season boundary
or a missing gameweek always breaks a run, so two rows only chain when they
are in the same season and their gameweek numbers differ by exactly one.
Ties are never broken arbitrarily; every span (or gameweek) that reaches the
maximum is reported.
"""

from __future__ import annotations

import re
from typing import Callable, Iterable, Mapping, Sequence

from ffa.report.constants import HIGH_SCORE_THRESHOLD

from .models import DerivedGameweekStats, GameweekResult, StreakResult, StreakSpan

_SEASON_YEAR = re.compile(r"^(\d{4})")

Predicate = Callable[[str], bool]

STREAK_PREDICATES: dict[str, Predicate] = {
    "win": lambda r: r == "W",
    "unbeaten": lambda r: r != "L",
    "loss": lambda r: r == "L",
    "winless": lambda r: r != "W",
}


def season_start_year(season: str) -> int:
    match = _SEASON_YEAR.match(str(season or ""))
    return int(match.group(1)) if match else 0


def sort_key(row: GameweekResult) -> tuple[int, int]:
    return (season_start_year(row.season), row.gameweek)


def sort_rows(rows: Iterable[GameweekResult]) -> list[GameweekResult]:
    return sorted(rows, key=sort_key)


def is_sequential(prev: GameweekResult | None, row: GameweekResult) -> bool:
    return prev is not None and prev.season == row.season and prev.gameweek + 1 == row.gameweek


def longest_run_with_spans(rows: Sequence[GameweekResult], predicate: Predicate) -> StreakResult:
    """Longest run of consecutive rows satisfying ``predicate``.

    ``rows`` must already be in calendar order (see :func:`sort_rows`).
    """
    best = StreakResult()
    length = 0
    start: GameweekResult | None = None
    prev: GameweekResult | None = None

    def close(end: GameweekResult | None) -> None:
        if start is None or end is None or length <= 0:
            return
        span = StreakSpan(start.season, start.gameweek, end.season, end.gameweek)
        if length > best.value:
            best.value = length
            best.spans = [span]
        elif length == best.value:
            best.spans.append(span)

    for row in rows:
        if length > 0 and not is_sequential(prev, row):
            close(prev)
            length, start = 0, None
        if predicate(row.result.upper()):
            if length == 0:
                start = row
            length += 1
        elif length > 0:
            close(prev)
            length, start = 0, None
        prev = row

    if length > 0:
        close(prev)
    return best


def best_gameweek(rows: Iterable[GameweekResult]) -> tuple[float | None, list[tuple[str, int]]]:
    best: float | None = None
    occurrences: list[tuple[str, int]] = []
    for row in rows:
        if best is None or row.points_for > best:
            best = row.points_for
            occurrences = [(row.season, row.gameweek)]
        elif row.points_for == best:
            occurrences.append((row.season, row.gameweek))
    return best, occurrences


def _fmt_points(points: float) -> str:
    return str(int(points)) if float(points).is_integer() else f"{points:g}"


def format_best_details(points: float | None, occurrences: Sequence[tuple[str, int]]) -> str | None:
    if points is None or not occurrences:
        return None
    ordered = sorted(occurrences, key=lambda o: (season_start_year(o[0]), o[1]))
    weeks = ", ".join(f"{season} GW{gw}" for season, gw in ordered)
    return f"{_fmt_points(points)}: {weeks}"


def analyze_manager(
    rows: Iterable[GameweekResult], high_score_threshold: float = HIGH_SCORE_THRESHOLD
) -> DerivedGameweekStats:
    ordered = sort_rows(rows)
    if not ordered:
        return DerivedGameweekStats()
    points, occurrences = best_gameweek(ordered)
    return DerivedGameweekStats(
        best_points=points,
        best_occurrences=occurrences,
        best_details=format_best_details(points, occurrences),
        fifty_plus_count=sum(1 for r in ordered if r.points_for >= high_score_threshold),
        win=longest_run_with_spans(ordered, STREAK_PREDICATES["win"]),
        unbeaten=longest_run_with_spans(ordered, STREAK_PREDICATES["unbeaten"]),
        loss=longest_run_with_spans(ordered, STREAK_PREDICATES["loss"]),
        winless=longest_run_with_spans(ordered, STREAK_PREDICATES["winless"]),
    )


def analyze_ledger(
    rows: Iterable[GameweekResult], managers: Iterable[str] = ()
) -> dict[str, DerivedGameweekStats]:
    """Per-manager stats for a whole ledger; ``managers`` adds empty entries."""
    by_manager: dict[str, list[GameweekResult]] = {m: [] for m in managers}
    for row in rows:
        by_manager.setdefault(row.manager, []).append(row)
    return {m: analyze_manager(r) for m, r in sorted(by_manager.items())}


LEADER_METRICS = (
    "points_in_gameweek",
    "most_50_plus_gws",
    "longest_win_streak",
    "longest_unbeaten_streak",
    "longest_losing_streak",
    "longest_winless_streak",
)


def _metric(stats: DerivedGameweekStats, metric: str) -> tuple[float, str | None]:
    if metric == "points_in_gameweek":
        return (stats.best_points or 0, stats.best_details)
    if metric == "most_50_plus_gws":
        return (stats.fifty_plus_count, None)
    streak = {
        "longest_win_streak": stats.win,
        "longest_unbeaten_streak": stats.unbeaten,
        "longest_losing_streak": stats.loss,
        "longest_winless_streak": stats.winless,
    }[metric]
    return (streak.value, ", ".join(streak.labels()) or None)


def leaders(stats_by_manager: Mapping[str, DerivedGameweekStats]) -> dict[str, dict]:
    """Top value and every manager holding it, for each leaderboard metric."""
    out: dict[str, dict] = {}
    for metric in LEADER_METRICS:
        rows = []
        for manager in sorted(stats_by_manager):
            value, details = _metric(stats_by_manager[manager], metric)
            rows.append({"manager_name": manager, "value": value, "details": details})
        top = max((r["value"] for r in rows), default=0)
        top = max(top, 0)
        out[metric] = {"value": top, "leaders": [r for r in rows if r["value"] == top]}
    return out
