from __future__ import annotations

import logging
from typing import Iterable, Mapping

from ffa.report.constants import POINTS_PLACES

from .identity import Roster
from .models import (
    GameweekResult,
    Match,
    ResultPolicy,
    SeasonStanding,
    invert_result,
    result_points,
)

logger = logging.getLogger(__name__)


def _coerce_int(value: object, default: int = 0) -> int:
    """Best‑effort int conversion (supports int, float, str of digits)."""
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int | float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            try:
                return int(float(value))
            except ValueError:
                return default
    return default


def _coerce_float(value: object, default: float = 0.0) -> float:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int | float):
        return float(value) if value == value else default
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return default
        return parsed if parsed == parsed else default
    return default


def canonical_matches(
    matches: Iterable[Match], entries: Mapping[str, str], roster: Roster
) -> list[Match]:
    """Resolve raw source ids to canonical managers.

    ``entries`` maps a raw side id to a free-form manager name; a side missing
    from it is read as a name itself. Matches where either side does not
    resolve, or both sides resolve to the same manager, are dropped.
    """
    out: list[Match] = []
    for m in matches:
        a = roster.canonicalize(entries.get(str(m.side_a), m.side_a))
        b = roster.canonicalize(entries.get(str(m.side_b), m.side_b))
        if a is None or b is None:
            logger.debug("Dropping GW%s match %s v %s: unresolved side", m.gameweek, m.side_a, m.side_b)
            continue
        if a == b:
            logger.debug("Dropping GW%s match %s v %s: self-play", m.gameweek, m.side_a, m.side_b)
            continue
        winner = None
        if m.winner is not None:
            if str(m.winner) == str(m.side_a):
                winner = a
            elif str(m.winner) == str(m.side_b):
                winner = b
        out.append(Match(m.gameweek, a, b, m.points_a, m.points_b, winner))
    return out


def compute_gameweek_results(
    matches: Iterable[Match], season: str, policy: ResultPolicy = ResultPolicy.POINTS
) -> list[GameweekResult]:
    """Two complementary rows per match, ordered by gameweek then manager."""
    rows: list[GameweekResult] = []
    for m in matches:
        r_a = m.result_for_a(policy)
        rows.append(
            GameweekResult(season, m.gameweek, m.side_a, m.side_b, m.points_a, m.points_b, r_a)
        )
        rows.append(
            GameweekResult(
                season, m.gameweek, m.side_b, m.side_a, m.points_b, m.points_a, invert_result(r_a)
            )
        )
    rows.sort(key=lambda r: (r.gameweek, r.manager, r.opponent))
    return rows


def compute_standings(
    results: Iterable[GameweekResult], season: str, competition_type: str = "league"
) -> list[SeasonStanding]:
    """Season table from one perspective row per manager per match.

    Ranked by league points, then points for; manager name keeps the order
    stable when both tie.
    """
    records: dict[str, SeasonStanding] = {}
    for r in results:
        rec = records.setdefault(
            r.manager, SeasonStanding(season, r.manager, 0, competition_type=competition_type)
        )
        rec.points_for += r.points_for
        rec.points_against += r.points_against
        rec.points += result_points(r.result)
        if r.result == "W":
            rec.wins += 1
        elif r.result == "L":
            rec.losses += 1
        else:
            rec.draws += 1
    table = sorted(records.values(), key=lambda s: (-s.points, -s.points_for, s.manager))
    for idx, rec in enumerate(table, start=1):
        rec.final_rank = idx
        rec.points_for = round(rec.points_for, POINTS_PLACES)
        rec.points_against = round(rec.points_against, POINTS_PLACES)
    return table
