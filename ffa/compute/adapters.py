"""Conversion of raw rows into engine records.

Two shapes enter the engine: rows read back from the record store (column
names such as ``manager_name`` / ``league_champion``) and payloads from the
draft league API (``league_entry_1``, ``event`` ...). Both are converted here
and nowhere else. Every ``*_from_row`` helper returns ``None`` when the row
names a manager outside the roster.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping, TypeVar

from .core import _coerce_float, _coerce_int
from .identity import Roster, normalize_name
from .models import (
    RESULTS,
    GameweekResult,
    Match,
    PairwiseH2H,
    SeasonMetaStat,
    SeasonStanding,
    Trophy,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _first(row: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = row.get(key)
        if value is not None:
            return value
    return None


def _optional_int(value: object) -> int | None:
    parsed = _coerce_int(value, 0)
    return parsed if parsed > 0 else None


def _truthy(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "t", "yes", "y"}
    return bool(value)


def gameweek_result_from_row(row: Mapping[str, Any], roster: Roster) -> GameweekResult | None:
    manager = roster.canonicalize(row.get("manager_name"))
    if manager is None:
        return None
    opponent = roster.canonicalize(row.get("opponent_name"))
    if opponent is None or opponent == manager:
        return None
    result = normalize_name(row.get("result"))
    if result not in RESULTS:
        pf = _coerce_float(row.get("points_for"))
        pa = _coerce_float(row.get("points_against"))
        result = "W" if pf > pa else "L" if pa > pf else "D"
    return GameweekResult(
        season=str(row.get("season") or ""),
        gameweek=_coerce_int(row.get("gameweek")),
        manager=manager,
        opponent=opponent,
        points_for=_coerce_float(row.get("points_for")),
        points_against=_coerce_float(row.get("points_against")),
        result=result,
    )


def standing_from_row(row: Mapping[str, Any], roster: Roster) -> SeasonStanding | None:
    manager = roster.canonicalize(row.get("manager_name"))
    if manager is None:
        return None
    wins = _coerce_int(row.get("wins"))
    draws = _coerce_int(row.get("draws"))
    points = row.get("points")
    return SeasonStanding(
        season=str(row.get("season") or ""),
        manager=manager,
        final_rank=_coerce_int(row.get("final_rank")),
        wins=wins,
        draws=draws,
        losses=_coerce_int(row.get("losses")),
        points=_coerce_int(points) if points is not None else wins * 3 + draws,
        points_for=_coerce_float(row.get("points_for")),
        points_against=_coerce_float(row.get("points_against")),
        competition_type=str(row.get("competition_type") or "league"),
    )


def trophy_from_row(row: Mapping[str, Any], roster: Roster) -> Trophy | None:
    manager = roster.canonicalize(row.get("manager_name"))
    if manager is None:
        return None
    return Trophy(
        season=str(row.get("season") or ""),
        manager=manager,
        won_league=_truthy(row.get("league_champion")),
        won_cup=_truthy(row.get("cup_winner")),
        won_goblet=_truthy(row.get("goblet_winner")),
    )


def season_stat_from_row(row: Mapping[str, Any], roster: Roster) -> SeasonMetaStat | None:
    manager = roster.canonicalize(row.get("manager_name"))
    if manager is None:
        return None
    return SeasonMetaStat(
        season=str(row.get("season") or ""),
        manager=manager,
        total_transactions=_coerce_int(row.get("total_transactions")),
        highest_gameweek=_optional_int(row.get("highest_gameweek")),
        lowest_gameweek=_optional_int(row.get("lowest_gameweek")),
        fifty_plus_weeks=_coerce_int(row.get("fifty_plus_weeks")),
        sub_twenty_weeks=_coerce_int(row.get("sub_twenty_weeks")),
    )


def pairwise_from_row(row: Mapping[str, Any], roster: Roster) -> PairwiseH2H | None:
    manager = roster.canonicalize(row.get("manager_name"))
    opponent = roster.canonicalize(row.get("opponent_name"))
    if manager is None or opponent is None:
        return None
    season = row.get("season")
    wins = _coerce_int(row.get("wins"))
    draws = _coerce_int(row.get("draws"))
    losses = _coerce_int(row.get("losses"))
    avg = row.get("avg_points")
    return PairwiseH2H(
        manager=manager,
        opponent=opponent,
        season=str(season) if season not in (None, "") else None,
        wins=wins,
        draws=draws,
        losses=losses,
        games_played=_coerce_int(row.get("games_played"), wins + draws + losses),
        avg_points=_coerce_float(avg) if avg is not None else None,
    )


def adapt_rows(
    rows: Iterable[Mapping[str, Any]],
    convert: Callable[[Mapping[str, Any], Roster], T | None],
    roster: Roster,
) -> list[T]:
    """Convert rows, skipping (and logging) those with unknown managers."""
    out: list[T] = []
    skipped = 0
    for row in rows:
        record = convert(row, roster)
        if record is None:
            skipped += 1
            continue
        out.append(record)
    if skipped:
        logger.info("Skipped %d row(s) with unrecognised managers (%s)", skipped, convert.__name__)
    return out


# --- draft league payloads ---


def draft_manager_name(entry: Mapping[str, Any]) -> str:
    player = entry.get("player")
    if not isinstance(player, Mapping):
        player = {}
    first = _first(entry, "player_first_name") or player.get("first_name") or ""
    last = _first(entry, "player_last_name") or player.get("last_name") or ""
    combined = f"{first} {last}".strip()
    return combined or str(_first(entry, "manager_name", "player_name") or "")


def draft_entries(entries: Iterable[Mapping[str, Any]]) -> dict[str, str]:
    """Raw id -> manager name for every id a draft entry may be referenced by."""
    out: dict[str, str] = {}
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        name = draft_manager_name(entry)
        if not name:
            continue
        for key in ("id", "league_entry_id", "entry_id", "entry"):
            value = entry.get(key)
            if value is not None and value != "":
                out.setdefault(str(value), name)
    return out


def match_from_draft(payload: object) -> Match | None:
    if not isinstance(payload, Mapping):
        return None
    side_a = _first(payload, "league_entry_1", "entry_1", "home")
    side_b = _first(payload, "league_entry_2", "entry_2", "away")
    if side_a is None or side_b is None:
        return None
    winner = payload.get("winner")
    return Match(
        gameweek=_coerce_int(_first(payload, "event", "gameweek")),
        side_a=str(side_a),
        side_b=str(side_b),
        points_a=_coerce_float(_first(payload, "league_entry_1_points", "score_1", "home_score")),
        points_b=_coerce_float(_first(payload, "league_entry_2_points", "score_2", "away_score")),
        winner=str(winner) if winner not in (None, "") else None,
    )


def normalize_list(value: object) -> list:
    """Draft endpoints return either lists or id-keyed objects."""
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        return list(value.values())
    return []
