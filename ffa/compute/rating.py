"""FFA manager rating (version 1).

The rating rewards competitive conversion first (titles and finishing
positions) and uses scoring efficiency and scoring strength as stabilisers:

    base   = placement + silverware + ppg_curve
    rating = base * (1 + ALPHA * tanh(z(plus_g)))

``ppg_curve`` and ``z`` depend on the whole manager population (mean points
per game, mean and standard deviation of points-for), so a rating is only
meaningful when computed against :class:`PopulationStats` for every manager.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from .models import AllTimeStat, RatingRecord, SeasonStanding, Trophy
from .streaks import season_start_year

RATING_VERSION = "FFA_RATING_V1"

LEAGUE_TITLE_VALUE = 810
CUP_VALUE = 540
GOBLET_VALUE = 270

DOUBLE_MULTIPLIER = 1.25
TREBLE_MULTIPLIER = 1.4

# 1st is worth nothing here; the title itself is counted as silverware.
PLACEMENT_POINTS: dict[int, int] = {
    1: 0,
    2: 240,
    3: 120,
    4: 60,
    5: 30,
    6: 0,
    7: -10,
    8: -30,
    9: -60,
    10: -90,
}

PPG_MAX = 3.0
PPG_K = 1.4
PPG_LAMBDA = 0.3
PPG_SCALE = 1000.0

ALPHA = 0.1


@dataclass(slots=True)
class RatingInput:
    manager: str
    placements: list[int] = field(default_factory=list)
    trophies: list[Trophy] = field(default_factory=list)
    ppg: float = 0.0
    plus_g: float = 0.0


@dataclass(slots=True, frozen=True)
class PopulationStats:
    ppg_mean: float
    plus_g_mean: float
    plus_g_std: float
    size: int

    @classmethod
    def from_inputs(cls, inputs: Sequence[RatingInput]) -> "PopulationStats":
        n = len(inputs)
        if n == 0:
            return cls(0.0, 0.0, 0.0, 0)
        ppg_mean = sum(i.ppg for i in inputs) / n
        g_mean = sum(i.plus_g for i in inputs) / n
        std = 0.0
        if n > 1:
            std = math.sqrt(sum((i.plus_g - g_mean) ** 2 for i in inputs) / n)
        return cls(ppg_mean, g_mean, std, n)


def placement_score(placements: Iterable[int]) -> float:
    return float(sum(PLACEMENT_POINTS.get(int(p), 0) for p in placements))


def season_silverware(trophy: Trophy) -> float:
    base = 0.0
    if trophy.won_league:
        base += LEAGUE_TITLE_VALUE
    if trophy.won_cup:
        base += CUP_VALUE
    if trophy.won_goblet:
        base += GOBLET_VALUE
    if trophy.count == 3:
        return base * TREBLE_MULTIPLIER
    if trophy.count == 2:
        return base * DOUBLE_MULTIPLIER
    return base


def silverware_score(trophies: Iterable[Trophy]) -> float:
    return sum(season_silverware(t) for t in trophies)


def ppg_score(ppg: float, ppg_mean: float) -> float:
    if ppg <= 0:
        return 0.0
    curve = (ppg / PPG_MAX) ** PPG_K * math.exp(PPG_LAMBDA * (ppg - ppg_mean))
    return PPG_SCALE * curve


def g_modifier(plus_g: float, population: PopulationStats) -> float:
    if population.size < 2 or population.plus_g_std == 0:
        return 1.0
    z = (plus_g - population.plus_g_mean) / population.plus_g_std
    return 1.0 + ALPHA * math.tanh(z)


def compute_rating(inp: RatingInput, population: PopulationStats | None) -> RatingRecord:
    if population is None:
        raise ValueError("A rating needs population statistics for every manager")
    p_score = placement_score(inp.placements)
    s_score = silverware_score(inp.trophies)
    r_score = ppg_score(inp.ppg, population.ppg_mean)
    base = p_score + s_score + r_score
    modifier = g_modifier(inp.plus_g, population)
    return RatingRecord(
        manager=inp.manager,
        rating=base * modifier,
        placement_score=p_score,
        silverware_score=s_score,
        ppg_score=r_score,
        g_modifier=modifier,
        base_score=base,
        ppg=inp.ppg,
        plus_g=inp.plus_g,
        seasons_played=len(inp.placements),
    )


def rate_managers(inputs: Sequence[RatingInput]) -> list[RatingRecord]:
    population = PopulationStats.from_inputs(inputs)
    records = [compute_rating(i, population) for i in inputs]
    records.sort(key=lambda r: (-r.rating, r.manager))
    return records


def build_rating_inputs(
    all_time: Iterable[AllTimeStat],
    standings: Iterable[SeasonStanding],
    trophies: Iterable[Trophy],
    current_season: str,
) -> list[RatingInput]:
    """Assemble rating inputs from aggregated stats.

    Placements and trophies only count for completed seasons, i.e. seasons
    that start before ``current_season``; ppg and plus-G come from the
    all-time totals, which already include the live season.
    """
    cutoff = season_start_year(current_season)
    placements: dict[str, list[tuple[int, int]]] = {}
    for s in standings:
        if s.competition_type != "league" or season_start_year(s.season) >= cutoff:
            continue
        placements.setdefault(s.manager, []).append((season_start_year(s.season), s.final_rank))
    won: dict[str, list[Trophy]] = {}
    for t in trophies:
        if season_start_year(t.season) >= cutoff:
            continue
        won.setdefault(t.manager, []).append(t)
    inputs = []
    for stat in all_time:
        inputs.append(
            RatingInput(
                manager=stat.manager,
                placements=[rank for _, rank in sorted(placements.get(stat.manager, []))],
                trophies=sorted(won.get(stat.manager, []), key=lambda t: season_start_year(t.season)),
                ppg=stat.points_per_game,
                plus_g=stat.points_for,
            )
        )
    return inputs

