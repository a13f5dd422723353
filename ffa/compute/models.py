"""Record types shared by the compute and report layers.

Everything the engine reasons about is one of these strict shapes. Raw
storage rows and live source payloads are converted by ``ffa.compute.adapters``
before they reach any computation.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

RESULTS = ("W", "D", "L")


class ResultPolicy(str, enum.Enum):
    """How a match result is decided when an explicit winner is present."""

    POINTS = "points"
    OVERRIDE = "override"


class Provenance(str, enum.Enum):
    LIVE = "live"
    PERSISTED = "persisted"
    EMPTY = "empty"


def invert_result(result: str) -> str:
    if result == "W":
        return "L"
    if result == "L":
        return "W"
    return "D"


def result_points(result: str) -> int:
    """League points for one result (3 win, 1 draw, 0 loss)."""
    if result == "W":
        return 3
    if result == "D":
        return 1
    return 0


@dataclass(slots=True)
class Match:
    gameweek: int
    side_a: str
    side_b: str
    points_a: float
    points_b: float
    winner: str | None = None

    def result_for_a(self, policy: ResultPolicy = ResultPolicy.POINTS) -> str:
        """Result from ``side_a``'s perspective.

        With ``ResultPolicy.OVERRIDE`` an explicit ``winner`` naming either side
        decides the match even when the points say otherwise; a winner naming
        neither side is ignored.
        """
        if policy is ResultPolicy.OVERRIDE and self.winner:
            if self.winner == self.side_a:
                return "W"
            if self.winner == self.side_b:
                return "L"
        if self.points_a > self.points_b:
            return "W"
        if self.points_b > self.points_a:
            return "L"
        return "D"


@dataclass(slots=True, frozen=True)
class GameweekResult:
    season: str
    gameweek: int
    manager: str
    opponent: str
    points_for: float
    points_against: float
    result: str

    def to_row(self) -> dict[str, Any]:
        return {
            "season": self.season,
            "gameweek": self.gameweek,
            "manager_name": self.manager,
            "opponent_name": self.opponent,
            "points_for": self.points_for,
            "points_against": self.points_against,
            "result": self.result,
        }


@dataclass(slots=True)
class SeasonStanding:
    season: str
    manager: str
    final_rank: int
    wins: int = 0
    draws: int = 0
    losses: int = 0
    points: int = 0
    points_for: float = 0.0
    points_against: float = 0.0
    competition_type: str = "league"

    @property
    def games(self) -> int:
        return self.wins + self.draws + self.losses

    def to_row(self) -> dict[str, Any]:
        return {
            "season": self.season,
            "manager_name": self.manager,
            "final_rank": self.final_rank,
            "wins": self.wins,
            "draws": self.draws,
            "losses": self.losses,
            "points": self.points,
            "points_for": self.points_for,
            "points_against": self.points_against,
            "competition_type": self.competition_type,
        }


@dataclass(slots=True)
class Trophy:
    season: str
    manager: str
    won_league: bool = False
    won_cup: bool = False
    won_goblet: bool = False

    @property
    def count(self) -> int:
        return int(self.won_league) + int(self.won_cup) + int(self.won_goblet)

    def to_row(self) -> dict[str, Any]:
        return {
            "season": self.season,
            "manager_name": self.manager,
            "league_champion": self.won_league,
            "cup_winner": self.won_cup,
            "goblet_winner": self.won_goblet,
        }


@dataclass(slots=True)
class SeasonMetaStat:
    season: str
    manager: str
    total_transactions: int = 0
    highest_gameweek: int | None = None
    lowest_gameweek: int | None = None
    fifty_plus_weeks: int = 0
    sub_twenty_weeks: int = 0

    def to_row(self) -> dict[str, Any]:
        return {
            "season": self.season,
            "manager_name": self.manager,
            "total_transactions": self.total_transactions,
            "highest_gameweek": self.highest_gameweek,
            "lowest_gameweek": self.lowest_gameweek,
            "fifty_plus_weeks": self.fifty_plus_weeks,
            "sub_twenty_weeks": self.sub_twenty_weeks,
        }


@dataclass(slots=True)
class PairwiseH2H:
    manager: str
    opponent: str
    season: str | None = None
    wins: int = 0
    draws: int = 0
    losses: int = 0
    games_played: int = 0
    avg_points: float | None = None

    def to_row(self) -> dict[str, Any]:
        return {
            "manager_name": self.manager,
            "opponent_name": self.opponent,
            "season": self.season,
            "wins": self.wins,
            "draws": self.draws,
            "losses": self.losses,
            "games_played": self.games_played,
            "avg_points": self.avg_points,
        }


@dataclass(slots=True, frozen=True)
class StreakSpan:
    start_season: str
    start_gw: int
    end_season: str
    end_gw: int

    def label(self) -> str:
        if self.start_season == self.end_season:
            if self.start_gw == self.end_gw:
                return f"{self.start_season} GW{self.start_gw}"
            return f"{self.start_season} GW{self.start_gw}-GW{self.end_gw}"
        return f"{self.start_season} GW{self.start_gw} -> {self.end_season} GW{self.end_gw}"


@dataclass(slots=True)
class StreakResult:
    value: int = 0
    spans: list[StreakSpan] = field(default_factory=list)

    def labels(self) -> list[str]:
        return [s.label() for s in self.spans]


@dataclass(slots=True)
class DerivedGameweekStats:
    best_points: float | None = None
    best_occurrences: list[tuple[str, int]] = field(default_factory=list)
    best_details: str | None = None
    fifty_plus_count: int = 0
    win: StreakResult = field(default_factory=StreakResult)
    unbeaten: StreakResult = field(default_factory=StreakResult)
    loss: StreakResult = field(default_factory=StreakResult)
    winless: StreakResult = field(default_factory=StreakResult)


@dataclass(slots=True)
class AllTimeStat:
    manager: str
    wins: int = 0
    draws: int = 0
    losses: int = 0
    total_points: int = 0
    points_for: float = 0.0
    points_per_game: float = 0.0
    league_titles: int = 0
    cup_wins: int = 0
    goblet_wins: int = 0
    total_transactions: int = 0
    highest_gameweek: float | None = None
    lowest_gameweek: float | None = None
    fifty_plus_weeks: int = 0
    sub_twenty_weeks: int = 0
    best_gameweek_points: float | None = None
    best_gameweek_details: str | None = None
    longest_win_streak: int = 0
    longest_unbeaten_streak: int = 0
    longest_loss_streak: int = 0
    longest_winless_streak: int = 0
    longest_win_streak_spans: list[str] = field(default_factory=list)
    longest_unbeaten_streak_spans: list[str] = field(default_factory=list)
    longest_loss_streak_spans: list[str] = field(default_factory=list)
    longest_winless_streak_spans: list[str] = field(default_factory=list)

    @property
    def games(self) -> int:
        return self.wins + self.draws + self.losses

    def to_dict(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.__dataclass_fields__}


@dataclass(slots=True)
class RatingRecord:
    manager: str
    rating: float
    placement_score: float
    silverware_score: float
    ppg_score: float
    g_modifier: float
    base_score: float
    ppg: float
    plus_g: float
    seasons_played: int

    def to_dict(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.__dataclass_fields__}
