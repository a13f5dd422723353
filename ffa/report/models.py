from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ffa.compute.models import (
    AllTimeStat,
    PairwiseH2H,
    Provenance,
    SeasonMetaStat,
    SeasonStanding,
    Trophy,
)


def _rows(items: list) -> list[dict[str, Any]]:
    return [item.to_row() for item in items]


@dataclass(slots=True)
class ManagerSeasons:
    """Season-by-season history for one manager."""

    manager: str
    standings: list[SeasonStanding] = field(default_factory=list)
    trophies: list[Trophy] = field(default_factory=list)
    season_stats: list[SeasonMetaStat] = field(default_factory=list)
    h2h_by_season: list[PairwiseH2H] = field(default_factory=list)

    def to_json_payload(self) -> dict[str, Any]:
        return {
            "manager_name": self.manager,
            "season_standings": _rows(self.standings),
            "trophies": _rows(self.trophies),
            "season_stats": _rows(self.season_stats),
            "h2h_by_season": _rows(self.h2h_by_season),
        }


@dataclass(slots=True)
class ManagerProfile:
    manager: str
    all_time: AllTimeStat | None
    seasons: ManagerSeasons
    h2h_all_time: list[PairwiseH2H]
    current_season: str
    provenance: Provenance

    def to_json_payload(self, schema_version: str) -> dict[str, Any]:
        payload = {
            "schema_version": schema_version,
            "manager_name": self.manager,
            "current_season": self.current_season,
            "current_season_source": self.provenance.value,
            "all_time_stats": self.all_time.to_dict() if self.all_time else None,
            "h2h_all_time": _rows(self.h2h_all_time),
        }
        payload.update(self.seasons.to_json_payload())
        return payload


@dataclass(slots=True)
class LeadersReport:
    season: str
    all_time: dict[str, dict]
    season_leaders: dict[str, dict]

    def to_json_payload(self) -> dict[str, Any]:
        return {"season": self.season, "all_time": self.all_time, "season_leaders": self.season_leaders}
