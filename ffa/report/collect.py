"""Read-side assembly: the current-season precedence rule and the league views.

Every view is recomputed from stored rows on each call. Before reading, the
service gives the ledger synchronizer a chance to bring the live season up to
date; a failed sync only means older rows are served.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Iterable

from ffa.api.source import ScheduleSource
from ffa.compute.adapters import (
    adapt_rows,
    gameweek_result_from_row,
    pairwise_from_row,
    season_stat_from_row,
    standing_from_row,
    trophy_from_row,
)
from ffa.compute.aggregate import aggregate_all_time
from ffa.compute.h2h import merge_pairwise, season_pairwise
from ffa.compute.identity import Roster
from ffa.compute.models import (
    AllTimeStat,
    GameweekResult,
    PairwiseH2H,
    Provenance,
    RatingRecord,
    ResultPolicy,
    SeasonMetaStat,
    SeasonStanding,
    Trophy,
)
from ffa.compute.rating import build_rating_inputs, rate_managers
from ffa.compute.streaks import analyze_ledger, leaders as _leaders, season_start_year
from ffa.config import Settings
from ffa.errors import SourceError
from ffa.storage.base import ALL_SEASONS, RecordStore

from .constants import COMPETITION_TYPES
from .models import LeadersReport, ManagerProfile, ManagerSeasons
from .sync import LedgerSynchronizer, SyncResult, derive_live_season

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CurrentSeasonRows:
    season: str
    results: list[GameweekResult] = field(default_factory=list)
    standings: list[SeasonStanding] = field(default_factory=list)
    pairwise: list[PairwiseH2H] = field(default_factory=list)
    latest_completed_gameweek: int | None = None


def resolve_current_season_rows(
    source: ScheduleSource | None,
    store: RecordStore,
    roster: Roster,
    season: str,
    policy: ResultPolicy = ResultPolicy.POINTS,
) -> tuple[CurrentSeasonRows, Provenance]:
    """Current-season rows and where they came from.

    Rows derived live from ``source`` win whenever the latest completed
    gameweek is known and at least one match resolves. Otherwise the rows
    already persisted for ``season`` are used, and failing those the season
    is empty. ``policy`` must match the one the synchronizer wrote the
    persisted rows with.
    """
    if source is not None:
        try:
            live = derive_live_season(source, roster, season, policy)
        except SourceError as exc:
            logger.warning("Live season %s unavailable, using stored rows: %s", season, exc)
            live = None
        if live is not None:
            rows = CurrentSeasonRows(
                season, live.results, live.standings, live.pairwise, live.latest_completed_gameweek
            )
            return rows, Provenance.LIVE

    results = adapt_rows(store.gameweek_results(season), gameweek_result_from_row, roster)
    standings = adapt_rows(
        store.season_standings(season, "league"), standing_from_row, roster
    )
    if not results and not standings:
        return CurrentSeasonRows(season), Provenance.EMPTY
    pairwise = adapt_rows(store.pairwise(season), pairwise_from_row, roster)
    latest = max((r.gameweek for r in results), default=None)
    return CurrentSeasonRows(season, results, merge_standings(standings), pairwise, latest), Provenance.PERSISTED


def merge_standings(rows: Iterable[SeasonStanding]) -> list[SeasonStanding]:
    """Fold rows naming the same manager (via aliases) into one per season.

    Counts and points are summed; the best (lowest) final rank is kept.
    """
    merged: dict[tuple[str, str, str], SeasonStanding] = {}
    for row in rows:
        key = (row.season, row.competition_type, row.manager)
        prev = merged.get(key)
        if prev is None:
            merged[key] = replace(row)
            continue
        ranks = [r for r in (prev.final_rank, row.final_rank) if r]
        merged[key] = replace(
            prev,
            final_rank=min(ranks) if ranks else 0,
            wins=prev.wins + row.wins,
            draws=prev.draws + row.draws,
            losses=prev.losses + row.losses,
            points=prev.points + row.points,
            points_for=round(prev.points_for + row.points_for, 2),
            points_against=round(prev.points_against + row.points_against, 2),
        )
    return sorted(
        merged.values(),
        key=lambda s: (-season_start_year(s.season), s.competition_type, s.final_rank or 999, s.manager),
    )


@dataclass(slots=True)
class _History:
    """Every input of the all-time views, current season resolved."""

    current: CurrentSeasonRows
    provenance: Provenance
    standings: list[SeasonStanding]
    trophies: list[Trophy]
    season_stats: list[SeasonMetaStat]
    ledger: list[GameweekResult]
    pairwise: list[PairwiseH2H]


class LeagueStatsService:
    """League history views over a record store and an optional live source."""

    def __init__(
        self,
        store: RecordStore,
        source: ScheduleSource | None = None,
        roster: Roster | None = None,
        settings: Settings | None = None,
        policy: ResultPolicy = ResultPolicy.POINTS,
    ) -> None:
        self.settings = settings or Settings()
        self.store = store
        self.source = source
        self.roster = roster or self.settings.roster()
        self.season = self.settings.current_season
        self.policy = policy
        self.synchronizer = (
            LedgerSynchronizer(source, store, self.roster, self.season, policy) if source is not None else None
        )

    # --- writes ---

    def sync(self) -> SyncResult:
        if self.synchronizer is None:
            return SyncResult(False, reason="no live source configured")
        return self.synchronizer.sync()

    def _refresh(self) -> None:
        if self.synchronizer is not None:
            self.synchronizer.safe_sync()

    # --- inputs ---

    def _is_current(self, season: str | None) -> bool:
        return season == self.season

    def _current(self) -> tuple[CurrentSeasonRows, Provenance]:
        return resolve_current_season_rows(self.source, self.store, self.roster, self.season, self.policy)

    def _history(self) -> _History:
        current, provenance = self._current()
        standings = [
            s
            for s in adapt_rows(self.store.season_standings(), standing_from_row, self.roster)
            if not (self._is_current(s.season) and s.competition_type == "league")
        ]
        ledger = [
            r
            for r in adapt_rows(self.store.gameweek_results(), gameweek_result_from_row, self.roster)
            if not self._is_current(r.season)
        ]
        pairwise = [
            p
            for p in adapt_rows(self.store.pairwise(ALL_SEASONS), pairwise_from_row, self.roster)
            if not self._is_current(p.season)
        ]
        return _History(
            current=current,
            provenance=provenance,
            standings=merge_standings(standings + current.standings),
            trophies=adapt_rows(self.store.trophies(), trophy_from_row, self.roster),
            season_stats=adapt_rows(self.store.season_stats(), season_stat_from_row, self.roster),
            ledger=ledger + current.results,
            pairwise=pairwise + current.pairwise,
        )

    def _all_time(self, history: _History) -> list[AllTimeStat]:
        derived = analyze_ledger(history.ledger, self.roster.managers)
        return aggregate_all_time(
            history.standings,
            history.trophies,
            history.season_stats,
            derived,
            self.roster.managers,
        )

    # --- reads ---

    def all_time_stats(self) -> list[AllTimeStat]:
        self._refresh()
        return self._all_time(self._history())

    def all_time_standings(self) -> list[dict[str, Any]]:
        return [
            {
                "rank": i,
                "manager_name": row.manager,
                "wins": row.wins,
                "draws": row.draws,
                "losses": row.losses,
                "points": row.total_points,
                "points_for": row.points_for,
                "league_titles": row.league_titles,
                "cup_wins": row.cup_wins,
                "goblet_wins": row.goblet_wins,
                "points_per_game": row.points_per_game,
            }
            for i, row in enumerate(self.all_time_stats(), start=1)
        ]

    def ratings(self) -> list[RatingRecord]:
        self._refresh()
        history = self._history()
        inputs = build_rating_inputs(
            self._all_time(history), history.standings, history.trophies, self.season
        )
        return rate_managers(inputs)

    def h2h(self, manager: str, season: str | None = None) -> list[PairwiseH2H]:
        """All-time table for ``manager`` or, with ``season``, that season's."""
        name = self.roster.require(manager)
        self._refresh()
        if season is None:
            current, _ = self._current()
            legacy = adapt_rows(self.store.pairwise(None), pairwise_from_row, self.roster)
            return merge_pairwise(legacy, current.results, name)
        if self._is_current(season):
            rows = self._current()[0].pairwise
        else:
            rows = adapt_rows(self.store.pairwise(season), pairwise_from_row, self.roster)
        return season_pairwise(rows, season, name)

    def season_stats(self, manager: str) -> ManagerSeasons:
        name = self.roster.require(manager)
        self._refresh()
        return self._manager_seasons(name, self._history())

    def _manager_seasons(self, name: str, history: _History) -> ManagerSeasons:
        def newest_first(season: str | None) -> int:
            return -season_start_year(season or "")

        seasons = sorted(
            {p.season for p in history.pairwise if p.season is not None}, key=newest_first
        )
        by_season: list[PairwiseH2H] = []
        for season in seasons:
            by_season.extend(season_pairwise(history.pairwise, season, name))
        return ManagerSeasons(
            manager=name,
            standings=[s for s in history.standings if s.manager == name],
            trophies=sorted(
                (t for t in history.trophies if t.manager == name), key=lambda t: newest_first(t.season)
            ),
            season_stats=sorted(
                (s for s in history.season_stats if s.manager == name),
                key=lambda s: newest_first(s.season),
            ),
            h2h_by_season=by_season,
        )

    def manager_profile(self, manager: str) -> ManagerProfile:
        name = self.roster.require(manager)
        self._refresh()
        history = self._history()
        all_time = next((row for row in self._all_time(history) if row.manager == name), None)
        legacy = [p for p in history.pairwise if p.season is None]
        return ManagerProfile(
            manager=name,
            all_time=all_time,
            seasons=self._manager_seasons(name, history),
            h2h_all_time=merge_pairwise(legacy, history.current.results, name),
            current_season=self.season,
            provenance=history.provenance,
        )

    def leaders(self, season: str | None = None) -> LeadersReport:
        """Leaderboards across all seasons and for one season (default: current)."""
        season = season or self.season
        self._refresh()
        history = self._history()
        season_rows = [r for r in history.ledger if r.season == season]
        return LeadersReport(
            season=season,
            all_time=self._board(history.ledger),
            season_leaders=self._board(season_rows),
        )

    def _board(self, rows: list[GameweekResult]) -> dict[str, dict]:
        # Only managers with rows compete; an empty ledger lists the whole roster at zero.
        return _leaders(analyze_ledger(rows, () if rows else self.roster.managers))

    def season_standings(self, season: str, competition: str = "league") -> list[SeasonStanding]:
        if competition not in COMPETITION_TYPES:
            raise ValueError(f"Unknown competition type: {competition!r}")
        self._refresh()
        if self._is_current(season) and competition == "league":
            rows = self._current()[0].standings
        else:
            rows = adapt_rows(self.store.season_standings(season, competition), standing_from_row, self.roster)
        return merge_standings(rows)

    def seasons(self) -> list[str]:
        """Completed seasons with stored standings, newest first."""
        self._refresh()
        cutoff = season_start_year(self.season)
        found = {
            str(row.get("season"))
            for row in self.store.season_standings()
            if row.get("season") and season_start_year(str(row.get("season"))) < cutoff
        }
        return sorted(found, key=lambda s: (season_start_year(s), s), reverse=True)
