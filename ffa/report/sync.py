"""Ledger synchronization for the live season.

Completed current-season matches are turned into gameweek result rows,
pairwise rows and a league table, and each of those replaces its scope in the
record store. Replacing rather than appending makes the operation idempotent:
running it again over the same completed gameweeks leaves identical rows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ffa.api.source import ScheduleSource
from ffa.compute.core import canonical_matches, compute_gameweek_results, compute_standings
from ffa.compute.h2h import pairwise_from_results
from ffa.compute.identity import Roster
from ffa.compute.models import GameweekResult, PairwiseH2H, ResultPolicy, SeasonStanding
from ffa.errors import SourceError, StorageError, SyncError
from ffa.storage.base import (
    GAMEWEEK_RESULTS,
    H2H_STATS,
    SEASON_STANDINGS,
    RecordStore,
    ReplaceScope,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LiveSeason:
    """Current-season rows derived from the authoritative source."""

    season: str
    latest_completed_gameweek: int
    results: list[GameweekResult] = field(default_factory=list)
    standings: list[SeasonStanding] = field(default_factory=list)
    pairwise: list[PairwiseH2H] = field(default_factory=list)


@dataclass(slots=True)
class SyncResult:
    synced: bool
    latest_completed_gameweek: int | None = None
    gameweek_rows: int = 0
    standing_rows: int = 0
    pairwise_rows: int = 0
    reason: str | None = None

    def to_dict(self) -> dict:
        return {name: getattr(self, name) for name in self.__dataclass_fields__}


def derive_live_season(
    source: ScheduleSource,
    roster: Roster,
    season: str,
    policy: ResultPolicy = ResultPolicy.POINTS,
) -> LiveSeason | None:
    """Build the live season's rows, or ``None`` when nothing is complete yet.

    Source failures propagate; callers decide whether to fall back.
    """
    latest = source.latest_completed_gameweek()
    if not latest or latest < 1:
        return None
    matches = canonical_matches(source.matches(up_to=latest), source.entries(), roster)
    if not matches:
        return None
    results = compute_gameweek_results(matches, season, policy)
    return LiveSeason(
        season=season,
        latest_completed_gameweek=latest,
        results=results,
        standings=compute_standings(results, season),
        pairwise=pairwise_from_results(results, season),
    )


class LedgerSynchronizer:
    def __init__(
        self,
        source: ScheduleSource,
        store: RecordStore,
        roster: Roster,
        season: str,
        policy: ResultPolicy = ResultPolicy.POINTS,
    ) -> None:
        self.source = source
        self.store = store
        self.roster = roster
        self.season = season
        self.policy = policy

    def sync(self) -> SyncResult:
        """Rewrite the live season's rows in the store.

        Results are decided by ``policy`` (points by default), the same policy
        live reads apply to these rows. An unreachable source or a malformed
        payload reports "not synced" and leaves the store untouched; a failing
        store raises :class:`SyncError`.
        """
        try:
            live = derive_live_season(self.source, self.roster, self.season, self.policy)
        except SourceError as exc:
            logger.warning("Live season %s unavailable: %s", self.season, exc)
            return SyncResult(False, reason=str(exc))
        if live is None:
            return SyncResult(False, reason="no completed matches")

        try:
            n_results = self.store.replace_rows(
                ReplaceScope(GAMEWEEK_RESULTS, self.season, max_gameweek=live.latest_completed_gameweek),
                [r.to_row() for r in live.results],
            )
            n_pairs = self.store.replace_rows(
                ReplaceScope(H2H_STATS, self.season), [p.to_row() for p in live.pairwise]
            )
            n_standings = self.store.replace_rows(
                ReplaceScope(SEASON_STANDINGS, self.season, competition_type="league"),
                [s.to_row() for s in live.standings],
            )
        except StorageError as exc:
            raise SyncError(f"Could not store the live season: {exc}") from exc

        logger.info(
            "Synced %s through GW%d (%d results, %d pairs, %d standings)",
            self.season,
            live.latest_completed_gameweek,
            n_results,
            n_pairs,
            n_standings,
        )
        return SyncResult(True, live.latest_completed_gameweek, n_results, n_standings, n_pairs)

    def safe_sync(self) -> SyncResult:
        """:meth:`sync` for read paths: failures are logged, never raised."""
        try:
            return self.sync()
        except SyncError as exc:
            logger.warning("Ledger sync skipped: %s", exc)
            return SyncResult(False, reason=str(exc))
