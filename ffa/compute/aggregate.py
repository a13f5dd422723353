from __future__ import annotations

from typing import Iterable, Mapping

from ffa.report.constants import POINTS_PLACES, PPG_PLACES

from .models import AllTimeStat, DerivedGameweekStats, SeasonMetaStat, SeasonStanding, Trophy


def points_per_game(total_points: float, games: int) -> float:
    if games <= 0:
        return 0.0
    return round(total_points / games, PPG_PLACES)


def aggregate_all_time(
    standings: Iterable[SeasonStanding],
    trophies: Iterable[Trophy],
    season_stats: Iterable[SeasonMetaStat],
    derived: Mapping[str, DerivedGameweekStats],
    managers: Iterable[str] = (),
) -> list[AllTimeStat]:
    """Fold season-level rows into one all-time record per manager.

    ``standings`` must already contain the resolved current-season rows; only
    league rows count towards the totals. ``managers`` seeds empty records so
    managers without any history still appear.
    """
    agg: dict[str, AllTimeStat] = {m: AllTimeStat(m) for m in managers}

    def ensure(manager: str) -> AllTimeStat:
        return agg.setdefault(manager, AllTimeStat(manager))

    for row in standings:
        if row.competition_type != "league":
            continue
        target = ensure(row.manager)
        target.wins += row.wins
        target.draws += row.draws
        target.losses += row.losses
        target.total_points += row.points
        target.points_for += row.points_for

    for t in trophies:
        target = ensure(t.manager)
        target.league_titles += int(t.won_league)
        target.cup_wins += int(t.won_cup)
        target.goblet_wins += int(t.won_goblet)

    for s in season_stats:
        target = ensure(s.manager)
        target.total_transactions += s.total_transactions
        target.sub_twenty_weeks += s.sub_twenty_weeks
        if s.highest_gameweek and s.highest_gameweek > 0:
            target.highest_gameweek = max(target.highest_gameweek or 0, s.highest_gameweek)
        if s.lowest_gameweek and s.lowest_gameweek > 0:
            if target.lowest_gameweek is None:
                target.lowest_gameweek = s.lowest_gameweek
            else:
                target.lowest_gameweek = min(target.lowest_gameweek, s.lowest_gameweek)

    for manager, stats in derived.items():
        target = ensure(manager)
        target.fifty_plus_weeks = stats.fifty_plus_count
        target.best_gameweek_points = stats.best_points
        target.best_gameweek_details = stats.best_details
        if stats.best_points is not None:
            target.highest_gameweek = stats.best_points
        target.longest_win_streak = stats.win.value
        target.longest_unbeaten_streak = stats.unbeaten.value
        target.longest_loss_streak = stats.loss.value
        target.longest_winless_streak = stats.winless.value
        target.longest_win_streak_spans = stats.win.labels()
        target.longest_unbeaten_streak_spans = stats.unbeaten.labels()
        target.longest_loss_streak_spans = stats.loss.labels()
        target.longest_winless_streak_spans = stats.winless.labels()

    rows = list(agg.values())
    for row in rows:
        row.points_for = round(row.points_for, POINTS_PLACES)
        row.points_per_game = points_per_game(row.total_points, row.games)
    rows.sort(key=lambda r: (-r.total_points, r.manager))
    return rows
