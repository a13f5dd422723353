"""Output formats for league views.

Every view renders to JSON (a ``schema_version`` envelope around plain
records) or to Markdown tables. Floats are rounded only at this edge; the
compute layer keeps full precision apart from the documented roundings.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Sequence

from ffa.compute.models import AllTimeStat, PairwiseH2H, RatingRecord, SeasonStanding
from ffa.compute.rating import RATING_VERSION
from ffa.compute.streaks import LEADER_METRICS

from .constants import RATING_PLACES
from .models import LeadersReport, ManagerProfile
from .render import md_table

LEADER_TITLES = {
    "points_in_gameweek": "Points in a gameweek",
    "most_50_plus_gws": "Most 50+ gameweeks",
    "longest_win_streak": "Longest win streak",
    "longest_unbeaten_streak": "Longest unbeaten streak",
    "longest_losing_streak": "Longest losing streak",
    "longest_winless_streak": "Longest winless streak",
}


def dump_json(payload: Any, *, pretty: bool = True) -> str:
    if pretty:
        return json.dumps(payload, indent=2, sort_keys=True)
    return json.dumps(payload, separators=(",", ":"), sort_keys=True)


def envelope(schema_version: str, key: str, data: Any, **extra: Any) -> dict[str, Any]:
    payload = {"schema_version": schema_version, key: data}
    payload.update(extra)
    return payload


def rating_payload(record: RatingRecord) -> dict[str, Any]:
    data = record.to_dict()
    data["manager_name"] = data.pop("manager")
    data["plus_g_modifier"] = data.pop("g_modifier")
    data["rating"] = round(record.rating, RATING_PLACES)
    data["rating_version"] = RATING_VERSION
    return data


def all_time_payload(stat: AllTimeStat) -> dict[str, Any]:
    data = stat.to_dict()
    data["manager_name"] = data.pop("manager")
    # points-for is reported as "points_plus" alongside the legacy name
    data["points_plus"] = stat.points_for
    return data


# --- markdown ---


def _title(text: str) -> list[str]:
    return [f"## {text}", ""]


def all_time_markdown(rows: Sequence[AllTimeStat]) -> list[str]:
    headers = ["#", "Manager", "W", "D", "L", "Pts", "PF", "PPG", "League", "Cup", "Goblet", "Best GW"]
    body = [
        [
            i,
            r.manager,
            r.wins,
            r.draws,
            r.losses,
            r.total_points,
            r.points_for,
            r.points_per_game,
            r.league_titles,
            r.cup_wins,
            r.goblet_wins,
            r.best_gameweek_details,
        ]
        for i, r in enumerate(rows, start=1)
    ]
    return _title("All-time standings") + md_table(headers, body)


def ratings_markdown(records: Sequence[RatingRecord]) -> list[str]:
    headers = ["#", "Manager", "Rating", "Placement", "Silverware", "PPG score", "G mod", "PPG", "Plus G", "Seasons"]
    body = [
        [
            i,
            r.manager,
            f"{r.rating:.{RATING_PLACES}f}",
            r.placement_score,
            r.silverware_score,
            r.ppg_score,
            f"{r.g_modifier:.4f}",
            r.ppg,
            r.plus_g,
            r.seasons_played,
        ]
        for i, r in enumerate(records, start=1)
    ]
    return _title(f"Manager ratings ({RATING_VERSION})") + md_table(headers, body)


def h2h_markdown(rows: Sequence[PairwiseH2H], title: str = "Head to head") -> list[str]:
    headers = ["Manager", "Opponent", "Season", "W", "D", "L", "GP", "Avg pts"]
    body = [
        [r.manager, r.opponent, r.season or "all", r.wins, r.draws, r.losses, r.games_played, r.avg_points]
        for r in rows
    ]
    return _title(title) + md_table(headers, body)


def standings_markdown(rows: Iterable[SeasonStanding], title: str) -> list[str]:
    headers = ["Rank", "Manager", "W", "D", "L", "Pts", "PF", "PA"]
    body = [
        [s.final_rank, s.manager, s.wins, s.draws, s.losses, s.points, s.points_for, s.points_against]
        for s in rows
    ]
    return _title(title) + md_table(headers, body)


def _board_markdown(board: dict[str, dict]) -> list[str]:
    body = []
    for metric in LEADER_METRICS:
        entry = board.get(metric) or {}
        names = ", ".join(row["manager_name"] for row in entry.get("leaders", []))
        details = "; ".join(
            f"{row['manager_name']}: {row['details']}" for row in entry.get("leaders", []) if row.get("details")
        )
        body.append([LEADER_TITLES[metric], entry.get("value"), names, details])
    return md_table(["Metric", "Value", "Leaders", "Details"], body)


def leaders_markdown(report: LeadersReport) -> list[str]:
    lines = _title("All-time leaders") + _board_markdown(report.all_time)
    lines += [""] + _title(f"{report.season} leaders") + _board_markdown(report.season_leaders)
    return lines


def profile_markdown(profile: ManagerProfile) -> list[str]:
    lines = [f"# {profile.manager}", ""]
    stat = profile.all_time
    if stat is not None:
        lines += _title("Career") + md_table(
            ["W", "D", "L", "Pts", "PPG", "PF", "Titles", "Cups", "Goblets", "Best GW", "Win streak"],
            [
                [
                    stat.wins,
                    stat.draws,
                    stat.losses,
                    stat.total_points,
                    stat.points_per_game,
                    stat.points_for,
                    stat.league_titles,
                    stat.cup_wins,
                    stat.goblet_wins,
                    stat.best_gameweek_details,
                    stat.longest_win_streak,
                ]
            ],
        )
        lines.append("")
    lines += standings_markdown(profile.seasons.standings, "Seasons")
    lines.append("")
    lines += h2h_markdown(profile.h2h_all_time, "Head to head (all time)")
    lines.append(f"\n_Current season {profile.current_season}: {profile.provenance.value} data._")
    return lines


def to_markdown(lines: list[str]) -> str:
    return "\n".join(lines) + "\n"
