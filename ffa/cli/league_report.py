from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

import requests

from ffa.api.client import DraftClient
from ffa.api.source import DraftScheduleSource, ScheduleSource, StaticScheduleSource
from ffa.config import Settings
from ffa.errors import FfaError
from ffa.report.collect import LeagueStatsService
from ffa.report.constants import SCHEMA_VERSION
from ffa.report.formatters import (
    all_time_markdown,
    all_time_payload,
    dump_json,
    envelope,
    h2h_markdown,
    leaders_markdown,
    profile_markdown,
    rating_payload,
    ratings_markdown,
    standings_markdown,
    to_markdown,
)
from ffa.storage.sqlite import SqliteStore

logger = logging.getLogger("ffa.cli")


def _source(settings: Settings, matches_file: str | None) -> ScheduleSource | None:
    if matches_file:
        return StaticScheduleSource.from_file(matches_file)
    if not settings.league_id:
        logger.info("No league id configured; reading stored rows only")
        return None
    client = DraftClient(
        settings.draft_base_url,
        rpm_limit=settings.rpm_limit,
        min_interval_ms=settings.min_interval_ms,
        timeout=settings.timeout_sec,
    )
    return DraftScheduleSource(client, settings.league_id)


def _json_and_markdown(service: LeagueStatsService, args: argparse.Namespace) -> tuple[dict[str, Any], list[str], str]:
    """Payload, markdown lines and file stem for one command."""
    command = args.command
    season = service.season
    if command == "sync":
        result = service.sync()
        lines = [
            "## Ledger sync",
            "",
            f"- season: {season}",
            f"- synced: {'yes' if result.synced else 'no'}",
            f"- latest completed gameweek: {result.latest_completed_gameweek or '-'}",
            f"- rows: {result.gameweek_rows} results, {result.standing_rows} standings, {result.pairwise_rows} pairs",
        ]
        if result.reason:
            lines.append(f"- reason: {result.reason}")
        return envelope(SCHEMA_VERSION, "sync", result.to_dict(), season=season), lines, "sync"
    if command == "all-time":
        stats = service.all_time_stats()
        payload = envelope(SCHEMA_VERSION, "stats", [all_time_payload(s) for s in stats])
        return payload, all_time_markdown(stats), "all-time"
    if command == "ratings":
        records = service.ratings()
        payload = envelope(SCHEMA_VERSION, "ratings", [rating_payload(r) for r in records], source="computed")
        return payload, ratings_markdown(records), "ratings"
    if command == "h2h":
        rows = service.h2h(args.manager, args.h2h_season)
        scope = args.h2h_season or "all-time"
        payload = envelope(SCHEMA_VERSION, "h2h_stats", [r.to_row() for r in rows])
        title = f"Head to head: {rows[0].manager if rows else args.manager} ({scope})"
        return payload, h2h_markdown(rows, title), f"h2h-{args.manager.lower()}"
    if command == "profile":
        profile = service.manager_profile(args.manager)
        return profile.to_json_payload(SCHEMA_VERSION), profile_markdown(profile), f"profile-{profile.manager.lower()}"
    if command == "leaders":
        report = service.leaders(args.leaders_season)
        payload = envelope(SCHEMA_VERSION, "leaders", report.to_json_payload())
        return payload, leaders_markdown(report), "leaders"
    if command == "seasons":
        seasons = service.seasons()
        lines = ["## Seasons", ""] + [f"- {s}" for s in seasons]
        if args.standings:
            for s in seasons:
                lines.append("")
                lines += standings_markdown(service.season_standings(s, args.competition), f"{s} {args.competition}")
        return envelope(SCHEMA_VERSION, "seasons", seasons), lines, "seasons"
    raise ValueError(f"Unsupported command: {command}")


def generate_league_report(
    service: LeagueStatsService,
    args: argparse.Namespace,
    *,
    out_dir: str | None = None,
    output_formats: Sequence[str] | None = None,
    json_pretty: bool = True,
) -> dict:
    formats = list(output_formats) if output_formats else ["markdown"]
    payload, lines, stem = _json_and_markdown(service, args)

    results: dict[str, dict[str, Any]] = {}
    for fmt in formats:
        fmt_norm = fmt.lower()
        if fmt_norm in {"md", "markdown"}:
            content = to_markdown(lines)
            key, suffix = "markdown", "md"
        elif fmt_norm == "json":
            content = dump_json(payload, pretty=json_pretty) + "\n"
            key, suffix = "json", "json"
        else:
            raise ValueError(f"Unsupported format: {fmt}")
        if out_dir is None:
            sys.stdout.write(content)
            results[key] = {"path": None, "bytes": len(content)}
            continue
        path = Path(out_dir) / f"{stem}.{suffix}"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        logger.info("wrote %s -> %s (%d bytes)", key, path, len(content))
        results[key] = {"path": str(path), "bytes": len(content)}
    return {"command": args.command, "season": service.season, "formats": results}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ffa-report",
        description="League history reconciliation, streaks, all-time tables and manager ratings",
    )
    parser.add_argument("--db", default=None, help="SQLite database path (default FFA_DB_PATH or data/ffa.db)")
    parser.add_argument("--season", default=None, help="Current season label, e.g. 2025/26 (default FFA_CURRENT_SEASON)")
    parser.add_argument("--league-id", default=None, help="Draft league id (default FFA_LEAGUE_ID)")
    parser.add_argument("--roster", default=None, help="YAML roster/alias file (default FFA_ROSTER_FILE)")
    parser.add_argument(
        "--matches-file",
        default=None,
        help="Read the current season from a saved league-details JSON file instead of the API",
    )
    parser.add_argument("--out", default=None, help="Output directory (default: print to stdout)")
    parser.add_argument(
        "--formats",
        default="markdown",
        help="Comma-separated list of output formats (markdown,json)",
    )
    parser.set_defaults(json_pretty=True)
    parser.add_argument(
        "--json-compact",
        dest="json_pretty",
        action="store_false",
        help="Use compact JSON (no whitespace)",
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging to stderr")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("sync", help="Rewrite the live season's rows in the store")
    sub.add_parser("all-time", help="All-time per-manager totals")
    sub.add_parser("ratings", help="Manager ratings")
    p = sub.add_parser("h2h", help="Head-to-head table for one manager")
    p.add_argument("manager")
    p.add_argument("--season", dest="h2h_season", default=None, help="Restrict to one season")
    p = sub.add_parser("profile", help="Full manager profile")
    p.add_argument("manager")
    p = sub.add_parser("leaders", help="Gameweek and streak leaderboards")
    p.add_argument("--season", dest="leaders_season", default=None, help="Season board (default: current)")
    p = sub.add_parser("seasons", help="Completed seasons")
    p.add_argument("--standings", action="store_true", help="Include each season's final table")
    p.add_argument("--competition", default="league", help="league or goblet")
    return parser


def main(argv: list[str] | None = None) -> int:  # pragma: no cover
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    formats = [f.strip() for f in args.formats.split(",") if f.strip()]

    settings = Settings.from_env()
    overrides = {
        "db_path": args.db,
        "current_season": args.season,
        "league_id": args.league_id,
        "roster_file": args.roster,
    }
    settings = dataclasses.replace(settings, **{k: v for k, v in overrides.items() if v is not None})

    try:
        roster = settings.roster()
        source = _source(settings, args.matches_file)
        with SqliteStore(settings.db_path) as store:
            service = LeagueStatsService(store, source, roster, settings)
            generate_league_report(service, args, out_dir=args.out, output_formats=formats, json_pretty=args.json_pretty)
        return 0
    except requests.HTTPError as e:
        print(f"HTTPError: {e}", file=sys.stderr)
        return 1
    except (FfaError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
