import json

from conftest import SEASON, SEASON_MATCHES, league_payload

from ffa.api.source import StaticScheduleSource
from ffa.cli.league_report import build_parser, generate_league_report
from ffa.compute.models import RatingRecord
from ffa.config import Settings
from ffa.report.collect import LeagueStatsService
from ffa.report.formatters import dump_json, rating_payload
from ffa.report.render import fmt_cell, md_table
from ffa.storage.sqlite import SqliteStore


def test_md_table_escapes_pipes_and_blanks():
    lines = md_table(["Manager", "Details"], [["A|B", None], ["C", 61.5], ["D", 3.0]])
    assert lines[0] == "| Manager | Details |"
    assert lines[1] == "| :--- | :--- |"
    assert lines[2] == "| A\\|B | - |"
    assert lines[3] == "| C | 61.50 |"
    assert lines[4] == "| D | 3 |"


def test_fmt_cell_lists_and_bools():
    assert fmt_cell(["2023/24 GW1-GW3", "2024/25 GW5"]) == "2023/24 GW1-GW3; 2024/25 GW5"
    assert fmt_cell([]) == "-"
    assert fmt_cell(True) == "yes"


def test_json_is_deterministic():
    assert dump_json({"b": 1, "a": [1, 2]}, pretty=False) == '{"a":[1,2],"b":1}'
    assert dump_json({"b": 1, "a": 2}).startswith('{\n  "a": 2')


def test_rating_payload_names():
    rec = RatingRecord("ANNA", 2482.0851, 240, 1687.5, 378.9, 1.076, 2306.4, 1.5, 1200, 1)
    data = rating_payload(rec)
    assert data["manager_name"] == "ANNA"
    assert data["rating"] == 2482.1
    assert data["plus_g_modifier"] == 1.076
    assert data["rating_version"] == "FFA_RATING_V1"


def test_report_files_are_written(tmp_path, roster):
    out = tmp_path / "out"
    with SqliteStore(tmp_path / "ffa.db") as store:
        source = StaticScheduleSource(league_payload(SEASON_MATCHES, latest=2))
        service = LeagueStatsService(store, source, roster, Settings(current_season=SEASON))
        args = build_parser().parse_args(["ratings"])
        summary = generate_league_report(service, args, out_dir=str(out), output_formats=["markdown", "json"])

    assert set(summary["formats"]) == {"markdown", "json"}
    payload = json.loads((out / "ratings.json").read_text(encoding="utf-8"))
    assert payload["schema_version"] == "2.0.0"
    assert [r["manager_name"] for r in payload["ratings"]][0] == "CARL"
    markdown = (out / "ratings.md").read_text(encoding="utf-8")
    assert markdown.startswith("## Manager ratings (FFA_RATING_V1)")


def test_parser_subcommand_options():
    args = build_parser().parse_args(["--season", "2025/26", "h2h", "anna", "--season", "2023/24"])
    assert args.season == "2025/26"
    assert args.manager == "anna" and args.h2h_season == "2023/24"
    args = build_parser().parse_args(["--json-compact", "seasons", "--standings"])
    assert args.json_pretty is False and args.standings and args.competition == "league"
