from conftest import gw

from ffa.compute.streaks import (
    STREAK_PREDICATES,
    analyze_manager,
    format_best_details,
    leaders,
    longest_run_with_spans,
    season_start_year,
    sort_rows,
)


def _results(season, results, start=1):
    return [gw(season, start + i, r) for i, r in enumerate(results)]


def test_longest_win_run_single_span():
    rows = _results("2023/24", ["W", "W", "L", "W", "W", "W"])
    streak = longest_run_with_spans(rows, STREAK_PREDICATES["win"])
    assert streak.value == 3
    assert streak.labels() == ["2023/24 GW4-GW6"]


def test_ties_keep_every_span():
    rows = _results("2023/24", ["W", "W", "L", "W", "W"])
    streak = longest_run_with_spans(rows, STREAK_PREDICATES["win"])
    assert streak.value == 2
    assert streak.labels() == ["2023/24 GW1-GW2", "2023/24 GW4-GW5"]


def test_season_boundary_breaks_run():
    rows = sort_rows(_results("2024/25", ["W", "W"]) + _results("2023/24", ["W", "W"], start=37))
    streak = longest_run_with_spans(rows, STREAK_PREDICATES["win"])
    assert streak.value == 2
    assert streak.labels() == ["2023/24 GW37-GW38", "2024/25 GW1-GW2"]


def test_missing_gameweek_breaks_run():
    rows = [gw("2023/24", 1, "W"), gw("2023/24", 2, "W"), gw("2023/24", 4, "W")]
    streak = longest_run_with_spans(rows, STREAK_PREDICATES["win"])
    assert streak.value == 2
    assert len(streak.spans) == 1


def test_unbeaten_and_winless_count_draws():
    rows = _results("2022/23", ["W", "D", "W", "L", "D", "L"])
    stats = analyze_manager(rows)
    assert stats.win.value == 1
    assert stats.unbeaten.value == 3
    assert stats.loss.value == 1
    assert stats.winless.value == 3
    assert stats.winless.labels() == ["2022/23 GW4-GW6"]


def test_best_gameweek_reports_all_ties_and_fifty_plus():
    rows = [
        gw("2024/25", 9, "W", points=83),
        gw("2023/24", 4, "W", points=83),
        gw("2023/24", 5, "L", points=50),
        gw("2023/24", 6, "L", points=49.5),
    ]
    stats = analyze_manager(rows)
    assert stats.best_points == 83
    assert stats.best_details == "83: 2023/24 GW4, 2024/25 GW9"
    assert stats.fifty_plus_count == 3


def test_empty_history():
    stats = analyze_manager([])
    assert stats.best_points is None
    assert stats.best_details is None
    assert stats.fifty_plus_count == 0
    assert stats.win.value == 0 and stats.win.spans == []


def test_single_gameweek_span_label():
    streak = longest_run_with_spans([gw("2021/22", 7, "L")], STREAK_PREDICATES["loss"])
    assert streak.labels() == ["2021/22 GW7"]


def test_season_start_year_and_details_format():
    assert season_start_year("2019/20") == 2019
    assert season_start_year("legacy") == 0
    assert format_best_details(None, []) is None
    assert format_best_details(61.5, [("2020/21", 3)]) == "61.5: 2020/21 GW3"


def test_leaders_list_everyone_at_the_top():
    a = analyze_manager(_results("2023/24", ["W", "W", "L"]))
    b = analyze_manager([gw("2023/24", i + 1, r, manager="BEN") for i, r in enumerate(["W", "W", "W"])])
    board = leaders({"ANNA": a, "BEN": b})
    assert board["longest_win_streak"]["value"] == 3
    assert [r["manager_name"] for r in board["longest_win_streak"]["leaders"]] == ["BEN"]
    assert board["points_in_gameweek"]["value"] == 40
    assert {r["manager_name"] for r in board["points_in_gameweek"]["leaders"]} == {"ANNA", "BEN"}
