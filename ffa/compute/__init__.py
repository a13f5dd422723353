from . import aggregate, core, h2h, rating, streaks
from .identity import DEFAULT_ROSTER, Roster

canonical_matches = core.canonical_matches
compute_gameweek_results = core.compute_gameweek_results
compute_standings = core.compute_standings
analyze_manager = streaks.analyze_manager
longest_run_with_spans = streaks.longest_run_with_spans
aggregate_all_time = aggregate.aggregate_all_time
rate_managers = rating.rate_managers
merge_pairwise = h2h.merge_pairwise
pairwise_from_results = h2h.pairwise_from_results

__all__ = [
    "DEFAULT_ROSTER",
    "Roster",
    "canonical_matches",
    "compute_gameweek_results",
    "compute_standings",
    "analyze_manager",
    "longest_run_with_spans",
    "aggregate_all_time",
    "rate_managers",
    "merge_pairwise",
    "pairwise_from_results",
]
