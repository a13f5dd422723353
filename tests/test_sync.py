import pytest
from conftest import SEASON, league_payload

from ffa.api.source import DraftScheduleSource, StaticScheduleSource
from ffa.compute.models import ResultPolicy
from ffa.errors import StorageError, SyncError
from ffa.report.sync import LedgerSynchronizer
from ffa.storage.base import GAMEWEEK_RESULTS, H2H_STATS, SEASON_STANDINGS
from ffa.storage.memory import MemoryStore
from ffa.storage.sqlite import SqliteStore


def _legacy_tables():
    return {
        GAMEWEEK_RESULTS: [
            {"season": "2024/25", "gameweek": 1, "manager_name": "ANNA", "opponent_name": "BEN",
             "points_for": 50, "points_against": 40, "result": "W"},
            # stale current-season row from an earlier import
            {"season": SEASON, "gameweek": 1, "manager_name": "ANNA", "opponent_name": "DORA",
             "points_for": 1, "points_against": 2, "result": "L"},
        ],
        SEASON_STANDINGS: [
            {"season": SEASON, "manager_name": "DORA", "final_rank": 1, "wins": 9, "draws": 0, "losses": 0,
             "points": 27, "points_for": 0, "points_against": 0, "competition_type": "league"},
            {"season": SEASON, "manager_name": "DORA", "final_rank": 1, "wins": 1, "draws": 0, "losses": 0,
             "points": 3, "points_for": 0, "points_against": 0, "competition_type": "goblet"},
        ],
    }


def test_sync_writes_results_pairs_and_table(roster, source):
    store = MemoryStore(_legacy_tables())
    result = LedgerSynchronizer(source, store, roster, SEASON).sync()

    assert result.synced is True
    assert result.latest_completed_gameweek == 2
    assert (result.gameweek_rows, result.pairwise_rows, result.standing_rows) == (8, 8, 4)

    current = store.gameweek_results(SEASON)
    assert len(current) == 8
    assert all(r["manager_name"] != r["opponent_name"] for r in current)
    assert {r["manager_name"] for r in current} == {"ANNA", "BEN", "CARL", "DORA"}
    # earlier seasons untouched
    assert len(store.gameweek_results("2024/25")) == 1

    table = store.season_standings(SEASON, "league")
    assert [(r["manager_name"], r["final_rank"], r["points"]) for r in table] == [
        ("CARL", 1, 4),
        ("BEN", 2, 3),
        ("ANNA", 3, 3),
        ("DORA", 4, 1),
    ]
    # other competitions keep their rows
    assert len(store.season_standings(SEASON, "goblet")) == 1


def test_sync_is_idempotent(roster, source):
    store = MemoryStore(_legacy_tables())
    sync = LedgerSynchronizer(source, store, roster, SEASON)
    sync.sync()
    first = store.snapshot()
    sync.sync()
    assert store.snapshot() == first


def _dump(store, table):
    cur = store.conn.execute(f"SELECT * FROM {table}")
    return [d[0] for d in cur.description], [tuple(r) for r in cur.fetchall()]


def test_sync_is_idempotent_on_sqlite(roster, source, tmp_path):
    tables = (GAMEWEEK_RESULTS, H2H_STATS, SEASON_STANDINGS)
    with SqliteStore(tmp_path / "ffa.db") as store:
        for table, rows in _legacy_tables().items():
            store.import_rows(table, rows)
        sync = LedgerSynchronizer(source, store, roster, SEASON)
        sync.sync()
        first = [_dump(store, t) for t in tables]
        sync.sync()
        assert [_dump(store, t) for t in tables] == first
        assert all("id" not in columns for columns, _ in first)
        assert len(store.pairwise(SEASON)) == 8


def test_unresolved_and_self_play_matches_are_dropped(roster):
    payload = league_payload([(1, 1, 60, 2, 40), (1, 3, 50, 99, 10), (1, 4, 30, 4, 30)], latest=1)
    payload["league_entries"].append({"id": 5, "player_first_name": "Dora", "player_last_name": "Again"})
    payload["matches"].append({"event": 1, "league_entry_1": 4, "league_entry_1_points": 1,
                               "league_entry_2": 5, "league_entry_2_points": 2})
    store = MemoryStore()
    result = LedgerSynchronizer(StaticScheduleSource(payload), store, roster, SEASON).sync()
    assert result.gameweek_rows == 2
    assert {r["manager_name"] for r in store.gameweek_results()} == {"ANNA", "BEN"}


def test_unreachable_source_leaves_store_untouched(roster, failing_source):
    store = MemoryStore(_legacy_tables())
    before = store.snapshot()
    result = LedgerSynchronizer(failing_source, store, roster, SEASON).sync()
    assert result.synced is False
    assert "unavailable" in result.reason
    assert store.snapshot() == before


def test_nothing_completed_is_not_synced(roster):
    source = StaticScheduleSource(league_payload([], latest=0))
    store = MemoryStore(_legacy_tables())
    before = store.snapshot()
    result = LedgerSynchronizer(source, store, roster, SEASON).sync()
    assert result.synced is False
    assert store.snapshot() == before


def test_only_completed_gameweeks_are_synced(roster):
    matches = [(1, 1, 60, 2, 40), (2, 1, 0, 2, 0)]
    store = MemoryStore()
    LedgerSynchronizer(StaticScheduleSource(league_payload(matches, latest=1)), store, roster, SEASON).sync()
    assert {r["gameweek"] for r in store.gameweek_results()} == {1}


class _BrokenStore(MemoryStore):
    def replace_rows(self, scope, rows):
        raise StorageError("disk full")


def test_storage_failure_raises_but_safe_sync_does_not(roster, source):
    sync = LedgerSynchronizer(source, _BrokenStore(), roster, SEASON)
    with pytest.raises(SyncError):
        sync.sync()
    result = sync.safe_sync()
    assert result.synced is False
    assert "disk full" in result.reason


def test_malformed_matches_are_skipped(roster):
    payload = league_payload([(1, 1, 60, 2, 40), (1, 3, 45, 4, 45)], latest=1)
    payload["matches"].insert(1, None)
    payload["matches"].append(["not", "a", "match"])
    payload["league_entries"].append(None)
    store = MemoryStore()
    result = LedgerSynchronizer(StaticScheduleSource(payload), store, roster, SEASON).sync()
    assert result.synced is True
    assert result.gameweek_rows == 4


class _GarbledClient:
    def bootstrap(self):
        return {"events": [{"id": 2, "finished": True}]}

    def league_details(self, league_id):
        return ["not", "an", "object"]


def test_garbled_league_details_are_not_synced(roster):
    store = MemoryStore(_legacy_tables())
    before = store.snapshot()
    sync = LedgerSynchronizer(DraftScheduleSource(_GarbledClient(), 1), store, roster, SEASON)
    result = sync.safe_sync()
    assert result.synced is False
    assert "league-details" in result.reason
    assert store.snapshot() == before


def test_stored_results_follow_the_sync_policy(roster):
    payload = league_payload([(1, 1, 40, 2, 60)], latest=1)
    payload["matches"][0]["winner"] = 1
    source = StaticScheduleSource(payload)

    store = MemoryStore()
    LedgerSynchronizer(source, store, roster, SEASON).sync()
    assert {(r["manager_name"], r["result"]) for r in store.gameweek_results()} == {("ANNA", "L"), ("BEN", "W")}

    LedgerSynchronizer(source, store, roster, SEASON, ResultPolicy.OVERRIDE).sync()
    assert {(r["manager_name"], r["result"]) for r in store.gameweek_results()} == {("ANNA", "W"), ("BEN", "L")}
