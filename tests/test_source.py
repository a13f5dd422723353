import json

import pytest
import requests
from conftest import SEASON_MATCHES, league_payload

from ffa.api.client import DraftClient, RateLimiter
from ffa.api.source import DraftScheduleSource, StaticScheduleSource, latest_finished_event
from ffa.errors import SourceError


class FakeClient:
    def __init__(self, bootstrap, details=None, fail=False):
        self._bootstrap = bootstrap
        self._details = details
        self.fail = fail
        self.detail_calls = 0

    def bootstrap(self):
        if self.fail:
            raise requests.ConnectionError("offline")
        return self._bootstrap

    def league_details(self, league_id):
        self.detail_calls += 1
        if self.fail:
            raise requests.Timeout("slow")
        return self._details


BOOTSTRAP = {"events": {"data": [{"id": 1, "finished": True}, {"id": 2, "finished": True}, {"id": 3, "finished": False}]}}


def test_latest_finished_event_shapes():
    assert latest_finished_event(BOOTSTRAP) == 2
    assert latest_finished_event({"events": [{"id": 5, "finished": True}]}) == 5
    assert latest_finished_event({"events": []}) is None
    assert latest_finished_event(None) is None


def test_draft_source_reads_completed_matches():
    details = league_payload(SEASON_MATCHES + [(3, 1, 0, 4, 0)])
    client = FakeClient(BOOTSTRAP, details)
    source = DraftScheduleSource(client, 999)
    latest = source.latest_completed_gameweek()
    assert latest == 2
    assert source.entries()["2"] == "Benjamin Jones"
    assert [m.gameweek for m in source.matches(up_to=latest)] == [1, 1, 2, 2]
    # one details fetch per sync round
    assert client.detail_calls == 1
    source.latest_completed_gameweek()
    source.entries()
    assert client.detail_calls == 2


def test_draft_source_wraps_transport_errors():
    source = DraftScheduleSource(FakeClient(BOOTSTRAP, fail=True), 999)
    with pytest.raises(SourceError):
        source.latest_completed_gameweek()
    with pytest.raises(SourceError):
        source.matches()


def test_static_source_from_file(tmp_path):
    path = tmp_path / "details.json"
    payload = league_payload(SEASON_MATCHES)
    payload["matches"].append({"event": 3, "league_entry_1": 1, "league_entry_2": 2, "finished": False})
    path.write_text(json.dumps(payload), encoding="utf-8")
    source = StaticScheduleSource.from_file(path)
    assert source.latest_completed_gameweek() == 2
    assert len(source.matches()) == 5
    assert len(source.matches(up_to=2)) == 4

    bad = tmp_path / "bad.json"
    bad.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(SourceError):
        StaticScheduleSource.from_file(bad)
    with pytest.raises(SourceError):
        StaticScheduleSource.from_file(tmp_path / "missing.json")


def test_client_interval_and_timeout():
    client = DraftClient(rpm_limit=60, min_interval_ms=250, timeout=5)
    assert client.rate.min_interval == 1.0
    assert client.timeout == 5.0
    assert client.base_url == "https://draft.premierleague.com/api"
    assert RateLimiter().min_interval == 0.10


def test_malformed_payload_shapes():
    source = DraftScheduleSource(FakeClient(BOOTSTRAP, ["not", "an", "object"]), 999)
    with pytest.raises(SourceError):
        source.matches()
    with pytest.raises(SourceError):
        source.entries()

    payload = league_payload(SEASON_MATCHES)
    payload["matches"] = [None, 7] + payload["matches"]
    static = StaticScheduleSource(payload)
    assert static.latest_completed_gameweek() == 2
    assert len(static.matches()) == 4
