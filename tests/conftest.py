import pytest

from ffa.api.source import StaticScheduleSource
from ffa.compute.identity import Roster
from ffa.compute.models import GameweekResult
from ffa.errors import SourceError

SEASON = "2025/26"


@pytest.fixture
def roster():
    return Roster(("ANNA", "BEN", "CARL", "DORA"), {"BENJAMIN": "BEN"})


def league_payload(matches, latest=None):
    """Draft-shaped league details: entry ids 1-4, names resolved via the roster."""
    payload = {
        "league_entries": [
            {"id": 1, "entry_id": 101, "player_first_name": "Anna", "player_last_name": "Smith"},
            {"id": 2, "entry_id": 102, "player_first_name": "Benjamin", "player_last_name": "Jones"},
            {"id": 3, "entry_id": 103, "player_first_name": "Carl", "player_last_name": "Brown"},
            {"id": 4, "entry_id": 104, "player_first_name": "Dora", "player_last_name": "White"},
        ],
        "matches": [
            {
                "event": gw,
                "league_entry_1": a,
                "league_entry_1_points": pa,
                "league_entry_2": b,
                "league_entry_2_points": pb,
                "finished": True,
            }
            for gw, a, pa, b, pb in matches
        ],
    }
    if latest is not None:
        payload["latest_completed"] = latest
    return payload


# GW1: ANNA 60-40 BEN, CARL 45-45 DORA; GW2: ANNA 30-50 CARL, BEN 55-20 DORA
SEASON_MATCHES = [
    (1, 1, 60, 2, 40),
    (1, 3, 45, 4, 45),
    (2, 1, 30, 3, 50),
    (2, 2, 55, 4, 20),
]


@pytest.fixture
def source():
    return StaticScheduleSource(league_payload(SEASON_MATCHES, latest=2))


class FailingSource:
    """Schedule source whose upstream is down."""

    def latest_completed_gameweek(self):
        raise SourceError("upstream unavailable")

    def entries(self):
        raise SourceError("upstream unavailable")

    def matches(self, up_to=None):
        raise SourceError("upstream unavailable")


@pytest.fixture
def failing_source():
    return FailingSource()


def gw(season, week, result, points=40.0, manager="ANNA", opponent="BEN"):
    against = {"W": points - 10, "L": points + 10, "D": points}[result]
    return GameweekResult(season, week, manager, opponent, points, against, result)
