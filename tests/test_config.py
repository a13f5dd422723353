import pytest

from ffa.compute.identity import DEFAULT_ROSTER
from ffa.config import Settings, load_roster, roster_from_mapping


def test_settings_from_env():
    s = Settings.from_env(
        {
            "FFA_LEAGUE_ID": "4321",
            "FFA_CURRENT_SEASON": "2026/27",
            "FFA_DB_PATH": "/tmp/x.db",
            "FFA_RPM_LIMIT": "120",
            "FFA_MIN_INTERVAL_MS": "bogus",
        }
    )
    assert s.league_id == "4321"
    assert s.current_season == "2026/27"
    assert s.db_path == "/tmp/x.db"
    assert s.rpm_limit == 120.0
    assert s.min_interval_ms is None
    assert s.timeout_sec == 20.0
    assert s.draft_base_url == "https://draft.premierleague.com/api"


def test_defaults_use_builtin_roster():
    s = Settings.from_env({})
    assert s.league_id is None
    assert s.current_season == "2025/26"
    assert s.roster() is DEFAULT_ROSTER


def test_yaml_roster(tmp_path):
    path = tmp_path / "roster.yaml"
    path.write_text("managers: [Anna, Ben]\naliases:\n  benjamin: BEN\n", encoding="utf-8")
    roster = load_roster(path)
    assert roster.managers == ("ANNA", "BEN")
    assert roster.canonicalize("Benjamin Jones") == "BEN"
    assert Settings(roster_file=str(path)).roster() == roster


def test_roster_config_validation(tmp_path):
    with pytest.raises(ValueError):
        roster_from_mapping({"managers": []})
    with pytest.raises(ValueError):
        roster_from_mapping({"managers": ["ANNA"], "aliases": ["ANNIE"]})
    with pytest.raises(ValueError):
        roster_from_mapping({"managers": ["ANNA"], "aliases": {"ANNIE": "ZED"}})
    path = tmp_path / "bad.yaml"
    path.write_text("- ANNA\n- BEN\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_roster(path)
