"""Runtime configuration.

Settings come from ``FFA_*`` environment variables; the manager roster and
alias table can be supplied as a YAML file::

    managers: [PATRICK, MATT, MARCO]
    aliases:
      MATTHEW: MATT
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

import yaml

from ffa.compute.identity import DEFAULT_ROSTER, Roster
from ffa.report.constants import DEFAULT_CURRENT_SEASON, DEFAULT_TIMEOUT_SEC


def _env_float(env: Mapping[str, str], key: str) -> float | None:
    raw = env.get(key)
    try:
        return float(raw) if raw else None
    except ValueError:
        return None


@dataclass(frozen=True)
class Settings:
    draft_base_url: str = "https://draft.premierleague.com/api"
    league_id: str | None = None
    current_season: str = DEFAULT_CURRENT_SEASON
    db_path: str = "data/ffa.db"
    roster_file: str | None = None
    rpm_limit: float | None = None
    min_interval_ms: float | None = None
    timeout_sec: float = DEFAULT_TIMEOUT_SEC

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if env is None else env
        return cls(
            draft_base_url=env.get("FFA_DRAFT_BASE_URL", cls.draft_base_url),
            league_id=env.get("FFA_LEAGUE_ID") or None,
            current_season=env.get("FFA_CURRENT_SEASON", DEFAULT_CURRENT_SEASON),
            db_path=env.get("FFA_DB_PATH", cls.db_path),
            roster_file=env.get("FFA_ROSTER_FILE") or None,
            rpm_limit=_env_float(env, "FFA_RPM_LIMIT"),
            min_interval_ms=_env_float(env, "FFA_MIN_INTERVAL_MS"),
            timeout_sec=_env_float(env, "FFA_TIMEOUT_SEC") or DEFAULT_TIMEOUT_SEC,
        )

    def roster(self) -> Roster:
        if self.roster_file:
            return load_roster(self.roster_file)
        return DEFAULT_ROSTER


def roster_from_mapping(data: Mapping) -> Roster:
    managers = data.get("managers")
    if not isinstance(managers, list) or not managers:
        raise ValueError("Roster config needs a non-empty 'managers' list")
    aliases = data.get("aliases") or {}
    if not isinstance(aliases, Mapping):
        raise ValueError("Roster config 'aliases' must be a mapping")
    return Roster(tuple(str(m) for m in managers), {str(k): str(v) for k, v in aliases.items()})


def load_roster(path: str | Path) -> Roster:
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, Mapping):
        raise ValueError(f"Roster file {path} must contain a mapping")
    return roster_from_mapping(data)
