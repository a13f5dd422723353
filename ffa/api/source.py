"""Authoritative current-season match sources.

A source answers two questions: which gameweek is the latest completed one,
and which matches have been played up to it. :class:`DraftScheduleSource`
reads them from the draft league API; :class:`StaticScheduleSource` serves a
fixed payload (JSON file or literal) for offline runs.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Protocol

import requests

from ffa.compute.adapters import draft_entries, match_from_draft, normalize_list
from ffa.compute.core import _coerce_int
from ffa.compute.models import Match
from ffa.errors import SourceError

from .client import DraftClient


class ScheduleSource(Protocol):
    def latest_completed_gameweek(self) -> int | None: ...

    def entries(self) -> dict[str, str]: ...

    def matches(self, up_to: int | None = None) -> list[Match]: ...


def latest_finished_event(bootstrap: Any) -> int | None:
    """Highest ``finished`` event id in a bootstrap payload."""
    events = (bootstrap or {}).get("events") if isinstance(bootstrap, Mapping) else None
    if isinstance(events, Mapping) and isinstance(events.get("data"), list):
        events = events["data"]
    finished = [
        _coerce_int(e.get("id"))
        for e in normalize_list(events)
        if isinstance(e, Mapping) and e.get("finished")
    ]
    finished = [gw for gw in finished if gw > 0]
    return max(finished) if finished else None


def _section(payload: Any, key: str) -> list:
    if not isinstance(payload, Mapping):
        raise SourceError(f"Expected a league-details object, got {type(payload).__name__}")
    return normalize_list(payload.get(key))


def _parse_matches(payload: Any, up_to: int | None) -> list[Match]:
    parsed = [match_from_draft(m) for m in _section(payload, "matches")]
    return _filter_matches([m for m in parsed if m is not None], up_to)


def _filter_matches(matches: list[Match], up_to: int | None) -> list[Match]:
    return [m for m in matches if m.gameweek >= 1 and (up_to is None or m.gameweek <= up_to)]


class DraftScheduleSource:
    """Current season as published by the draft league API."""

    def __init__(self, client: DraftClient, league_id: int | str) -> None:
        self.client = client
        self.league_id = league_id
        self._details: Any = None

    def _league_details(self) -> Any:
        if self._details is None:
            try:
                self._details = self.client.league_details(self.league_id)
            except requests.RequestException as exc:
                raise SourceError(f"League {self.league_id} details unavailable: {exc}") from exc
        return self._details

    def latest_completed_gameweek(self) -> int | None:
        # A new sync round starts here; league details are fetched fresh for it.
        self._details = None
        try:
            bootstrap = self.client.bootstrap()
        except requests.RequestException as exc:
            raise SourceError(f"Bootstrap unavailable: {exc}") from exc
        return latest_finished_event(bootstrap)

    def entries(self) -> dict[str, str]:
        return draft_entries(_section(self._league_details(), "league_entries"))

    def matches(self, up_to: int | None = None) -> list[Match]:
        return _parse_matches(self._league_details(), up_to)


class StaticScheduleSource:
    """Fixed schedule, e.g. a saved league-details payload.

    The payload uses the draft shapes plus an optional ``latest_completed``
    integer; when that is missing, the highest gameweek among matches with
    ``finished`` set (or all matches) is used.
    """

    def __init__(self, payload: Mapping[str, Any]) -> None:
        self.payload = dict(payload)

    @classmethod
    def from_file(cls, path: str | Path) -> "StaticScheduleSource":
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise SourceError(f"Could not load schedule from {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise SourceError(f"Schedule file {path} must contain a JSON object")
        return cls(data)

    def latest_completed_gameweek(self) -> int | None:
        explicit = self.payload.get("latest_completed")
        if explicit is not None:
            gw = _coerce_int(explicit)
            return gw if gw > 0 else None
        raw = [m for m in _section(self.payload, "matches") if isinstance(m, Mapping)]
        finished = [m for m in raw if m.get("finished")]
        weeks = [_coerce_int(m.get("event", m.get("gameweek"))) for m in (finished or raw)]
        weeks = [w for w in weeks if w > 0]
        return max(weeks) if weeks else None

    def entries(self) -> dict[str, str]:
        return draft_entries(_section(self.payload, "league_entries"))

    def matches(self, up_to: int | None = None) -> list[Match]:
        return _parse_matches(self.payload, up_to)
