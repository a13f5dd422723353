"""Canonical manager identities.

The league roster is closed: every historical row must belong to one of a
fixed set of managers. Free-form names coming from imports or the live source
are resolved against the roster and its alias table; anything that does not
resolve is reported as ``None`` and never turned into a new manager.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Mapping

from ffa.errors import UnknownManagerError

_TOKEN_SPLIT = re.compile(r"[^A-Z]+")


def normalize_name(value: object) -> str:
    return str(value if value is not None else "").strip().upper()


@dataclass(frozen=True)
class Roster:
    managers: tuple[str, ...]
    aliases: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        managers = tuple(normalize_name(m) for m in self.managers)
        if len(set(managers)) != len(managers):
            raise ValueError("Roster contains duplicate managers")
        aliases = {normalize_name(k): normalize_name(v) for k, v in dict(self.aliases).items()}
        unknown = sorted({v for v in aliases.values() if v not in managers})
        if unknown:
            raise ValueError(f"Aliases point outside the roster: {', '.join(unknown)}")
        object.__setattr__(self, "managers", managers)
        object.__setattr__(self, "aliases", aliases)

    def __contains__(self, name: object) -> bool:
        return normalize_name(name) in self.managers

    def __len__(self) -> int:
        return len(self.managers)

    def _lookup(self, token: str) -> str | None:
        if token in self.aliases:
            return self.aliases[token]
        if token in self.managers:
            return token
        return None

    def canonicalize(self, raw: object) -> str | None:
        normalized = normalize_name(raw)
        if not normalized:
            return None
        hit = self._lookup(normalized)
        if hit:
            return hit
        tokens = [t for t in _TOKEN_SPLIT.split(normalized) if t]
        if not tokens:
            return None
        return self._lookup(tokens[0])

    def require(self, raw: object) -> str:
        """Like :meth:`canonicalize` but raises for unknown names."""
        manager = self.canonicalize(raw)
        if manager is None:
            raise UnknownManagerError(raw)
        return manager

    def variants_of(self, identity: str) -> list[str]:
        canonical = normalize_name(identity)
        aliases = sorted(a for a, c in self.aliases.items() if c == canonical and a != canonical)
        return [canonical, *aliases]

    def by_index(self, index: int) -> str | None:
        # Legacy spreadsheet exports list managers in roster order.
        if index < 0 or index >= len(self.managers):
            return None
        return self.managers[index]


DEFAULT_MANAGERS = (
    "PATRICK",
    "MATT",
    "MARCO",
    "LENNART",
    "CHRIS",
    "IAN",
    "HENRI",
    "DAVID",
    "MAX",
    "BENJI",
)

DEFAULT_ALIASES = {"MATTHEW": "MATT"}

DEFAULT_ROSTER = Roster(DEFAULT_MANAGERS, DEFAULT_ALIASES)
