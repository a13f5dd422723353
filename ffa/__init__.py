"""Top-level ffa package: league history reconciliation and rating engine.

Subpackages: ``api`` (live draft source), ``compute`` (pure engine),
``storage`` (record stores), ``report`` (sync, read views, output) and
``cli``.
"""

from importlib import import_module as _imp

_SUBPACKAGES = ["api", "compute", "storage", "report", "cli"]

for _name in _SUBPACKAGES:
    _imp(f"ffa.{_name}")

__version__ = "2.0.0"
__all__ = list(_SUBPACKAGES)
