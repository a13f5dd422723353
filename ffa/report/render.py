"""Markdown rendering helpers with deterministic formatting.

Tables escape pipe characters and keep the caller's column order, so the same
input always renders byte-for-byte the same output.
"""
from __future__ import annotations

from typing import Any


def md_escape(s: str) -> str:
    """Escape pipe characters for safe Markdown table rendering."""
    return s.replace("|", "\\|")


def fmt_cell(value: Any, places: int = 2) -> str:
    """Render a table cell: ``-`` for missing values, trimmed floats, joined lists."""
    if value is None or value == "":
        return "-"
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return f"{value:.{places}f}"
    if isinstance(value, (list, tuple)):
        return "; ".join(str(v) for v in value) or "-"
    return str(value)


def md_table(headers: list[str], rows: list[list[Any]]) -> list[str]:
    """Render a Markdown table into a list of lines (header, separator, rows)."""
    def esc(v: Any) -> str:
        return md_escape(fmt_cell(v))

    lines: list[str] = []
    lines.append("| " + " | ".join(esc(h) for h in headers) + " |")
    lines.append("| " + " | ".join(":---" for _ in headers) + " |")
    for r in rows:
        lines.append("| " + " | ".join(esc(c) for c in r) + " |")
    return lines
