"""Low-level table rendering helpers (stdlib only)."""

import json
import re

_CONTROL_RE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]|[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def _trunc(s, maxlen):
    """Truncate string with ellipsis indicator."""
    if not s:
        return ""
    return s[: maxlen - 3] + "..." if len(s) > maxlen else s


def _sanitize_str(s):
    """Strip ANSI escape sequences and control chars from table output.
    Preserves newlines (\\n) and tabs (\\t)."""
    if not s:
        return s
    return _CONTROL_RE.sub("", str(s))


def format_value(value, max_length=50):
    """Render one cell value: JSON for short containers, a count otherwise."""
    if isinstance(value, (dict, list, tuple)):
        if not value:
            return "[]"
        encoded = json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)
        if len(encoded) <= max_length:
            return encoded
        return f"[Array: {len(value)} items]"
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return _trunc(str(value), max_length)


def _table(columns, rows, footer=None):
    """Build a formatted table string.
    columns: list of (name, width) tuples. Last column has no width (fills).
    rows: list of tuples matching columns.
    footer: optional footer line."""
    parts = []
    for i, (name, width) in enumerate(columns):
        if i == len(columns) - 1:
            parts.append(name)
        else:
            parts.append(f"{name:<{width}}")
    header = " ".join(parts)
    sep = "-" * max(len(header), 40)
    lines = [header, sep]
    for row in rows:
        parts = []
        for i, val in enumerate(row):
            safe = _sanitize_str(val) if isinstance(val, str) else str(val)
            if i == len(columns) - 1:
                parts.append(safe)
            else:
                parts.append(f"{safe:<{columns[i][1]}}")
        lines.append(" ".join(parts).rstrip())
    if footer:
        lines.append(f"\n{footer}")
    return "\n".join(lines)


def _auto_columns(headers, rows, max_width=50):
    """Size each column to its widest cell, capped at max_width."""
    columns = []
    for i, name in enumerate(headers):
        widest = max([len(name)] + [len(str(row[i])) for row in rows])
        columns.append((name, min(widest, max_width)))
    return columns
