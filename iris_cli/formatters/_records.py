"""Formatters for API records: tables, detail views, and listings."""

import re

from iris_cli.formatters._table import _auto_columns, _sanitize_str, _table, format_value

# Columns beyond this switch list output to the compact per-record view.
MAX_TABLE_COLUMNS = 10

SPECIAL_FIELDS = ("notes", "tasks", "deliverables", "activities")
_HIDDEN_SECTION_KEYS = frozenset({"metadata", "activity_data", "lead_id"})

KEY_FIELDS = (
    "id",
    "title",
    "name",
    "nickname",
    "email",
    "status",
    "type",
    "lead_type",
    "company",
    "phone",
    "url",
    "external_url",
    "note_count",
    "tasks_count",
    "contact_info",
    "updated_at",
    "created_at",
)

_DECORATION_RE = re.compile("[\u2500-\u257f\u2580-\u259f\u25a0-\u25ff]")
_DIVIDER_RE = re.compile(r"[=\-_]{10,}")
_BLANK_RUN_RE = re.compile(r"\n{3,}")


def select_key_fields(record, limit=10):
    """Pick the summary fields present in a record, in priority order."""
    return [f for f in KEY_FIELDS if f in record][:limit]


def clean_decorative_formatting(text):
    """Strip box drawing and divider runs from free text."""
    text = _DECORATION_RE.sub("", text)
    text = _DIVIDER_RE.sub("", text)
    text = _BLANK_RUN_RE.sub("\n\n", text)
    return "\n".join(line.strip() for line in text.split("\n")).strip()


def format_records_table(records):
    """Format a list of dict records as a table keyed on the first record."""
    if not records:
        return "No results found"
    if len(records[0]) > MAX_TABLE_COLUMNS:
        return format_compact_list(records)
    headers = [str(k) for k in records[0]]
    rows = [
        tuple(format_value(r.get(k) if isinstance(r, dict) else None) for k in records[0])
        for r in records
    ]
    return _table(_auto_columns(headers, rows), rows)


def _compact_header(record):
    parts = []
    if record.get("id") is not None:
        parts.append(f"#{record['id']}")
    name = record.get("name") or record.get("title") or record.get("nickname")
    if name:
        parts.append(format_value(name, 50))
    if record.get("status") is not None:
        parts.append(str(record["status"]))
    return "  " + " | ".join(parts)


def format_compact_list(records):
    """One block per record showing only its key fields."""
    fields = select_key_fields(records[0])
    lines = ["", "=" * 66]
    for index, record in enumerate(records):
        lines.append(_compact_header(record))
        for field in fields:
            value = record.get(field)
            if value is None or value == "":
                continue
            lines.append(f"    {field}: {format_value(value, 100)}")
        if index < len(records) - 1:
            lines.append("  " + "-" * 62)
    lines.append("=" * 66)
    lines.append(f"Total: {len(records)} items")
    lines.append("Tip: use --json for full data")
    return "\n".join(lines)


def format_special_section(name, items):
    lines = ["", f"=== {name} ({len(items)} items) ===", ""]
    for index, item in enumerate(items):
        lines.append(f"-- #{index + 1} --")
        if isinstance(item, dict):
            for key, value in item.items():
                if key == "content" and isinstance(value, str):
                    lines.append(f"{key}:")
                    lines.append(_sanitize_str(clean_decorative_formatting(value)))
                elif key not in _HIDDEN_SECTION_KEYS:
                    lines.append(f"{key}: {format_value(value, 100)}")
        else:
            lines.append(format_value(item, 200))
        if index < len(items) - 1:
            lines.append("")
    return "\n".join(lines)


def format_record(record):
    """Key/Value view of one record; note-like lists become sections."""
    if not record:
        return "No results found"
    regular = []
    sections = []
    for key, value in record.items():
        if key in SPECIAL_FIELDS and isinstance(value, list) and value:
            sections.append(format_special_section(key, value))
        else:
            regular.append((str(key), format_value(value, 80)))
    parts = []
    if regular:
        width = min(max(len(k) for k, _ in regular), 30)
        parts.append(_table([("Key", width), ("Value", 0)], regular))
    parts.extend(sections)
    return "\n".join(parts)


def format_listing(items):
    return "\n".join(f" * {format_value(item, 200)}" for item in items)


def format_endpoints_table(endpoints):
    """Format ResourceRegistry.endpoints() rows."""
    if not endpoints:
        return "No endpoints found."
    cols = [("Endpoint", 36), ("Signature", 48), ("Description", 0)]
    rows = [(e["endpoint"], e["signature"], e.get("doc", "")) for e in endpoints]
    return _table(cols, rows, f"Total: {len(endpoints)} endpoints")


def format_config_table(info):
    rows = [(k, format_value(v, 80)) for k, v in info.items()]
    return _table([("Setting", 16), ("Value", 0)], rows)
