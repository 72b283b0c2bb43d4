"""Core output dispatchers and result normalisation."""

import dataclasses
import json
import pprint
from collections.abc import Mapping

from iris_cli.formatters._records import format_listing, format_record, format_records_table
from iris_cli.formatters._table import format_value


def normalize_result(value):
    """Convert SDK return values into JSON-compatible data."""
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict) and not isinstance(value, type):
        return normalize_result(to_dict())
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return normalize_result(dataclasses.asdict(value))
    if isinstance(value, Mapping):
        return {str(k): normalize_result(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [normalize_result(v) for v in value]
    return value


def pretty_print(data):
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def format_result_table(value):
    """Pick a human-readable view for any normalised result."""
    if value is None or value == [] or value == {}:
        return "No results found"
    if isinstance(value, list):
        if isinstance(value[0], dict):
            return format_records_table(value)
        return format_listing(value)
    if isinstance(value, dict):
        return format_record(value)
    if isinstance(value, str):
        return value
    return format_value(value, 10_000)


def render_result(value, mode="table"):
    """Render a call result as ``json``, ``raw`` or ``table`` text."""
    if mode == "raw":
        if isinstance(value, str):
            return value
        return pprint.pformat(value, sort_dicts=False)
    normalized = normalize_result(value)
    if mode == "json":
        return json.dumps(normalized, indent=2, ensure_ascii=False, default=str)
    return format_result_table(normalized)


def output(data, formatter=None, fmt="json"):
    """Output data in requested format."""
    if fmt == "table" and formatter:
        print(formatter(data))
    else:
        pretty_print(data)
