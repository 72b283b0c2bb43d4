"""Output formatting package for iris-cli.

Re-exports all public names so consumers can do:
    from iris_cli.formatters import render_result
"""

from iris_cli.formatters._core import (
    format_result_table,
    normalize_result,
    output,
    pretty_print,
    render_result,
)
from iris_cli.formatters._records import (
    clean_decorative_formatting,
    format_compact_list,
    format_config_table,
    format_endpoints_table,
    format_listing,
    format_record,
    format_records_table,
    format_special_section,
    select_key_fields,
)
from iris_cli.formatters._table import (
    _CONTROL_RE,
    _sanitize_str,
    _table,
    _trunc,
    format_value,
)

__all__ = [
    "_CONTROL_RE",
    "_sanitize_str",
    "_table",
    "_trunc",
    "clean_decorative_formatting",
    "format_compact_list",
    "format_config_table",
    "format_endpoints_table",
    "format_listing",
    "format_record",
    "format_records_table",
    "format_result_table",
    "format_special_section",
    "format_value",
    "normalize_result",
    "output",
    "pretty_print",
    "render_result",
    "select_key_fields",
]
