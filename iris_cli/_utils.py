"""
Shared pure-utility functions for iris-cli.

These helpers have no business logic and no side effects.
They are used across dispatch.py, registry.py, api.py, and formatters.
"""

import re

_CAMEL_BOUNDARY_RE = re.compile(r"([A-Z])")


def _mask_token(token):
    """Show only first 6 chars of a token for safe logging."""
    if not token:
        return ""
    return token[:6] + "..." if len(token) > 6 else token


def snake_case(name):
    """Transliterate camelCase to snake_case ("leadId" -> "lead_id")."""
    if not name:
        return name
    return _CAMEL_BOUNDARY_RE.sub(r"_\1", name).lower().lstrip("_")


def camel_case(name):
    """Transliterate snake_case to camelCase ("lead_id" -> "leadId")."""
    if not name or "_" not in name:
        return name
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def normalize_endpoint(endpoint):
    """Snake-case every segment of a dotted endpoint for table lookups."""
    return ".".join(snake_case(part) for part in (endpoint or "").split("."))
