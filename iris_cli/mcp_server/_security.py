"""Security: injection detection, output tagging, input validation."""

from __future__ import annotations

import re

from iris_cli import CliError

_INJECTION_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (
        re.compile(r"^(system|assistant|user)\s*:", re.IGNORECASE | re.MULTILINE),
        "role label",
    ),
    (
        re.compile(
            r"<\s*/?\s*(system|instruction|admin|prompt|tool_call|function_call)",
            re.IGNORECASE,
        ),
        "XML-like directive tag",
    ),
    (
        re.compile(
            r"ignore\s+(all\s+)?(previous|prior|above)\s+(instructions|prompts|rules)",
            re.IGNORECASE,
        ),
        "override directive",
    ),
    (
        re.compile(
            r"(execute|call|invoke|run)\s+the\s+(tool|function|command)",
            re.IGNORECASE,
        ),
        "tool invocation directive",
    ),
]

# Free-text fields written by leads, customers, or other users.
_USER_TEXT_FIELDS = frozenset({"title", "name", "content", "message", "description", "note"})


def _check_injection(text: str) -> list[str]:
    """Check text for common prompt injection patterns.

    Returns list of matched pattern descriptions (empty if clean).
    Short strings (< 10 chars) are skipped.
    """
    if len(text) < 10:
        return []
    return [desc for pattern, desc in _INJECTION_PATTERNS if pattern.search(text)]


def _tag_user_text(text: str | None) -> str | None:
    """Wrap user-authored text in [USER_DATA] boundary markers."""
    if text is None:
        return None
    return f"[USER_DATA]{text}[/USER_DATA]"


def _sanitize_value(value, warnings, path):
    if isinstance(value, dict):
        out = {}
        for key, item in value.items():
            child = f"{path}.{key}" if path else str(key)
            if key in _USER_TEXT_FIELDS and isinstance(item, str):
                for desc in _check_injection(item):
                    warnings.append(f"{child}: {desc}")
                out[key] = _tag_user_text(item)
            else:
                out[key] = _sanitize_value(item, warnings, child)
        return out
    if isinstance(value, list):
        return [_sanitize_value(item, warnings, f"{path}[{i}]") for i, item in enumerate(value)]
    return value


def _sanitize_result(result):
    """Tag user-editable text anywhere in a result; flag injection attempts."""
    warnings: list[str] = []
    out = _sanitize_value(result, warnings, "")
    if warnings and isinstance(out, dict):
        out["_safety_warnings"] = warnings
    elif warnings:
        out = {"items": out, "_safety_warnings": warnings}
    return out


_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_INPUT_LIMITS = {
    "endpoint": 200,
    "param": 50_000,
}


def _validate_input(text: str, field: str) -> str:
    """Strip control characters and enforce length limits.

    Raises CliError if text is not a string or exceeds the field limit.
    """
    if not isinstance(text, str):
        raise CliError(f"[ERROR] {field} must be a string")
    cleaned = _CONTROL_RE.sub("", text)
    limit = _INPUT_LIMITS.get(field, 50_000)
    if len(cleaned) > limit:
        raise CliError(f"[ERROR] {field} exceeds maximum length of {limit} characters")
    return cleaned
