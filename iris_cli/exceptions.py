"""
iris-cli exception hierarchy.

All custom exceptions live here to avoid circular imports.
"""

import json


class CliError(Exception):
    """Exit code 1 — validation, not-found, network, parse errors."""

    exit_code = 1


class SetupError(CliError):
    """Exit code 2 — missing credentials, no config."""

    exit_code = 2


class HTTPError(Exception):
    """Raised by _http_request for HTTP errors that callers want to handle."""

    def __init__(self, code, reason, body, headers=None):
        self.code = code
        self.reason = reason
        self.body = body
        self.headers = headers or {}


# ---------------------------------------------------------------------------
# API errors (raised by the transport after mapping HTTP status codes)
# ---------------------------------------------------------------------------


class ApiError(CliError):
    """Error response from the IRIS API."""

    def __init__(self, message, status=None, errors=None, request_id=None):
        super().__init__(message)
        self.status = status
        self.errors = errors
        self.request_id = request_id

    def formatted_message(self):
        message = str(self)
        if self.request_id:
            message += f" (Request ID: {self.request_id})"
        if self.errors:
            message += "\nErrors: " + json.dumps(self.errors, indent=2, ensure_ascii=False)
        return message


class AuthenticationError(ApiError):
    """401/403 — the API key was rejected."""

    exit_code = 2


class ValidationError(ApiError):
    """422 — the API rejected the payload."""

    def field_errors(self, field):
        if not isinstance(self.errors, dict):
            return []
        return list(self.errors.get(field) or [])

    def error_fields(self):
        if not isinstance(self.errors, dict):
            return []
        return list(self.errors.keys())


class RateLimitError(ApiError):
    """429 — too many requests."""

    def __init__(self, message, retry_after=60, **kwargs):
        super().__init__(message, status=429, **kwargs)
        self.retry_after = retry_after


# ---------------------------------------------------------------------------
# Dispatcher errors
# ---------------------------------------------------------------------------


class ResolutionError(CliError):
    """Unknown resource, sub-resource, or method in an endpoint path."""

    def __init__(self, message, segment=None):
        super().__init__(message)
        self.segment = segment


class MissingRequiredArgument(CliError):
    """A required parameter could not be bound from the supplied arguments."""

    def __init__(self, parameter, method, supplied):
        self.parameter = parameter
        self.method = method
        self.supplied = list(supplied)
        supplied_str = ", ".join(self.supplied) if self.supplied else "none"
        super().__init__(
            f"[ERROR] Missing required parameter '{parameter}' for method '{method}'. "
            f"Provided parameters: {supplied_str}. "
            "Use the exact parameter name or check the method signature."
        )
