"""
HTTP request layer, security helpers, and error mapping for iris-cli.
"""

import hashlib
import json
import re
import sys
import time
import urllib.error
import urllib.parse
import urllib.request
import uuid

from iris_cli import config
from iris_cli.exceptions import (
    ApiError,
    AuthenticationError,
    CliError,
    HTTPError,
    RateLimitError,
    ValidationError,
)

_RETRYABLE_HTTP_CODES = frozenset({429, 502, 503, 504})
_IDEMPOTENT_METHODS = frozenset({"GET", "PUT", "DELETE"})

# Path fragments served by FL-API; checked before the IRIS routes because
# /users/{id}/bloqs/agents lives on FL-API.
_FL_API_FRAGMENTS = (
    "/users/",
    "/user/",
    "/leads",
    "/deliverables",
    "/profile",
    "/services",
    "/integrations",
    "/cloud-files",
    "/articles",
    "/bloqs/",
    "/programs",
    "/courses",
    "/pages",
    "/videos",
)
_IRIS_FRAGMENTS = ("/iris/", "/chat/", "/workflows/")


# ---------------------------------------------------------------------------
# Security helpers
# ---------------------------------------------------------------------------


def _sanitize_error(body, max_len=500):
    """Truncate and clean error body for safe display."""
    if not body:
        return ""
    cleaned = re.sub(r"<[^>]+>", "", body)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    if len(cleaned) > max_len:
        return cleaned[:max_len] + "... [truncated]"
    return cleaned


def _sanitize_url_for_log(url):
    """Mask sensitive query params in URLs before logging."""
    parsed = urllib.parse.urlsplit(url)
    if not parsed.query:
        return url
    pairs = urllib.parse.parse_qsl(parsed.query, keep_blank_values=True)
    masked = []
    for key, value in pairs:
        if key.lower() in {"token", "api_key", "apikey"}:
            masked.append((key, "***"))
        else:
            masked.append((key, value))
    safe_query = urllib.parse.urlencode(masked, doseq=True)
    return urllib.parse.urlunsplit(
        (parsed.scheme, parsed.netloc, parsed.path, safe_query, parsed.fragment)
    )


# ---------------------------------------------------------------------------
# HTTP request layer
# ---------------------------------------------------------------------------


def _log_http_event(**fields):
    """Emit structured HTTP logs to stderr when enabled."""
    if not config.HTTP_LOG_ENABLED:
        return
    print("[HTTP] " + json.dumps(fields, ensure_ascii=False, sort_keys=True), file=sys.stderr)


def _is_sampled_request(request_id):
    """Decide if a request should be logged based on sample rate."""
    rate = config.HTTP_LOG_SAMPLE_RATE
    if rate <= 0:
        return False
    if rate >= 1:
        return True
    if not request_id:
        return False
    digest = hashlib.sha256(request_id.encode("utf-8")).digest()
    bucket = int.from_bytes(digest[:4], "big") / 4294967295.0
    return bucket < rate


def _error_envelope(message, status=None, request_id=None, retryable=None, detail=None):
    """Build a consistent CLI-safe HTTP error message."""
    meta = []
    if status is not None:
        meta.append(f"status={status}")
    if request_id:
        meta.append(f"request_id={request_id}")
    if retryable is not None:
        meta.append(f"retryable={'yes' if retryable else 'no'}")
    suffix = f" ({', '.join(meta)})" if meta else ""
    body = f"[ERROR] {message}{suffix}"
    if detail:
        body += f"\n{detail}"
    return body


def _parse_retry_after(headers):
    """Return Retry-After seconds from response headers, or None."""
    if not headers:
        return None
    value = headers.get("Retry-After")
    if value is None:
        return None
    try:
        secs = int(str(value).strip())
    except ValueError:
        return None
    return max(0, secs)


def _encode_query(params):
    """Flatten query params the way the API's PHP backend expects them."""
    pairs = []
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            pairs.append((key, "1" if value else "0"))
        elif isinstance(value, (list, tuple)):
            pairs.extend((f"{key}[]", str(item)) for item in value)
        elif isinstance(value, dict):
            pairs.extend((f"{key}[{sub}]", str(item)) for sub, item in value.items())
        else:
            pairs.append((key, str(value)))
    return urllib.parse.urlencode(pairs)


def _http_request(url, data=None, headers=None, method="POST", idempotent=False):
    """Make an HTTP request with standard error handling.
    Returns parsed JSON on success (None for an empty body).
    Raises HTTPError for HTTP errors (caller maps specific codes).
    Raises CliError on network/timeout/parse errors."""
    body = json.dumps(data).encode("utf-8") if data is not None else None
    request_id = (headers or {}).get("X-Request-Id")
    safe_url = _sanitize_url_for_log(url)
    sampled = _is_sampled_request(request_id)
    max_attempts = 1 + max(0, config.HTTP_MAX_RETRIES if idempotent else 0)
    timeout = max(1, config.HTTP_TIMEOUT_SECONDS)
    last_timeout = False
    last_url_error = None

    for attempt in range(max_attempts):
        start = time.perf_counter()
        req = urllib.request.Request(url, data=body, headers=headers or {}, method=method)
        if sampled:
            _log_http_event(
                phase="request",
                method=method,
                url=safe_url,
                attempt=attempt + 1,
                max_attempts=max_attempts,
                idempotent=idempotent,
                request_id=request_id,
                timeout_seconds=timeout,
            )
        try:
            with urllib.request.urlopen(req, timeout=timeout) as resp:
                content_type = resp.headers.get("Content-Type", "")
                raw = resp.read(config.HTTP_MAX_RESPONSE_BYTES + 1)
                if len(raw) > config.HTTP_MAX_RESPONSE_BYTES:
                    raise CliError(
                        "[ERROR] Response too large from IRIS API "
                        f"(>{config.HTTP_MAX_RESPONSE_BYTES} bytes)."
                    )
                if sampled:
                    _log_http_event(
                        phase="response",
                        method=method,
                        url=safe_url,
                        attempt=attempt + 1,
                        status=getattr(resp, "status", 200),
                        content_type=content_type,
                        bytes=len(raw),
                        latency_ms=round((time.perf_counter() - start) * 1000, 2),
                        request_id=request_id,
                    )
                if not raw.strip():
                    return None
                try:
                    return json.loads(raw.decode("utf-8"))
                except (json.JSONDecodeError, UnicodeDecodeError):
                    if content_type and "json" not in content_type.lower():
                        raise CliError(
                            f"[ERROR] Unexpected Content-Type from server "
                            f"({content_type}). This may be a proxy or "
                            "network issue."
                        ) from None
                    raise CliError(
                        "[ERROR] Unexpected response from IRIS API (not valid JSON)."
                    ) from None
        except urllib.error.HTTPError as e:
            error_body = (
                e.read(config.HTTP_MAX_RESPONSE_BYTES).decode("utf-8", errors="replace")
                if e.fp
                else ""
            )
            retryable = e.code in _RETRYABLE_HTTP_CODES
            can_retry = idempotent and attempt < max_attempts - 1 and retryable
            if sampled:
                _log_http_event(
                    phase="response",
                    method=method,
                    url=safe_url,
                    attempt=attempt + 1,
                    status=e.code,
                    retryable=retryable,
                    will_retry=can_retry,
                    latency_ms=round((time.perf_counter() - start) * 1000, 2),
                    request_id=request_id,
                )
            if can_retry:
                retry_after = _parse_retry_after(getattr(e, "headers", None))
                if retry_after is None:
                    retry_after = config.HTTP_RETRY_BASE_SECONDS * (2**attempt)
                time.sleep(retry_after)
                continue
            raise HTTPError(e.code, e.reason, error_body, headers=e.headers) from e
        except TimeoutError as e:
            last_timeout = True
            if sampled:
                _log_http_event(
                    phase="network_error",
                    method=method,
                    url=safe_url,
                    attempt=attempt + 1,
                    error="timeout",
                    will_retry=idempotent and attempt < max_attempts - 1,
                    request_id=request_id,
                )
            if idempotent and attempt < max_attempts - 1:
                time.sleep(config.HTTP_RETRY_BASE_SECONDS * (2**attempt))
                continue
            raise CliError(
                _error_envelope(
                    f"Request timed out after {timeout} seconds. Is the IRIS API reachable?",
                    request_id=request_id,
                    retryable=False,
                )
            ) from e
        except urllib.error.URLError as e:
            last_url_error = e.reason
            if sampled:
                _log_http_event(
                    phase="network_error",
                    method=method,
                    url=safe_url,
                    attempt=attempt + 1,
                    error=f"url_error: {e.reason}",
                    will_retry=idempotent and attempt < max_attempts - 1,
                    request_id=request_id,
                )
            if idempotent and attempt < max_attempts - 1:
                time.sleep(config.HTTP_RETRY_BASE_SECONDS * (2**attempt))
                continue
            raise CliError(
                _error_envelope(
                    f"Connection failed: {e.reason}",
                    request_id=request_id,
                    retryable=False,
                )
            ) from e

    if last_timeout:
        raise CliError(
            _error_envelope(
                f"Request timed out after {timeout} seconds. Is the IRIS API reachable?",
                request_id=request_id,
                retryable=False,
            )
        )
    if last_url_error is not None:
        raise CliError(
            _error_envelope(
                f"Connection failed: {last_url_error}",
                request_id=request_id,
                retryable=False,
            )
        )
    raise CliError(_error_envelope("Request failed.", request_id=request_id))


def _api_error_from_http(e):
    """Map an HTTPError to the ApiError subclass for its status code."""
    try:
        payload = json.loads(e.body) if e.body else {}
    except json.JSONDecodeError:
        payload = {}
    if not isinstance(payload, dict):
        payload = {}
    message = payload.get("message") or payload.get("error") or e.reason
    if not isinstance(message, str):
        message = json.dumps(message, ensure_ascii=False)
    errors = payload.get("errors")
    server_req_id = e.headers.get("X-Request-Id") if e.headers else None

    if e.code in (401, 403):
        return AuthenticationError(
            f"[SETUP_NEEDED] Authentication failed (HTTP {e.code}): {message}. "
            "Check IRIS_API_KEY or pass --api-key.",
            status=e.code,
            request_id=server_req_id,
        )
    if e.code == 422:
        return ValidationError(
            f"[ERROR] Validation failed: {message}",
            status=e.code,
            errors=errors,
            request_id=server_req_id,
        )
    if e.code == 429:
        retry_after = _parse_retry_after(e.headers)
        return RateLimitError(
            "[ERROR] Rate limit exceeded. Wait a few seconds and retry.",
            retry_after=60 if retry_after is None else retry_after,
            request_id=server_req_id,
        )
    label = "Server error" if e.code >= 500 else f"HTTP {e.code}: {e.reason}"
    return ApiError(
        _error_envelope(
            label,
            status=e.code,
            request_id=server_req_id,
            retryable=e.code in _RETRYABLE_HTTP_CODES,
            detail=_sanitize_error(message if payload else e.body),
        ),
        status=e.code,
        errors=errors,
        request_id=server_req_id,
    )


class HttpTransport:
    """Authenticated JSON transport for the IRIS APIs.

    Routes each path to FL-API, the IRIS API, or the base API, sends the
    bearer token, and unwraps ``{"data": ...}`` envelopes.
    """

    def __init__(self, credentials, base_url=None, iris_url=None, fl_api_url=None):
        self.credentials = credentials
        self.base_url = (base_url or config.BASE_URL).rstrip("/")
        self.iris_url = (iris_url or config.IRIS_URL).rstrip("/")
        self.fl_api_url = (fl_api_url or config.FL_API_URL).rstrip("/")

    def build_url(self, path):
        if any(fragment in path for fragment in _FL_API_FRAGMENTS):
            root = self.fl_api_url
        elif any(fragment in path for fragment in _IRIS_FRAGMENTS):
            root = self.iris_url
        else:
            root = self.base_url
        return root + "/" + path.lstrip("/")

    def _headers(self):
        return {
            "Authorization": f"Bearer {self.credentials.require_api_key()}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": config.USER_AGENT,
            "X-Request-Id": str(uuid.uuid4()),
        }

    def request(self, method, path, params=None, data=None):
        url = self.build_url(path)
        query_string = _encode_query(params)
        if query_string:
            url += ("&" if "?" in url else "?") + query_string
        try:
            result = _http_request(
                url,
                data,
                self._headers(),
                method,
                idempotent=method in _IDEMPOTENT_METHODS,
            )
        except HTTPError as e:
            raise _api_error_from_http(e) from e
        if result is None:
            return {"success": True}
        if isinstance(result, dict) and "data" in result:
            return result["data"]
        return result

    def get(self, path, params=None):
        return self.request("GET", path, params=params)

    def post(self, path, data=None):
        return self.request("POST", path, data=data if data is not None else {})

    def put(self, path, data=None):
        return self.request("PUT", path, data=data if data is not None else {})

    def patch(self, path, data=None):
        return self.request("PATCH", path, data=data if data is not None else {})

    def delete(self, path):
        return self.request("DELETE", path)
