"""
iris-cli shared configuration, constants, and module-level state.
Standalone module — no imports from other project files except exceptions.
"""

import os
import tempfile
from dataclasses import dataclass, field
from types import MappingProxyType

from iris_cli.exceptions import CliError, SetupError  # noqa: F401  (re-export)

# ---------------------------------------------------------------------------
# .env path and helpers
# ---------------------------------------------------------------------------

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))
_PROJECT_ROOT = os.path.dirname(_PACKAGE_DIR)

ENV_PATH = os.path.join(_PROJECT_ROOT, ".env")

# Keys that may also come from the process environment (override .env).
_KNOWN_ENV_KEYS = (
    "IRIS_ENV",
    "IRIS_API_KEY",
    "IRIS_PROD_API_KEY",
    "IRIS_LOCAL_API_KEY",
    "IRIS_USER_ID",
    "IRIS_API_URL",
    "IRIS_URL",
    "FL_API_URL",
    "IRIS_LOCAL_URL",
    "FL_API_LOCAL_URL",
    "IRIS_HTTP_TIMEOUT_SECONDS",
    "IRIS_HTTP_MAX_RETRIES",
    "IRIS_HTTP_RETRY_BASE_SECONDS",
    "IRIS_HTTP_MAX_RESPONSE_BYTES",
    "IRIS_HTTP_LOG",
    "IRIS_HTTP_LOG_SAMPLE_RATE",
    "IRIS_MCP_RESPONSE_MODE",
)


def _env_file_path():
    """Return the first existing .env: package root, then the working directory."""
    for path in (ENV_PATH, os.path.join(os.getcwd(), ".env")):
        if os.path.exists(path):
            return path
    return ENV_PATH


def load_env():
    env = {}
    path = _env_file_path()
    if os.path.exists(path):
        with open(path) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, val = line.split("=", 1)
                    env[key.strip()] = val.strip()
    for key in _KNOWN_ENV_KEYS:
        value = os.environ.get(key)
        if value:
            env[key] = value
    return env


def save_env_value(key, value):
    """Update or add a key in the .env file (atomic write-then-rename)."""
    lines = []
    found = False
    if os.path.exists(ENV_PATH):
        with open(ENV_PATH) as f:
            lines = f.readlines()
    for i, line in enumerate(lines):
        if line.strip().startswith(f"{key}="):
            lines[i] = f"{key}={value}\n"
            found = True
            break
    if not found:
        lines.append(f"{key}={value}\n")
    env_dir = os.path.dirname(ENV_PATH) or "."
    fd, tmp_path = tempfile.mkstemp(dir=env_dir, prefix=".env_tmp_")
    try:
        with os.fdopen(fd, "w") as f:
            f.writelines(lines)
        os.replace(tmp_path, ENV_PATH)
    except Exception:
        try:
            os.remove(tmp_path)
        except OSError:
            pass
        raise
    # Restrict to owner-only on Unix/Mac. No-op on Windows.
    try:
        os.chmod(ENV_PATH, 0o600)
    except (OSError, NotImplementedError):
        pass


def _env_bool(key, default=False):
    """Parse common boolean env formats."""
    raw = env.get(key)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(key, default):
    """Parse integer env values with fallback."""
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(key, default):
    """Parse float env values with fallback."""
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_user_id():
    raw = env.get("IRIS_USER_ID", "")
    try:
        return int(raw) if raw else None
    except ValueError:
        return None


def resolve_environment(values):
    """Pick API key and URLs for IRIS_ENV (production or local).

    Returns a dict with api_key, base_url, iris_url, fl_api_url.
    """
    environment = values.get("IRIS_ENV") or "production"
    if environment == "local":
        api_key = values.get("IRIS_LOCAL_API_KEY") or values.get("IRIS_API_KEY", "")
        local_url = values.get("IRIS_LOCAL_URL", "https://local.iris.freelabel.net")
        return {
            "environment": environment,
            "api_key": api_key,
            "base_url": local_url.rstrip("/"),
            "iris_url": local_url.rstrip("/"),
            "fl_api_url": values.get(
                "FL_API_LOCAL_URL", "https://local.raichu.freelabel.net"
            ).rstrip("/"),
        }
    api_key = (
        values.get("IRIS_PROD_API_KEY")
        or values.get("IRIS_API_KEY")
        or ""
    )
    base_url = values.get("IRIS_API_URL", "https://apiv2.heyiris.io")
    return {
        "environment": environment,
        "api_key": api_key,
        "base_url": base_url.rstrip("/"),
        "iris_url": values.get("IRIS_URL", "https://heyiris.io").rstrip("/"),
        "fl_api_url": values.get("FL_API_URL", base_url).rstrip("/"),
    }


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

VERSION = "0.3.0"
CONTRACT_SCHEMA_VERSION = "1.0"
USER_AGENT = f"iris-cli/{VERSION}"

# Endpoint -> {alias: canonical} for named CLI arguments.
PARAMETER_ALIASES = MappingProxyType(
    {
        "leads.list": MappingProxyType({"query": "search"}),
        "leads.search": MappingProxyType({"query": "search"}),
        "leads.list_for_user": MappingProxyType({"query": "search"}),
    }
)

# Endpoints that search across every tenant and must never be scoped to the
# caller's user id (an ownerless lead becomes invisible once scoped).
GLOBAL_ENDPOINTS = frozenset(
    {
        "leads.search",
        "leads.aggregation.list",
        "leads.aggregation.get_recent_leads",
        "leads.aggregation.statistics",
    }
)

# Short CLI names -> formal parameter names they may stand for.
SHORT_PARAM_NAMES = MappingProxyType(
    {
        "id": ("agentId", "leadId", "bloqId", "userId", "noteId", "taskId", "id"),
        "agent": ("agentId", "agent_id"),
        "lead": ("leadId", "lead_id"),
        "bloq": ("bloqId", "bloq_id"),
        "user": ("userId", "user_id"),
    }
)

# Endpoints whose named arguments go to an alternate method taking one dict.
DICT_ENTRYPOINTS = MappingProxyType({"agents.create": "create_from_dict"})


@dataclass(frozen=True)
class DispatchPolicy:
    """Immutable tables that steer the dynamic dispatcher."""

    aliases: MappingProxyType = field(default_factory=lambda: PARAMETER_ALIASES)
    global_endpoints: frozenset = field(default_factory=lambda: GLOBAL_ENDPOINTS)
    short_names: MappingProxyType = field(default_factory=lambda: SHORT_PARAM_NAMES)
    dict_entrypoints: MappingProxyType = field(default_factory=lambda: DICT_ENTRYPOINTS)
    strict_subresources: bool = False


# ---------------------------------------------------------------------------
# Module-level state (loaded from .env and the environment)
# ---------------------------------------------------------------------------

env = load_env()

_resolved = resolve_environment(env)

IRIS_ENV = _resolved["environment"]
API_KEY = _resolved["api_key"]
USER_ID = _env_user_id()
BASE_URL = _resolved["base_url"]
IRIS_URL = _resolved["iris_url"]
FL_API_URL = _resolved["fl_api_url"]
HTTP_TIMEOUT_SECONDS = _env_int("IRIS_HTTP_TIMEOUT_SECONDS", 30)
HTTP_MAX_RETRIES = _env_int("IRIS_HTTP_MAX_RETRIES", 2)
HTTP_RETRY_BASE_SECONDS = _env_float("IRIS_HTTP_RETRY_BASE_SECONDS", 1.0)
HTTP_MAX_RESPONSE_BYTES = _env_int("IRIS_HTTP_MAX_RESPONSE_BYTES", 5_000_000)
HTTP_LOG_ENABLED = _env_bool("IRIS_HTTP_LOG", False)
HTTP_LOG_SAMPLE_RATE = min(1.0, max(0.0, _env_float("IRIS_HTTP_LOG_SAMPLE_RATE", 1.0)))
MCP_RESPONSE_MODE = env.get("IRIS_MCP_RESPONSE_MODE", "legacy")

# ---------------------------------------------------------------------------
# Runtime flags (set by cli.main)
# ---------------------------------------------------------------------------

RUNTIME_STRICT = False
RUNTIME_QUIET = False
RUNTIME_VERBOSE = False
