"""
Command implementations for iris-cli.
Each cmd_*() function receives an argparse.Namespace and handles one CLI command.

Business logic lives in dispatch.py and the SDK resources. These thin
wrappers handle argparse -> dispatcher input, format selection, and
formatter dispatch.
"""

import sys

from iris_cli import config
from iris_cli._utils import _mask_token
from iris_cli.client import IrisClient
from iris_cli.config import CliError, SetupError
from iris_cli.credentials import resolve_credentials
from iris_cli.dispatch import INVALID_ENDPOINT_MESSAGE
from iris_cli.formatters import (
    format_config_table,
    format_endpoints_table,
    output,
    render_result,
)

_VALUE_OPTIONS = {"--api-key": "api_key", "--user-id": "user_id"}
_FLAG_OPTIONS = {"--json": "json", "--raw": "raw"}


def _warn(message):
    if not config.RUNTIME_QUIET:
        print(f"[WARN] {message}", file=sys.stderr)


def _split_call_options(tokens):
    """Separate call options that appear after the endpoint from its params.

    Returns (options, params). Options already set on the namespace are
    overridden by later occurrences.
    """
    options = {}
    params = []
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token in _FLAG_OPTIONS:
            options[_FLAG_OPTIONS[token]] = True
        elif token in _VALUE_OPTIONS:
            if i + 1 >= len(tokens):
                raise CliError(f"[ERROR] {token} requires a value.")
            options[_VALUE_OPTIONS[token]] = tokens[i + 1]
            i += 1
        elif token.startswith("--") and token.split("=", 1)[0] in _VALUE_OPTIONS:
            flag, value = token.split("=", 1)
            options[_VALUE_OPTIONS[flag]] = value
        else:
            params.append(token)
        i += 1
    return options, params


def _output_mode(ns, options):
    raw = options.get("raw", ns.raw)
    as_json = options.get("json", ns.json) or ns.format == "json"
    if raw and as_json:
        _warn("--raw and --json both given; using --raw.")
    if raw:
        return "raw"
    if as_json:
        return "json"
    return "table"


def cmd_call(ns):
    options, params = _split_call_options(ns.params or [])
    segments = ns.endpoint.split(".")
    if len(segments) < 2 or not all(segments):
        raise CliError(INVALID_ENDPOINT_MESSAGE)
    credentials = resolve_credentials(
        api_key=options.get("api_key", ns.api_key),
        user_id=options.get("user_id", ns.user_id),
    )
    if not credentials.current_api_key():
        raise SetupError(
            "[SETUP_NEEDED] Missing API credentials. Set IRIS_API_KEY in .env or pass --api-key."
        )
    mode = _output_mode(ns, options)
    client = IrisClient(credentials)
    result = client.dispatcher().dispatch(ns.endpoint, params)
    print(render_result(result, mode))


def cmd_endpoints(ns):
    client = IrisClient(resolve_credentials())
    rows = client.registry().endpoints(ns.resource)
    output(rows, format_endpoints_table, ns.format or "table")


def _cmd_config_set(key, value):
    if not key or value is None:
        raise CliError("[ERROR] Usage: iris config set <KEY> <value>")
    if key not in config._KNOWN_ENV_KEYS:
        allowed = ", ".join(config._KNOWN_ENV_KEYS)
        raise CliError(f"[ERROR] Unknown setting '{key}'. Known settings: {allowed}")
    config.save_env_value(key, value)
    shown = _mask_token(value) if "API_KEY" in key else value
    print(f"Saved {key}={shown} to {config.ENV_PATH}")


def cmd_config(ns):
    if getattr(ns, "action", None) == "set":
        _cmd_config_set(ns.key, ns.value)
        return
    credentials = resolve_credentials()
    info = {
        "environment": config.IRIS_ENV,
        "base_url": config.BASE_URL,
        "iris_url": config.IRIS_URL,
        "fl_api_url": config.FL_API_URL,
        "api_key": _mask_token(credentials.current_api_key() or "") or None,
        "user_id": credentials.current_user_id(),
        "env_file": config._env_file_path(),
    }
    output(info, format_config_table, ns.format or "table")
