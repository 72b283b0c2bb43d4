"""
iris-cli — command line client for the IRIS platform SDK
"""

import argparse
import json
import sys
import traceback

from iris_cli import config
from iris_cli.commands import cmd_call, cmd_config, cmd_endpoints
from iris_cli.exceptions import CliError

HELP_TEXT = """\
Usage: iris <command> [args...]

Global flags:
  --format json|table     Output format for endpoints/config (call: see --json)
  --strict                Fail fast when a sub-resource accessor is missing arguments
  --quiet, -q             Suppress warnings
  --verbose, -v           Log HTTP requests and dispatcher decisions to stderr
  --version               Show version number

Commands:
  call <resource.method> [args...]   - Call any SDK method (alias: sdk:call)
    key=value               Named argument (true/false/null, numbers, JSON,
                            @file are converted)
    value                   Positional argument, bound in signature order
    --json                  Output JSON
    --raw                   Output the raw result
    --api-key <key>         Override IRIS_API_KEY
    --user-id <id>          Override IRIS_USER_ID
  endpoints [resource]    - List callable endpoints and their signatures
  config                  - Show active environment, URLs and credentials
  config set <KEY> <value> - Save a setting (e.g. IRIS_USER_ID) to .env
  version                 - Show version number

Examples:
  iris call leads.list search="Tha Juan"
  iris call leads.get 412
  iris call leads.notes.create 412 content="Called back, wants a quote"
  iris call leads.aggregation.getRecentLeads limit=5 --json
  iris call agents.chat 7 '[{"role":"user","content":"hi"}]'
"""


# ---------------------------------------------------------------------------
# Global flag extraction (before argparse, so flags work after the subcommand)
# ---------------------------------------------------------------------------


def _extract_global_flags(argv):
    """Extract global flags from argv regardless of position.

    Returns (format_str, strict, quiet, verbose, remaining_argv).
    Handles --version directly.
    """
    fmt = None
    strict = False
    quiet = False
    verbose = False
    remaining = []
    i = 0
    while i < len(argv):
        if argv[i] == "--version":
            print(f"iris-cli {config.VERSION}")
            sys.exit(0)
        elif argv[i] == "--strict":
            strict = True
            i += 1
            continue
        elif argv[i] in ("--quiet", "-q"):
            quiet = True
            i += 1
            continue
        elif argv[i] in ("--verbose", "-v"):
            verbose = True
            i += 1
            continue
        elif argv[i] == "--format" and i + 1 < len(argv):
            fmt = argv[i + 1]
            if fmt not in ("json", "table"):
                raise CliError(f"[ERROR] Invalid format '{fmt}'. Use: json, table")
            i += 2
            continue
        else:
            remaining.append(argv[i])
        i += 1
    if quiet and verbose:
        raise CliError("[ERROR] --quiet and --verbose are mutually exclusive.")
    return fmt, strict, quiet, verbose, remaining


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


class _SubcommandParser(argparse.ArgumentParser):
    """Subparser that raises CliError instead of printing full help text."""

    def error(self, message):
        raise CliError(f"[ERROR] {message}")


def build_parser():
    parser = _SubcommandParser(
        prog="iris",
        description="Command line client for the IRIS platform SDK",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    parser.add_argument("--help", "-h", action="store_true", dest="show_help")
    sub = parser.add_subparsers(dest="command", parser_class=_SubcommandParser)

    # --- call ---
    p = sub.add_parser("call", aliases=["sdk:call"])
    p.add_argument("--json", action="store_true")
    p.add_argument("--raw", action="store_true")
    p.add_argument("--api-key", dest="api_key")
    p.add_argument("--user-id", dest="user_id")
    p.add_argument("endpoint")
    p.add_argument("params", nargs=argparse.REMAINDER)
    p.set_defaults(func=cmd_call)

    # --- endpoints ---
    p = sub.add_parser("endpoints")
    p.add_argument("resource", nargs="?")
    p.set_defaults(func=cmd_endpoints)

    # --- config ---
    p = sub.add_parser("config")
    p.add_argument("action", nargs="?", choices=["set"])
    p.add_argument("key", nargs="?")
    p.add_argument("value", nargs="?")
    p.set_defaults(func=cmd_config)

    # --- version (bare word) ---
    sub.add_parser("version").set_defaults(func=None)

    return parser


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------


def _error_type_from_message(message):
    if message.startswith("[TOKEN_EXPIRED]"):
        return "token_expired"
    if message.startswith("[SETUP_NEEDED]"):
        return "setup_needed"
    if message.startswith("[ERROR]"):
        return "error"
    return "cli_error"


def _emit_cli_error(err, fmt):
    msg = str(err)
    if fmt == "json":
        payload = {
            "ok": False,
            "schema_version": config.CONTRACT_SCHEMA_VERSION,
            "error": {
                "type": _error_type_from_message(msg),
                "message": msg,
                "exit_code": getattr(err, "exit_code", 1),
            },
        }
        print(json.dumps(payload, ensure_ascii=False), file=sys.stderr)
        return
    formatted = getattr(err, "formatted_message", None)
    print(formatted() if callable(formatted) else msg, file=sys.stderr)


def _wants_json(ns, fmt):
    if fmt == "json":
        return True
    if getattr(ns, "json", False):
        return True
    return "--json" in (getattr(ns, "params", None) or [])


def main():
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")

    if len(sys.argv) < 2:
        print(HELP_TEXT)
        sys.exit(0)

    ns = None
    fmt = None
    try:
        # Extract global flags from anywhere in argv
        fmt, strict, quiet, verbose, remaining_argv = _extract_global_flags(sys.argv[1:])
        config.RUNTIME_STRICT = strict
        config.RUNTIME_QUIET = quiet
        config.RUNTIME_VERBOSE = verbose
        if verbose:
            config.HTTP_LOG_ENABLED = True

        if not remaining_argv:
            print(HELP_TEXT)
            sys.exit(0)

        parser = build_parser()
        ns = parser.parse_args(remaining_argv)
        ns.format = fmt  # inject global format flag

        if ns.show_help or not ns.command:
            print(HELP_TEXT)
            sys.exit(0)

        if ns.command == "version":
            print(f"iris-cli {config.VERSION}")
            sys.exit(0)

        handler = getattr(ns, "func", None)
        if handler:
            handler(ns)
        else:
            raise CliError(f"[ERROR] Unknown command: {ns.command}")

    except CliError as e:
        _emit_cli_error(e, "json" if _wants_json(ns, fmt) else "table")
        sys.exit(e.exit_code)
    except Exception as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        if config.RUNTIME_VERBOSE:
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
