"""
Dynamic ``resource.method`` dispatcher.

Turns loosely typed CLI tokens (``412 content=Hi flag=true``) into a call
against an SDK resource method with a fixed signature:

    parse_params -> apply_aliases -> inject_user_scope -> walk_path -> bind

Each stage is a plain function so it can be tested on its own; Dispatcher
chains them for one request.
"""

from __future__ import annotations

import json
import os
import re
import sys

from iris_cli import config
from iris_cli._utils import camel_case, normalize_endpoint, snake_case
from iris_cli.exceptions import CliError, MissingRequiredArgument, ResolutionError
from iris_cli.models import ParsedOrLiteral, RawArguments
from iris_cli.registry import ResourceHandle

_NUMERIC_RE = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")
_LITERALS = {"true": True, "false": False, "null": None}

INVALID_ENDPOINT_MESSAGE = "[ERROR] Invalid endpoint format. Use: resource.method (e.g., leads.list)"


def _log_dispatch_event(**fields):
    """Emit structured dispatcher traces to stderr in verbose mode."""
    if not config.RUNTIME_VERBOSE:
        return
    print(
        "[DISPATCH] " + json.dumps(fields, ensure_ascii=False, sort_keys=True, default=str),
        file=sys.stderr,
    )


# ---------------------------------------------------------------------------
# Parsing and coercion
# ---------------------------------------------------------------------------


def parse_json_literal(raw) -> ParsedOrLiteral:
    """Decode a JSON-looking token; keep the literal when it does not parse."""
    try:
        return ParsedOrLiteral.parsed(json.loads(raw))
    except (json.JSONDecodeError, TypeError):
        return ParsedOrLiteral.literal(raw)


def _read_file_reference(raw):
    path = raw[1:]
    for candidate in (path, os.path.join(os.getcwd(), path)):
        if path and os.path.isfile(candidate):
            try:
                with open(candidate, encoding="utf-8") as f:
                    return f.read()
            except (OSError, UnicodeDecodeError):
                return raw
    return raw


def coerce_value(raw, read_files=True):
    """Convert one CLI token value to a typed Python value.

    true/false/null -> bool/None, numerals -> int/float, ``{``/``[`` -> JSON
    (literal kept on parse failure), ``@path`` -> file contents (literal kept
    when the file is missing, or always when ``read_files`` is False).
    Anything else is returned unchanged.
    """
    if not isinstance(raw, str):
        return raw
    if raw in _LITERALS:
        return _LITERALS[raw]
    if _NUMERIC_RE.match(raw):
        text = raw.strip()
        if "." in text or "e" in text.lower():
            return float(text)
        return int(text)
    if raw.startswith(("{", "[")):
        return parse_json_literal(raw).value
    if read_files and raw.startswith("@"):
        return _read_file_reference(raw)
    return raw


def parse_params(tokens, read_files=True) -> RawArguments:
    """Split tokens into positionals and ``key=value`` named arguments.

    ``read_files=False`` leaves ``@path`` values as literal strings.
    """
    args = RawArguments()
    for token in tokens:
        if isinstance(token, str) and "=" in token:
            key, value = token.split("=", 1)
            args.named[key] = coerce_value(value, read_files)
        else:
            args.positional.append(coerce_value(token, read_files))
    return args


# ---------------------------------------------------------------------------
# Aliases and user scope
# ---------------------------------------------------------------------------


def _lookup_endpoint(table, endpoint):
    wanted = normalize_endpoint(endpoint)
    for key, value in table.items():
        if normalize_endpoint(key) == wanted:
            return value
    return None


def apply_aliases(endpoint, args, alias_table):
    """Rename alias keys to their canonical names; canonical wins on conflict.

    Returns the list of (alias, canonical) pairs that were applied.
    """
    aliases = _lookup_endpoint(alias_table, endpoint) or {}
    applied = []
    for alias, canonical in aliases.items():
        if alias in args.named and canonical not in args.named:
            args.named[canonical] = args.named.pop(alias)
            applied.append((alias, canonical))
    return applied


def is_global_endpoint(endpoint, global_endpoints) -> bool:
    wanted = normalize_endpoint(endpoint)
    return any(normalize_endpoint(e) == wanted for e in global_endpoints)


def inject_user_scope(endpoint, args, user_id, global_endpoints) -> bool:
    """Add ``user_id`` to the named arguments unless the endpoint is global.

    Never overrides an explicit ``user_id``. Returns True when injected.
    """
    if "user_id" in args.named or not user_id:
        return False
    if is_global_endpoint(endpoint, global_endpoints):
        return False
    args.named["user_id"] = int(user_id)
    return True


# ---------------------------------------------------------------------------
# Path walking
# ---------------------------------------------------------------------------


def _name_forms(name):
    forms = []
    for form in (name, snake_case(name), camel_case(name)):
        if form not in forms:
            forms.append(form)
    return forms


def _take_accessor_args(arity, args):
    """Collect accessor arguments by name, else from the positional front."""
    collected = []
    for param in arity.params:
        for form in _name_forms(param.name):
            if form in args.named:
                collected.append(args.named.pop(form))
                break
    if not collected and arity.required:
        collected = args.positional[: arity.required]
        del args.positional[: arity.required]
    return collected


def walk_path(root, segments, args, strict=False) -> ResourceHandle:
    """Descend from ``root`` through the middle endpoint segments.

    Accessor methods consume their arguments from ``args``; properties are
    followed as-is.
    """
    handle = root
    for segment in segments:
        if handle.has_method(segment):
            arity = handle.method_arity(segment)
            if arity is None or arity.required == 0:
                values = []
            else:
                values = _take_accessor_args(arity, args)
                if strict and len(values) < arity.required:
                    missing = arity.params[len(values)].name
                    raise MissingRequiredArgument(missing, segment, list(args.named))
            _log_dispatch_event(phase="walk", segment=segment, kind="accessor", args=len(values))
            handle = handle.child(segment, handle.invoke(segment, values))
        elif handle.has_property(segment):
            _log_dispatch_event(phase="walk", segment=segment, kind="property")
            handle = handle.child(segment, handle.get_property(segment))
        else:
            raise ResolutionError(
                f"[ERROR] Unknown sub-resource '{segment}' on '{handle.describe()}'.",
                segment=segment,
            )
    return handle


# ---------------------------------------------------------------------------
# Argument binding
# ---------------------------------------------------------------------------


def _short_name_match(param_name, named, short_names):
    """Return the named key that stands for ``param_name``, or None."""
    wanted = set(_name_forms(param_name))
    for key in named:
        forms = set(_name_forms(key))
        for target in short_names.get(key, ()):
            forms.update(_name_forms(target))
        if forms & wanted:
            return key
    return None


def bind_arguments(handle, method, args, short_names=None, endpoint=None, dict_entrypoints=None):
    """Resolve ``method`` on ``handle`` and build its positional arguments.

    Returns ``(method_name, bound)``; ``method_name`` differs from ``method``
    only when a dict entry point applies.
    """
    if short_names is None:
        short_names = config.SHORT_PARAM_NAMES
    if not handle.has_method(method):
        raise ResolutionError(
            f"[ERROR] Method '{method}' not found on resource '{handle.describe()}'.",
            segment=method,
        )

    if endpoint and args.named and not args.positional:
        alternate = _lookup_endpoint(dict_entrypoints or {}, endpoint)
        if alternate and handle.has_method(alternate):
            return alternate, [dict(args.named)]

    if args.is_empty():
        return method, []

    if (
        snake_case(method) == "search"
        and args.total() == 1
        and len(args.positional) == 1
        and isinstance(args.positional[0], str)
    ):
        return method, [{"search": args.positional[0]}]

    positional = list(args.positional)
    named = dict(args.named)
    arity = handle.method_arity(method)
    if arity is None:
        bound = positional + ([named] if named else [])
        return method, bound

    supplied = list(named)
    bound = list(positional)
    remaining = list(arity.params[len(bound) :])

    if named and len(remaining) == 1 and remaining[0].is_mapping:
        bound.append(named)
        return method, bound

    for param in remaining:
        if param.name in named:
            bound.append(named.pop(param.name))
            continue
        key = _short_name_match(param.name, named, short_names)
        if key is not None:
            bound.append(named.pop(key))
            continue
        if not param.optional:
            raise MissingRequiredArgument(param.name, method, supplied)
        bound.append(param.default)
        break

    if named and arity.params:
        last = arity.params[-1]
        if last.is_mapping and len(bound) < len(arity.params):
            bound.append(named)
    return method, bound


class Dispatcher:
    """Runs ``resource.method`` calls against a ResourceRegistry."""

    def __init__(self, registry, credentials, policy=None):
        self.registry = registry
        self.credentials = credentials
        self.policy = policy or config.DispatchPolicy(strict_subresources=config.RUNTIME_STRICT)

    def prepare(self, endpoint, tokens):
        """Parse tokens and apply aliases and user scope for ``endpoint``."""
        args = tokens if isinstance(tokens, RawArguments) else parse_params(tokens or [])
        applied = apply_aliases(endpoint, args, self.policy.aliases)
        if applied:
            _log_dispatch_event(phase="aliases", endpoint=endpoint, applied=applied)
        injected = inject_user_scope(
            endpoint, args, self.credentials.current_user_id(), self.policy.global_endpoints
        )
        _log_dispatch_event(phase="scope", endpoint=endpoint, user_id_injected=injected)
        return args

    def dispatch(self, endpoint, tokens=None):
        segments = (endpoint or "").split(".")
        if len(segments) < 2 or not all(segments):
            raise CliError(INVALID_ENDPOINT_MESSAGE)
        args = self.prepare(endpoint, tokens)
        root = self.registry.resolve(segments[0])
        handle = walk_path(root, segments[1:-1], args, strict=self.policy.strict_subresources)
        method, bound = bind_arguments(
            handle,
            segments[-1],
            args,
            short_names=self.policy.short_names,
            endpoint=endpoint,
            dict_entrypoints=self.policy.dict_entrypoints,
        )
        _log_dispatch_event(
            phase="bind",
            endpoint=endpoint,
            method=method,
            arg_count=len(bound),
            named_keys=sorted(args.named),
        )
        result = handle.invoke(method, bound)
        _log_dispatch_event(phase="invoke", endpoint=endpoint, result_type=type(result).__name__)
        return result
