"""
Resource registry and signature introspection for the dynamic dispatcher.

A ResourceHandle wraps any SDK resource object and answers the questions
the dispatcher asks: does it expose a method by this name, what are that
method's formal parameters, and what does a property lookup return.
Signatures are read at call time and never cached.
"""

from __future__ import annotations

import collections.abc
import inspect
import types
import typing
from dataclasses import dataclass
from typing import Any

from iris_cli._utils import snake_case
from iris_cli.exceptions import ResolutionError
from iris_cli.resources._base import Resource
from iris_cli.types import EndpointInfo

_MAPPING_NAMES = frozenset({"dict", "Dict", "Mapping", "MutableMapping"})
_BINDABLE_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


@dataclass(frozen=True)
class ParamSpec:
    name: str
    annotation: Any = inspect.Parameter.empty
    optional: bool = False
    default: Any = None
    is_mapping: bool = False


@dataclass(frozen=True)
class MethodSpec:
    name: str
    params: tuple[ParamSpec, ...]
    required: int

    def param_names(self) -> list[str]:
        return [p.name for p in self.params]


# ---------------------------------------------------------------------------
# Annotation helpers
# ---------------------------------------------------------------------------


def _split_top_level(text, sep="|"):
    """Split an annotation string on ``sep`` outside of brackets."""
    parts, depth, current = [], 0, []
    for ch in text:
        if ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
        if ch == sep and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    parts.append("".join(current))
    return parts


def _is_mapping_annotation(annotation) -> bool:
    """True for dict / Dict[...] / Mapping and their Optional forms."""
    if annotation is inspect.Parameter.empty or annotation is None:
        return False
    if isinstance(annotation, str):
        text = annotation.replace(" ", "")
        if text.startswith("Optional[") and text.endswith("]"):
            text = text[len("Optional[") : -1]
        members = [m for m in _split_top_level(text) if m != "None"]
        if len(members) != 1:
            return False
        base = members[0].split("[", 1)[0].rsplit(".", 1)[-1]
        return base in _MAPPING_NAMES
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        members = [a for a in typing.get_args(annotation) if a is not type(None)]
        return len(members) == 1 and _is_mapping_annotation(members[0])
    target = origin or annotation
    return isinstance(target, type) and issubclass(target, collections.abc.Mapping)


def _signature(fn):
    """inspect.signature with string annotations evaluated where possible."""
    try:
        return inspect.signature(fn, eval_str=True)
    except (NameError, SyntaxError, TypeError):
        return inspect.signature(fn)


def describe_callable(name, fn) -> MethodSpec:
    """Build a MethodSpec from a callable's signature.

    Raises ValueError/TypeError when the callable cannot be introspected.
    """
    sig = _signature(fn)
    params = []
    for param in sig.parameters.values():
        if param.kind not in _BINDABLE_KINDS or param.name == "self":
            continue
        optional = param.default is not inspect.Parameter.empty
        params.append(
            ParamSpec(
                name=param.name,
                annotation=param.annotation,
                optional=optional,
                default=param.default if optional else None,
                is_mapping=_is_mapping_annotation(param.annotation),
            )
        )
    required = sum(1 for p in params if not p.optional)
    return MethodSpec(name=name, params=tuple(params), required=required)


def _returns_resource(fn) -> type | None:
    """Return the Resource subclass a function is annotated to return."""
    try:
        hint = typing.get_type_hints(fn).get("return")
    except (NameError, TypeError):
        return None
    if typing.get_origin(hint) is None and isinstance(hint, type) and issubclass(hint, Resource):
        return hint
    return None


# ---------------------------------------------------------------------------
# ResourceHandle
# ---------------------------------------------------------------------------


class ResourceHandle:
    """Introspectable view over one resource object."""

    def __init__(self, target, path=""):
        self.target = target
        self.path = path

    def __repr__(self):
        return f"ResourceHandle({self.path or type(self.target).__name__})"

    def _candidates(self, name):
        seen = []
        for candidate in (name, snake_case(name)):
            if candidate and not candidate.startswith("_") and candidate not in seen:
                seen.append(candidate)
        return seen

    def _static(self, name):
        """Return (resolved_name, static_attr) or (None, None)."""
        for candidate in self._candidates(name):
            try:
                return candidate, inspect.getattr_static(self.target, candidate)
            except AttributeError:
                continue
        return None, None

    def _resolve_method(self, name):
        resolved, attr = self._static(name)
        if resolved is None or isinstance(attr, property):
            return None
        if isinstance(attr, (types.FunctionType, staticmethod, classmethod)):
            return resolved
        if isinstance(attr, type):
            return None
        value = getattr(self.target, resolved)
        if callable(value) and not isinstance(value, Resource):
            return resolved
        return None

    def has_method(self, name) -> bool:
        return self._resolve_method(name) is not None

    def method_arity(self, name) -> MethodSpec | None:
        """Formal parameters of a method, or None when not introspectable."""
        resolved = self._resolve_method(name)
        if resolved is None:
            raise ResolutionError(
                f"[ERROR] Method '{name}' not found on resource '{self.describe()}'.",
                segment=name,
            )
        try:
            return describe_callable(resolved, getattr(self.target, resolved))
        except (ValueError, TypeError):
            return None

    def invoke(self, name, args):
        resolved = self._resolve_method(name)
        if resolved is None:
            raise ResolutionError(
                f"[ERROR] Method '{name}' not found on resource '{self.describe()}'.",
                segment=name,
            )
        return getattr(self.target, resolved)(*args)

    def has_property(self, name) -> bool:
        resolved, _ = self._static(name)
        return resolved is not None and not self.has_method(name)

    def get_property(self, name):
        resolved, _ = self._static(name)
        if resolved is None or self.has_method(name):
            raise ResolutionError(
                f"[ERROR] Unknown sub-resource '{name}' on '{self.describe()}'.",
                segment=name,
            )
        return getattr(self.target, resolved)

    def child(self, name, value):
        path = f"{self.path}.{name}" if self.path else name
        return ResourceHandle(value, path=path)

    def method_names(self) -> list[str]:
        names = []
        for name in dir(type(self.target)):
            if name.startswith("_"):
                continue
            attr = inspect.getattr_static(self.target, name)
            if isinstance(attr, (types.FunctionType, staticmethod, classmethod)):
                names.append(name)
        return sorted(names)

    def describe(self):
        return self.path or type(self.target).__name__


# ---------------------------------------------------------------------------
# ResourceRegistry
# ---------------------------------------------------------------------------


class ResourceRegistry:
    """Root resources addressable by the first endpoint segment."""

    def __init__(self, roots):
        self._roots = dict(roots)

    @classmethod
    def from_client(cls, client):
        return cls(client.resources())

    def names(self) -> list[str]:
        return sorted(self._roots)

    def resolve(self, root_name) -> ResourceHandle:
        for candidate in (root_name, snake_case(root_name)):
            if candidate in self._roots:
                return ResourceHandle(self._roots[candidate], path=candidate)
        available = ", ".join(self.names()) or "none"
        raise ResolutionError(
            f"[ERROR] Unknown resource '{root_name}'. Available: {available}",
            segment=root_name,
        )

    def endpoints(self, resource=None) -> list[EndpointInfo]:
        """Every callable endpoint with its signature and summary line."""
        if resource is not None:
            handle = self.resolve(resource)
            roots = [(handle.path, type(handle.target))]
        else:
            roots = [(name, type(obj)) for name, obj in sorted(self._roots.items())]
        rows: list[EndpointInfo] = []
        for prefix, cls in roots:
            _collect_endpoints(prefix, cls, rows, seen=set())
        return rows


def _collect_endpoints(prefix, cls, rows, seen):
    if cls in seen:
        return
    seen = seen | {cls}
    for name, attr in sorted(_vars_with_bases(cls).items()):
        if name.startswith("_"):
            continue
        if isinstance(attr, property):
            sub = _returns_resource(attr.fget) if attr.fget else None
            if sub is not None:
                _collect_endpoints(f"{prefix}.{name}", sub, rows, seen)
            continue
        if not isinstance(attr, types.FunctionType):
            continue
        sub = _returns_resource(attr)
        if sub is not None:
            _collect_endpoints(f"{prefix}.{name}", sub, rows, seen)
            continue
        try:
            sig = _signature(attr)
        except (ValueError, TypeError):
            signature = "(...)"
        else:
            params = [p for p in sig.parameters.values() if p.name != "self"]
            signature = str(sig.replace(parameters=params, return_annotation=sig.empty))
        doc = (inspect.getdoc(attr) or "").strip().splitlines()
        rows.append(
            {
                "endpoint": f"{prefix}.{name}",
                "signature": signature,
                "doc": doc[0] if doc else "",
            }
        )


def _vars_with_bases(cls):
    """Class attributes including inherited ones, nearest definition wins."""
    merged = {}
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        merged.update(vars(klass))
    return merged
