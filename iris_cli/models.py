"""
Typed models for dispatcher arguments and SDK payloads.
"""

from dataclasses import dataclass, field
from typing import Any

from iris_cli.exceptions import CliError


@dataclass
class RawArguments:
    """Loosely typed CLI arguments: ordered positionals plus a named bag.

    Request scoped. The walker consumes entries while descending into
    sub-resources; the binder reads what is left.
    """

    positional: list = field(default_factory=list)
    named: dict = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not self.positional and not self.named

    def total(self) -> int:
        return len(self.positional) + len(self.named)


@dataclass(frozen=True)
class ParsedOrLiteral:
    """Result of parsing a JSON-looking token.

    ``ok`` is True when ``value`` holds the decoded JSON; otherwise
    ``value`` is the original literal string.
    """

    ok: bool
    value: Any

    @classmethod
    def parsed(cls, value):
        return cls(ok=True, value=value)

    @classmethod
    def literal(cls, raw):
        return cls(ok=False, value=raw)


@dataclass(frozen=True)
class ObjectPayload:
    """Typed wrapper for raw JSON object payloads."""

    data: dict

    @classmethod
    def from_value(cls, value, context):
        if isinstance(value, dict):
            return cls(data=value)
        raise CliError(
            f"[ERROR] Invalid JSON in {context}: expected object, got {type(value).__name__}."
        )


@dataclass(frozen=True)
class AgentConfig:
    """Validated input contract for creating an agent."""

    name: str
    prompt: str
    model: str | None = None
    description: str | None = None
    type: str = "ai_bloq"
    settings: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data):
        payload = ObjectPayload.from_value(data, "agent config").data
        name = payload.get("name")
        if not isinstance(name, str) or not name.strip():
            raise CliError("[ERROR] Agent config requires a non-empty 'name'.")
        prompt = payload.get("prompt", payload.get("initial_prompt", ""))
        if not isinstance(prompt, str):
            raise CliError("[ERROR] Agent config 'prompt' must be a string.")
        settings = payload.get("settings") or {}
        if not isinstance(settings, dict):
            raise CliError("[ERROR] Agent config 'settings' must be an object.")
        known = {"name", "prompt", "initial_prompt", "model", "description", "type", "settings"}
        extra = {k: v for k, v in payload.items() if k not in known}
        return cls(
            name=name.strip(),
            prompt=prompt,
            model=payload.get("model"),
            description=payload.get("description"),
            type=payload.get("type") or "ai_bloq",
            settings={**extra, **settings},
        )

    def to_dict(self):
        data = {
            "name": self.name,
            "initial_prompt": self.prompt,
            "type": self.type,
        }
        if self.model is not None:
            data["model"] = self.model
        if self.description is not None:
            data["description"] = self.description
        if self.settings:
            data["settings"] = dict(self.settings)
        return data
