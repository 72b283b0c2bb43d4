"""
AI agents owned by the configured user.
"""

from __future__ import annotations

from typing import Any

from iris_cli.models import AgentConfig
from iris_cli.resources._base import Resource
from iris_cli.types import AgentRow


class AgentsResource(Resource):
    def _base_path(self):
        return f"/api/v1/users/{self._user_id()}/bloqs/agents"

    def list(self, options: dict[str, Any] | None = None) -> Any:
        params = dict(options or {})
        params.pop("user_id", None)
        return self._http.get(self._base_path(), params)

    def search(self, search: str, options: dict[str, Any] | None = None) -> Any:
        return self.list({"search": search, **(options or {})})

    def get(self, agent_id: int) -> AgentRow:
        return self._http.get(f"{self._base_path()}/{agent_id}")

    def create(self, config: AgentConfig) -> Any:
        """Create an agent from a validated AgentConfig."""
        if isinstance(config, dict):
            config = AgentConfig.from_dict(config)
        return self._http.post(self._base_path(), config.to_dict())

    def create_from_dict(self, data: dict[str, Any]) -> Any:
        """Create an agent from a raw payload; ``type`` defaults to ai_bloq."""
        payload = dict(data)
        payload.pop("user_id", None)
        payload.setdefault("type", "ai_bloq")
        return self._http.post(self._base_path(), payload)

    def update(self, agent_id: int, data: dict[str, Any]) -> Any:
        payload = dict(data)
        payload.pop("user_id", None)
        return self._http.put(f"{self._base_path()}/{agent_id}", payload)

    def delete(self, agent_id: int) -> bool:
        self._http.delete(f"{self._base_path()}/{agent_id}")
        return True

    def chat(self, agent_id: int, messages: list, options: dict[str, Any] | None = None) -> Any:
        """Single-turn chat: ``messages`` is a list of {role, content} dicts.

        Options: bloq_id, thread_id, use_rag (default True), model.
        """
        opts = options or {}
        return self._http.post(
            "/api/v1/bloqs/agents/generate-response",
            {
                "agent_id": agent_id,
                "messages": messages,
                "bloq_id": opts.get("bloq_id"),
                "thread_id": opts.get("thread_id"),
                "use_rag": opts.get("use_rag", True),
                "model": opts.get("model"),
            },
        )
