"""
Bloqs: knowledge containers that group leads, agents and files.
"""

from __future__ import annotations

from typing import Any

from iris_cli.resources._base import Resource


class BloqsResource(Resource):
    def _base_path(self):
        return f"/api/v1/user/{self._user_id()}/bloqs"

    def list(self, options: dict[str, Any] | None = None) -> Any:
        params = dict(options or {})
        params.pop("user_id", None)
        return self._http.get(self._base_path(), params)

    def get(self, bloq_id: int) -> Any:
        return self._http.get(f"{self._base_path()}/{bloq_id}")

    def create(self, title: str, options: dict[str, Any] | None = None) -> Any:
        payload = {"title": title, **(options or {})}
        payload.pop("user_id", None)
        return self._http.post(self._base_path(), payload)

    def update(self, bloq_id: int, data: dict[str, Any]) -> Any:
        payload = dict(data)
        payload.pop("user_id", None)
        return self._http.put(f"{self._base_path()}/{bloq_id}", payload)

    def delete(self, bloq_id: int) -> bool:
        self._http.delete(f"{self._base_path()}/{bloq_id}")
        return True
