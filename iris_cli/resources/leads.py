"""
Leads and their sub-resources: notes, tasks, deliverables, aggregation.
"""

from __future__ import annotations

from typing import Any

from iris_cli.exceptions import CliError
from iris_cli.resources._base import Resource
from iris_cli.types import LeadRow, NoteRow


class LeadsResource(Resource):
    """CRM leads."""

    def list(self, filters: dict[str, Any] | None = None) -> Any:
        """List leads, scoped to filters['user_id'] when present."""
        params = dict(filters or {})
        if "user_id" in params:
            user_id = params.pop("user_id")
            return self._http.get(f"/api/v1/users/{user_id}/leads", params)
        return self._http.get("/api/v1/leads", params)

    def list_for_user(self, filters: dict[str, Any] | None = None) -> Any:
        """List the configured user's leads."""
        params = dict(filters or {})
        params.pop("user_id", None)
        return self._http.get(f"/api/v1/users/{self._user_id()}/leads", params)

    def search(self, filters: dict[str, Any] | None = None) -> Any:
        """Search leads through the aggregation endpoint.

        Accepts ``search``, ``status``, ``bloq_id``, ``sort``, ``order``,
        ``per_page`` and ``page``. ``user_id`` defaults to the configured user.
        """
        params = dict(filters or {})
        if "user_id" not in params:
            params["user_id"] = self._user_id()
        return self._http.get("/api/v1/leads/aggregation", params)

    def get(self, lead_id: int) -> LeadRow:
        return self._http.get(f"/api/v1/leads/{lead_id}")

    def create(self, data: dict[str, Any]) -> Any:
        """Create a lead. Every lead belongs to a bloq."""
        if not data.get("bloq_id") and not data.get("bloqId"):
            raise CliError(
                "[ERROR] bloq_id or bloqId is required when creating a lead. "
                "Leads must be associated with a bloq."
            )
        return self._http.post("/api/v1/leads", data)

    def update(self, lead_id: int, data: dict[str, Any]) -> Any:
        return self._http.put(f"/api/v1/leads/{lead_id}", data)

    def delete(self, lead_id: int) -> bool:
        self._http.delete(f"/api/v1/leads/{lead_id}")
        return True

    def add_note(self, lead_id: int, content: str, metadata: dict[str, Any] | None = None) -> Any:
        payload = {"message": content, **(metadata or {})}
        return self._http.post(f"/api/v1/leads/{lead_id}/notes", payload)

    def tags(self) -> Any:
        return self._http.get(f"/api/v1/user/{self._user_id()}/lead-tags")

    def stages(self) -> Any:
        return self._http.get(f"/api/v1/user/{self._user_id()}/lead-stages")

    def notes(self, lead_id: int) -> NotesResource:
        return NotesResource(self._http, self._credentials, lead_id)

    def tasks(self, lead_id: int) -> TasksResource:
        return TasksResource(self._http, self._credentials, lead_id)

    def deliverables(self, lead_id: int) -> DeliverablesResource:
        return DeliverablesResource(self._http, self._credentials, lead_id)

    @property
    def aggregation(self) -> LeadAggregationResource:
        return LeadAggregationResource(self._http, self._credentials)


class _LeadScoped(Resource):
    def __init__(self, http, credentials, lead_id):
        super().__init__(http, credentials)
        self.lead_id = lead_id

    def __repr__(self):
        return f"{type(self).__name__}(lead_id={self.lead_id})"


class NotesResource(_LeadScoped):
    """Notes on one lead. Notes are embedded in the lead record."""

    def all(self) -> list[NoteRow]:
        lead = self._http.get(f"/api/v1/leads/{self.lead_id}")
        if not isinstance(lead, dict):
            return []
        return list(lead.get("notes") or [])

    def get(self, note_id: int) -> NoteRow:
        """Find a note by id (there is no single-note endpoint)."""
        for note in self.all():
            if isinstance(note, dict) and str(note.get("id")) == str(note_id):
                return note
        raise CliError(f"[ERROR] Note with ID {note_id} not found on lead {self.lead_id}")

    def create(self, content: str, metadata: dict[str, Any] | None = None) -> Any:
        response = self._http.post(
            f"/api/v1/leads/{self.lead_id}/notes",
            {"message": content, **(metadata or {})},
        )
        if isinstance(response, dict) and "note" in response:
            return response["note"]
        return response

    def update(self, note_id: int, content: str, metadata: dict[str, Any] | None = None) -> Any:
        response = self._http.put(
            f"/api/v1/leads/{self.lead_id}/notes/{note_id}",
            {"message": content, **(metadata or {})},
        )
        if isinstance(response, dict) and "note" in response:
            return response["note"]
        return response

    def delete(self, note_id: int) -> bool:
        # Deletion is only exposed on the webhook route.
        self._http.delete(f"/api/v1/webhooks/leads/{self.lead_id}/notes/{note_id}")
        return True


class TasksResource(_LeadScoped):
    """Tasks on one lead."""

    def all(self) -> Any:
        return self._http.get(f"/api/v1/leads/{self.lead_id}/tasks")

    def create(self, data: dict[str, Any]) -> Any:
        return self._http.post(f"/api/v1/leads/{self.lead_id}/tasks", data)

    def update(self, task_id: int, data: dict[str, Any]) -> Any:
        return self._http.put(f"/api/v1/leads/{self.lead_id}/tasks/{task_id}", data)

    def delete(self, task_id: int) -> bool:
        self._http.delete(f"/api/v1/leads/{self.lead_id}/tasks/{task_id}")
        return True


class DeliverablesResource(_LeadScoped):
    """Files and links delivered to a lead."""

    @staticmethod
    def _unwrap(response):
        if isinstance(response, dict) and "deliverable" in response:
            return response["deliverable"]
        return response

    def list(self) -> Any:
        response = self._http.get(f"/api/v1/leads/{self.lead_id}/deliverables")
        if isinstance(response, dict):
            return response.get("deliverables", [])
        return response

    def create(self, data: dict[str, Any]) -> Any:
        return self._unwrap(self._http.post(f"/api/v1/leads/{self.lead_id}/deliverables", data))

    def update(self, deliverable_id: int, data: dict[str, Any]) -> Any:
        return self._unwrap(
            self._http.patch(f"/api/v1/leads/{self.lead_id}/deliverables/{deliverable_id}", data)
        )

    def delete(self, deliverable_id: int) -> bool:
        response = self._http.delete(f"/api/v1/leads/{self.lead_id}/deliverables/{deliverable_id}")
        return bool(isinstance(response, dict) and response.get("success"))


class LeadAggregationResource(Resource):
    """Cross-tenant lead views with enriched fields."""

    def statistics(self) -> Any:
        return self._http.get("/api/v1/leads/aggregation/statistics")

    def list(self, filters: dict[str, Any] | None = None) -> Any:
        return self._http.get("/api/v1/leads/aggregation", dict(filters or {}))

    def get_recent_leads(self, limit: int = 10, filters: dict[str, Any] | None = None) -> Any:
        params = {
            **(filters or {}),
            "sort": "updated_at",
            "order": "desc",
            "per_page": limit,
        }
        return self._http.get("/api/v1/leads/aggregation", params)

    def get(self, lead_id: int) -> LeadRow:
        return self._http.get(f"/api/v1/leads/aggregation/{lead_id}")

    def requirements(self, lead_id: int) -> Any:
        return self._http.get(f"/api/v1/leads/aggregation/{lead_id}/requirements")
