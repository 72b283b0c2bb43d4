"""Typed response definitions for IrisClient resources.

These TypedDicts document the shape of dicts returned by resource methods.
They are optional — runtime behavior is unchanged (plain dicts).
"""

from __future__ import annotations

from typing import TypedDict


class LeadRow(TypedDict, total=False):
    """Lead record as returned by list/get endpoints."""

    id: int
    title: str
    name: str | None
    email: str | None
    status: str | None
    lead_type: str | None
    company: str | None
    phone: str | None
    note_count: int | None
    tasks_count: int | None
    updated_at: str | None
    created_at: str | None


class NoteRow(TypedDict, total=False):
    id: int
    message: str
    type: str | None
    created_at: str | None


class AgentRow(TypedDict, total=False):
    id: int
    name: str
    type: str
    model: str | None
    bloq_id: int | None


class EndpointInfo(TypedDict):
    """One entry of ResourceRegistry.endpoints()."""

    endpoint: str
    signature: str
    doc: str


class ContractError(TypedDict):
    """Error dict returned by MCP tools instead of raising."""

    ok: bool
    schema_version: str
    type: str
    error: str
    error_detail: dict
