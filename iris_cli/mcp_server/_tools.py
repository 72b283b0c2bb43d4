"""Dispatcher tools: call any SDK endpoint, list endpoints (2 tools)."""

from __future__ import annotations

from typing import Any

from iris_cli.mcp_server._core import _call_endpoint, _finalize_tool_result, _list_endpoints


def call_endpoint(
    endpoint: str,
    params: list[str] | None = None,
    named: dict[str, Any] | None = None,
) -> dict:
    """Call an IRIS SDK method by dotted endpoint, e.g. leads.notes.create.

    Args:
        endpoint: resource.method or resource.sub.method (e.g. leads.list,
            leads.aggregation.getRecentLeads).
        params: CLI-style tokens: "key=value" named or bare positional values.
            true/false/null, numbers and JSON literals are converted.
        named: Extra named arguments passed through without conversion.

    Returns:
        Dict with endpoint and result, or an error envelope.
    """
    return _finalize_tool_result(_call_endpoint(endpoint, params, named))


def list_endpoints(resource: str | None = None) -> dict:
    """List callable endpoints with their Python signatures.

    Args:
        resource: Limit to one root resource (leads, agents, bloqs).
    """
    return _finalize_tool_result(_list_endpoints(resource))


def register(mcp):
    mcp.tool()(call_endpoint)
    mcp.tool()(list_endpoints)
