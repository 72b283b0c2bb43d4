"""Core helpers: client caching, endpoint dispatch, response contract."""

from __future__ import annotations

from iris_cli import CliError, IrisClient, SetupError
from iris_cli.config import CONTRACT_SCHEMA_VERSION, MCP_RESPONSE_MODE
from iris_cli.dispatch import parse_params
from iris_cli.formatters import normalize_result
from iris_cli.mcp_server._security import _sanitize_result, _validate_input
from iris_cli.types import ContractError

_client: IrisClient | None = None


def _get_client() -> IrisClient:
    """Return a cached IrisClient, creating one on first use."""
    global _client
    if _client is None:
        _client = IrisClient()
    return _client


def _contract_error(message: str, error_type: str = "error") -> ContractError:
    """Return a stable MCP error envelope with legacy compatibility fields."""
    return {
        "ok": False,
        "schema_version": CONTRACT_SCHEMA_VERSION,
        "type": error_type,  # legacy
        "error": message,  # legacy
        "error_detail": {
            "type": error_type,
            "message": message,
        },
    }


def _ensure_contract_dict(payload: dict) -> dict:
    """Add stable contract metadata to dict responses."""
    out = dict(payload)
    out.setdefault("schema_version", CONTRACT_SCHEMA_VERSION)
    if out.get("ok") is False:
        error_type = str(out.get("type", "error"))
        error_message = out.get("error", "Unknown error")
        if not isinstance(error_message, str):
            error_message = str(error_message)
            out["error"] = error_message
        out.setdefault(
            "error_detail",
            {
                "type": error_type,
                "message": error_message,
            },
        )
        return out
    out.setdefault("ok", True)
    return out


def _finalize_tool_result(result):
    """Finalize tool response based on configured MCP response mode.

    Modes:
        - legacy (default): dicts gain contract metadata (ok/schema_version).
        - envelope: always return {"ok", "schema_version", "data"} for success.
    """
    if isinstance(result, dict):
        normalized = _ensure_contract_dict(result)
        if normalized.get("ok") is False:
            return normalized
        if MCP_RESPONSE_MODE == "envelope":
            data = dict(normalized)
            data.pop("ok", None)
            data.pop("schema_version", None)
            return {
                "ok": True,
                "schema_version": CONTRACT_SCHEMA_VERSION,
                "data": data,
            }
        return normalized
    if MCP_RESPONSE_MODE == "envelope":
        return {
            "ok": True,
            "schema_version": CONTRACT_SCHEMA_VERSION,
            "data": result,
        }
    return result


def _call_endpoint(endpoint: str, params: list[str] | None = None, named: dict | None = None):
    """Dispatch one endpoint call, converting exceptions to error dicts."""
    try:
        endpoint = _validate_input(endpoint, "endpoint")
        tokens = [_validate_input(str(p), "param") for p in (params or [])]
        # Local files stay out of reach of MCP clients.
        args = parse_params(tokens, read_files=False)
        if named:
            args.named.update(named)
        result = _get_client().dispatcher().dispatch(endpoint, args)
        return {"endpoint": endpoint, "result": _sanitize_result(normalize_result(result))}
    except SetupError as e:
        return _contract_error(str(e), "setup")
    except CliError as e:
        return _contract_error(str(e), "error")
    except Exception as e:
        return _contract_error(f"Unexpected error: {e}", "error")


def _list_endpoints(resource: str | None = None):
    try:
        return {"endpoints": _get_client().registry().endpoints(resource)}
    except CliError as e:
        return _contract_error(str(e), "error")
