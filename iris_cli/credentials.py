"""
Credential context for iris-cli.

Resolves the API key and user id from CLI flags first, then from the
environment / .env values loaded into config.
"""

from __future__ import annotations

from dataclasses import dataclass

from iris_cli import config
from iris_cli._utils import _mask_token
from iris_cli.exceptions import CliError, SetupError


@dataclass(frozen=True)
class Credentials:
    api_key: str | None
    user_id: int | None = None

    def current_api_key(self) -> str | None:
        return self.api_key or None

    def current_user_id(self) -> int | None:
        return self.user_id

    def require_user_id(self) -> int:
        """Return the user id or fail for user-scoped operations."""
        if not self.user_id:
            raise SetupError(
                "[SETUP_NEEDED] user_id is required for this operation. "
                "Set IRIS_USER_ID in .env or pass --user-id."
            )
        return self.user_id

    def require_api_key(self) -> str:
        if not self.api_key:
            raise SetupError(
                "[SETUP_NEEDED] Missing API credentials. "
                "Set IRIS_API_KEY in .env or pass --api-key."
            )
        return self.api_key

    def with_user(self, user_id: int | None) -> Credentials:
        return Credentials(api_key=self.api_key, user_id=user_id)

    def describe(self) -> dict:
        """Safe-to-print summary (API key masked)."""
        return {
            "api_key": _mask_token(self.api_key or ""),
            "user_id": self.user_id,
        }


def _parse_user_id(value) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise CliError(f"[ERROR] Invalid user id '{value}'. Expected an integer.") from exc


def resolve_credentials(api_key: str | None = None, user_id=None) -> Credentials:
    """Build credentials: explicit flags win over environment / .env."""
    resolved_key = api_key or config.API_KEY or None
    resolved_user = _parse_user_id(user_id)
    if resolved_user is None:
        resolved_user = config.USER_ID
    return Credentials(api_key=resolved_key, user_id=resolved_user)
