"""iris-cli — Python SDK and command line client for the IRIS platform."""

from iris_cli.client import IrisClient
from iris_cli.config import VERSION
from iris_cli.credentials import Credentials
from iris_cli.exceptions import (
    ApiError,
    AuthenticationError,
    CliError,
    MissingRequiredArgument,
    RateLimitError,
    ResolutionError,
    SetupError,
    ValidationError,
)
from iris_cli.models import AgentConfig
from iris_cli.types import AgentRow, EndpointInfo, LeadRow, NoteRow

__all__ = [
    "VERSION",
    "AgentConfig",
    "AgentRow",
    "ApiError",
    "AuthenticationError",
    "CliError",
    "Credentials",
    "EndpointInfo",
    "IrisClient",
    "LeadRow",
    "MissingRequiredArgument",
    "NoteRow",
    "RateLimitError",
    "ResolutionError",
    "SetupError",
    "ValidationError",
]
