"""
IrisClient — public Python API for the IRIS platform.

Root of the resource tree (``leads``, ``agents``, ``bloqs``) and the entry
point for dynamic ``resource.method`` calls used by the CLI and MCP server.
"""

from __future__ import annotations

from typing import Any

from iris_cli.api import HttpTransport
from iris_cli.credentials import Credentials, resolve_credentials
from iris_cli.dispatch import Dispatcher
from iris_cli.registry import ResourceRegistry
from iris_cli.resources import AgentsResource, BloqsResource, LeadsResource


class IrisClient:
    """Public API surface for the IRIS SDK.

    Resource methods return plain dicts/lists suitable for JSON
    serialization. Raises CliError/SetupError on failure.
    """

    def __init__(self, credentials: Credentials | None = None, *, transport=None):
        """Initialize the client.

        Args:
            credentials: API key and user id. Defaults to environment/.env.
            transport: Object with get/post/put/patch/delete. Defaults to
                an HttpTransport bound to ``credentials``.
        """
        self.credentials = credentials or resolve_credentials()
        self.transport = transport or HttpTransport(self.credentials)
        self.leads = LeadsResource(self.transport, self.credentials)
        self.agents = AgentsResource(self.transport, self.credentials)
        self.bloqs = BloqsResource(self.transport, self.credentials)

    def resources(self) -> dict[str, Any]:
        """Root resources addressable as the first endpoint segment."""
        return {"leads": self.leads, "agents": self.agents, "bloqs": self.bloqs}

    def with_user(self, user_id: int | None) -> IrisClient:
        """Return a client scoped to another user id."""
        credentials = self.credentials.with_user(user_id)
        transport = None
        if isinstance(self.transport, HttpTransport):
            transport = HttpTransport(
                credentials,
                base_url=self.transport.base_url,
                iris_url=self.transport.iris_url,
                fl_api_url=self.transport.fl_api_url,
            )
        return IrisClient(credentials, transport=transport or self.transport)

    def registry(self) -> ResourceRegistry:
        return ResourceRegistry.from_client(self)

    def dispatcher(self, policy=None) -> Dispatcher:
        return Dispatcher(self.registry(), self.credentials, policy=policy)

    def call(self, endpoint: str, *tokens: str, policy=None) -> Any:
        """Run a ``resource.method`` call from CLI-style tokens.

        >>> client.call("leads.notes.create", "412", "content=Called back")
        """
        return self.dispatcher(policy).dispatch(endpoint, list(tokens))
