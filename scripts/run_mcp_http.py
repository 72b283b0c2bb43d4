"""Run the IRIS MCP server in streamable-http mode.

Host and port come from MCP_HTTP_HOST / MCP_HTTP_PORT (default 127.0.0.1:8808).
"""

import os

from iris_cli.mcp_server import mcp

if __name__ == "__main__":
    mcp.settings.host = os.environ.get("MCP_HTTP_HOST", "127.0.0.1")
    mcp.settings.port = int(os.environ.get("MCP_HTTP_PORT", "8808"))
    mcp.run(transport="streamable-http")
