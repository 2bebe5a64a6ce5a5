"""FastMCP server initialization and tool registration."""

import logging
from mcp.server.fastmcp import FastMCP

from vault_graph.constants import LOG_LEVEL

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("vault_graph")

# Tool modules are imported in __init__.py to register all @mcp.tool() decorators


def run_server():
    """Configure logging and start the MCP server with stdio transport."""
    # stdout carries the protocol; basicConfig logs to stderr
    logging.basicConfig(
        level=LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting Vault Link Graph MCP Server")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    run_server()
