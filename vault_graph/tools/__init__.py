"""MCP tool definitions for vault link graph operations.

This module imports all tool submodules to register them with the MCP server.
Each tool module uses the @mcp.tool() decorator to auto-register its tools.
"""

# Import all tool modules to register their @mcp.tool() decorated functions
from vault_graph.tools import vault_tools
from vault_graph.tools import graph_tools
from vault_graph.tools import integrity_tools
from vault_graph.tools import rename_tools

__all__ = [
    "vault_tools",
    "graph_tools",
    "integrity_tools",
    "rename_tools",
]
