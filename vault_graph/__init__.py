"""Vault Link Graph MCP Server

Link graph, integrity checks and rename-safe moves for Obsidian vaults
via Model Context Protocol.
"""

from vault_graph.config import get_vault_configuration, load_vault_configuration
from vault_graph.data_models import LinkGraph, NoteIdentity, VaultMetadata, VaultConfiguration
from vault_graph.session import resolve_vault, set_active_vault, get_active_vault
from vault_graph.server import mcp, run_server

# Import tools to register them with the MCP server
from vault_graph import tools  # noqa: F401

__version__ = "0.1.0"
__all__ = [
    "get_vault_configuration",
    "load_vault_configuration",
    "LinkGraph",
    "NoteIdentity",
    "VaultMetadata",
    "VaultConfiguration",
    "resolve_vault",
    "set_active_vault",
    "get_active_vault",
    "mcp",
    "run_server",
]
