"""MCP tools for choosing which vault the graph tools analyse."""

import logging
from typing import Any
from mcp.server.fastmcp import Context

from vault_graph.server import mcp
from vault_graph.models import ListVaultsInput, SetActiveVaultInput
from vault_graph.config import get_vault_configuration
from vault_graph.session import (
    set_active_vault as set_active_vault_session,
    get_active_vault,
    get_session_key,
)

logger = logging.getLogger(__name__)


@mcp.tool()
async def list_vaults(
    input: ListVaultsInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """List configured vaults, the default, and this session's active vault.

    Args:
        input (ListVaultsInput): Validated input (no fields required)
        ctx (Context, optional): FastMCP context for session state

    Returns:
        {
            "default": str,
            "active": str | None,
            "vaults": [
                {
                    "name": str,
                    "path": str,
                    "description": str,
                    "exists": bool,
                    "exclude": [str]   # Extra folders left out of the link graph
                }
            ]
        }

    Examples:
        - Use when: Starting a conversation, to see which vaults can be analysed
        - Use when: Graph results look incomplete, check the exclude list

    Error Handling:
        - Config file missing → Error with expected config path
        - Invalid config format → Error describing the problem entry
    """
    configuration = get_vault_configuration()
    active = None
    if ctx is not None:
        try:
            active = get_active_vault(ctx).name
        except ValueError:
            active = None

    return {
        "default": configuration.default_vault,
        "active": active,
        "vaults": [metadata.as_payload() for metadata in configuration.vaults.values()],
    }


@mcp.tool()
async def set_active_vault(
    input: SetActiveVaultInput,
    ctx: Context,
) -> dict[str, Any]:
    """Make a vault the default target for later calls in this session.

    Graph, integrity and move tools called without a vault parameter will
    use it until the session ends or another vault is selected.

    Args:
        input (SetActiveVaultInput): Validated input containing:
            - vault (str): Vault name from vaults.yaml, e.g. "research", "work"
        ctx (Context): FastMCP context for session state

    Returns:
        {"vault": str, "path": str, "exists": bool, "status": "active"}

    Error Handling:
        - ValidationError: Empty vault name or only whitespace
        - Unknown vault → Error, use list_vaults() for valid names
    """
    metadata = set_active_vault_session(ctx, input.vault)
    logger.info("Active vault for session %s set to '%s'", get_session_key(ctx), metadata.name)
    if not metadata.path.is_dir():
        logger.warning("Active vault '%s' is not accessible at %s", metadata.name, metadata.path)
    return {
        "vault": metadata.name,
        "path": str(metadata.path),
        "exists": metadata.path.is_dir(),
        "status": "active",
    }
