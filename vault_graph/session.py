"""Per-session active vault selection.

Graph tools take an optional ``vault`` argument. When it is omitted the vault
chosen with ``set_active_vault`` for the calling MCP session is used, and
failing that the configured default. The engine itself never sees this state;
it only receives the resolved :class:`VaultMetadata`.
"""

from typing import Dict, Optional
from mcp.server.fastmcp import Context

from vault_graph.config import get_vault_configuration
from vault_graph.data_models import VaultMetadata

# session key -> vault name
_ACTIVE_VAULTS: Dict[int, str] = {}


def get_session_key(ctx: Context) -> int:
    """Key for the MCP session behind ``ctx``; stable for the session's lifetime."""
    return id(ctx.session)


def set_active_vault(ctx: Context, vault_name: str) -> VaultMetadata:
    """Remember ``vault_name`` as the active vault for this session.

    Raises:
        ValueError: If ``vault_name`` is not in ``vaults.yaml``.
    """
    metadata = get_vault_configuration().get(vault_name)
    _ACTIVE_VAULTS[get_session_key(ctx)] = metadata.name
    return metadata


def get_active_vault(ctx: Context) -> VaultMetadata:
    """Active vault for the session, or the configured default."""
    configuration = get_vault_configuration()
    vault_name = _ACTIVE_VAULTS.get(get_session_key(ctx), configuration.default_vault)
    return configuration.get(vault_name)


def resolve_vault(vault: Optional[str], ctx: Optional[Context] = None) -> VaultMetadata:
    """Pick the vault a tool call operates on.

    Args:
        vault: Vault name passed explicitly by the caller; wins when given.
        ctx: FastMCP context, used to look up the session's active vault.

    Returns:
        The resolved :class:`VaultMetadata`.

    Raises:
        ValueError: If ``vault`` is not a configured vault name.
    """
    configuration = get_vault_configuration()
    if vault:
        return configuration.get(vault)

    if ctx is not None:
        return get_active_vault(ctx)

    return configuration.get(configuration.default_vault)
