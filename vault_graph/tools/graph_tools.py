"""Link graph and analytics MCP tools.

This module provides MCP tool wrappers for read-only graph queries:
- Build the link graph and its statistics
- Find orphan notes
- Rank the most-connected notes
- Find tag clusters
- Find backlinks to a note

Every call scans the vault afresh; nothing is cached between calls.
All tools delegate to vault_graph.core.graph_builder and vault_graph.core.analytics.
"""
from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import Context

from vault_graph.server import mcp
from vault_graph.session import resolve_vault
from vault_graph.models import (
    GetLinkGraphInput,
    FindOrphanNotesInput,
    FindMostConnectedInput,
    FindTagClustersInput,
    FindBacklinksInput,
)
from vault_graph.core.analytics import (
    find_backlinks as find_note_backlinks,
    find_clusters,
    find_orphans,
    graph_payload,
    graph_statistics,
    most_connected,
)
from vault_graph.core.graph_builder import build_link_graph
from vault_graph.core.vault_operations import ensure_vault_ready, note_identity
from vault_graph.data_models import LinkGraph, VaultMetadata


def _graph_for(metadata: VaultMetadata) -> LinkGraph:
    ensure_vault_ready(metadata)
    return build_link_graph(metadata)


# Statistics by default; the full node/edge list can be large for big vaults.
@mcp.tool()
async def get_link_graph(
    input: GetLinkGraphInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Build the vault's link graph and summarize it.

    Scans every note, resolves wikilinks ([[Note]]) and markdown links
    ([text](Note.md)) to notes, and reports graph statistics. Several links
    from one note to another count as one connection; the raw count is the
    edge weight.

    Args:
        input (GetLinkGraphInput): Validated input containing:
            - include_graph (bool): Include all nodes and weighted edges
                Default: False
            - vault (str, optional): Vault name (omit to use active vault)

    Returns:
        {
            "vault": str,
            "stats": {
                "totalNodes": int,
                "totalEdges": int,          # Distinct note-to-note connections
                "totalReferences": int,     # Resolved links, duplicates included
                "brokenReferences": int,
                "ambiguousReferences": int,
                "orphanCount": int,
                "averageConnections": float,
                "mostConnectedNote": {"path": str, "degree": int} | None
            },
            "nodes": [...],   # Only when include_graph is True
            "edges": [{"source": str, "target": str, "weight": int}]
        }

    Examples:
        - Use when: Getting an overview of how connected a vault is
        - Use when: Exporting the graph for visualization (include_graph=True)
        - Don't use: Only need broken links → Use find_broken_links()

    Error Handling:
        - Vault not accessible → Error with vault path
        - Unreadable notes are skipped and logged, not reported as errors
    """
    metadata = resolve_vault(input.vault, ctx)
    graph = _graph_for(metadata)
    result: dict[str, Any] = {"vault": metadata.name, "stats": graph_statistics(graph)}
    if input.include_graph:
        result.update(graph_payload(graph))
    return result


@mcp.tool()
async def find_orphan_notes(
    input: FindOrphanNotesInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Find notes with no incoming and no outgoing links.

    A note that only links to itself is still an orphan.

    Args:
        input (FindOrphanNotesInput): Validated input containing:
            - vault (str, optional): Vault name (omit to use active vault)

    Returns:
        {
            "vault": str,
            "count": int,
            "orphans": [{"id": str, "path": str, "title": str, "tags": [str], "size": int}]
        }

    Examples:
        - Use when: Cleaning up a vault, finding forgotten notes
        - Workflow: find_orphan_notes() → find_tag_clusters() to place them
    """
    metadata = resolve_vault(input.vault, ctx)
    orphans = find_orphans(_graph_for(metadata))
    return {
        "vault": metadata.name,
        "count": len(orphans),
        "orphans": [node.as_payload() for node in orphans],
    }


@mcp.tool()
async def find_most_connected_notes(
    input: FindMostConnectedInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Rank notes by number of connections (incoming plus outgoing).

    Ties are ordered by path so results are stable between calls.

    Args:
        input (FindMostConnectedInput): Validated input containing:
            - limit (int): Maximum number of notes (1-500, default 10)
            - vault (str, optional): Vault name (omit to use active vault)

    Returns:
        {
            "vault": str,
            "notes": [{"path": str, "title": str, "degree": int}]
        }

    Examples:
        - Use when: Finding hub or index notes
        - Use when: Deciding which notes to review first
    """
    metadata = resolve_vault(input.vault, ctx)
    ranked = most_connected(_graph_for(metadata), limit=input.limit)
    return {
        "vault": metadata.name,
        "notes": [
            {"path": node.path, "title": node.title, "degree": degree}
            for node, degree in ranked
        ],
    }


@mcp.tool()
async def find_tag_clusters(
    input: FindTagClustersInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Group notes by shared tag and find each group's central note.

    Tags come from frontmatter (tags: [...]) and inline #tags. The central
    note is the member with the most links to other members of the cluster.

    Args:
        input (FindTagClustersInput): Validated input containing:
            - min_size (int): Notes needed to form a cluster (default 3)
            - limit (int, optional): Maximum clusters, largest first
            - vault (str, optional): Vault name (omit to use active vault)

    Returns:
        {
            "vault": str,
            "count": int,
            "clusters": [
                {
                    "name": str,               # "#tag"
                    "nodes": [str],
                    "centralNode": str,
                    "internalConnections": int
                }
            ]
        }

    Examples:
        - Use when: Discovering topics in a vault
        - Use when: Finding a good entry note for a topic (centralNode)
    """
    metadata = resolve_vault(input.vault, ctx)
    clusters = find_clusters(_graph_for(metadata), min_size=input.min_size)
    if input.limit is not None:
        clusters = clusters[: input.limit]
    return {
        "vault": metadata.name,
        "count": len(clusters),
        "clusters": [cluster.as_payload() for cluster in clusters],
    }


@mcp.tool()
async def find_backlinks(
    input: FindBacklinksInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """List the notes that link to a note.

    Useful before deleting or merging a note to see what would break.

    Args:
        input (FindBacklinksInput): Validated input containing:
            - title (str): Note identifier (path without .md extension)
            - vault (str, optional): Vault name (omit to use active vault)

    Returns:
        {"vault": str, "note": str, "count": int, "backlinks": [{"path": str, "title": str}]}

    Error Handling:
        - ValidationError: Invalid title format or path traversal attempt
        - Note not found → Error with note path
    """
    metadata = resolve_vault(input.vault, ctx)
    graph = _graph_for(metadata)
    identity = note_identity(metadata, input.title)
    if identity not in graph.nodes:
        raise FileNotFoundError(f"Note '{identity.path}' not found in vault '{metadata.name}'.")

    sources = find_note_backlinks(graph, identity)
    return {
        "vault": metadata.name,
        "note": identity.path,
        "count": len(sources),
        "backlinks": [{"path": node.path, "title": node.title} for node in sources],
    }
