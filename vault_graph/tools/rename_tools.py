"""Rename-safe move MCP tools.

This module provides MCP tool wrappers for moving notes without breaking links:
- Move or rename one note
- Apply several moves in order

All tools delegate to core operations in vault_graph.core.rewriter.
"""
from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import Context

from vault_graph.server import mcp
from vault_graph.session import resolve_vault
from vault_graph.models import MoveNoteInput, BatchMoveNotesInput
from vault_graph.models.rename_models import as_pairs
from vault_graph.core.rewriter import batch_move_notes as batch_move, move_note as move


# Moves or renames a note and optionally updates links to preserve consistency.
@mcp.tool()
async def move_note(
    input: MoveNoteInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Move or rename a note, optionally updating links to it.

    Moves a note to a new location and/or renames it, then rewrites every
    wikilink ([[link]]) and markdown link ([](link)) that pointed at it.
    Bare-name links stay bare names unless another note shares the new name;
    aliases, heading fragments and embeds are kept.

    Args:
        input (MoveNoteInput): Validated input containing:
            - old_title (str): Current note path (without .md)
                Example: "Projects/Old Name"
            - new_title (str): New note path (without .md)
                Examples: "Projects/New Name" (rename only),
                         "Archive/Old Name" (move only),
                         "Archive/New Name" (move and rename)
            - update_links (bool): If True, update all links to this note
                Default: True (recommended for vault consistency)
            - vault (str, optional): Vault name (omit to use active vault)

    Returns:
        {
            "vault": str,
            "old_path": str,
            "new_path": str,
            "links_updated": int,       # Number of notes with updated links
            "references_updated": int,  # Number of links rewritten
            "failed_files": int,        # Notes that could not be rewritten
            "status": "moved"
        }

    Examples:
        - Use when: Renaming note to fix typo
        - Use when: Moving note to different folder
        - Use update_links=False: Only if you manage links manually

    Error Handling:
        - ValidationError: Invalid title format, empty titles, or titles are the same
        - Old note not found → Error with path
        - New note already exists → Error: "Note already exists"
        - A note whose links cannot be rewritten is counted in failed_files;
          the move itself is not undone
    """
    metadata = resolve_vault(input.vault, ctx)
    return move(metadata, input.old_title, input.new_title, update_links=input.update_links)


@mcp.tool()
async def batch_move_notes(
    input: BatchMoveNotesInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Apply several moves in order, updating links after each one.

    A failed move (missing note, destination taken) is reported and the
    remaining moves still run.

    Args:
        input (BatchMoveNotesInput): Validated input containing:
            - moves (list): [{"old_title": str, "new_title": str}, ...]
            - update_links (bool): Update links after every move (default True)
            - vault (str, optional): Vault name (omit to use active vault)

    Returns:
        {
            "vault": str,
            "moved": int,
            "failed": int,
            "results": [...]   # One move_note result or {"status": "failed", "error": str} per move
        }

    Examples:
        - Use when: Reorganizing a folder of notes at once
        - Don't use: Single note → Use move_note()
    """
    metadata = resolve_vault(input.vault, ctx)
    return batch_move(metadata, as_pairs(input.moves), update_links=input.update_links)
