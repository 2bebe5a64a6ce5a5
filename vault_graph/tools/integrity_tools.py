"""Link integrity MCP tools.

This module provides MCP tool wrappers for broken link maintenance:
- Report broken links with ranked repair candidates
- Auto-fix broken links (dry run unless explicitly disabled)
- Repair a single link to a user-chosen target

All tools delegate to core operations in vault_graph.core.integrity.
"""
from __future__ import annotations

import logging
from typing import Any

from mcp.server.fastmcp import Context

from vault_graph.server import mcp
from vault_graph.session import resolve_vault
from vault_graph.models import (
    FindBrokenLinksInput,
    FixBrokenLinksInput,
    RepairBrokenLinkInput,
)
from vault_graph.core.integrity import (
    find_broken_links as find_broken_references,
    fix_broken_links as fix_broken_references,
    repair_reference,
)
from vault_graph.core.vault_operations import ensure_vault_ready

logger = logging.getLogger(__name__)


@mcp.tool()
async def find_broken_links(
    input: FindBrokenLinksInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Find links that do not resolve to any note, with repair suggestions.

    Checks wikilinks ([[Note]], ![[Note]]) and markdown links ([text](Note.md)).
    Links to attachments and external URLs are not checked. Each broken link
    lists up to 3 candidate notes with similar names; the first one is used
    for suggestedFix.

    Args:
        input (FindBrokenLinksInput): Validated input containing:
            - vault (str, optional): Vault name (omit to use active vault)

    Returns:
        {
            "vault": str,
            "broken_count": int,
            "auto_fixable_count": int,
            "broken": [
                {
                    "sourceFile": str,
                    "lineNumber": int,
                    "linkText": str,
                    "linkTarget": str,
                    "linkType": "wikilink" | "markdown",
                    "suggestedFix": str | None,
                    "canAutoFix": bool,
                    "candidates": [str]
                }
            ],
            "ambiguous": [...]   # Links that matched several notes
        }

    Examples:
        - Use when: Checking vault health after reorganizing folders
        - Workflow: find_broken_links() → repair_broken_link() per link
        - Workflow: find_broken_links() → fix_broken_links(dry_run=False)
    """
    metadata = resolve_vault(input.vault, ctx)
    ensure_vault_ready(metadata)
    report = find_broken_references(metadata)
    return {"vault": metadata.name, **report.as_payload()}


# Dry run by default: an unreviewed auto-fix can point links at the wrong note.
@mcp.tool()
async def fix_broken_links(
    input: FixBrokenLinksInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Rewrite every auto-fixable broken link to its best candidate.

    Each affected note is read once and written once. Failures are reported
    per link; one unwritable note does not stop the others.

    Args:
        input (FixBrokenLinksInput): Validated input containing:
            - dry_run (bool): Only report planned fixes (default True)
            - vault (str, optional): Vault name (omit to use active vault)

    Returns:
        {
            "vault": str,
            "dry_run": bool,
            "fixed": int,
            "planned": int,      # Dry run only: fixes that would be written
            "failed": int,
            "files_updated": [str],
            "outcomes": [{..., "replacement": str | None, "fixed": bool, "error": str | None}]
        }

    Examples:
        - Use when: Many links broke after a folder rename
        - Always: Review the dry run output before dry_run=False
    """
    metadata = resolve_vault(input.vault, ctx)
    ensure_vault_ready(metadata)
    report = fix_broken_references(metadata, dry_run=input.dry_run)
    return {"vault": metadata.name, **report.as_payload()}


@mcp.tool()
async def repair_broken_link(
    input: RepairBrokenLinkInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Point one link at a chosen note.

    Alias, heading fragment and embed markers are kept. The note is re-read
    before writing; if the link text has moved off the given line the repair
    is reported as not applied.

    Args:
        input (RepairBrokenLinkInput): Validated input containing:
            - title (str): Note containing the link (path without .md)
            - line_number (int): 1-based line from find_broken_links
            - link_text (str): Exact link text from find_broken_links
            - new_target (str): Note to link to (path without .md)
            - vault (str, optional): Vault name (omit to use active vault)

    Returns:
        {"vault": str, "sourceFile": str, "lineNumber": int, "linkText": str,
         "replacement": str | None, "fixed": bool, "error": str | None, ...}

    Error Handling:
        - ValidationError: Invalid title, line number or link text
        - Link text is not a single link → Error
        - Target note not found → fixed: False with error
    """
    metadata = resolve_vault(input.vault, ctx)
    ensure_vault_ready(metadata)
    outcome = repair_reference(
        metadata,
        input.title,
        input.line_number,
        input.link_text,
        input.new_target,
    )
    if not outcome.fixed:
        logger.info("Link repair in '%s' not applied: %s", input.title, outcome.error)
    return {"vault": metadata.name, **outcome.as_payload()}
