"""Pydantic input models for link graph and analytics operations.

This module defines input models for read-only graph tools:
- Build the link graph
- Find orphan notes
- Rank most-connected notes
- Find tag clusters
- Find backlinks to a note
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from vault_graph.constants import MIN_CLUSTER_SIZE
from .base import BaseNoteInput, BaseVaultInput


class GetLinkGraphInput(BaseVaultInput):
    """Input model for get_link_graph tool.

    Examples:
        >>> GetLinkGraphInput()
        >>> GetLinkGraphInput(include_graph=True, vault="work")
    """

    include_graph: bool = Field(
        False,
        description=(
            "If True, include every node and weighted edge in the response. "
            "Default: False (statistics only, much smaller response)."
        )
    )

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {"include_graph": False, "vault": None},
                {"include_graph": True, "vault": "work"}
            ]
        }


class FindOrphanNotesInput(BaseVaultInput):
    """Input model for find_orphan_notes tool.

    Examples:
        >>> FindOrphanNotesInput()
    """

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [{}, {"vault": "personal"}]
        }


class FindMostConnectedInput(BaseVaultInput):
    """Input model for find_most_connected_notes tool.

    Examples:
        >>> FindMostConnectedInput(limit=5)
    """

    limit: int = Field(
        10,
        ge=1,
        le=500,
        description="Maximum number of notes to return (1-500). Default: 10."
    )

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [{"limit": 10}, {"limit": 25, "vault": "work"}]
        }


class FindTagClustersInput(BaseVaultInput):
    """Input model for find_tag_clusters tool.

    Examples:
        >>> FindTagClustersInput()
        >>> FindTagClustersInput(min_size=5)
    """

    min_size: int = Field(
        MIN_CLUSTER_SIZE,
        ge=1,
        description=(
            "Minimum number of notes that must share a tag for it to form a cluster. "
            f"Default: {MIN_CLUSTER_SIZE}."
        )
    )

    limit: Optional[int] = Field(
        None,
        ge=1,
        description="Maximum number of clusters to return, largest first (omit for all)."
    )

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [{"min_size": 3}, {"min_size": 5, "limit": 10}]
        }


class FindBacklinksInput(BaseNoteInput):
    """Input model for find_backlinks tool.

    Examples:
        >>> FindBacklinksInput(title="Projects/Plan")
    """

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {"title": "Projects/Plan"},
                {"title": "README", "vault": "work"}
            ]
        }
