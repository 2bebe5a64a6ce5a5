"""Pydantic input models for MCP tool validation.

This package defines Pydantic models that provide automatic input validation
for all MCP tools. Each model represents the input schema for one tool,
with field-level validation, type checking, and descriptive error messages.

Architecture:
- base: Base models (BaseVaultInput, BaseNoteInput) for common validation
- graph_models: Input models for link graph and analytics operations
- integrity_models: Input models for broken link detection and repair
- rename_models: Input models for rename-safe note moves
- vault_models: Input models for vault management operations

Usage:
    from vault_graph.models import GetLinkGraphInput, FindBrokenLinksInput
    from vault_graph.models import MoveNoteInput, BatchMoveNotesInput
    from vault_graph.models import ListVaultsInput, SetActiveVaultInput
"""

from .base import BaseVaultInput, BaseNoteInput, clean_note_title
from .graph_models import (
    GetLinkGraphInput,
    FindOrphanNotesInput,
    FindMostConnectedInput,
    FindTagClustersInput,
    FindBacklinksInput,
)
from .integrity_models import (
    FindBrokenLinksInput,
    FixBrokenLinksInput,
    RepairBrokenLinkInput,
)
from .rename_models import (
    NoteMove,
    MoveNoteInput,
    BatchMoveNotesInput,
)
from .vault_models import (
    ListVaultsInput,
    SetActiveVaultInput,
)

__all__ = [
    # Base models
    "BaseVaultInput",
    "BaseNoteInput",
    "clean_note_title",
    # Graph models
    "GetLinkGraphInput",
    "FindOrphanNotesInput",
    "FindMostConnectedInput",
    "FindTagClustersInput",
    "FindBacklinksInput",
    # Integrity models
    "FindBrokenLinksInput",
    "FixBrokenLinksInput",
    "RepairBrokenLinkInput",
    # Rename models
    "NoteMove",
    "MoveNoteInput",
    "BatchMoveNotesInput",
    # Vault models
    "ListVaultsInput",
    "SetActiveVaultInput",
]
