"""Base Pydantic models for MCP tool input validation.

This module defines base models that provide common validation patterns
for vault-wide and note-level operations. Other input models inherit from these bases.

Base Models:
- BaseVaultInput: Optional vault name shared by every graph tool
- BaseNoteInput: Adds note identifier validation for single-note operations
"""

from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, Field, field_validator


def clean_note_title(value: str) -> str:
    """Validate and normalize a note identifier.

    Enforces:
    - Non-empty title
    - No path traversal attempts (.., .)
    - Relative path only (no absolute paths)
    - Strips .md extension if present (normalized internally)

    Raises:
        ValueError: If the title is empty, absolute or escapes the vault
    """
    cleaned = value.strip().replace("\\", "/")

    if not cleaned:
        raise ValueError(
            "Note title cannot be empty. "
            "Provide a valid note identifier like 'Projects/Plan'."
        )

    parts = cleaned.split("/")
    if any(part in {".", ".."} for part in parts):
        raise ValueError(
            "Note title cannot contain '.' or '..' path segments. "
            f"Invalid title: '{cleaned}'"
        )

    if cleaned.startswith("/"):
        raise ValueError(
            "Note title must be a relative path within the vault. "
            "Do not start with '/'. "
            f"Invalid title: '{cleaned}'"
        )

    if cleaned.lower().endswith(".md"):
        cleaned = cleaned[:-3]

    if not cleaned:
        raise ValueError("Note title cannot be just '.md'. Provide a valid note name.")

    return cleaned


class BaseVaultInput(BaseModel):
    """Base model for tools that operate on a whole vault."""

    vault: Optional[str] = Field(
        None,
        description=(
            "Vault name (omit to use active vault). "
            "Use list_vaults() to discover available vaults."
        )
    )

    @field_validator('vault')
    @classmethod
    def validate_vault(cls, v: Optional[str]) -> Optional[str]:
        """Validate vault name format.

        Args:
            v: The vault name to validate

        Returns:
            The validated vault name or None

        Raises:
            ValueError: If vault name is empty string
        """
        if v is not None and not v.strip():
            raise ValueError(
                "Vault name cannot be empty. "
                "Either omit the vault parameter to use the active vault, "
                "or provide a valid vault name from list_vaults()."
            )

        return v.strip() if v else None


class BaseNoteInput(BaseVaultInput):
    """Base model for single-note operations.

    Provides standard validation for note identifiers on top of the vault name.
    """

    title: str = Field(
        min_length=1,
        description=(
            "Note identifier (path without .md extension). "
            "Examples: 'Projects/Plan', 'Daily Notes/2025-10-27'. "
            "Forward slashes for folders."
        ),
        examples=["Projects/Plan", "Daily Notes/2025-10-27", "README"]
    )

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Validate note title for safety and format."""
        return clean_note_title(v)
