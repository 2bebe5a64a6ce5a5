"""Pydantic input models for move and rename operations.

This module defines input models for the rename-safe move tools:
- Move or rename one note, updating links to it
- Apply several moves in order
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator

from .base import BaseVaultInput, clean_note_title


class NoteMove(BaseModel):
    """One ``old_title`` to ``new_title`` move."""

    old_title: str = Field(
        min_length=1,
        description=(
            "Current note identifier (path without .md extension). "
            "Example: 'Projects/Old Name'"
        )
    )

    new_title: str = Field(
        min_length=1,
        description=(
            "New note identifier (path without .md extension). "
            "Examples: 'Projects/New Name' (rename), "
            "'Archive/Old Name' (move), 'Archive/New Name' (move and rename)"
        )
    )

    @field_validator('old_title', 'new_title')
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Validate note title using the same rules as BaseNoteInput."""
        return clean_note_title(v)

    @model_validator(mode='after')
    def validate_titles_different(self) -> 'NoteMove':
        """Validate that old_title and new_title are different.

        Raises:
            ValueError: If old_title equals new_title
        """
        if self.old_title == self.new_title:
            raise ValueError(
                "Old title and new title must be different. "
                f"Both are set to '{self.old_title}'. "
                "If you want to keep the same name, you don't need to move the note."
            )
        return self


class MoveNoteInput(NoteMove, BaseVaultInput):
    """Input model for move_note tool.

    Moves or renames a note, optionally updating every wikilink and markdown
    link that pointed at the old location.

    Examples:
        >>> MoveNoteInput(old_title="Old Name", new_title="New Name")
        >>> MoveNoteInput(old_title="Folder/Note", new_title="Archive/Note", update_links=False)
    """

    update_links: bool = Field(
        True,
        description=(
            "If True, update all wikilinks ([[link]]) and markdown links "
            "that reference the old path. Default: True (recommended for vault consistency)."
        )
    )

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {
                    "old_title": "Projects/Old Name",
                    "new_title": "Projects/New Name",
                    "update_links": True,
                    "vault": None
                },
                {
                    "old_title": "Inbox/Meeting",
                    "new_title": "Archive/2025/Meeting",
                    "update_links": True,
                    "vault": "work"
                }
            ]
        }


class BatchMoveNotesInput(BaseVaultInput):
    """Input model for batch_move_notes tool.

    Moves are applied in list order; each one updates links before the next
    starts, so a later move may rename a note an earlier move linked to.

    Examples:
        >>> BatchMoveNotesInput(moves=[{"old_title": "A", "new_title": "Archive/A"}])
    """

    moves: list[NoteMove] = Field(
        min_length=1,
        max_length=200,
        description="Moves to apply, in order (1-200 entries)."
    )

    update_links: bool = Field(
        True,
        description="If True, update links after every move. Default: True."
    )

    @model_validator(mode='after')
    def validate_distinct_sources(self) -> 'BatchMoveNotesInput':
        """Reject batches that move the same note twice."""
        seen: set[str] = set()
        for move in self.moves:
            if move.old_title in seen:
                raise ValueError(f"Note '{move.old_title}' appears more than once as old_title")
            seen.add(move.old_title)
        return self

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {
                    "moves": [
                        {"old_title": "Inbox/Plan", "new_title": "Projects/Plan"},
                        {"old_title": "Inbox/Notes", "new_title": "Projects/Notes"}
                    ],
                    "update_links": True,
                    "vault": None
                }
            ]
        }


def as_pairs(moves: list[NoteMove]) -> list[tuple[str, str]]:
    return [(move.old_title, move.new_title) for move in moves]

