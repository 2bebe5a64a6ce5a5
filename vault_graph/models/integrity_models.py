"""Pydantic input models for link integrity operations.

This module defines input models for broken link tools:
- Report broken links with repair candidates
- Auto-fix broken links (dry run by default)
- Repair one link to a chosen target
"""

from __future__ import annotations

from pydantic import Field, field_validator

from .base import BaseNoteInput, BaseVaultInput, clean_note_title


class FindBrokenLinksInput(BaseVaultInput):
    """Input model for find_broken_links tool.

    Examples:
        >>> FindBrokenLinksInput()
        >>> FindBrokenLinksInput(vault="work")
    """

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [{}, {"vault": "work"}]
        }


class FixBrokenLinksInput(BaseVaultInput):
    """Input model for fix_broken_links tool.

    Rewrites each auto-fixable broken link to its best candidate. Nothing is
    written unless ``dry_run`` is explicitly set to False.

    Examples:
        >>> FixBrokenLinksInput()
        >>> FixBrokenLinksInput(dry_run=False)
    """

    dry_run: bool = Field(
        True,
        description=(
            "If True, only report the fixes that would be applied. "
            "Set to False to rewrite the affected notes. Default: True."
        )
    )

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [{"dry_run": True}, {"dry_run": False, "vault": "work"}]
        }


class RepairBrokenLinkInput(BaseNoteInput):
    """Input model for repair_broken_link tool.

    ``title`` is the note containing the link; the link is identified by its
    line number and exact text as reported by find_broken_links.

    Examples:
        >>> RepairBrokenLinkInput(
        ...     title="Journal/Today", line_number=3, link_text="[[Projcet Plan]]", new_target="Projects/Plan"
        ... )
    """

    line_number: int = Field(
        ge=1,
        description="1-based line number of the link, as reported by find_broken_links."
    )

    link_text: str = Field(
        min_length=1,
        description=(
            "Exact link text as it appears in the note. "
            "Examples: '[[Projcet Plan]]', '[plan](../Projcet%20Plan.md)'"
        )
    )

    new_target: str = Field(
        min_length=1,
        description=(
            "Note the link should point to (path without .md extension). "
            "Usually one of the candidates from find_broken_links."
        )
    )

    @field_validator('link_text')
    @classmethod
    def validate_link_text(cls, v: str) -> str:
        """Require a wikilink or markdown link."""
        cleaned = v.strip()
        if not cleaned.lstrip("!").startswith("["):
            raise ValueError(
                "Link text must be a wikilink ([[Note]]) or markdown link ([text](Note.md)). "
                f"Got: '{cleaned}'"
            )
        return cleaned

    @field_validator('new_target')
    @classmethod
    def validate_new_target(cls, v: str) -> str:
        return clean_note_title(v)

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {
                    "title": "Journal/Today",
                    "line_number": 3,
                    "link_text": "[[Projcet Plan]]",
                    "new_target": "Projects/Plan",
                    "vault": None
                }
            ]
        }
