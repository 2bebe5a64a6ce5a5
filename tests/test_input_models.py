"""Tests for Pydantic input models.

This test suite validates the input validation logic for MCP tools,
ensuring that:
- Valid inputs are accepted and normalized correctly
- Invalid inputs raise ValidationError with descriptive messages
- Schema generation produces correct JSON schemas for MCP
"""

import pytest
from pydantic import ValidationError

from vault_graph.models import (
    BaseNoteInput,
    BatchMoveNotesInput,
    FindMostConnectedInput,
    FindTagClustersInput,
    FixBrokenLinksInput,
    GetLinkGraphInput,
    MoveNoteInput,
    RepairBrokenLinkInput,
)
from vault_graph.models.rename_models import as_pairs


class TestBaseNoteInput:
    """Test suite for BaseNoteInput model validation."""

    def test_valid_nested_title(self):
        """Test that nested paths with folders are accepted."""
        model = BaseNoteInput(title="Daily Notes/2025-10-27")
        assert model.title == "Daily Notes/2025-10-27"
        assert model.vault is None

    def test_title_with_md_extension_is_stripped(self):
        """Test that .md extension is automatically stripped, in any case."""
        assert BaseNoteInput(title="My Note.md").title == "My Note"
        assert BaseNoteInput(title="My Note.MD").title == "My Note"

    def test_dots_in_name_are_kept(self):
        model = BaseNoteInput(title="Projects/v1.4 Release Notes")
        assert model.title == "Projects/v1.4 Release Notes"

    def test_vault_with_whitespace_is_stripped(self):
        """Test that vault names with leading/trailing whitespace are stripped."""
        model = BaseNoteInput(title="My Note", vault="  personal  ")
        assert model.vault == "personal"

    @pytest.mark.parametrize("title", ["", "   ", ".md", "./My Note", "../My Note", "Projects/../Secrets"])
    def test_invalid_titles(self, title):
        """Empty titles and traversal segments are rejected."""
        with pytest.raises(ValidationError):
            BaseNoteInput(title=title)

    def test_absolute_path_raises_error(self):
        """Test that absolute paths (starting with /) raise ValidationError."""
        with pytest.raises(ValidationError) as exc_info:
            BaseNoteInput(title="/etc/passwd")

        error_messages = " ".join(str(e) for e in exc_info.value.errors())
        assert "relative" in error_messages.lower()

    def test_empty_vault_string_raises_error(self):
        """Test that empty vault string raises ValidationError."""
        with pytest.raises(ValidationError) as exc_info:
            BaseNoteInput(title="My Note", vault="")

        error_messages = " ".join(str(e) for e in exc_info.value.errors())
        assert "vault" in error_messages.lower()


class TestGraphInputs:
    """Inputs of the read-only graph tools."""

    def test_defaults(self):
        assert GetLinkGraphInput().include_graph is False
        assert FindMostConnectedInput().limit == 10
        assert FindTagClustersInput().min_size == 3
        assert FixBrokenLinksInput().dry_run is True

    def test_limit_bounds(self):
        with pytest.raises(ValidationError):
            FindMostConnectedInput(limit=0)
        with pytest.raises(ValidationError):
            FindTagClustersInput(min_size=0)

    def test_json_schema_has_examples(self):
        schema = FindMostConnectedInput.model_json_schema()
        assert "limit" in schema["properties"]
        assert "examples" in schema


class TestMoveInputs:
    """Move and batch move validation."""

    def test_valid_move(self):
        model = MoveNoteInput(old_title="Inbox/Plan.md", new_title="Projects/Plan")
        assert model.old_title == "Inbox/Plan"
        assert model.update_links is True
        assert model.vault is None

    def test_same_titles_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            MoveNoteInput(old_title="Plan", new_title="Plan.md")
        assert "different" in str(exc_info.value)

    def test_traversal_rejected(self):
        with pytest.raises(ValidationError):
            MoveNoteInput(old_title="Plan", new_title="../Plan")

    def test_batch(self):
        model = BatchMoveNotesInput(
            moves=[
                {"old_title": "A", "new_title": "Archive/A"},
                {"old_title": "B.md", "new_title": "Archive/B"},
            ],
            vault="work",
        )
        assert as_pairs(model.moves) == [("A", "Archive/A"), ("B", "Archive/B")]
        assert model.vault == "work"

    def test_batch_rejects_empty_and_repeated_sources(self):
        with pytest.raises(ValidationError):
            BatchMoveNotesInput(moves=[])
        with pytest.raises(ValidationError):
            BatchMoveNotesInput(
                moves=[
                    {"old_title": "A", "new_title": "B"},
                    {"old_title": "A", "new_title": "C"},
                ]
            )


class TestRepairBrokenLinkInput:
    def test_valid(self):
        model = RepairBrokenLinkInput(
            title="Journal/Today",
            line_number=3,
            link_text="  [[Projcet|plan]] ",
            new_target="Projects/Plan.md",
        )
        assert model.link_text == "[[Projcet|plan]]"
        assert model.new_target == "Projects/Plan"

    def test_embed_and_markdown_links_accepted(self):
        for text in ("![[Img Note]]", "[x](Note.md)"):
            assert RepairBrokenLinkInput(title="A", line_number=1, link_text=text, new_target="B").link_text == text

    def test_invalid(self):
        with pytest.raises(ValidationError):
            RepairBrokenLinkInput(title="A", line_number=0, link_text="[[B]]", new_target="B")
        with pytest.raises(ValidationError):
            RepairBrokenLinkInput(title="A", line_number=1, link_text="plain words", new_target="B")
        with pytest.raises(ValidationError):
            RepairBrokenLinkInput(title="A", line_number=1, link_text="[[B]]", new_target="/abs")
