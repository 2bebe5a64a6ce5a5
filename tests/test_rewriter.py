"""Tests for rename propagation and rename-safe moves."""

import pytest

from vault_graph.core.rewriter import batch_move_notes, move_note, propagate_rename
from vault_graph.data_models import NoteIdentity

from conftest import FailingStorage, read

OLD = NoteIdentity.from_path("Notes/Old")
NEW = NoteIdentity.from_path("Notes/New")


def rename(vault, old="Notes/Old.md", new="Notes/New.md"):
    (vault.path / new).parent.mkdir(parents=True, exist_ok=True)
    (vault.path / old).rename(vault.path / new)


class TestPropagateRename:
    """Rewriting references after a note changed identity."""

    def test_bare_and_aliased_references(self, make_vault):
        """Other.md with [[Old]] and [[Old|alias]]: one file, two references."""
        vault = make_vault({"Notes/Old.md": "old", "Other.md": "[[Old]] and [[Old|alias]]"})
        rename(vault)
        result = propagate_rename(vault, OLD, NEW)
        assert read(vault, "Other.md") == "[[New]] and [[New|alias]]"
        assert result.files_updated == 1
        assert result.references_updated == 2
        assert result.failures == ()

    def test_all_reference_forms(self, make_vault):
        vault = make_vault(
            {
                "Notes/Old.md": "old",
                "Other.md": (
                    "[[Notes/Old]] [[old]] ![[Old#Part]] [[Old.md|x]]\n"
                    "[md](Notes/Old.md) [enc](<Notes/Old.md#Sec>)"
                ),
                "Notes/Sibling.md": "[rel](Old.md) [[Old\\|t]]",
            }
        )
        rename(vault)
        result = propagate_rename(vault, OLD, NEW)
        assert read(vault, "Other.md") == (
            "[[Notes/New]] [[New]] ![[New#Part]] [[New|x]]\n"
            "[md](Notes/New.md) [enc](<Notes/New.md#Sec>)"
        )
        assert read(vault, "Notes/Sibling.md") == "[rel](New.md) [[New\\|t]]"
        assert result.files_updated == 2
        assert result.references_updated == 8

    def test_move_to_other_folder_rewrites_relative_links(self, make_vault):
        vault = make_vault({"Notes/Old.md": "", "Notes/Sibling.md": "[see](Old.md)"})
        rename(vault, new="Archive/Old.md")
        propagate_rename(vault, OLD, NoteIdentity.from_path("Archive/Old"))
        assert read(vault, "Notes/Sibling.md") == "[see](../Archive/Old.md)"

    @pytest.mark.parametrize(
        "name, link",
        [
            ("Café Notes", "[x](Notes/Café%20Notes.md)"),
            ("Bob's Notes", "[x](Notes/Bob's%20Notes.md)"),
            ("Café Notes", "[x](Notes/Caf%C3%A9%20Notes.md)"),
        ],
    )
    def test_partly_encoded_inline_links(self, make_vault, name, link):
        """Links the graph resolves through URL-unquoting are rewritten too."""
        vault = make_vault({f"Notes/{name}.md": "", "Other.md": f"see {link}"})
        rename(vault, old=f"Notes/{name}.md")
        result = propagate_rename(vault, NoteIdentity.from_path(f"Notes/{name}"), NEW)
        assert result.files_updated == 1
        assert read(vault, "Other.md") == "see [x](Notes/New.md)"

    def test_other_note_with_same_name_is_untouched(self, make_vault):
        """A bare name that resolved to a different note is left alone."""
        vault = make_vault(
            {
                "Notes/Old.md": "",
                "Archive/Old.md": "",
                "Other.md": "[[Old]] [[Notes/Old]]",
            }
        )
        rename(vault)
        propagate_rename(vault, OLD, NEW)
        # [[Old]] resolved to Archive/Old (first path), so only the path form moves
        assert read(vault, "Other.md") == "[[Old]] [[Notes/New]]"

    def test_new_name_that_is_shared_becomes_a_path(self, make_vault):
        vault = make_vault({"Notes/Old.md": "", "Elsewhere/New.md": "", "Other.md": "[[Old]]"})
        rename(vault)
        propagate_rename(vault, OLD, NEW)
        assert read(vault, "Other.md") == "[[Notes/New]]"

    def test_destination_and_code_blocks_are_not_rewritten(self, make_vault):
        vault = make_vault(
            {
                "Notes/Old.md": "I am [[Old]]",
                "Other.md": "```\n[[Old]]\n```\n[[Old]]",
            }
        )
        rename(vault)
        result = propagate_rename(vault, OLD, NEW)
        assert read(vault, "Notes/New.md") == "I am [[Old]]"
        assert read(vault, "Other.md") == "```\n[[Old]]\n```\n[[New]]"
        assert result.updated_files == ("Other.md",)

    def test_line_endings_preserved(self, make_vault):
        vault = make_vault({"Notes/Old.md": "", "Other.md": "a [[Old]]\r\nb\r\n"})
        rename(vault)
        propagate_rename(vault, OLD, NEW)
        assert (vault.path / "Other.md").read_bytes() == b"a [[New]]\r\nb\r\n"

    def test_partial_failure_continues(self, make_vault):
        """A file that cannot be written is reported; the others are still rewritten."""
        vault = make_vault(
            {"Notes/Old.md": "", "A.md": "[[Old]]", "B.md": "[[Old]]", "C.md": "[[Old]]"}
        )
        rename(vault)
        storage = FailingStorage(vault.path, fail_writes={"B.md"}, fail_reads={"C.md"})
        result = propagate_rename(vault, OLD, NEW, storage=storage)
        assert result.files_updated == 1
        assert [f.path for f in result.failures] == ["B.md", "C.md"]
        assert read(vault, "A.md") == "[[New]]"
        assert read(vault, "B.md") == "[[Old]]"
        payload = result.as_payload()
        assert payload["failed_files"] == 2
        assert "failures" not in payload
        assert len(result.as_payload(verbose=True)["failures"]) == 2

    def test_same_identity_is_a_no_op(self, make_vault):
        vault = make_vault({"Notes/Old.md": "", "Other.md": "[[Old]]"})
        assert propagate_rename(vault, OLD, OLD).files_updated == 0

    def test_identities_required(self, make_vault):
        vault = make_vault({})
        with pytest.raises(TypeError):
            propagate_rename(vault, "Notes/Old", NEW)


class TestMoveNote:
    """Moving files and propagating in one call."""

    def test_move_and_update(self, make_vault):
        vault = make_vault({"Notes/Old.md": "body", "Other.md": "[[Old|alias]]"})
        result = move_note(vault, "Notes/Old", "Notes/New")
        assert result["status"] == "moved"
        assert result["links_updated"] == 1
        assert result["references_updated"] == 1
        assert read(vault, "Notes/New.md") == "body"
        assert not (vault.path / "Notes/Old.md").exists()
        assert read(vault, "Other.md") == "[[New|alias]]"

    def test_move_without_link_updates(self, make_vault):
        vault = make_vault({"Notes/Old.md": "", "Other.md": "[[Old]]"})
        result = move_note(vault, "Notes/Old", "Archive/Old", update_links=False)
        assert result["links_updated"] == 0
        assert read(vault, "Other.md") == "[[Old]]"

    def test_missing_source_and_taken_destination(self, make_vault):
        vault = make_vault({"A.md": "", "B.md": ""})
        with pytest.raises(FileNotFoundError):
            move_note(vault, "Nope", "Other")
        with pytest.raises(FileExistsError):
            move_note(vault, "A", "B")

    def test_missing_vault(self, make_vault, tmp_path):
        vault = make_vault({})
        gone = type(vault)(name="gone", path=tmp_path / "gone", description="", exists=False)
        with pytest.raises(FileNotFoundError):
            move_note(gone, "A", "B")


class TestBatchMove:
    def test_moves_apply_in_order(self, make_vault):
        """The second move sees the link the first move rewrote."""
        vault = make_vault({"A.md": "", "Index.md": "[[A]]"})
        result = batch_move_notes(vault, [("A", "B"), ("B", "Archive/C")])
        assert result["moved"] == 2
        assert result["failed"] == 0
        assert read(vault, "Index.md") == "[[C]]"

    def test_moves_rewriting_the_same_file(self, make_vault):
        """Each propagation re-reads Index.md, so the first rewrite survives the second."""
        vault = make_vault({"A.md": "", "B.md": "", "Index.md": "[[A]]\n[[B]] [[A|a]]"})
        result = batch_move_notes(vault, [("A", "X"), ("B", "Y")])
        assert [item["references_updated"] for item in result["results"]] == [2, 1]
        assert read(vault, "Index.md") == "[[X]]\n[[Y]] [[X|a]]"

    def test_failed_move_does_not_stop_the_batch(self, make_vault):
        vault = make_vault({"A.md": "", "Index.md": "[[A]]"})
        result = batch_move_notes(vault, [("Missing", "X"), ("A", "Z")])
        assert [item["status"] for item in result["results"]] == ["failed", "moved"]
        assert result["failed"] == 1
        assert read(vault, "Index.md") == "[[Z]]"
