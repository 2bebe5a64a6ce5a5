"""Tests for vault scanning and storage."""

import logging
import os

import pytest

from vault_graph.core.scanner import list_note_paths, scan_vault
from vault_graph.core.storage import VaultStorage
from vault_graph.data_models import NoteIdentity, VaultMetadata

from conftest import FailingStorage


@pytest.fixture
def vault(make_vault):
    return make_vault(
        {
            "A.md": "[[B]]",
            "Folder/B.md": "text",
            "Folder/Deep/C.MD": "upper-case extension",
            ".obsidian/workspace.md": "config",
            ".trash/Old.md": "deleted",
            "node_modules/pkg/README.md": "dependency",
            "Templates/Daily.md": "template",
            "Archive/Old/Note.md": "archived",
            "Archive/Keep.md": "kept",
            "image.png": "not a note",
        },
        exclude=["Templates", "Archive/Old"],
    )


class TestListing:
    """Which files count as notes."""

    def test_lists_notes_in_path_order(self, vault):
        paths = VaultStorage(vault.path).list_files(vault.exclude)
        assert paths == ["A.md", "Archive/Keep.md", "Folder/B.md", "Folder/Deep/C.MD"]

    def test_without_configured_excludes(self, vault):
        paths = VaultStorage(vault.path).list_files()
        assert "Templates/Daily.md" in paths
        assert "Archive/Old/Note.md" in paths
        assert ".obsidian/workspace.md" not in paths

    def test_list_note_paths_maps_identities(self, vault):
        paths = list_note_paths(vault)
        assert paths[NoteIdentity.from_path("Folder/Deep/C")] == "Folder/Deep/C.MD"

    def test_unreadable_directory_is_skipped(self, make_vault, monkeypatch, caplog):
        """A folder that cannot be listed is logged; its siblings are still scanned."""
        vault = make_vault({"A.md": "", "Locked/Secret.md": "", "Open/B.md": ""})
        real_scandir = os.scandir

        def scandir(path="."):
            if os.path.basename(os.fspath(path)) == "Locked":
                raise PermissionError(13, "Permission denied", os.fspath(path))
            return real_scandir(path)

        monkeypatch.setattr(os, "scandir", scandir)
        with caplog.at_level(logging.WARNING, logger="vault_graph.core.storage"):
            paths = VaultStorage(vault.path).list_files()

        assert paths == ["A.md", "Open/B.md"]
        assert "Skipping unreadable directory" in caplog.text
        assert "Locked" in caplog.text


class TestScan:
    """Reading note contents."""

    def test_scan_reads_every_note(self, vault):
        notes = scan_vault(vault, max_workers=2)
        assert [note.path for note in notes] == ["A.md", "Archive/Keep.md", "Folder/B.md", "Folder/Deep/C.MD"]
        assert notes[0].text == "[[B]]"
        assert notes[0].identity == NoteIdentity.from_path("A")

    def test_unreadable_note_is_skipped(self, vault):
        storage = FailingStorage(vault.path, fail_reads={"Folder/B.md"})
        notes = scan_vault(vault, storage=storage)
        assert "Folder/B.md" not in [note.path for note in notes]
        assert len(notes) == 3

    def test_non_utf8_note_is_skipped(self, vault):
        (vault.path / "Binary.md").write_bytes(b"\xff\xfe\x00bad")
        assert "Binary.md" not in [note.path for note in scan_vault(vault)]

    def test_line_endings_are_preserved(self, make_vault):
        vault = make_vault({"Win.md": "one\r\ntwo\r\n"})
        (note,) = scan_vault(vault)
        assert note.text == "one\r\ntwo\r\n"

    def test_missing_vault_scans_empty(self, tmp_path):
        vault = VaultMetadata(name="gone", path=tmp_path / "gone", description="", exists=False)
        assert scan_vault(vault) == []
        assert list_note_paths(vault) == {}

    def test_invalid_arguments(self, vault):
        with pytest.raises(TypeError):
            scan_vault(None)
        with pytest.raises(ValueError):
            scan_vault(vault, max_workers=0)


class TestStorage:
    """Sandboxed file operations."""

    def test_paths_cannot_escape_the_vault(self, vault):
        storage = VaultStorage(vault.path)
        with pytest.raises(ValueError):
            storage.read_file("../outside.md")

    def test_rename_creates_folders_and_refuses_overwrite(self, vault):
        storage = VaultStorage(vault.path)
        storage.rename_file("A.md", "New/Folder/A.md")
        assert (vault.path / "New/Folder/A.md").is_file()
        with pytest.raises(FileExistsError):
            storage.rename_file("Folder/B.md", "New/Folder/A.md")
        with pytest.raises(FileNotFoundError):
            storage.rename_file("A.md", "Z.md")

    def test_root_must_be_a_path(self):
        with pytest.raises(TypeError):
            VaultStorage("not/a/path")
