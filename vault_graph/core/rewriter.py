"""Link rewriter: propagate a note's move or rename to every note that links to it."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional
from urllib.parse import unquote

from vault_graph.constants import SCAN_WORKERS
from vault_graph.core.extractor import extract_references, format_reference, join_lines, split_lines
from vault_graph.core.graph_builder import resolve_reference
from vault_graph.core.integrity import replacement_target
from vault_graph.core.resolver import NoteIndex
from vault_graph.core.scanner import list_note_paths
from vault_graph.core.storage import VaultStorage
from vault_graph.core.vault_operations import ensure_vault_ready, note_identity, open_storage
from vault_graph.data_models import FileFailure, NoteIdentity, RenameResult, VaultMetadata

logger = logging.getLogger(__name__)


def _rewrite_text(
    text: str,
    source: NoteIdentity,
    old: NoteIdentity,
    new: NoteIdentity,
    before: NoteIndex,
    after: NoteIndex,
) -> tuple[str, int]:
    """Point every reference in ``text`` that resolved to ``old`` at ``new``.

    Returns:
        The rewritten text and the number of references changed.
    """
    lines = split_lines(text)
    changed = 0
    # references come in line/column order; rewrite each line right to left
    for reference in reversed(extract_references(source, text)):
        if resolve_reference(before, reference).target != old:
            continue
        replacement = format_reference(reference, replacement_target(reference, new, after))
        line = lines[reference.line_number - 1]
        start = reference.column
        lines[reference.line_number - 1] = line[:start] + replacement + line[start + len(reference.text):]
        changed += 1
    return join_lines(lines), changed


def propagate_rename(
    vault: VaultMetadata,
    old: NoteIdentity,
    new: NoteIdentity,
    storage: Optional[VaultStorage] = None,
    max_workers: int = SCAN_WORKERS,
) -> RenameResult:
    """Rewrite references to ``old`` so they point at ``new``.

    A reference is rewritten when it would have resolved to ``old`` before the
    rename, using the same extraction and resolution rules as the graph builder:
    bare names, paths, case-insensitive variants and inline links all qualify,
    while a bare name that resolved to a different note of the same name does not.
    Alias, fragment and embed markers are kept.

    Files are handled independently: each one is read immediately before it is
    rewritten and written once. A failing file is recorded and logged, and the
    remaining files are still attempted; nothing is rolled back.

    Args:
        vault: Vault in which the note changed identity.
        old: Identity before the move.
        new: Identity after the move. Its own file is not rewritten.
        storage: Storage to read and write through.
        max_workers: Upper bound on files processed concurrently.

    Returns:
        A :class:`RenameResult`; ``files_updated`` counts rewritten files.
    """
    if not isinstance(old, NoteIdentity) or not isinstance(new, NoteIdentity):
        raise TypeError("old and new must be NoteIdentity instances")
    storage = open_storage(vault, storage)
    if old == new:
        return RenameResult(old=old, new=new)

    paths = list_note_paths(vault, storage)
    after = NoteIndex(paths)
    before = after.with_changes(add=[old], remove=[new])
    targets = [(identity, path) for identity, path in sorted(paths.items()) if identity != new]

    def _rewrite(item: tuple[NoteIdentity, str]) -> tuple[str, int, Optional[str]]:
        source, path = item
        try:
            text = storage.read_file(path)
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            logger.warning("Could not read note '%s' while updating links: %s", path, exc)
            return path, 0, f"Read failed: {exc}"

        # inline targets are matched after URL-unquoting, so check both forms
        needle = old.name.lower()
        if needle not in text.lower() and needle not in unquote(text).lower():
            return path, 0, None

        updated, changed = _rewrite_text(text, source, old, new, before, after)
        if not changed or updated == text:
            return path, 0, None

        try:
            storage.write_file(path, updated)
        except (OSError, ValueError) as exc:
            logger.warning("Failed to write updated links to '%s': %s", path, exc)
            return path, 0, f"Write failed: {exc}"
        logger.debug("Rewrote %d link(s) to '%s' in '%s'", changed, old.path, path)
        return path, changed, None

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        results = list(executor.map(_rewrite, targets))

    result = RenameResult(
        old=old,
        new=new,
        updated_files=tuple(path for path, changed, _ in results if changed),
        references_updated=sum(changed for _, changed, _ in results),
        failures=tuple(FileFailure(path, error) for path, _, error in results if error),
    )
    logger.info(
        "Propagated rename '%s' -> '%s' in vault '%s': %d file(s), %d link(s), %d failure(s)",
        old.path,
        new.path,
        vault.name,
        result.files_updated,
        result.references_updated,
        len(result.failures),
    )
    return result


# ==============================================================================
# MOVE OPERATIONS
# ==============================================================================


def move_note(
    vault: VaultMetadata,
    old_title: str,
    new_title: str,
    update_links: bool = True,
    storage: Optional[VaultStorage] = None,
) -> dict[str, Any]:
    """Move or rename a note, optionally updating references across the vault.

    Args:
        vault: Vault metadata.
        old_title: Current note identifier (without ``.md``).
        new_title: Desired note identifier (without ``.md``).
        update_links: When ``True`` rewrite wikilinks/markdown links referencing the note.
        storage: Storage to read, write and rename through.

    Returns:
        A dictionary summarizing the operation outcome, including how many notes
        were rewritten and how many could not be.

    Raises:
        FileNotFoundError: If the vault or the original note cannot be located.
        FileExistsError: If a note already exists at the new location.
        ValueError: If either identifier fails sandbox validation.
    """
    ensure_vault_ready(vault)
    storage = open_storage(vault, storage)
    old = note_identity(vault, old_title)
    new = note_identity(vault, new_title)

    old_file = list_note_paths(vault, storage).get(old, old.file_path)
    if not storage.exists(old_file):
        raise FileNotFoundError(f"Note '{old.path}' not found in vault '{vault.name}'.")

    if old == new:
        return {
            "vault": vault.name,
            "old_path": old.path,
            "new_path": new.path,
            "links_updated": 0,
            "references_updated": 0,
            "failed_files": 0,
            "status": "unchanged",
        }

    if storage.exists(new.file_path):
        raise FileExistsError(f"Note '{new.path}' already exists in vault '{vault.name}'.")

    storage.rename_file(old_file, new.file_path)

    result = RenameResult(old=old, new=new)
    if update_links:
        result = propagate_rename(vault, old, new, storage=storage)

    logger.info(
        "Moved note from '%s' to '%s' in vault '%s' (%d notes updated)",
        old.path,
        new.path,
        vault.name,
        result.files_updated,
    )

    return {
        "vault": vault.name,
        "old_path": old.path,
        "new_path": new.path,
        "links_updated": result.files_updated,
        "references_updated": result.references_updated,
        "failed_files": len(result.failures),
        "status": "moved",
    }


def batch_move_notes(
    vault: VaultMetadata,
    moves: Sequence[tuple[str, str]],
    update_links: bool = True,
    storage: Optional[VaultStorage] = None,
) -> dict[str, Any]:
    """Apply several moves in order, each followed by its own link propagation.

    A move that fails is reported and the remaining moves still run. Because each
    propagation re-reads the files it rewrites, a later move sees the links an
    earlier move just changed.

    Returns:
        ``{"vault", "moved", "failed", "results"}`` with one result per move.
    """
    ensure_vault_ready(vault)
    storage = open_storage(vault, storage)

    results: list[dict[str, Any]] = []
    for old_title, new_title in moves:
        try:
            results.append(move_note(vault, old_title, new_title, update_links=update_links, storage=storage))
        except (FileNotFoundError, FileExistsError, ValueError) as exc:
            logger.warning("Move '%s' -> '%s' failed: %s", old_title, new_title, exc)
            results.append(
                {
                    "vault": vault.name,
                    "old_path": old_title,
                    "new_path": new_title,
                    "status": "failed",
                    "error": str(exc),
                }
            )

    failed = sum(1 for item in results if item["status"] == "failed")
    return {
        "vault": vault.name,
        "moved": len(results) - failed,
        "failed": failed,
        "results": results,
    }
