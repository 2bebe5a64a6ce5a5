"""Note scanner: list every note in a vault and read it with a bounded worker pool."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from vault_graph.constants import SCAN_WORKERS
from vault_graph.core.storage import VaultStorage
from vault_graph.core.vault_operations import open_storage
from vault_graph.data_models import NoteIdentity, ScannedNote, VaultMetadata

logger = logging.getLogger(__name__)


def read_note(storage: VaultStorage, path: str) -> Optional[str]:
    """Read one note, returning ``None`` when it cannot be read or decoded."""
    try:
        return storage.read_file(path)
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        logger.warning("Skipping note '%s' during scan: %s", path, exc)
        return None


def list_note_paths(
    vault: VaultMetadata,
    storage: Optional[VaultStorage] = None,
) -> dict[NoteIdentity, str]:
    """Map every note identity in the vault to its vault-relative file path.

    Only the directory tree is read, not the notes themselves.
    """
    storage = open_storage(vault, storage)
    if not vault.path.is_dir():
        return {}
    paths: dict[NoteIdentity, str] = {}
    for path in storage.list_files(vault.exclude):
        paths.setdefault(NoteIdentity.from_relative_path(path), path)
    return paths


def scan_vault(
    vault: VaultMetadata,
    storage: Optional[VaultStorage] = None,
    max_workers: int = SCAN_WORKERS,
) -> list[ScannedNote]:
    """Read every note in the vault.

    The scan is best-effort: unreadable directories and files are logged and
    left out, and the remaining notes are still returned.

    Args:
        vault: Vault to scan. Its ``exclude`` entries are skipped in addition to
            dotfiles and dependency caches.
        storage: Storage to read through; defaults to the vault's filesystem.
        max_workers: Upper bound on concurrent file reads.

    Returns:
        Scanned notes in vault-relative path order.

    Raises:
        TypeError: If ``vault`` is not :class:`VaultMetadata`.
        ValueError: If ``max_workers`` is smaller than 1.
    """
    storage = open_storage(vault, storage)
    if max_workers < 1:
        raise ValueError("max_workers must be at least 1")

    if not vault.path.is_dir():
        logger.warning("Vault '%s' is not accessible at %s; nothing to scan", vault.name, vault.path)
        return []

    paths = storage.list_files(vault.exclude)
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        texts = list(executor.map(lambda path: read_note(storage, path), paths))

    notes = [ScannedNote(path=path, text=text) for path, text in zip(paths, texts) if text is not None]
    logger.debug("Scanned %d of %d notes in vault '%s'", len(notes), len(paths), vault.name)
    return notes
