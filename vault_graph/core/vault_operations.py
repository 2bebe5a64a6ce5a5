"""Core vault operations and validation."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from vault_graph.constants import NOTE_EXTENSION
from vault_graph.core.storage import VaultStorage
from vault_graph.data_models import NoteIdentity, VaultMetadata


def require_vault(vault: VaultMetadata) -> VaultMetadata:
    """Reject anything that is not vault metadata.

    Raises:
        TypeError: If ``vault`` is ``None`` or not a :class:`VaultMetadata`.
    """
    if not isinstance(vault, VaultMetadata):
        raise TypeError(f"Expected VaultMetadata, got {type(vault).__name__}")
    return vault


def ensure_vault_ready(vault: VaultMetadata) -> None:
    """Ensure the target vault directory is accessible before performing operations.

    Args:
        vault: Metadata describing the vault to use.

    Raises:
        FileNotFoundError: If the vault path does not exist or is not a directory.
    """
    if not vault.path.is_dir():
        raise FileNotFoundError(f"Vault '{vault.name}' is not accessible at {vault.path}")


def open_storage(vault: VaultMetadata, storage: Optional[VaultStorage] = None) -> VaultStorage:
    """Return ``storage`` when given, otherwise filesystem storage rooted at the vault."""
    require_vault(vault)
    return storage if storage is not None else VaultStorage(vault.path)


def construct_note_path(identifier: str) -> Path:
    """Construct a Path object from a pre-validated note identifier.

    IMPORTANT: This function assumes the identifier has already been validated
    by a Pydantic input model. It only performs path construction, not validation.

    Args:
        identifier: Pre-validated note identifier (already stripped, no .md suffix,
            no path traversal, relative path only).

    Returns:
        Path object for the note within the vault (relative, with .md extension).

    Examples:
        >>> construct_note_path("My Note")
        PosixPath('My Note.md')
        >>> construct_note_path("Folder/My Note")
        PosixPath('Folder/My Note.md')
    """
    parts = identifier.split("/")
    leaf_with_extension = f"{parts[-1]}{NOTE_EXTENSION}"

    if len(parts) == 1:
        return Path(leaf_with_extension)
    return Path(*parts[:-1]) / leaf_with_extension


def resolve_note_path(vault: VaultMetadata, title: str) -> Path:
    """Resolve a pre-validated note title to an absolute vault path.

    Only performs path construction and sandbox enforcement; input validation
    happens in the Pydantic input models at the tool boundary.

    Args:
        vault: Vault metadata.
        title: Pre-validated note identifier (from Pydantic model).

    Returns:
        The absolute :class:`Path` to the note inside ``vault``.

    Raises:
        ValueError: If the resolved path escapes the vault root (filesystem check).
    """
    relative = construct_note_path(title)

    candidate = (vault.path / relative).resolve(strict=False)
    vault_root = vault.path.resolve(strict=False)

    if not candidate.is_relative_to(vault_root):
        raise ValueError("Note path escapes the configured vault.")

    return candidate


def note_identity(vault: VaultMetadata, title: str) -> NoteIdentity:
    """Sandbox-check a note title and return its identity."""
    path = resolve_note_path(vault, title)
    return NoteIdentity.from_path(note_display_name(vault, path))


def note_display_name(vault: VaultMetadata, path: Path) -> str:
    """Convert a note path into a normalized display name without extension.

    Args:
        vault: Vault metadata.
        path: Absolute path to the note within the vault.

    Returns:
        A forward-slash separated string suitable for UI display.
    """
    relative = path.relative_to(vault.path.resolve(strict=False))
    return str(relative.with_suffix("")).replace("\\", "/")
