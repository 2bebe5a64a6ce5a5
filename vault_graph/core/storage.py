"""Filesystem access for a single vault root.

Every path accepted or returned here is vault-relative and uses forward slashes.
Text is read and written as UTF-8 with newline translation disabled so that a
rewritten note keeps its original line endings.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from vault_graph.constants import EXCLUDED_DIR_NAMES, EXCLUDED_PREFIXES, NOTE_EXTENSION

logger = logging.getLogger(__name__)


def is_excluded_name(name: str) -> bool:
    """Return ``True`` for hidden entries and dependency-cache folders."""
    return name.startswith(EXCLUDED_PREFIXES) or name in EXCLUDED_DIR_NAMES


class VaultStorage:
    """Read/write/rename/list operations rooted at one vault directory."""

    def __init__(self, root: Path) -> None:
        if not isinstance(root, Path):
            raise TypeError(f"Vault root must be a pathlib.Path, got {type(root).__name__}")
        self.root = root

    def _absolute(self, relative_path: str) -> Path:
        candidate = (self.root / relative_path).resolve(strict=False)
        if not candidate.is_relative_to(self.root.resolve(strict=False)):
            raise ValueError(f"Path '{relative_path}' escapes the vault root.")
        return candidate

    def list_files(self, exclude: Iterable[str] = ()) -> list[str]:
        """List note files under the root in sorted order.

        Args:
            exclude: Extra folder names or vault-relative folder paths to skip, on
                top of dotfiles and dependency caches.

        Returns:
            Vault-relative paths of every note file. Directories that cannot be read
            are logged and skipped.
        """
        extra = {entry.strip("/").replace("\\", "/") for entry in exclude if entry.strip("/")}
        notes: list[str] = []

        def _on_error(exc: OSError) -> None:
            logger.warning("Skipping unreadable directory '%s': %s", exc.filename, exc.strerror)

        for directory, dirnames, filenames in os.walk(self.root, onerror=_on_error):
            relative_dir = Path(directory).relative_to(self.root).as_posix()
            prefix = "" if relative_dir == "." else f"{relative_dir}/"

            dirnames[:] = [
                name
                for name in dirnames
                if not is_excluded_name(name) and name not in extra and f"{prefix}{name}" not in extra
            ]
            for filename in filenames:
                if is_excluded_name(filename) or not filename.lower().endswith(NOTE_EXTENSION):
                    continue
                notes.append(f"{prefix}{filename}")

        notes.sort()
        return notes

    def exists(self, relative_path: str) -> bool:
        return self._absolute(relative_path).is_file()

    def read_file(self, relative_path: str) -> str:
        with open(self._absolute(relative_path), encoding="utf-8", newline="") as handle:
            return handle.read()

    def write_file(self, relative_path: str, text: str) -> None:
        with open(self._absolute(relative_path), "w", encoding="utf-8", newline="") as handle:
            handle.write(text)

    def rename_file(self, source: str, destination: str) -> None:
        """Move a note, creating the destination folder when needed.

        Raises:
            FileNotFoundError: If ``source`` does not exist.
            FileExistsError: If ``destination`` is already taken.
        """
        source_path = self._absolute(source)
        destination_path = self._absolute(destination)
        if not source_path.is_file():
            raise FileNotFoundError(f"Note file '{source}' not found.")
        if destination_path.exists():
            raise FileExistsError(f"Note file '{destination}' already exists.")
        destination_path.parent.mkdir(parents=True, exist_ok=True)
        source_path.rename(destination_path)
