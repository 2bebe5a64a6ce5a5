"""Shared fixtures: throwaway vaults built under ``tmp_path``."""

from pathlib import Path

import pytest

from vault_graph.core.storage import VaultStorage
from vault_graph.data_models import VaultMetadata


@pytest.fixture
def make_vault(tmp_path):
    """Return a factory that writes ``{relative path: text}`` into a fresh vault."""

    def _make(files=None, name="test", exclude=()):
        vault_path = (tmp_path / name).resolve()
        vault_path.mkdir(parents=True, exist_ok=True)
        for relative, text in (files or {}).items():
            note = vault_path / relative
            note.parent.mkdir(parents=True, exist_ok=True)
            note.write_text(text, encoding="utf-8", newline="")
        return VaultMetadata(
            name=name,
            path=vault_path,
            description="Test vault",
            exists=True,
            exclude=tuple(exclude),
        )

    return _make


def read(vault: VaultMetadata, relative: str) -> str:
    return (vault.path / relative).read_text(encoding="utf-8")


class FailingStorage(VaultStorage):
    """Storage whose reads or writes fail for chosen paths."""

    def __init__(self, root: Path, fail_reads=(), fail_writes=()) -> None:
        super().__init__(root)
        self.fail_reads = set(fail_reads)
        self.fail_writes = set(fail_writes)
        self.writes: list[str] = []

    def read_file(self, relative_path: str) -> str:
        if relative_path in self.fail_reads:
            raise PermissionError(13, "Permission denied", relative_path)
        return super().read_file(relative_path)

    def write_file(self, relative_path: str, text: str) -> None:
        if relative_path in self.fail_writes:
            raise PermissionError(13, "Permission denied", relative_path)
        self.writes.append(relative_path)
        super().write_file(relative_path, text)
