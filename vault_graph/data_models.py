"""Data models for vault metadata, configuration, and the link graph."""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from pathlib import Path
from typing import Any, Optional

from vault_graph.constants import NOTE_EXTENSION


@dataclass(frozen=True)
class VaultMetadata:
    """Normalized metadata describing an Obsidian vault."""

    name: str
    path: Path
    description: str
    exists: bool
    exclude: tuple[str, ...] = ()

    def as_payload(self) -> dict[str, Any]:
        """Return a serializable payload representation."""
        return {
            "name": self.name,
            "path": str(self.path),
            "description": self.description,
            "exists": self.path.is_dir(),
            "exclude": list(self.exclude),
        }


class VaultConfiguration:
    """Holds vault metadata and default resolution helpers.

    Loaded lazily from vaults.yaml the first time a tool needs it.
    Provides vault lookup by name and payload serialization for MCP responses.
    """

    def __init__(self, default_vault: str, vaults: dict[str, VaultMetadata]) -> None:
        self.default_vault = default_vault
        self.vaults = vaults

    def get(self, name: str) -> VaultMetadata:
        """Get vault metadata by name.

        Args:
            name: The name of the vault to retrieve.

        Returns:
            VaultMetadata for the requested vault.

        Raises:
            ValueError: If the vault name is not found in configuration.
        """
        try:
            return self.vaults[name]
        except KeyError as exc:
            raise ValueError(f"Unknown vault '{name}'") from exc

    def as_payload(self) -> dict[str, Any]:
        """Return serializable configuration payload.

        Returns:
            Dictionary with default vault name and list of vault metadata.
        """
        return {
            "default": self.default_vault,
            "vaults": [vault.as_payload() for vault in self.vaults.values()],
        }


# ==============================================================================
# LINK GRAPH
# ==============================================================================


class LinkKind(str, Enum):
    """Syntax a reference was written in."""

    BRACKETED = "wikilink"
    INLINE = "markdown"


@dataclass(frozen=True, order=True)
class NoteIdentity:
    """Stable name of a note: vault-relative path and bare name, both without extension.

    Equality, hashing and ordering use ``path`` only.
    """

    path: str
    name: str = field(compare=False)

    @classmethod
    def from_path(cls, path: str) -> NoteIdentity:
        """Build an identity from a vault-relative path that has no extension."""
        normalized = path.replace("\\", "/").strip("/")
        return cls(path=normalized, name=normalized.rsplit("/", 1)[-1])

    @classmethod
    def from_relative_path(cls, relative_path: str) -> NoteIdentity:
        """Build an identity from a vault-relative file path such as ``Notes/Old.md``."""
        normalized = relative_path.replace("\\", "/")
        if normalized.lower().endswith(NOTE_EXTENSION):
            normalized = normalized[: -len(NOTE_EXTENSION)]
        return cls.from_path(normalized)

    @property
    def folder(self) -> str:
        """Containing folder, ``""`` for notes at the vault root."""
        return self.path.rpartition("/")[0]

    @property
    def file_path(self) -> str:
        return f"{self.path}{NOTE_EXTENSION}"

    def __str__(self) -> str:
        return self.path

    def as_payload(self) -> dict[str, Any]:
        return {"path": self.path, "name": self.name}


@dataclass(frozen=True)
class ScannedNote:
    """A note file read during a vault scan."""

    path: str
    text: str

    @property
    def identity(self) -> NoteIdentity:
        return NoteIdentity.from_relative_path(self.path)


@dataclass(frozen=True)
class NoteNode:
    """One vertex of the link graph."""

    id: NoteIdentity
    path: str
    title: str
    tags: frozenset[str] = frozenset()
    size: int = 0

    def as_payload(self) -> dict[str, Any]:
        return {
            "id": self.id.path,
            "path": self.path,
            "title": self.title,
            "tags": sorted(self.tags),
            "size": self.size,
        }


@dataclass(frozen=True)
class RawReference:
    """One outbound mention parsed from a note.

    ``text`` is the exact span as written (``[[Old#Intro|see here]]``) and ``column``
    its 0-based offset within line ``line_number``. ``raw_target`` is the part used
    for resolution: fragment, surrounding whitespace and ``.md`` removed, and for
    inline references URL-unquoted. ``target_text`` is the target as written.
    """

    source: NoteIdentity
    line_number: int
    column: int
    text: str
    raw_target: str
    target_text: str
    kind: LinkKind
    alias: Optional[str] = None
    fragment: Optional[str] = None
    embed: bool = False

    def as_payload(self) -> dict[str, Any]:
        return {
            "sourceFile": self.source.file_path,
            "lineNumber": self.line_number,
            "linkText": self.text,
            "linkTarget": self.raw_target,
            "linkType": self.kind.value,
        }


@dataclass(frozen=True)
class LinkEdge:
    """A reference that resolved to a note in the vault."""

    source: NoteIdentity
    target: NoteIdentity
    kind: LinkKind
    line_number: int

    @property
    def is_self_edge(self) -> bool:
        return self.source == self.target


@dataclass(frozen=True)
class BrokenReference:
    """A reference whose target does not resolve, with ranked repair candidates."""

    reference: RawReference
    candidates: tuple[NoteIdentity, ...] = ()
    suggested_fix: Optional[str] = None

    @property
    def auto_fixable(self) -> bool:
        return bool(self.candidates)

    def as_payload(self) -> dict[str, Any]:
        payload = self.reference.as_payload()
        payload.update(
            {
                "suggestedFix": self.suggested_fix,
                "canAutoFix": self.auto_fixable,
                "candidates": [candidate.path for candidate in self.candidates],
            }
        )
        return payload


@dataclass(frozen=True)
class AmbiguousReference:
    """A reference that matched several notes and was resolved to ``chosen``."""

    reference: RawReference
    chosen: NoteIdentity
    candidates: tuple[NoteIdentity, ...]

    def as_payload(self) -> dict[str, Any]:
        payload = self.reference.as_payload()
        payload.update(
            {
                "resolvedTo": self.chosen.path,
                "candidates": [candidate.path for candidate in self.candidates],
            }
        )
        return payload


@dataclass(frozen=True)
class LinkGraph:
    """Immutable snapshot of the vault's reference graph.

    Every edge endpoint is a key of ``nodes``. Degree is in plus out over
    distinct ``(source, target)`` connections and ignores self-edges.
    """

    nodes: Mapping[NoteIdentity, NoteNode]
    edges: tuple[LinkEdge, ...] = ()
    broken: tuple[BrokenReference, ...] = ()
    ambiguous: tuple[AmbiguousReference, ...] = ()

    @cached_property
    def connections(self) -> tuple[tuple[NoteIdentity, NoteIdentity], ...]:
        """Distinct ``(source, target)`` pairs, self-edges excluded, in sorted order."""
        return tuple(sorted({(edge.source, edge.target) for edge in self.edges if not edge.is_self_edge}))

    @cached_property
    def _adjacency(self) -> tuple[dict[NoteIdentity, list[NoteIdentity]], dict[NoteIdentity, list[NoteIdentity]]]:
        outgoing: dict[NoteIdentity, list[NoteIdentity]] = defaultdict(list)
        incoming: dict[NoteIdentity, list[NoteIdentity]] = defaultdict(list)
        for source, target in self.connections:
            outgoing[source].append(target)
            incoming[target].append(source)
        return outgoing, incoming

    def outgoing(self, identity: NoteIdentity) -> tuple[NoteIdentity, ...]:
        return tuple(self._adjacency[0].get(identity, ()))

    def incoming(self, identity: NoteIdentity) -> tuple[NoteIdentity, ...]:
        return tuple(sorted(self._adjacency[1].get(identity, ())))

    def neighbors(self, identity: NoteIdentity) -> frozenset[NoteIdentity]:
        """Notes linked to or from ``identity``."""
        return frozenset(self._adjacency[0].get(identity, ())) | frozenset(self._adjacency[1].get(identity, ()))

    def degree(self, identity: NoteIdentity) -> int:
        return len(self._adjacency[0].get(identity, ())) + len(self._adjacency[1].get(identity, ()))

    def edge_weights(self) -> Counter:
        """Number of references behind each ``(source, target)`` pair, self-edges included."""
        return Counter((edge.source, edge.target) for edge in self.edges)

    def node_by_path(self, path: str) -> Optional[NoteNode]:
        """Look up a node by vault-relative path, with or without extension."""
        return self.nodes.get(NoteIdentity.from_relative_path(path))


# ==============================================================================
# OPERATION RESULTS
# ==============================================================================


@dataclass(frozen=True)
class IntegrityReport:
    """Broken references plus ambiguous resolutions the caller should review."""

    broken: tuple[BrokenReference, ...]
    ambiguous: tuple[AmbiguousReference, ...]

    def as_payload(self) -> dict[str, Any]:
        return {
            "broken_count": len(self.broken),
            "auto_fixable_count": sum(1 for item in self.broken if item.auto_fixable),
            "broken": [item.as_payload() for item in self.broken],
            "ambiguous": [item.as_payload() for item in self.ambiguous],
        }


@dataclass(frozen=True)
class FixOutcome:
    """Result of repairing one reference."""

    reference: RawReference
    replacement: Optional[str]
    fixed: bool
    error: Optional[str] = None

    def as_payload(self) -> dict[str, Any]:
        payload = self.reference.as_payload()
        payload.update({"replacement": self.replacement, "fixed": self.fixed, "error": self.error})
        return payload


@dataclass(frozen=True)
class FixReport:
    """Per-reference outcomes of one fix-application batch."""

    outcomes: tuple[FixOutcome, ...]
    dry_run: bool = False

    @property
    def fixed_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.fixed)

    @property
    def planned_count(self) -> int:
        """Fixes a dry run would make; always zero for an applied batch."""
        if not self.dry_run:
            return 0
        return sum(1 for o in self.outcomes if not o.fixed and o.replacement is not None and o.error is None)

    @property
    def failed_count(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.fixed) - self.planned_count

    @property
    def files_updated(self) -> tuple[str, ...]:
        return tuple(sorted({o.reference.source.file_path for o in self.outcomes if o.fixed}))

    def as_payload(self) -> dict[str, Any]:
        return {
            "dry_run": self.dry_run,
            "fixed": self.fixed_count,
            "planned": self.planned_count,
            "failed": self.failed_count,
            "files_updated": list(self.files_updated),
            "outcomes": [outcome.as_payload() for outcome in self.outcomes],
        }


@dataclass(frozen=True)
class FileFailure:
    path: str
    error: str


@dataclass(frozen=True)
class RenameResult:
    """Outcome of propagating one identity change across the vault."""

    old: NoteIdentity
    new: NoteIdentity
    updated_files: tuple[str, ...] = ()
    references_updated: int = 0
    failures: tuple[FileFailure, ...] = ()

    @property
    def files_updated(self) -> int:
        return len(self.updated_files)

    def as_payload(self, verbose: bool = False) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "old": self.old.path,
            "new": self.new.path,
            "files_updated": self.files_updated,
            "references_updated": self.references_updated,
            "failed_files": len(self.failures),
        }
        if verbose:
            payload["updated"] = list(self.updated_files)
            payload["failures"] = [{"path": f.path, "error": f.error} for f in self.failures]
        return payload


@dataclass(frozen=True)
class TagCluster:
    """Notes sharing a tag, with the best-connected member inside the group."""

    tag: str
    members: tuple[NoteIdentity, ...]
    central: NoteIdentity
    internal_edges: int

    def as_payload(self) -> dict[str, Any]:
        return {
            "name": f"#{self.tag}",
            "nodes": [member.path for member in self.members],
            "centralNode": self.central.path,
            "internalConnections": self.internal_edges,
        }
