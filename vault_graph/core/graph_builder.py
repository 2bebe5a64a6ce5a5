"""Graph builder: scan, extract and resolve into an immutable :class:`LinkGraph`."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Optional

from vault_graph.constants import SCAN_WORKERS
from vault_graph.core.extractor import extract_references
from vault_graph.core.resolver import NoteIndex, Resolution
from vault_graph.core.scanner import scan_vault
from vault_graph.core.storage import VaultStorage
from vault_graph.core.tags import parse_note
from vault_graph.data_models import (
    AmbiguousReference,
    BrokenReference,
    LinkEdge,
    LinkGraph,
    LinkKind,
    NoteIdentity,
    NoteNode,
    RawReference,
    ScannedNote,
    VaultMetadata,
)

logger = logging.getLogger(__name__)


def resolve_reference(index: NoteIndex, reference: RawReference) -> Resolution:
    """Resolve a reference, reading inline targets relative to their source note."""
    source = reference.source if reference.kind is LinkKind.INLINE else None
    return index.resolve(reference.raw_target, source=source)


def graph_from_notes(notes: Sequence[ScannedNote]) -> LinkGraph:
    """Build a graph from already-read notes.

    Nodes come out in path order and edges in source, line, column order, so two
    builds over the same notes are equal.
    """
    nodes: dict[NoteIdentity, NoteNode] = {}
    texts: dict[NoteIdentity, str] = {}
    for note in sorted(notes, key=lambda item: item.path):
        identity = note.identity
        if identity in nodes:
            logger.warning(
                "Notes '%s' and '%s' share the identity '%s'; keeping the first",
                nodes[identity].path,
                note.path,
                identity.path,
            )
            continue
        parsed = parse_note(note.text, note.path)
        nodes[identity] = NoteNode(
            id=identity,
            path=note.path,
            title=parsed.title or identity.name,
            tags=parsed.tags,
            size=parsed.word_count,
        )
        texts[identity] = note.text

    index = NoteIndex(nodes)
    edges: list[LinkEdge] = []
    broken: list[BrokenReference] = []
    ambiguous: list[AmbiguousReference] = []

    for identity, text in texts.items():
        for reference in extract_references(identity, text):
            resolution = resolve_reference(index, reference)
            if not resolution.resolved:
                broken.append(BrokenReference(reference=reference))
                continue
            edges.append(
                LinkEdge(
                    source=identity,
                    target=resolution.target,
                    kind=reference.kind,
                    line_number=reference.line_number,
                )
            )
            if resolution.ambiguous:
                ambiguous.append(
                    AmbiguousReference(
                        reference=reference,
                        chosen=resolution.target,
                        candidates=resolution.candidates,
                    )
                )

    return LinkGraph(
        nodes=nodes,
        edges=tuple(edges),
        broken=tuple(broken),
        ambiguous=tuple(ambiguous),
    )


def build_link_graph(
    vault: VaultMetadata,
    storage: Optional[VaultStorage] = None,
    max_workers: int = SCAN_WORKERS,
) -> LinkGraph:
    """Scan a vault and build a fresh link graph snapshot.

    Unresolved references are recorded as broken without repair candidates;
    :func:`vault_graph.core.integrity.find_broken_links` adds those on demand.

    Args:
        vault: Vault to analyse.
        storage: Storage to read through; defaults to the vault's filesystem.
        max_workers: Upper bound on concurrent file reads.

    Returns:
        A :class:`LinkGraph` consistent with the file tree as of the scan.
    """
    notes = scan_vault(vault, storage=storage, max_workers=max_workers)
    graph = graph_from_notes(notes)
    logger.info(
        "Built link graph for vault '%s': %d notes, %d references resolved, %d broken, %d ambiguous",
        vault.name,
        len(graph.nodes),
        len(graph.edges),
        len(graph.broken),
        len(graph.ambiguous),
    )
    return graph
