"""Integrity checker: find broken references, rank repairs, and apply them.

Fixes are grouped per source file. Each file is read once, right before it is
modified, all of its edits are applied to that one in-memory copy (right to left
within a line so earlier columns stay valid), and it is written once. A failure
on one file never stops the rest of the batch.
"""

from __future__ import annotations

import logging
import posixpath
from collections import defaultdict
from collections.abc import Iterable
from typing import Optional

from vault_graph.constants import MAX_SUGGESTIONS
from vault_graph.core.extractor import (
    extract_line_references,
    format_reference,
    join_lines,
    split_lines,
)
from vault_graph.core.graph_builder import build_link_graph
from vault_graph.core.resolver import NoteIndex, normalize_target
from vault_graph.core.scanner import list_note_paths
from vault_graph.core.storage import VaultStorage
from vault_graph.core.vault_operations import open_storage
from vault_graph.data_models import (
    BrokenReference,
    FixOutcome,
    FixReport,
    IntegrityReport,
    LinkGraph,
    LinkKind,
    NoteIdentity,
    RawReference,
    VaultMetadata,
)

logger = logging.getLogger(__name__)


# ==============================================================================
# SUGGESTIONS
# ==============================================================================


def suggest_candidates(
    raw_target: str,
    identities: Iterable[NoteIdentity],
    limit: int = MAX_SUGGESTIONS,
) -> list[NoteIdentity]:
    """Rank notes whose bare name contains the target, or is contained in it.

    Comparison is case-insensitive on bare names. Prefix matches rank first, then
    names closer in length to the target, then path order.

    Args:
        raw_target: Unresolved target (a folder prefix is ignored).
        identities: Notes to choose from.
        limit: Maximum number of candidates.

    Returns:
        Up to ``limit`` identities, best first.

    Raises:
        ValueError: If ``limit`` is negative.
    """
    if limit < 0:
        raise ValueError("limit must not be negative")

    needle = normalize_target(raw_target).rsplit("/", 1)[-1].lower()
    if not needle:
        return []

    scored = []
    for identity in identities:
        name = identity.name.lower()
        if not name or (needle not in name and name not in needle):
            continue
        prefix_rank = 0 if name.startswith(needle) or needle.startswith(name) else 1
        scored.append((prefix_rank, abs(len(name) - len(needle)), identity.path, identity))

    scored.sort(key=lambda item: item[:3])
    return [item[3] for item in scored[:limit]]


def replacement_target(reference: RawReference, target: NoteIdentity, index: NoteIndex) -> str:
    """Target text to write so that ``reference`` resolves to ``target``.

    Bracketed references keep their style: a bare name stays a bare name unless
    several notes share it, a path stays a path. Inline references get a path
    relative to the source note's folder.
    """
    if reference.kind is LinkKind.INLINE:
        return posixpath.relpath(target.path, reference.source.folder or ".")
    if "/" in normalize_target(reference.raw_target):
        return target.path
    return index.short_form(target)


def render_fix(reference: RawReference, target: NoteIdentity, index: NoteIndex) -> str:
    return format_reference(reference, replacement_target(reference, target, index))


# ==============================================================================
# DETECTION
# ==============================================================================


def find_broken_links(
    vault: VaultMetadata,
    storage: Optional[VaultStorage] = None,
    graph: Optional[LinkGraph] = None,
) -> IntegrityReport:
    """List broken references with ranked candidates, plus ambiguous resolutions.

    Args:
        vault: Vault to check.
        storage: Storage to read through; defaults to the vault's filesystem.
        graph: A graph already built for this vault; built fresh when omitted.

    Returns:
        An :class:`IntegrityReport`.
    """
    if graph is None:
        graph = build_link_graph(vault, storage=storage)

    index = NoteIndex(graph.nodes)
    broken = []
    for item in graph.broken:
        candidates = tuple(suggest_candidates(item.reference.raw_target, index.identities))
        suggested = render_fix(item.reference, candidates[0], index) if candidates else None
        broken.append(BrokenReference(reference=item.reference, candidates=candidates, suggested_fix=suggested))

    return IntegrityReport(broken=tuple(broken), ambiguous=graph.ambiguous)


# ==============================================================================
# REPAIR
# ==============================================================================


def _apply_line_edits(
    lines: list[str],
    edits: list[tuple[RawReference, str]],
) -> list[FixOutcome]:
    """Rewrite references in ``lines`` in place; return one outcome per edit."""
    outcomes: list[FixOutcome] = []
    by_line: dict[int, list[tuple[RawReference, str]]] = defaultdict(list)
    for reference, replacement in edits:
        by_line[reference.line_number].append((reference, replacement))

    for line_number in sorted(by_line):
        pending = sorted(by_line[line_number], key=lambda edit: edit[0].column, reverse=True)
        if line_number > len(lines):
            outcomes.extend(
                FixOutcome(reference, replacement, False, f"Line {line_number} no longer exists")
                for reference, replacement in pending
            )
            continue

        line = lines[line_number - 1]
        for reference, replacement in pending:
            start = reference.column
            if line[start:start + len(reference.text)] != reference.text:
                start = line.find(reference.text)
            if start < 0:
                outcomes.append(
                    FixOutcome(reference, replacement, False, f"Link text no longer on line {line_number}")
                )
                continue
            line = line[:start] + replacement + line[start + len(reference.text):]
            outcomes.append(FixOutcome(reference, replacement, True))
        lines[line_number - 1] = line

    return outcomes


def _fix_file(
    storage: VaultStorage,
    path: str,
    edits: list[tuple[RawReference, str]],
) -> list[FixOutcome]:
    """One read-modify-write cycle for every edit that targets ``path``."""
    try:
        text = storage.read_file(path)
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        logger.warning("Could not read '%s' to apply link fixes: %s", path, exc)
        return [FixOutcome(reference, replacement, False, f"Read failed: {exc}") for reference, replacement in edits]

    lines = split_lines(text)
    outcomes = _apply_line_edits(lines, edits)
    updated = join_lines(lines)
    if updated == text:
        return outcomes

    try:
        storage.write_file(path, updated)
    except (OSError, ValueError) as exc:
        logger.warning("Failed to write link fixes to '%s': %s", path, exc)
        return [
            FixOutcome(o.reference, o.replacement, False, f"Write failed: {exc}") if o.fixed else o
            for o in outcomes
        ]

    logger.info("Fixed %d link(s) in '%s'", sum(1 for o in outcomes if o.fixed), path)
    return outcomes


def apply_fixes(
    vault: VaultMetadata,
    fixes: Iterable[tuple[RawReference, NoteIdentity]],
    storage: Optional[VaultStorage] = None,
) -> FixReport:
    """Point each reference at its chosen note.

    Args:
        vault: Vault the references live in.
        fixes: ``(reference, new target)`` pairs, typically a broken reference and
            one of its candidates.
        storage: Storage to read and write through.

    Returns:
        A :class:`FixReport` with one outcome per distinct reference. Partial
        success is normal: a file that cannot be read or written marks only its
        own references as not fixed.
    """
    storage = open_storage(vault, storage)
    paths = list_note_paths(vault, storage)
    index = NoteIndex(paths)

    grouped: dict[NoteIdentity, list[tuple[RawReference, str]]] = defaultdict(list)
    seen: set[tuple[NoteIdentity, int, int]] = set()
    outcomes: list[FixOutcome] = []
    for reference, target in fixes:
        if reference is None or target is None:
            raise TypeError("Each fix needs a reference and a target identity")
        key = (reference.source, reference.line_number, reference.column)
        if key in seen:
            continue
        seen.add(key)
        replacement = render_fix(reference, target, index)
        if reference.source not in paths:
            outcomes.append(FixOutcome(reference, replacement, False, "Source note no longer exists"))
            continue
        grouped[reference.source].append((reference, replacement))

    for source in sorted(grouped):
        outcomes.extend(_fix_file(storage, paths[source], grouped[source]))

    return FixReport(outcomes=tuple(outcomes))


def apply_fix(
    vault: VaultMetadata,
    reference: RawReference,
    candidate: NoteIdentity,
    storage: Optional[VaultStorage] = None,
) -> FixOutcome:
    """Repair a single reference. See :func:`apply_fixes`."""
    return apply_fixes(vault, [(reference, candidate)], storage=storage).outcomes[0]


def fix_broken_links(
    vault: VaultMetadata,
    storage: Optional[VaultStorage] = None,
    dry_run: bool = True,
) -> FixReport:
    """Repair every auto-fixable broken reference with its first-ranked candidate.

    Args:
        vault: Vault to repair.
        storage: Storage to read and write through.
        dry_run: When ``True`` (the default) only report the fixes that would be made.

    Returns:
        A :class:`FixReport`. References without candidates are listed as not fixed.
    """
    storage = open_storage(vault, storage)
    report = find_broken_links(vault, storage=storage)

    fixable = [item for item in report.broken if item.auto_fixable]
    unfixable = tuple(
        FixOutcome(item.reference, None, False, "No replacement candidate found")
        for item in report.broken
        if not item.auto_fixable
    )

    if dry_run:
        planned = tuple(FixOutcome(item.reference, item.suggested_fix, False) for item in fixable)
        return FixReport(outcomes=planned + unfixable, dry_run=True)

    applied = apply_fixes(vault, [(item.reference, item.candidates[0]) for item in fixable], storage=storage)
    logger.info(
        "Auto-fix in vault '%s': %d fixed, %d not fixed",
        vault.name,
        applied.fixed_count,
        applied.failed_count + len(unfixable),
    )
    return FixReport(outcomes=applied.outcomes + unfixable)


def repair_reference(
    vault: VaultMetadata,
    source_path: str,
    line_number: int,
    link_text: str,
    new_target: str,
    storage: Optional[VaultStorage] = None,
) -> FixOutcome:
    """Rewrite one link, identified by its note, line and exact text, to ``new_target``.

    Args:
        vault: Vault the note lives in.
        source_path: Note containing the link (with or without ``.md``).
        line_number: 1-based line the link is on.
        link_text: Exact link text, e.g. ``[[Bee|bees]]``.
        new_target: Note the link should point at (path without ``.md``).
        storage: Storage to read and write through.

    Returns:
        A :class:`FixOutcome`.

    Raises:
        ValueError: If ``link_text`` is not a note reference or ``line_number`` < 1.
    """
    storage = open_storage(vault, storage)
    if line_number < 1:
        raise ValueError("line_number must be at least 1")

    source = NoteIdentity.from_relative_path(source_path)
    parsed = extract_line_references(source, link_text.strip(), line_number)
    if len(parsed) != 1 or parsed[0].text != link_text.strip():
        raise ValueError(f"'{link_text}' is not a single note reference")
    requested = parsed[0]

    paths = list_note_paths(vault, storage)
    target = NoteIndex(paths).resolve(new_target).target
    if target is None:
        return FixOutcome(requested, None, False, f"Target note '{new_target}' not found")
    if source not in paths:
        return FixOutcome(requested, None, False, f"Source note '{source_path}' not found")

    try:
        line = split_lines(storage.read_file(paths[source]))[line_number - 1]
    except IndexError:
        return FixOutcome(requested, None, False, f"Line {line_number} does not exist")
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        return FixOutcome(requested, None, False, f"Read failed: {exc}")

    for reference in extract_line_references(source, line, line_number):
        if reference.text == requested.text:
            return apply_fix(vault, reference, target, storage=storage)
    return FixOutcome(requested, None, False, f"Link text not found on line {line_number}")
