"""Link resolver: map a raw reference target to at most one note.

Resolution is tiered and stops at the first tier that matches:

1. exact vault-relative path (``Projects/2025/Plan``); for inline references the
   target is first read relative to the source note's folder
2. exact bare name (``Plan``), or for targets containing ``/`` a note whose path
   ends with the target (``2025/Plan``)
3. the case-insensitive variant of tier 1, then of tier 2

When a tier matches several notes the lexicographically first path wins and the
resolution is marked ambiguous so callers can report it.
"""

from __future__ import annotations

import posixpath
from collections import defaultdict
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from vault_graph.core.extractor import strip_note_extension
from vault_graph.data_models import NoteIdentity


class MatchTier(str, Enum):
    EXACT_PATH = "exact_path"
    EXACT_NAME = "exact_name"
    PATH_SUFFIX = "path_suffix"
    CASE_INSENSITIVE_PATH = "case_insensitive_path"
    CASE_INSENSITIVE_NAME = "case_insensitive_name"


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one target."""

    target: Optional[NoteIdentity] = None
    tier: Optional[MatchTier] = None
    candidates: tuple[NoteIdentity, ...] = ()

    @property
    def resolved(self) -> bool:
        return self.target is not None

    @property
    def ambiguous(self) -> bool:
        return len(self.candidates) > 1


UNRESOLVED = Resolution()


def normalize_target(raw_target: str) -> str:
    """Normalize separators, ``./`` and leading ``/`` prefixes, and a trailing ``.md``."""
    target = strip_note_extension(raw_target.strip().replace("\\", "/")).strip()
    if not target:
        return ""
    target = posixpath.normpath(target).lstrip("/")
    return "" if target == "." else target


class NoteIndex:
    """Lookup tables over a fixed set of note identities."""

    def __init__(self, identities: Iterable[NoteIdentity]) -> None:
        self.identities: tuple[NoteIdentity, ...] = tuple(sorted(set(identities)))
        self._by_path: dict[str, NoteIdentity] = {}
        self._by_name: dict[str, list[NoteIdentity]] = defaultdict(list)
        self._by_path_lower: dict[str, list[NoteIdentity]] = defaultdict(list)
        self._by_name_lower: dict[str, list[NoteIdentity]] = defaultdict(list)

        # identities are sorted, so every bucket is in path order
        for identity in self.identities:
            self._by_path[identity.path] = identity
            self._by_name[identity.name].append(identity)
            self._by_path_lower[identity.path.lower()].append(identity)
            self._by_name_lower[identity.name.lower()].append(identity)

    def __contains__(self, identity: object) -> bool:
        return isinstance(identity, NoteIdentity) and identity.path in self._by_path

    def __iter__(self) -> Iterator[NoteIdentity]:
        return iter(self.identities)

    def __len__(self) -> int:
        return len(self.identities)

    def with_changes(
        self,
        add: Iterable[NoteIdentity] = (),
        remove: Iterable[NoteIdentity] = (),
    ) -> NoteIndex:
        """Return a new index with identities added and removed."""
        removed = set(remove)
        return NoteIndex([i for i in self.identities if i not in removed] + list(add))

    def is_ambiguous_name(self, name: str) -> bool:
        """``True`` when several notes share the bare name ``name``."""
        return len(self._by_name.get(name, ())) > 1

    def short_form(self, identity: NoteIdentity) -> str:
        """Shortest bracketed target that resolves back to ``identity``."""
        return identity.path if self.is_ambiguous_name(identity.name) else identity.name

    def _path_keys(self, target: str, source: Optional[NoteIdentity]) -> list[str]:
        keys = []
        if source is not None and source.folder:
            relative = posixpath.normpath(posixpath.join(source.folder, target))
            if not relative.startswith("../") and relative != "..":
                keys.append(relative)
        if target not in keys:
            keys.append(target)
        return keys

    def _suffix_matches(
        self,
        table: dict[str, list[NoteIdentity]],
        target: str,
        fold_case: bool,
    ) -> list[NoteIdentity]:
        leaf = target.rsplit("/", 1)[-1]
        suffix = f"/{target}"
        if fold_case:
            leaf, suffix = leaf.lower(), suffix.lower()
            return [i for i in table.get(leaf, ()) if i.path.lower().endswith(suffix)]
        return [i for i in table.get(leaf, ()) if i.path.endswith(suffix)]

    def resolve(self, raw_target: str, source: Optional[NoteIdentity] = None) -> Resolution:
        """Resolve a reference target.

        Args:
            raw_target: Target as extracted, fragment already removed.
            source: Note the reference was written in. Pass it for inline references
                so that relative paths are tried against the source folder first.

        Returns:
            A :class:`Resolution`; :data:`UNRESOLVED` when nothing matches.
        """
        target = normalize_target(raw_target)
        if not target:
            return UNRESOLVED

        path_keys = self._path_keys(target, source)
        qualified = "/" in target

        for key in path_keys:
            if key in self._by_path:
                return Resolution(self._by_path[key], MatchTier.EXACT_PATH, (self._by_path[key],))

        if qualified:
            matches = self._suffix_matches(self._by_name, target, fold_case=False)
            tier = MatchTier.PATH_SUFFIX
        else:
            matches = list(self._by_name.get(target, ()))
            tier = MatchTier.EXACT_NAME
        if matches:
            return Resolution(matches[0], tier, tuple(matches))

        for key in path_keys:
            matches = self._by_path_lower.get(key.lower(), [])
            if matches:
                return Resolution(matches[0], MatchTier.CASE_INSENSITIVE_PATH, tuple(matches))

        if qualified:
            matches = self._suffix_matches(self._by_name_lower, target, fold_case=True)
        else:
            matches = list(self._by_name_lower.get(target.lower(), ()))
        if matches:
            return Resolution(matches[0], MatchTier.CASE_INSENSITIVE_NAME, tuple(matches))

        return UNRESOLVED
