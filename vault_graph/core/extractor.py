"""Link extractor: parse a note's text into raw outbound references.

Two reference kinds are recognized, one regular expression each:

- bracketed: ``[[target]]``, ``[[target#fragment]]``, ``[[target|alias]]``,
  optionally embedded as ``![[...]]``
- inline: ``[alias](target.md)``, optionally with ``#fragment``, ``<...>``
  wrapping or a trailing ``"title"``; URL targets are ignored

Parsing is line-oriented so every reference keeps its line number and column,
and lines inside fenced code blocks are skipped. Unbalanced syntax simply does
not match.
"""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import quote, unquote

from vault_graph.constants import ATTACHMENT_EXTENSIONS, NOTE_EXTENSION
from vault_graph.data_models import LinkKind, NoteIdentity, RawReference

BRACKETED_REFERENCE = re.compile(
    r"(?P<embed>!)?\[\[(?P<target>[^\[\]|#\n]*)(?:#(?P<fragment>[^\[\]|\n]*))?(?:\|(?P<alias>[^\[\]\n]*))?\]\]"
)
INLINE_REFERENCE = re.compile(
    r"(?P<embed>!)?\[(?P<alias>[^\[\]\n]*)\]\((?P<target>[^()\n]+)\)"
)

_FENCE_PATTERN = re.compile(r"^\s*(`{3,}|~{3,})")
_URL_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")
_LINK_TITLE = re.compile(r"\s+(\"[^\"]*\"|'[^']*')$")


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` only; :func:`join_lines` restores the exact text."""
    return text.split("\n")


def join_lines(lines: list[str]) -> str:
    return "\n".join(lines)


def is_attachment(target: str) -> bool:
    _, dot, suffix = target.rpartition(".")
    return bool(dot) and f".{suffix.lower()}" in ATTACHMENT_EXTENSIONS


def strip_note_extension(target: str) -> str:
    if target.lower().endswith(NOTE_EXTENSION):
        return target[: -len(NOTE_EXTENSION)]
    return target


def _inline_destination(raw: str) -> Optional[tuple[str, Optional[str]]]:
    """Return ``(path as written, fragment)`` for a note destination, else ``None``."""
    destination = _LINK_TITLE.sub("", raw.strip())
    if destination.startswith("<") and destination.endswith(">"):
        destination = destination[1:-1].strip()
    if not destination or _URL_SCHEME.match(destination):
        return None

    path, hash_mark, fragment = destination.partition("#")
    if not path.lower().endswith(NOTE_EXTENSION):
        return None
    return path, fragment if hash_mark else None


def _bracketed_references(source: NoteIdentity, line: str, line_number: int) -> list[RawReference]:
    references = []
    for match in BRACKETED_REFERENCE.finditer(line):
        target_text = match.group("target")
        raw_target = strip_note_extension(target_text.rstrip("\\").strip())
        if not raw_target:
            # [[#Heading]] points inside the current note
            continue
        if is_attachment(raw_target):
            continue
        references.append(
            RawReference(
                source=source,
                line_number=line_number,
                column=match.start(),
                text=match.group(0),
                raw_target=raw_target,
                target_text=target_text,
                kind=LinkKind.BRACKETED,
                alias=match.group("alias"),
                fragment=match.group("fragment"),
                embed=match.group("embed") is not None,
            )
        )
    return references


def _inline_references(
    source: NoteIdentity,
    line: str,
    line_number: int,
    taken: list[tuple[int, int]],
) -> list[RawReference]:
    references = []
    for match in INLINE_REFERENCE.finditer(line):
        start, end = match.span()
        if any(start < taken_end and taken_start < end for taken_start, taken_end in taken):
            continue
        destination = _inline_destination(match.group("target"))
        if destination is None:
            continue
        path, fragment = destination
        raw_target = strip_note_extension(unquote(path)).strip()
        if not raw_target:
            continue
        references.append(
            RawReference(
                source=source,
                line_number=line_number,
                column=start,
                text=match.group(0),
                raw_target=raw_target,
                target_text=path,
                kind=LinkKind.INLINE,
                alias=match.group("alias"),
                fragment=fragment,
                embed=match.group("embed") is not None,
            )
        )
    return references


def extract_line_references(source: NoteIdentity, line: str, line_number: int) -> list[RawReference]:
    """Extract references from a single line, ordered by column."""
    bracketed = _bracketed_references(source, line, line_number)
    taken = [(ref.column, ref.column + len(ref.text)) for ref in bracketed]
    inline = _inline_references(source, line, line_number, taken)
    return sorted(bracketed + inline, key=lambda ref: ref.column)


def extract_references(source: NoteIdentity, text: str) -> list[RawReference]:
    """Parse every reference in a note.

    Args:
        source: Identity of the note the text belongs to.
        text: Full note text, frontmatter included.

    Returns:
        References in line and column order. Lines inside fenced code blocks are
        ignored.

    Raises:
        TypeError: If ``source`` is not a :class:`NoteIdentity`.
    """
    if not isinstance(source, NoteIdentity):
        raise TypeError(f"Expected NoteIdentity, got {type(source).__name__}")

    references: list[RawReference] = []
    in_code_block = False
    for index, line in enumerate(split_lines(text or "")):
        if _FENCE_PATTERN.match(line):
            in_code_block = not in_code_block
            continue
        if in_code_block or "[" not in line:
            continue
        references.extend(extract_line_references(source, line, index + 1))
    return references


def format_reference(reference: RawReference, new_target: str) -> str:
    """Render ``reference`` pointing at ``new_target``, keeping everything else verbatim.

    ``new_target`` is a note path or bare name without extension. Alias, fragment,
    embed marker, escaped table pipes, ``<...>`` wrapping and link titles are
    preserved. Inline targets get the note extension back, and are percent-encoded
    when the original target was.
    """
    if reference.kind is LinkKind.BRACKETED:
        prefix = "![[" if reference.embed else "[["
        escape = "\\" if reference.target_text.endswith("\\") else ""
        rest = reference.text[len(prefix) + len(reference.target_text):]
        return f"{prefix}{new_target}{escape}{rest}"

    destination = f"{new_target}{NOTE_EXTENSION}"
    if "%" in reference.target_text:
        destination = quote(destination, safe="/")
    split_at = reference.text.index("](") + 2
    head, tail = reference.text[:split_at], reference.text[split_at:]
    return head + tail.replace(reference.target_text, destination, 1)
