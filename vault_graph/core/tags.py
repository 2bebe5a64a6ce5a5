"""Frontmatter and tag codec: body text, title, tag set and word count of a note."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

import frontmatter
import yaml

logger = logging.getLogger(__name__)

_FENCE_PATTERN = re.compile(r"^\s*(`{3,}|~{3,})")
# Obsidian tags: letters, digits, _, -, / (nesting); at least one non-digit
INLINE_TAG_PATTERN = re.compile(r"(?<![\w/#&\[\](])#([A-Za-z0-9_][\w/-]*)")
_LINK_SYNTAX_PATTERN = re.compile(r"!?\[\[[^\]]*\]\]|!?\[[^\]]*\]\([^)]*\)")
_WORD_PATTERN = re.compile(r"\S+")


@dataclass(frozen=True)
class ParsedNote:
    """Derived view of a note used to build a graph node."""

    body: str
    title: Optional[str]
    tags: frozenset[str]
    word_count: int


def _parse_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Extract YAML frontmatter metadata and note body from raw text.

    Args:
        text: Raw markdown text, possibly containing a frontmatter block.

    Returns:
        A tuple of ``(metadata, content)`` where ``metadata`` is the parsed YAML
        dictionary (empty when no frontmatter is present) and ``content`` is the
        markdown body without the frontmatter block.

    Raises:
        ValueError: If the frontmatter block exists but cannot be parsed as YAML.
    """
    if not text:
        return {}, ""

    try:
        post = frontmatter.loads(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"Frontmatter contains invalid YAML: {exc}") from exc
    except Exception as exc:  # pragma: no cover - defensive
        raise ValueError(f"Unable to parse frontmatter: {exc}") from exc

    metadata = post.metadata or {}
    if not isinstance(metadata, Mapping):
        raise ValueError("Frontmatter must be a mapping.")
    content = post.content if post.content is not None else ""
    return dict(metadata), content


def normalize_tag(tag: Any) -> str:
    """Lower-case a tag and drop a leading ``#``."""
    return str(tag).strip().lstrip("#").strip().lower()


def frontmatter_tags(metadata: Mapping[str, Any]) -> set[str]:
    """Read the ``tags`` (or ``tag``) property, accepting a list or a comma/space separated string."""
    raw = metadata.get("tags", metadata.get("tag"))
    if raw is None:
        return set()
    if isinstance(raw, str):
        items: list[Any] = re.split(r"[,\s]+", raw)
    elif isinstance(raw, (list, tuple, set)):
        items = list(raw)
    else:
        items = [raw]
    return {tag for tag in (normalize_tag(item) for item in items if item is not None) if tag}


def inline_tags(body: str) -> set[str]:
    """Collect ``#hashtags`` from body text outside fenced code blocks."""
    tags: set[str] = set()
    in_code_block = False
    for line in body.split("\n"):
        if _FENCE_PATTERN.match(line):
            in_code_block = not in_code_block
            continue
        if in_code_block:
            continue
        for match in INLINE_TAG_PATTERN.finditer(line):
            tag = match.group(1).rstrip("/")
            if tag and not tag.isdigit():
                tags.add(tag.lower())
    return tags


def count_words(body: str) -> int:
    """Count words in the body, ignoring fenced code and link syntax."""
    words = 0
    in_code_block = False
    for line in body.split("\n"):
        if _FENCE_PATTERN.match(line):
            in_code_block = not in_code_block
            continue
        if in_code_block:
            continue
        line = _LINK_SYNTAX_PATTERN.sub(" ", line).lstrip("#>-*+ \t")
        words += len(_WORD_PATTERN.findall(line))
    return words


def parse_note(text: str, path: str = "") -> ParsedNote:
    """Split a note into body, title, tags and size.

    A note whose frontmatter is not valid YAML is treated as having no metadata;
    the whole text becomes the body.
    """
    try:
        metadata, body = _parse_frontmatter(text)
    except ValueError as exc:
        logger.debug("Ignoring unreadable frontmatter in '%s': %s", path, exc)
        metadata, body = {}, text

    title = metadata.get("title")
    return ParsedNote(
        body=body,
        title=str(title).strip() if isinstance(title, (str, int, float)) and str(title).strip() else None,
        tags=frozenset(frontmatter_tags(metadata) | inline_tags(body)),
        word_count=count_words(body),
    )
