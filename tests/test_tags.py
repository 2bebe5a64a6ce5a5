"""Tests for the frontmatter/tag codec used to describe graph nodes."""

import pytest

from vault_graph.core.tags import (
    _parse_frontmatter,
    count_words,
    frontmatter_tags,
    inline_tags,
    parse_note,
)


class TestFrontmatter:
    def test_metadata_and_body(self):
        metadata, body = _parse_frontmatter("---\ntitle: Example\ntags:\n  - test\n---\n\nBody text.")
        assert metadata == {"title": "Example", "tags": ["test"]}
        assert body.strip() == "Body text."

    def test_no_frontmatter(self):
        assert _parse_frontmatter("Just text") == ({}, "Just text")

    def test_invalid_yaml_raises(self):
        with pytest.raises(ValueError):
            _parse_frontmatter("---\ntitle: [unclosed\n---\nBody")


class TestTags:
    """Frontmatter and inline tags."""

    def test_frontmatter_list_and_string(self):
        assert frontmatter_tags({"tags": ["AI", "#ml"]}) == {"ai", "ml"}
        assert frontmatter_tags({"tags": "research, reading"}) == {"research", "reading"}
        assert frontmatter_tags({"tag": "single"}) == {"single"}
        assert frontmatter_tags({}) == set()

    def test_inline_tags(self):
        body = "Working on #Project/Alpha and #ideas.\n# Heading\n## Sub\nIssue #42"
        assert inline_tags(body) == {"project/alpha", "ideas"}

    def test_inline_tags_skip_links_and_code(self):
        body = "[[Note#Section]] [[#Local]] [x](Note.md#frag)\n```\n#not-a-tag\n```"
        assert inline_tags(body) == set()


class TestParseNote:
    def test_title_tags_and_size(self):
        parsed = parse_note("---\ntitle: Plan\ntags: [work]\n---\nShip the #release soon [[Other]]")
        assert parsed.title == "Plan"
        assert parsed.tags == frozenset({"work", "release"})
        assert parsed.word_count == 4

    def test_invalid_frontmatter_is_ignored(self):
        parsed = parse_note("---\ntitle: [broken\n---\nbody #tag", "Broken.md")
        assert parsed.title is None
        assert "tag" in parsed.tags

    def test_count_words_ignores_code(self):
        assert count_words("one two\n```\nthree four\n```\nfive") == 3
