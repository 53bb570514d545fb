"""Unit tests for YAML frontmatter handling."""

from __future__ import annotations

import logging

import pytest

from semantic_ingest.ingestion.frontmatter import merge_frontmatter, parse_frontmatter, strip_frontmatter
from semantic_ingest.ingestion.models import DocumentMetadata

DOC = """---
title: Serving Models
tags: [kserve, inference]
url: https://example.com/serving
sourceType: webpage
weight: 3
---
# Serving

Body text.
"""


class TestParse:
    def test_mapping_returned(self) -> None:
        data = parse_frontmatter(DOC)
        assert data is not None
        assert data["title"] == "Serving Models"
        assert data["tags"] == ["kserve", "inference"]
        assert data["weight"] == 3

    def test_no_frontmatter(self) -> None:
        assert parse_frontmatter("# Heading\n\n---\nnot: frontmatter\n---\n") is None

    def test_malformed_yaml_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            assert parse_frontmatter("---\ntitle: [unclosed\n---\nbody") is None
        assert "Failed to parse YAML frontmatter" in caplog.text

    def test_non_mapping_ignored(self) -> None:
        assert parse_frontmatter("---\n- a\n- b\n---\nbody") is None


class TestStrip:
    def test_strips_block(self) -> None:
        assert strip_frontmatter(DOC) == "# Serving\n\nBody text.\n"

    def test_leaves_plain_markdown_untouched(self) -> None:
        text = "# Heading\n\nText."
        assert strip_frontmatter(text) == text


class TestMerge:
    def test_typed_fields_and_extra(self) -> None:
        metadata = DocumentMetadata(id="serving")
        data = parse_frontmatter(DOC)
        assert data is not None
        merge_frontmatter(metadata, data)
        assert metadata.title == "Serving Models"
        assert metadata.source_url == "https://example.com/serving"
        assert metadata.source_type == "webpage"
        assert metadata.tags == ["kserve", "inference"]
        assert metadata.extra["weight"] == 3

    def test_comma_separated_tags(self) -> None:
        metadata = merge_frontmatter(DocumentMetadata(id="x"), {"tags": "ml, ops ,"})
        assert metadata.tags == ["ml", "ops"]

    def test_blank_title_does_not_override(self) -> None:
        metadata = DocumentMetadata(id="x", title="Original")
        merge_frontmatter(metadata, {"title": "  "})
        assert metadata.title == "Original"
