"""Unit tests for DocumentProcessor: end-to-end preparation of HTML and Markdown."""

from __future__ import annotations

import logging

import pytest

from semantic_ingest.ingestion.markdown import MarkdownConverter, MarkdownifyConverter
from semantic_ingest.ingestion.processor import DocumentProcessor, generate_document_id


class StubConverter(MarkdownConverter):
    """Converter stub that records its input."""

    def __init__(self) -> None:
        self.seen: list[str] = []

    def convert(self, html: str) -> str:
        self.seen.append(html)
        return "# Stub\n\nconverted body"


@pytest.fixture()
def processor() -> DocumentProcessor:
    return DocumentProcessor()


# ── generate_document_id ───────────────────────────────────────────────


class TestGenerateDocumentId:
    def test_slug(self) -> None:
        assert generate_document_id("Getting Started: Kubeflow 1.9") == "getting-started-kubeflow-1-9"

    def test_truncated(self) -> None:
        doc_id = generate_document_id("word " * 40)
        assert len(doc_id) <= 64
        assert not doc_id.endswith("-")

    @pytest.mark.parametrize("title", [None, "", "!!!"])
    def test_random_when_unusable(self, title: str | None) -> None:
        assert generate_document_id(title).startswith("doc-")


# ── prepare_markdown ───────────────────────────────────────────────────


class TestPrepareMarkdown:
    def test_frontmatter_drives_metadata(self, processor: DocumentProcessor) -> None:
        content = "---\ntitle: Getting Started\ntags: [kubeflow, rag]\nauthor: Ana\n---\n# Intro\n\nHello world."
        prepared = processor.prepare_markdown(content)
        assert prepared.document_id == "getting-started"
        assert prepared.metadata.title == "Getting Started"
        assert prepared.metadata.tags == ["kubeflow", "rag"]
        assert prepared.metadata.author == "Ana"
        assert prepared.metadata.source_type == "markdown"
        assert [c.id for c in prepared.chunks] == ["getting-started_chunk_0"]
        assert prepared.chunks[0].content == "# Intro\n\nHello world."

    def test_explicit_id_wins(self, processor: DocumentProcessor) -> None:
        prepared = processor.prepare_markdown("# A\n\ntext", document_id="custom", title="Other")
        assert prepared.document_id == "custom"
        assert prepared.chunks[0].parent_document_id == "custom"

    def test_blank_content_rejected(self, processor: DocumentProcessor) -> None:
        with pytest.raises(ValueError):
            processor.prepare_markdown("   ")

    def test_frontmatter_only_warns(
        self,
        processor: DocumentProcessor,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.WARNING):
            prepared = processor.prepare_markdown("---\ntitle: Empty\n---\n")
        assert prepared.chunks == []
        assert "produced no chunks" in caplog.text


# ── prepare_html ───────────────────────────────────────────────────────


class TestPrepareHtml:
    def test_full_page(self, processor: DocumentProcessor, article_page: str) -> None:
        prepared = processor.prepare_html(article_page, base_url="https://example.com/guide/")
        meta = prepared.metadata
        assert meta.title == "Pipelines Guide"
        assert meta.id == "pipelines-guide"
        assert meta.source_type == "html"
        assert meta.source_url == "https://example.com/guide/"
        assert meta.description == "How to build ML pipelines."
        assert meta.author == "Platform Team"
        assert meta.tags == ["kubeflow", "pipelines"]

        assert prepared.chunks
        first = prepared.chunks[0]
        assert first.title == "Pipelines Guide"
        assert first.content.startswith("# Pipelines Guide")
        text = "\n".join(c.content for c in prepared.chunks)
        assert "Home" not in text
        assert "Copyright" not in text

    def test_title_falls_back_to_title_element(self) -> None:
        processor = DocumentProcessor(converter=StubConverter())
        html = "<html><head><title>Plain Page</title></head><body><article><p>Text body.</p></article></body></html>"
        prepared = processor.prepare_html(html)
        assert prepared.metadata.title == "Plain Page"
        assert prepared.document_id == "plain-page"

    def test_explicit_title_and_custom_converter(self, article_page: str) -> None:
        converter = StubConverter()
        processor = DocumentProcessor(converter=converter)
        prepared = processor.prepare_html(article_page, title="Override", tags=["extra"])
        assert converter.seen and converter.seen[0].startswith('<article class="post">')
        assert prepared.metadata.title == "Override"
        assert prepared.metadata.tags == ["extra", "kubeflow", "pipelines"]
        assert prepared.chunks[0].content == "# Stub\n\nconverted body"

    def test_blank_html_rejected(self, processor: DocumentProcessor) -> None:
        with pytest.raises(ValueError):
            processor.prepare_html("  ")


def test_markdownify_converter_uses_atx_headings() -> None:
    markdown = MarkdownifyConverter().convert("<h2>Setup</h2><p>Install it.</p>")
    assert markdown.startswith("## Setup")
    assert "Install it." in markdown
