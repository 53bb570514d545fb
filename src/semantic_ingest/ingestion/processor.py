"""Document preparation: raw HTML or Markdown in, metadata and chunks out.

:class:`DocumentProcessor` wires the extraction and chunking stages
together::

    processor = DocumentProcessor()
    prepared = processor.prepare_html(page_html, base_url="https://example.com/guide/")
    for chunk in prepared.chunks:
        ...
"""

from __future__ import annotations

import logging
import re
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from bs4 import BeautifulSoup

from semantic_ingest.extraction import ContentExtractor, HtmlExtractionOptions
from semantic_ingest.ingestion.chunker import SemanticChunker
from semantic_ingest.ingestion.frontmatter import merge_frontmatter, parse_frontmatter, strip_frontmatter
from semantic_ingest.ingestion.markdown import MarkdownConverter, MarkdownifyConverter
from semantic_ingest.ingestion.models import DocumentChunk, DocumentMetadata, as_tag_list

logger = logging.getLogger(__name__)

MAX_ID_LENGTH = 64

_NON_SLUG = re.compile(r"[^a-z0-9]+")


@dataclass
class PreparedDocument:
    """Metadata of one document together with its ordered chunks."""

    metadata: DocumentMetadata
    chunks: list[DocumentChunk] = field(default_factory=list)

    @property
    def document_id(self) -> str:
        return self.metadata.id


class DocumentProcessor:
    """Prepare HTML and Markdown documents for embedding.

    Parameters
    ----------
    chunker:
        Chunker used for every document; built from settings when *None*.
    extractor:
        Main-content extractor for HTML input.
    converter:
        HTML to Markdown converter; defaults to :class:`MarkdownifyConverter`.
    options:
        Extraction options passed to the default extractor.
    """

    def __init__(
        self,
        chunker: SemanticChunker | None = None,
        extractor: ContentExtractor | None = None,
        converter: MarkdownConverter | None = None,
        options: HtmlExtractionOptions | None = None,
    ) -> None:
        self.chunker = chunker or SemanticChunker.from_settings()
        self.extractor = extractor or ContentExtractor(options)
        self.converter = converter or MarkdownifyConverter()

    # -- public API -----------------------------------------------------------

    def prepare_markdown(
        self,
        content: str,
        *,
        document_id: str | None = None,
        title: str | None = None,
        source_url: str | None = None,
        source_type: str = "markdown",
        tags: Iterable[str] | None = None,
        extra: Mapping[str, Any] | None = None,
    ) -> PreparedDocument:
        """Chunk a Markdown document, honouring its YAML frontmatter.

        Frontmatter values override the keyword arguments (a blank
        frontmatter title does not). The document id is *document_id* when
        given, otherwise derived from the resolved title.

        Raises
        ------
        ValueError
            If *content* is empty or whitespace-only.
        """
        if not isinstance(content, str):
            raise TypeError(f"content must be a str, got {type(content).__name__}")
        if not content.strip():
            raise ValueError("content must not be empty")

        metadata = _new_metadata(document_id, title, source_url, source_type, tags, extra)
        return self._prepare(content, metadata)

    def prepare_html(
        self,
        html: str,
        *,
        base_url: str | None = None,
        document_id: str | None = None,
        title: str | None = None,
        source_url: str | None = None,
        tags: Iterable[str] | None = None,
        extra: Mapping[str, Any] | None = None,
    ) -> PreparedDocument:
        """Extract the main content of *html*, convert it to Markdown and chunk it.

        The title is the explicit *title*, else ``og:title``, else a
        ``<meta name="title">``, else the page ``<title>``. ``description``,
        ``author`` and ``keywords`` meta tags fill the matching metadata
        fields.
        """
        if not isinstance(html, str):
            raise TypeError(f"html must be a str, got {type(html).__name__}")
        if not html.strip():
            raise ValueError("html must not be empty")

        options = self.extractor.options
        if base_url:
            options = options.model_copy(update={"base_url": base_url})

        meta: dict[str, str] = {}
        content_html = self.extractor.extract(html, meta, options)
        markdown = self.converter.convert(content_html)

        metadata = _new_metadata(
            document_id,
            title or meta.get("og:title") or meta.get("title") or _page_title(html),
            source_url or base_url,
            "html",
            list(tags or []) + as_tag_list(meta.get("keywords", "")),
            extra,
        )
        metadata.description = meta.get("description")
        metadata.author = meta.get("author")

        prepared = self._prepare(markdown, metadata)
        logger.info(
            "Prepared HTML document %s: %d chunks",
            prepared.document_id,
            len(prepared.chunks),
        )
        return prepared

    # -- internals ------------------------------------------------------------

    def _prepare(self, content: str, metadata: DocumentMetadata) -> PreparedDocument:
        frontmatter = parse_frontmatter(content)
        if frontmatter:
            merge_frontmatter(metadata, frontmatter)
        body = strip_frontmatter(content)

        if not metadata.id:
            metadata.id = generate_document_id(metadata.title)

        chunks = self.chunker.chunk_markdown(body, metadata.id, metadata)
        if not chunks:
            logger.warning("Document %s produced no chunks", metadata.id)
        return PreparedDocument(metadata=metadata, chunks=chunks)


def generate_document_id(title: str | None) -> str:
    """Derive a stable id from *title*, or a random one when it has no usable characters.

    >>> generate_document_id("Getting Started: Kubeflow 1.9")
    'getting-started-kubeflow-1-9'
    """
    slug = _NON_SLUG.sub("-", (title or "").lower()).strip("-")
    slug = slug[:MAX_ID_LENGTH].rstrip("-")
    return slug or f"doc-{uuid.uuid4().hex}"


def _new_metadata(
    document_id: str | None,
    title: str | None,
    source_url: str | None,
    source_type: str,
    tags: Iterable[str] | None,
    extra: Mapping[str, Any] | None,
) -> DocumentMetadata:
    return DocumentMetadata(
        id=document_id or "",
        title=title or "",
        source_url=source_url or "manual",
        source_type=source_type,
        tags=as_tag_list(list(tags)) if tags else [],
        extra=dict(extra or {}),
    )


def _page_title(html: str) -> str | None:
    tag = BeautifulSoup(html, "html.parser").find("title")
    if tag is None:
        return None
    text = tag.get_text(strip=True)
    return text or None
