"""Structure-aware chunking of Markdown documents.

Documents are split on headings first; a section that fits the target
budget becomes one chunk verbatim. Larger sections are broken into
paragraphs (and, for oversized paragraphs, sentences) that are packed by
a :class:`~semantic_ingest.ingestion.accumulator.ChunkAccumulator`, with
overlap carried between the pieces of the same section.

Usage::

    from semantic_ingest.ingestion.chunker import SemanticChunker

    chunker = SemanticChunker(min_chunk_size=200, target_chunk_size=400, max_chunk_size=500)
    chunks = chunker.chunk_markdown(markdown, "kubeflow-guide", metadata)
"""

from __future__ import annotations

import hashlib
import logging
import re
from collections.abc import Iterable
from typing import TYPE_CHECKING

from semantic_ingest.config import ChunkingSettings, settings, validate_chunk_policy
from semantic_ingest.errors import ConfigurationError
from semantic_ingest.ingestion.accumulator import SEGMENT_SEPARATOR, ChunkAccumulator
from semantic_ingest.ingestion.models import UNTITLED, DocumentChunk, DocumentMetadata, Section
from semantic_ingest.ingestion.tokens import TokenEstimator, estimate_tokens

if TYPE_CHECKING:
    from langchain_core.documents import Document

logger = logging.getLogger(__name__)

_HEADING = re.compile(r"^(#{1,6})\s+(.+)$")
_FENCE = re.compile(r"^ {0,3}(`{3,}|~{3,})")
_PARAGRAPH_BREAK = re.compile(r"\r?\n[ \t]*\r?\n")
_SENTENCE_BREAK = re.compile(r"(?<=[.!?])\s+")
_CLOSING_HASHES = re.compile(r"\s+#+\s*$")


class SemanticChunker:
    """Chunk Markdown by document structure rather than fixed sizes.

    Parameters
    ----------
    min_chunk_size:
        Smallest meaningful chunk, in tokens.
    target_chunk_size:
        Sections at or below this many tokens are never split.
    max_chunk_size:
        Hard ceiling; only a single oversized sentence may exceed it.
    overlap_percentage:
        Fraction of each finished chunk repeated at the start of the next
        chunk of the same section.
    token_estimator:
        ``text -> int`` token counter shared with the accumulators.

    Raises
    ------
    ConfigurationError
        When the bounds are inconsistent.
    """

    def __init__(
        self,
        min_chunk_size: int = 200,
        target_chunk_size: int = 400,
        max_chunk_size: int = 500,
        overlap_percentage: float = 0.1,
        token_estimator: TokenEstimator = estimate_tokens,
    ) -> None:
        validate_chunk_policy(min_chunk_size, target_chunk_size, max_chunk_size, overlap_percentage)
        if not callable(token_estimator):
            raise ConfigurationError("token_estimator must be callable")
        self.min_chunk_size = min_chunk_size
        self.target_chunk_size = target_chunk_size
        self.max_chunk_size = max_chunk_size
        self.overlap_percentage = overlap_percentage
        self.estimate_tokens = token_estimator

    @classmethod
    def from_settings(
        cls,
        chunking: ChunkingSettings | None = None,
        token_estimator: TokenEstimator = estimate_tokens,
    ) -> SemanticChunker:
        """Build a chunker from :class:`ChunkingSettings` (global settings by default)."""
        chunking = chunking or settings.chunking
        return cls(
            min_chunk_size=chunking.min_chunk_size,
            target_chunk_size=chunking.target_chunk_size,
            max_chunk_size=chunking.max_chunk_size,
            overlap_percentage=chunking.overlap_percentage,
            token_estimator=token_estimator,
        )

    def new_accumulator(self, initial_overlap: str | None = None) -> ChunkAccumulator:
        return ChunkAccumulator(
            self.min_chunk_size,
            self.target_chunk_size,
            self.max_chunk_size,
            self.overlap_percentage,
            self.estimate_tokens,
            initial_overlap=initial_overlap,
        )

    # -- public API -----------------------------------------------------------

    def chunk_markdown(
        self,
        markdown: str,
        document_id: str,
        metadata: DocumentMetadata | None = None,
    ) -> list[DocumentChunk]:
        """Split *markdown* into ordered chunks.

        Parameters
        ----------
        markdown:
            Markdown body (frontmatter already stripped).
        document_id:
            Parent id; chunk ids are ``{document_id}_chunk_{index}``.
        metadata:
            Shared by reference with every produced chunk.

        Returns
        -------
        list[DocumentChunk]
            Chunks indexed ``0..n-1`` across the whole document. A blank
            document yields an empty list.
        """
        if not isinstance(markdown, str):
            raise TypeError(f"markdown must be a str, got {type(markdown).__name__}")
        if not document_id or not document_id.strip():
            raise ValueError("document_id must not be empty")

        logger.info("Chunking document: %s", document_id)

        chunks: list[DocumentChunk] = []
        position = 0
        for section in self.parse_sections(markdown):
            section_tokens = self.estimate_tokens(section.content)
            if section_tokens <= self.target_chunk_size:
                chunks.append(
                    DocumentChunk.create(
                        document_id,
                        len(chunks),
                        section.content,
                        token_count=section_tokens,
                        title=section.title,
                        start_position=position,
                        metadata=metadata,
                    )
                )
            else:
                splitter = _SectionSplitter(self, section, document_id, len(chunks), position, metadata)
                chunks.extend(splitter.run())
            position += len(section.content)

        valid = [c for c in chunks if c.content.strip()]
        if len(valid) < len(chunks):
            logger.warning(
                "Filtered %d empty chunks from document %s. Valid chunks: %d",
                len(chunks) - len(valid),
                document_id,
                len(valid),
            )

        logger.info("Created %d chunks for document: %s", len(valid), document_id)
        return valid

    def chunk_batch(
        self,
        documents: Iterable[tuple[str, str, DocumentMetadata | None]],
    ) -> list[DocumentChunk]:
        """Chunk several ``(markdown, document_id, metadata)`` triples.

        A document that fails is logged and skipped; the others still count.
        """
        documents = list(documents)
        logger.info("Chunking %d documents", len(documents))

        all_chunks: list[DocumentChunk] = []
        for content, document_id, metadata in documents:
            try:
                all_chunks.extend(self.chunk_markdown(content, document_id, metadata))
            except Exception:
                logger.exception("Failed to chunk document: %s", document_id)

        logger.info("Created total of %d chunks from %d documents", len(all_chunks), len(documents))
        return all_chunks

    @staticmethod
    def parse_sections(markdown: str) -> list[Section]:
        """Split Markdown into heading-delimited sections.

        Each ATX heading (``#`` to ``######``) opens a new section that
        includes the heading line. Prose before the first heading becomes an
        ``"Untitled"`` level-0 section. Lines inside fenced code blocks are
        never treated as headings, and blank sections are dropped.
        """
        sections: list[Section] = []
        lines: list[str] = []
        title: str | None = None
        level = 0
        fence: str | None = None

        def flush() -> None:
            content = "\n".join(lines).strip()
            if content:
                sections.append(Section(content=content, title=title or UNTITLED, level=level))

        for line in markdown.split("\n"):
            fence_match = _FENCE.match(line)
            if fence_match:
                marker = fence_match.group(1)
                if fence is None:
                    fence = marker
                elif marker[0] == fence[0] and len(marker) >= len(fence):
                    fence = None
            elif fence is None:
                heading = _HEADING.match(line.rstrip("\r"))
                if heading:
                    flush()
                    lines = []
                    level = len(heading.group(1))
                    title = _CLOSING_HASHES.sub("", heading.group(2).strip())
            lines.append(line)

        flush()
        return sections


def split_paragraphs(text: str) -> list[str]:
    """Split on blank lines, dropping empty paragraphs."""
    return [p.strip() for p in _PARAGRAPH_BREAK.split(text) if p.strip()]


def split_sentences(text: str) -> list[str]:
    """Split after ``.``, ``!`` or ``?`` followed by whitespace."""
    return [s for s in _SENTENCE_BREAK.split(text) if s.strip()]


class _SectionSplitter:
    """Packs one oversized section into chunks through a single accumulator."""

    def __init__(
        self,
        chunker: SemanticChunker,
        section: Section,
        document_id: str,
        start_index: int,
        start_position: int,
        metadata: DocumentMetadata | None,
    ) -> None:
        self.chunker = chunker
        self.section = section
        self.document_id = document_id
        self.index = start_index
        self.start_position = start_position
        self.metadata = metadata
        # Each section starts cold: no overlap from the previous section.
        self.accumulator = chunker.new_accumulator()
        self.chunks: list[DocumentChunk] = []
        self._cursor = 0

    def run(self) -> list[DocumentChunk]:
        max_tokens = self.chunker.max_chunk_size
        for paragraph in split_paragraphs(self.section.content):
            if self.chunker.estimate_tokens(paragraph) > max_tokens:
                self.flush()
                for sentence in split_sentences(paragraph):
                    self.add(sentence)
            else:
                self.add(paragraph)

        if self.accumulator.has_new_content:
            self._emit()
        return self.chunks

    def add(self, unit: str) -> None:
        acc = self.accumulator
        if acc.try_add(unit):
            return
        self.flush()
        if acc.try_add(unit):
            return
        # The carried overlap leaves no room for this unit; start truly fresh.
        acc.reset(include_overlap=False)
        if not acc.try_add(unit):
            acc.force_add(unit)

    def flush(self) -> None:
        """Finalize pending content and reseed the buffer with its overlap."""
        if not self.accumulator.has_new_content:
            return
        self._emit()
        self.accumulator.reset(include_overlap=True)

    def _emit(self) -> None:
        offset = self._locate(self.accumulator.segments[0])
        chunk = self.accumulator.finalize(
            self.document_id,
            self.index,
            self.section.title,
            self.start_position + offset,
            self.metadata,
        )
        if chunk is not None:
            self.chunks.append(chunk)
            self.index += 1
            self._cursor = offset

    def _locate(self, segment: str) -> int:
        """Offset of *segment*'s first unit inside the section, never before the previous chunk."""
        first_unit = segment.split(SEGMENT_SEPARATOR, 1)[0].strip()
        offset = self.section.content.find(first_unit, self._cursor)
        return offset if offset >= 0 else self._cursor


def chunk_documents(
    documents: list[Document],
    chunker: SemanticChunker | None = None,
) -> list[Document]:
    """Split LangChain *documents* into chunk documents ready for embedding.

    Parameters
    ----------
    documents:
        Source documents whose ``page_content`` is Markdown (or plain text).
    chunker:
        Chunker to use; defaults to one built from the global settings.

    Returns
    -------
    list[Document]
        One document per chunk. Source metadata is preserved and chunk
        fields (``chunk_id``, ``doc_id``, ``chunk_index``, …) are added.
    """
    chunker = chunker or SemanticChunker.from_settings()

    results: list[Document] = []
    for doc in documents:
        fallback_id = hashlib.sha256(doc.page_content.encode()).hexdigest()[:16]
        metadata = DocumentMetadata.from_mapping(doc.metadata, document_id=fallback_id)
        if not metadata.id.strip():
            metadata.id = fallback_id
        for chunk in chunker.chunk_markdown(doc.page_content, metadata.id, metadata):
            results.append(chunk.to_document())
    return results
