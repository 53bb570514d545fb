"""
Ingestion — frontmatter handling, structure-aware chunking and document preparation.

This package turns cleaned Markdown (or HTML, via
:mod:`semantic_ingest.extraction`) into bounded, overlapping chunks ready
for embedding into a vector database.
"""

from semantic_ingest.ingestion.accumulator import AccumulatorState, ChunkAccumulator
from semantic_ingest.ingestion.chunker import SemanticChunker, chunk_documents
from semantic_ingest.ingestion.models import DocumentChunk, DocumentMetadata, Section
from semantic_ingest.ingestion.processor import DocumentProcessor, PreparedDocument, generate_document_id
from semantic_ingest.ingestion.tokens import estimate_tokens

__all__ = [
    "AccumulatorState",
    "ChunkAccumulator",
    "DocumentChunk",
    "DocumentMetadata",
    "DocumentProcessor",
    "PreparedDocument",
    "Section",
    "SemanticChunker",
    "chunk_documents",
    "estimate_tokens",
    "generate_document_id",
]
