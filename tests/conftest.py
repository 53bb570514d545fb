"""Shared pytest configuration and fixtures."""

import pytest

from semantic_ingest.ingestion.chunker import SemanticChunker
from semantic_ingest.ingestion.models import DocumentMetadata


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


@pytest.fixture()
def metadata() -> DocumentMetadata:
    return DocumentMetadata(id="kubeflow-guide", title="Kubeflow Guide", source_url="docs/guide.md")


@pytest.fixture()
def small_chunker() -> SemanticChunker:
    """Chunker with a tight budget so short fixtures still split."""
    return SemanticChunker(min_chunk_size=20, target_chunk_size=50, max_chunk_size=80, overlap_percentage=0.1)


@pytest.fixture()
def article_page() -> str:
    return """
<html>
  <head>
    <title>Pipelines Guide | Docs</title>
    <meta name="description" content="How to build ML pipelines.">
    <meta name="author" content="Platform Team">
    <meta name="keywords" content="kubeflow, pipelines">
    <meta property="og:title" content="Pipelines Guide">
  </head>
  <body>
    <nav><a href="/">Home</a> <a href="/docs">Docs</a></nav>
    <article class="post">
      <h1>Pipelines Guide</h1>
      <p>Kubeflow Pipelines orchestrate machine learning workflows on Kubernetes,
      turning notebooks into reproducible, versioned, shareable runs.</p>
      <p>Each step runs in its own container and passes artifacts to the next one.</p>
    </article>
    <footer>Copyright 2024 Example Corp</footer>
  </body>
</html>
"""
