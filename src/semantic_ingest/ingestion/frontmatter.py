"""YAML frontmatter handling for Markdown documents.

A frontmatter block is a YAML mapping fenced by ``---`` lines at the very
start of the document. It carries metadata and is stripped before
chunking.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

import yaml

from semantic_ingest.ingestion.models import DocumentMetadata, as_tag_list

logger = logging.getLogger(__name__)

FRONTMATTER_PATTERN = re.compile(r"\A\ufeff?---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)

# frontmatter key -> DocumentMetadata attribute
_STRING_FIELDS: dict[str, str] = {
    "description": "description",
    "url": "source_url",
    "sourceType": "source_type",
    "source_type": "source_type",
    "author": "author",
}


def parse_frontmatter(markdown: str) -> dict[str, Any] | None:
    """Return the frontmatter mapping of *markdown*, or ``None`` when absent or unusable."""
    match = FRONTMATTER_PATTERN.match(markdown)
    if not match:
        return None

    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as exc:
        logger.warning("Failed to parse YAML frontmatter: %s", exc)
        return None

    if not isinstance(data, dict):
        return None
    return {str(key): value for key, value in data.items()}


def strip_frontmatter(markdown: str) -> str:
    """Return *markdown* without its leading frontmatter block."""
    match = FRONTMATTER_PATTERN.match(markdown)
    if not match:
        return markdown
    return markdown[match.end():].lstrip("\r\n")


def merge_frontmatter(metadata: DocumentMetadata, frontmatter: Mapping[str, Any]) -> DocumentMetadata:
    """Apply *frontmatter* values onto *metadata* in place and return it.

    ``title`` only wins when non-blank; ``tags`` accepts a list or a comma
    separated string; every key is also copied into ``metadata.extra``.
    """
    title = frontmatter.get("title")
    if isinstance(title, str) and title.strip():
        metadata.title = title.strip()

    for key, attribute in _STRING_FIELDS.items():
        value = frontmatter.get(key)
        if isinstance(value, str):
            setattr(metadata, attribute, value)

    if "tags" in frontmatter:
        tags = as_tag_list(frontmatter["tags"])
        if tags:
            metadata.tags = tags

    metadata.extra.update(frontmatter)
    return metadata
