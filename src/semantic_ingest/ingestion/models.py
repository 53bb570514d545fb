"""Domain models for prepared documents and their chunks."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from langchain_core.documents import Document

UNTITLED = "Untitled"

# Keys in a loose metadata mapping that map onto typed fields.
_KNOWN_KEYS: dict[str, str] = {
    "id": "id",
    "document_id": "id",
    "doc_id": "id",
    "title": "title",
    "source_url": "source_url",
    "url": "source_url",
    "source": "source_url",
    "source_type": "source_type",
    "sourceType": "source_type",
    "author": "author",
    "description": "description",
    "tags": "tags",
}


class DocumentMetadata(BaseModel):
    """Metadata describing one ingested document.

    Common fields are typed; anything else lives in :attr:`extra`.

    Attributes
    ----------
    id:
        Unique document identifier (also the prefix of every chunk id).
    title:
        Human-readable title.
    source_url:
        Source URL or file path (``"manual"`` when unknown).
    source_type:
        Kind of source, e.g. ``"html"``, ``"markdown"``, ``"webpage"``.
    ingested_at:
        UTC timestamp of when the document was prepared.
    last_modified:
        When the source last changed, if known.
    author, description:
        Optional descriptive fields, typically from ``<meta>`` or frontmatter.
    tags:
        Keywords attached to the document.
    extra:
        Arbitrary additional metadata (frontmatter keys, custom fields, …).
    """

    id: str
    title: str = ""
    source_url: str = "manual"
    source_type: str = "manual"
    ingested_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    last_modified: datetime | None = None
    author: str | None = None
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    extra: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, document_id: str | None = None) -> DocumentMetadata:
        """Build metadata from a loose mapping such as a LangChain ``Document.metadata``.

        Recognised keys fill the typed fields; every other key is kept in
        :attr:`extra`. *document_id* is used when the mapping carries no id.
        """
        fields: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in data.items():
            if value is None:
                continue
            target = _KNOWN_KEYS.get(key)
            if target is None or target in fields:
                extra[key] = value
            elif target == "tags":
                fields["tags"] = as_tag_list(value)
            else:
                fields[target] = str(value)

        fields.setdefault("id", document_id or "")
        return cls(**fields, extra=extra)


@dataclass(frozen=True)
class Section:
    """A heading-delimited region of a Markdown document.

    Attributes
    ----------
    title:
        Heading text, or ``"Untitled"`` for prose before the first heading.
    content:
        Section text including its heading line, trimmed.
    level:
        Heading depth (1-6), 0 when the section has no heading.
    """

    content: str
    title: str = UNTITLED
    level: int = 0


class DocumentChunk(BaseModel):
    """A bounded span of document text, the unit of embedding and retrieval.

    Instances are immutable. :attr:`metadata` is the caller's
    :class:`DocumentMetadata` object, shared by every chunk of the document.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    parent_document_id: str
    chunk_index: int = Field(ge=0)
    title: str | None = None
    content: str
    token_count: int = Field(ge=0)
    start_position: int = Field(default=0, ge=0)
    end_position: int = Field(default=0, ge=0)
    metadata: DocumentMetadata | None = None

    @field_validator("content")
    @classmethod
    def _content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("chunk content must not be empty or whitespace-only")
        return value

    @classmethod
    def create(
        cls,
        document_id: str,
        chunk_index: int,
        content: str,
        *,
        token_count: int,
        title: str | None = None,
        start_position: int = 0,
        metadata: DocumentMetadata | None = None,
    ) -> DocumentChunk:
        """Build a chunk with the canonical ``{document_id}_chunk_{index}`` id."""
        return cls(
            id=chunk_id(document_id, chunk_index),
            parent_document_id=document_id,
            chunk_index=chunk_index,
            title=title,
            content=content,
            token_count=token_count,
            start_position=start_position,
            end_position=start_position + len(content),
            metadata=metadata,
        )

    def to_document(self) -> Document:
        """Convert to a LangChain ``Document`` for embedding / vector-store upload."""
        from langchain_core.documents import Document

        meta: dict[str, Any] = {}
        if self.metadata is not None:
            meta.update(self.metadata.extra)
            meta.update(
                {
                    "source": self.metadata.source_url,
                    "source_type": self.metadata.source_type,
                    "document_title": self.metadata.title,
                    "tags": list(self.metadata.tags),
                }
            )
        meta.update(
            {
                "chunk_id": self.id,
                "doc_id": self.parent_document_id,
                "chunk_index": self.chunk_index,
                "title": self.title,
                "token_estimate": self.token_count,
                "start_position": self.start_position,
                "end_position": self.end_position,
            }
        )
        return Document(page_content=self.content, metadata=meta)

    def __str__(self) -> str:  # noqa: D105
        return f"[{self.id}] {self.content[:120]}…"


def chunk_id(document_id: str, chunk_index: int) -> str:
    return f"{document_id}_chunk_{chunk_index}"


def as_tag_list(value: Any) -> list[str]:
    """Normalise a tag value (list or comma-separated string) to a list of strings."""
    if isinstance(value, str):
        items: list[Any] = value.split(",")
    elif isinstance(value, (list, tuple, set)):
        items = list(value)
    else:
        items = [value]
    return [str(item).strip() for item in items if item is not None and str(item).strip()]
