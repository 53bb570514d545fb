"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings

from semantic_ingest.errors import ConfigurationError
from semantic_ingest.extraction.options import HtmlExtractionOptions


def validate_chunk_policy(
    min_tokens: int,
    target_tokens: int,
    max_tokens: int,
    overlap_percentage: float,
) -> None:
    """Raise :class:`ConfigurationError` unless ``0 < min < target < max`` and overlap is in [0, 1]."""
    if min_tokens <= 0:
        raise ConfigurationError(f"min token count must be positive, got {min_tokens}")
    if target_tokens <= min_tokens:
        raise ConfigurationError(
            f"target token count ({target_tokens}) must be greater than min ({min_tokens})"
        )
    if max_tokens <= target_tokens:
        raise ConfigurationError(
            f"max token count ({max_tokens}) must be greater than target ({target_tokens})"
        )
    if not 0.0 <= overlap_percentage <= 1.0:
        raise ConfigurationError(
            f"overlap percentage must be between 0 and 1, got {overlap_percentage}"
        )


class ChunkingSettings(BaseModel):
    """Token budget for the semantic chunker."""

    min_chunk_size: int = Field(default=200, description="Floor below which a chunk is considered too small")
    target_chunk_size: int = Field(default=400, description="Sections at or under this size are never split")
    max_chunk_size: int = Field(default=500, description="Hard ceiling, exceeded only by one oversized sentence")
    overlap_percentage: float = Field(default=0.1, description="Fraction of a finished chunk carried forward")

    @model_validator(mode="after")
    def _check_policy(self) -> ChunkingSettings:
        validate_chunk_policy(
            self.min_chunk_size,
            self.target_chunk_size,
            self.max_chunk_size,
            self.overlap_percentage,
        )
        return self


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file.

    Nested values use a double underscore, e.g.
    ``SEMANTIC_INGEST_CHUNKING__MAX_CHUNK_SIZE=800``.
    """

    chunking: ChunkingSettings = Field(default_factory=ChunkingSettings)
    extraction: HtmlExtractionOptions = Field(default_factory=HtmlExtractionOptions)

    log_level: str = Field(default="INFO", description="Root log level used by configure_logging()")

    model_config = {
        "env_prefix": "SEMANTIC_INGEST_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


# Module-level singleton; import `settings` wherever needed.
settings = Settings()


def configure_logging(level: str | int | None = None) -> None:
    """Install a basic root handler at *level* (defaults to ``settings.log_level``)."""
    if level is None:
        level = settings.log_level
    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
