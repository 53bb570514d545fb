"""Bounded single-chunk buffer with admission control and overlap.

:class:`ChunkAccumulator` collects whole segments (paragraphs or
sentences) until the next one would break the ``max`` token ceiling. When
a chunk is finalized, the trailing segments worth roughly
``overlap_percentage`` of it are kept so the next chunk can start with
them.

Usage::

    acc = ChunkAccumulator(200, 400, 500, 0.1)
    for paragraph in paragraphs:
        if not acc.try_add(paragraph):
            chunks.append(acc.finalize("doc", len(chunks), "Intro", 0, meta))
            acc.reset(include_overlap=True)
            acc.try_add(paragraph) or acc.force_add(paragraph)
"""

from __future__ import annotations

import logging
import math
from enum import Enum

from semantic_ingest.config import validate_chunk_policy
from semantic_ingest.errors import ConfigurationError
from semantic_ingest.ingestion.models import DocumentChunk, DocumentMetadata
from semantic_ingest.ingestion.tokens import TokenEstimator, estimate_tokens

logger = logging.getLogger(__name__)

SEGMENT_SEPARATOR = "\n\n"


class AccumulatorState(str, Enum):
    """Lifecycle of the buffer between two :meth:`ChunkAccumulator.reset` calls."""

    EMPTY = "empty"
    ACCUMULATING = "accumulating"
    FINALIZED = "finalized"


class ChunkAccumulator:
    """Accumulate segments into one chunk under a min/target/max token budget.

    Parameters
    ----------
    min_tokens:
        Smallest meaningful chunk size; must be positive.
    target_tokens:
        Preferred chunk size; must exceed *min_tokens*.
    max_tokens:
        Hard ceiling, only exceeded through :meth:`force_add`; must exceed
        *target_tokens*.
    overlap_percentage:
        Fraction (0-1) of a finalized chunk carried into the next one.
    token_estimator:
        ``text -> int`` token counter.
    initial_overlap:
        Optional text the buffer starts with.

    Raises
    ------
    ConfigurationError
        When the bounds are not ordered ``0 < min < target < max`` or the
        overlap fraction lies outside ``[0, 1]``.
    """

    def __init__(
        self,
        min_tokens: int,
        target_tokens: int,
        max_tokens: int,
        overlap_percentage: float,
        token_estimator: TokenEstimator = estimate_tokens,
        initial_overlap: str | None = None,
    ) -> None:
        validate_chunk_policy(min_tokens, target_tokens, max_tokens, overlap_percentage)
        if not callable(token_estimator):
            raise ConfigurationError("token_estimator must be callable")

        self.min_tokens = min_tokens
        self.target_tokens = target_tokens
        self.max_tokens = max_tokens
        self.overlap_percentage = overlap_percentage
        self._estimate = token_estimator

        self._segments: list[str] = []
        self._text = ""
        self._tokens = 0
        self._seeded = 0
        self._finalized = False
        self._overlap = ""

        if initial_overlap and initial_overlap.strip():
            self._overlap = initial_overlap.strip()
            self._append(self._overlap)
            self._seeded = 1

    # -- read-only state ------------------------------------------------------

    @property
    def state(self) -> AccumulatorState:
        if self._finalized:
            return AccumulatorState.FINALIZED
        return AccumulatorState.ACCUMULATING if self._text else AccumulatorState.EMPTY

    @property
    def current_token_count(self) -> int:
        return self._tokens

    @property
    def has_content(self) -> bool:
        return bool(self._text)

    @property
    def has_new_content(self) -> bool:
        """True when something beyond the seeded overlap has been added."""
        return len(self._segments) > self._seeded

    @property
    def has_reached_target(self) -> bool:
        return self._tokens >= self.target_tokens

    @property
    def is_near_max(self) -> bool:
        return self._tokens >= self.max_tokens

    @property
    def overlap(self) -> str:
        """Overlap prepared by the last :meth:`finalize` (or the initial overlap)."""
        return self._overlap

    @property
    def segments(self) -> tuple[str, ...]:
        return tuple(self._segments)

    # -- mutation -------------------------------------------------------------

    def can_fit(self, segment: str) -> bool:
        """Return whether *segment* could be added without exceeding ``max_tokens``.

        The candidate buffer is measured as a whole, separator included, the
        same way :meth:`_append` recounts it.
        """
        if not segment or not segment.strip():
            return True
        if not self._text:
            return self._estimate(segment) <= self.max_tokens
        return self._estimate(self._text + SEGMENT_SEPARATOR + segment) <= self.max_tokens

    def try_add(self, segment: str) -> bool:
        """Append *segment* if it fits; return ``False`` (and change nothing) otherwise.

        Blank segments are accepted as a no-op. A segment that alone exceeds
        ``max_tokens`` is refused even on an empty buffer: the caller must
        split it or fall back to :meth:`force_add`.
        """
        if not segment or not segment.strip():
            return True
        self._ensure_open()
        if not self.can_fit(segment):
            return False
        self._append(segment)
        return True

    def force_add(self, segment: str) -> None:
        """Append *segment* regardless of the budget.

        Reserved for a single atomic unit that cannot fit even a fresh chunk.
        """
        if not segment or not segment.strip():
            return
        self._ensure_open()
        logger.debug(
            "Force-adding %d-token segment (buffer %d, max %d)",
            self._estimate(segment),
            self._tokens,
            self.max_tokens,
        )
        self._append(segment)

    def finalize(
        self,
        document_id: str,
        chunk_index: int,
        title: str | None,
        start_position: int,
        metadata: DocumentMetadata | None,
    ) -> DocumentChunk | None:
        """Emit the buffered text as a chunk and prepare the next overlap.

        Returns ``None`` when the buffer holds nothing but whitespace.
        """
        if self._finalized:
            raise RuntimeError("chunk already finalized; call reset() before finalizing again")
        if not self._text:
            return None

        content = self._text.strip()
        if not content:
            return None

        chunk = DocumentChunk.create(
            document_id,
            chunk_index,
            content,
            token_count=self._estimate(content),
            title=title,
            start_position=start_position,
            metadata=metadata,
        )
        self._overlap = self._build_overlap()
        self._finalized = True
        return chunk

    def reset(self, include_overlap: bool = True) -> None:
        """Clear the buffer, optionally seeding it with the prepared overlap."""
        self._segments.clear()
        self._text = ""
        self._tokens = 0
        self._seeded = 0
        self._finalized = False

        if include_overlap and self._overlap:
            self._append(self._overlap)
            self._seeded = 1

    # -- internals ------------------------------------------------------------

    def _ensure_open(self) -> None:
        if self._finalized:
            raise RuntimeError("cannot add to a finalized chunk; call reset() first")

    def _append(self, segment: str) -> None:
        if self._text:
            self._text += SEGMENT_SEPARATOR
        self._text += segment
        self._segments.append(segment)
        # Recount the whole buffer: separators and estimator rounding are not additive.
        self._tokens = self._estimate(self._text)

    def _build_overlap(self) -> str:
        budget = math.floor(self._tokens * self.overlap_percentage)
        if budget <= 0:
            return ""
        if self._tokens <= budget:
            return self._text.strip()

        taken: list[str] = []
        taken_tokens = 0
        for segment in reversed(self._segments):
            segment_tokens = self._estimate(segment)
            if taken and taken_tokens + segment_tokens > budget:
                break
            taken.append(segment)
            taken_tokens += segment_tokens
            if taken_tokens >= budget:
                break

        taken.reverse()
        return SEGMENT_SEPARATOR.join(taken).strip()
