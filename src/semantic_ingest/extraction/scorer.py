"""Readability-style content scoring for HTML elements.

Each heuristic contributes independently to an integer score; higher means
the element is more likely to be the page's primary readable content.

Usage::

    from bs4 import BeautifulSoup
    from semantic_ingest.extraction.scorer import ContentScorer

    soup = BeautifulSoup(html, "html.parser")
    scorer = ContentScorer()
    best = max(scorer.score_all(soup.find_all("div")), key=lambda c: c.score)
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass

from bs4 import Tag

logger = logging.getLogger(__name__)

DEFAULT_NEGATIVE_PATTERN = (
    r"\bnav|combx|comment|community|disqus|menu|remark|rss|shoutbox|sidebar|"
    r"sponsor|\bads?\b|ad-break|ad-wrapper|advertisement|banner|breadcrumb|"
    r"agegate|pagination|pager|popup|promo|share|social|"
    r"cookie|gdpr|newsletter|subscribe|related-posts|recommended|"
    r"hidden|invisible|hide|removed"
)

DEFAULT_POSITIVE_PATTERN = (
    r"article|body|content|entry|main|post|prose|blog|story"
)

_ELEMENT_PRIORS: dict[str, int] = {
    "article": 25,
    "main": 20,
    "section": 15,
    "div": 5,
    "p": 3,
    "td": 3,
    "pre": 3,
}


@dataclass(frozen=True)
class ScoringVocabulary:
    """Class/id vocabularies used for the lexical signal.

    Kept as data so deployments can tune them without touching code.
    """

    negative: re.Pattern[str]
    positive: re.Pattern[str]

    @classmethod
    def from_patterns(
        cls,
        negative: str | None = None,
        positive: str | None = None,
    ) -> ScoringVocabulary:
        """Compile case-insensitive vocabularies, falling back to the defaults."""
        return cls(
            negative=re.compile(negative or DEFAULT_NEGATIVE_PATTERN, re.IGNORECASE),
            positive=re.compile(positive or DEFAULT_POSITIVE_PATTERN, re.IGNORECASE),
        )


@dataclass(frozen=True)
class ScoredCandidate:
    """An element together with its raw score and normalised confidence."""

    node: Tag
    score: int
    confidence: float


def _text(element: Tag) -> str:
    return element.get_text().strip()


class ContentScorer:
    """Score DOM elements by how much they look like main content.

    Parameters
    ----------
    vocabulary:
        Negative/positive class-name vocabularies. Defaults to
        :meth:`ScoringVocabulary.from_patterns` with no overrides.
    """

    def __init__(self, vocabulary: ScoringVocabulary | None = None) -> None:
        self.vocabulary = vocabulary or ScoringVocabulary.from_patterns()

    # -- public API -----------------------------------------------------------

    def score(self, element: Tag) -> int:
        """Return the raw content score of *element*."""
        text = _text(element)
        paragraphs = len(element.find_all("p"))

        total = _ELEMENT_PRIORS.get(element.name.lower(), 0)
        total += self._class_id_weight(element)
        total += min(text.count(","), 10)
        total += min(len(text) // 100, 30)
        total += paragraphs * 3
        total += self._link_density_penalty(element)
        total += self._image_ratio_penalty(element, paragraphs)
        return total

    def confidence(self, element: Tag) -> float:
        """Map the raw score onto ``[0, 1]``: ``clamp(score + 50, 0, 100) / 100``."""
        return self.to_confidence(self.score(element))

    @staticmethod
    def to_confidence(score: int) -> float:
        return max(0, min(100, score + 50)) / 100.0

    def evaluate(self, element: Tag) -> ScoredCandidate:
        """Score *element* and wrap the result."""
        raw = self.score(element)
        return ScoredCandidate(node=element, score=raw, confidence=self.to_confidence(raw))

    def score_all(self, elements: Iterable[Tag]) -> list[ScoredCandidate]:
        return [self.evaluate(el) for el in elements]

    def link_density(self, element: Tag) -> float:
        """Ratio of anchor text length to total text length.

        An element without text counts as all links (1.0); one without
        anchors scores 0.0.
        """
        text_length = len(_text(element))
        if text_length == 0:
            return 1.0

        anchors = element.find_all("a")
        if not anchors:
            return 0.0

        link_length = sum(len(_text(a)) for a in anchors)
        return link_length / text_length

    def text_density(self, element: Tag) -> float:
        """Ratio of visible text length to serialised markup length."""
        markup_length = len(str(element))
        if markup_length == 0:
            return 0.0
        return len(_text(element)) / markup_length

    # -- heuristics -----------------------------------------------------------

    def _class_id_weight(self, element: Tag) -> int:
        weight = 0
        classes = element.get("class") or []
        if isinstance(classes, str):
            classes = classes.split()
        class_id = f"{' '.join(classes)} {element.get('id') or ''}".strip()

        if class_id:
            if self.vocabulary.negative.search(class_id):
                weight -= 25
                logger.debug("Negative class/id match on <%s %s>", element.name, class_id)
            if self.vocabulary.positive.search(class_id):
                weight += 25
                logger.debug("Positive class/id match on <%s %s>", element.name, class_id)

        role = element.get("role") or ""
        if isinstance(role, str) and role.strip().lower() == "main":
            weight += 25

        return weight

    def _link_density_penalty(self, element: Tag) -> int:
        density = self.link_density(element)
        if density > 0.5:
            logger.debug("High link density (%.2f) on <%s>", density, element.name)
            return -25
        if density > 0.3:
            return -10
        return 0

    @staticmethod
    def _image_ratio_penalty(element: Tag, paragraphs: int) -> int:
        images = len(element.find_all("img"))
        if images > paragraphs and images > 1:
            return -10
        return 0
