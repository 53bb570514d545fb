"""
Extraction — isolate the main readable content of an HTML page.

Public surface
--------------
- :class:`ContentExtractor` — strips boilerplate and selects the content region.
- :class:`ContentScorer` — Readability-style scoring of individual elements.
- :class:`ScoringVocabulary`, :class:`ScoredCandidate` — scorer inputs / outputs.
- :class:`HtmlExtractionOptions` — tunable extraction policy.
"""

from semantic_ingest.extraction.extractor import ContentExtractor
from semantic_ingest.extraction.options import HtmlExtractionOptions
from semantic_ingest.extraction.scorer import ContentScorer, ScoredCandidate, ScoringVocabulary

__all__ = [
    "ContentExtractor",
    "ContentScorer",
    "HtmlExtractionOptions",
    "ScoredCandidate",
    "ScoringVocabulary",
]
