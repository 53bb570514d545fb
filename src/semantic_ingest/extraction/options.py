"""Options controlling HTML main-content extraction and cleaning."""

from __future__ import annotations

from pydantic import BaseModel, Field

# CSS selectors tried first when looking for the main content region.
DEFAULT_CONTENT_SELECTORS: list[str] = [
    "article",
    "main",
    "[role=main]",
    "#content",
    ".content",
    "#main",
    ".main",
    ".post-content",
    ".entry-content",
    ".article-content",
    ".article-body",
    ".post-body",
]

# Whole class tokens (not substrings) whose elements are always removed.
DEFAULT_REMOVE_CLASS_NAMES: list[str] = [
    "navigation",
    "navbar",
    "nav-bar",
    "nav-menu",
    "sidebar",
    "side-bar",
    "breadcrumb",
    "breadcrumbs",
    "menu",
    "advertisement",
    "ad-block",
    "promo",
    "banner",
    "social",
    "share",
    "related",
    "recommended",
    "cookie-notice",
    "newsletter",
    "subscribe",
    "comment-form",
    "reply-form",
]

# Exact ``id`` values whose elements are always removed.
DEFAULT_REMOVE_IDS: list[str] = [
    "comments",
    "disqus_thread",
    "sidebar",
    "navigation",
    "cookie-notice",
]

# Page-level header/footer/aside are handled by ``strip_page_chrome``.
DEFAULT_REMOVE_SELECTORS: list[str] = [
    "nav",
    "iframe",
    ".ad",
    ".ads",
    ".ad-wrapper",
    ".ad-container",
    ".widget",
    ".comments",
    ".comment-section",
    ".social-share",
    ".share-buttons",
    ".related-posts",
    ".cookie-banner",
    ".gdpr",
    ".popup",
    ".modal",
    ".pagination",
    ".pager",
    ".disqus",
]


class HtmlExtractionOptions(BaseModel):
    """Tunable knobs for :class:`~semantic_ingest.extraction.extractor.ContentExtractor`.

    Attributes
    ----------
    content_selectors:
        CSS selectors tried, in order, before falling back to scoring.
    remove_class_names:
        Class tokens removed wherever they appear (whole-token match).
    remove_ids:
        ``id`` values removed wherever they appear (exact match).
    remove_selectors:
        Extra CSS selectors whose matches are always removed.
    strip_page_chrome:
        Remove page-level ``<footer>``, heading-less ``<header>`` and short
        ``<aside>`` elements that live outside the article body.
    min_confidence_threshold:
        Confidence floor a scored candidate must reach to be selected.
    max_link_density:
        Link density above which a low-scoring block is removed while
        cleaning.
    min_text_length:
        Blocks with less text than this (and no image) are removed while
        cleaning.
    aggressive_cleaning:
        Enables the conditional cleaning pass inside the selected region.
    resolve_relative_urls:
        Rewrite relative ``href`` / ``src`` values against *base_url* and
        blank fragment-only and ``javascript:`` links.
    base_url:
        Base for URL resolution; ``None`` disables rewriting relative URLs.
    negative_pattern / positive_pattern:
        Optional regular expressions replacing the scorer's default
        class/id vocabularies.
    """

    content_selectors: list[str] = Field(default_factory=lambda: list(DEFAULT_CONTENT_SELECTORS))
    remove_class_names: list[str] = Field(default_factory=lambda: list(DEFAULT_REMOVE_CLASS_NAMES))
    remove_ids: list[str] = Field(default_factory=lambda: list(DEFAULT_REMOVE_IDS))
    remove_selectors: list[str] = Field(default_factory=lambda: list(DEFAULT_REMOVE_SELECTORS))
    strip_page_chrome: bool = True
    min_confidence_threshold: float = Field(default=0.6, ge=0.0, le=1.0)
    max_link_density: float = Field(default=0.3, ge=0.0, le=1.0)
    min_text_length: int = Field(default=25, ge=0)
    aggressive_cleaning: bool = False
    resolve_relative_urls: bool = True
    base_url: str | None = None
    negative_pattern: str | None = None
    positive_pattern: str | None = None
