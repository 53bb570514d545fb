"""Main-content extraction from full HTML pages.

The extractor runs a fixed, order-dependent pipeline on one document:

1. harvest ``<meta>`` metadata (before anything is removed);
2. strip ``script`` / ``style`` / ``noscript``;
3. drop HTML comments;
4. remove deny-listed classes, ids, selectors and page chrome;
5. pick the main-content region (selector hints → semantic elements →
   scored containers → ``<body>`` → whole document);
6. optionally clean low-quality blocks inside that region;
7. optionally rewrite relative URLs.

It is a best-effort heuristic, never a strict parser: malformed markup is
handled by BeautifulSoup and no step raises on odd input.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, MutableMapping
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Comment, Tag
from soupsieve import SelectorSyntaxError

from semantic_ingest.extraction.options import HtmlExtractionOptions
from semantic_ingest.extraction.scorer import ContentScorer, ScoredCandidate, ScoringVocabulary

logger = logging.getLogger(__name__)

_ALWAYS_STRIP = ["script", "style", "noscript"]
_SEMANTIC_SELECTOR = "article, main, [role=main]"
_CONTAINER_TAGS = ["div", "section"]
_CLEANABLE_TAGS = ["div", "section", "table", "ul", "ol"]
_CONTENT_ANCESTORS = ("article", "main")
_SHORT_ASIDE_CHARS = 100
_SMALL_RESULT_CHARS = 100


class ContentExtractor:
    """Strip boilerplate from an HTML page and return its main content.

    Parameters
    ----------
    options:
        Default extraction options; individual calls may override them.
    scorer:
        Scorer used to rank candidate regions. When *None*, one is built
        from the vocabulary overrides in *options*.
    """

    def __init__(
        self,
        options: HtmlExtractionOptions | None = None,
        scorer: ContentScorer | None = None,
    ) -> None:
        self.options = options or HtmlExtractionOptions()
        self._scorer = scorer

    def _scorer_for(self, options: HtmlExtractionOptions) -> ContentScorer:
        if self._scorer is not None:
            return self._scorer
        return ContentScorer(
            ScoringVocabulary.from_patterns(options.negative_pattern, options.positive_pattern)
        )

    # -- public API -----------------------------------------------------------

    def extract(
        self,
        html: str,
        metadata: MutableMapping[str, str] | None = None,
        options: HtmlExtractionOptions | None = None,
    ) -> str:
        """Return the cleaned main-content HTML of *html*.

        Parameters
        ----------
        html:
            Full HTML document (or fragment).
        metadata:
            Mutable mapping receiving ``<meta name>`` values and ``og:title``.
        options:
            Per-call options; defaults to the instance options.

        Returns
        -------
        str
            Serialised HTML of the selected content region.
        """
        if not isinstance(html, str):
            raise TypeError(f"html must be a str, got {type(html).__name__}")

        options = options or self.options
        scorer = self._scorer_for(options)
        soup = BeautifulSoup(html, "html.parser")
        original_length = len(html)

        if metadata is not None:
            self._collect_metadata(soup, metadata)

        for tag in soup.find_all(_ALWAYS_STRIP):
            tag.decompose()
        self._remove_comments(soup)
        self._remove_denied(soup, options)
        if options.strip_page_chrome:
            self._remove_page_chrome(soup)

        root = self._select_main_content(soup, scorer, options)

        if options.aggressive_cleaning and isinstance(root, Tag):
            self._clean_conditionally(root, scorer, options)

        if options.resolve_relative_urls:
            self._resolve_urls(root, options.base_url)

        result = str(root)
        reduction = (original_length - len(result)) / original_length * 100 if original_length else 0.0
        logger.debug(
            "HTML extraction: %d -> %d chars (%.1f%% reduction)",
            original_length,
            len(result),
            reduction,
        )
        if len(result) < _SMALL_RESULT_CHARS:
            logger.warning(
                "Extraction produced very small content (%d chars from %d); "
                "content may have been stripped too aggressively",
                len(result),
                original_length,
            )
        return result

    # -- pipeline steps -------------------------------------------------------

    @staticmethod
    def _collect_metadata(soup: BeautifulSoup, metadata: MutableMapping[str, str]) -> None:
        for meta in soup.find_all("meta", attrs={"name": True}):
            name = (meta.get("name") or "").strip()
            content = (meta.get("content") or "").strip()
            if name and content:
                metadata[name] = content

        og_title = soup.find("meta", attrs={"property": "og:title"})
        if og_title is not None:
            content = (og_title.get("content") or "").strip()
            if content:
                metadata["og:title"] = content

    @staticmethod
    def _remove_comments(soup: BeautifulSoup) -> None:
        for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
            comment.extract()

    @staticmethod
    def _remove_denied(soup: BeautifulSoup, options: HtmlExtractionOptions) -> None:
        class_names = {name.strip().lower() for name in options.remove_class_names if name.strip()}
        ids = {value.strip() for value in options.remove_ids if value.strip()}

        doomed: list[Tag] = []
        if class_names or ids:
            for element in soup.find_all(True):
                if ids and element.get("id") in ids:
                    doomed.append(element)
                    continue
                tokens = {token.lower() for token in _class_tokens(element)}
                if tokens & class_names:
                    doomed.append(element)

        for selector in options.remove_selectors:
            doomed.extend(_safe_select(soup, selector))

        _decompose_all(doomed)

    @staticmethod
    def _remove_page_chrome(soup: BeautifulSoup) -> None:
        doomed: list[Tag] = []
        for header in soup.find_all("header"):
            if not _inside_content(header) and header.find(["h1", "h2", "h3", "h4", "h5", "h6"]) is None:
                doomed.append(header)
        for footer in soup.find_all("footer"):
            if not _inside_content(footer):
                doomed.append(footer)
        for aside in soup.find_all("aside"):
            if len(aside.get_text().strip()) < _SHORT_ASIDE_CHARS:
                doomed.append(aside)
        _decompose_all(doomed)

    def _select_main_content(
        self,
        soup: BeautifulSoup,
        scorer: ContentScorer,
        options: HtmlExtractionOptions,
    ) -> Tag:
        threshold = options.min_confidence_threshold

        for selector in options.content_selectors:
            best = _best(
                c for c in scorer.score_all(_with_text(_safe_select(soup, selector)))
                if c.confidence >= threshold
            )
            if best is not None:
                logger.debug(
                    "Selected <%s> via selector %r (score=%d, confidence=%.2f)",
                    best.node.name, selector, best.score, best.confidence,
                )
                return best.node

        best = _best(scorer.score_all(_with_text(soup.select(_SEMANTIC_SELECTOR))))
        if best is not None:
            logger.debug("Selected semantic <%s> (score=%d)", best.node.name, best.score)
            return best.node

        best = _best(
            c for c in scorer.score_all(_with_text(soup.find_all(_CONTAINER_TAGS)))
            if c.confidence >= threshold
        )
        if best is not None:
            logger.debug("Selected scored <%s> (score=%d)", best.node.name, best.score)
            return best.node

        body = soup.find("body")
        if body is not None:
            logger.warning("No content region above threshold %.2f; falling back to <body>", threshold)
            return body

        logger.warning("No content region above threshold %.2f; keeping the whole document", threshold)
        return soup

    @staticmethod
    def _clean_conditionally(
        root: Tag,
        scorer: ContentScorer,
        options: HtmlExtractionOptions,
    ) -> None:
        # Innermost first: an ancestor is judged on what survives below it.
        removed = 0
        for element in reversed(root.find_all(_CLEANABLE_TAGS)):
            if element.decomposed:
                continue

            score = scorer.score(element)
            text_length = len(element.get_text().strip())
            list_items = len(element.find_all("li"))
            paragraphs = len(element.find_all("p"))

            if (
                score < 0
                or (text_length < options.min_text_length and element.find("img") is None)
                or (scorer.link_density(element) > options.max_link_density and score < 25)
                or (list_items > paragraphs and list_items > 3)
            ):
                element.decompose()
                removed += 1

        if removed:
            logger.debug("Conditional cleaning removed %d blocks", removed)

    @staticmethod
    def _resolve_urls(root: Tag, base_url: str | None) -> None:
        for element in root.find_all(href=True):
            href = element["href"].strip()
            if not href:
                continue
            if href.startswith("#") or href.lower().startswith("javascript:"):
                element["href"] = ""
            elif base_url:
                element["href"] = urljoin(base_url, href)

        if not base_url:
            return
        for element in root.find_all(src=True):
            src = element["src"].strip()
            if src:
                element["src"] = urljoin(base_url, src)


# -- helpers ------------------------------------------------------------------


def _class_tokens(element: Tag) -> list[str]:
    classes = element.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    return classes


def _inside_content(element: Tag) -> bool:
    for parent in element.parents:
        if parent.name in _CONTENT_ANCESTORS:
            return True
        if isinstance(parent, Tag) and (parent.get("role") or "").lower() == "main":
            return True
    return False


def _safe_select(soup: BeautifulSoup, selector: str) -> list[Tag]:
    try:
        return soup.select(selector)
    except SelectorSyntaxError:
        logger.warning("Ignoring invalid CSS selector %r", selector)
        return []


def _with_text(elements: Iterable[Tag]) -> list[Tag]:
    return [el for el in elements if el.get_text().strip()]


def _best(candidates: Iterable[ScoredCandidate]) -> ScoredCandidate | None:
    """Highest raw score wins; the earliest in document order wins ties."""
    best: ScoredCandidate | None = None
    for candidate in candidates:
        if best is None or candidate.score > best.score:
            best = candidate
    return best


def _decompose_all(elements: Iterable[Tag]) -> None:
    for element in elements:
        if not element.decomposed:
            element.decompose()
