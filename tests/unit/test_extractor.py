"""Unit tests for main-content extraction."""

from __future__ import annotations

import logging

import pytest

from semantic_ingest.extraction import ContentExtractor, HtmlExtractionOptions

BODY = "Readable body text, " * 10


@pytest.fixture()
def extractor() -> ContentExtractor:
    return ContentExtractor()


# ── Region selection ───────────────────────────────────────────────────


class TestSelection:
    def test_article_selected_and_chrome_dropped(self, extractor: ContentExtractor) -> None:
        html = (
            "<nav><a href='/'>Home</a></nav>"
            "<article><h1>T</h1><p>Body text.</p></article>"
            "<footer>Copyright notice</footer>"
        )
        result = extractor.extract(html)
        assert result == "<article><h1>T</h1><p>Body text.</p></article>"
        assert "Home" not in result
        assert "Copyright" not in result

    def test_full_page(self, extractor: ContentExtractor, article_page: str) -> None:
        result = extractor.extract(article_page)
        assert result.startswith('<article class="post">')
        assert "Each step runs in its own container" in result
        assert "Home" not in result
        assert "Copyright" not in result

    def test_scored_container_when_no_selector_matches(self, extractor: ContentExtractor) -> None:
        paragraphs = "".join(f"<p>{BODY}</p>" for _ in range(3))
        html = f'<body><div class="wrapper"><div class="story-text">{paragraphs}</div></div></body>'
        result = extractor.extract(html)
        assert result.startswith('<div class="story-text">')

    def test_falls_back_to_body(self, extractor: ContentExtractor) -> None:
        result = extractor.extract("<html><body><p>Just a short note.</p></body></html>")
        assert result == "<body><p>Just a short note.</p></body>"

    def test_fragment_without_body_is_kept_whole(self, extractor: ContentExtractor) -> None:
        assert extractor.extract("<p>Loose fragment text.</p>") == "<p>Loose fragment text.</p>"

    def test_invalid_selector_is_skipped(
        self,
        extractor: ContentExtractor,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        options = HtmlExtractionOptions(content_selectors=["div[", "article"])
        with caplog.at_level(logging.WARNING, logger="semantic_ingest.extraction.extractor"):
            result = extractor.extract(f"<article><p>{BODY}</p></article>", options=options)
        assert result.startswith("<article>")
        assert "Ignoring invalid CSS selector" in caplog.text

    def test_rejects_non_string_input(self, extractor: ContentExtractor) -> None:
        with pytest.raises(TypeError):
            extractor.extract(b"<p>bytes</p>")  # type: ignore[arg-type]


# ── Boilerplate removal ────────────────────────────────────────────────


class TestRemoval:
    def test_scripts_styles_and_comments_removed(self, extractor: ContentExtractor) -> None:
        html = (
            f"<article><script>track()</script><style>p {{}}</style>"
            f"<!-- build 42 --><p>{BODY}</p></article>"
        )
        result = extractor.extract(html)
        assert "track()" not in result
        assert "<style>" not in result
        assert "build 42" not in result

    def test_denied_classes_and_ids_removed(self, extractor: ContentExtractor) -> None:
        html = (
            f"<article><p>{BODY}</p>"
            "<div class='share'>Share on X</div>"
            "<div id='comments'>Nice post</div></article>"
        )
        result = extractor.extract(html)
        assert "Share on X" not in result
        assert "Nice post" not in result

    def test_default_selectors_remove_widgets_and_pagers(self, extractor: ContentExtractor) -> None:
        html = (
            f"<article><p>{BODY}</p>"
            "<div class='widget'>Popular tags</div>"
            "<div class='pager'>Older posts</div>"
            "<div class='modal'>Sign up now</div></article>"
        )
        result = extractor.extract(html)
        assert "Popular tags" not in result
        assert "Older posts" not in result
        assert "Sign up now" not in result
        assert "Readable body text" in result

    def test_class_names_match_whole_tokens_only(self, extractor: ContentExtractor) -> None:
        html = f"<article><p>{BODY}</p><div class='menu-item-note'>Kept note</div></article>"
        assert "Kept note" in extractor.extract(html)

    def test_page_header_and_short_aside_removed(self, extractor: ContentExtractor) -> None:
        html = (
            "<body><header><div class='logo'>Brand</div></header>"
            "<aside>Tiny aside</aside>"
            f"<article><p>{BODY}</p></article></body>"
        )
        result = extractor.extract(html)
        assert "Brand" not in result
        assert "Tiny aside" not in result

    def test_page_chrome_kept_when_disabled(self) -> None:
        extractor = ContentExtractor(HtmlExtractionOptions(strip_page_chrome=False, content_selectors=[]))
        html = "<body><footer>Footer text</footer><p>x</p></body>"
        assert "Footer text" in extractor.extract(html)


# ── Conditional cleaning ───────────────────────────────────────────────


class TestConditionalCleaning:
    HTML = (
        f'<article class="post"><p>{BODY}</p>'
        '<div class="sidebar-widget"><a href="/a">Link one</a> <a href="/b">Link two</a></div>'
        "</article>"
    )

    def test_link_heavy_widget_removed(self) -> None:
        extractor = ContentExtractor(HtmlExtractionOptions(aggressive_cleaning=True))
        result = extractor.extract(self.HTML)
        assert "Link one" not in result
        assert "Readable body text" in result

    def test_cleaning_is_opt_in(self, extractor: ContentExtractor) -> None:
        assert "Link one" in extractor.extract(self.HTML)

    def test_link_lists_removed(self) -> None:
        items = "".join(f"<li><a href='/p{i}'>Page {i}</a></li>" for i in range(5))
        html = f"<article><p>{BODY}</p><ul>{items}</ul></article>"
        extractor = ContentExtractor(HtmlExtractionOptions(aggressive_cleaning=True))
        assert "<ul>" not in extractor.extract(html)


# ── Metadata and URLs ──────────────────────────────────────────────────


class TestMetadataAndUrls:
    def test_meta_tags_collected(self, extractor: ContentExtractor, article_page: str) -> None:
        meta: dict[str, str] = {}
        extractor.extract(article_page, meta)
        assert meta["description"] == "How to build ML pipelines."
        assert meta["author"] == "Platform Team"
        assert meta["keywords"] == "kubeflow, pipelines"
        assert meta["og:title"] == "Pipelines Guide"

    def test_relative_urls_resolved_against_base(self, extractor: ContentExtractor) -> None:
        html = (
            '<article><p>See <a href="/docs/intro">intro</a> and <a href="#top">top</a>.</p>'
            '<img src="img/a.png"></article>'
        )
        options = HtmlExtractionOptions(base_url="https://example.com/guide/")
        result = extractor.extract(html, options=options)
        assert 'href="https://example.com/docs/intro"' in result
        assert 'src="https://example.com/guide/img/a.png"' in result
        assert 'href=""' in result

    def test_without_base_url_only_fragments_are_blanked(self, extractor: ContentExtractor) -> None:
        html = (
            '<article><p>See <a href="/docs/intro">intro</a> or '
            '<a href="javascript:void(0)">this</a>, then read on.</p></article>'
        )
        result = extractor.extract(html)
        assert 'href="/docs/intro"' in result
        assert "javascript:" not in result

    def test_extraction_is_idempotent(self, extractor: ContentExtractor, article_page: str) -> None:
        once = extractor.extract(article_page)
        assert extractor.extract(once) == once
