"""HTML to Markdown conversion.

The processor only depends on :class:`MarkdownConverter`; swapping the
conversion library means subclassing it and implementing :meth:`convert`.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod

import markdownify

_EXCESS_BLANK_LINES = re.compile(r"\n{3,}")


class MarkdownConverter(ABC):
    """Turns an HTML fragment into Markdown."""

    @abstractmethod
    def convert(self, html: str) -> str:
        """Return Markdown for *html*. Headings must use ATX (``#``) style."""
        ...


class MarkdownifyConverter(MarkdownConverter):
    """:class:`MarkdownConverter` backed by the ``markdownify`` package.

    Parameters
    ----------
    bullets:
        Bullet characters cycled through for nested lists.
    """

    def __init__(self, bullets: str = "-") -> None:
        self.bullets = bullets

    def convert(self, html: str) -> str:
        markdown = markdownify.markdownify(html, heading_style=markdownify.ATX, bullets=self.bullets)
        return _EXCESS_BLANK_LINES.sub("\n\n", markdown).strip()
