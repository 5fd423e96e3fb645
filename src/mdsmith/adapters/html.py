"""Conversion of sidenote HTML back into single-line markdown."""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup
from markdownify import markdownify


__all__ = ["html_to_markdown", "strip_hidden_spans"]


logger = logging.getLogger(__name__)


def strip_hidden_spans(html: str) -> str:
    """Remove ``<span class="hidden">`` elements, used by themes for helper glyphs."""
    soup = BeautifulSoup(html, "html.parser")
    hidden = soup.select("span.hidden")
    if not hidden:
        return html
    for span in hidden:
        span.decompose()
    return soup.decode()


def html_to_markdown(html: str, *, strip_hidden: bool = True) -> str:
    """Convert an inline HTML fragment into markdown collapsed onto one line."""
    if strip_hidden:
        html = strip_hidden_spans(html)
    html = html.strip()
    if not html:
        return ""
    converted = markdownify(
        html,
        heading_style="ATX",
        escape_asterisks=False,
        escape_underscores=False,
        escape_misc=False,
    )
    collapsed = " ".join(converted.split())
    logger.debug("converted sidenote HTML %r into %r", html, collapsed)
    return collapsed
