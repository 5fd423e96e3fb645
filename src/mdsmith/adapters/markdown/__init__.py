"""Markdown parsing and rendering backends.

Two libraries are involved. markdown-it-py parses the documents being rewritten:
it is CommonMark compliant and exposes a token stream with line maps, which the
core turns into source anchors. Python-Markdown renders footnote bodies into the
inline HTML carried by sidenotes.
"""

from __future__ import annotations

from collections.abc import Callable, MutableMapping, Sequence
from dataclasses import dataclass, field
import logging
from threading import Lock
from typing import Any

from bs4 import BeautifulSoup
from bs4.element import NavigableString, Tag
import markdown
from markdown_it import MarkdownIt
from markdown_it.common.utils import normalizeReference
from markdown_it.rules_inline import StateInline, autolink, backtick, html_inline, image, link
from markdown_it.token import Token

from mdsmith.core.exceptions import DocumentParseError


__all__ = [
    "SPAN_META_KEY",
    "MarkdownConversionError",
    "ParsedMarkdown",
    "SourceMarkdownIt",
    "get_document_parser",
    "normalize_label",
    "parse_markdown",
    "render_markdown",
    "render_note_html",
]


logger = logging.getLogger(__name__)

SPAN_META_KEY = "source_span"
"""Token meta entry holding ``(start, end)`` offsets within the inline content."""


class MarkdownConversionError(DocumentParseError):
    """Raised when Markdown cannot be converted into HTML."""


class SourceMarkdownIt(MarkdownIt):
    """CommonMark parser that keeps link destinations exactly as written.

    URL normalisation would percent-encode destinations and URL validation would
    silently turn ``javascript:`` or ``data:`` links into plain text; both would
    make the parsed identity of a link differ from its source.
    """

    def normalizeLink(self, url: str) -> str:
        return url

    def normalizeLinkText(self, link: str) -> str:
        return link

    def validateLink(self, url: str) -> bool:
        return True


def _anchored(rule: Callable[[StateInline, bool], bool], token_type: str):
    """Wrap an inline rule so the token it opens records its content offsets."""

    def anchored_rule(state: StateInline, silent: bool) -> bool:
        start = state.pos
        first_token = len(state.tokens)
        if not rule(state, silent):
            return False
        if not silent:
            for token in state.tokens[first_token:]:
                if token.type == token_type:
                    token.meta[SPAN_META_KEY] = (start, state.pos)
                    break
        return True

    anchored_rule.__name__ = f"anchored_{getattr(rule, '__name__', token_type)}"
    return anchored_rule


def _build_document_parser() -> SourceMarkdownIt:
    parser = SourceMarkdownIt("commonmark").enable("table")
    parser.inline.ruler.at("backticks", _anchored(backtick, "code_inline"))
    parser.inline.ruler.at("link", _anchored(link, "link_open"))
    parser.inline.ruler.at("image", _anchored(image, "image"))
    parser.inline.ruler.at("autolink", _anchored(autolink, "link_open"))
    parser.inline.ruler.at("html_inline", _anchored(html_inline, "html_inline"))
    return parser


_DOCUMENT_PARSER: SourceMarkdownIt | None = None
_DOCUMENT_PARSER_GUARD = Lock()


def get_document_parser() -> SourceMarkdownIt:
    """Return the shared markdown-it parser, building it on first use."""
    global _DOCUMENT_PARSER
    if _DOCUMENT_PARSER is None:
        with _DOCUMENT_PARSER_GUARD:
            if _DOCUMENT_PARSER is None:
                _DOCUMENT_PARSER = _build_document_parser()
    return _DOCUMENT_PARSER


@dataclass(slots=True)
class ParsedMarkdown:
    """Token stream and environment produced by markdown-it."""

    tokens: list[Token]
    env: MutableMapping[str, Any] = field(default_factory=dict)

    @property
    def references(self) -> dict[str, dict[str, str]]:
        return dict(self.env.get("references", {}))

    @property
    def reference_rows(self) -> list[tuple[int, int]]:
        """Return the ``[first, end)`` line range of every link reference definition.

        Definitions repeating an earlier label are included.
        """
        entries = [*self.env.get("references", {}).values(), *self.env.get("duplicate_refs", [])]
        return sorted(tuple(entry["map"]) for entry in entries if entry.get("map"))


def normalize_label(label: str) -> str:
    """Return the case-folded key markdown-it uses for reference labels."""
    return normalizeReference(label)


def parse_markdown(source: str) -> ParsedMarkdown:
    """Parse ``source`` into markdown-it tokens, raising on structural failure."""
    env: dict[str, Any] = {}
    try:
        tokens = get_document_parser().parse(source, env)
    except RecursionError as exc:
        raise DocumentParseError("Markdown nesting is too deep to parse.") from exc
    except Exception as exc:  # pragma: no cover - library-controlled
        raise DocumentParseError(f"Failed to parse Markdown source: {exc}") from exc
    return ParsedMarkdown(tokens=tokens, env=env)


class _MarkdownCacheEntry:
    __slots__ = ("lock", "processor")

    def __init__(self, processor: markdown.Markdown) -> None:
        self.processor = processor
        self.lock = Lock()


_MARKDOWN_CACHE: dict[tuple[str, ...], _MarkdownCacheEntry] = {}
_MARKDOWN_CACHE_GUARD = Lock()


def _resolve_markdown_entry(extensions_key: tuple[str, ...]) -> _MarkdownCacheEntry:
    entry = _MARKDOWN_CACHE.get(extensions_key)
    if entry is not None:
        return entry
    with _MARKDOWN_CACHE_GUARD:
        entry = _MARKDOWN_CACHE.get(extensions_key)
        if entry is None:
            try:
                processor = markdown.Markdown(extensions=list(extensions_key))
            except Exception as exc:  # pragma: no cover - library-controlled
                raise MarkdownConversionError(
                    f"Failed to initialize Markdown processor: {exc}"
                ) from exc
            entry = _MarkdownCacheEntry(processor)
            _MARKDOWN_CACHE[extensions_key] = entry
    return entry


def render_markdown(source: str, extensions: Sequence[str] | None = None) -> str:
    """Convert Markdown source into an HTML fragment with Python-Markdown."""
    entry = _resolve_markdown_entry(tuple(extensions or ()))
    try:
        with entry.lock:
            entry.processor.reset()
            return entry.processor.convert(source)
    except Exception as exc:  # pragma: no cover - library-controlled
        raise MarkdownConversionError(f"Failed to convert Markdown source: {exc}") from exc


def render_note_html(source: str, extensions: Sequence[str] | None = None) -> str:
    """Render a footnote body as single-line inline HTML.

    Top-level paragraphs are unwrapped and chained with ``<br/>`` so the result can
    sit inside a ``<span>``.
    """
    html = render_markdown(source, extensions)
    soup = BeautifulSoup(html, "html.parser")
    parts: list[str] = []
    for element in soup.contents:
        if isinstance(element, Tag) and element.name == "p":
            parts.append(element.decode_contents())
        elif isinstance(element, NavigableString):
            text = str(element)
            if text.strip():
                parts.append(text.strip())
        else:
            parts.append(str(element))
    rendered = "<br/>".join(part.strip() for part in parts if part.strip())
    rendered = rendered.replace("<br/>\n", "<br/>")
    return " ".join(rendered.split("\n"))
