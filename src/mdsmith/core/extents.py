"""Exact source extents for link, footnote, sidenote and definition constructs.

The parser only provides approximate anchors (see :mod:`mdsmith.core.document`).
The scanners below take those anchors, or the raw text for constructs CommonMark
does not know about, and compute the exact ``[start, end)`` span a construct
occupies. Anything that cannot be resolved unambiguously yields ``None`` and is
left alone by the transforms.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import re

from markdown_it.tree import SyntaxTreeNode

from mdsmith.core.document import InlineFrame, SourceDocument
from mdsmith.core.ranges import ByteRange


__all__ = [
    "BracketGroup",
    "FootnoteDefinitionExtent",
    "FootnoteMarker",
    "LinkExtent",
    "LinkForm",
    "ReferenceDefinitionExtent",
    "SidenoteExtent",
    "find_closing_bracket",
    "find_closing_paren",
    "resolve_extent",
    "scan_bracket_groups",
    "scan_footnote_definitions",
    "scan_footnote_markers",
    "scan_link_tail",
    "scan_reference_definitions",
    "scan_sidenotes",
]


class LinkForm(Enum):
    """Syntactic form of a link or image."""

    INLINE = "inline"
    FULL = "full"
    COLLAPSED = "collapsed"
    SHORTCUT = "shortcut"

    @property
    def is_reference(self) -> bool:
        return self is not LinkForm.INLINE


@dataclass(frozen=True, slots=True)
class LinkExtent:
    """Exact span of a link or image along with the span of its label text."""

    start: int
    end: int
    label_start: int
    label_end: int
    form: LinkForm
    image: bool = False

    @property
    def range(self) -> ByteRange:
        return ByteRange(self.start, self.end)


@dataclass(frozen=True, slots=True)
class FootnoteMarker:
    start: int
    end: int
    label: str


@dataclass(frozen=True, slots=True)
class FootnoteDefinitionExtent:
    """A ``[^label]: body`` block, continuation lines included."""

    start: int
    end: int
    label: str
    body: str


@dataclass(frozen=True, slots=True)
class SidenoteExtent:
    start: int
    end: int
    number: int
    content: str


@dataclass(frozen=True, slots=True)
class ReferenceDefinitionExtent:
    start: int
    end: int
    label: str


@dataclass(frozen=True, slots=True)
class BracketGroup:
    """Balanced ``[label]`` text, whether or not the parser made a link of it."""

    start: int
    end: int
    label: str


_FOOTNOTE_MARKER = re.compile(r"\[\^(?P<label>[^\]\n]+)\]")
_FOOTNOTE_DEFINITION = re.compile(r"^\[\^(?P<label>[^\]\n]+)\]:", re.MULTILINE)
_REFERENCE_DEFINITION = re.compile(r" {0,3}\[(?P<label>(?!\^)[^\]\n]+)\]:")
_SIDENOTE = re.compile(
    r'\n<label for="sidenote-(?P<number>\d+)" class="margin-toggle sidenote-number"></label>\n'
    r'<input type="checkbox" id="sidenote-(?P=number)" class="margin-toggle"/>\n'
    r'<span class="sidenote">'
    r"(?P<content>(?:[^<]|<(?!/?span\b)[^>]*>|<span\b[^>]*>[^<]*</span>)*)"
    r"</span>"
)


def _is_escaped(text: str, position: int) -> bool:
    backslashes = 0
    while position - backslashes > 0 and text[position - backslashes - 1] == "\\":
        backslashes += 1
    return backslashes % 2 == 1


def _skip_code_span(text: str, position: int) -> int:
    """Return the index just past the code span opening at ``position``.

    When the backtick run has no matching closer it is literal text and only the
    run itself is skipped.
    """
    run_end = position
    while run_end < len(text) and text[run_end] == "`":
        run_end += 1
    fence = text[position:run_end]
    search = run_end
    while True:
        closing = text.find(fence, search)
        if closing < 0:
            return run_end
        after = closing + len(fence)
        if after < len(text) and text[after] == "`":
            search = after
            while search < len(text) and text[search] == "`":
                search += 1
            continue
        return after


def find_closing_bracket(text: str, position: int, *, multiline: bool = True) -> int | None:
    """Return the index of the ``]`` matching the ``[`` at ``position``.

    Escapes and code spans are honoured. The scan gives up at a blank line, or at
    any newline when ``multiline`` is false.
    """
    if position >= len(text) or text[position] != "[":
        return None
    depth = 0
    index = position
    while index < len(text):
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if char == "`":
            index = _skip_code_span(text, index)
            continue
        if char == "\n":
            if not multiline or text.startswith("\n", index + 1):
                return None
        elif char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth == 0:
                return index
        index += 1
    return None


def find_closing_paren(text: str, position: int) -> int | None:
    """Return the index of the ``)`` closing the ``(`` at ``position`` on the same line."""
    if position >= len(text) or text[position] != "(":
        return None
    depth = 0
    index = position
    while index < len(text):
        char = text[index]
        if char == "\n":
            return None
        if char == "\\":
            index += 2
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index
        index += 1
    return None


def scan_link_tail(text: str, position: int) -> tuple[int, LinkForm] | None:
    """Classify what follows a link label closing just before ``position``."""
    if position < len(text) and text[position] == "(":
        closing = find_closing_paren(text, position)
        if closing is None:
            return None
        return closing + 1, LinkForm.INLINE
    if position < len(text) and text[position] == "[":
        closing = find_closing_bracket(text, position, multiline=False)
        if closing is not None:
            form = LinkForm.COLLAPSED if closing == position + 1 else LinkForm.FULL
            return closing + 1, form
    return position, LinkForm.SHORTCUT


def resolve_extent(
    node: SyntaxTreeNode, frame: InlineFrame | None, document: SourceDocument
) -> LinkExtent | None:
    """Compute the exact span of a ``link`` or ``image`` node.

    The parser anchor must start on the opening ``[`` (``![`` for images), and the
    span found by scanning the source must end exactly where the parser stopped.
    Any disagreement means the construct is not understood and ``None`` is returned.
    """
    anchor = document.anchor(node, frame)
    if anchor is None:
        return None
    text = document.text
    image = node.type == "image"
    bracket = anchor.start + 1 if image else anchor.start
    if image and not text.startswith("!", anchor.start):
        return None
    if not text.startswith("[", bracket):
        return None

    label_end = find_closing_bracket(text, bracket)
    if label_end is None:
        return None
    tail = scan_link_tail(text, label_end + 1)
    if tail is None:
        return None
    end, form = tail
    if end != anchor.end:
        return None
    return LinkExtent(anchor.start, end, bracket + 1, label_end, form, image)


def scan_footnote_markers(document: SourceDocument) -> list[FootnoteMarker]:
    """Return ``[^label]`` references in document order.

    Definitions (a marker directly followed by ``:``), escaped brackets and markers
    inside code are skipped.
    """
    text = document.text
    markers: list[FootnoteMarker] = []
    for match in _FOOTNOTE_MARKER.finditer(text, document.body_start):
        start, end = match.span()
        if text.startswith(":", end):
            continue
        if _is_escaped(text, start):
            continue
        if document.in_code(start):
            continue
        markers.append(FootnoteMarker(start, end, match.group("label")))
    return markers


def _dedent_continuation(line: str) -> str:
    if line.startswith("\t"):
        return line[1:]
    stripped = line.lstrip(" ")
    return line[min(4, len(line) - len(stripped)) :]


def scan_footnote_definitions(document: SourceDocument) -> list[FootnoteDefinitionExtent]:
    """Return footnote definitions with their full extent and body markup.

    A definition runs over every following blank or indented line and stops at the
    first other line, including the start of the next definition.
    """
    text = document.text
    definitions: list[FootnoteDefinitionExtent] = []
    for match in _FOOTNOTE_DEFINITION.finditer(text, document.body_start):
        start = match.start()
        if document.in_code(start):
            continue
        row = document.line_of(start)
        body_lines = [text[match.end() : document.line_end(row)].strip()]
        row += 1
        while row < document.line_count and document.line_start(row) < len(text):
            line = text[document.line_start(row) : document.line_end(row)]
            if line.strip():
                if not line.startswith((" ", "\t")):
                    break
                body_lines.append(_dedent_continuation(line).rstrip())
            else:
                body_lines.append("")
            row += 1
        end = document.line_start(row)
        body = "\n".join(body_lines).strip()
        definitions.append(FootnoteDefinitionExtent(start, end, match.group("label"), body))
    return definitions


def scan_sidenotes(document: SourceDocument) -> list[SidenoteExtent]:
    """Return sidenote HTML blocks in document order."""
    sidenotes: list[SidenoteExtent] = []
    for match in _SIDENOTE.finditer(document.text, document.body_start):
        if document.in_code(match.start() + 1):
            continue
        sidenotes.append(
            SidenoteExtent(
                start=match.start(),
                end=match.end(),
                number=int(match.group("number")),
                content=match.group("content").strip(),
            )
        )
    return sidenotes


def scan_reference_definitions(document: SourceDocument) -> list[ReferenceDefinitionExtent]:
    """Return ``[label]: destination`` definitions known to the parser.

    Each extent covers every line the parser consumed for the definition, so a
    destination or title continued on the following lines is included. A definition
    that does not open its line, such as one inside a block quote, is not reported.
    """
    text = document.text
    definitions: list[ReferenceDefinitionExtent] = []
    for first_row, end_row in document.reference_rows:
        start = document.line_start(document.source_row(first_row))
        match = _REFERENCE_DEFINITION.match(text, start)
        if match is None or not document.has_reference(match.group("label")):
            continue
        end = document.line_start(document.source_row(end_row))
        definitions.append(ReferenceDefinitionExtent(start, end, match.group("label")))
    return definitions


def scan_bracket_groups(document: SourceDocument) -> list[BracketGroup]:
    """Return every unescaped, balanced bracket group outside code and raw HTML.

    Groups nest: ``[a [b]]`` yields the outer group and then the inner one.
    """
    text = document.text
    groups: list[BracketGroup] = []
    position = text.find("[", document.body_start)
    while position >= 0:
        if not _is_escaped(text, position) and not document.in_verbatim(position):
            closing = find_closing_bracket(text, position)
            if closing is not None:
                groups.append(BracketGroup(position, closing + 1, text[position + 1 : closing]))
        position = text.find("[", position + 1)
    return groups
