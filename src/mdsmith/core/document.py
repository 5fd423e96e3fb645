"""Immutable source documents and their mapping onto the markdown-it tree.

markdown-it reports positions as block line ranges, while inline tokens only know
their offset inside the inline content of their block (with container prefixes
such as ``> `` or list indentation stripped). ``SourceDocument`` bridges the two
by locating every content line of every inline block inside the source, which
gives each inline token an approximate absolute anchor.
"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from markdown_it.tree import SyntaxTreeNode

from mdsmith.adapters.markdown import SPAN_META_KEY, normalize_label, parse_markdown
from mdsmith.core.lines import front_matter_offset
from mdsmith.core.ranges import ByteRange, normalise_ranges, position_in_ranges


__all__ = ["InlineFrame", "SourceDocument"]


@dataclass(frozen=True, slots=True)
class InlineFrame:
    """Maps offsets inside an inline token's content back onto the source."""

    content_starts: tuple[int, ...]
    source_starts: tuple[int, ...]

    def to_source(self, offset: int) -> int:
        index = max(0, bisect_right(self.content_starts, offset) - 1)
        return self.source_starts[index] + offset - self.content_starts[index]


def _locate_suffix(raw: str, fragment: str) -> int | None:
    if raw.endswith(fragment):
        return len(raw) - len(fragment)
    trimmed = raw.rstrip()
    if trimmed.endswith(fragment):
        return len(trimmed) - len(fragment)
    return None


def _locate(raw: str, fragment: str, floor: int, *, suffix_first: bool) -> int | None:
    """Return the column of ``fragment`` within the physical line ``raw``."""
    if suffix_first:
        column = _locate_suffix(raw, fragment)
        if column is not None and column >= floor:
            return column
    column = raw.find(fragment, floor)
    return column if column >= 0 else None


class SourceDocument:
    """A parsed, never mutated markdown document.

    Attributes:
        text: The full source, front matter included.
        body_start: Offset of the first character after the front matter.
        code_ranges: Sorted, merged ranges covered by code blocks and code spans.
        verbatim_ranges: Code ranges plus raw HTML and autolinks, where markdown
            syntax is not interpreted.
        references: Link reference definitions keyed by normalised label.
        reference_rows: Parser line ranges of every reference definition.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self.body_start = front_matter_offset(text)
        self._line_starts = self._compute_line_starts(text)
        self._first_body_line = text.count("\n", 0, self.body_start)

        parsed = parse_markdown(text[self.body_start :])
        self.references: dict[str, dict[str, str]] = parsed.references
        self.reference_rows: list[tuple[int, int]] = parsed.reference_rows
        self.tree = SyntaxTreeNode(parsed.tokens)
        self._frames: dict[int, InlineFrame | None] = {}
        self._index_inline_frames()
        self.code_ranges: list[ByteRange] = self._collect_code_ranges()
        self.verbatim_ranges: list[ByteRange] = self._collect_verbatim_ranges()

    @staticmethod
    def _compute_line_starts(text: str) -> list[int]:
        starts = [0]
        position = text.find("\n")
        while position >= 0:
            starts.append(position + 1)
            position = text.find("\n", position + 1)
        return starts

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def line_start(self, row: int) -> int:
        """Return the offset of ``row`` (0-based), or the text length past the end."""
        if row >= len(self._line_starts):
            return len(self.text)
        return self._line_starts[row]

    def line_end(self, row: int) -> int:
        """Return the offset of the newline ending ``row`` (or the text length)."""
        if row + 1 >= len(self._line_starts):
            return len(self.text)
        return self._line_starts[row + 1] - 1

    def line_of(self, position: int) -> int:
        """Return the 0-based row containing ``position``."""
        return max(0, bisect_right(self._line_starts, position) - 1)

    def source_row(self, parser_row: int) -> int:
        return self._first_body_line + parser_row

    def in_code(self, position: int) -> bool:
        return position_in_ranges(self.code_ranges, position)

    def in_verbatim(self, position: int) -> bool:
        return position_in_ranges(self.verbatim_ranges, position)

    def has_reference(self, label: str) -> bool:
        return normalize_label(label) in self.references

    def reference(self, label: str) -> dict[str, str] | None:
        return self.references.get(normalize_label(label))

    def walk(self) -> Iterator[tuple[SyntaxTreeNode, InlineFrame | None]]:
        """Yield nodes in document order together with their inline frame.

        Block nodes get ``None``. The children of images are skipped: markdown-it
        parses alt text in a separate inline state, so their offsets do not refer
        to the enclosing content.
        """
        yield from self._walk(self.tree, None)

    def _walk(
        self, node: SyntaxTreeNode, frame: InlineFrame | None
    ) -> Iterator[tuple[SyntaxTreeNode, InlineFrame | None]]:
        for child in node.children:
            if child.type == "inline":
                child_frame = self._frames.get(id(child))
                yield child, child_frame
                yield from self._walk(child, child_frame)
                continue
            yield child, frame
            if child.type != "image":
                yield from self._walk(child, frame)

    def anchor(self, node: SyntaxTreeNode, frame: InlineFrame | None) -> ByteRange | None:
        """Return the approximate source span recorded for an inline ``node``."""
        span: Any = node.meta.get(SPAN_META_KEY) if node.meta else None
        if frame is None or not span:
            return None
        start, end = span
        return ByteRange(frame.to_source(start), frame.to_source(end))

    def _index_inline_frames(self) -> None:
        floors: dict[int, int] = {}
        for node in self.tree.walk():
            if node.type != "inline":
                continue
            self._frames[id(node)] = self._build_frame(node, floors)

    def _build_frame(self, node: SyntaxTreeNode, floors: dict[int, int]) -> InlineFrame | None:
        if node.map is None:
            return None
        first_row, last_row = node.map
        parent = node.parent
        suffix_first = parent is not None and parent.type == "paragraph"

        content_starts: list[int] = []
        source_starts: list[int] = []
        consumed = 0
        for index, fragment in enumerate(node.content.split("\n")):
            row = self.source_row(first_row + index)
            if first_row + index >= max(last_row, first_row + 1):
                return None
            line_start = self.line_start(row)
            raw = self.text[line_start : self.line_end(row)]
            column = _locate(raw, fragment, floors.get(row, 0), suffix_first=suffix_first)
            if column is None:
                return None
            floors[row] = column + len(fragment)
            content_starts.append(consumed)
            source_starts.append(line_start + column)
            consumed += len(fragment) + 1
        return InlineFrame(tuple(content_starts), tuple(source_starts))

    def _collect_code_ranges(self) -> list[ByteRange]:
        ranges: list[ByteRange] = []
        for node, frame in self.walk():
            if node.type in {"fence", "code_block"} and node.map is not None:
                first_row, last_row = node.map
                start = self.line_start(self.source_row(first_row))
                end = self.line_start(self.source_row(last_row))
                if end > start:
                    ranges.append(ByteRange(start, end))
            elif node.type == "code_inline":
                anchor = self.anchor(node, frame)
                if anchor is not None:
                    ranges.append(anchor)
        return normalise_ranges(ranges)

    def _collect_verbatim_ranges(self) -> list[ByteRange]:
        ranges: list[ByteRange] = list(self.code_ranges)
        for node, frame in self.walk():
            if node.type == "html_block" and node.map is not None:
                first_row, last_row = node.map
                start = self.line_start(self.source_row(first_row))
                end = self.line_start(self.source_row(last_row))
                if end > start:
                    ranges.append(ByteRange(start, end))
            elif node.type == "html_inline" or (
                node.type == "link" and node.markup == "autolink"
            ):
                anchor = self.anchor(node, frame)
                if anchor is not None:
                    ranges.append(anchor)
        return normalise_ranges(ranges)
