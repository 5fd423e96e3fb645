"""Physical line classification shared by the line-oriented transforms.

The predicates here look at one line at a time and never parse inline syntax.
``iter_blocks`` groups a document into typed runs of lines so the wrap, join and
split transforms only decide what to do with paragraphs and blockquotes.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
import re


__all__ = [
    "BlockKind",
    "LineBlock",
    "QuoteSegment",
    "closes_fence",
    "collapse_whitespace",
    "fence_opening",
    "front_matter_end",
    "front_matter_offset",
    "is_blank",
    "is_blockquote",
    "is_footnote_definition",
    "is_heading",
    "is_horizontal_rule",
    "is_indented_code",
    "is_list_item",
    "is_reference_definition",
    "iter_blocks",
    "looks_like_front_matter_property",
    "quote_segments",
]


_FOOTNOTE_DEFINITION = re.compile(r"^\[\^[^\]]+\]:")
_REFERENCE_DEFINITION = re.compile(r"^\[[^\]]+\]:\s*\S")
_ORDERED_ITEM = re.compile(r"^\d+\.\s")
_FENCE_OPENING = re.compile(r"^\s*(?P<fence>`{3,}|~{3,})")
_FRONT_MATTER_DELIMITER = "---"


class BlockKind(Enum):
    """Kinds of line runs produced by :func:`iter_blocks`."""

    FRONT_MATTER = "front-matter"
    FENCED_CODE = "fenced-code"
    VERBATIM = "verbatim"
    LIST = "list"
    BLOCKQUOTE = "blockquote"
    PARAGRAPH = "paragraph"


@dataclass(frozen=True, slots=True)
class LineBlock:
    kind: BlockKind
    lines: tuple[str, ...]

    @property
    def hard_break(self) -> bool:
        """Whether the last line ends with a two-space hard break."""
        return bool(self.lines) and self.lines[-1].endswith("  ")


def is_blank(line: str) -> bool:
    return not line.strip()


def is_footnote_definition(line: str) -> bool:
    return _FOOTNOTE_DEFINITION.match(line) is not None


def is_reference_definition(line: str) -> bool:
    """Return whether ``line`` declares a link reference such as ``[id]: url``."""
    if is_footnote_definition(line):
        return False
    return _REFERENCE_DEFINITION.match(line) is not None


def is_heading(line: str) -> bool:
    return line.startswith("#")


def is_indented_code(line: str) -> bool:
    return line.startswith(("    ", "\t"))


def is_blockquote(line: str) -> bool:
    return line.strip().startswith(">")


def is_list_item(line: str) -> bool:
    """Return whether ``line`` opens a bullet (``-``, ``*``, ``+``) or ordered item."""
    stripped = line.strip()
    if len(stripped) > 1 and stripped[0] in "-*+" and stripped[1] == " ":
        return True
    return _ORDERED_ITEM.match(stripped) is not None


def is_horizontal_rule(line: str) -> bool:
    """Return whether ``line`` is a thematic break (``---``, ``* * *``, ``___``)."""
    compact = line.strip().replace(" ", "")
    if len(compact) < 3 or compact[0] not in "-*_":
        return False
    return compact == compact[0] * len(compact)


def looks_like_front_matter_property(line: str) -> bool:
    stripped = line.strip()
    if not stripped or stripped == _FRONT_MATTER_DELIMITER:
        return False
    return stripped.find(":") > 0


def fence_opening(line: str) -> str | None:
    """Return the fence marker opening a code block on ``line``, if any."""
    match = _FENCE_OPENING.match(line)
    return match.group("fence") if match else None


def closes_fence(line: str, fence: str) -> bool:
    """Return whether ``line`` closes a block opened with ``fence``.

    The closing fence uses the same character, is at least as wide as the opening
    one, and carries nothing else.
    """
    stripped = line.strip()
    return len(stripped) >= len(fence) and stripped == fence[0] * len(stripped)


def front_matter_end(lines: Sequence[str]) -> int:
    """Return the index of the first line after the front matter (0 when absent).

    Front matter either opens with ``---`` followed by a property line, or opens
    directly with a property line. Both forms must be closed by a ``---`` line, and
    the bare form must reach it before any blank line.
    """
    if not lines:
        return 0
    first = lines[0].strip()
    if first == _FRONT_MATTER_DELIMITER:
        if len(lines) < 2 or not looks_like_front_matter_property(lines[1]):
            return 0
        start = 1
    elif looks_like_front_matter_property(lines[0]):
        start = 0
    else:
        return 0

    for index in range(start + 1, len(lines)):
        stripped = lines[index].strip()
        if stripped == _FRONT_MATTER_DELIMITER:
            return index + 1
        if not stripped and start == 0:
            return 0
    return 0


def front_matter_offset(text: str) -> int:
    """Return the character offset where the document body starts."""
    lines = text.split("\n")
    end = front_matter_end(lines)
    if end == 0:
        return 0
    return min(len(text), sum(len(line) + 1 for line in lines[:end]))


def _breaks_paragraph(line: str) -> bool:
    return (
        is_blank(line)
        or fence_opening(line) is not None
        or is_indented_code(line)
        or is_footnote_definition(line)
        or is_reference_definition(line)
        or is_heading(line)
        or is_list_item(line)
        or is_blockquote(line)
        or is_horizontal_rule(line)
    )


def iter_blocks(lines: Sequence[str], *, stop_on_hard_break: bool = False) -> Iterator[LineBlock]:
    """Group ``lines`` into typed blocks in document order.

    Paragraphs end at a blank line or at any line that opens another construct.
    With ``stop_on_hard_break`` a paragraph also ends after a line carrying a
    two-space hard break.
    """
    index = front_matter_end(lines)
    if index:
        yield LineBlock(BlockKind.FRONT_MATTER, tuple(lines[:index]))

    total = len(lines)
    while index < total:
        line = lines[index]

        fence = fence_opening(line)
        if fence is not None:
            start = index
            index += 1
            while index < total and not closes_fence(lines[index], fence):
                index += 1
            index = min(index + 1, total)
            yield LineBlock(BlockKind.FENCED_CODE, tuple(lines[start:index]))
            continue

        if (
            is_indented_code(line)
            or is_footnote_definition(line)
            or is_reference_definition(line)
            or is_blank(line)
            or is_heading(line)
        ):
            yield LineBlock(BlockKind.VERBATIM, (line,))
            index += 1
            continue

        if is_list_item(line):
            start = index
            index += 1
            while index < total and (
                is_list_item(lines[index])
                or (not is_blank(lines[index]) and lines[index][:1] in (" ", "\t"))
            ):
                index += 1
            yield LineBlock(BlockKind.LIST, tuple(lines[start:index]))
            continue

        if is_blockquote(line):
            start = index
            while index < total and is_blockquote(lines[index]):
                index += 1
            yield LineBlock(BlockKind.BLOCKQUOTE, tuple(lines[start:index]))
            continue

        if is_horizontal_rule(line):
            yield LineBlock(BlockKind.VERBATIM, (line,))
            index += 1
            continue

        start = index
        while index < total and (index == start or not _breaks_paragraph(lines[index])):
            index += 1
            if stop_on_hard_break and lines[index - 1].endswith("  "):
                break
        yield LineBlock(BlockKind.PARAGRAPH, tuple(lines[start:index]))


@dataclass(frozen=True, slots=True)
class QuoteSegment:
    """Part of a blockquote: an alert header, a run of text lines, or a blank line."""

    kind: str
    lines: tuple[str, ...] = ()


def _unquote(line: str) -> str:
    content = line.lstrip()[1:]
    return content[1:] if content.startswith(" ") else content


def quote_segments(lines: Sequence[str]) -> list[QuoteSegment]:
    """Split blockquote ``lines`` into segments with the ``>`` marker removed.

    GFM alert headers such as ``[!NOTE]`` form their own segment, and blank
    quoted lines separate text segments.
    """
    segments: list[QuoteSegment] = []
    pending: list[str] = []

    def flush() -> None:
        if pending:
            segments.append(QuoteSegment("text", tuple(pending)))
            pending.clear()

    for line in lines:
        content = _unquote(line)
        if content.startswith("[!") and "]" in content:
            flush()
            segments.append(QuoteSegment("alert", (content,)))
        elif not content.strip():
            flush()
            segments.append(QuoteSegment("blank"))
        else:
            pending.append(content)
    flush()
    return segments


def collapse_whitespace(lines: Sequence[str]) -> str:
    """Join ``lines`` with single spaces, collapsing every whitespace run."""
    return " ".join(" ".join(lines).split())
