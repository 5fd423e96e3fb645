"""Reflow paragraphs to a fixed column width.

Only paragraph text moves; every other block is copied verbatim. Link and image
constructs, together with any text glued to them, form unbreakable tokens that
may overflow the width rather than being split across lines.
"""

from __future__ import annotations

from collections.abc import Sequence
import re

from mdsmith.core.config import MdsmithConfig
from mdsmith.core.diagnostics import DiagnosticEmitter
from mdsmith.core.extents import find_closing_bracket, find_closing_paren
from mdsmith.core.lines import BlockKind, iter_blocks


__all__ = ["contains_link", "tokenize", "transform", "wrap_paragraph"]


_LINK_CONSTRUCT = re.compile(r"\[[^\]]+\](\([^)]+\)|\[[^\]]*\])")
# A fresh line starting with one of these would open another block.
_UNSAFE_LINE_START = re.compile(
    r"^(?:[-+*]|#.*|>.*|\d+[.)]|=+|-{2,}|\*{3,}|_{3,}|`{3,}.*|~{3,}.*|\[[^\]]*\]:.*)$"
)


def contains_link(token: str) -> bool:
    return "[" in token and _LINK_CONSTRUCT.search(token) is not None


def _link_construct_end(text: str, position: int) -> int:
    """Return the end of the link construct opening at ``position`` (or ``position``)."""
    label_end = find_closing_bracket(text, position, multiline=False)
    if label_end is None:
        return position
    end = label_end + 1
    if end < len(text) and text[end] == "(":
        closing = find_closing_paren(text, end)
        if closing is not None:
            return closing + 1
    elif end < len(text) and text[end] == "[":
        closing = find_closing_bracket(text, end, multiline=False)
        if closing is not None:
            return closing + 1
    return end


def tokenize(text: str) -> list[str]:
    """Split ``text`` on blanks, keeping bracketed link constructs whole."""
    tokens: list[str] = []
    current: list[str] = []
    index = 0
    while index < len(text):
        char = text[index]
        if char in " \t":
            if current:
                tokens.append("".join(current))
                current = []
            index += 1
            continue
        if char == "[":
            end = _link_construct_end(text, index)
            if end > index:
                current.append(text[index:end])
                index = end
                continue
        current.append(char)
        index += 1
    if current:
        tokens.append("".join(current))
    return tokens


def wrap_paragraph(lines: Sequence[str], width: int) -> list[str]:
    """Greedily fill lines up to ``width`` columns.

    A token overflows the current line instead of starting a new one when it
    contains a link or when it would make the new line parse as another block.
    A trailing hard break is kept on the last line.
    """
    hard_break = bool(lines) and lines[-1].endswith("  ")
    tokens = tokenize(" ".join(lines))
    if not tokens:
        return []

    wrapped: list[str] = []
    current = tokens[0]
    for token in tokens[1:]:
        if (
            len(current) + 1 + len(token) <= width
            or contains_link(token)
            or _UNSAFE_LINE_START.match(token)
        ):
            current = f"{current} {token}"
        else:
            wrapped.append(current)
            current = token
    wrapped.append(current)

    if hard_break:
        wrapped[-1] += "  "
    return wrapped


def transform(
    content: str,
    config: MdsmithConfig | None = None,
    emitter: DiagnosticEmitter | None = None,
) -> str:
    """Wrap every paragraph of ``content`` to the configured width."""
    _ = emitter
    width = (config or MdsmithConfig()).wrap_width
    result: list[str] = []
    for block in iter_blocks(content.split("\n"), stop_on_hard_break=True):
        if block.kind is BlockKind.PARAGRAPH:
            result.extend(wrap_paragraph(block.lines, width))
        else:
            result.extend(block.lines)
    return "\n".join(result).rstrip("\n") + "\n"
