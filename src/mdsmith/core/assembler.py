"""Output assembly: verbatim gaps, replacement tokens and a definition block."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from mdsmith.core.ranges import ByteRange, exclude_ranges, normalise_ranges


__all__ = ["Replacement", "assemble", "ensure_trailing_newline", "line_ending"]


@dataclass(frozen=True, slots=True)
class Replacement:
    """Text emitted in place of the source span ``[start, end)``."""

    start: int
    end: int
    token: str


def line_ending(text: str) -> str:
    """Return the line ending used by the first line of ``text``, LF by default."""
    newline = text.find("\n")
    return "\r\n" if newline > 0 and text[newline - 1] == "\r" else "\n"


def ensure_trailing_newline(text: str) -> str:
    return text if text.endswith("\n") else text + line_ending(text)


def assemble(
    source: str,
    replacements: Sequence[Replacement],
    *,
    exclusions: Iterable[ByteRange] = (),
    definitions: Sequence[str] = (),
) -> str:
    """Rebuild ``source`` with ``replacements`` applied and ``exclusions`` removed.

    Replacements must be sorted and disjoint. Each gap between two of them is
    copied with the excluded ranges cut out, then the replacement token is written
    and the cursor moves past the replaced span. The tail is trimmed to a single
    line ending and followed by the ``definitions`` lines, separated from the body
    by a blank line. Both use the line ending of the source.

    Without replacements the source is returned untouched apart from a missing
    final newline.
    """
    if not replacements:
        return ensure_trailing_newline(source)

    newline = line_ending(source)
    excluded = normalise_ranges(exclusions)
    pieces: list[str] = []
    cursor = 0
    for replacement in replacements:
        if replacement.start < cursor:
            msg = f"Replacement at {replacement.start} overlaps the previous one."
            raise ValueError(msg)
        pieces.append(exclude_ranges(source[cursor : replacement.start], cursor, excluded))
        pieces.append(replacement.token)
        cursor = replacement.end

    tail = exclude_ranges(source[cursor:], cursor, excluded)
    pieces.append(tail.rstrip("\r\n") + newline)
    if definitions:
        pieces.append(newline)
        pieces.extend(f"{line}{newline}" for line in definitions)
    return "".join(pieces)
