"""Half-open byte ranges and the exclusion compositor built on top of them."""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterable, Sequence
from dataclasses import dataclass


__all__ = [
    "ByteRange",
    "exclude_ranges",
    "normalise_ranges",
    "position_in_ranges",
]


@dataclass(frozen=True, slots=True, order=True)
class ByteRange:
    """Half-open ``[start, end)`` span expressed in absolute source offsets."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            msg = f"Invalid range [{self.start}, {self.end})."
            raise ValueError(msg)

    def __len__(self) -> int:
        return self.end - self.start

    def contains(self, position: int) -> bool:
        return self.start <= position < self.end

    def overlaps(self, other: ByteRange) -> bool:
        return self.start < other.end and other.start < self.end


def normalise_ranges(ranges: Iterable[ByteRange]) -> list[ByteRange]:
    """Return ranges sorted by start with overlapping or touching spans merged."""
    merged: list[ByteRange] = []
    for current in sorted(ranges):
        if not merged or current.start > merged[-1].end:
            merged.append(current)
            continue
        previous = merged[-1]
        if current.end > previous.end:
            merged[-1] = ByteRange(previous.start, current.end)
    return merged


def position_in_ranges(ranges: Sequence[ByteRange], position: int) -> bool:
    """Return whether ``position`` falls inside one of the sorted ``ranges``."""
    index = bisect_right(ranges, position, key=lambda item: item.start) - 1
    return index >= 0 and ranges[index].contains(position)


def exclude_ranges(content: str, content_start: int, ranges: Iterable[ByteRange]) -> str:
    """Drop the parts of ``content`` covered by ``ranges``.

    ``content`` is a window of the source beginning at ``content_start``. Ranges are
    absolute and must already be sorted and disjoint. Ranges outside the window are
    ignored and ranges straddling a window boundary are clamped to it, so everything
    not covered is returned byte for byte.
    """
    content_end = content_start + len(content)
    pieces: list[str] = []
    cursor = 0
    for excluded in ranges:
        if excluded.end <= content_start or excluded.start >= content_end:
            continue
        local_start = max(excluded.start, content_start) - content_start
        local_end = min(excluded.end, content_end) - content_start
        if local_start > cursor:
            pieces.append(content[cursor:local_start])
        cursor = max(cursor, local_end)
    pieces.append(content[cursor:])
    return "".join(pieces)
