"""Rewrite links as numbered reference links with a trailing definition block.

Every link, inline or reference style, becomes ``[text][N]`` where ``N`` numbers
distinct ``(url, title)`` targets in order of first appearance. Existing
definition lines are dropped and a canonical block is appended::

    See [the docs](https://example.test "Docs").

    ->

    See [the docs][1].

    [1]: https://example.test "Docs"

Images stay inline; reference-style images are rewritten to the inline form
because images have no numbered counterpart.
"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterable, Sequence
import logging

from mdsmith.adapters.markdown import normalize_label
from mdsmith.core.assembler import Replacement, assemble
from mdsmith.core.config import MdsmithConfig
from mdsmith.core.diagnostics import DiagnosticEmitter, LoggingEmitter
from mdsmith.core.document import SourceDocument
from mdsmith.core.extents import scan_bracket_groups
from mdsmith.core.identity import IdentityTable
from mdsmith.core.occurrences import (
    LinkTarget,
    Occurrence,
    OccurrenceKind,
    collect_links,
    collect_reference_definitions,
)
from mdsmith.core.ranges import ByteRange, normalise_ranges, position_in_ranges

from ._links import format_inline_link, format_reference_definition


__all__ = ["transform"]


logger = logging.getLogger(__name__)


def _render(link: Occurrence, table: IdentityTable[LinkTarget], text: str) -> str | None:
    match link:
        case Occurrence(image=True, kind=OccurrenceKind.REF_LINK):
            return format_inline_link(text, link.key, image=True)
        case Occurrence(image=True):
            return None
        case Occurrence(kind=OccurrenceKind.INLINE_LINK | OccurrenceKind.REF_LINK):
            return f"[{text}][{table.number(link.key)}]"
    return None


def _escape_brackets(text: str, offsets: Iterable[int]) -> str:
    """Return ``text`` with a backslash inserted before each ``[`` at ``offsets``."""
    pieces: list[str] = []
    cursor = 0
    for offset in sorted(offsets):
        pieces.append(text[cursor:offset])
        pieces.append("\\")
        cursor = offset
    pieces.append(text[cursor:])
    return "".join(pieces)


def _literal_labels(
    document: SourceDocument,
    links: Sequence[Occurrence],
    definitions: Sequence[ByteRange],
    numbers: set[str],
) -> tuple[list[int], dict[int, list[int]]]:
    """Find literal bracket groups that the new definitions would turn into links.

    Returns the positions of such groups in running text, and for each link (by
    index) the offsets of such groups inside its label.
    """
    occupied = normalise_ranges([*(link.range for link in links), *definitions])
    parsed: set[int] = set()
    for node, frame in document.walk():
        if node.type in {"link", "image"}:
            anchor = document.anchor(node, frame)
            if anchor is not None:
                parsed.add(anchor.start + (1 if node.type == "image" else 0))
    label_starts = [link.start + (2 if link.image else 1) for link in links]
    in_text: list[int] = []
    in_labels: dict[int, list[int]] = {}
    for group in scan_bracket_groups(document):
        if group.start in parsed or normalize_label(group.label) not in numbers:
            continue
        index = bisect_right(label_starts, group.start) - 1
        if index >= 0:
            link = links[index]
            label_start = label_starts[index]
            if not link.image and group.end <= label_start + len(link.text):
                in_labels.setdefault(index, []).append(group.start - label_start)
                continue
        if not position_in_ranges(occupied, group.start):
            in_text.append(group.start)
    return in_text, in_labels


def transform(
    content: str,
    config: MdsmithConfig | None = None,
    emitter: DiagnosticEmitter | None = None,
) -> str:
    """Convert links in ``content`` to numbered reference links.

    Bracketed text such as ``[2]`` that is not a link would become one once the
    ``[2]:`` definition is appended, so its opening bracket is escaped.
    """
    _ = config
    emitter = emitter or LoggingEmitter()
    document = SourceDocument(content)

    links = collect_links(document, emitter)
    table: IdentityTable[LinkTarget] = IdentityTable.build(
        link.key for link in links if not link.image
    )
    exclusions = [definition.range for definition in collect_reference_definitions(document)]
    numbers = {str(number) for _, number in table.items()}
    in_text, in_labels = _literal_labels(document, links, exclusions, numbers)

    replacements: list[Replacement] = []
    for index, link in enumerate(links):
        text = _escape_brackets(link.text, in_labels.get(index, ()))
        token = _render(link, table, text)
        if token is not None:
            replacements.append(Replacement(link.start, link.end, token))
    rewritten = len(replacements)
    escaped = len(in_text) + sum(len(offsets) for offsets in in_labels.values())
    replacements.extend(Replacement(position, position + 1, "\\[") for position in in_text)
    replacements.sort(key=lambda replacement: replacement.start)

    definitions = [format_reference_definition(number, target) for target, number in table.items()]

    logger.debug(
        "ref: %d link(s), %d distinct target(s), %d bracket(s) escaped",
        rewritten,
        len(table),
        escaped,
    )
    emitter.event(
        "transform_applied",
        {"tool": "ref", "occurrences": rewritten, "identities": len(table)},
    )
    return assemble(content, replacements, exclusions=exclusions, definitions=definitions)
