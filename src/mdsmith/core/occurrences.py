"""Occurrence and definition records collected from a source document."""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple

from markdown_it.tree import SyntaxTreeNode

from mdsmith.core.diagnostics import DiagnosticEmitter, NullEmitter
from mdsmith.core.document import SourceDocument
from mdsmith.core.extents import (
    resolve_extent,
    scan_footnote_definitions,
    scan_footnote_markers,
    scan_reference_definitions,
    scan_sidenotes,
)
from mdsmith.core.ranges import ByteRange, normalise_ranges, position_in_ranges


__all__ = [
    "Definition",
    "LinkTarget",
    "NoteBody",
    "Occurrence",
    "OccurrenceKind",
    "collect_footnote_definitions",
    "collect_footnotes",
    "collect_links",
    "collect_reference_definitions",
    "collect_sidenotes",
    "drop_nested",
]


class OccurrenceKind(Enum):
    """Closed set of constructs the collector knows how to report."""

    INLINE_LINK = "inline-link"
    REF_LINK = "ref-link"
    FOOTNOTE_REF = "footnote-ref"
    FOOTNOTE_DEF = "footnote-def"
    SIDENOTE_BLOCK = "sidenote-block"


class LinkTarget(NamedTuple):
    """Identity of a link: destination and title, both compared verbatim."""

    url: str
    title: str = ""


class NoteBody(NamedTuple):
    markup: str


@dataclass(frozen=True, slots=True)
class Occurrence:
    """One place in the body where a construct is used.

    ``key`` is the identity used for numbering: a :class:`LinkTarget` for links,
    the footnote label for footnote references and the source id for sidenotes.
    ``text`` is the raw label of a link or the payload markup of a note.
    """

    start: int
    end: int
    kind: OccurrenceKind
    key: Hashable
    text: str
    image: bool = False

    @property
    def range(self) -> ByteRange:
        return ByteRange(self.start, self.end)


@dataclass(frozen=True, slots=True)
class Definition:
    """Declaration of an identity located at ``[start, end)`` in the source."""

    label: str
    payload: LinkTarget | NoteBody | None
    start: int
    end: int

    @property
    def range(self) -> ByteRange:
        return ByteRange(self.start, self.end)


def drop_nested(occurrences: Iterable[Occurrence]) -> list[Occurrence]:
    """Sort by start and drop occurrences starting inside a previous one."""
    kept: list[Occurrence] = []
    for occurrence in sorted(occurrences, key=lambda item: (item.start, -item.end)):
        if kept and occurrence.start < kept[-1].end:
            continue
        kept.append(occurrence)
    return kept


def _link_occurrences(
    document: SourceDocument, emitter: DiagnosticEmitter
) -> Iterator[Occurrence]:
    text = document.text
    for node, frame in document.walk():
        match node.type:
            case "link" | "image":
                extent = resolve_extent(node, frame, document)
                if extent is None:
                    emitter.event(
                        "unresolved_extent",
                        {"kind": node.type, "line": _source_line(document, node)},
                    )
                    continue
                label = text[extent.label_start : extent.label_end]
                if not extent.image and label.startswith("^"):
                    continue
                attribute = "src" if extent.image else "href"
                target = LinkTarget(
                    url=str(node.attrs.get(attribute, "")),
                    title=str(node.attrs.get("title", "")),
                )
                if extent.form.is_reference:
                    kind = OccurrenceKind.REF_LINK
                else:
                    kind = OccurrenceKind.INLINE_LINK
                yield Occurrence(extent.start, extent.end, kind, target, label, extent.image)
            case _:
                continue


def _source_line(document: SourceDocument, node: SyntaxTreeNode) -> int | None:
    current: SyntaxTreeNode | None = node
    while current is not None and not current.is_root and current.map is None:
        current = current.parent
    if current is None or current.is_root or current.map is None:
        return None
    return document.source_row(current.map[0]) + 1


def collect_links(
    document: SourceDocument, emitter: DiagnosticEmitter | None = None
) -> list[Occurrence]:
    """Return every resolvable link and image in document order.

    Footnote-looking labels (``[^x]``) are not links and are skipped. A construct
    nested in another one, such as an image used as link text, is dropped so the
    result never overlaps.
    """
    return drop_nested(_link_occurrences(document, emitter or NullEmitter()))


def collect_reference_definitions(document: SourceDocument) -> list[Definition]:
    """Return link reference definition lines with the target the parser recorded."""
    definitions: list[Definition] = []
    for extent in scan_reference_definitions(document):
        reference = document.reference(extent.label) or {}
        payload = LinkTarget(
            url=reference.get("href", ""), title=reference.get("title", "") or ""
        )
        definitions.append(Definition(extent.label, payload, extent.start, extent.end))
    return definitions


def collect_footnote_definitions(document: SourceDocument) -> dict[str, Definition]:
    """Return footnote definitions keyed by label; the first definition of a label wins."""
    definitions: dict[str, Definition] = {}
    for extent in scan_footnote_definitions(document):
        definitions.setdefault(
            extent.label,
            Definition(extent.label, NoteBody(extent.body), extent.start, extent.end),
        )
    return definitions


def collect_footnotes(
    document: SourceDocument, emitter: DiagnosticEmitter | None = None
) -> list[Occurrence]:
    """Return footnote definitions and references in document order.

    Definitions are reported as ``FOOTNOTE_DEF`` occurrences carrying their body
    markup. A reference is only reported when its label is defined and it does
    not sit inside a definition body; undefined references are left out.
    """
    emitter = emitter or NullEmitter()
    definitions = collect_footnote_definitions(document)
    occurrences = [
        Occurrence(
            definition.start,
            definition.end,
            OccurrenceKind.FOOTNOTE_DEF,
            label,
            definition.payload.markup if isinstance(definition.payload, NoteBody) else "",
        )
        for label, definition in definitions.items()
    ]
    definition_ranges = normalise_ranges(definition.range for definition in definitions.values())
    for marker in scan_footnote_markers(document):
        if position_in_ranges(definition_ranges, marker.start):
            continue
        if marker.label not in definitions:
            emitter.event(
                "missing_definition",
                {"label": marker.label, "line": document.line_of(marker.start) + 1},
            )
            continue
        occurrences.append(
            Occurrence(
                marker.start,
                marker.end,
                OccurrenceKind.FOOTNOTE_REF,
                marker.label,
                text=document.text[marker.start : marker.end],
            )
        )
    return sorted(occurrences, key=lambda item: item.start)


def collect_sidenotes(document: SourceDocument) -> list[Occurrence]:
    """Return sidenote blocks keyed by their source id."""
    return [
        Occurrence(
            sidenote.start,
            sidenote.end,
            OccurrenceKind.SIDENOTE_BLOCK,
            sidenote.number,
            sidenote.content,
        )
        for sidenote in scan_sidenotes(document)
    ]
