"""Turn markdown footnotes into HTML sidenotes.

Each ``[^label]`` reference with a matching definition is replaced by a sidenote
literal placed right where the reference was::

    <label for="sidenote-1" class="margin-toggle sidenote-number"></label>
    <input type="checkbox" id="sidenote-1" class="margin-toggle"/>
    <span class="sidenote">Rendered <em>body</em>.</span>

Sidenotes are numbered by first reference, whatever the source labels were.
The definitions that were used disappear from the document.
"""

from __future__ import annotations

import logging

from mdsmith.adapters.markdown import render_note_html
from mdsmith.core.assembler import Replacement, assemble
from mdsmith.core.config import MdsmithConfig
from mdsmith.core.diagnostics import DiagnosticEmitter, LoggingEmitter
from mdsmith.core.document import SourceDocument
from mdsmith.core.identity import IdentityTable
from mdsmith.core.occurrences import Occurrence, OccurrenceKind, collect_footnotes


__all__ = ["SIDENOTE_TEMPLATE", "render_sidenote", "transform"]


logger = logging.getLogger(__name__)

SIDENOTE_TEMPLATE = (
    '\n<label for="sidenote-{number}" class="margin-toggle sidenote-number"></label>'
    '\n<input type="checkbox" id="sidenote-{number}" class="margin-toggle"/>'
    '\n<span class="sidenote">{content}</span>'
)


def render_sidenote(number: int, content: str) -> str:
    return SIDENOTE_TEMPLATE.format(number=number, content=content)


def transform(
    content: str,
    config: MdsmithConfig | None = None,
    emitter: DiagnosticEmitter | None = None,
) -> str:
    """Replace footnote references in ``content`` with numbered sidenotes."""
    config = config or MdsmithConfig()
    emitter = emitter or LoggingEmitter()
    document = SourceDocument(content)

    definitions: dict[str, Occurrence] = {}
    references: list[Occurrence] = []
    for occurrence in collect_footnotes(document, emitter):
        match occurrence.kind:
            case OccurrenceKind.FOOTNOTE_DEF:
                definitions[occurrence.key] = occurrence
            case OccurrenceKind.FOOTNOTE_REF:
                references.append(occurrence)

    table: IdentityTable[str] = IdentityTable.build(reference.key for reference in references)
    rendered = {
        label: render_note_html(definitions[label].text, config.markdown_extensions)
        for label in table
    }

    replacements = [
        Replacement(
            reference.start,
            reference.end,
            render_sidenote(table.number(reference.key), rendered[reference.key]),
        )
        for reference in references
    ]
    exclusions = [definitions[label].range for label in table]

    logger.debug("sidenote: %d reference(s), %d note(s)", len(replacements), len(table))
    emitter.event(
        "transform_applied",
        {"tool": "sidenote", "occurrences": len(replacements), "identities": len(table)},
    )
    return assemble(content, replacements, exclusions=exclusions)
