"""Turn HTML sidenotes back into markdown footnotes."""

from __future__ import annotations

import logging

from mdsmith.adapters.html import html_to_markdown
from mdsmith.core.assembler import Replacement, assemble
from mdsmith.core.config import MdsmithConfig
from mdsmith.core.diagnostics import DiagnosticEmitter, LoggingEmitter
from mdsmith.core.document import SourceDocument
from mdsmith.core.extents import scan_footnote_definitions
from mdsmith.core.identity import IdentityTable
from mdsmith.core.occurrences import collect_sidenotes
from mdsmith.core.ranges import ByteRange


__all__ = ["format_footnote_definition", "transform"]


logger = logging.getLogger(__name__)


def format_footnote_definition(number: int, body: str) -> str:
    return f"[^{number}]: {body}".rstrip()


def transform(
    content: str,
    config: MdsmithConfig | None = None,
    emitter: DiagnosticEmitter | None = None,
) -> str:
    """Replace sidenote blocks with ``[^N]`` markers and append their definitions.

    Sidenotes sharing a source id become a single footnote; numbers follow the
    order in which ids first appear. An existing definition whose label is one of
    the new numbers is dropped with a warning.
    """
    config = config or MdsmithConfig()
    emitter = emitter or LoggingEmitter()
    document = SourceDocument(content)

    sidenotes = collect_sidenotes(document)
    table: IdentityTable[int] = IdentityTable.build(sidenote.key for sidenote in sidenotes)

    bodies: dict[int, str] = {}
    for sidenote in sidenotes:
        if sidenote.key not in bodies:
            bodies[sidenote.key] = html_to_markdown(
                sidenote.text, strip_hidden=config.strip_hidden_spans
            )

    replacements = [
        Replacement(sidenote.start, sidenote.end, f"[^{table.number(sidenote.key)}]")
        for sidenote in sidenotes
    ]
    definitions = [format_footnote_definition(number, bodies[key]) for key, number in table.items()]

    numbers = {str(number) for _, number in table.items()}
    exclusions: list[ByteRange] = []
    for extent in scan_footnote_definitions(document):
        if extent.label in numbers:
            emitter.warning(
                f"Footnote definition [^{extent.label}] is replaced by a converted sidenote."
            )
            exclusions.append(ByteRange(extent.start, extent.end))

    logger.debug("footnote: %d sidenote(s), %d footnote(s)", len(replacements), len(table))
    emitter.event(
        "transform_applied",
        {"tool": "footnote", "occurrences": len(replacements), "identities": len(table)},
    )
    return assemble(content, replacements, exclusions=exclusions, definitions=definitions)
