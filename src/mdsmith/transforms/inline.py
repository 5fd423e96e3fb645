"""Rewrite reference links and images into inline links."""

from __future__ import annotations

import logging

from mdsmith.core.assembler import Replacement, assemble
from mdsmith.core.config import MdsmithConfig
from mdsmith.core.diagnostics import DiagnosticEmitter, LoggingEmitter
from mdsmith.core.document import SourceDocument
from mdsmith.core.occurrences import OccurrenceKind, collect_links, collect_reference_definitions

from ._links import format_inline_link


__all__ = ["transform"]


logger = logging.getLogger(__name__)


def transform(
    content: str,
    config: MdsmithConfig | None = None,
    emitter: DiagnosticEmitter | None = None,
) -> str:
    """Inline every full, collapsed or shortcut reference and drop the definitions.

    Links already written inline are left untouched, so a document without
    reference links comes back unchanged.
    """
    _ = config
    emitter = emitter or LoggingEmitter()
    document = SourceDocument(content)

    replacements = [
        Replacement(link.start, link.end, format_inline_link(link.text, link.key, image=link.image))
        for link in collect_links(document, emitter)
        if link.kind is OccurrenceKind.REF_LINK
    ]
    exclusions = [definition.range for definition in collect_reference_definitions(document)]

    logger.debug("inline: %d reference link(s)", len(replacements))
    emitter.event(
        "transform_applied",
        {"tool": "inline", "occurrences": len(replacements), "identities": 0},
    )
    return assemble(content, replacements, exclusions=exclusions)
