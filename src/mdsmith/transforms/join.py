"""Join paragraphs onto single lines."""

from __future__ import annotations

from collections.abc import Sequence

from mdsmith.core.config import MdsmithConfig
from mdsmith.core.diagnostics import DiagnosticEmitter
from mdsmith.core.lines import BlockKind, collapse_whitespace, iter_blocks, quote_segments


__all__ = ["join_blockquote", "join_paragraph", "transform"]


QUOTE_PREFIX = "> "


def join_paragraph(lines: Sequence[str]) -> list[str]:
    """Return the paragraph as one line, keeping a trailing two-space hard break."""
    text = collapse_whitespace(lines)
    if lines and lines[-1].endswith("  "):
        text += "  "
    return [text]


def join_blockquote(lines: Sequence[str]) -> list[str]:
    """Return one ``> `` line per quoted paragraph, keeping alert headers apart."""
    result: list[str] = []
    for segment in quote_segments(lines):
        match segment.kind:
            case "alert":
                result.append(QUOTE_PREFIX + segment.lines[0])
            case "blank":
                result.append(">")
            case _:
                result.append(QUOTE_PREFIX + collapse_whitespace(segment.lines))
    return result


def transform(
    content: str,
    config: MdsmithConfig | None = None,
    emitter: DiagnosticEmitter | None = None,
) -> str:
    """Join every paragraph and blockquote paragraph of ``content``."""
    _ = config, emitter
    result: list[str] = []
    for block in iter_blocks(content.split("\n"), stop_on_hard_break=True):
        match block.kind:
            case BlockKind.PARAGRAPH:
                result.extend(join_paragraph(block.lines))
            case BlockKind.BLOCKQUOTE:
                result.extend(join_blockquote(block.lines))
            case _:
                result.extend(block.lines)
    return "\n".join(result).rstrip("\n") + "\n"
