"""Put every sentence of a paragraph on its own line.

Paragraphs are first joined, then broken after ``.``, ``!`` or ``?`` when the
next word starts with an uppercase letter. Abbreviations such as ``e.g. the``
therefore stay on one line, while ``Dr. Smith`` does not.
"""

from __future__ import annotations

from collections.abc import Sequence

from mdsmith.core.config import MdsmithConfig
from mdsmith.core.diagnostics import DiagnosticEmitter
from mdsmith.core.lines import BlockKind, collapse_whitespace, iter_blocks, quote_segments

from .join import QUOTE_PREFIX


__all__ = ["split_blockquote", "split_paragraph", "split_sentences", "transform"]


_SENTENCE_END = ".!?"


def split_sentences(text: str) -> list[str]:
    sentences: list[str] = []
    start = 0
    index = 0
    while index < len(text):
        if (
            text[index] in _SENTENCE_END
            and index + 2 < len(text)
            and text[index + 1] == " "
            and text[index + 2].isupper()
        ):
            sentences.append(text[start : index + 1])
            start = index + 2
            index += 2
            continue
        index += 1
    if start < len(text):
        sentences.append(text[start:])
    return sentences


def split_paragraph(lines: Sequence[str]) -> list[str]:
    sentences = split_sentences(collapse_whitespace(lines))
    if sentences and lines and lines[-1].endswith("  "):
        sentences[-1] += "  "
    return sentences


def split_blockquote(lines: Sequence[str]) -> list[str]:
    result: list[str] = []
    for segment in quote_segments(lines):
        match segment.kind:
            case "alert":
                result.append(QUOTE_PREFIX + segment.lines[0])
            case "blank":
                result.append(">")
            case _:
                result.extend(
                    QUOTE_PREFIX + sentence
                    for sentence in split_sentences(collapse_whitespace(segment.lines))
                )
    return result


def transform(
    content: str,
    config: MdsmithConfig | None = None,
    emitter: DiagnosticEmitter | None = None,
) -> str:
    """Split the paragraphs of ``content`` into one sentence per line."""
    _ = config, emitter
    result: list[str] = []
    for block in iter_blocks(content.split("\n"), stop_on_hard_break=True):
        match block.kind:
            case BlockKind.PARAGRAPH:
                result.extend(split_paragraph(block.lines))
            case BlockKind.BLOCKQUOTE:
                result.extend(split_blockquote(block.lines))
            case _:
                result.extend(block.lines)
    return "\n".join(result).rstrip("\n") + "\n"
