from collections.abc import Mapping
from typing import Any

from mdsmith.core.diagnostics import NullEmitter
from mdsmith.transforms.sidenotes import render_sidenote, transform


class RecordingEmitter(NullEmitter):
    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        self.events.append((name, dict(payload)))


def _sidenote(text: str) -> str:
    return transform(text, None, NullEmitter())


def test_footnote_becomes_sidenote() -> None:
    result = _sidenote("text[^1]\n\n[^1]: note.\n")

    assert result == (
        "text\n"
        '<label for="sidenote-1" class="margin-toggle sidenote-number"></label>\n'
        '<input type="checkbox" id="sidenote-1" class="margin-toggle"/>\n'
        '<span class="sidenote">note.</span>\n'
    )


def test_numbers_follow_first_reference() -> None:
    source = "a[^x] b[^y] c[^x]\n\n[^x]: X note.\n[^y]: Y *em*.\n"

    expected = (
        "a"
        + render_sidenote(1, "X note.")
        + " b"
        + render_sidenote(2, "Y <em>em</em>.")
        + " c"
        + render_sidenote(1, "X note.")
        + "\n"
    )
    assert _sidenote(source) == expected


def test_multi_paragraph_note() -> None:
    source = "a[^1]\n\n[^1]: First.\n\n    Second.\n"

    assert _sidenote(source) == "a" + render_sidenote(1, "First.<br/>Second.") + "\n"


def test_unused_definition_is_kept() -> None:
    source = "a[^1]\n\n[^1]: one\n[^2]: two\n"

    assert _sidenote(source) == "a" + render_sidenote(1, "one") + "\n\n[^2]: two\n"


def test_undefined_reference_is_left_alone() -> None:
    emitter = RecordingEmitter()
    source = "a[^missing] b\n"

    assert transform(source, None, emitter) == source
    assert ("missing_definition", {"label": "missing", "line": 1}) in emitter.events


def test_markers_in_code_are_ignored() -> None:
    source = "Use `a[^1]` here.\n\n[^1]: note\n"
    assert _sidenote(source) == source


def test_idempotent() -> None:
    once = _sidenote("a[^1] b[^2]\n\n[^1]: one\n[^2]: two\n")
    assert _sidenote(once) == once
