from mdsmith.core.config import MdsmithConfig
from mdsmith.core.diagnostics import NullEmitter
from mdsmith.transforms import footnotes, sidenotes
from mdsmith.transforms.sidenotes import render_sidenote


def _footnote(text: str, config: MdsmithConfig | None = None) -> str:
    return footnotes.transform(text, config, NullEmitter())


def test_sidenote_becomes_footnote() -> None:
    source = "a" + render_sidenote(1, "X") + " b\n"

    assert _footnote(source) == "a[^1] b\n\n[^1]: X\n"


def test_round_trip_from_footnote() -> None:
    source = "text[^1]\n\n[^1]: note.\n"
    converted = sidenotes.transform(source, None, NullEmitter())

    assert _footnote(converted) == source


def test_source_ids_are_renumbered() -> None:
    source = (
        "a" + render_sidenote(5, "five") + " b" + render_sidenote(2, "two")
        + " c" + render_sidenote(5, "five") + "\n"
    )

    assert _footnote(source) == "a[^1] b[^2] c[^1]\n\n[^1]: five\n[^2]: two\n"


def test_markup_is_converted_back() -> None:
    source = "a" + render_sidenote(1, 'Y <em>em</em> and <a href="https://x.test">x</a>.') + "\n"

    assert _footnote(source) == "a[^1]\n\n[^1]: Y *em* and [x](https://x.test).\n"


def test_hidden_spans_are_stripped() -> None:
    source = "a" + render_sidenote(1, '<span class="hidden">*</span>note') + "\n"

    assert _footnote(source) == "a[^1]\n\n[^1]: note\n"


def test_no_sidenotes_is_noop() -> None:
    assert _footnote("plain\n") == "plain\n"


def test_idempotent() -> None:
    once = _footnote("a" + render_sidenote(1, "one") + "\n")
    assert _footnote(once) == once


class WarningRecorder(NullEmitter):
    def __init__(self) -> None:
        self.warnings: list[str] = []

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self.warnings.append(message)


def test_colliding_footnote_definition_is_replaced() -> None:
    emitter = WarningRecorder()
    source = "Old.\n\n[^1]: stale\n\nNew" + render_sidenote(1, "X") + ".\n"

    result = footnotes.transform(source, None, emitter)

    assert result == "Old.\n\nNew[^1].\n\n[^1]: X\n"
    assert emitter.warnings == ["Footnote definition [^1] is replaced by a converted sidenote."]


def test_unrelated_footnote_definition_is_kept() -> None:
    source = "See[^note].\n\n[^note]: kept\n\nNew" + render_sidenote(1, "X") + ".\n"

    assert _footnote(source) == (
        "See[^note].\n\n[^note]: kept\n\nNew[^1].\n\n[^1]: X\n"
    )
