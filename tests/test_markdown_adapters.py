import pytest

from mdsmith.adapters.html import html_to_markdown, strip_hidden_spans
from mdsmith.adapters.markdown import (
    SPAN_META_KEY,
    get_document_parser,
    normalize_label,
    parse_markdown,
    render_markdown,
    render_note_html,
)
from mdsmith.core.exceptions import DocumentParseError


def test_parser_keeps_destinations_verbatim() -> None:
    parsed = parse_markdown("[a](https://x.test/ä b) [j](javascript:alert)")
    inline = next(token for token in parsed.tokens if token.type == "inline")
    links = [child for child in inline.children or [] if child.type == "link_open"]

    assert [link.attrs["href"] for link in links] == ["javascript:alert"]

    parsed = parse_markdown("[a](<https://x.test/ä b>)")
    inline = next(token for token in parsed.tokens if token.type == "inline")
    (link,) = [child for child in inline.children or [] if child.type == "link_open"]
    assert link.attrs["href"] == "https://x.test/ä b"


def test_inline_rules_record_spans() -> None:
    parsed = parse_markdown("x `code` [a](u) ![i](v)")
    inline = next(token for token in parsed.tokens if token.type == "inline")
    spans = {
        child.type: child.meta[SPAN_META_KEY]
        for child in inline.children or []
        if SPAN_META_KEY in child.meta
    }

    assert spans == {"code_inline": (2, 8), "link_open": (9, 15), "image": (16, 23)}


def test_document_parser_is_shared() -> None:
    assert get_document_parser() is get_document_parser()


def test_references_are_exposed() -> None:
    parsed = parse_markdown("[Docs]: https://d.test 'T'\n")
    reference = parsed.references[normalize_label("docs")]
    assert reference["href"] == "https://d.test"
    assert reference["title"] == "T"


def test_deep_nesting_raises_parse_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def explode(*_args: object, **_kwargs: object) -> None:
        raise RecursionError

    monkeypatch.setattr(get_document_parser(), "parse", explode)
    with pytest.raises(DocumentParseError):
        parse_markdown("text")


def test_render_markdown() -> None:
    assert render_markdown("*a*") == "<p><em>a</em></p>"


def test_render_note_html_joins_paragraphs() -> None:
    assert render_note_html("First *one*.\n\nSecond.") == "First <em>one</em>.<br/>Second."
    assert render_note_html("line one\nline two") == "line one line two"


def test_strip_hidden_spans() -> None:
    assert strip_hidden_spans('<span class="hidden">x</span>kept') == "kept"
    assert strip_hidden_spans("<em>a</em>") == "<em>a</em>"


def test_html_to_markdown() -> None:
    assert html_to_markdown("a <strong>b</strong><br/>c") == "a **b** c"
    assert html_to_markdown('<span class="hidden">x</span>y', strip_hidden=False) == "xy"
    assert html_to_markdown("   ") == ""
