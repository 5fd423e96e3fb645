import pytest

from mdsmith.core.document import SourceDocument
from mdsmith.core.extents import (
    LinkForm,
    find_closing_bracket,
    find_closing_paren,
    resolve_extent,
    scan_bracket_groups,
    scan_footnote_definitions,
    scan_footnote_markers,
    scan_link_tail,
    scan_reference_definitions,
    scan_sidenotes,
)


def _extents(text: str):
    document = SourceDocument(text)
    return [
        resolve_extent(node, frame, document)
        for node, frame in document.walk()
        if node.type in {"link", "image"}
    ]


def test_find_closing_bracket_handles_nesting_and_escapes() -> None:
    assert find_closing_bracket("[a [b] c]", 0) == 8
    assert find_closing_bracket(r"[a \] b]", 0) == 7
    assert find_closing_bracket("[a `]` b]", 0) == 8
    assert find_closing_bracket("[a\n\nb]", 0) is None
    assert find_closing_bracket("[a\nb]", 0) == 4
    assert find_closing_bracket("[a\nb]", 0, multiline=False) is None
    assert find_closing_bracket("no bracket", 0) is None


def test_find_closing_paren_stays_on_line() -> None:
    assert find_closing_paren("(a (b) c)", 0) == 8
    assert find_closing_paren("(a\nb)", 0) is None


@pytest.mark.parametrize(
    ("text", "position", "expected"),
    [
        ("[a](u)", 3, (6, LinkForm.INLINE)),
        ("[a][id]", 3, (7, LinkForm.FULL)),
        ("[a][]", 3, (5, LinkForm.COLLAPSED)),
        ("[a] rest", 3, (3, LinkForm.SHORTCUT)),
        ("[a](u", 3, None),
        ("[a][id\nx]", 3, (3, LinkForm.SHORTCUT)),
    ],
)
def test_scan_link_tail(text: str, position: int, expected) -> None:
    assert scan_link_tail(text, position) == expected


def test_resolve_inline_link() -> None:
    (extent,) = _extents("See [ex](https://x.test).")

    assert extent is not None
    assert (extent.start, extent.end) == (4, 24)
    assert (extent.label_start, extent.label_end) == (5, 7)
    assert extent.form is LinkForm.INLINE
    assert not extent.image


@pytest.mark.parametrize(
    ("source", "span", "form"),
    [
        ("A [text][id] b\n\n[id]: https://x.test\n", (2, 12), LinkForm.FULL),
        ("A [id][] b\n\n[id]: https://x.test\n", (2, 8), LinkForm.COLLAPSED),
        ("A [id] b\n\n[id]: https://x.test\n", (2, 6), LinkForm.SHORTCUT),
    ],
)
def test_resolve_reference_links(source: str, span: tuple[int, int], form: LinkForm) -> None:
    (extent,) = _extents(source)

    assert extent is not None
    assert (extent.start, extent.end) == span
    assert extent.form is form


def test_shortcut_followed_by_brackets_is_not_over_extended() -> None:
    text = "[id] [x]\n\n[id]: https://x.test\n"
    (extent,) = _extents(text)

    assert extent is not None
    assert (extent.start, extent.end) == (0, 4)


def test_resolve_image() -> None:
    (extent,) = _extents("![alt](img.png)")

    assert extent is not None
    assert extent.image
    assert (extent.start, extent.end) == (0, 15)


def test_resolve_link_in_list_item() -> None:
    text = "- item [a](u)\n  more [b](v)\n"
    extents = _extents(text)

    assert [(extent.start, extent.end) for extent in extents if extent] == [
        (text.index("[a]"), text.index("[a]") + 6),
        (text.index("[b]"), text.index("[b]") + 6),
    ]


def test_footnote_markers_skip_definitions_escapes_and_code() -> None:
    text = "a[^1] b\\[^2] `[^3]` c[^4]\n\n[^1]: note\n"
    markers = scan_footnote_markers(SourceDocument(text))

    assert [marker.label for marker in markers] == ["1", "4"]
    assert markers[0].start == 1


def test_footnote_definition_with_continuation() -> None:
    text = "a[^n]\n\n[^n]: first\n    second\n\nafter\n"
    (definition,) = scan_footnote_definitions(SourceDocument(text))

    assert definition.label == "n"
    assert definition.body == "first\nsecond"
    assert definition.start == text.index("[^n]:")
    assert definition.end == text.index("after")


def test_consecutive_footnote_definitions() -> None:
    text = "[^a]: one\n[^b]: two\n"
    definitions = scan_footnote_definitions(SourceDocument(text))

    assert [(d.label, d.body) for d in definitions] == [("a", "one"), ("b", "two")]
    assert definitions[0].end == definitions[1].start


def test_scan_sidenotes() -> None:
    text = (
        "text\n"
        '<label for="sidenote-3" class="margin-toggle sidenote-number"></label>\n'
        '<input type="checkbox" id="sidenote-3" class="margin-toggle"/>\n'
        '<span class="sidenote">a <em>b</em> <span class="x">c</span></span>\n'
    )
    (sidenote,) = scan_sidenotes(SourceDocument(text))

    assert sidenote.number == 3
    assert sidenote.content == 'a <em>b</em> <span class="x">c</span>'
    assert sidenote.start == 4
    assert text[sidenote.end :] == "\n"


def test_sidenote_with_mismatched_ids_is_ignored() -> None:
    text = (
        "text\n"
        '<label for="sidenote-1" class="margin-toggle sidenote-number"></label>\n'
        '<input type="checkbox" id="sidenote-2" class="margin-toggle"/>\n'
        '<span class="sidenote">a</span>\n'
    )
    assert scan_sidenotes(SourceDocument(text)) == []


def test_reference_definitions_known_to_parser() -> None:
    text = "[a]\n\n[a]: https://a.test\n\n```\n[b]: https://b.test\n```\n"
    definitions = scan_reference_definitions(SourceDocument(text))

    assert [(d.label, text[d.start : d.end]) for d in definitions] == [
        ("a", "[a]: https://a.test\n")
    ]


def test_reference_definition_spans_continuation_lines() -> None:
    text = 'See [a][x].\n\n[x]:\n  https://a.test\n  "Title"\nafter\n'
    (definition,) = scan_reference_definitions(SourceDocument(text))

    assert definition.label == "x"
    assert text[definition.start : definition.end] == '[x]:\n  https://a.test\n  "Title"\n'


def test_reference_definitions_include_repeated_labels() -> None:
    text = "[a]: https://one.test\n[A]: https://two.test\n"
    definitions = scan_reference_definitions(SourceDocument(text))

    assert [text[d.start : d.end] for d in definitions] == [
        "[a]: https://one.test\n",
        "[A]: https://two.test\n",
    ]


def test_bracket_groups_skip_escapes_code_and_html() -> None:
    text = r"[a [b]] \[c] `[d]` <span title='[e]'>[f]</span> <http://x.test/[g]>" + "\n"
    groups = scan_bracket_groups(SourceDocument(text))

    assert [group.label for group in groups] == ["a [b]", "b", "f"]
    assert text[groups[0].start : groups[0].end] == "[a [b]]"
