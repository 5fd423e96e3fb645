import pytest

from mdsmith.core.diagnostics import NullEmitter
from mdsmith.transforms.references import transform


def _ref(text: str) -> str:
    return transform(text, None, NullEmitter())


def test_inline_link_becomes_numbered_reference() -> None:
    assert _ref("See [ex](https://x.test).") == "See [ex][1].\n\n[1]: https://x.test\n"


def test_same_target_shares_a_number() -> None:
    source = "[one](https://x.test) and [two](https://x.test)\n"

    result = _ref(source)

    assert result == "[one][1] and [two][1]\n\n[1]: https://x.test\n"
    assert result.count("[1]:") == 1


def test_numbers_follow_first_appearance() -> None:
    source = "[a](https://b.test) [b](https://a.test) [c](https://b.test)\n"

    assert _ref(source) == (
        "[a][1] [b][2] [c][1]\n\n[1]: https://b.test\n[2]: https://a.test\n"
    )


def test_titles_distinguish_identities() -> None:
    source = '[a](https://x.test "One") [b](https://x.test "Two") [c](https://x.test)\n'

    assert _ref(source) == (
        "[a][1] [b][2] [c][3]\n\n"
        '[1]: https://x.test "One"\n'
        '[2]: https://x.test "Two"\n'
        "[3]: https://x.test\n"
    )


def test_existing_definitions_are_renumbered() -> None:
    source = "Read [the docs][docs] then [x](https://x.test).\n\n[docs]: https://docs.test\n"

    assert _ref(source) == (
        "Read [the docs][1] then [x][2].\n\n[1]: https://docs.test\n[2]: https://x.test\n"
    )


def test_inline_images_are_left_alone() -> None:
    source = "![alt](https://x.test/img.png)\n"
    assert _ref(source) == source


def test_reference_images_become_inline() -> None:
    source = "![logo][img] and [home](https://x.test)\n\n[img]: https://x.test/logo.png\n"

    assert _ref(source) == (
        "![logo](https://x.test/logo.png) and [home][1]\n\n[1]: https://x.test\n"
    )


def test_image_inside_link_is_kept_as_link_text() -> None:
    source = "[![badge](https://x.test/b.svg)](https://x.test)\n"

    assert _ref(source) == "[![badge](https://x.test/b.svg)][1]\n\n[1]: https://x.test\n"


def test_links_in_code_are_not_touched() -> None:
    source = "Use `[a](b)` or\n\n```\n[c](d)\n```\n"
    assert _ref(source) == source


def test_footnote_references_are_not_links() -> None:
    source = "Text[^1] and [x](https://x.test).\n\n[^1]: note\n"

    assert _ref(source) == (
        "Text[^1] and [x][1].\n\n[^1]: note\n\n[1]: https://x.test\n"
    )


def test_no_links_is_noop() -> None:
    assert _ref("Nothing to see.") == "Nothing to see.\n"


def test_front_matter_is_preserved() -> None:
    source = "---\ntitle: x\n---\nSee [a](https://a.test).\n"

    assert _ref(source) == "---\ntitle: x\n---\nSee [a][1].\n\n[1]: https://a.test\n"


def test_destination_needing_brackets() -> None:
    source = "[a](<https://x.test/a b>)\n"
    assert _ref(source) == "[a][1]\n\n[1]: <https://x.test/a b>\n"


@pytest.mark.parametrize(
    "source",
    [
        "See [ex](https://x.test).",
        "[a](https://b.test) [b][r] [c](https://b.test \"T\")\n\n[r]: https://r.test\n",
        "> quoted [x](https://x.test)\n>\n> - [y](https://y.test)\n",
        "| a | b |\n| - | - |\n| [x](https://x.test) | 1 |\n",
        "See [1] and [a](u).\n",
        "[x][2] [a](u) [b](v)\n",
        "[see [1]](u) and ![1]\n",
        "A [a](u)\r\nB [b](v)\r\n",
    ],
)
def test_idempotent(source: str) -> None:
    once = _ref(source)
    assert _ref(once) == once


def test_literal_numbered_brackets_are_escaped() -> None:
    assert _ref("See [1] and [a](u).\n") == "See \\[1] and [a][1].\n\n[1]: u\n"


def test_literal_brackets_inside_link_text_are_escaped() -> None:
    assert _ref("[see [1]](u)\n") == "[see \\[1]][1]\n\n[1]: u\n"


def test_unassigned_numbers_are_left_alone() -> None:
    assert _ref("See [7] and [a](u).\n") == "See [7] and [a][1].\n\n[1]: u\n"


def test_crlf_line_endings_are_kept() -> None:
    source = "A [a](u)\r\nB [b](v)\r\n"

    assert _ref(source) == "A [a][1]\r\nB [b][2]\r\n\r\n[1]: u\r\n[2]: v\r\n"


def test_definition_continued_on_next_line_is_replaced() -> None:
    source = "See [a][x].\n\n[x]:\n  https://a.test\n"

    assert _ref(source) == "See [a][1].\n\n[1]: https://a.test\n"
