import pytest

from mdsmith.core.ranges import ByteRange, exclude_ranges, normalise_ranges, position_in_ranges


def test_byte_range_rejects_inverted_bounds() -> None:
    with pytest.raises(ValueError):
        ByteRange(5, 2)
    with pytest.raises(ValueError):
        ByteRange(-1, 2)


def test_byte_range_is_half_open() -> None:
    span = ByteRange(2, 5)
    assert len(span) == 3
    assert span.contains(2)
    assert span.contains(4)
    assert not span.contains(5)
    assert span.overlaps(ByteRange(4, 8))
    assert not span.overlaps(ByteRange(5, 8))


def test_normalise_ranges_sorts_and_merges() -> None:
    ranges = [ByteRange(10, 12), ByteRange(0, 3), ByteRange(2, 5), ByteRange(5, 6)]
    assert normalise_ranges(ranges) == [ByteRange(0, 6), ByteRange(10, 12)]


def test_position_in_ranges() -> None:
    ranges = [ByteRange(0, 3), ByteRange(10, 12)]
    assert position_in_ranges(ranges, 0)
    assert position_in_ranges(ranges, 11)
    assert not position_in_ranges(ranges, 3)
    assert not position_in_ranges(ranges, 20)
    assert not position_in_ranges([], 0)


def test_exclude_ranges_removes_contained_bytes_only() -> None:
    content = "0123456789"
    assert exclude_ranges(content, 0, [ByteRange(2, 4), ByteRange(6, 7)]) == "0145789"


def test_exclude_ranges_clamps_to_window() -> None:
    # Window "34567" starts at offset 3 of the full source.
    window = "34567"
    ranges = [ByteRange(0, 4), ByteRange(6, 20)]
    assert exclude_ranges(window, 3, ranges) == "45"


def test_exclude_ranges_ignores_ranges_outside_window() -> None:
    assert exclude_ranges("abc", 10, [ByteRange(0, 5), ByteRange(20, 30)]) == "abc"
