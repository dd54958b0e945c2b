# tests/test_reference_parser.py
"""
Tests for reference_parser.py - header grammar, carry-over and parse errors.
"""

import pytest

from versemark.services.references import (
    ParseErrorKind,
    Reference,
    ReferenceParseError,
    ReferenceSegment,
    Span,
    is_valid_header,
    parse_header,
    scan_header,
)


def _tuples(reference):
    return [seg.as_tuple() for seg in reference.segments]


def test_chapter_carry_over():
    """A bare verse range inherits the chapter of the item before it."""
    ref = parse_header("### Ephesians 1:1-4,5-7,2:3-4")
    assert ref.book == "Ephesians"
    assert _tuples(ref) == [(1, 1, 4), (1, 5, 7), (2, 3, 4)]
    assert [seg.explicit_chapter for seg in ref.segments] == [True, False, True]


def test_textual_order_preserved():
    ref = parse_header("### Ephesians 2:1,1:5")
    assert _tuples(ref) == [(2, 1, 1), (1, 5, 5)]


def test_duplicates_and_overlaps_kept():
    ref = parse_header("### Ephesians 1:1-4,3,3")
    assert _tuples(ref) == [(1, 1, 4), (1, 3, 3), (1, 3, 3)]


def test_single_verse():
    ref = parse_header("### Romans 8:28")
    seg = ref.first_segment
    assert seg.as_tuple() == (8, 28, 28)
    assert not seg.is_range
    assert seg.verse_count == 1
    assert seg.verse_end_span is None


def test_numbered_book():
    ref = parse_header("### 1 John 3:16-18")
    assert ref.book == "1 John"
    assert _tuples(ref) == [(3, 16, 18)]


def test_whitespace_tolerated():
    ref = parse_header("###  Ephesians   1:1 - 4 ,  5   ")
    assert ref.book == "Ephesians"
    assert _tuples(ref) == [(1, 1, 4), (1, 5, 5)]


def test_en_dash_and_semicolon():
    ref = parse_header("### Ephesians 1:1–4; 2:3")
    assert _tuples(ref) == [(1, 1, 4), (2, 3, 3)]


def test_spans():
    """Spans are offsets into the line, shifted by base_offset."""
    line = "### Ephesians 1:1-4,5-7"
    ref = parse_header(line)
    assert ref.book_span == Span(4, 13)
    assert ref.source_span == Span(0, len(line))
    first, second = ref.segments
    assert first.source_span == Span(14, 19)
    assert first.verse_end_span == Span(18, 19)
    assert second.source_span == Span(20, 23)

    shifted = parse_header(line, base_offset=100)
    assert shifted.segments[0].source_span == Span(114, 119)
    assert shifted.book_span == Span(104, 113)


def test_equality_ignores_spans():
    a = parse_header("### Ephesians 1:1-4")
    b = parse_header("### Ephesians   1:1 - 4", base_offset=50)
    assert a == b
    assert a == Reference("Ephesians", (ReferenceSegment(1, 1, 4),))


def test_invalid_range_offset():
    """InvalidRange points at the start of the verse range, not the chapter."""
    with pytest.raises(ReferenceParseError) as exc:
        parse_header("### Ephesians 1:5-3")
    err = exc.value
    assert err.kind == ParseErrorKind.INVALID_RANGE
    assert err.offset == 16
    assert err.end == 19
    assert isinstance(err, ValueError)


def test_dangling_verse_range():
    with pytest.raises(ReferenceParseError) as exc:
        parse_header("### Ephesians 1-4")
    assert exc.value.kind == ParseErrorKind.DANGLING_VERSE_RANGE
    assert exc.value.offset == 14


def test_bare_chapter_unsupported():
    with pytest.raises(ReferenceParseError) as exc:
        parse_header("### Psalms 23")
    assert exc.value.kind == ParseErrorKind.UNSUPPORTED_BARE_CHAPTER

    with pytest.raises(ReferenceParseError) as exc:
        parse_header("### Ephesians 3:")
    assert exc.value.kind == ParseErrorKind.UNSUPPORTED_BARE_CHAPTER


def test_malformed_headers():
    cases = [
        "###Ephesians 1:1",          # no space after ###
        "## Ephesians 1:1",          # wrong level
        "### 1:1",                   # no book
        "### Ephesians",             # no reference list
        "### Ephesians 0:1",         # chapters start at 1
        "### Ephesians 1:0",         # verses start at 1
        "### Ephesians 1:2-3:4",     # cross-chapter range
        "### Ephesians 1:1 x",       # stray character
        "### Ephesians 1:1,,2",      # empty item
        "### Ephesians 1:1,",        # trailing separator
    ]
    for line in cases:
        reference, errors = scan_header(line)
        assert reference is None, line
        assert errors, line
        assert errors[0].kind == ParseErrorKind.MALFORMED_HEADER, line


def test_empty_item_offset():
    _, errors = scan_header("### Ephesians 1:1,,2")
    assert len(errors) == 1
    assert errors[0].offset == 18
    assert "empty" in errors[0].reason


def test_one_error_per_malformed_item():
    reference, errors = scan_header("### Ephesians 1:5-3, 2:9-1, 4")
    assert reference is None
    assert [e.kind for e in errors] == [ParseErrorKind.INVALID_RANGE, ParseErrorKind.INVALID_RANGE]
    assert [e.offset for e in errors] == [16, 23]


def test_error_does_not_lose_carried_chapter():
    """An item with a bad range still sets the chapter for later items."""
    _, errors = scan_header("### Ephesians 2:5-3, 4-6")
    assert len(errors) == 1
    assert errors[0].kind == ParseErrorKind.INVALID_RANGE


def test_trailing_newline_ignored():
    ref = parse_header("### Ephesians 1:1\r\n")
    assert _tuples(ref) == [(1, 1, 1)]


def test_is_valid_header():
    assert is_valid_header("### Ephesians 1:1-4")
    assert not is_valid_header("### Ephesians 1:4-1")
    assert not is_valid_header("Ephesians 1:1")


def test_error_to_dict():
    _, errors = scan_header("### Ephesians 1:5-3")
    data = errors[0].to_dict()
    assert data["kind"] == "InvalidRange"
    assert data["offset"] == 16
    assert data["end"] == 19
