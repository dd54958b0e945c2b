# tests/test_formatter.py
"""
Tests for formatter.py - canonical headers, round-trips and content rendering.
"""

import pytest

from versemark.services.references import (
    ContentResolver,
    ReferenceParseError,
    format_block,
    format_content,
    format_header,
    format_label,
    format_quote,
    normalize_header,
    parse_header,
)

HEADERS = [
    "### Ephesians 1:1-4,5-7,2:3-4",
    "### Ephesians 2:1,1:5",
    "### Ephesians 1:1,1:3",
    "### 1 John 3:16",
    "### Romans 8:28, 31-39",
    "###  Psalms  23:1 – 3 ; 5",
    "### Ephesians 1:4,4,2-3",
]


def test_format_header_omits_repeated_chapter():
    ref = parse_header("### Ephesians 1:1-4,5-7,2:3-4")
    assert format_header(ref) == "### Ephesians 1:1-4, 5-7, 2:3-4"
    assert format_label(ref) == "Ephesians 1:1-4, 5-7, 2:3-4"


def test_explicit_repeat_of_same_chapter_is_dropped():
    ref = parse_header("### Ephesians 1:1,1:3")
    assert format_header(ref) == "### Ephesians 1:1, 3"


def test_chapter_change_is_written():
    ref = parse_header("### Ephesians 2:1,1:5")
    assert format_header(ref) == "### Ephesians 2:1, 1:5"


def test_round_trip():
    """Formatting never loses anything the parser can recover."""
    for line in HEADERS:
        ref = parse_header(line)
        assert parse_header(format_header(ref)) == ref, line


def test_format_is_stable():
    for line in HEADERS:
        once = normalize_header(line)
        assert normalize_header(once) == once, line


def test_normalize_whitespace():
    assert normalize_header("###  Psalms  23:1 – 3 ; 5") == "### Psalms 23:1-3, 5"
    assert normalize_header("### Ephesians 1:1-4 ,5-7") == "### Ephesians 1:1-4, 5-7"


def test_normalize_rejects_bad_header():
    with pytest.raises(ReferenceParseError):
        normalize_header("### Ephesians 1:5-3")


def test_format_content(gappy_source):
    resolved = ContentResolver(gappy_source).resolve(parse_header("### Ephesians 1:3-5, 2:1"), 1)

    assert format_content(resolved) == (
        "[1:3] Blessed be the God and Father of our Lord Jesus Christ,\n"
        "[1:5] Ephesians 1:5 text.\n"
        "\n"
        "[2:1] Ephesians 2:1 text."
    )

    with_placeholder = format_content(resolved, missing_placeholder="(missing)")
    assert "[1:4] (missing)" in with_placeholder.splitlines()


def test_format_block(source):
    resolved = ContentResolver(source).resolve(parse_header("### Ephesians 1:1"), 1)
    assert format_block(resolved) == (
        "### Ephesians 1:1\n\n[1:1] Paul, an apostle of Christ Jesus by the will of God,"
    )


def test_format_quote(source):
    resolved = ContentResolver(source).resolve(parse_header("### Ephesians 1:1-2"), 1)
    assert format_quote(resolved) == (
        "> Paul, an apostle of Christ Jesus by the will of God, "
        "Grace to you and peace from God our Father and the Lord Jesus Christ. "
        "- Ephesians 1:1-2"
    )
