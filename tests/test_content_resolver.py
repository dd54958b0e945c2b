# tests/test_content_resolver.py
"""
Tests for content_resolver.py and resolution_cache.py.
"""

import time

import pytest

from versemark.services.cache import ResolutionCache
from versemark.services.references import (
    MISSING,
    ContentResolver,
    InMemoryVerseSource,
    ResolutionCancelled,
    ResolverFailure,
    ResolverTimeout,
    VerseSourceError,
    VerseSourceTimeout,
    parse_header,
)

from conftest import EPHESIANS, ephesians_verses


class FailingSource(InMemoryVerseSource):
    def __init__(self, error):
        super().__init__(ephesians_verses(), structure={"Ephesians": EPHESIANS})
        self.error = error

    def lookup(self, book, chapter, verse):
        raise self.error


class SlowSource(InMemoryVerseSource):
    def lookup(self, book, chapter, verse):
        time.sleep(0.05)
        return super().lookup(book, chapter, verse)


def test_resolves_in_segment_order(source):
    ref = parse_header("### Ephesians 2:1-2,1:1")
    resolved = ContentResolver(source).resolve(ref, version=7)

    assert resolved.version == 7
    assert resolved.book == "Ephesians"
    assert resolved.failure is None
    assert [(v.chapter, v.verse) for v in resolved.segments[0].verses] == [(2, 1), (2, 2)]
    assert resolved.segments[1].verses[0].text.startswith("Paul")
    assert all(entry.complete for entry in resolved.segments)


def test_missing_verse_is_not_a_failure(gappy_source):
    resolved = ContentResolver(gappy_source).resolve(parse_header("### Ephesians 1:3-5"), 1)

    verses = resolved.segments[0].verses
    assert [v.is_missing for v in verses] == [False, True, False]
    assert verses[1].text is MISSING
    assert resolved.missing == [(1, 4)]
    assert resolved.failure is None


def test_unknown_book(source):
    resolved = ContentResolver(source).resolve(parse_header("### Hezekiah 1:1-2"), 1)

    assert resolved.unknown_book
    assert resolved.book is None
    assert resolved.missing == [(1, 1), (1, 2)]


def test_abbreviated_book(source):
    resolved = ContentResolver(source).resolve(parse_header("### eph. 1:1"), 1)
    assert resolved.book == "Ephesians"
    assert not resolved.segments[0].verses[0].is_missing


def test_source_failure_recorded():
    resolved = ContentResolver(FailingSource(VerseSourceError("down"))).resolve(
        parse_header("### Ephesians 1:1-3"), 1
    )
    assert isinstance(resolved.failure, ResolverFailure)
    assert resolved.failure.code == "resolver_failure"
    assert resolved.segments[0].verses == []
    assert not resolved.segments[0].complete


def test_source_timeout_recorded():
    resolved = ContentResolver(FailingSource(VerseSourceTimeout("slow"))).resolve(
        parse_header("### Ephesians 1:1"), 1
    )
    assert isinstance(resolved.failure, ResolverTimeout)


def test_time_budget():
    """Resolution stops once the budget is spent and keeps what it has."""
    source = SlowSource(ephesians_verses(), structure={"Ephesians": EPHESIANS})
    resolver = ContentResolver(source, timeout_seconds=0.01)
    resolved = resolver.resolve(parse_header("### Ephesians 1:1-5"), 1)

    assert isinstance(resolved.failure, ResolverTimeout)
    assert len(resolved.segments[0].verses) == 1


def test_cancelled_when_not_current(source):
    with pytest.raises(ResolutionCancelled):
        ContentResolver(source).resolve(
            parse_header("### Ephesians 1:1"), 1, is_current=lambda: False
        )


def test_lookup_window(gappy_source):
    window = ContentResolver(gappy_source).lookup_window("Ephesians", 1, [3, 4, 5])
    assert [v.verse for v in window] == [3, 4, 5]
    assert [v.is_missing for v in window] == [False, True, False]


def test_lookup_window_source_error():
    window = ContentResolver(FailingSource(VerseSourceError("down"))).lookup_window(
        "Ephesians", 1, [1, 2]
    )
    assert all(v.is_missing for v in window)


def test_cache_single_entry_per_document():
    cache = ResolutionCache()
    cache.put("doc.md", 1, 0, "v1-header0")
    cache.put("doc.md", 1, 3, "v1-header3")

    assert cache.get("doc.md", 1, 0) == "v1-header0"
    assert cache.get("doc.md", 2, 0) is None

    # A newer version replaces everything cached for the old one
    cache.put("doc.md", 2, 0, "v2-header0")
    assert cache.version_of("doc.md") == 2
    assert cache.get("doc.md", 1, 3) is None
    assert cache.get("doc.md", 2, 0) == "v2-header0"

    stats = cache.stats()
    assert stats["documents"] == 1
    assert stats["entries"] == 1
    assert stats["hits"] == 2
    assert stats["misses"] == 2


def test_cache_invalidate():
    cache = ResolutionCache()
    cache.put("a.md", 1, 0, "x")
    cache.put("b.md", 4, 0, "y")

    assert cache.invalidate("a.md")
    assert not cache.invalidate("a.md")
    assert cache.get("a.md", 1, 0) is None
    assert cache.get("b.md", 4, 0) == "y"
    assert cache.clear() == 1
