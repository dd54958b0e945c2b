# versemark/services/references/content_resolver.py
"""
Fills parsed references with verse text from a VerseSource.

A verse the source does not have resolves to MISSING; that is a data state,
not an error. Source failures and timeouts are recorded on the
ResolvedReference so callers can report them without aborting.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from .errors import (
    ResolutionCancelled,
    ResolverError,
    ResolverFailure,
    ResolverTimeout,
    VerseSourceError,
    VerseSourceTimeout,
)
from .reference_parser import Reference, ReferenceSegment
from .verse_source import VerseSource

logger = logging.getLogger(__name__)


class _Missing:
    """Marker for a verse the source does not have."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "MISSING"

    def __bool__(self):
        return False


MISSING = _Missing()


@dataclass(frozen=True)
class VerseText:
    chapter: int
    verse: int
    text: object  # str or MISSING

    @property
    def is_missing(self) -> bool:
        return self.text is MISSING

    def to_dict(self) -> dict:
        return {
            "chapter": self.chapter,
            "verse": self.verse,
            "text": None if self.is_missing else self.text,
            "missing": self.is_missing,
        }


@dataclass
class ResolvedSegment:
    """A segment and the verse texts resolved for it, verse-ascending."""
    segment: ReferenceSegment
    verses: list = field(default_factory=list)

    @property
    def complete(self) -> bool:
        """False when resolution stopped before reaching every verse."""
        return len(self.verses) == self.segment.verse_count

    @property
    def missing(self) -> list:
        return [(v.chapter, v.verse) for v in self.verses if v.is_missing]

    @property
    def first_verse(self) -> Optional[VerseText]:
        return self.verses[0] if self.verses else None


@dataclass
class ResolvedReference:
    """
    A Reference with verse text for each segment.

    Attributes:
        reference: The parsed Reference
        version: Document version the resolution was computed for
        book: Book name as the source knows it (None if unknown)
        segments: ResolvedSegment per reference segment, same order
        failure: ResolverFailure/ResolverTimeout if the source gave up
        unknown_book: The source does not list this book
    """
    reference: Reference
    version: int
    book: Optional[str] = None
    segments: list = field(default_factory=list)
    failure: Optional[ResolverError] = None
    unknown_book: bool = False

    @property
    def missing(self) -> list:
        out = []
        for resolved in self.segments:
            out.extend(resolved.missing)
        return out

    def segment_for(self, segment: ReferenceSegment) -> Optional[ResolvedSegment]:
        for resolved in self.segments:
            if resolved.segment is segment:
                return resolved
        for resolved in self.segments:
            if resolved.segment == segment:
                return resolved
        return None

    def to_dict(self) -> dict:
        return {
            "reference": self.reference.to_dict(),
            "version": self.version,
            "book": self.book,
            "unknown_book": self.unknown_book,
            "failure": self.failure.code if self.failure else None,
            "segments": [
                {
                    "segment": resolved.segment.to_dict(),
                    "verses": [v.to_dict() for v in resolved.verses],
                }
                for resolved in self.segments
            ],
        }


class ContentResolver:
    """
    Resolves references against a verse source.

    Usage:
        resolver = ContentResolver(source, timeout_seconds=5.0)
        resolved = resolver.resolve(reference, version=3)
        for entry in resolved.segments[0].verses:
            print(entry.verse, entry.text)
    """

    def __init__(self, source: VerseSource, timeout_seconds: float = 5.0):
        self.source = source
        self.timeout_seconds = timeout_seconds

    def canonical_book(self, name: str) -> Optional[str]:
        try:
            return self.source.canonical_book(name)
        except VerseSourceError as e:
            logger.warning(f"Book lookup failed for {name!r}: {e}")
            return None

    def resolve(
        self,
        reference: Reference,
        version: int,
        is_current: Optional[Callable[[], bool]] = None,
    ) -> ResolvedReference:
        """
        Look up every verse of a reference, in segment order.

        Args:
            reference: Parsed reference
            version: Document version this resolution belongs to
            is_current: Checked before each lookup; returning False means a
                newer document version exists

        Returns:
            ResolvedReference (failure set if the source failed or timed out)

        Raises:
            ResolutionCancelled: if is_current() returned False
        """
        resolved = ResolvedReference(
            reference=reference,
            version=version,
            segments=[ResolvedSegment(seg) for seg in reference.segments],
        )

        try:
            book = self.source.canonical_book(reference.book)
        except VerseSourceError as e:
            logger.warning(f"Source failed to match book {reference.book!r}: {e}")
            resolved.failure = _wrap(e)
            return resolved

        if book is None:
            logger.debug(f"Unknown book {reference.book!r}")
            resolved.unknown_book = True
            for entry in resolved.segments:
                entry.verses = [
                    VerseText(entry.segment.chapter, v, MISSING) for v in entry.segment.verses
                ]
            return resolved
        resolved.book = book

        deadline = time.monotonic() + self.timeout_seconds
        for entry in resolved.segments:
            chapter = entry.segment.chapter
            for verse in entry.segment.verses:
                if is_current is not None and not is_current():
                    logger.debug(f"Resolution of {book} for version {version} cancelled")
                    raise ResolutionCancelled(f"version {version} is stale")
                if time.monotonic() > deadline:
                    logger.warning(
                        f"Resolving {book} exceeded {self.timeout_seconds}s; "
                        f"stopped at {chapter}:{verse}"
                    )
                    resolved.failure = ResolverTimeout(
                        f"lookup exceeded {self.timeout_seconds}s at {book} {chapter}:{verse}"
                    )
                    return resolved
                try:
                    text = self.source.lookup(book, chapter, verse)
                except VerseSourceError as e:
                    logger.warning(f"Lookup of {book} {chapter}:{verse} failed: {e}")
                    resolved.failure = _wrap(e)
                    return resolved
                entry.verses.append(VerseText(chapter, verse, text if text else MISSING))

        return resolved

    def lookup_window(self, book: str, chapter: int, verses) -> list[VerseText]:
        """
        Look up a run of verses outside any cached resolution.

        Source errors are logged and the affected verses come back MISSING.
        """
        out = []
        failed = False
        for verse in verses:
            text = None
            if not failed:
                try:
                    text = self.source.lookup(book, chapter, verse)
                except VerseSourceError as e:
                    logger.warning(f"Context lookup of {book} {chapter}:{verse} failed: {e}")
                    failed = True
            out.append(VerseText(chapter, verse, text if text else MISSING))
        return out

    def max_verse(self, book: str, chapter: int) -> Optional[int]:
        try:
            return self.source.max_verse(book, chapter)
        except VerseSourceError as e:
            logger.warning(f"max_verse failed for {book} {chapter}: {e}")
            return None


def _wrap(error: VerseSourceError) -> ResolverError:
    if isinstance(error, VerseSourceTimeout):
        return ResolverTimeout(str(error))
    return ResolverFailure(str(error))
