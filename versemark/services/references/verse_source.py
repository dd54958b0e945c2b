# versemark/services/references/verse_source.py
"""
Verse content collaborator interface.

The engine never reads verse text or book structure from anywhere else; a
source is injected into the resolver and the feature providers. Concrete
sources live beside this module (JSON bible file, SWORD modules, HTTP API).
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from .books import book_key, canonical_name

logger = logging.getLogger(__name__)


class VerseSource(ABC):
    """
    Read-only access to verse text and book structure.

    lookup() returns None for a verse the source does not have. Sources
    raise VerseSourceError (or VerseSourceTimeout) when they cannot answer
    at all.
    """

    name = "source"

    @abstractmethod
    def lookup(self, book: str, chapter: int, verse: int) -> Optional[str]:
        """Text of one verse, or None if absent."""

    @abstractmethod
    def list_books(self) -> set:
        """Names of every book the source knows."""

    @abstractmethod
    def max_verse(self, book: str, chapter: int) -> Optional[int]:
        """Number of verses in a chapter, or None if unknown."""

    def max_chapter(self, book: str) -> Optional[int]:
        """Number of chapters in a book, or None if unknown."""
        return None

    def locate(self, book: str, chapter: int, verse: int) -> Optional[str]:
        """Source-defined location of a verse (a URI or module key)."""
        return None

    def canonical_book(self, name: str) -> Optional[str]:
        """
        Match a typed book name against the books this source lists.

        Tries a case-insensitive exact match, then the shared abbreviation
        table.
        """
        books = self.list_books()
        key = book_key(name)
        for book in books:
            if book_key(book) == key:
                return book
        canonical = canonical_name(name)
        if canonical in books:
            return canonical
        return None


class InMemoryVerseSource(VerseSource):
    """
    Dict-backed source.

    Usage:
        source = InMemoryVerseSource(
            {("Ephesians", 1, 1): "Paul, an apostle..."},
            structure={"Ephesians": [23, 22, 21, 32, 33, 24]},
        )
    """

    name = "memory"

    def __init__(self, verses: dict = None, structure: dict = None):
        self._verses = dict(verses or {})
        self._structure = {book: list(counts) for book, counts in (structure or {}).items()}

    def lookup(self, book: str, chapter: int, verse: int) -> Optional[str]:
        return self._verses.get((book, chapter, verse))

    def list_books(self) -> set:
        return set(self._structure) | {book for book, _, _ in self._verses}

    def max_verse(self, book: str, chapter: int) -> Optional[int]:
        counts = self._structure.get(book)
        if counts is not None:
            if 1 <= chapter <= len(counts):
                return counts[chapter - 1]
            return None
        verses = [v for (b, c, v) in self._verses if b == book and c == chapter]
        return max(verses) if verses else None

    def max_chapter(self, book: str) -> Optional[int]:
        counts = self._structure.get(book)
        if counts is not None:
            return len(counts)
        chapters = [c for (b, c, _) in self._verses if b == book]
        return max(chapters) if chapters else None

    def locate(self, book: str, chapter: int, verse: int) -> Optional[str]:
        if (book, chapter, verse) not in self._verses:
            return None
        return f"memory:{book}/{chapter}/{verse}"
