# versemark/services/features/definition.py
"""Definition: which verse the cursor points at, and where the source keeps it."""

import logging
from dataclasses import dataclass
from typing import Optional

from versemark.services.references.content_resolver import ContentResolver
from versemark.services.references.document import HeaderParse
from versemark.services.references.errors import VerseSourceError
from versemark.services.references.reference_parser import Span

logger = logging.getLogger(__name__)


@dataclass
class DefinitionTarget:
    """
    Attributes:
        origin_span: Span of the segment under the cursor
        book: Book name as the source knows it
        chapter: Chapter number
        verse: Hovered verse number
        key: Lookup key, e.g. "Ephesians 1:4"
        location: Source-defined location (None if the source has none)
    """
    origin_span: Span
    book: str
    chapter: int
    verse: int
    key: str
    location: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "origin_span": list(self.origin_span),
            "book": self.book,
            "chapter": self.chapter,
            "verse": self.verse,
            "key": self.key,
            "location": self.location,
        }


def definition_at(header: HeaderParse, offset: int, resolver: ContentResolver) -> Optional[DefinitionTarget]:
    if header.index is None:
        return None
    hit = header.index.verse_at(offset)
    if hit is None:
        return None
    segment, verse = hit

    book = resolver.canonical_book(header.reference.book) or header.reference.book
    location = None
    try:
        location = resolver.source.locate(book, segment.chapter, verse)
    except VerseSourceError as e:
        logger.warning(f"Could not locate {book} {segment.chapter}:{verse}: {e}")

    return DefinitionTarget(
        origin_span=segment.source_span,
        book=book,
        chapter=segment.chapter,
        verse=verse,
        key=f"{book} {segment.chapter}:{verse}",
        location=location,
    )
