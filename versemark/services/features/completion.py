# versemark/services/features/completion.py
"""
Completion for header lines being typed.

The text between line start and cursor decides what is proposed:

    "### Ep|"              book names
    "### Ephesians |"      chapters (as "c:")
    "### Ephesians 1:|"    verses of chapter 1
    "### Ephesians 1:3-|"  range ends after verse 3
    "### Ephesians 1:3, |" later verses of chapter 1, then later chapters

Numbers are bounded by the source's chapter and verse counts, filtered by
the digits already typed, and ordered by distance to the typed number (or
to the natural next number) then lexicographically.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from versemark.core.config import EngineConfig
from versemark.services.references.books import book_key, canonical_order
from versemark.services.references.content_resolver import ContentResolver
from versemark.services.references.errors import VerseSourceError
from versemark.services.references.reference_parser import (
    HEADER_PREFIX,
    Span,
    fold_items,
    split_book,
    split_items,
    tokenize,
)

logger = logging.getLogger(__name__)


@dataclass
class CompletionItem:
    label: str
    kind: str  # "book", "chapter" or "verse"
    insert_text: str
    replace_span: Span
    sort_text: str = ""
    detail: Optional[str] = None
    documentation: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "kind": self.kind,
            "insert_text": self.insert_text,
            "replace_span": list(self.replace_span),
            "sort_text": self.sort_text,
            "detail": self.detail,
            "documentation": self.documentation,
        }


@dataclass
class _Candidate:
    number: int
    kind: str
    natural: int
    chapter: int


def _rank(candidates: list[_Candidate], typed: str) -> list[_Candidate]:
    if typed:
        candidates = [c for c in candidates if str(c.number).startswith(typed)]
        target = int(typed)
        return sorted(candidates, key=lambda c: (abs(c.number - target), c.kind != "verse", str(c.number)))
    return sorted(candidates, key=lambda c: (abs(c.number - c.natural), c.kind != "verse", str(c.number)))


def _complete_books(typed: str, span: Span, resolver: ContentResolver, limit: int) -> list[CompletionItem]:
    try:
        books = resolver.source.list_books()
    except VerseSourceError as e:
        logger.warning(f"Book list unavailable for completion: {e}")
        return []
    key = book_key(typed)
    matches = [b for b in books if book_key(b).startswith(key)]
    matches.sort(key=lambda b: (canonical_order(b), b))
    return [
        CompletionItem(
            label=book,
            kind="book",
            insert_text=f"{book} ",
            replace_span=span,
            sort_text=f"{i:04d}",
        )
        for i, book in enumerate(matches[:limit])
    ]


def _chapter_candidates(book: str, resolver: ContentResolver, after: int = 0) -> list[_Candidate]:
    try:
        max_chapter = resolver.source.max_chapter(book)
    except VerseSourceError as e:
        logger.warning(f"Chapter count unavailable for {book}: {e}")
        return []
    if max_chapter is None:
        return []
    return [
        _Candidate(c, "chapter", after + 1, c)
        for c in range(after + 1, max_chapter + 1)
    ]


def _verse_candidates(book: str, chapter: int, resolver: ContentResolver, after: int = 0) -> list[_Candidate]:
    max_verse = resolver.max_verse(book, chapter)
    if max_verse is None:
        return []
    return [
        _Candidate(v, "verse", after + 1, chapter)
        for v in range(after + 1, max_verse + 1)
    ]


def _to_items(
    candidates: list[_Candidate],
    book: str,
    span: Span,
    resolver: ContentResolver,
    limit: int,
) -> list[CompletionItem]:
    items = []
    for candidate in candidates:
        if len(items) >= limit:
            break
        if candidate.kind == "chapter":
            items.append(CompletionItem(
                label=f"{candidate.number}:",
                kind="chapter",
                insert_text=f"{candidate.number}:",
                replace_span=span,
                sort_text=f"{len(items):04d}",
                detail=f"{book} {candidate.number}",
            ))
            continue
        try:
            text = resolver.source.lookup(book, candidate.chapter, candidate.number)
        except VerseSourceError as e:
            logger.debug(f"Skipping {book} {candidate.chapter}:{candidate.number}: {e}")
            continue
        if not text:
            continue
        items.append(CompletionItem(
            label=str(candidate.number),
            kind="verse",
            insert_text=str(candidate.number),
            replace_span=span,
            sort_text=f"{len(items):04d}",
            detail=f"{book} {candidate.chapter}:{candidate.number}",
            documentation=text,
        ))
    return items


def complete(
    line: str,
    character: int,
    line_start: int,
    resolver: ContentResolver,
    config: EngineConfig,
) -> list[CompletionItem]:
    """
    Completion proposals for a cursor in a header line.

    Args:
        line: Full text of the line the cursor is on
        character: Cursor column in that line
        line_start: Document offset of the line's first character
        resolver: Content resolver wrapping the verse source
        config: Request configuration

    Returns:
        CompletionItem list (possibly empty); spans are document offsets
    """
    prefix = line[:character]
    if not prefix.startswith(HEADER_PREFIX):
        return []
    limit = config.completion_max_items
    cursor = line_start + len(prefix)

    book, book_span, list_start = split_book(prefix, line_start)
    list_text = prefix[list_start:]

    # Still typing the book name (or nothing typed yet)
    if not book or (not list_text and not prefix[-1].isspace()):
        typed = prefix[len(HEADER_PREFIX):].lstrip()
        span = Span(cursor - len(typed), cursor)
        return _complete_books(typed, span, resolver, limit)

    canonical = resolver.canonical_book(book)
    if canonical is None:
        return _complete_books(book, Span(book_span.start, cursor), resolver, limit)

    tokens = tokenize(prefix, list_start, len(prefix), line_start)
    typed = ""
    span = Span(cursor, cursor)
    if tokens and tokens[-1].kind == "int" and tokens[-1].end == cursor:
        typed = tokens[-1].text
        span = Span(tokens[-1].start, tokens[-1].end)
        tokens = tokens[:-1]

    # Tokens of the item being typed, and the items before it
    last_sep = max((i for i, t in enumerate(tokens) if t.kind == "sep"), default=-1)
    current = tokens[last_sep + 1:]
    previous, _ = split_items(tokens[:last_sep + 1]) if last_sep >= 0 else ([], [])
    chapter, segments, _ = fold_items(previous)
    kinds = tuple(t.kind for t in current)

    if kinds == ():
        if last_sep < 0:
            candidates = _chapter_candidates(canonical, resolver)
        elif chapter is None:
            return []
        else:
            last_verse = 0
            if segments and segments[-1].chapter == chapter:
                last_verse = segments[-1].verse_end
            candidates = (
                _verse_candidates(canonical, chapter, resolver, after=last_verse)
                + _chapter_candidates(canonical, resolver, after=chapter)
            )
    elif kinds == ("int", "colon"):
        candidates = _verse_candidates(canonical, int(current[0].text), resolver)
    elif kinds == ("int", "colon", "int", "dash"):
        start = int(current[2].text)
        candidates = _verse_candidates(canonical, int(current[0].text), resolver, after=start)
    elif kinds == ("int", "dash") and chapter is not None:
        start = int(current[0].text)
        candidates = _verse_candidates(canonical, chapter, resolver, after=start)
    else:
        return []

    return _to_items(_rank(candidates, typed), canonical, span, resolver, limit)
