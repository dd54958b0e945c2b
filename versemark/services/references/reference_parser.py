# versemark/services/references/reference_parser.py
"""
Grammar parser for scripture reference headers.

Parses header lines of the form:
- "### Ephesians 1:1-4,5-7,2:3-4"
- "### 1 John 3:16"
- "### Romans 8:28, 31-39"

A reference item either names its chapter ("2:3-4") or reuses the chapter
of the item before it ("5-7"). The chapter is carried through the item list
as fold state, so parsing stays a pure function of the input line.
"""

import re
from dataclasses import dataclass, field
from functools import reduce
from typing import NamedTuple, Optional

from .errors import ParseErrorKind, ReferenceParseError

HEADER_PREFIX = "### "

# Book name: optional numbered prefix ("1 John"), then everything up to the first digit
_BOOK_RE = re.compile(r"[ \t]*((?:[1-3][ \t]+(?=[^\W\d_]))?[^\d]*)")

_TOKEN_RE = re.compile(
    r"(?P<int>\d+)"
    r"|(?P<sep>[,;])"
    r"|(?P<colon>:)"
    r"|(?P<dash>[-–])"
    r"|(?P<ws>[ \t]+)"
    r"|(?P<bad>.)"
)


class Span(NamedTuple):
    """Half-open [start, end) character offsets."""
    start: int
    end: int

    def contains(self, offset: int) -> bool:
        return self.start <= offset < self.end

    def touches(self, offset: int) -> bool:
        """Like contains, but also true for a cursor sitting right after the span."""
        return self.start <= offset <= self.end


class Token(NamedTuple):
    kind: str
    text: str
    start: int
    end: int


@dataclass(frozen=True)
class ReferenceSegment:
    """
    One comma-delimited unit of a reference: a verse or verse range in one chapter.

    Attributes:
        chapter: Chapter number (explicit or carried over)
        verse_start: First verse
        verse_end: Last verse (equal to verse_start for a single verse)
        source_span: Span of the whole item in the header
        verse_end_span: Span of the range's second number, if any
        explicit_chapter: Whether the chapter was written in this item
    """
    chapter: int
    verse_start: int
    verse_end: int
    source_span: Span = field(default=Span(0, 0), compare=False)
    verse_end_span: Optional[Span] = field(default=None, compare=False)
    explicit_chapter: bool = field(default=True, compare=False)

    @property
    def is_range(self) -> bool:
        return self.verse_end != self.verse_start

    @property
    def verses(self) -> range:
        return range(self.verse_start, self.verse_end + 1)

    @property
    def verse_count(self) -> int:
        return self.verse_end - self.verse_start + 1

    def contains_verse(self, chapter: int, verse: int) -> bool:
        return chapter == self.chapter and self.verse_start <= verse <= self.verse_end

    def as_tuple(self) -> tuple:
        return (self.chapter, self.verse_start, self.verse_end)

    def to_dict(self) -> dict:
        return {
            "chapter": self.chapter,
            "verse_start": self.verse_start,
            "verse_end": self.verse_end,
            "span": list(self.source_span),
        }


@dataclass(frozen=True)
class Reference:
    """
    A parsed header: book plus segments in textual order.

    Spans are positional metadata and are ignored by equality, so a
    reference compares equal to the re-parse of its formatted text.
    """
    book: str
    segments: tuple
    source_span: Span = field(default=Span(0, 0), compare=False)
    book_span: Span = field(default=Span(0, 0), compare=False)

    @property
    def first_segment(self) -> Optional[ReferenceSegment]:
        return self.segments[0] if self.segments else None

    def to_dict(self) -> dict:
        return {
            "book": self.book,
            "segments": [seg.to_dict() for seg in self.segments],
            "span": list(self.source_span),
            "book_span": list(self.book_span),
        }


class _Item(NamedTuple):
    tokens: tuple
    span: Span


class _FoldState(NamedTuple):
    chapter: Optional[int]
    segments: tuple
    errors: tuple


def split_book(line: str, base_offset: int = 0) -> tuple:
    """
    Split a header line into its book name and the offset where the
    reference list begins.

    Returns:
        (book, book_span, list_start) where list_start is an index into line.
        book is "" when the line has no book name.
    """
    match = _BOOK_RE.match(line, len(HEADER_PREFIX))
    raw = match.group(1)
    book = raw.rstrip()
    # Collapse internal runs of whitespace ("1  John" -> "1 John")
    book = re.sub(r"\s+", " ", book)
    book_start = match.start(1)
    book_span = Span(base_offset + book_start, base_offset + book_start + len(raw.rstrip()))
    return book, book_span, match.end()


def tokenize(line: str, start: int, end: int, base_offset: int = 0) -> list[Token]:
    """Tokenize line[start:end], dropping whitespace. Offsets include base_offset."""
    tokens = []
    for match in _TOKEN_RE.finditer(line, start, end):
        kind = match.lastgroup
        if kind == "ws":
            continue
        tokens.append(Token(
            kind,
            match.group(),
            base_offset + match.start(),
            base_offset + match.end(),
        ))
    return tokens


def split_items(tokens: list[Token]) -> tuple:
    """
    Split tokens at separators.

    Returns:
        (items, errors) where errors reports empty items.
    """
    groups = [[]]
    seps = []
    for tok in tokens:
        if tok.kind == "sep":
            seps.append(tok)
            groups.append([])
        else:
            groups[-1].append(tok)

    items = []
    errors = []
    for i, group in enumerate(groups):
        if group:
            items.append(_make_item(group))
            continue
        if i < len(seps):
            sep = seps[i]
            reason = "empty reference item"
        elif groups[i - 1]:
            sep = seps[-1]
            reason = "trailing separator with no reference item after it"
        else:
            continue
        errors.append(ReferenceParseError(
            ParseErrorKind.MALFORMED_HEADER, sep.start, reason, sep.end
        ))
    return items, errors


def _make_item(tokens: list[Token]) -> _Item:
    return _Item(tuple(tokens), Span(tokens[0].start, tokens[-1].end))


def _number(tok: Token, what: str) -> int:
    value = int(tok.text)
    if value < 1:
        raise ReferenceParseError(
            ParseErrorKind.MALFORMED_HEADER,
            tok.start,
            f"{what} numbers start at 1",
            tok.end,
        )
    return value


def _verse_range(start_tok: Token, end_tok: Optional[Token]) -> tuple:
    first = _number(start_tok, "verse")
    if end_tok is None:
        return first, first
    last = _number(end_tok, "verse")
    if last < first:
        raise ReferenceParseError(
            ParseErrorKind.INVALID_RANGE,
            start_tok.start,
            f"range ends at verse {last}, before it starts at verse {first}",
            end_tok.end,
        )
    return first, last


def _interpret_item(item: _Item, chapter: Optional[int]) -> tuple:
    """
    Interpret one reference item given the chapter carried so far.

    Returns:
        (segment, chapter_after_item)

    Raises:
        ReferenceParseError
    """
    toks = item.tokens
    kinds = tuple(t.kind for t in toks)

    for tok in toks:
        if tok.kind == "bad":
            raise ReferenceParseError(
                ParseErrorKind.MALFORMED_HEADER,
                tok.start,
                f"unexpected character {tok.text!r}",
                tok.end,
            )

    if kinds in (("int", "colon", "int"), ("int", "colon", "int", "dash", "int")):
        chapter = _number(toks[0], "chapter")
        end_tok = toks[4] if len(toks) == 5 else None
        first, last = _verse_range(toks[2], end_tok)
        segment = ReferenceSegment(
            chapter,
            first,
            last,
            item.span,
            Span(end_tok.start, end_tok.end) if end_tok else None,
            True,
        )
        return segment, chapter

    if kinds == ("int", "colon"):
        raise ReferenceParseError(
            ParseErrorKind.UNSUPPORTED_BARE_CHAPTER,
            item.span.start,
            f"chapter {toks[0].text} has no verse; whole-chapter references are not supported",
            item.span.end,
        )

    if kinds in (("int",), ("int", "dash", "int")):
        if chapter is None:
            if len(toks) == 1:
                raise ReferenceParseError(
                    ParseErrorKind.UNSUPPORTED_BARE_CHAPTER,
                    item.span.start,
                    f"'{toks[0].text}' reads as a whole chapter, which is not supported; "
                    f"write chapter:verse",
                    item.span.end,
                )
            raise ReferenceParseError(
                ParseErrorKind.DANGLING_VERSE_RANGE,
                item.span.start,
                "verse range has no chapter; the first item must include one",
                item.span.end,
            )
        end_tok = toks[2] if len(toks) == 3 else None
        first, last = _verse_range(toks[0], end_tok)
        segment = ReferenceSegment(
            chapter,
            first,
            last,
            item.span,
            Span(end_tok.start, end_tok.end) if end_tok else None,
            False,
        )
        return segment, chapter

    if kinds.count("colon") > 1 or ("dash" in kinds and "colon" in kinds[kinds.index("dash"):]):
        raise ReferenceParseError(
            ParseErrorKind.MALFORMED_HEADER,
            item.span.start,
            "cross-chapter ranges are not supported",
            item.span.end,
        )

    raise ReferenceParseError(
        ParseErrorKind.MALFORMED_HEADER,
        item.span.start,
        "expected 'chapter:verse', 'chapter:verse-verse', 'verse' or 'verse-verse'",
        item.span.end,
    )


def _explicit_chapter(item: _Item) -> Optional[int]:
    """Chapter written at the front of an item, if any."""
    toks = item.tokens
    if len(toks) >= 2 and toks[0].kind == "int" and toks[1].kind == "colon":
        value = int(toks[0].text)
        return value if value >= 1 else None
    return None


def _fold_item(state: _FoldState, item: _Item) -> _FoldState:
    try:
        segment, chapter = _interpret_item(item, state.chapter)
    except ReferenceParseError as e:
        # An item that names its chapter still moves the carried chapter
        chapter = _explicit_chapter(item) or state.chapter
        return _FoldState(chapter, state.segments, state.errors + (e,))
    return _FoldState(chapter, state.segments + (segment,), state.errors)


def fold_items(items) -> tuple:
    """
    Interpret items left to right, carrying the chapter between them.

    Returns:
        (chapter, segments, errors) after the last item
    """
    state = reduce(_fold_item, items, _FoldState(None, (), ()))
    return state.chapter, state.segments, list(state.errors)


def scan_header(line: str, base_offset: int = 0) -> tuple:
    """
    Parse a header line, collecting one error per malformed item.

    Args:
        line: The header line (a trailing newline is ignored)
        base_offset: Offset of the line's first character in its document

    Returns:
        (reference, errors). reference is None whenever errors is non-empty.
    """
    line = line.rstrip("\r\n")
    line_span = Span(base_offset, base_offset + len(line))
    content_end = len(line.rstrip())

    if not line.startswith(HEADER_PREFIX):
        return None, [ReferenceParseError(
            ParseErrorKind.MALFORMED_HEADER,
            base_offset,
            "reference headers start with '### '",
            line_span.end,
        )]

    book, book_span, list_start = split_book(line, base_offset)
    if not book:
        return None, [ReferenceParseError(
            ParseErrorKind.MALFORMED_HEADER,
            base_offset + len(HEADER_PREFIX),
            "missing book name",
            line_span.end,
        )]

    tokens = tokenize(line, list_start, content_end, base_offset)
    if not tokens:
        return None, [ReferenceParseError(
            ParseErrorKind.MALFORMED_HEADER,
            base_offset + content_end,
            f"missing chapter and verse after {book!r}",
            line_span.end,
        )]

    items, errors = split_items(tokens)
    _, segments, item_errors = fold_items(items)
    errors = sorted(errors + item_errors, key=lambda e: e.offset)

    if errors:
        return None, errors

    return Reference(book, segments, line_span, book_span), []


def parse_header(line: str, base_offset: int = 0) -> Reference:
    """
    Parse a header line into a Reference.

    Args:
        line: e.g. "### Ephesians 1:1-4,5-7,2:3-4"
        base_offset: Offset of the line's first character in its document

    Returns:
        Reference

    Raises:
        ReferenceParseError: for the first malformed part of the line
    """
    reference, errors = scan_header(line, base_offset)
    if errors:
        raise errors[0]
    return reference


def is_valid_header(line: str) -> bool:
    """Check if a line is a well-formed reference header."""
    _, errors = scan_header(line)
    return not errors
