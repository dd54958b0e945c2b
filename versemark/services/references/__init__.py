# versemark/services/references/__init__.py
"""
Reference parsing and content services for versemark.

This package provides:
- parse_header / scan_header: Parse "### Book c:v-v, v" header lines
- Reference, ReferenceSegment: Parsed header model
- scan_document: Find headers and their body blocks in a document
- SegmentIndex: Offset -> segment lookup for a parsed header
- VerseSource: Verse content interface, with in-memory, JSON, SWORD and HTTP sources
- ContentResolver: Fill references with verse text
- format_header / format_content: Render references back to text
"""

from .errors import (
    ParseErrorKind,
    ReferenceParseError,
    VerseSourceError,
    VerseSourceTimeout,
    ResolverError,
    ResolverFailure,
    ResolverTimeout,
    ResolutionCancelled,
)
from .reference_parser import (
    HEADER_PREFIX,
    Span,
    Reference,
    ReferenceSegment,
    parse_header,
    scan_header,
    is_valid_header,
)
from .segment_index import SegmentIndex
from .document import HeaderParse, TextDocument, scan_document, header_at
from .books import BOOK_TO_OSIS, CANONICAL_BOOKS, canonical_name
from .verse_source import VerseSource, InMemoryVerseSource
from .json_bible_source import JsonBibleSource
from .sword_source import SwordVerseSource
from .http_source import HttpVerseSource
from .content_resolver import (
    MISSING,
    VerseText,
    ResolvedSegment,
    ResolvedReference,
    ContentResolver,
)
from .formatter import (
    format_segments,
    format_label,
    format_header,
    format_content,
    format_block,
    format_quote,
    normalize_header,
)

__all__ = [
    # Errors
    "ParseErrorKind",
    "ReferenceParseError",
    "VerseSourceError",
    "VerseSourceTimeout",
    "ResolverError",
    "ResolverFailure",
    "ResolverTimeout",
    "ResolutionCancelled",
    # Parsing
    "HEADER_PREFIX",
    "Span",
    "Reference",
    "ReferenceSegment",
    "parse_header",
    "scan_header",
    "is_valid_header",
    "SegmentIndex",
    "HeaderParse",
    "TextDocument",
    "scan_document",
    "header_at",
    # Books
    "BOOK_TO_OSIS",
    "CANONICAL_BOOKS",
    "canonical_name",
    # Sources
    "VerseSource",
    "InMemoryVerseSource",
    "JsonBibleSource",
    "SwordVerseSource",
    "HttpVerseSource",
    # Resolution
    "MISSING",
    "VerseText",
    "ResolvedSegment",
    "ResolvedReference",
    "ContentResolver",
    # Formatting
    "format_segments",
    "format_label",
    "format_header",
    "format_content",
    "format_block",
    "format_quote",
    "normalize_header",
]
