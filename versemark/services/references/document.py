# versemark/services/references/document.py
"""
Document scanning: finds reference headers and their body blocks.

Each "### " line containing a digit is a candidate header and is parsed on
its own, so a malformed header never affects its neighbours. "### " lines
without digits are ordinary markdown headings and are skipped.
"""

import logging
import re
from bisect import bisect_right
from dataclasses import dataclass, field
from typing import Optional

from .reference_parser import HEADER_PREFIX, Reference, Span, scan_header
from .segment_index import SegmentIndex

logger = logging.getLogger(__name__)


@dataclass
class HeaderParse:
    """
    One candidate header line in a document.

    Attributes:
        line: Zero-based line number
        span: Span of the header line (newline excluded)
        text: Header line text
        reference: Parsed Reference, or None if the line has errors
        errors: ReferenceParseError per malformed item
        index: SegmentIndex for the reference (None when unparsed)
        body_span: Span of the lines after the header, up to the next heading
    """
    line: int
    span: Span
    text: str
    reference: Optional[Reference]
    errors: list = field(default_factory=list)
    index: Optional[SegmentIndex] = None
    body_span: Span = Span(0, 0)

    @property
    def ok(self) -> bool:
        return self.reference is not None


class TextDocument:
    """Offset <-> (line, character) conversion for a block of text."""

    def __init__(self, text: str):
        self.text = text
        self._line_starts = [0] + [m.end() for m in re.finditer(r"\n", text)]

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def line_span(self, line: int) -> Span:
        """Span of a line without its line ending."""
        start = self._line_starts[line]
        if line + 1 < len(self._line_starts):
            end = self._line_starts[line + 1] - 1
            if end > start and self.text[end - 1] == "\r":
                end -= 1
        else:
            end = len(self.text)
        return Span(start, end)

    def line_text(self, line: int) -> str:
        span = self.line_span(line)
        return self.text[span.start:span.end]

    def offset_at(self, line: int, character: int) -> int:
        """Offset of a position, clamped to the document and to the line."""
        if line < 0:
            return 0
        if line >= len(self._line_starts):
            return len(self.text)
        span = self.line_span(line)
        return min(span.start + max(character, 0), span.end)

    def position_at(self, offset: int) -> tuple:
        """(line, character) of an offset."""
        offset = max(0, min(offset, len(self.text)))
        line = bisect_right(self._line_starts, offset) - 1
        return line, offset - self._line_starts[line]


def is_header_line(line: str) -> bool:
    """True for '### ' lines that carry a chapter/verse list."""
    return line.startswith(HEADER_PREFIX) and any(c.isdigit() for c in line)


def _is_heading(line: str) -> bool:
    return line.startswith("#")


def scan_document(text: str) -> list[HeaderParse]:
    """
    Find and parse every reference header in a document.

    Args:
        text: Full document text

    Returns:
        HeaderParse per candidate header, in document order
    """
    doc = TextDocument(text)
    headers = []
    header_lines = []

    for line_no in range(doc.line_count):
        if is_header_line(doc.line_text(line_no)):
            header_lines.append(line_no)

    for line_no in header_lines:
        span = doc.line_span(line_no)
        line_text = text[span.start:span.end]

        # Body runs until the next heading of any level
        body_end_line = line_no + 1
        while body_end_line < doc.line_count and not _is_heading(doc.line_text(body_end_line)):
            body_end_line += 1
        if line_no + 1 < doc.line_count:
            body_start = doc.line_span(line_no + 1).start
            body_end = doc.line_span(body_end_line - 1).end if body_end_line > line_no + 1 else body_start
        else:
            body_start = body_end = span.end
        body_span = Span(body_start, max(body_start, body_end))

        reference, errors = scan_header(line_text, span.start)
        index = None
        if reference is not None:
            index = SegmentIndex(reference, text[body_span.start:body_span.end], body_span.start)
        else:
            logger.debug(f"Header on line {line_no} has {len(errors)} parse error(s)")

        headers.append(HeaderParse(
            line=line_no,
            span=span,
            text=line_text,
            reference=reference,
            errors=errors,
            index=index,
            body_span=body_span,
        ))

    return headers


def header_at(headers: list[HeaderParse], offset: int) -> Optional[HeaderParse]:
    """Header whose line contains offset (a cursor at line end counts)."""
    for header in headers:
        if header.span.touches(offset):
            return header
    return None
