# versemark/services/references/segment_index.py
"""
Position index over the segments of one parsed header.

Maps a character offset to the segment it falls in (O(log n) via bisect over
the sorted segment spans) and maps each segment to the body lines that carry
its verse content. Rebuilt from scratch for every parse; never mutated.
"""

import re
from bisect import bisect_left, bisect_right
from typing import Optional

from .reference_parser import Reference, ReferenceSegment, Span

_VERSE_LINE_RE = re.compile(r"^\[(\d+):(\d+)\][^\r\n]*", re.MULTILINE)


class SegmentIndex:
    """
    Lookup table for one Reference.

    Usage:
        index = SegmentIndex(reference, body_text, body_offset)
        segment = index.segment_at(offset)   # None over the book or separators
        span = index.content_span_of(segment)
    """

    def __init__(self, reference: Reference, body_text: str = "", body_offset: int = 0):
        self.reference = reference
        order = sorted(
            range(len(reference.segments)),
            key=lambda i: reference.segments[i].source_span.start,
        )
        self._segments = [reference.segments[i] for i in order]
        self._starts = [seg.source_span.start for seg in self._segments]
        self._content_spans = [
            _content_span(seg, body_text, body_offset) for seg in self._segments
        ]

    def __len__(self) -> int:
        return len(self._segments)

    def _position_at(self, offset: int) -> Optional[int]:
        pos = bisect_right(self._starts, offset) - 1
        if pos < 0:
            return None
        if self._segments[pos].source_span.contains(offset):
            return pos
        return None

    def _position_of(self, segment: ReferenceSegment) -> Optional[int]:
        start = segment.source_span.start
        pos = bisect_left(self._starts, start)
        if pos < len(self._starts) and self._starts[pos] == start and self._segments[pos] == segment:
            return pos
        return None

    def segment_at(self, offset: int) -> Optional[ReferenceSegment]:
        """Segment whose item contains offset, or None."""
        pos = self._position_at(offset)
        return self._segments[pos] if pos is not None else None

    def verse_at(self, offset: int) -> Optional[tuple]:
        """
        (segment, verse) under the cursor.

        The verse is the range end when the cursor sits on the range's
        second number, otherwise the segment's first verse.
        """
        segment = self.segment_at(offset)
        if segment is None:
            return None
        if segment.verse_end_span is not None and segment.verse_end_span.contains(offset):
            return segment, segment.verse_end
        return segment, segment.verse_start

    def span_of(self, segment: ReferenceSegment) -> Optional[Span]:
        """Display span of a segment in the header."""
        return segment.source_span if self._position_of(segment) is not None else None

    def content_span_of(self, segment: ReferenceSegment) -> Optional[Span]:
        """Span of the body lines holding this segment's verses, if present."""
        pos = self._position_of(segment)
        return self._content_spans[pos] if pos is not None else None


def _content_span(segment: ReferenceSegment, body_text: str, body_offset: int) -> Optional[Span]:
    start = end = None
    for match in _VERSE_LINE_RE.finditer(body_text):
        chapter, verse = int(match.group(1)), int(match.group(2))
        if not segment.contains_verse(chapter, verse):
            continue
        if start is None:
            start = match.start()
        end = match.end()
    if start is None:
        return None
    return Span(body_offset + start, body_offset + end)
