# versemark/services/features/hover.py
"""Hover: verse text for the segment under the cursor."""

from dataclasses import dataclass, field
from typing import Optional

from versemark.core.config import EngineConfig
from versemark.services.references.content_resolver import (
    MISSING,
    ContentResolver,
    ResolvedReference,
    VerseText,
)
from versemark.services.references.document import HeaderParse
from versemark.services.references.reference_parser import ReferenceSegment, Span


@dataclass
class HoverResult:
    """
    Attributes:
        span: Span of the hovered segment in the header
        segment: The hovered segment
        verse: The hovered verse number
        heading: "### Book chapter" line, if enabled
        verses: Context window in verse order
        placeholder: Text shown for missing verses (None omits them)
    """
    span: Span
    segment: ReferenceSegment
    verse: int
    heading: Optional[str] = None
    verses: list = field(default_factory=list)
    placeholder: Optional[str] = None

    def to_markdown(self) -> str:
        lines = []
        for entry in self.verses:
            if entry.is_missing:
                if self.placeholder is None:
                    continue
                text = self.placeholder
            else:
                text = entry.text
            lines.append(f"[{entry.chapter}:{entry.verse}] {text}")
        body = "\n".join(lines)
        if self.heading:
            return f"{self.heading}\n\n{body}" if body else self.heading
        return body

    def to_dict(self) -> dict:
        return {
            "span": list(self.span),
            "segment": self.segment.to_dict(),
            "verse": self.verse,
            "heading": self.heading,
            "verses": [v.to_dict() for v in self.verses],
            "markdown": self.to_markdown(),
        }


def hover_at(
    header: HeaderParse,
    resolved: Optional[ResolvedReference],
    offset: int,
    resolver: ContentResolver,
    config: EngineConfig,
) -> Optional[HoverResult]:
    """
    Hover for a cursor offset in a header line.

    The window is the hovered verse plus verse_count verses on each side,
    clipped to the chapter. Verses inside the segment come from the
    resolution; the rest are looked up directly.
    """
    if header.index is None or resolved is None:
        return None
    hit = header.index.verse_at(offset)
    if hit is None:
        return None
    segment, verse = hit
    context = config.hover_context
    chapter = segment.chapter

    first = max(1, verse - context.verse_count)
    last = verse + context.verse_count
    if resolved.book is not None and context.verse_count:
        max_verse = resolver.max_verse(resolved.book, chapter)
        if max_verse is not None:
            last = min(last, max_verse)
    window = range(first, max(last, verse) + 1)

    resolved_segment = resolved.segment_for(segment)
    inside = {}
    if resolved_segment is not None:
        inside = {entry.verse: entry for entry in resolved_segment.verses}

    outside = [v for v in window if not segment.verse_start <= v <= segment.verse_end]
    looked_up = {}
    if outside and resolved.book is not None:
        looked_up = {
            entry.verse: entry
            for entry in resolver.lookup_window(resolved.book, chapter, outside)
        }

    verses = []
    for v in window:
        entry = inside.get(v) or looked_up.get(v)
        verses.append(entry or VerseText(chapter, v, MISSING))

    heading = None
    if context.show_chapter_heading:
        heading = f"### {resolved.book or header.reference.book} {chapter}"

    return HoverResult(
        span=segment.source_span,
        segment=segment,
        verse=verse,
        heading=heading,
        verses=verses,
        placeholder=config.missing_placeholder if context.show_missing_as_placeholder else None,
    )
