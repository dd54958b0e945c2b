# versemark/services/references/formatter.py
"""
Renders references (and resolved verse content) back to text.

Output of format_header always parses back to an equal Reference:
a segment omits its chapter only when it matches the previous segment's
chapter, which is exactly what the parser's carry-over restores.
"""

from typing import Optional

from .content_resolver import ResolvedReference
from .reference_parser import HEADER_PREFIX, Reference, parse_header


def format_segment(segment, with_chapter: bool = True) -> str:
    verses = str(segment.verse_start)
    if segment.is_range:
        verses = f"{segment.verse_start}-{segment.verse_end}"
    if with_chapter:
        return f"{segment.chapter}:{verses}"
    return verses


def format_segments(segments) -> str:
    """
    Render segments as a reference list.

    (1,1,4), (1,5,7), (2,3,4) -> "1:1-4, 5-7, 2:3-4"
    """
    parts = []
    previous_chapter = None
    for segment in segments:
        parts.append(format_segment(segment, segment.chapter != previous_chapter))
        previous_chapter = segment.chapter
    return ", ".join(parts)


def format_label(reference: Reference) -> str:
    """Human-readable label, e.g. "Ephesians 1:1-4, 5-7"."""
    return f"{reference.book} {format_segments(reference.segments)}"


def format_header(reference: Reference) -> str:
    """Canonical header line, e.g. "### Ephesians 1:1-4, 5-7, 2:3-4"."""
    return f"{HEADER_PREFIX}{format_label(reference)}"


def normalize_header(line: str) -> str:
    """
    Re-render a header line in canonical form.

    Raises:
        ReferenceParseError: if the line does not parse
    """
    return format_header(parse_header(line))


def format_content(resolved: ResolvedReference, missing_placeholder: Optional[str] = None) -> str:
    """
    Render verse content as "[c:v] text" lines.

    Segments are separated by a blank line. Missing verses are omitted
    unless a placeholder is given.
    """
    blocks = []
    for entry in resolved.segments:
        lines = []
        for verse in entry.verses:
            if verse.is_missing:
                if missing_placeholder is None:
                    continue
                text = missing_placeholder
            else:
                text = verse.text
            lines.append(f"[{verse.chapter}:{verse.verse}] {text}")
        if lines:
            blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def format_block(resolved: ResolvedReference, missing_placeholder: Optional[str] = None) -> str:
    """Header line, a blank line, then the verse content."""
    header = format_header(resolved.reference)
    content = format_content(resolved, missing_placeholder)
    if not content:
        return header
    return f"{header}\n\n{content}"


def format_quote(resolved: ResolvedReference) -> str:
    """
    Render the reference as a one-line markdown quotation.

    > Paul, an apostle... to the saints... - Ephesians 1:1-2
    """
    texts = [
        verse.text
        for entry in resolved.segments
        for verse in entry.verses
        if not verse.is_missing
    ]
    return f"> {' '.join(texts)} - {format_label(resolved.reference)}"
