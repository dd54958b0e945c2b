# versemark/services/features/diagnostics.py
"""
Diagnostics for reference headers.

Parse errors are reported per malformed item. Resolution results are
reported according to the diagnostics mode:
- referenceOnly: only flag missing verses
- firstVerse: also show each segment's first verse
- allVerses: also show every verse, flagging the missing ones
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional

from versemark.core.config import DiagnosticsMode, EngineConfig
from versemark.services.references.books import canonical_name
from versemark.services.references.content_resolver import ResolvedReference
from versemark.services.references.document import HeaderParse
from versemark.services.references.reference_parser import Span, split_book

logger = logging.getLogger(__name__)


class Severity(IntEnum):
    # LSP numbering
    ERROR = 1
    WARNING = 2
    INFORMATION = 3
    HINT = 4


@dataclass
class Diagnostic:
    span: Span
    severity: Severity
    code: str
    message: str
    data: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "span": list(self.span),
            "severity": self.severity.name.lower(),
            "code": self.code,
            "message": self.message,
            "data": self.data,
        }


def _verse_label(book: str, chapter: int, verse: int) -> str:
    return f"{book} {chapter}:{verse}"


def _parse_error_severity(header: HeaderParse) -> Severity:
    """
    ERROR when the line names a known book, WARNING otherwise.

    Ordinary headings such as "### Week 3 notes" reach the parser too.
    """
    book, _, _ = split_book(header.text)
    return Severity.ERROR if book and canonical_name(book) else Severity.WARNING


def header_diagnostics(
    header: HeaderParse,
    resolved: Optional[ResolvedReference],
    config: EngineConfig,
) -> list[Diagnostic]:
    """Diagnostics for one header line and its resolved content."""
    severity = _parse_error_severity(header) if header.errors else Severity.ERROR
    out = [
        Diagnostic(
            span=Span(err.offset, err.end),
            severity=severity,
            code=err.kind.value,
            message=err.reason,
        )
        for err in header.errors
    ]

    if header.reference is None or resolved is None:
        return out

    reference = header.reference
    if resolved.unknown_book:
        out.append(Diagnostic(
            span=reference.book_span,
            severity=Severity.WARNING,
            code="UnknownBook",
            message=f"Unknown book {reference.book!r}",
            data={"book": reference.book},
        ))
        return out

    if resolved.failure is not None:
        out.append(Diagnostic(
            span=reference.source_span,
            severity=Severity.WARNING,
            code=resolved.failure.code,
            message=f"Verse content unavailable: {resolved.failure}",
        ))

    book = resolved.book or reference.book
    mode = config.diagnostics_mode

    for entry in resolved.segments:
        span = entry.segment.source_span
        missing = entry.missing
        if missing:
            labels = ", ".join(_verse_label(book, c, v) for c, v in missing)
            out.append(Diagnostic(
                span=span,
                severity=Severity.WARNING,
                code="MissingVerse",
                message=f"No content for {labels}",
                data={"missing": [list(pair) for pair in missing]},
            ))

        if mode == DiagnosticsMode.FIRST_VERSE:
            first = entry.first_verse
            if first is None:
                continue
            if first.is_missing:
                message = f"{_verse_label(book, first.chapter, first.verse)} (missing)"
            else:
                message = f"{_verse_label(book, first.chapter, first.verse)} {first.text}"
            out.append(Diagnostic(
                span=span,
                severity=Severity.INFORMATION,
                code="VerseContent",
                message=message,
                data={"chapter": first.chapter, "verse": first.verse, "missing": first.is_missing},
            ))

        elif mode == DiagnosticsMode.ALL_VERSES:
            if not entry.verses:
                continue
            lines = []
            for verse in entry.verses:
                text = "(missing)" if verse.is_missing else verse.text
                lines.append(f"[{verse.chapter}:{verse.verse}] {text}")
            out.append(Diagnostic(
                span=span,
                severity=Severity.INFORMATION,
                code="VerseContent",
                message="\n".join(lines),
                data={
                    "verses": [v.to_dict() for v in entry.verses],
                    "missing": [list(pair) for pair in missing],
                },
            ))

    return out


def document_diagnostics(pairs, config: EngineConfig) -> list[Diagnostic]:
    """
    Diagnostics for a whole document.

    Args:
        pairs: (HeaderParse, ResolvedReference | None) per header
        config: Request configuration
    """
    out = []
    for header, resolved in pairs:
        out.extend(header_diagnostics(header, resolved, config))
    logger.debug(f"{len(out)} diagnostics in {config.diagnostics_mode.value} mode")
    return out
