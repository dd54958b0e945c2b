# versemark/services/references/errors.py
"""
Error taxonomy for reference parsing and content resolution.

Parse errors abort interpretation of a single header only. Resolver errors
are recorded on the resolved reference and surfaced as diagnostics; they
never propagate out of the feature providers.
"""

from enum import Enum
from typing import Optional


class ParseErrorKind(str, Enum):
    """Why a header line could not be interpreted."""
    INVALID_RANGE = "InvalidRange"
    DANGLING_VERSE_RANGE = "DanglingVerseRange"
    UNSUPPORTED_BARE_CHAPTER = "UnsupportedBareChapter"
    MALFORMED_HEADER = "MalformedHeader"


class ReferenceParseError(ValueError):
    """
    Raised when a header line does not match the reference grammar.

    Attributes:
        kind: ParseErrorKind
        offset: Offset where the offending token starts
        end: Offset just past the offending text
        reason: Human-readable explanation
    """

    def __init__(self, kind: ParseErrorKind, offset: int, reason: str, end: Optional[int] = None):
        super().__init__(f"{kind.value} at {offset}: {reason}")
        self.kind = kind
        self.offset = offset
        self.end = end if end is not None else offset + 1
        self.reason = reason

    def __eq__(self, other):
        if not isinstance(other, ReferenceParseError):
            return NotImplemented
        return (self.kind, self.offset, self.end, self.reason) == (
            other.kind, other.offset, other.end, other.reason
        )

    def __hash__(self):
        return hash((self.kind, self.offset, self.end, self.reason))

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "offset": self.offset,
            "end": self.end,
            "reason": self.reason,
        }


class VerseSourceError(Exception):
    """Raised by a verse source when it cannot answer (unreachable, corrupt)."""
    pass


class VerseSourceTimeout(VerseSourceError):
    """Raised by a verse source when a lookup timed out."""
    pass


class ResolverError(Exception):
    """Base class for content-resolution failures."""
    code = "resolver_error"


class ResolverFailure(ResolverError):
    """The verse source failed while resolving a reference."""
    code = "resolver_failure"


class ResolverTimeout(ResolverError):
    """Resolution exceeded its time budget."""
    code = "resolver_timeout"


class ResolutionCancelled(Exception):
    """A newer document version arrived while resolution was in flight."""
    pass
