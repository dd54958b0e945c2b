# versemark/services/features/symbols.py
"""Document symbols: one entry per well-formed reference header."""

from dataclasses import dataclass, replace
from typing import Optional

from versemark.services.references.content_resolver import ContentResolver
from versemark.services.references.formatter import format_label
from versemark.services.references.reference_parser import Span


@dataclass
class DocumentSymbol:
    name: str
    line: int
    span: Span
    kind: str = "key"

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "kind": self.kind,
            "line": self.line,
            "span": list(self.span),
        }


def document_symbols(headers, resolver: Optional[ContentResolver] = None) -> list[DocumentSymbol]:
    """
    Symbols for the parsed headers of a document, in document order.

    Headers with parse errors are skipped. With a resolver, the symbol name
    uses the source's spelling of the book ("Eph 1:1" -> "Ephesians 1:1").
    """
    symbols = []
    for header in headers:
        reference = header.reference
        if reference is None:
            continue
        if resolver is not None:
            book = resolver.canonical_book(reference.book)
            if book:
                reference = replace(reference, book=book)
        symbols.append(DocumentSymbol(format_label(reference), header.line, header.span))
    return symbols
