# versemark/services/features/code_actions.py
"""
Code actions offered on a reference header:
- Normalize reference: rewrite the header in canonical form
- Insert verse content: add "[c:v] text" lines below the header
- Replace with quotation: turn the header into a one-line quote
"""

from dataclasses import dataclass, field
from typing import Optional

from versemark.services.references.content_resolver import ResolvedReference
from versemark.services.references.document import HeaderParse
from versemark.services.references.formatter import format_content, format_header, format_quote
from versemark.services.references.reference_parser import Span


@dataclass
class TextEdit:
    span: Span
    new_text: str

    def to_dict(self) -> dict:
        return {"span": list(self.span), "new_text": self.new_text}


@dataclass
class CodeAction:
    title: str
    kind: str
    edits: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "kind": self.kind,
            "edits": [e.to_dict() for e in self.edits],
        }


def actions_for(header: HeaderParse, resolved: Optional[ResolvedReference]) -> list[CodeAction]:
    if header.reference is None:
        return []
    actions = []

    normalized = format_header(header.reference)
    if normalized != header.text:
        actions.append(CodeAction(
            title="Normalize reference",
            kind="quickfix",
            edits=[TextEdit(header.span, normalized)],
        ))

    if resolved is None or resolved.unknown_book:
        return actions
    if not any(not v.is_missing for entry in resolved.segments for v in entry.verses):
        return actions

    actions.append(CodeAction(
        title="Insert verse content",
        kind="refactor.rewrite",
        edits=[TextEdit(Span(header.span.end, header.span.end), f"\n\n{format_content(resolved)}")],
    ))
    actions.append(CodeAction(
        title="Replace with quotation",
        kind="refactor.rewrite",
        edits=[TextEdit(header.span, format_quote(resolved))],
    ))
    return actions
