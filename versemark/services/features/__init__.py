"""
Feature Services

Editor features computed from parsed and resolved reference headers.
None of them keep state between calls.
"""

from .code_actions import CodeAction, TextEdit, actions_for
from .completion import CompletionItem, complete
from .definition import DefinitionTarget, definition_at
from .diagnostics import Diagnostic, Severity, document_diagnostics, header_diagnostics
from .hover import HoverResult, hover_at
from .symbols import DocumentSymbol, document_symbols

__all__ = [
    "CodeAction",
    "TextEdit",
    "actions_for",
    "CompletionItem",
    "complete",
    "DefinitionTarget",
    "definition_at",
    "Diagnostic",
    "Severity",
    "document_diagnostics",
    "header_diagnostics",
    "HoverResult",
    "hover_at",
    "DocumentSymbol",
    "document_symbols",
]
