# versemark/services/reference_service.py
"""
Document-level reference service.

Owns the open documents and drives parse -> index -> resolve for each of
them. Every edit replaces a document's state wholesale and drops its cached
resolutions. Resolution is last-edit-wins: if a newer version arrives while
verses are being looked up, the partial result is thrown away and the
newest text is resolved instead.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from versemark.core.config import EngineConfig
from versemark.services.cache.resolution_cache import ResolutionCache
from versemark.services.features.code_actions import CodeAction, actions_for
from versemark.services.features.completion import CompletionItem, complete
from versemark.services.features.definition import DefinitionTarget, definition_at
from versemark.services.features.diagnostics import Diagnostic, document_diagnostics
from versemark.services.features.hover import HoverResult, hover_at
from versemark.services.features.symbols import DocumentSymbol, document_symbols
from versemark.services.references.content_resolver import ContentResolver, ResolvedReference
from versemark.services.references.document import HeaderParse, TextDocument, header_at, scan_document
from versemark.services.references.errors import ResolutionCancelled
from versemark.services.references.verse_source import VerseSource

logger = logging.getLogger(__name__)


class UnknownDocumentError(LookupError):
    """Raised when a request names a document that is not open."""
    pass


@dataclass
class DocumentState:
    """
    One version of an open document. Never mutated; edits replace it.

    Attributes:
        uri: Document identifier
        version: Editor-supplied version number
        text: Full text at this version
        headers: HeaderParse per candidate header line
    """
    uri: str
    version: int
    text: str
    headers: list = field(default_factory=list)
    doc: Optional[TextDocument] = None

    @classmethod
    def build(cls, uri: str, version: int, text: str) -> "DocumentState":
        return cls(uri, version, text, scan_document(text), TextDocument(text))


class ReferenceService:
    """
    Editor features for reference headers across open documents.

    Usage:
        service = ReferenceService(JsonBibleSource("/data/esv.json"))
        service.open_document("notes.md", 1, "### Ephesians 1:1-4\\n")

        for diag in service.diagnostics("notes.md"):
            print(diag.severity, diag.message)

        hover = service.hover_at_position("notes.md", 0, 15)
        print(hover.to_markdown())
    """

    def __init__(
        self,
        source: VerseSource,
        config: Optional[EngineConfig] = None,
        cache: Optional[ResolutionCache] = None,
    ):
        self.source = source
        self.config = config or EngineConfig()
        self.resolver = ContentResolver(source, self.config.resolver_timeout_seconds)
        self.cache = cache or ResolutionCache()
        self._documents: dict[str, DocumentState] = {}

    # ---- document lifecycle ----

    def open_document(self, uri: str, version: int, text: str) -> DocumentState:
        state = DocumentState.build(uri, version, text)
        self._documents[uri] = state
        self.cache.invalidate(uri)
        logger.debug(f"Opened {uri} v{version}: {len(state.headers)} header(s)")
        return state

    def update_document(self, uri: str, version: int, text: str) -> DocumentState:
        """
        Replace a document's text. Versions older than the current one are
        ignored and the current state is returned unchanged.
        """
        current = self._documents.get(uri)
        if current is not None and version < current.version:
            logger.debug(f"Ignoring {uri} v{version}; already at v{current.version}")
            return current
        return self.open_document(uri, version, text)

    def close_document(self, uri: str) -> bool:
        self.cache.invalidate(uri)
        return self._documents.pop(uri, None) is not None

    def get_document(self, uri: str) -> DocumentState:
        state = self._documents.get(uri)
        if state is None:
            raise UnknownDocumentError(uri)
        return state

    def is_current(self, uri: str, version: int) -> bool:
        state = self._documents.get(uri)
        return state is not None and state.version == version

    def offset_at(self, uri: str, line: int, character: int) -> int:
        return self.get_document(uri).doc.offset_at(line, character)

    # ---- resolution ----

    def _resolve_header(self, state: DocumentState, header: HeaderParse) -> Optional[ResolvedReference]:
        if header.reference is None:
            return None

        cached = self.cache.get(state.uri, state.version, header.line)
        if cached is not None:
            return cached

        resolved = self.resolver.resolve(
            header.reference,
            state.version,
            is_current=lambda: self.is_current(state.uri, state.version),
        )
        if self.is_current(state.uri, state.version):
            self.cache.put(state.uri, state.version, header.line, resolved)
        return resolved

    def _resolve(self, uri: str, select: Optional[Callable[[HeaderParse], bool]] = None) -> tuple:
        """
        Resolve headers of the newest version of a document.

        Returns:
            (state, [(HeaderParse, ResolvedReference | None), ...]) for one version
        """
        while True:
            state = self.get_document(uri)
            try:
                pairs = [
                    (header, self._resolve_header(state, header))
                    for header in state.headers
                    if select is None or select(header)
                ]
            except ResolutionCancelled:
                logger.debug(f"Resolution of {uri} v{state.version} cancelled; restarting")
                continue
            if self.is_current(uri, state.version):
                return state, pairs
            logger.debug(f"{uri} changed during resolution of v{state.version}; restarting")

    def resolved_headers(self, uri: str) -> list:
        _, pairs = self._resolve(uri)
        return pairs

    def _header_at(self, uri: str, offset: int) -> tuple:
        state, pairs = self._resolve(uri, select=lambda h: h.span.touches(offset))
        if not pairs:
            return state, None, None
        header, resolved = pairs[0]
        return state, header, resolved

    # ---- features ----

    def diagnostics(self, uri: str, config: Optional[EngineConfig] = None) -> list[Diagnostic]:
        return document_diagnostics(self.resolved_headers(uri), config or self.config)

    def hover(self, uri: str, offset: int, config: Optional[EngineConfig] = None) -> Optional[HoverResult]:
        state = self.get_document(uri)
        target = header_at(state.headers, offset)
        if target is None or target.index is None or target.index.segment_at(offset) is None:
            return None
        _, header, resolved = self._header_at(uri, offset)
        if header is None:
            return None
        return hover_at(header, resolved, offset, self.resolver, config or self.config)

    def completion(self, uri: str, offset: int, config: Optional[EngineConfig] = None) -> list[CompletionItem]:
        state = self.get_document(uri)
        line, character = state.doc.position_at(offset)
        line_start = state.doc.line_span(line).start
        return complete(
            state.doc.line_text(line), character, line_start, self.resolver, config or self.config
        )

    def definition(self, uri: str, offset: int) -> Optional[DefinitionTarget]:
        header = header_at(self.get_document(uri).headers, offset)
        if header is None:
            return None
        return definition_at(header, offset, self.resolver)

    def code_actions(self, uri: str, offset: int) -> list[CodeAction]:
        _, header, resolved = self._header_at(uri, offset)
        if header is None:
            return []
        return actions_for(header, resolved)

    def symbols(self, uri: str) -> list[DocumentSymbol]:
        return document_symbols(self.get_document(uri).headers, self.resolver)

    # ---- (line, character) helpers ----

    def hover_at_position(self, uri: str, line: int, character: int, config: Optional[EngineConfig] = None):
        return self.hover(uri, self.offset_at(uri, line, character), config)

    def completion_at_position(self, uri: str, line: int, character: int, config: Optional[EngineConfig] = None):
        return self.completion(uri, self.offset_at(uri, line, character), config)

    def definition_at_position(self, uri: str, line: int, character: int):
        return self.definition(uri, self.offset_at(uri, line, character))

    def code_actions_at_position(self, uri: str, line: int, character: int):
        return self.code_actions(uri, self.offset_at(uri, line, character))

    def stats(self) -> dict:
        return {
            "documents": len(self._documents),
            "source": self.source.name,
            "cache": self.cache.stats(),
        }
