# tests/test_diagnostics.py
"""
Tests for diagnostics.py - parse errors, missing verses and the three modes.
"""

from versemark.core.config import DiagnosticsMode, EngineConfig
from versemark.services.features import Severity
from versemark.services.reference_service import ReferenceService
from versemark.services.references import InMemoryVerseSource, Span, VerseSourceError

from conftest import EPHESIANS, ephesians_verses

DOC = "### Ephesians 1:3-5, 7\n"


def _service(source, mode):
    return ReferenceService(source, EngineConfig(diagnostics_mode=DiagnosticsMode(mode)))


def _by_severity(diagnostics, severity):
    return [d for d in diagnostics if d.severity == severity]


def test_reference_only_flags_missing(gappy_source):
    service = _service(gappy_source, "referenceOnly")
    service.open_document("doc.md", 1, DOC)
    diagnostics = service.diagnostics("doc.md")

    assert len(diagnostics) == 1
    warning = diagnostics[0]
    assert warning.severity == Severity.WARNING
    assert warning.code == "MissingVerse"
    assert warning.span == Span(14, 19)
    assert "Ephesians 1:4" in warning.message
    assert warning.data["missing"] == [[1, 4]]


def test_first_verse_mode(gappy_source):
    service = _service(gappy_source, "firstVerse")
    service.open_document("doc.md", 1, DOC)
    diagnostics = service.diagnostics("doc.md")

    assert len(_by_severity(diagnostics, Severity.WARNING)) == 1
    info = _by_severity(diagnostics, Severity.INFORMATION)
    assert [d.message for d in info] == [
        "Ephesians 1:3 Blessed be the God and Father of our Lord Jesus Christ,",
        "Ephesians 1:7 Ephesians 1:7 text.",
    ]
    assert info[1].span == Span(21, 22)


def test_first_verse_missing_is_flagged(gappy_source):
    service = _service(gappy_source, "firstVerse")
    service.open_document("doc.md", 1, "### Ephesians 1:4\n")
    info = _by_severity(service.diagnostics("doc.md"), Severity.INFORMATION)

    assert info[0].message == "Ephesians 1:4 (missing)"
    assert info[0].data["missing"]


def test_all_verses_mode(gappy_source):
    """Every verse is reported; the missing one is flagged, the rest resolve."""
    service = _service(gappy_source, "allVerses")
    service.open_document("doc.md", 1, DOC)
    info = _by_severity(service.diagnostics("doc.md"), Severity.INFORMATION)

    assert len(info) == 2
    lines = info[0].message.splitlines()
    assert lines == [
        "[1:3] Blessed be the God and Father of our Lord Jesus Christ,",
        "[1:4] (missing)",
        "[1:5] Ephesians 1:5 text.",
    ]
    assert info[0].data["missing"] == [[1, 4]]
    assert [v["missing"] for v in info[0].data["verses"]] == [False, True, False]
    assert info[1].data["missing"] == []


def test_request_config_overrides_default(gappy_source):
    service = _service(gappy_source, "allVerses")
    service.open_document("doc.md", 1, DOC)
    diagnostics = service.diagnostics(
        "doc.md", EngineConfig(diagnostics_mode=DiagnosticsMode.REFERENCE_ONLY)
    )
    assert _by_severity(diagnostics, Severity.INFORMATION) == []


def test_parse_errors_are_per_header(source):
    """A malformed header does not affect its neighbours."""
    service = _service(source, "firstVerse")
    service.open_document("doc.md", 1, "### Ephesians 1:5-3\n### Ephesians 1:1\n")
    diagnostics = service.diagnostics("doc.md")

    errors = _by_severity(diagnostics, Severity.ERROR)
    assert len(errors) == 1
    assert errors[0].code == "InvalidRange"
    assert errors[0].span == Span(16, 19)

    info = _by_severity(diagnostics, Severity.INFORMATION)
    assert len(info) == 1
    assert info[0].message.startswith("Ephesians 1:1 Paul")


def test_parse_errors_on_ordinary_headings_are_warnings(source):
    service = _service(source, "referenceOnly")
    service.open_document("doc.md", 1, "### Week 3 notes\n### Psalms 23\n")
    diagnostics = service.diagnostics("doc.md")

    week = [d for d in diagnostics if d.span.start < 17]
    psalms = [d for d in diagnostics if d.span.start >= 17]
    assert week and all(d.severity == Severity.WARNING for d in week)
    assert [d.severity for d in psalms] == [Severity.ERROR]
    assert psalms[0].code == "UnsupportedBareChapter"


def test_unknown_book_warning(source):
    service = _service(source, "firstVerse")
    service.open_document("doc.md", 1, "### Hezekiah 1:1\n")
    diagnostics = service.diagnostics("doc.md")

    assert len(diagnostics) == 1
    assert diagnostics[0].severity == Severity.WARNING
    assert diagnostics[0].code == "UnknownBook"
    assert diagnostics[0].span == Span(4, 12)


def test_source_failure_warning():
    class DownSource(InMemoryVerseSource):
        def lookup(self, book, chapter, verse):
            raise VerseSourceError("connection refused")

    source = DownSource(ephesians_verses(), structure={"Ephesians": EPHESIANS})
    service = _service(source, "firstVerse")
    service.open_document("doc.md", 1, "### Ephesians 1:1-2\n")
    diagnostics = service.diagnostics("doc.md")

    assert [d.code for d in diagnostics] == ["resolver_failure"]
    assert diagnostics[0].severity == Severity.WARNING
    assert "connection refused" in diagnostics[0].message


def test_to_dict(gappy_source):
    service = _service(gappy_source, "referenceOnly")
    service.open_document("doc.md", 1, DOC)
    data = service.diagnostics("doc.md")[0].to_dict()
    assert data["severity"] == "warning"
    assert data["span"] == [14, 19]
