# tests/test_config.py
"""
Tests for core/config.py - YAML loading, defaults and source selection.
"""

import tempfile
from pathlib import Path

import pytest

from versemark.core import config as config_module
from versemark.core.config import (
    DiagnosticsMode,
    EngineConfig,
    build_source,
    get_default_config,
    reload_settings,
)
from versemark.services.references import InMemoryVerseSource, JsonBibleSource


def test_from_dict_defaults():
    config = EngineConfig.from_dict({})
    assert config.diagnostics_mode == DiagnosticsMode.FIRST_VERSE
    assert config.hover_context.verse_count == 0
    assert config.hover_context.show_chapter_heading
    assert config.completion_max_items == 50


def test_from_dict_values():
    config = EngineConfig.from_dict({
        "diagnostics_mode": "allVerses",
        "hover_context": {"verse_count": 2, "show_missing_as_placeholder": False},
        "completion": {"max_items": 10},
        "resolver": {"timeout_seconds": 1.5},
    })
    assert config.diagnostics_mode == DiagnosticsMode.ALL_VERSES
    assert config.hover_context.verse_count == 2
    assert not config.hover_context.show_missing_as_placeholder
    assert config.completion_max_items == 10
    assert config.resolver_timeout_seconds == 1.5


def test_from_dict_rejects_bad_values():
    with pytest.raises(ValueError):
        EngineConfig.from_dict({"diagnostics_mode": "everything"})
    with pytest.raises(ValueError):
        EngineConfig.from_dict({"hover_context": {"verse_count": -1}})


def test_with_mode():
    config = EngineConfig().with_mode("referenceOnly")
    assert config.diagnostics_mode == DiagnosticsMode.REFERENCE_ONLY


def test_load_settings_merges_file(monkeypatch):
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "versemark.yml"
        path.write_text(
            "diagnostics_mode: referenceOnly\n"
            "hover_context:\n"
            "  verse_count: 3\n"
            "source:\n"
            "  kind: memory\n",
            encoding="utf-8",
        )
        monkeypatch.setenv("VERSEMARK_CONFIG", str(path))
        monkeypatch.delenv("VERSEMARK_SWORD_PATH", raising=False)
        monkeypatch.delenv("VERSEMARK_BIBLE_JSON", raising=False)
        monkeypatch.delenv("VERSEMARK_HTTP_URL", raising=False)
        try:
            settings = reload_settings()
            assert settings["diagnostics_mode"] == "referenceOnly"
            assert settings["hover_context"]["verse_count"] == 3
            # Keys missing from the file keep their defaults
            assert settings["hover_context"]["show_chapter_heading"] is True
            assert settings["completion"]["max_items"] == 50
            assert config_module.get_engine_config().hover_context.verse_count == 3
            assert isinstance(build_source(), InMemoryVerseSource)
        finally:
            monkeypatch.delenv("VERSEMARK_CONFIG")
            reload_settings()


def test_build_source():
    settings = get_default_config()
    settings["source"]["path"] = "/data/bible.json"
    assert isinstance(build_source(settings), JsonBibleSource)

    settings["source"] = {"kind": "json", "path": None}
    with pytest.raises(ValueError):
        build_source(settings)

    settings["source"] = {"kind": "carrier-pigeon"}
    with pytest.raises(ValueError):
        build_source(settings)
