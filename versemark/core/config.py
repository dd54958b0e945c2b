# versemark/core/config.py
"""
Engine configuration.

Settings come from config/versemark.yml (or the file named by
VERSEMARK_CONFIG), with defaults filled in for missing keys. Source paths
and server settings can be overridden from the environment or a .env file.
"""

import copy
import logging
import os
from dataclasses import dataclass, field, replace
from enum import Enum
from functools import lru_cache
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

# Load .env
load_dotenv()

logger = logging.getLogger(__name__)

CONFIG_PATH = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(__file__))),
    'config',
    'versemark.yml'
)

LOG_LEVEL = os.getenv("VERSEMARK_LOG_LEVEL", "INFO")
HOST = os.getenv("VERSEMARK_HOST", "127.0.0.1")
PORT = int(os.getenv("VERSEMARK_PORT", "5055"))


class DiagnosticsMode(str, Enum):
    REFERENCE_ONLY = "referenceOnly"
    FIRST_VERSE = "firstVerse"
    ALL_VERSES = "allVerses"


@dataclass(frozen=True)
class HoverContext:
    verse_count: int = 0
    show_chapter_heading: bool = True
    show_missing_as_placeholder: bool = True


@dataclass(frozen=True)
class EngineConfig:
    """Request-level settings for the feature providers."""
    diagnostics_mode: DiagnosticsMode = DiagnosticsMode.FIRST_VERSE
    hover_context: HoverContext = field(default_factory=HoverContext)
    completion_max_items: int = 50
    resolver_timeout_seconds: float = 5.0
    missing_placeholder: str = "(verse not available)"

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "EngineConfig":
        """
        Build a config from a loaded YAML mapping.

        Raises:
            ValueError: for an unknown diagnostics mode or a negative count
        """
        data = data or {}
        hover = data.get('hover_context') or {}
        verse_count = int(hover.get('verse_count', 0))
        if verse_count < 0:
            raise ValueError(f"hover_context.verse_count must be >= 0, got {verse_count}")

        return cls(
            diagnostics_mode=DiagnosticsMode(data.get('diagnostics_mode', DiagnosticsMode.FIRST_VERSE.value)),
            hover_context=HoverContext(
                verse_count=verse_count,
                show_chapter_heading=bool(hover.get('show_chapter_heading', True)),
                show_missing_as_placeholder=bool(hover.get('show_missing_as_placeholder', True)),
            ),
            completion_max_items=int((data.get('completion') or {}).get('max_items', 50)),
            resolver_timeout_seconds=float((data.get('resolver') or {}).get('timeout_seconds', 5.0)),
            missing_placeholder=data.get('missing_placeholder', "(verse not available)"),
        )

    def with_mode(self, mode: str) -> "EngineConfig":
        return replace(self, diagnostics_mode=DiagnosticsMode(mode))


def get_default_config() -> Dict[str, Any]:
    """Return default settings if the config file is missing."""
    return {
        'diagnostics_mode': 'firstVerse',
        'hover_context': {
            'verse_count': 0,
            'show_chapter_heading': True,
            'show_missing_as_placeholder': True,
        },
        'completion': {'max_items': 50},
        'resolver': {'timeout_seconds': 5.0},
        'source': {
            'kind': 'json',
            'path': None,
            'module': 'KJV',
            'url': None,
            'index_url': None,
        },
    }


def _merge(defaults: Dict[str, Any], loaded: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(defaults)
    for key, value in loaded.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


@lru_cache(maxsize=1)
def load_settings() -> Dict[str, Any]:
    """Load settings from YAML config, merged over the defaults."""
    path = os.getenv("VERSEMARK_CONFIG", CONFIG_PATH)
    settings = get_default_config()

    if os.path.exists(path):
        with open(path, 'r', encoding='utf-8') as f:
            loaded = yaml.safe_load(f) or {}
        settings = _merge(settings, loaded)
    else:
        logger.info(f"No config at {path}, using defaults")

    source = settings['source']
    source['path'] = os.getenv("VERSEMARK_BIBLE_JSON", source.get('path'))
    source['module'] = os.getenv("VERSEMARK_SWORD_MODULE", source.get('module'))
    source['url'] = os.getenv("VERSEMARK_HTTP_URL", source.get('url'))
    if os.getenv("VERSEMARK_SWORD_PATH"):
        source['path'] = os.getenv("VERSEMARK_SWORD_PATH")
        source['kind'] = 'sword'
    return settings


def reload_settings() -> Dict[str, Any]:
    """Clear cache and reload settings."""
    load_settings.cache_clear()
    return load_settings()


def get_engine_config() -> EngineConfig:
    return EngineConfig.from_dict(load_settings())


def build_source(settings: Optional[Dict[str, Any]] = None):
    """
    Create the verse source named by the 'source' settings.

    Raises:
        ValueError: for an unknown kind or a kind missing its path/url
    """
    settings = settings if settings is not None else load_settings()
    source = settings.get('source') or {}
    kind = source.get('kind', 'json')

    if kind == 'memory':
        from versemark.services.references.verse_source import InMemoryVerseSource
        return InMemoryVerseSource()

    if kind == 'json':
        if not source.get('path'):
            raise ValueError("source.path (or VERSEMARK_BIBLE_JSON) is required for a json source")
        from versemark.services.references.json_bible_source import JsonBibleSource
        return JsonBibleSource(source['path'])

    if kind == 'sword':
        if not source.get('path'):
            raise ValueError("source.path (or VERSEMARK_SWORD_PATH) is required for a sword source")
        from versemark.services.references.sword_source import SwordVerseSource
        return SwordVerseSource(source['path'], module=source.get('module') or "KJV")

    if kind == 'http':
        if not source.get('url'):
            raise ValueError("source.url (or VERSEMARK_HTTP_URL) is required for an http source")
        from versemark.services.references.http_source import HttpVerseSource
        return HttpVerseSource(source['url'], index_url=source.get('index_url'))

    raise ValueError(f"Unknown source kind: {kind!r}")
