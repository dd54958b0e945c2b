# versemark/services/cache/resolution_cache.py
"""
Resolution Cache

Holds resolved verse content per document, keyed by (uri, version).
Each document has at most one entry: storing a newer version replaces the
old one, and edits invalidate it outright. Stale content is never served.
"""

import logging
from typing import Any, Dict, Hashable, Optional

logger = logging.getLogger(__name__)


class ResolutionCache:
    """Single-entry-per-document cache of resolved references."""

    def __init__(self):
        self._entries: Dict[str, Dict[str, Any]] = {}
        self._hits = 0
        self._misses = 0

    def get(self, uri: str, version: int, key: Hashable) -> Optional[Any]:
        """Get a cached resolution if it belongs to this document version."""
        entry = self._entries.get(uri)
        if entry is None or entry["version"] != version or key not in entry["items"]:
            self._misses += 1
            return None
        self._hits += 1
        return entry["items"][key]

    def put(self, uri: str, version: int, key: Hashable, value: Any) -> None:
        """Store a resolution, dropping anything cached for another version."""
        entry = self._entries.get(uri)
        if entry is None or entry["version"] != version:
            if entry is not None:
                logger.debug(
                    f"Replacing cache for {uri}: version {entry['version']} -> {version}"
                )
            entry = {"version": version, "items": {}}
            self._entries[uri] = entry
        entry["items"][key] = value

    def version_of(self, uri: str) -> Optional[int]:
        entry = self._entries.get(uri)
        return entry["version"] if entry else None

    def invalidate(self, uri: str) -> bool:
        """Drop the entry for a document. Returns True if one existed."""
        removed = self._entries.pop(uri, None)
        if removed is not None:
            logger.debug(f"Invalidated cache for {uri} (version {removed['version']})")
        return removed is not None

    def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        return count

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        return {
            "documents": len(self._entries),
            "entries": sum(len(e["items"]) for e in self._entries.values()),
            "hits": self._hits,
            "misses": self._misses,
        }
