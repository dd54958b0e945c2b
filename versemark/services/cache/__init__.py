"""
Cache Services

Per-document cache of resolved verse content.
"""

from .resolution_cache import ResolutionCache

__all__ = ["ResolutionCache"]
