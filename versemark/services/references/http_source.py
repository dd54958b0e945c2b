# versemark/services/references/http_source.py
"""
Verse source backed by a remote JSON verse API.

The verse URL is a template with {book}, {chapter} and {verse} fields and
must answer with {"text": "..."} (404 for a verse that does not exist).
The optional index URL answers with the book structure:

    {"books": {"Ephesians": [23, 22, 21, 32, 33, 24], ...}}

Only the book index is kept between calls; verse answers are fetched on
every lookup.
"""

import logging
from typing import Optional
from urllib.parse import quote

import requests

from versemark.utils.http_retry import HttpTimeout, get_with_retry

from .books import canonical_name
from .errors import VerseSourceError, VerseSourceTimeout
from .verse_source import VerseSource

logger = logging.getLogger(__name__)


class HttpVerseSource(VerseSource):
    """
    Client for a verse API reachable over HTTP.

    Usage:
        source = HttpVerseSource(
            "https://bible.example.org/api/{book}/{chapter}/{verse}",
            index_url="https://bible.example.org/api/index",
        )
        source.lookup("Ephesians", 1, 1)
    """

    name = "http"

    def __init__(self, verse_url: str, index_url: Optional[str] = None, timeout: float = 10):
        self.verse_url = verse_url
        self.index_url = index_url
        self._request_timeout = timeout
        self._structure = None  # book -> list of verse counts

    def _get_json(self, url: str) -> Optional[dict]:
        """GET a URL and decode a JSON object. Returns None on 404."""
        try:
            response = get_with_retry(url, timeout=self._request_timeout, allow_status={404})
        except HttpTimeout as e:
            logger.warning(f"Verse API timed out: {e}")
            raise VerseSourceTimeout(str(e))
        except (RuntimeError, requests.RequestException) as e:
            logger.warning(f"Verse API request failed: {e}")
            raise VerseSourceError(str(e))

        if response.status_code == 404:
            return None
        try:
            data = response.json()
        except ValueError as e:
            raise VerseSourceError(f"Invalid JSON from {url}: {e}")
        if not isinstance(data, dict):
            raise VerseSourceError(f"Unexpected payload from {url}")
        return data

    def _load_structure(self) -> dict:
        if self._structure is None:
            if not self.index_url:
                self._structure = {}
            else:
                data = self._get_json(self.index_url) or {}
                books = data.get("books", {})
                if not isinstance(books, dict):
                    raise VerseSourceError(f"Invalid book index from {self.index_url}")
                structure = {}
                for book, counts in books.items():
                    if not isinstance(counts, list) or not all(isinstance(n, int) for n in counts):
                        raise VerseSourceError(f"Invalid verse counts for {book!r} from {self.index_url}")
                    structure[book] = counts
                self._structure = structure
                logger.info(f"Loaded {len(self._structure)} books from {self.index_url}")
        return self._structure

    def lookup(self, book: str, chapter: int, verse: int) -> Optional[str]:
        url = self.verse_url.format(book=quote(book), chapter=chapter, verse=verse)
        data = self._get_json(url)
        if data is None:
            return None
        text = data.get("text")
        if text is not None and not isinstance(text, str):
            raise VerseSourceError(f"Unexpected verse text from {url}")
        return (text or "").strip() or None

    def list_books(self) -> set:
        return set(self._load_structure())

    def max_verse(self, book: str, chapter: int) -> Optional[int]:
        counts = self._load_structure().get(book)
        if counts is None or not 1 <= chapter <= len(counts):
            return None
        return counts[chapter - 1]

    def max_chapter(self, book: str) -> Optional[int]:
        counts = self._load_structure().get(book)
        return len(counts) if counts is not None else None

    def canonical_book(self, name: str) -> Optional[str]:
        if not self.index_url:
            # Without an index, trust the shared book table
            return canonical_name(name)
        return super().canonical_book(name)

    def locate(self, book: str, chapter: int, verse: int) -> Optional[str]:
        return self.verse_url.format(book=quote(book), chapter=chapter, verse=verse)
