# versemark/services/references/json_bible_source.py
"""
Verse source backed by a single JSON bible file.

File layout:
    {
      "translation": {"name": "...", "language": "...", "abbreviation": "ESV"},
      "bible": [
        {"id": 49, "book": "Ephesians", "abbreviations": ["Eph", "Ephes"],
         "content": [["verse 1:1", "verse 1:2", ...], ["verse 2:1", ...]]}
      ]
    }
"""

import json
import logging
from pathlib import Path
from typing import Optional

from .books import book_key
from .errors import VerseSourceError
from .verse_source import VerseSource

logger = logging.getLogger(__name__)


class JsonBibleSource(VerseSource):
    """
    Reads verse text from a JSON bible file. The file is loaded on first use.

    Usage:
        source = JsonBibleSource("/data/esv.json")
        source.lookup("Ephesians", 1, 1)
    """

    name = "json"

    def __init__(self, path):
        self.path = Path(path)
        self.translation = {}
        self._contents = None  # book name -> list of chapters -> list of verses
        self._aliases = {}  # book_key -> book name

    def _load(self) -> dict:
        if self._contents is not None:
            return self._contents

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load bible JSON {self.path}: {e}")
            raise VerseSourceError(f"Cannot read bible file {self.path}: {e}")

        contents = {}
        try:
            for book in sorted(data["bible"], key=lambda b: b.get("id", 0)):
                name = book["book"]
                contents[name] = book["content"]
                self._aliases[book_key(name)] = name
                for abbrev in book.get("abbreviations", []):
                    self._aliases[book_key(abbrev)] = name
        except (KeyError, TypeError) as e:
            raise VerseSourceError(f"Bible file {self.path} is improperly formatted: {e}")

        self.translation = data.get("translation", {})
        self._contents = contents
        logger.info(
            f"Loaded {len(contents)} books from {self.path.name} "
            f"({self.translation.get('abbreviation', 'unknown translation')})"
        )
        return contents

    def _chapter(self, book: str, chapter: int) -> Optional[list]:
        chapters = self._load().get(book)
        if chapters is None or not 1 <= chapter <= len(chapters):
            return None
        return chapters[chapter - 1]

    def lookup(self, book: str, chapter: int, verse: int) -> Optional[str]:
        verses = self._chapter(book, chapter)
        if verses is None or not 1 <= verse <= len(verses):
            return None
        return verses[verse - 1] or None

    def list_books(self) -> set:
        return set(self._load())

    def max_verse(self, book: str, chapter: int) -> Optional[int]:
        verses = self._chapter(book, chapter)
        return len(verses) if verses is not None else None

    def max_chapter(self, book: str) -> Optional[int]:
        chapters = self._load().get(book)
        return len(chapters) if chapters is not None else None

    def locate(self, book: str, chapter: int, verse: int) -> Optional[str]:
        if self.lookup(book, chapter, verse) is None:
            return None
        return f"{self.path.resolve().as_uri()}#{book}.{chapter}.{verse}"

    def canonical_book(self, name: str) -> Optional[str]:
        self._load()
        found = self._aliases.get(book_key(name))
        if found:
            return found
        return super().canonical_book(name)
