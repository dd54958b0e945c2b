# versemark/services/references/sword_source.py
"""
Verse source reading local SWORD modules.

Uses pysword to read an installed module (e.g. KJV, WEB) and answers
single-verse lookups from it.
"""

import logging
from typing import Optional

from .books import BOOK_TO_OSIS
from .errors import VerseSourceError
from .verse_source import VerseSource

logger = logging.getLogger(__name__)


class SwordVerseSource(VerseSource):
    """
    Client for verse text in a local SWORD module.

    Usage:
        source = SwordVerseSource("/data/sword", module="KJV")
        source.lookup("John", 3, 16)
    """

    name = "sword"

    def __init__(self, path: str, module: str = "KJV"):
        self.path = str(path)
        self.module = module.upper()
        self._bible = None
        self._books = None  # book name -> chapter_lengths

    def _get_bible(self):
        """Load the module on first use."""
        if self._bible is None:
            try:
                from pysword.modules import SwordModules
            except ImportError:
                logger.error("pysword not installed")
                raise VerseSourceError("pysword not installed")
            try:
                modules = SwordModules(self.path)
                modules.parse_modules()
                self._bible = modules.get_bible_from_module(self.module)
            except Exception as e:
                logger.error(f"Failed to load SWORD module {self.module} from {self.path}: {e}")
                raise VerseSourceError(f"Cannot load SWORD module {self.module}: {e}")
        return self._bible

    def _structure(self) -> dict:
        if self._books is None:
            structure = self._get_bible().get_structure()
            books = {}
            for testament_books in structure.get_books().values():
                for book in testament_books:
                    books[book.name] = list(book.chapter_lengths)
            self._books = books
        return self._books

    def lookup(self, book: str, chapter: int, verse: int) -> Optional[str]:
        max_verse = self.max_verse(book, chapter)
        if max_verse is None or not 1 <= verse <= max_verse:
            return None
        try:
            text = self._get_bible().get(
                books=[book], chapters=[chapter], verses=[verse], clean=True
            )
        except (ValueError, IndexError, KeyError) as e:
            logger.debug(f"No {self.module} text for {book} {chapter}:{verse}: {e}")
            return None
        except Exception as e:
            logger.error(f"Failed to get {book} {chapter}:{verse} from {self.module}: {e}")
            raise VerseSourceError(str(e))
        text = (text or "").strip()
        return text or None

    def list_books(self) -> set:
        return set(self._structure())

    def max_verse(self, book: str, chapter: int) -> Optional[int]:
        lengths = self._structure().get(book)
        if lengths is None or not 1 <= chapter <= len(lengths):
            return None
        return lengths[chapter - 1]

    def max_chapter(self, book: str) -> Optional[int]:
        lengths = self._structure().get(book)
        return len(lengths) if lengths is not None else None

    def locate(self, book: str, chapter: int, verse: int) -> Optional[str]:
        osis = BOOK_TO_OSIS.get(book, book.replace(" ", ""))
        return f"sword://{self.module}/{osis}.{chapter}.{verse}"
