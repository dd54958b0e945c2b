# versemark/services/references/books.py
"""
Book names and common abbreviations.

Sources use this to accept "Eph", "eph." or "EPHESIANS" for a book they list
as "Ephesians". Keys are lowercase with periods removed.
"""

import re
from typing import Optional

# (canonical name, OSIS id, space-separated abbreviations)
_BOOKS = [
    ("Genesis", "Gen", "gen gn ge"),
    ("Exodus", "Exod", "exod ex exo"),
    ("Leviticus", "Lev", "lev lv le"),
    ("Numbers", "Num", "num nm nu"),
    ("Deuteronomy", "Deut", "deut dt deu"),
    ("Joshua", "Josh", "josh jos"),
    ("Judges", "Judg", "judg jdg jg"),
    ("Ruth", "Ruth", "ru rth"),
    ("1 Samuel", "1Sam", "1sam 1sa"),
    ("2 Samuel", "2Sam", "2sam 2sa"),
    ("1 Kings", "1Kgs", "1kgs 1ki"),
    ("2 Kings", "2Kgs", "2kgs 2ki"),
    ("1 Chronicles", "1Chr", "1chr 1ch"),
    ("2 Chronicles", "2Chr", "2chr 2ch"),
    ("Ezra", "Ezra", "ezr"),
    ("Nehemiah", "Neh", "neh ne"),
    ("Esther", "Esth", "esth est es"),
    ("Job", "Job", "jb"),
    ("Psalms", "Ps", "ps psa pss psalm"),
    ("Proverbs", "Prov", "prov pr prv"),
    ("Ecclesiastes", "Eccl", "eccl ecc qoh"),
    ("Song of Solomon", "Song", "song sos songofsongs"),
    ("Isaiah", "Isa", "isa is"),
    ("Jeremiah", "Jer", "jer je"),
    ("Lamentations", "Lam", "lam la"),
    ("Ezekiel", "Ezek", "ezek eze ez"),
    ("Daniel", "Dan", "dan dn da"),
    ("Hosea", "Hos", "hos ho"),
    ("Joel", "Joel", "jl"),
    ("Amos", "Amos", "am"),
    ("Obadiah", "Obad", "obad ob"),
    ("Jonah", "Jonah", "jon jnh"),
    ("Micah", "Mic", "mic mi"),
    ("Nahum", "Nah", "nah na"),
    ("Habakkuk", "Hab", "hab hb"),
    ("Zephaniah", "Zeph", "zeph zep"),
    ("Haggai", "Hag", "hag hg"),
    ("Zechariah", "Zech", "zech zec zc"),
    ("Malachi", "Mal", "mal ml"),
    ("Matthew", "Matt", "matt mt mat"),
    ("Mark", "Mark", "mk mr"),
    ("Luke", "Luke", "lk lu"),
    ("John", "John", "jn joh"),
    ("Acts", "Acts", "ac act"),
    ("Romans", "Rom", "rom ro rm"),
    ("1 Corinthians", "1Cor", "1cor 1co"),
    ("2 Corinthians", "2Cor", "2cor 2co"),
    ("Galatians", "Gal", "gal ga"),
    ("Ephesians", "Eph", "eph ep"),
    ("Philippians", "Phil", "phil php"),
    ("Colossians", "Col", "col"),
    ("1 Thessalonians", "1Thess", "1thess 1th"),
    ("2 Thessalonians", "2Thess", "2thess 2th"),
    ("1 Timothy", "1Tim", "1tim 1ti"),
    ("2 Timothy", "2Tim", "2tim 2ti"),
    ("Titus", "Titus", "tit"),
    ("Philemon", "Phlm", "philem phlm phm"),
    ("Hebrews", "Heb", "heb"),
    ("James", "Jas", "jas jm"),
    ("1 Peter", "1Pet", "1pet 1pe 1pt"),
    ("2 Peter", "2Pet", "2pet 2pe 2pt"),
    ("1 John", "1John", "1jn 1jo"),
    ("2 John", "2John", "2jn 2jo"),
    ("3 John", "3John", "3jn 3jo"),
    ("Jude", "Jude", "jud jd"),
    ("Revelation", "Rev", "rev rv apoc"),
]

CANONICAL_BOOKS = [name for name, _, _ in _BOOKS]

BOOK_TO_OSIS = {name: osis for name, osis, _ in _BOOKS}

BOOK_ALIASES = {}
for _name, _osis, _abbrevs in _BOOKS:
    BOOK_ALIASES[_name.lower()] = _name
    BOOK_ALIASES[_name.lower().replace(" ", "")] = _name
    BOOK_ALIASES[_osis.lower()] = _name
    for _abbrev in _abbrevs.split():
        BOOK_ALIASES[_abbrev] = _name


def book_key(name: str) -> str:
    """Lowercase, drop periods, collapse whitespace."""
    key = name.lower().replace(".", "").strip()
    return re.sub(r"\s+", " ", key)


def canonical_name(name: str) -> Optional[str]:
    """
    Resolve a book name or abbreviation to its canonical name.

    Returns:
        Canonical name (e.g. "Ephesians", "1 John") or None if unknown
    """
    key = book_key(name)
    if key in BOOK_ALIASES:
        return BOOK_ALIASES[key]
    return BOOK_ALIASES.get(key.replace(" ", ""))


def canonical_order(book: str) -> int:
    """Position of a book in canonical order; unknown books sort last."""
    try:
        return CANONICAL_BOOKS.index(book)
    except ValueError:
        return len(CANONICAL_BOOKS)
