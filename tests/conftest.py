# tests/conftest.py
"""Shared fixtures: an in-memory Ephesians source and a service over it."""

import pytest

from versemark.core.config import EngineConfig
from versemark.services.reference_service import ReferenceService
from versemark.services.references import InMemoryVerseSource

EPHESIANS = [23, 22, 21, 32, 33, 24]

OPENING = {
    1: "Paul, an apostle of Christ Jesus by the will of God,",
    2: "Grace to you and peace from God our Father and the Lord Jesus Christ.",
    3: "Blessed be the God and Father of our Lord Jesus Christ,",
}


def ephesians_verses(skip=()):
    """Text for chapters 1-2 of Ephesians, minus the (chapter, verse) pairs in skip."""
    verses = {}
    for chapter in (1, 2):
        for verse in range(1, EPHESIANS[chapter - 1] + 1):
            if (chapter, verse) in skip:
                continue
            text = f"Ephesians {chapter}:{verse} text."
            if chapter == 1 and verse in OPENING:
                text = OPENING[verse]
            verses[("Ephesians", chapter, verse)] = text
    return verses


@pytest.fixture
def source():
    return InMemoryVerseSource(ephesians_verses(), structure={"Ephesians": EPHESIANS})


@pytest.fixture
def gappy_source():
    """Source without Ephesians 1:4."""
    return InMemoryVerseSource(ephesians_verses(skip={(1, 4)}), structure={"Ephesians": EPHESIANS})


@pytest.fixture
def config():
    return EngineConfig()


@pytest.fixture
def service(source, config):
    return ReferenceService(source, config)
