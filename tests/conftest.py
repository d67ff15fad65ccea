"""
Pytest Configuration and Shared Fixtures

Provides fake providers, a recording sleeper and an in-memory document store
for the translation pipeline tests.
"""

# Standard library
import os
import sys
from typing import Dict, List, Optional

# Third-party
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

os.environ.setdefault("TEST_MODE", "true")

from core.providers import ProviderError, ProviderTranslation, RateLimitedError  # noqa: E402
from documents.repository import InMemoryDocumentStore  # noqa: E402
from translation.cache import TranslationCache  # noqa: E402


# ============================================================================
# Fake Providers
# ============================================================================

class MappingProvider:
    """Translates via a fixed phrase table and records every call."""

    def __init__(self, table: Optional[Dict[str, str]] = None) -> None:
        self.table = table or {}
        self.calls: List[str] = []

    async def translate(
        self, text: str, source_language: str, target_language: str
    ) -> ProviderTranslation:
        self.calls.append(text)
        return ProviderTranslation(text=self.table.get(text, f"<{target_language}>{text}"))


class RateLimitedProvider:
    """Refuses every call with a rate limit."""

    def __init__(self) -> None:
        self.calls: List[str] = []

    async def translate(
        self, text: str, source_language: str, target_language: str
    ) -> ProviderTranslation:
        self.calls.append(text)
        raise RateLimitedError("429 Too Many Requests")


class FailingProvider:
    """Fails every call with a non-rate-limit provider error."""

    def __init__(self) -> None:
        self.calls: List[str] = []

    async def translate(
        self, text: str, source_language: str, target_language: str
    ) -> ProviderTranslation:
        self.calls.append(text)
        raise ProviderError("upstream exploded")


class RecordingSleeper:
    """Async sleep stand-in that records requested delays instead of waiting."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


SPANISH = {
    "test": "prueba",
    "Hello.": "Hola.",
    "World.": "Mundo.",
    "Bye.": "Adiós.",
}


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def cache() -> TranslationCache:
    """Fresh translation cache per test."""
    return TranslationCache()


@pytest.fixture
def spanish_provider() -> MappingProvider:
    """English to Spanish phrase-table provider."""
    return MappingProvider(dict(SPANISH))


@pytest.fixture
def rate_limited_provider() -> RateLimitedProvider:
    return RateLimitedProvider()


@pytest.fixture
def failing_provider() -> FailingProvider:
    return FailingProvider()


@pytest.fixture
def sleeper() -> RecordingSleeper:
    return RecordingSleeper()


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """Store holding the three-chunk notes.txt sample."""
    store = InMemoryDocumentStore()
    store.add_document("notes.txt", ["Hello.", "World.", "Bye."], document_id="doc-1")
    return store
