"""Tests for per-chunk translation: cache, retry/backoff and fallback."""

import pytest

from core.providers import ProviderTranslation, RateLimitedError
from translation.cache import TranslationCache
from translation.chunk_translator import ChunkTranslator

from conftest import FailingProvider, MappingProvider, RateLimitedProvider, RecordingSleeper


class EchoProvider:
    """Returns its input unchanged, like a provider that silently gave up."""

    async def translate(self, text, source_language, target_language):
        return ProviderTranslation(text=text)


class FlakyProvider:
    """Rate-limits the first `failures` calls, then translates."""

    def __init__(self, failures: int) -> None:
        self.failures = failures
        self.calls = 0

    async def translate(self, text, source_language, target_language):
        self.calls += 1
        if self.calls <= self.failures:
            raise RateLimitedError("429")
        return ProviderTranslation(text=f"translated:{text}")


class TestShortCircuits:
    """Cases that never reach the provider."""

    @pytest.mark.asyncio
    async def test_same_language_is_noop(
        self, spanish_provider: MappingProvider, cache: TranslationCache
    ) -> None:
        translator = ChunkTranslator(spanish_provider, cache)
        outcome = await translator.translate_chunk("Hello.", "en", "en")

        assert outcome.text == "Hello."
        assert outcome.succeeded is True
        assert outcome.attempts == 0
        assert spanish_provider.calls == []

    @pytest.mark.asyncio
    async def test_blank_text_is_noop(
        self, spanish_provider: MappingProvider, cache: TranslationCache
    ) -> None:
        translator = ChunkTranslator(spanish_provider, cache)
        assert await translator.translate("   ", "es") == "   "
        assert spanish_provider.calls == []

    @pytest.mark.asyncio
    async def test_cache_hit_skips_provider(
        self, spanish_provider: MappingProvider, cache: TranslationCache
    ) -> None:
        cache.store("Hello.", "Hola (cached).", "en", "es")
        translator = ChunkTranslator(spanish_provider, cache)

        outcome = await translator.translate_chunk("Hello.", "es", "en")

        assert outcome.text == "Hola (cached)."
        assert outcome.from_cache is True
        assert outcome.attempts == 0
        assert spanish_provider.calls == []


class TestProviderCalls:
    """Successful and failing provider calls."""

    @pytest.mark.asyncio
    async def test_success_is_cached(
        self, spanish_provider: MappingProvider, cache: TranslationCache
    ) -> None:
        translator = ChunkTranslator(spanish_provider, cache)

        assert await translator.translate("Hello.", "es", "en") == "Hola."
        assert await translator.translate("Hello.", "es", "en") == "Hola."
        assert spanish_provider.calls == ["Hello."]
        assert cache.lookup("Hello.", "en", "es") == "Hola."

    @pytest.mark.asyncio
    async def test_rate_limit_retries_with_linear_backoff(
        self,
        rate_limited_provider: RateLimitedProvider,
        cache: TranslationCache,
        sleeper: RecordingSleeper,
    ) -> None:
        translator = ChunkTranslator(
            rate_limited_provider, cache, max_attempts=3, base_delay=2.0, sleep=sleeper
        )

        outcome = await translator.translate_chunk("Hello.", "es", "en")

        assert outcome.text == "Hello."
        assert outcome.succeeded is False
        assert outcome.attempts == 3
        assert len(rate_limited_provider.calls) == 3
        # No wait after the final refused attempt
        assert sleeper.delays == [2.0, 4.0]
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_rate_limit_then_success(
        self, cache: TranslationCache, sleeper: RecordingSleeper
    ) -> None:
        provider = FlakyProvider(failures=1)
        translator = ChunkTranslator(provider, cache, base_delay=3.0, sleep=sleeper)

        outcome = await translator.translate_chunk("Hello.", "es", "en")

        assert outcome.text == "translated:Hello."
        assert outcome.succeeded is True
        assert outcome.attempts == 2
        assert sleeper.delays == [3.0]

    @pytest.mark.asyncio
    async def test_other_errors_are_not_retried(
        self,
        failing_provider: FailingProvider,
        cache: TranslationCache,
        sleeper: RecordingSleeper,
    ) -> None:
        translator = ChunkTranslator(failing_provider, cache, sleep=sleeper)

        outcome = await translator.translate_chunk("Hello.", "es", "en")

        assert outcome.text == "Hello."
        assert outcome.succeeded is False
        assert outcome.attempts == 1
        assert len(failing_provider.calls) == 1
        assert sleeper.delays == []

    @pytest.mark.asyncio
    async def test_unexpected_exception_falls_back(
        self, cache: TranslationCache, sleeper: RecordingSleeper
    ) -> None:
        class BrokenProvider:
            async def translate(self, text, source_language, target_language):
                raise KeyError("boom")

        translator = ChunkTranslator(BrokenProvider(), cache, sleep=sleeper)
        outcome = await translator.translate_chunk("Hello.", "es", "en")

        assert outcome.text == "Hello."
        assert outcome.succeeded is False

    @pytest.mark.asyncio
    async def test_unchanged_text_counts_as_failure(self, cache: TranslationCache) -> None:
        translator = ChunkTranslator(EchoProvider(), cache)

        outcome = await translator.translate_chunk("Hello.", "es", "en")

        assert outcome.text == "Hello."
        assert outcome.succeeded is False
        assert len(cache) == 0
