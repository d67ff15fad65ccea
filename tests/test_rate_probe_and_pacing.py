"""Tests for the availability probe and inter-chunk pacing."""

import pytest

from translation.cache import TranslationCache
from translation.chunk_translator import ChunkTranslator
from translation.models import TranslationOutcome
from translation.pacing import PacingPolicy
from translation.rate_probe import RateProbe

from conftest import MappingProvider, RateLimitedProvider, RecordingSleeper


class TestRateProbe:
    @pytest.mark.asyncio
    async def test_available_when_canary_changes(
        self, spanish_provider: MappingProvider, cache: TranslationCache
    ) -> None:
        probe = RateProbe(ChunkTranslator(spanish_provider, cache))

        assert await probe.is_available("es", "en") is True
        assert spanish_provider.calls == ["test"]

    @pytest.mark.asyncio
    async def test_unavailable_when_rate_limited(
        self,
        rate_limited_provider: RateLimitedProvider,
        cache: TranslationCache,
        sleeper: RecordingSleeper,
    ) -> None:
        probe = RateProbe(ChunkTranslator(rate_limited_provider, cache, sleep=sleeper))

        assert await probe.is_available("es", "en") is False

    @pytest.mark.asyncio
    async def test_cached_canary_counts_as_available(
        self, rate_limited_provider: RateLimitedProvider, cache: TranslationCache
    ) -> None:
        cache.store("test", "prueba", "en", "es")
        probe = RateProbe(ChunkTranslator(rate_limited_provider, cache))

        assert await probe.is_available("es", "en") is True
        assert rate_limited_provider.calls == []


class TestPacingPolicy:
    def test_no_delay_after_last_chunk(self) -> None:
        policy = PacingPolicy(cache_hit_delay=0.1, provider_call_delay=2.0)
        outcome = TranslationOutcome(text="Hola.", succeeded=True, attempts=1)
        assert policy.delay_after(outcome, is_last=True) == 0.0

    def test_short_delay_after_cache_hit(self) -> None:
        policy = PacingPolicy(cache_hit_delay=0.1, provider_call_delay=2.0)
        outcome = TranslationOutcome(text="Hola.", succeeded=True, from_cache=True)
        assert policy.delay_after(outcome, is_last=False) == 0.1

    def test_long_delay_after_provider_call(self) -> None:
        policy = PacingPolicy(cache_hit_delay=0.1, provider_call_delay=3.0)
        failed = TranslationOutcome(text="Hello.", succeeded=False, attempts=3)
        assert policy.delay_after(failed, is_last=False) == 3.0
