"""
Chunk Translator

Translates one chunk through the external provider:
cache lookup, single provider call, bounded retry with backoff on rate
limits, and graceful fallback to the original text on any failure.
"""

# Standard library
import logging

# Local application
from core.providers import ProviderError, RateLimitedError, TranslationProvider
from translation.cache import TranslationCache
from translation.models import TranslationOutcome
from translation.pacing import Sleeper, real_sleep

# Configure logging
logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_BASE_DELAY = 2.0


class ChunkTranslator:
    """Per-chunk retry/backoff state machine around a TranslationProvider."""

    def __init__(
        self,
        provider: TranslationProvider,
        cache: TranslationCache,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_delay: float = DEFAULT_RETRY_BASE_DELAY,
        sleep: Sleeper = real_sleep,
    ) -> None:
        self._provider = provider
        self._cache = cache
        self._max_attempts = max_attempts
        self._base_delay = base_delay
        self._sleep = sleep

    async def translate(
        self, text: str, target_language: str, source_language: str = "en"
    ) -> str:
        """Returns the translated text, or `text` unchanged when translation failed."""
        outcome = await self.translate_chunk(text, target_language, source_language)
        return outcome.text

    async def translate_chunk(
        self, text: str, target_language: str, source_language: str = "en"
    ) -> TranslationOutcome:
        """
        Translates a single chunk and reports how it went.

        Rate-limited calls are retried up to `max_attempts` in total, waiting
        `attempt * base_delay` seconds after each refused attempt. Any other
        provider failure, an unchanged provider response, or exhausted
        retries yields the original text with `succeeded=False`. Never raises.

        Args:
            text: Chunk content.
            target_language: Language tag to translate into.
            source_language: Language tag of `text`.

        Returns:
            TranslationOutcome with the text to use for this chunk.
        """
        if target_language == source_language or not text or not text.strip():
            return TranslationOutcome(text=text, succeeded=True, attempts=0)

        cached = self._cache.lookup(text, source_language, target_language)
        if cached is not None:
            return TranslationOutcome(text=cached, succeeded=True, attempts=0, from_cache=True)

        for attempt in range(1, self._max_attempts + 1):
            try:
                result = await self._provider.translate(text, source_language, target_language)
            except RateLimitedError as e:
                if attempt >= self._max_attempts:
                    logger.warning(
                        f"Rate limit persisted after {attempt} attempts "
                        f"({source_language} -> {target_language}), keeping original text"
                    )
                    return TranslationOutcome(text=text, succeeded=False, attempts=attempt)

                wait_time = attempt * self._base_delay
                logger.warning(
                    f"Rate limit hit ({e}), waiting {wait_time:g}s before retry "
                    f"{attempt}/{self._max_attempts}..."
                )
                await self._sleep(wait_time)
                continue
            except ProviderError as e:
                logger.error(f"Translation provider failed: {e}")
                return TranslationOutcome(text=text, succeeded=False, attempts=attempt)
            except Exception as e:
                logger.error(f"Unexpected translation failure: {e}", exc_info=True)
                return TranslationOutcome(text=text, succeeded=False, attempts=attempt)

            if result.text and result.text != text:
                self._cache.store(text, result.text, source_language, target_language)
                return TranslationOutcome(text=result.text, succeeded=True, attempts=attempt)

            logger.warning(
                f"Provider returned unchanged text ({source_language} -> {target_language}), "
                f"keeping original"
            )
            return TranslationOutcome(text=text, succeeded=False, attempts=attempt)

        return TranslationOutcome(text=text, succeeded=False, attempts=self._max_attempts)
