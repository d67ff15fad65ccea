"""Canary check for a rate-limited or unavailable translation provider."""

import logging

from translation.chunk_translator import ChunkTranslator

logger = logging.getLogger(__name__)

CANARY_TEXT = "test"


class RateProbe:
    """
    Sends a tiny canary through the ChunkTranslator before a long batch.

    Availability means the translator actually changed the canary. The
    result is advisory: a false negative only bails out early.
    """

    def __init__(self, translator: ChunkTranslator, canary_text: str = CANARY_TEXT) -> None:
        self._translator = translator
        self._canary_text = canary_text

    async def is_available(self, target_language: str, source_language: str) -> bool:
        translated = await self._translator.translate(
            self._canary_text, target_language, source_language
        )
        available = translated != self._canary_text
        if not available:
            logger.warning(
                f"Translation probe failed ({source_language} -> {target_language}); "
                f"provider looks rate-limited or unavailable"
            )
        return available
