"""Inter-request pacing between chunk translations."""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable

from translation.models import TranslationOutcome

Sleeper = Callable[[float], Awaitable[None]]

DEFAULT_CACHE_HIT_DELAY = 0.1
DEFAULT_PROVIDER_CALL_DELAY = 2.0


async def real_sleep(seconds: float) -> None:
    await asyncio.sleep(seconds)


@dataclass(frozen=True)
class PacingPolicy:
    """
    Self-throttle that keeps a sequential chunk loop under the provider's rate limit.

    A chunk that needed no network round trip (cache hit or skipped text) is
    followed by the short delay; a chunk that called the provider is followed
    by the long one. Nothing waits after the final chunk.
    """

    cache_hit_delay: float = DEFAULT_CACHE_HIT_DELAY
    provider_call_delay: float = DEFAULT_PROVIDER_CALL_DELAY

    def delay_after(self, outcome: TranslationOutcome, *, is_last: bool) -> float:
        if is_last:
            return 0.0
        if outcome.attempts == 0:
            return self.cache_hit_delay
        return self.provider_call_delay
