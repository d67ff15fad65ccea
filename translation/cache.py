"""
Translation Cache

Content-addressed memo of (text, source language, target language) to
translated text, shared by every document translation in the process.

Capacity is enforced by a periodic sweep, not on insert: once the entry count
exceeds the ceiling, the sweep evicts the oldest-INSERTED slice of entries.
This is insertion-order eviction, not an LRU. Reads never refresh an entry's
position, and re-storing an existing key keeps its original position.
"""

# Standard library
import asyncio
import hashlib
import logging
import threading
from dataclasses import dataclass
from typing import Optional

# Configure logging
logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 1000
DEFAULT_EVICTION_BATCH = 100
DEFAULT_SWEEP_INTERVAL_SECONDS = 60.0


def make_cache_key(text: str, source_language: str, target_language: str) -> str:
    """
    Builds the fingerprint for a cache entry.

    Text is trimmed and case-folded before hashing so whitespace and case
    variants share an entry; both language tags are part of the key.
    """
    normalized = text.strip().casefold()
    digest = hashlib.md5(normalized.encode("utf-8")).hexdigest()
    return f"{source_language}-{target_language}-{digest}"


@dataclass(frozen=True)
class CacheStats:
    """Snapshot of cache size and hit/miss accounting."""

    size: int
    hits: int
    misses: int
    hit_rate: float


class TranslationCache:
    """Thread-safe, capacity-bounded translation memo."""

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        eviction_batch: int = DEFAULT_EVICTION_BATCH,
        sweep_interval: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
    ) -> None:
        self._max_entries = max_entries
        self._eviction_batch = eviction_batch
        self._sweep_interval = sweep_interval
        # dict preserves insertion order, which is the eviction order
        self._entries: dict[str, str] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._sweeper: Optional[asyncio.Task] = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def lookup(
        self, text: str, source_language: str, target_language: str
    ) -> Optional[str]:
        """Returns the cached translation or None, counting a hit or a miss."""
        key = make_cache_key(text, source_language, target_language)
        with self._lock:
            cached = self._entries.get(key)
            if cached is None:
                self._misses += 1
                return None
            self._hits += 1
            hits, total = self._hits, self._hits + self._misses

        logger.debug(f"Cache hit: {source_language} -> {target_language} ({hits}/{total})")
        return cached

    def store(
        self,
        text: str,
        translated_text: str,
        source_language: str,
        target_language: str,
    ) -> None:
        """Stores a translation. Empty or unchanged translations are ignored."""
        if not text or not translated_text or text == translated_text:
            return

        key = make_cache_key(text, source_language, target_language)
        with self._lock:
            self._entries[key] = translated_text
            size = len(self._entries)

        logger.debug(f"Cached translation: {source_language} -> {target_language} (cache size: {size})")

    def stats(self) -> CacheStats:
        with self._lock:
            lookups = self._hits + self._misses
            return CacheStats(
                size=len(self._entries),
                hits=self._hits,
                misses=self._misses,
                hit_rate=self._hits / lookups if lookups else 0.0,
            )

    def clear(self) -> None:
        """Drops every entry and resets the counters."""
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0
        logger.info("Translation cache cleared")

    def sweep(self) -> int:
        """
        Evicts the oldest-inserted batch if the cache is over capacity.

        Returns:
            Number of entries removed (0 when under the ceiling).
        """
        with self._lock:
            if len(self._entries) <= self._max_entries:
                return 0
            oldest = list(self._entries)[: self._eviction_batch]
            for key in oldest:
                del self._entries[key]

        logger.info(f"Cache cleaned: removed {len(oldest)} entries")
        return len(oldest)

    async def _run_sweeper(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval)
            self.sweep()

    def start_sweeper(self) -> None:
        """Starts the periodic sweep on the running event loop."""
        if self._sweeper is not None and not self._sweeper.done():
            return
        self._sweeper = asyncio.get_running_loop().create_task(self._run_sweeper())
        logger.info(f"Cache sweeper started (every {self._sweep_interval:g}s)")

    async def stop_sweeper(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None
        logger.info("Cache sweeper stopped")
