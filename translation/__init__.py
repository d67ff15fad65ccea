"""
Translation Package

Chunked document translation pipeline:
- TranslationCache (content-addressed memo with hit/miss accounting)
- ChunkTranslator (retry/backoff/fallback per chunk)
- RateProbe (canary availability check)
- DocumentTranslationOrchestrator (admission, pacing, reassembly)
"""

from translation.cache import CacheStats, TranslationCache, make_cache_key
from translation.chunk_translator import ChunkTranslator
from translation.models import (
    Chunk,
    DocumentMetadata,
    DocumentRejection,
    TranslationOutcome,
    TranslationResult,
    TranslationStatus,
)
from translation.orchestrator import (
    BULK_POLICY,
    DOWNLOAD_POLICY,
    DocumentStore,
    DocumentTranslationOrchestrator,
    EntryPointPolicy,
)
from translation.pacing import PacingPolicy
from translation.rate_probe import RateProbe

__all__ = [
    # Cache
    "CacheStats",
    "TranslationCache",
    "make_cache_key",
    # Per-chunk
    "ChunkTranslator",
    "RateProbe",
    "PacingPolicy",
    # Documents
    "Chunk",
    "DocumentMetadata",
    "DocumentRejection",
    "TranslationOutcome",
    "TranslationResult",
    "TranslationStatus",
    "DocumentStore",
    "DocumentTranslationOrchestrator",
    "EntryPointPolicy",
    "BULK_POLICY",
    "DOWNLOAD_POLICY",
]
