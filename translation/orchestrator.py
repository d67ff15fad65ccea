"""
Document Translation Orchestrator

Sequences every chunk of a stored document through the ChunkTranslator.

Pipeline per document:
1. Load ordered chunks and metadata from the document store
2. Admission control on chunk count (per entry point ceiling)
3. Same-language / skip-translation short circuit
4. Availability probe (all-or-nothing gate)
5. Sequential chunk loop with pacing between requests
6. Join in index order and report

Chunks are translated one at a time on purpose: parallel calls against a
rate-limited provider trigger more throttling, not less.
"""

# Standard library
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol, runtime_checkable

# Local application
from core.providers import TranslationProvider
from translation.cache import TranslationCache
from translation.chunk_translator import DEFAULT_MAX_ATTEMPTS, ChunkTranslator
from translation.models import (
    Chunk,
    DocumentMetadata,
    DocumentRejection,
    DocumentTranslationOutcome,
    TranslationOutcome,
    TranslationResult,
    TranslationStatus,
)
from translation.pacing import PacingPolicy, Sleeper, real_sleep
from translation.rate_probe import CANARY_TEXT, RateProbe

# Configure logging
logger = logging.getLogger(__name__)

SECONDS_PER_CHUNK_ESTIMATE = 3
RETRY_AFTER_GUIDANCE = "10-15 minutes"


@runtime_checkable
class DocumentStore(Protocol):
    """Keyed chunk/metadata persistence the pipeline reads from."""

    async def get_metadata(self, document_id: str) -> Optional[DocumentMetadata]:
        """Return document metadata, or None when the document does not exist."""

    async def get_chunks(self, document_id: str) -> list[Chunk]:
        """Return the document's chunks in ascending index order."""


@dataclass(frozen=True)
class EntryPointPolicy:
    """Admission ceiling, retry base delay and pacing for one caller."""

    name: str
    max_chunks: int
    retry_base_delay: float
    pacing: PacingPolicy = field(default_factory=PacingPolicy)


# Bulk translation tolerates a longer pipeline.
BULK_POLICY = EntryPointPolicy(
    name="bulk",
    max_chunks=100,
    retry_base_delay=2.0,
    pacing=PacingPolicy(cache_hit_delay=0.1, provider_call_delay=2.0),
)

# Binary download is synchronous to an HTTP response, so it is stricter.
DOWNLOAD_POLICY = EntryPointPolicy(
    name="download",
    max_chunks=50,
    retry_base_delay=3.0,
    pacing=PacingPolicy(cache_hit_delay=0.1, provider_call_delay=3.0),
)


def estimate_processing_seconds(chunk_count: int) -> int:
    """Rough wall-clock estimate for translating `chunk_count` chunks."""
    return chunk_count * SECONDS_PER_CHUNK_ESTIMATE


class DocumentTranslationOrchestrator:
    """Turns a stored document into a translated, reassembled body."""

    def __init__(
        self,
        store: DocumentStore,
        provider: TranslationProvider,
        cache: TranslationCache,
        *,
        policy: EntryPointPolicy = BULK_POLICY,
        sleep: Sleeper = real_sleep,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        canary_text: str = CANARY_TEXT,
    ) -> None:
        self._store = store
        self._cache = cache
        self._policy = policy
        self._sleep = sleep
        self._translator = ChunkTranslator(
            provider,
            cache,
            max_attempts=max_attempts,
            base_delay=policy.retry_base_delay,
            sleep=sleep,
        )
        self._probe = RateProbe(self._translator, canary_text=canary_text)

    @property
    def policy(self) -> EntryPointPolicy:
        return self._policy

    async def translate_document(
        self,
        document_id: str,
        target_language: str,
        *,
        skip_translation: bool = False,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> DocumentTranslationOutcome:
        """
        Translates every chunk of a document into `target_language`.

        Args:
            document_id: Document identifier understood by the store.
            target_language: Language tag to translate into.
            skip_translation: Return the original content without
                translating (and without admission control).
            cancel_event: Optional event checked before each chunk; when
                set, the loop stops and a `cancelled` result is returned.

        Returns:
            TranslationResult for complete/cancelled runs, otherwise a
            DocumentRejection (not_found, no_content, too_large, unavailable).
            Per-chunk failures never abort the document.
        """
        metadata = await self._store.get_metadata(document_id)
        if metadata is None:
            logger.info(f"Document not found: {document_id}")
            return DocumentRejection(
                status=TranslationStatus.NOT_FOUND,
                document_id=document_id,
                target_language=target_language,
            )

        chunks = sorted(
            await self._store.get_chunks(metadata.document_id),
            key=lambda chunk: chunk.index,
        )
        if not chunks:
            logger.info(f"No chunks stored for document {metadata.title}")
            return DocumentRejection(
                status=TranslationStatus.NO_CONTENT,
                document_id=metadata.document_id,
                target_language=target_language,
                metadata=metadata,
            )

        chunk_count = len(chunks)
        logger.info(
            f"Translating document {metadata.title}: {chunk_count} chunks -> "
            f"{target_language} ({self._policy.name} policy)"
        )

        if not skip_translation and chunk_count > self._policy.max_chunks:
            logger.warning(
                f"Large document rejected: {chunk_count} chunks "
                f"(limit {self._policy.max_chunks})"
            )
            return DocumentRejection(
                status=TranslationStatus.TOO_LARGE,
                document_id=metadata.document_id,
                target_language=target_language,
                metadata=metadata,
                chunk_count=chunk_count,
                max_chunks=self._policy.max_chunks,
                estimated_seconds=estimate_processing_seconds(chunk_count),
            )

        source_language = metadata.language or chunks[0].language or "en"

        if skip_translation or target_language == source_language:
            logger.info(
                f"Skipping translation for {metadata.title} "
                f"(source={source_language}, target={target_language}, skip={skip_translation})"
            )
            return TranslationResult(
                status=TranslationStatus.COMPLETE,
                metadata=metadata,
                source_language=source_language,
                target_language=target_language,
                outcomes=[
                    TranslationOutcome(text=chunk.content, succeeded=True)
                    for chunk in chunks
                ],
                translated=False,
            )

        stats = self._cache.stats()
        logger.info(
            f"Starting cached translation of {chunk_count} chunks "
            f"(cache: {stats.size} entries, {stats.hit_rate:.1%} hit rate)"
        )

        if not await self._probe.is_available(target_language, source_language):
            return DocumentRejection(
                status=TranslationStatus.UNAVAILABLE,
                document_id=metadata.document_id,
                target_language=target_language,
                metadata=metadata,
                chunk_count=chunk_count,
                retry_after=RETRY_AFTER_GUIDANCE,
            )

        outcomes = await self._translate_chunks(
            chunks, target_language, source_language, cancel_event
        )
        status = (
            TranslationStatus.COMPLETE
            if len(outcomes) == chunk_count
            else TranslationStatus.CANCELLED
        )

        result = TranslationResult(
            status=status,
            metadata=metadata,
            source_language=source_language,
            target_language=target_language,
            outcomes=outcomes,
        )
        logger.info(
            f"Translation {status.value}: {result.chunk_count}/{chunk_count} chunks, "
            f"{len(result.failed_chunks)} kept original text, "
            f"{len(result.body)} characters"
        )
        return result

    async def _translate_chunks(
        self,
        chunks: list[Chunk],
        target_language: str,
        source_language: str,
        cancel_event: Optional[asyncio.Event],
    ) -> list[TranslationOutcome]:
        outcomes: list[TranslationOutcome] = []
        total = len(chunks)

        for position, chunk in enumerate(chunks):
            if cancel_event is not None and cancel_event.is_set():
                logger.warning(f"Translation cancelled before chunk {position + 1}/{total}")
                break

            logger.info(f"Processing chunk {position + 1}/{total}")
            outcome = await self._translator.translate_chunk(
                chunk.content, target_language, source_language
            )
            outcomes.append(outcome)

            delay = self._policy.pacing.delay_after(outcome, is_last=position == total - 1)
            if delay > 0:
                logger.debug(f"Waiting {delay:g}s before next chunk...")
                await self._sleep(delay)

        return outcomes
