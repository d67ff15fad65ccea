"""
Document Translation Router

Provides API endpoints for translating stored documents, downloading rendered
translations, and inspecting the shared translation cache.
"""

# Standard library
import logging
from urllib.parse import quote

# Third-party
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response

# Local application
from core.providers import TranslationProvider, get_translation_provider
from documents import service
from documents.repository import SupabaseDocumentStore
from documents.schemas import (
    CacheStatsResponse,
    ClearCacheResponse,
    TranslateDocumentRequest,
    TranslatedDocumentResponse,
)
from translation.cache import TranslationCache
from translation.orchestrator import (
    BULK_POLICY,
    DOWNLOAD_POLICY,
    DocumentStore,
    DocumentTranslationOrchestrator,
)
from translation.pacing import Sleeper, real_sleep

# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter()


def _content_disposition(file_name: str) -> str:
    """Attachment header with an ASCII fallback name and an RFC 5987 UTF-8 name."""
    ascii_name = file_name.encode("ascii", "ignore").decode("ascii").replace('"', "").strip()
    return (
        f"attachment; filename=\"{ascii_name or 'document'}\"; "
        f"filename*=UTF-8''{quote(file_name)}"
    )


# --- Dependencies ---

def get_translation_cache(request: Request) -> TranslationCache:
    """Returns the process-wide cache created during application startup."""
    return request.app.state.translation_cache


def get_document_store() -> DocumentStore:
    return SupabaseDocumentStore()


def get_sleeper() -> Sleeper:
    return real_sleep


def get_bulk_orchestrator(
    store: DocumentStore = Depends(get_document_store),
    provider: TranslationProvider = Depends(get_translation_provider),
    cache: TranslationCache = Depends(get_translation_cache),
    sleep: Sleeper = Depends(get_sleeper),
) -> DocumentTranslationOrchestrator:
    return DocumentTranslationOrchestrator(
        store, provider, cache, policy=BULK_POLICY, sleep=sleep
    )


def get_download_orchestrator(
    store: DocumentStore = Depends(get_document_store),
    provider: TranslationProvider = Depends(get_translation_provider),
    cache: TranslationCache = Depends(get_translation_cache),
    sleep: Sleeper = Depends(get_sleeper),
) -> DocumentTranslationOrchestrator:
    return DocumentTranslationOrchestrator(
        store, provider, cache, policy=DOWNLOAD_POLICY, sleep=sleep
    )


# --- Endpoints ---

@router.post("/translate", response_model=TranslatedDocumentResponse)
async def translate_document(
    request: TranslateDocumentRequest,
    orchestrator: DocumentTranslationOrchestrator = Depends(get_bulk_orchestrator),
) -> TranslatedDocumentResponse:
    """
    Translates a stored document chunk by chunk and renders the result.

    The request stays open for the whole pipeline (roughly 2-3 seconds per
    uncached chunk). Oversized documents (413) and an unavailable provider
    (503) are reported with a fallback download of the original.

    Args:
        request: Document id, target language and output format.
        orchestrator: Bulk-policy pipeline (injected).

    Returns:
        TranslatedDocumentResponse with inline content for text formats.
    """
    logger.info(
        f"Generating translated document: {request.document_id} -> "
        f"{request.target_language} ({request.format})"
    )
    return await service.translate_document(
        orchestrator,
        document_id=request.document_id,
        target_language=request.target_language,
        requested_format=request.format,
    )


@router.get("/download")
async def download_document(
    document_id: str = Query(..., min_length=1),
    target_language: str = Query(..., min_length=1),
    format: str = Query("pdf"),
    skip_translation: bool = Query(False),
    orchestrator: DocumentTranslationOrchestrator = Depends(get_download_orchestrator),
) -> Response:
    """
    Returns the translated document as a file attachment.

    Uses the stricter download policy. With skip_translation=true the
    original content is rendered without calling the provider.
    """
    logger.info(
        f"Generating document download: {document_id} -> {target_language}.{format}"
        f"{' (no translation)' if skip_translation else ''}"
    )
    rendered, file_name = await service.download_document(
        orchestrator,
        document_id=document_id,
        target_language=target_language,
        requested_format=format,
        skip_translation=skip_translation,
    )
    return Response(
        content=rendered.content,
        media_type=rendered.content_type,
        headers={
            "Content-Disposition": _content_disposition(file_name),
            "Content-Length": str(rendered.byte_length),
        },
    )


@router.get("/cache/stats", response_model=CacheStatsResponse)
async def get_cache_stats(
    cache: TranslationCache = Depends(get_translation_cache),
) -> CacheStatsResponse:
    """Returns translation cache size and hit/miss counters."""
    stats = cache.stats()
    return CacheStatsResponse(
        size=stats.size,
        hits=stats.hits,
        misses=stats.misses,
        hit_rate=stats.hit_rate,
    )


@router.delete("/cache", response_model=ClearCacheResponse)
async def clear_cache(
    cache: TranslationCache = Depends(get_translation_cache),
) -> ClearCacheResponse:
    """Drops every cached translation and resets the counters."""
    cache.clear()
    return ClearCacheResponse(status="cleared", message="Translation cache cleared")
