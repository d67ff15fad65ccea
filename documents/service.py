"""Service layer shaping pipeline outcomes into API payloads."""

from __future__ import annotations

import logging
import math
from urllib.parse import urlencode

from fastapi.concurrency import run_in_threadpool

from core.errors import AppError, ErrorCode
from documents.renderer import RenderMetadata, RenderedDocument, normalize_format, render_document
from documents.schemas import FallbackDownload, TranslatedDocumentResponse
from translation.models import (
    DocumentRejection,
    DocumentTranslationOutcome,
    TranslationResult,
    TranslationStatus,
)
from translation.orchestrator import DocumentTranslationOrchestrator

logger = logging.getLogger(__name__)

DOWNLOAD_PATH = "/api/documents/download"

ALTERNATIVES = [
    "Use a dedicated translation service like DeepL or Microsoft Translator",
    "Copy text sections manually into a translation tool",
    "Try again later when rate limits reset",
    "Use the original document for now",
]


def build_download_url(
    document_id: str,
    target_language: str,
    fmt: str,
    *,
    skip_translation: bool = False,
) -> str:
    params = {
        "document_id": document_id,
        "target_language": target_language,
        "format": fmt,
    }
    if skip_translation:
        params["skip_translation"] = "true"
    return f"{DOWNLOAD_PATH}?{urlencode(params)}"


def build_fallback_download(rejection: DocumentRejection, fmt: str) -> FallbackDownload:
    """Points at the untranslated original in the requested format."""
    return FallbackDownload(
        download_url=build_download_url(
            rejection.document_id,
            rejection.source_language,
            fmt,
            skip_translation=True,
        )
    )


def format_estimated_time(seconds: int) -> str:
    return f"{math.ceil(seconds / 60)} minutes"


def _document_info(rejection: DocumentRejection) -> dict:
    title = rejection.metadata.title if rejection.metadata else rejection.document_id
    return {
        "title": title,
        "chunks": rejection.chunk_count,
        "language": rejection.source_language,
    }


def rejection_to_error(rejection: DocumentRejection, fmt: str, *, policy_name: str) -> AppError:
    """
    Converts a document-level rejection into a structured AppError.

    Every rejection carries what happened and what the caller can do next.
    """
    if rejection.status == TranslationStatus.NOT_FOUND:
        return AppError(
            code=ErrorCode.NOT_FOUND,
            message="Document not found",
            status_code=404,
            details={"document_id": rejection.document_id},
        )

    if rejection.status == TranslationStatus.NO_CONTENT:
        return AppError(
            code=ErrorCode.NO_CONTENT,
            message="No document chunks found",
            status_code=404,
            details={"document_id": rejection.document_id},
        )

    fallback = build_fallback_download(rejection, fmt).model_dump()

    if rejection.status == TranslationStatus.TOO_LARGE:
        suggestions = [
            f"Try using smaller documents (under {rejection.max_chunks} chunks)",
            "Use text format instead of PDF for faster processing",
            "Wait 10-15 minutes before retrying large documents",
            "Consider manually translating critical sections",
        ]
        if policy_name == "download":
            suggestions.insert(0, "Use the /api/documents/translate endpoint for large documents")
        estimated_time = format_estimated_time(rejection.estimated_seconds or 0)
        return AppError(
            code=ErrorCode.DOCUMENT_TOO_LARGE,
            message=(
                f"This document has {rejection.chunk_count} text chunks, more than the "
                f"{rejection.max_chunks} allowed for immediate translation"
            ),
            status_code=413,
            details={
                "chunks": rejection.chunk_count,
                "estimated_time": estimated_time,
                "suggested_max_chunks": rejection.max_chunks,
                "suggestions": suggestions,
                "fallback": fallback,
                "document": {**_document_info(rejection), "estimated_time": estimated_time},
            },
        )

    if rejection.status == TranslationStatus.UNAVAILABLE:
        return AppError(
            code=ErrorCode.TRANSLATION_UNAVAILABLE,
            message="Translation service temporarily unavailable",
            status_code=503,
            details={
                "retry_after": rejection.retry_after,
                "retry_message": (
                    "Translation services should be available again after the rate limit resets"
                ),
                "fallback": fallback,
                "alternatives": list(ALTERNATIVES),
                "document": _document_info(rejection),
            },
        )

    return AppError(
        code=ErrorCode.PROCESSING_ERROR,
        message=f"Translation stopped: {rejection.status.value}",
        status_code=500,
    )


def _render_metadata(result: TranslationResult) -> RenderMetadata:
    return RenderMetadata(
        original_document=result.metadata.title,
        original_language=result.source_language,
        target_language=result.target_language,
        chunks=result.chunk_count,
    )


async def _run(
    orchestrator: DocumentTranslationOrchestrator,
    *,
    document_id: str,
    target_language: str,
    fmt: str,
    skip_translation: bool = False,
) -> TranslationResult:
    outcome: DocumentTranslationOutcome = await orchestrator.translate_document(
        document_id,
        target_language,
        skip_translation=skip_translation,
    )
    if isinstance(outcome, DocumentRejection):
        raise rejection_to_error(outcome, fmt, policy_name=orchestrator.policy.name)
    if outcome.status != TranslationStatus.COMPLETE:
        raise AppError(
            code=ErrorCode.PROCESSING_ERROR,
            message=f"Translation stopped: {outcome.status.value}",
            status_code=500,
        )
    return outcome


async def translate_document(
    orchestrator: DocumentTranslationOrchestrator,
    *,
    document_id: str,
    target_language: str,
    requested_format: str,
) -> TranslatedDocumentResponse:
    """Translates a stored document and renders it in the requested format."""
    fmt = normalize_format(requested_format)
    result = await _run(
        orchestrator,
        document_id=document_id,
        target_language=target_language,
        fmt=fmt,
    )

    body = result.body
    rendered: RenderedDocument = await run_in_threadpool(
        render_document, fmt, body, _render_metadata(result)
    )

    logger.info(
        f"Translation completed: {result.chunk_count} chunks -> {len(body)} characters "
        f"({rendered.format}, {rendered.byte_length} bytes)"
    )

    return TranslatedDocumentResponse(
        translated_file_name=result.file_name(rendered.extension),
        original_document=result.metadata.title,
        original_language=result.source_language,
        target_language=result.target_language,
        language_name=result.language_name,
        chunks=result.chunk_count,
        failed_chunks=len(result.failed_chunks),
        translated=result.translated,
        content_length=len(body),
        byte_length=rendered.byte_length,
        format=rendered.format,
        content_type=rendered.content_type,
        is_binary=rendered.is_binary,
        content=None if rendered.is_binary else rendered.content.decode("utf-8"),
        download_url=build_download_url(
            result.document_id, result.target_language, rendered.format
        ),
    )


async def download_document(
    orchestrator: DocumentTranslationOrchestrator,
    *,
    document_id: str,
    target_language: str,
    requested_format: str,
    skip_translation: bool = False,
) -> tuple[RenderedDocument, str]:
    """
    Translates (or skips translating) a document and returns the rendered file.

    Returns:
        Tuple of (rendered document, download file name).
    """
    fmt = normalize_format(requested_format)
    result = await _run(
        orchestrator,
        document_id=document_id,
        target_language=target_language,
        fmt=fmt,
        skip_translation=skip_translation,
    )
    rendered = await run_in_threadpool(
        render_document, fmt, result.body, _render_metadata(result)
    )
    file_name = result.file_name(rendered.extension)
    logger.info(f"Document generated: {file_name} ({rendered.byte_length} bytes)")
    return rendered, file_name
