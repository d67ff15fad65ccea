"""Schemas for document translation requests and responses."""

from __future__ import annotations

from pydantic import BaseModel, Field


class TranslateDocumentRequest(BaseModel):
    """Request body for bulk document translation."""

    document_id: str = Field(..., min_length=1, description="Document id or file name")
    target_language: str = Field(default="en", min_length=1, description="Target language tag")
    format: str = Field(default="txt", description="txt, md, json, docx or pdf")


class TranslatedDocumentResponse(BaseModel):
    """Successful translation payload."""

    success: bool = True
    translated_file_name: str
    original_document: str
    original_language: str
    target_language: str
    language_name: str
    chunks: int
    failed_chunks: int = 0
    translated: bool = Field(
        default=True, description="False when the original content was returned"
    )
    content_length: int = Field(..., description="Characters in the joined document body")
    byte_length: int = Field(..., description="Bytes in the rendered payload")
    format: str
    content_type: str
    is_binary: bool
    content: str | None = Field(
        default=None, description="Rendered content, only for text formats"
    )
    download_url: str


class FallbackDownload(BaseModel):
    """Pointer to the original, untranslated document."""

    untranslated_download: bool = True
    message: str = "Download original document without translation"
    download_url: str


class CacheStatsResponse(BaseModel):
    """Translation cache statistics."""

    size: int
    hits: int
    misses: int
    hit_rate: float


class ClearCacheResponse(BaseModel):
    """Response model for cache reset."""

    status: str
    message: str
