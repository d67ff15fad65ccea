"""Document store adapters: chunk and metadata reads for the translation pipeline."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from fastapi.concurrency import run_in_threadpool
from postgrest.exceptions import APIError as PostgrestAPIError

from core.errors import AppError, ErrorCode
from supabase_client import get_supabase
from translation.models import Chunk, DocumentMetadata

_METADATA_COLUMNS = "id, file_name, source_lang, chunk_count, size_bytes, created_at, status"


def _get_client_or_raise():
    client = get_supabase()
    if not client:
        raise AppError(
            code=ErrorCode.DATABASE_ERROR,
            message="Database service unavailable",
            status_code=500,
        )
    return client


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def metadata_from_row(row: dict) -> DocumentMetadata:
    """Maps a `documents` row onto DocumentMetadata."""
    return DocumentMetadata(
        document_id=str(row["id"]),
        title=row.get("file_name") or str(row["id"]),
        language=row.get("source_lang") or "en",
        chunk_count=int(row.get("chunk_count") or 0),
        size_bytes=int(row.get("size_bytes") or 0),
        uploaded_at=_parse_timestamp(row.get("created_at")),
        status=row.get("status"),
    )


def chunk_from_row(row: dict) -> Chunk:
    """Maps a `document_chunks` row onto Chunk."""
    return Chunk(
        document_id=str(row["document_id"]),
        index=int(row["chunk_index"]),
        content=row.get("content") or "",
        language=row.get("language") or "en",
    )


class SupabaseDocumentStore:
    """Reads documents from the `documents` and `document_chunks` tables."""

    async def get_metadata(self, document_id: str) -> Optional[DocumentMetadata]:
        """
        Finds a document by id, falling back to its file name.

        When several uploads share a file name, the most recent one wins.
        """
        client = _get_client_or_raise()
        try:
            response = await run_in_threadpool(
                lambda: client.table("documents")
                .select(_METADATA_COLUMNS)
                .eq("id", document_id)
                .limit(1)
                .execute()
            )
            rows = response.data or []
            if not rows:
                response = await run_in_threadpool(
                    lambda: client.table("documents")
                    .select(_METADATA_COLUMNS)
                    .eq("file_name", document_id)
                    .order("created_at", desc=True)
                    .limit(1)
                    .execute()
                )
                rows = response.data or []
        except PostgrestAPIError as exc:
            raise AppError(
                code=ErrorCode.DATABASE_ERROR,
                message="Failed to query document",
                status_code=500,
                details={"operation": "get_metadata"},
            ) from exc

        if not rows:
            return None
        return metadata_from_row(rows[0])

    async def get_chunks(self, document_id: str) -> list[Chunk]:
        """Returns the document's chunks ordered by chunk_index."""
        client = _get_client_or_raise()
        try:
            response = await run_in_threadpool(
                lambda: client.table("document_chunks")
                .select("document_id, chunk_index, content, language")
                .eq("document_id", document_id)
                .order("chunk_index")
                .execute()
            )
        except PostgrestAPIError as exc:
            raise AppError(
                code=ErrorCode.DATABASE_ERROR,
                message="Failed to retrieve document chunks",
                status_code=500,
                details={"operation": "get_chunks"},
            ) from exc
        return [chunk_from_row(row) for row in response.data or []]


class InMemoryDocumentStore:
    """Dict-backed store, injected in place of Supabase by the test suite."""

    def __init__(self) -> None:
        self._metadata: dict[str, DocumentMetadata] = {}
        self._chunks: dict[str, list[Chunk]] = {}

    def add_document(
        self,
        title: str,
        contents: list[str],
        *,
        language: str = "en",
        document_id: Optional[str] = None,
    ) -> DocumentMetadata:
        """Registers a document whose chunks are `contents` in order."""
        document_id = document_id or title
        metadata = DocumentMetadata(
            document_id=document_id,
            title=title,
            language=language,
            chunk_count=len(contents),
            size_bytes=sum(len(content.encode("utf-8")) for content in contents),
            uploaded_at=datetime.now(timezone.utc),
            status="completed",
        )
        self._metadata[document_id] = metadata
        self._chunks[document_id] = [
            Chunk(document_id=document_id, index=index, content=content, language=language)
            for index, content in enumerate(contents)
        ]
        return metadata

    async def get_metadata(self, document_id: str) -> Optional[DocumentMetadata]:
        if document_id in self._metadata:
            return self._metadata[document_id]
        matches = [m for m in self._metadata.values() if m.title == document_id]
        return matches[-1] if matches else None

    async def get_chunks(self, document_id: str) -> list[Chunk]:
        return sorted(self._chunks.get(document_id, []), key=lambda c: c.index)
