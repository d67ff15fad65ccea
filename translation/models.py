"""Data model shared by the document translation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from translation.languages import language_display_name, translated_file_name

CHUNK_SEPARATOR = "\n\n"


class TranslationStatus(str, Enum):
    """Every way a document translation request can end."""

    COMPLETE = "complete"
    UNAVAILABLE = "unavailable"
    TOO_LARGE = "too_large"
    NO_CONTENT = "no_content"
    NOT_FOUND = "not_found"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Chunk:
    """A contiguous slice of a document's text; the unit of translation."""

    document_id: str
    index: int
    content: str
    language: str = "en"


@dataclass(frozen=True)
class DocumentMetadata:
    """Read-only document attributes the pipeline consumes."""

    document_id: str
    title: str
    language: str = "en"
    chunk_count: int = 0
    size_bytes: int = 0
    uploaded_at: Optional[datetime] = None
    status: Optional[str] = None


@dataclass(frozen=True)
class TranslationOutcome:
    """
    Per-chunk translation result.

    `text` is always usable: either the translation or, when the chunk
    failed, the original content. `attempts` counts provider calls only,
    so cache hits and skipped chunks report zero.
    """

    text: str
    succeeded: bool
    attempts: int = 0
    from_cache: bool = False


@dataclass
class TranslationResult:
    """Successful (or cancelled) document translation."""

    status: TranslationStatus
    metadata: DocumentMetadata
    source_language: str
    target_language: str
    outcomes: list[TranslationOutcome] = field(default_factory=list)
    translated: bool = True

    @property
    def document_id(self) -> str:
        return self.metadata.document_id

    @property
    def chunks(self) -> list[str]:
        return [outcome.text for outcome in self.outcomes]

    @property
    def body(self) -> str:
        """Canonical translated document body, chunks joined in index order."""
        return CHUNK_SEPARATOR.join(self.chunks)

    @property
    def chunk_count(self) -> int:
        return len(self.outcomes)

    @property
    def failed_chunks(self) -> list[int]:
        return [
            position
            for position, outcome in enumerate(self.outcomes)
            if not outcome.succeeded
        ]

    @property
    def language_name(self) -> str:
        return language_display_name(self.target_language)

    def file_name(self, extension: str) -> str:
        return translated_file_name(self.metadata.title, self.target_language, extension)


@dataclass
class DocumentRejection:
    """Document-level outcome that stopped the pipeline before or without translation."""

    status: TranslationStatus
    document_id: str
    target_language: str
    metadata: Optional[DocumentMetadata] = None
    chunk_count: int = 0
    max_chunks: Optional[int] = None
    estimated_seconds: Optional[int] = None
    retry_after: Optional[str] = None

    @property
    def source_language(self) -> str:
        return self.metadata.language if self.metadata else "en"


DocumentTranslationOutcome = Union[TranslationResult, DocumentRejection]
