"""
Document Renderer

Turns a translated document body plus its metadata into a downloadable
payload: plain text, Markdown, JSON, DOCX (via Pandoc) or PDF (via
markdown-pdf). Unknown formats and rendering failures fall back to plain text.
"""

# Standard library
import json
import logging
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

# Third-party
import pypandoc
from markdown_pdf import MarkdownPdf, Section

# Local application
from translation.languages import language_display_name

# Configure logging
logger = logging.getLogger(__name__)

CONTENT_TYPES: dict[str, str] = {
    "txt": "text/plain; charset=utf-8",
    "md": "text/markdown; charset=utf-8",
    "json": "application/json",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "pdf": "application/pdf",
}
BINARY_FORMATS = {"docx", "pdf"}
_FORMAT_ALIASES = {"markdown": "md", "text": "txt"}


@dataclass(frozen=True)
class RenderMetadata:
    """Metadata printed alongside the rendered content."""

    original_document: str
    original_language: str
    target_language: str
    chunks: int
    translated_at: Optional[datetime] = None

    @property
    def language_name(self) -> str:
        return language_display_name(self.target_language)

    def as_dict(self) -> dict:
        translated_at = self.translated_at or datetime.now(timezone.utc)
        return {
            "originalDocument": self.original_document,
            "originalLanguage": self.original_language,
            "targetLanguage": self.target_language,
            "languageName": self.language_name,
            "chunks": self.chunks,
            "translatedAt": translated_at.isoformat(),
        }


@dataclass(frozen=True)
class RenderedDocument:
    """Rendered byte payload and how to serve it."""

    content: bytes
    format: str
    content_type: str

    @property
    def extension(self) -> str:
        return self.format

    @property
    def is_binary(self) -> bool:
        return self.format in BINARY_FORMATS

    @property
    def byte_length(self) -> int:
        return len(self.content)


def normalize_format(requested: Optional[str]) -> str:
    """Maps a caller-selected format onto a supported one (default: txt)."""
    fmt = (requested or "txt").strip().lower()
    fmt = _FORMAT_ALIASES.get(fmt, fmt)
    return fmt if fmt in CONTENT_TYPES else "txt"


def _markdown_document(content: str, metadata: RenderMetadata) -> str:
    meta = metadata.as_dict()
    return (
        f"# {metadata.original_document} ({metadata.language_name})\n\n"
        f"## Document Details\n"
        f"- **Original Language:** {metadata.original_language.upper()}\n"
        f"- **Target Language:** {metadata.language_name} ({metadata.target_language})\n"
        f"- **Generated At:** {meta['translatedAt']}\n"
        f"- **Chunks:** {metadata.chunks}\n\n"
        f"## Content\n\n"
        f"{content}\n"
    )


def _render_pdf(content: str, metadata: RenderMetadata) -> bytes:
    pdf = MarkdownPdf(toc_level=0, optimize=True)
    pdf.meta["title"] = f"{metadata.original_document} ({metadata.language_name})"
    pdf.add_section(Section(_markdown_document(content, metadata)))

    fd, output_path = tempfile.mkstemp(suffix=".pdf")
    os.close(fd)
    try:
        pdf.save(output_path)
        with open(output_path, "rb") as f:
            return f.read()
    finally:
        if os.path.exists(output_path):
            os.remove(output_path)


def _render_docx(content: str, metadata: RenderMetadata) -> bytes:
    fd, output_path = tempfile.mkstemp(suffix=".docx")
    os.close(fd)
    try:
        pypandoc.convert_text(
            _markdown_document(content, metadata),
            to="docx",
            format="md",
            outputfile=output_path,
        )
        with open(output_path, "rb") as f:
            return f.read()
    finally:
        if os.path.exists(output_path):
            os.remove(output_path)


def render_document(
    requested_format: Optional[str],
    content: str,
    metadata: RenderMetadata,
) -> RenderedDocument:
    """
    Renders `content` in the requested format.

    This is a SYNCHRONOUS function; call it via run_in_threadpool in async
    contexts because PDF/DOCX generation is CPU- and subprocess-bound.

    Args:
        requested_format: txt, md/markdown, json, docx or pdf. Anything else
            renders as plain text.
        content: Joined document body.
        metadata: Document details for headers and JSON output.

    Returns:
        RenderedDocument with bytes and content type.
    """
    fmt = normalize_format(requested_format)

    try:
        if fmt == "pdf":
            logger.info("Generating PDF document...")
            payload = _render_pdf(content, metadata)
        elif fmt == "docx":
            logger.info("Generating DOCX document...")
            payload = _render_docx(content, metadata)
        elif fmt == "json":
            payload = json.dumps(
                {**metadata.as_dict(), "content": content},
                ensure_ascii=False,
                indent=2,
            ).encode("utf-8")
        elif fmt == "md":
            payload = _markdown_document(content, metadata).encode("utf-8")
        else:
            payload = content.encode("utf-8")
    except Exception as e:
        logger.error(f"Failed to generate {fmt} format, falling back to plain text: {e}", exc_info=True)
        fmt = "txt"
        payload = content.encode("utf-8")

    return RenderedDocument(content=payload, format=fmt, content_type=CONTENT_TYPES[fmt])
