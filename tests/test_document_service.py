"""Tests for shaping pipeline rejections into API errors."""

from urllib.parse import parse_qs, urlparse

from core.errors import ErrorCode
from documents.service import build_download_url, format_estimated_time, rejection_to_error
from translation.models import DocumentMetadata, DocumentRejection, TranslationStatus

METADATA = DocumentMetadata(document_id="doc-fr", title="rapport.txt", language="fr")


class TestDownloadUrl:
    def test_query_parameters_are_encoded(self) -> None:
        url = build_download_url("my notes.txt", "es", "pdf")
        query = parse_qs(urlparse(url).query)

        assert urlparse(url).path == "/api/documents/download"
        assert query["document_id"] == ["my notes.txt"]
        assert query["format"] == ["pdf"]
        assert "skip_translation" not in query

    def test_skip_translation_flag(self) -> None:
        url = build_download_url("doc-1", "en", "txt", skip_translation=True)
        assert parse_qs(urlparse(url).query)["skip_translation"] == ["true"]


def test_estimated_time_rounds_up_to_minutes() -> None:
    assert format_estimated_time(303) == "6 minutes"


class TestRejectionToError:
    def test_too_large(self) -> None:
        rejection = DocumentRejection(
            status=TranslationStatus.TOO_LARGE,
            document_id="doc-fr",
            target_language="es",
            metadata=METADATA,
            chunk_count=120,
            max_chunks=100,
            estimated_seconds=360,
        )

        error = rejection_to_error(rejection, "docx", policy_name="bulk")

        assert error.status_code == 413
        assert error.code == ErrorCode.DOCUMENT_TOO_LARGE
        assert error.details["estimated_time"] == "6 minutes"
        assert error.details["document"]["title"] == "rapport.txt"
        fallback_query = parse_qs(urlparse(error.details["fallback"]["download_url"]).query)
        # Fallback serves the original in its own language
        assert fallback_query["target_language"] == ["fr"]
        assert fallback_query["format"] == ["docx"]
        assert fallback_query["skip_translation"] == ["true"]
        assert not any("translate endpoint" in s for s in error.details["suggestions"])

    def test_unavailable(self) -> None:
        rejection = DocumentRejection(
            status=TranslationStatus.UNAVAILABLE,
            document_id="doc-fr",
            target_language="es",
            metadata=METADATA,
            chunk_count=4,
            retry_after="10-15 minutes",
        )

        error = rejection_to_error(rejection, "txt", policy_name="download")

        assert error.status_code == 503
        assert error.code == ErrorCode.TRANSLATION_UNAVAILABLE
        assert error.details["retry_after"] == "10-15 minutes"
        assert error.details["fallback"]["untranslated_download"] is True

    def test_not_found_and_no_content(self) -> None:
        missing = DocumentRejection(
            status=TranslationStatus.NOT_FOUND, document_id="x", target_language="es"
        )
        empty = DocumentRejection(
            status=TranslationStatus.NO_CONTENT,
            document_id="doc-fr",
            target_language="es",
            metadata=METADATA,
        )

        assert rejection_to_error(missing, "txt", policy_name="bulk").code == ErrorCode.NOT_FOUND
        no_content = rejection_to_error(empty, "txt", policy_name="bulk")
        assert no_content.status_code == 404
        assert no_content.code == ErrorCode.NO_CONTENT
