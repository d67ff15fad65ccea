"""
Provider registry and interfaces for the external translation provider.

This module centralizes translation provider selection so tests can run
without touching real external APIs. Providers report failures with typed
exceptions: RateLimitedError for "too many requests", ProviderError for
everything else.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Optional, Protocol, runtime_checkable

import httpx
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate

from core.llm_factory import get_llm

logger = logging.getLogger(__name__)

_GOOGLE_TRANSLATE_URL = "https://translation.googleapis.com/language/translate/v2"
_TOO_MANY_REQUESTS = 429


def _is_true(name: str, default: str = "false") -> bool:
    """Parse boolean-like env vars."""
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class ProviderError(RuntimeError):
    """Raised when a provider operation fails."""


class RateLimitedError(ProviderError):
    """Raised when the provider refuses a call with "too many requests"."""

    def __init__(self, message: str, retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


@dataclass(frozen=True)
class ProviderTranslation:
    """Result of a single provider translate call."""

    text: str
    detected_source_language: str | None = None


@runtime_checkable
class TranslationProvider(Protocol):
    """Translation provider interface."""

    async def translate(
        self, text: str, source_language: str, target_language: str
    ) -> ProviderTranslation:
        """Translate one text from source_language into target_language."""


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _status_code_of(exc: BaseException) -> int | None:
    """Reads an HTTP status code from well-known exception attributes."""
    for candidate in (
        getattr(exc, "status_code", None),
        getattr(exc, "code", None),
        getattr(getattr(exc, "response", None), "status_code", None),
    ):
        if isinstance(candidate, int):
            return int(candidate)
    return None


class GoogleTranslateProvider:
    """Google Cloud Translation (v2 REST) provider backed by httpx."""

    def __init__(
        self,
        api_key: str | None = None,
        api_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._api_key = api_key if api_key is not None else os.getenv("GOOGLE_TRANSLATE_API_KEY", "")
        self._api_url = api_url or os.getenv("GOOGLE_TRANSLATE_API_URL", _GOOGLE_TRANSLATE_URL)
        self._timeout = timeout or float(os.getenv("TRANSLATION_TIMEOUT", "30"))

    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def translate(
        self, text: str, source_language: str, target_language: str
    ) -> ProviderTranslation:
        if not self.is_configured():
            raise ProviderError("GOOGLE_TRANSLATE_API_KEY not configured")

        body = {
            "q": text,
            "source": source_language,
            "target": target_language,
            "format": "text",
        }

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            try:
                response = await client.post(
                    self._api_url,
                    params={"key": self._api_key},
                    json=body,
                )
                response.raise_for_status()
                payload = response.json()
            except httpx.HTTPStatusError as exc:
                status_code = exc.response.status_code
                if status_code == _TOO_MANY_REQUESTS:
                    raise RateLimitedError(
                        "Google Translate rate limit reached",
                        retry_after=_parse_retry_after(exc.response.headers.get("Retry-After")),
                    ) from exc
                raise ProviderError(
                    f"Google Translate returned {status_code}: {exc.response.text[:500]}"
                ) from exc
            except httpx.RequestError as exc:
                raise ProviderError(f"Google Translate request failed: {exc}") from exc
            except ValueError as exc:
                raise ProviderError(f"Google Translate returned invalid JSON: {exc}") from exc

        try:
            first = payload["data"]["translations"][0]
        except (KeyError, IndexError, TypeError) as exc:
            raise ProviderError(f"Unexpected Google Translate response format: {payload}") from exc

        return ProviderTranslation(
            text=first.get("translatedText", ""),
            detected_source_language=first.get("detectedSourceLanguage"),
        )


TRANSLATION_PROMPT = """You are a professional translation system.
Translate the text below from {source_language} to {target_language}.

Rules:
1. Preserve paragraph breaks and Markdown formatting.
2. Keep numbers, codes and proper names unchanged.
3. Output ONLY the translated text, without explanations.

Text:
{input_text}"""


class GeminiTranslationProvider:
    """LLM-backed provider using the LangChain Gemini chat model."""

    def __init__(self, llm: Any = None) -> None:
        self._llm = llm

    def _build_chain(self):
        prompt = ChatPromptTemplate.from_template(TRANSLATION_PROMPT)
        llm = self._llm if self._llm is not None else get_llm("translation")
        return prompt | llm | StrOutputParser()

    async def translate(
        self, text: str, source_language: str, target_language: str
    ) -> ProviderTranslation:
        chain = self._build_chain()

        try:
            translated = await chain.ainvoke({
                "source_language": source_language,
                "target_language": target_language,
                "input_text": text,
            })
        except Exception as exc:  # noqa: BLE001
            if _status_code_of(exc) == _TOO_MANY_REQUESTS:
                raise RateLimitedError(f"Gemini rate limit reached: {exc}") from exc
            raise ProviderError(f"Gemini translation failed: {exc}") from exc

        return ProviderTranslation(text=translated.strip(), detected_source_language=None)


class FakeTranslationProvider:
    """Translation provider that never calls external APIs."""

    async def translate(
        self, text: str, source_language: str, target_language: str
    ) -> ProviderTranslation:
        return ProviderTranslation(
            text=f"[{target_language}] {text}",
            detected_source_language=source_language,
        )


@dataclass
class ProviderRegistry:
    """Container for active providers."""

    translation_provider: TranslationProvider


_registry: Optional[ProviderRegistry] = None


def _build_real_provider(backend: str) -> TranslationProvider:
    if backend == "gemini":
        return GeminiTranslationProvider()
    if backend != "google":
        logger.warning(f"Unknown TRANSLATION_PROVIDER '{backend}', using google")
    return GoogleTranslateProvider()


def configure_providers(
    use_fake: Optional[bool] = None,
    backend: Optional[str] = None,
) -> ProviderRegistry:
    """
    Configure global provider registry.

    Args:
        use_fake: Force fake/real mode. If omitted, infer from env.
        backend: Real provider backend ("google" or "gemini"). If omitted,
            read TRANSLATION_PROVIDER from env.
    """
    global _registry

    if use_fake is None:
        use_fake = _is_true("TEST_MODE") or _is_true("USE_FAKE_PROVIDERS")

    if use_fake:
        _registry = ProviderRegistry(translation_provider=FakeTranslationProvider())
    else:
        backend = (backend or os.getenv("TRANSLATION_PROVIDER", "google")).strip().lower()
        _registry = ProviderRegistry(translation_provider=_build_real_provider(backend))

    logger.info(
        "Provider registry configured (fake=%s, provider=%s)",
        use_fake,
        type(_registry.translation_provider).__name__,
    )
    return _registry


def _get_registry() -> ProviderRegistry:
    global _registry
    if _registry is None:
        _registry = configure_providers()
    return _registry


def get_translation_provider() -> TranslationProvider:
    """Return the translation provider from the active registry."""
    return _get_registry().translation_provider


def using_fake_providers() -> bool:
    """Return whether fake providers are currently active."""
    return isinstance(_get_registry().translation_provider, FakeTranslationProvider)
