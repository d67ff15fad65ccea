"""
LLM Factory Module

Provides cached LLM instances for the LLM-backed translation provider.
"""

# Standard library
import logging
import os
from functools import lru_cache
from typing import Literal, Optional

# Third-party
from langchain_google_genai import ChatGoogleGenerativeAI

# Configure logging
logger = logging.getLogger(__name__)

LLMPurpose = Literal["translation"]

_DEFAULT_MODEL = "gemini-2.5-flash"

_LLM_CONFIGS: dict[str, dict] = {
    "translation": {
        "temperature": 0.1,
        "max_output_tokens": 8192,
    },
}


@lru_cache(maxsize=4)
def get_llm(
    purpose: LLMPurpose = "translation",
    model_name: Optional[str] = None,
) -> ChatGoogleGenerativeAI:
    """
    Returns a cached LLM instance for a specific purpose.

    Args:
        purpose: The intended use case. Only "translation" is configured.
        model_name: Optional model override. Falls back to the
            TRANSLATION_LLM_MODEL env var, then the default model.

    Returns:
        Configured ChatGoogleGenerativeAI instance.
    """
    config = _LLM_CONFIGS.get(purpose, _LLM_CONFIGS["translation"])
    model = model_name or os.getenv("TRANSLATION_LLM_MODEL", _DEFAULT_MODEL)

    logger.info(f"Initializing LLM for purpose: {purpose} (model: {model}, config: {config})")

    return ChatGoogleGenerativeAI(
        model=model,
        **config
    )


def clear_llm_cache() -> None:
    """Clears the LLM instance cache."""
    get_llm.cache_clear()
    logger.info("LLM cache cleared")
