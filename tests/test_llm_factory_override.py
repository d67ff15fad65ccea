"""
Unit Tests for LLM Factory Model Overriding

Tests model selection for the LLM-backed translation provider.
"""

from unittest.mock import patch

from core.llm_factory import clear_llm_cache, get_llm


def test_get_llm_default_model(monkeypatch):
    """Tests that get_llm uses the default model when nothing overrides it."""
    monkeypatch.delenv("TRANSLATION_LLM_MODEL", raising=False)
    clear_llm_cache()
    with patch("core.llm_factory.ChatGoogleGenerativeAI") as mock_chat:
        get_llm("translation")

    assert mock_chat.call_args.kwargs["model"] == "gemini-2.5-flash"
    assert mock_chat.call_args.kwargs["temperature"] == 0.1
    clear_llm_cache()


def test_get_llm_env_and_argument_override(monkeypatch):
    """Tests that model_name beats TRANSLATION_LLM_MODEL, which beats the default."""
    monkeypatch.setenv("TRANSLATION_LLM_MODEL", "gemini-2.0-flash")
    clear_llm_cache()
    with patch("core.llm_factory.ChatGoogleGenerativeAI") as mock_chat:
        get_llm("translation")
        assert mock_chat.call_args.kwargs["model"] == "gemini-2.0-flash"

        get_llm("translation", model_name="gemini-2.5-pro")
        assert mock_chat.call_args.kwargs["model"] == "gemini-2.5-pro"
    clear_llm_cache()


def test_get_llm_is_cached():
    clear_llm_cache()
    with patch("core.llm_factory.ChatGoogleGenerativeAI") as mock_chat:
        first = get_llm("translation", model_name="gemini-2.5-flash")
        second = get_llm("translation", model_name="gemini-2.5-flash")

    assert first is second
    assert mock_chat.call_count == 1
    clear_llm_cache()
