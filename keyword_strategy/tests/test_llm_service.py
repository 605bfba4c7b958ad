"""
Unit Tests for LLM Service
==========================
Gemini wrapper behaviour independent of strategy logic.
"""

from unittest.mock import patch, MagicMock

import pytest

from keyword_strategy.services.llm_service import (
    EmptyResponseError,
    LLMError,
    LLMModel,
    LLMService,
    MissingCredentialError,
    ProviderAuthError,
    ProviderError,
    ProviderRateLimitError,
    ResponseFormatError,
    classify_provider_error,
    get_llm_service,
)


class TestErrorTaxonomy:
    """Tests for the error classes."""

    @pytest.mark.parametrize("error_cls", [
        MissingCredentialError,
        ProviderError,
        EmptyResponseError,
        ResponseFormatError,
    ])
    def test_all_are_llm_errors(self, error_cls):
        assert issubclass(error_cls, LLMError)

    def test_status_codes(self):
        assert MissingCredentialError().status_code == 503
        assert ProviderError("boom").status_code == 502
        assert ProviderAuthError("denied").status_code == 502
        assert ProviderRateLimitError("slow down").status_code == 429
        assert EmptyResponseError().status_code == 502
        assert ResponseFormatError().status_code == 502

    def test_default_messages(self):
        assert EmptyResponseError().message == "No data received from Gemini"
        assert ResponseFormatError().message == "Invalid response format from AI"
        assert "GOOGLE_API_KEY" in MissingCredentialError().message


class TestClassifyProviderError:
    """Tests for classify_provider_error."""

    @pytest.mark.parametrize("text,expected", [
        ("429 Too Many Requests", ProviderRateLimitError),
        ("RESOURCE_EXHAUSTED", ProviderRateLimitError),
        ("You exceeded your current quota", ProviderRateLimitError),
        ("403 PERMISSION_DENIED", ProviderAuthError),
        ("API key not valid", ProviderAuthError),
        ("401 UNAUTHENTICATED", ProviderAuthError),
        ("500 Internal error encountered", ProviderError),
        ("400 Invalid JSON payload received", ProviderError),
        ("Connection timed out", ProviderError),
    ])
    def test_mapping(self, text, expected):
        error = classify_provider_error(RuntimeError(text), model="gemini-2.5-flash")

        assert type(error) is expected
        assert error.message == text
        assert error.model == "gemini-2.5-flash"


class TestLLMService:
    """Tests for LLMService construction."""

    def test_default_model(self):
        assert LLMService(api_key="k").model == LLMModel.GEMINI_FLASH.value

    def test_is_configured(self):
        assert LLMService(api_key="k").is_configured
        assert not LLMService(api_key=None).is_configured

    def test_get_client_requires_key(self):
        with patch("keyword_strategy.services.llm_service.ChatGoogleGenerativeAI") as mock_cls:
            with pytest.raises(MissingCredentialError):
                LLMService(api_key=None).get_client({})
            mock_cls.assert_not_called()

    def test_singleton_uses_settings(self):
        LLMService._instance = None
        fake_settings = MagicMock(google_api_key="env-key", strategy_model="gemini-2.5-flash-lite")

        with patch("keyword_strategy.services.llm_service.get_settings", return_value=fake_settings):
            service = get_llm_service()

        try:
            assert service is LLMService.get_instance()
            assert service.model == "gemini-2.5-flash-lite"
            assert service.is_configured
        finally:
            LLMService._instance = None
