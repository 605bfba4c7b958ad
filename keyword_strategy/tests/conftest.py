"""
Test Configuration and Fixtures
================================
Shared pytest fixtures for strategy generation tests.
"""

import json
from typing import Any, Iterator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from langchain_core.messages import AIMessage

from keyword_strategy.app.core.config import Settings
from keyword_strategy.app.schemas.strategy import StrategyResult


# =============================================================================
# PAYLOAD FIXTURES
# =============================================================================

@pytest.fixture
def keyword_payload() -> dict[str, Any]:
    """One keyword analysis as the provider emits it (camelCase)."""
    return {
        "keyword": "خرید قهوه ارگانیک",
        "searchVolume": "High",
        "commercialValue": "High",
        "intent": "Transactional",
        "competition": "Medium",
        "difficultyIndex": 55,
        "rationale": "تقاضای خرید بالا با رقابت متوسط",
        "contentFormat": "Product Page",
        "suggestedTitle": "خرید قهوه ارگانیک اصل با ارسال رایگان",
    }


@pytest.fixture
def strategy_payload(keyword_payload) -> dict[str, Any]:
    """Full provider payload with a mix of intents and levels."""
    return {
        "topic": "قهوه ارگانیک",
        "summary": "تمرکز بر کلمات خرید و راهنمای انتخاب قهوه ارگانیک.",
        "keywords": [
            keyword_payload,
            {
                "keyword": "قهوه ارگانیک چیست",
                "searchVolume": "Medium",
                "commercialValue": "Low",
                "intent": "Informational",
                "competition": "Low",
                "difficultyIndex": 20,
                "rationale": "سوال رایج کاربران تازه‌کار",
                "contentFormat": "راهنمای جامع",
                "suggestedTitle": "قهوه ارگانیک چیست؟ هر آنچه باید بدانید",
            },
            {
                "keyword": "بهترین برند قهوه ارگانیک",
                "searchVolume": "Low",
                "commercialValue": "High",
                "intent": "Commercial",
                "competition": "High",
                "difficultyIndex": 82,
                "rationale": "مقایسه برندها پیش از خرید",
                "contentFormat": "مقاله مقایسه‌ای",
                "suggestedTitle": "۱۰ برند برتر قهوه ارگانیک",
            },
            {
                "keyword": "آموزش دم کردن قهوه ارگانیک",
                "searchVolume": "High",
                "commercialValue": "Medium",
                "intent": "Informational",
                "competition": "Low",
                "difficultyIndex": 35,
                "rationale": "محتوای آموزشی با ترافیک خوب",
            },
        ],
    }


@pytest.fixture
def strategy_json(strategy_payload) -> str:
    """Provider payload serialized as plain JSON."""
    return json.dumps(strategy_payload, ensure_ascii=False)


@pytest.fixture
def strategy_result(strategy_payload) -> StrategyResult:
    """Validated StrategyResult built from the payload."""
    return StrategyResult.model_validate(strategy_payload)


# =============================================================================
# SETTINGS FIXTURES
# =============================================================================

@pytest.fixture
def test_settings() -> Settings:
    """Settings with a credential, isolated from .env."""
    return Settings(_env_file=None, google_api_key="test-api-key")


@pytest.fixture
def settings_without_key() -> Settings:
    """Settings with no credential, isolated from .env."""
    return Settings(_env_file=None, google_api_key=None)


# =============================================================================
# GEMINI MOCK FIXTURES
# =============================================================================

@pytest.fixture
def ai_message():
    """Factory for AIMessage replies with usage metadata, as ChatGoogleGenerativeAI returns."""
    def _make(content: Any) -> AIMessage:
        return AIMessage(
            content=content,
            usage_metadata={"input_tokens": 420, "output_tokens": 880, "total_tokens": 1300},
        )
    return _make


@pytest.fixture
def mock_gemini() -> Iterator[MagicMock]:
    """
    Patch the Gemini chat model class.

    ``mock_gemini.return_value.ainvoke`` is the single network call.
    """
    with patch("keyword_strategy.services.llm_service.ChatGoogleGenerativeAI") as mock_cls:
        mock_cls.return_value.ainvoke = AsyncMock()
        yield mock_cls


# =============================================================================
# APP FIXTURES
# =============================================================================

@pytest.fixture
def app() -> Iterator[FastAPI]:
    """FastAPI application with dependency overrides reset after each test."""
    from keyword_strategy.app.main import app as fastapi_app

    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Synchronous test client."""
    return TestClient(app)


@pytest.fixture
def fake_generator(app: FastAPI, strategy_result) -> MagicMock:
    """Generator stub injected into the API."""
    from keyword_strategy.app.core.dependencies import get_generator_dep

    generator = MagicMock()
    generator.generate = AsyncMock(return_value=strategy_result)
    app.dependency_overrides[get_generator_dep] = lambda: generator
    return generator
