"""
LLM Service - Gemini Integration
================================
Centralized service for structured JSON generation with Google Gemini:
- Schema-constrained output (JSON mime type + response schema)
- Single attempt per call, no retry or backoff
- Token usage and latency tracking
- Typed error taxonomy for the HTTP edge
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from pydantic import BaseModel, Field

from keyword_strategy.app.core.config import get_settings

logger = logging.getLogger(__name__)


# =============================================================================
# ENUMS AND MODELS
# =============================================================================

class LLMModel(str, Enum):
    """Gemini generation tiers suited to short structured output."""
    GEMINI_FLASH = "gemini-2.5-flash"
    GEMINI_FLASH_LITE = "gemini-2.5-flash-lite"
    GEMINI_PRO = "gemini-2.5-pro"


class TokenUsage(BaseModel):
    """Token usage statistics."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class LLMResponse(BaseModel):
    """Standardized LLM response."""
    content: str
    model: str
    usage: TokenUsage
    latency_ms: int
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


# =============================================================================
# ERRORS
# =============================================================================

class LLMError(Exception):
    """Base exception for strategy generation failures. Every subclass is terminal."""

    status_code: int = 502

    def __init__(self, message: str, model: str | None = None):
        self.message = message
        self.model = model
        super().__init__(self.message)


class MissingCredentialError(LLMError):
    """Raised when no provider credential is configured. No network call is made."""

    status_code = 503

    def __init__(self, message: str = "Gemini API key is missing. Set GOOGLE_API_KEY.", **kwargs):
        super().__init__(message, **kwargs)


class ProviderError(LLMError):
    """Raised when the provider call itself fails (network, auth, quota, bad request)."""

    def __init__(self, message: str, status_code: int | None = None, **kwargs):
        super().__init__(message, **kwargs)
        if status_code is not None:
            self.status_code = status_code


class ProviderAuthError(ProviderError):
    """Raised when the provider rejects the credential."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, status_code=502, **kwargs)


class ProviderRateLimitError(ProviderError):
    """Raised when the provider reports quota or rate limit exhaustion."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, status_code=429, **kwargs)


class EmptyResponseError(LLMError):
    """Raised when the provider succeeds but returns no usable text."""

    def __init__(self, message: str = "No data received from Gemini", **kwargs):
        super().__init__(message, **kwargs)


class ResponseFormatError(LLMError):
    """Raised when returned text cannot be decoded into the expected shape."""

    def __init__(self, message: str = "Invalid response format from AI", **kwargs):
        super().__init__(message, **kwargs)


def classify_provider_error(exc: Exception, model: str | None = None) -> ProviderError:
    """
    Map a raw provider/transport exception to a ProviderError subclass.

    The provider's exception text is kept as the message; callers chain it
    with ``raise ... from exc``.
    """
    error_str = str(exc).lower()

    if "429" in error_str or "quota" in error_str or "rate limit" in error_str or "resource_exhausted" in error_str:
        return ProviderRateLimitError(str(exc), model=model)

    if (
        "401" in error_str
        or "403" in error_str
        or "api key" in error_str
        or "api_key" in error_str
        or "permission_denied" in error_str
        or "unauthenticated" in error_str
    ):
        return ProviderAuthError(str(exc), model=model)

    return ProviderError(str(exc), model=model)


def _extract_text(content: Any) -> str:
    """Flatten message content (string or list of parts) into plain text."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    parts: list[str] = []
    for part in content:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type", "text") == "text":
            parts.append(part.get("text") or "")
    return "".join(parts)


# =============================================================================
# LLM SERVICE
# =============================================================================

class LLMService:
    """
    Gemini LLM Service for schema-constrained JSON generation.

    The credential is an explicit constructor argument, read once and never
    mutated. Each ``generate_json`` call builds its own client and makes
    exactly one provider request.

    Usage:
        >>> service = LLMService(api_key="...", model="gemini-2.5-flash")
        >>> response = await service.generate_json(prompt, response_schema=schema)
    """

    _instance: LLMService | None = None

    def __init__(self, api_key: str | None, model: str = LLMModel.GEMINI_FLASH.value):
        self._api_key = api_key
        self.model = model

    @classmethod
    def get_instance(cls) -> LLMService:
        """Get singleton instance built from application settings."""
        if cls._instance is None:
            settings = get_settings()
            cls._instance = cls(api_key=settings.google_api_key, model=settings.strategy_model)
            if not settings.google_api_key:
                logger.warning("No Gemini API key configured! Set GOOGLE_API_KEY")
        return cls._instance

    @property
    def is_configured(self) -> bool:
        """Whether a credential is available."""
        return bool(self._api_key)

    def ensure_configured(self) -> None:
        """Raise MissingCredentialError when no credential is set."""
        if not self._api_key:
            raise MissingCredentialError(model=self.model)

    def get_client(self, response_schema: dict[str, Any] | None = None) -> BaseChatModel:
        """
        Build a Gemini chat model configured for JSON output.

        Args:
            response_schema: JSON schema for constrained decoding

        Returns:
            LangChain chat model
        """
        self.ensure_configured()
        return ChatGoogleGenerativeAI(
            model=self.model,
            google_api_key=self._api_key,
            response_mime_type="application/json",
            response_schema=response_schema,
            # One attempt only: stop after the first try
            max_retries=1,
        )

    # =========================================================================
    # CORE GENERATION
    # =========================================================================

    async def generate_json(
        self,
        prompt: str,
        response_schema: dict[str, Any],
        system_prompt: str | None = None,
    ) -> LLMResponse:
        """
        Generate a JSON completion constrained by ``response_schema``.

        Args:
            prompt: User prompt
            response_schema: JSON schema passed to the provider
            system_prompt: Optional system prompt

        Returns:
            LLMResponse with the raw text and metadata

        Raises:
            MissingCredentialError: No credential configured
            ProviderError: The provider call failed
            EmptyResponseError: The provider returned no text
        """
        client = self.get_client(response_schema)

        messages: list[BaseMessage] = []
        if system_prompt:
            messages.append(SystemMessage(content=system_prompt))
        messages.append(HumanMessage(content=prompt))

        start_time = datetime.now(timezone.utc)

        try:
            response = await client.ainvoke(messages)
        except Exception as e:
            error = classify_provider_error(e, model=self.model)
            logger.error(f"Gemini call failed ({type(error).__name__}): {e}")
            raise error from e

        latency_ms = int((datetime.now(timezone.utc) - start_time).total_seconds() * 1000)

        content = _extract_text(getattr(response, "content", None))
        if not content.strip():
            raise EmptyResponseError(model=self.model)

        usage_data = getattr(response, "usage_metadata", None) or {}
        prompt_tokens = usage_data.get("input_tokens", 0)
        completion_tokens = usage_data.get("output_tokens", 0)

        return LLMResponse(
            content=content,
            model=self.model,
            usage=TokenUsage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            ),
            latency_ms=latency_ms,
        )


# =============================================================================
# DEPENDENCY INJECTION
# =============================================================================

def get_llm_service() -> LLMService:
    """Dependency injection for LLM Service."""
    return LLMService.get_instance()


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    # Enums
    "LLMModel",
    # Models
    "TokenUsage",
    "LLMResponse",
    # Errors
    "LLMError",
    "MissingCredentialError",
    "ProviderError",
    "ProviderAuthError",
    "ProviderRateLimitError",
    "EmptyResponseError",
    "ResponseFormatError",
    "classify_provider_error",
    # Service
    "LLMService",
    # DI
    "get_llm_service",
]
