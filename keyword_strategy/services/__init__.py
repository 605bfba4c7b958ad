"""
Services Module
===============
Gemini access, strategy generation and derived presentation views.
"""

from keyword_strategy.services.llm_service import (
    LLMModel,
    TokenUsage,
    LLMResponse,
    LLMError,
    MissingCredentialError,
    ProviderError,
    ProviderAuthError,
    ProviderRateLimitError,
    EmptyResponseError,
    ResponseFormatError,
    LLMService,
    get_llm_service,
)
from keyword_strategy.services.strategy_service import (
    StrategyPrompt,
    build_response_schema,
    build_strategy_prompt,
    strip_code_fences,
    parse_strategy_response,
    StrategyGenerator,
    get_strategy_generator,
)
from keyword_strategy.services.strategy_views import (
    build_keyword_table,
    build_strategy_tree,
)

__all__ = [
    # LLM
    "LLMModel",
    "TokenUsage",
    "LLMResponse",
    "LLMService",
    "get_llm_service",
    # Errors
    "LLMError",
    "MissingCredentialError",
    "ProviderError",
    "ProviderAuthError",
    "ProviderRateLimitError",
    "EmptyResponseError",
    "ResponseFormatError",
    # Strategy
    "StrategyPrompt",
    "build_response_schema",
    "build_strategy_prompt",
    "strip_code_fences",
    "parse_strategy_response",
    "StrategyGenerator",
    "get_strategy_generator",
    # Views
    "build_keyword_table",
    "build_strategy_tree",
]
