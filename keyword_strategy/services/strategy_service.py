"""
Keyword Strategy Service
========================
Turns a topic plus options into a validated StrategyResult.

Flow per call:
    Idle -> Building -> AwaitingProvider -> Parsing -> Done | Failed

- Prompt building is deterministic and rendered from the
  ``keyword_strategy`` prompt template.
- The response schema is handed to Gemini's constrained decoding, but the
  parser never assumes it was honored.
- Exactly one provider call per generation; every failure is terminal.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from pydantic import BaseModel, ValidationError

from keyword_strategy.app.core.config import Settings, get_settings
from keyword_strategy.app.schemas.strategy import (
    GenerationOptions,
    Level,
    SearchIntent,
    StrategyResult,
    StrategyType,
)
from keyword_strategy.prompts.base import PromptManager
from keyword_strategy.services.llm_service import (
    LLMService,
    MissingCredentialError,
    ResponseFormatError,
    get_llm_service,
)

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = "keyword_strategy"
MIN_KEYWORDS = 10
MAX_KEYWORDS = 12
DEFAULT_LANGUAGE = "Persian (Farsi)"

# Leading fence with optional language tag, and trailing fence
_LEADING_FENCE = re.compile(r"^```[\w+-]*[ \t]*\r?\n?")
_TRAILING_FENCE = re.compile(r"\r?\n?```$")


# =============================================================================
# PROMPT BUILDER
# =============================================================================


class StrategyPrompt(BaseModel):
    """Rendered instruction plus the structured-output schema."""
    system: str
    user: str
    response_schema: dict[str, Any]

    @property
    def text(self) -> str:
        """Full instruction as one string."""
        return f"{self.system}\n\n{self.user}"


def build_response_schema() -> dict[str, Any]:
    """
    JSON schema for Gemini's constrained decoding.

    Enum lists come from the Python enums so the schema and the parser
    share one vocabulary.
    """
    level_values = [level.value for level in Level]
    intent_values = [intent.value for intent in SearchIntent]

    keyword_schema = {
        "type": "object",
        "properties": {
            "keyword": {"type": "string", "description": "Keyword in the target language"},
            "searchVolume": {"type": "string", "enum": level_values},
            "commercialValue": {"type": "string", "enum": level_values},
            "intent": {"type": "string", "enum": intent_values},
            "competition": {"type": "string", "enum": level_values},
            "difficultyIndex": {"type": "number", "description": "SEO Difficulty Score 0-100"},
            "rationale": {"type": "string", "description": "Brief reason for these metrics"},
            "contentFormat": {"type": "string", "description": "Recommended content type (e.g., Guide, List)"},
            "suggestedTitle": {"type": "string", "description": "SEO Optimized Title Tag"},
        },
        "required": [
            "keyword",
            "searchVolume",
            "commercialValue",
            "intent",
            "competition",
            "difficultyIndex",
            "rationale",
            "contentFormat",
            "suggestedTitle",
        ],
    }

    return {
        "type": "object",
        "properties": {
            "topic": {"type": "string", "description": "The core topic in the target language"},
            "summary": {"type": "string", "description": "A brief 1-sentence summary of the strategy"},
            "keywords": {"type": "array", "items": keyword_schema},
        },
        "required": ["topic", "summary", "keywords"],
    }


def build_strategy_prompt(
    topic: str,
    options: GenerationOptions | None = None,
    language: str = DEFAULT_LANGUAGE,
    prompt_manager: PromptManager | None = None,
) -> StrategyPrompt:
    """
    Build the instruction and schema for one generation request.

    An empty topic still yields a well-formed prompt; callers are expected
    to reject it earlier.

    Args:
        topic: Topic text, embedded verbatim
        options: Exclusions and broad/niche focus
        language: Language for every free-text field
        prompt_manager: Template source (default: shared instance)

    Returns:
        StrategyPrompt
    """
    options = options or GenerationOptions()
    prompt_manager = prompt_manager or PromptManager.get_instance()

    system, user = prompt_manager.get_full_prompt(
        PROMPT_TEMPLATE,
        topic=topic or "",
        language=language,
        negative_keywords=options.negative_keywords or "",
        niche=options.strategy_type == StrategyType.NICHE,
        min_keywords=MIN_KEYWORDS,
        max_keywords=MAX_KEYWORDS,
        level_values=[level.value for level in Level],
        intent_values=[intent.value for intent in SearchIntent],
    )

    return StrategyPrompt(system=system, user=user, response_schema=build_response_schema())


# =============================================================================
# RESPONSE PARSER
# =============================================================================


def strip_code_fences(text: str) -> str:
    """
    Remove a Markdown code fence wrapping the payload.

    Handles ```` ```json ... ``` ````, bare ```` ``` ```` fences and
    unfenced text. Idempotent.
    """
    cleaned = text.strip()
    cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
    cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_strategy_response(text: str) -> StrategyResult:
    """
    Decode provider text into a validated StrategyResult.

    Raises:
        ResponseFormatError: Malformed JSON, missing required fields,
            unknown enum literals or an out-of-range difficulty index
    """
    cleaned = strip_code_fences(text or "")

    try:
        return StrategyResult.model_validate_json(cleaned)
    except ValidationError as e:
        logger.error(
            f"[Strategy] Response validation failed with {e.error_count()} error(s): "
            f"{[err['type'] for err in e.errors()][:5]} content={cleaned[:500]!r}"
        )
        raise ResponseFormatError() from e


# =============================================================================
# STRATEGY GENERATOR
# =============================================================================


class StrategyGenerator:
    """
    Public entry point: ``await generate(topic, options)``.

    Holds only immutable configuration; concurrent calls share nothing else.

    Usage:
        >>> generator = StrategyGenerator(settings)
        >>> result = await generator.generate("قهوه ارگانیک")
    """

    _instance: StrategyGenerator | None = None

    def __init__(
        self,
        settings: Settings | None = None,
        llm_service: LLMService | None = None,
        prompt_manager: PromptManager | None = None,
    ):
        self._settings = settings or get_settings()
        self._llm = llm_service or LLMService(
            api_key=self._settings.google_api_key,
            model=self._settings.strategy_model,
        )
        self._prompt_manager = prompt_manager

    @classmethod
    def get_instance(cls) -> StrategyGenerator:
        """Get singleton instance sharing the application LLMService."""
        if cls._instance is None:
            cls._instance = cls(llm_service=get_llm_service())
        return cls._instance

    @property
    def model(self) -> str:
        return self._llm.model

    async def generate(
        self,
        topic: str,
        options: GenerationOptions | None = None,
    ) -> StrategyResult:
        """
        Generate a keyword strategy for ``topic``.

        Args:
            topic: Topic or seed phrase
            options: Optional exclusions and broad/niche focus

        Returns:
            StrategyResult

        Raises:
            MissingCredentialError: No credential configured (no network call)
            ProviderError: Provider call failed
            EmptyResponseError: Provider returned no text
            ResponseFormatError: Text could not be decoded/validated
        """
        options = options or GenerationOptions()

        if not self._llm.is_configured:
            logger.error("[Strategy] Generation refused: Gemini API key is missing")
            raise MissingCredentialError(model=self._llm.model)

        strategy_type = options.strategy_type or StrategyType.BROAD
        logger.info(
            f"[Strategy] Building prompt: topic={topic!r} strategy={strategy_type.value} "
            f"exclusions={bool(options.negative_keywords)}"
        )
        prompt = build_strategy_prompt(
            topic,
            options,
            language=self._settings.content_language,
            prompt_manager=self._prompt_manager,
        )

        logger.info(f"[Strategy] Awaiting provider: model={self._llm.model}")
        response = await self._llm.generate_json(
            prompt=prompt.user,
            system_prompt=prompt.system,
            response_schema=prompt.response_schema,
        )
        logger.info(
            f"[Strategy] Provider responded in {response.latency_ms}ms, "
            f"tokens={response.usage.total_tokens}"
        )

        result = parse_strategy_response(response.content)

        logger.info(f"[Strategy] Done: topic={result.topic!r} keywords={len(result.keywords)}")
        return result


# =============================================================================
# DEPENDENCY INJECTION
# =============================================================================


def get_strategy_generator() -> StrategyGenerator:
    """Dependency injection for the strategy generator."""
    return StrategyGenerator.get_instance()


__all__ = [
    # Constants
    "PROMPT_TEMPLATE",
    "MIN_KEYWORDS",
    "MAX_KEYWORDS",
    # Prompt
    "StrategyPrompt",
    "build_response_schema",
    "build_strategy_prompt",
    # Parser
    "strip_code_fences",
    "parse_strategy_response",
    # Generator
    "StrategyGenerator",
    "get_strategy_generator",
]
