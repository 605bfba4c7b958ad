"""
Keyword Strategy Schemas
========================
Pydantic schemas shared by the prompt builder and the response parser.

This module defines:
- Closed enumerations for qualitative ratings and search intent
- Generation options (exclusions, broad vs. niche focus)
- The validated strategy result returned by the generator
- API request schema for strategy generation

Wire format uses the camelCase names the model emits (``searchVolume``,
``difficultyIndex`` ...); Python attributes are snake_case.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS
# =============================================================================


class Level(str, Enum):
    """Ordinal qualitative rating used for volume, commercial value and competition."""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class SearchIntent(str, Enum):
    """Inferred purpose behind a search phrase."""
    INFORMATIONAL = "Informational"    # Seeking information
    TRANSACTIONAL = "Transactional"    # Ready to buy/convert
    COMMERCIAL = "Commercial"          # Researching before purchase
    NAVIGATIONAL = "Navigational"      # Looking for specific site/page


class StrategyType(str, Enum):
    """Keyword selection bias requested from the model."""
    BROAD = "BROAD"    # High volume, broad audience
    NICHE = "NICHE"    # Long-tail, lower competition


# =============================================================================
# BASE
# =============================================================================


class StrategySchema(BaseModel):
    """
    Base schema for strategy payloads.

    Frozen: a result is built once per request and only derived views are
    computed from it afterwards.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# =============================================================================
# INPUT SCHEMAS
# =============================================================================


class GenerationOptions(StrategySchema):
    """Optional modifiers for a generation request."""

    negative_keywords: str | None = Field(
        default=None,
        description="Comma-separated free text; keywords related to these terms are excluded"
    )
    strategy_type: StrategyType | None = Field(
        default=None,
        description="BROAD (default) or NICHE keyword focus"
    )


class StrategyRequest(GenerationOptions):
    """API request for keyword strategy generation."""

    model_config = ConfigDict(str_strip_whitespace=True)

    topic: str = Field(
        min_length=1,
        description="Topic or seed phrase to research",
        examples=["قهوه ارگانیک"],
    )

    def to_options(self) -> GenerationOptions:
        """Split the request into the generator's options object."""
        return GenerationOptions(
            negative_keywords=self.negative_keywords or None,
            strategy_type=self.strategy_type,
        )


# =============================================================================
# OUTPUT SCHEMAS
# =============================================================================


class KeywordAnalysis(StrategySchema):
    """One evaluated candidate phrase."""

    model_config = ConfigDict(str_strip_whitespace=True)

    keyword: str = Field(min_length=1, description="Keyword phrase")
    search_volume: Level = Field(description="Traffic potential")
    commercial_value: Level = Field(description="Relevance to business")
    intent: SearchIntent = Field(description="Search intent")
    competition: Level = Field(description="Ranking competition")
    difficulty_index: int = Field(ge=0, le=100, description="Ranking difficulty score 0-100")
    rationale: str = Field(min_length=1, description="Brief reason for these metrics")
    content_format: str | None = Field(
        default=None,
        description="Recommended content type (e.g., Guide, List)"
    )
    suggested_title: str | None = Field(
        default=None,
        description="Click-optimized title tag"
    )

    @field_validator("difficulty_index", mode="before")
    @classmethod
    def difficulty_must_be_number(cls, v: Any) -> Any:
        """Reject booleans and numeric strings that lax int coercion would accept."""
        if isinstance(v, (bool, str)):
            raise ValueError("difficultyIndex must be a JSON number")
        return v


class StrategyResult(StrategySchema):
    """Complete structured output for one topic."""

    topic: str = Field(description="Core topic as normalized by the model")
    summary: str = Field(description="One-sentence strategy summary")
    keywords: list[KeywordAnalysis] = Field(
        description="Keyword analyses in provider order"
    )

    @property
    def is_empty(self) -> bool:
        """True when the provider returned no keywords."""
        return not self.keywords


__all__ = [
    # Enums
    "Level",
    "SearchIntent",
    "StrategyType",
    # Input
    "GenerationOptions",
    "StrategyRequest",
    # Output
    "KeywordAnalysis",
    "StrategyResult",
]
