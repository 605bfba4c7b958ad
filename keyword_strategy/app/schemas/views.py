"""
Strategy View Schemas
=====================
Derived, presentation-ready shapes computed from a StrategyResult:
table rows with localized labels and badge tones, and the intent tree.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import Field

from keyword_strategy.app.schemas.strategy import (
    Level,
    SearchIntent,
    StrategyResult,
    StrategySchema,
)


# =============================================================================
# ENUMS
# =============================================================================


class MetricKind(str, Enum):
    """Which rating a Level badge represents."""
    VOLUME = "volume"
    COMMERCIAL = "commercial"
    COMPETITION = "competition"


class BadgeTone(str, Enum):
    """How favorable a rating is for the site owner."""
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class DifficultyBand(str, Enum):
    """Coarse bucket for the 0-100 difficulty score."""
    EASY = "easy"            # 0-40
    MODERATE = "moderate"    # 41-70
    HARD = "hard"            # 71-100


class SortDirection(str, Enum):
    """Keyword column sort direction."""
    ASC = "asc"
    DESC = "desc"


# =============================================================================
# TABLE VIEW
# =============================================================================


class TableFilters(StrategySchema):
    """Table filter state. ``None`` means "all"."""
    competition: Level | None = None
    volume: Level | None = None
    sort: SortDirection | None = None


class TableViewRequest(TableFilters):
    """API request for a filtered/sorted table of an existing result."""
    result: StrategyResult


class LevelBadge(StrategySchema):
    """A Level rendered for display."""
    level: Level
    label: str
    tone: BadgeTone


class KeywordRow(StrategySchema):
    """One table row, with fallbacks already applied."""
    keyword: str
    intent: SearchIntent
    intent_label: str
    search_volume: LevelBadge
    commercial_value: LevelBadge
    competition: LevelBadge
    difficulty_index: int
    difficulty_band: DifficultyBand
    rationale: str
    display_title: str
    display_format: str
    serp_snippet: str = Field(description="Search result description preview")


class KeywordTableView(StrategySchema):
    """Filtered and sorted keyword table."""
    topic: str
    summary: str
    filters: TableFilters
    rows: list[KeywordRow] = Field(default_factory=list)
    total: int = 0
    visible: int = 0

    @property
    def is_empty(self) -> bool:
        """True when no row survives the filters (the "no results" state)."""
        return self.visible == 0


# =============================================================================
# TREE VIEW
# =============================================================================


class TreeNode(StrategySchema):
    """Node of the expandable strategy tree."""
    name: str
    value: str | None = None
    type: Literal["root", "category", "item", "detail"] = "item"
    children: list[TreeNode] = Field(default_factory=list)


__all__ = [
    # Enums
    "MetricKind",
    "BadgeTone",
    "DifficultyBand",
    "SortDirection",
    # Table
    "TableFilters",
    "TableViewRequest",
    "LevelBadge",
    "KeywordRow",
    "KeywordTableView",
    # Tree
    "TreeNode",
]
