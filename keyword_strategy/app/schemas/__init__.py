"""
Pydantic Schemas Module
=======================
Data validation schemas for strategy generation and its derived views.
"""

from keyword_strategy.app.schemas.strategy import (
    # Enums
    Level,
    SearchIntent,
    StrategyType,
    # Input
    GenerationOptions,
    StrategyRequest,
    # Output
    KeywordAnalysis,
    StrategyResult,
)

from keyword_strategy.app.schemas.views import (
    # Enums
    MetricKind,
    BadgeTone,
    DifficultyBand,
    SortDirection,
    # Table
    TableFilters,
    TableViewRequest,
    LevelBadge,
    KeywordRow,
    KeywordTableView,
    # Tree
    TreeNode,
)

__all__ = [
    # Strategy
    "Level",
    "SearchIntent",
    "StrategyType",
    "GenerationOptions",
    "StrategyRequest",
    "KeywordAnalysis",
    "StrategyResult",
    # Views
    "MetricKind",
    "BadgeTone",
    "DifficultyBand",
    "SortDirection",
    "TableFilters",
    "TableViewRequest",
    "LevelBadge",
    "KeywordRow",
    "KeywordTableView",
    "TreeNode",
]
