"""
Strategy API Endpoints
======================
Generate a keyword strategy and derive its table and tree views.

Generation errors (LLMError subclasses) are not caught here; the
application-level exception handler turns them into localized
ErrorResponse bodies.
"""

import logging

from fastapi import APIRouter, status

from keyword_strategy.app.core.dependencies import StrategyGeneratorDep
from keyword_strategy.app.schemas.strategy import StrategyRequest, StrategyResult
from keyword_strategy.app.schemas.views import (
    KeywordTableView,
    TableFilters,
    TableViewRequest,
    TreeNode,
)
from keyword_strategy.services.strategy_views import (
    build_keyword_table,
    build_strategy_tree,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# GENERATION
# =============================================================================

@router.post(
    "",
    response_model=StrategyResult,
    status_code=status.HTTP_200_OK,
    summary="Generate a keyword strategy",
)
async def generate_strategy(
    request: StrategyRequest,
    generator: StrategyGeneratorDep,
) -> StrategyResult:
    """
    Generate a keyword strategy for a topic.

    Makes exactly one call to Gemini; nothing is cached, so repeating the
    same request may return a different strategy.

    **Example Input:**
    ```json
    {
        "topic": "قهوه ارگانیک",
        "negativeKeywords": "رایگان",
        "strategyType": "NICHE"
    }
    ```
    """
    logger.info(f"Strategy requested for topic: {request.topic}")
    return await generator.generate(request.topic, request.to_options())


# =============================================================================
# VIEWS
# =============================================================================

@router.post(
    "/table",
    response_model=KeywordTableView,
    summary="Filter and sort a strategy's keywords",
)
async def strategy_table(request: TableViewRequest) -> KeywordTableView:
    """
    Build the keyword table for a previously generated strategy.

    Filters match exact Level literals; omit a filter for "all".
    `sort` is `asc`, `desc` or omitted (provider order).
    """
    filters = TableFilters(
        competition=request.competition,
        volume=request.volume,
        sort=request.sort,
    )
    return build_keyword_table(request.result, filters)


@router.post(
    "/tree",
    response_model=TreeNode,
    summary="Group a strategy's keywords into a tree",
)
async def strategy_tree(result: StrategyResult) -> TreeNode:
    """Topic -> search intent -> keyword tree for the expandable diagram."""
    return build_strategy_tree(result)
