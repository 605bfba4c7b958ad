"""
API v1 Router Aggregator
========================
Collects and exports all v1 API routers.
"""

from fastapi import APIRouter

from keyword_strategy.app.api.v1.strategy import router as strategy_router

# Main API router - aggregates all v1 routes
api_router = APIRouter()

api_router.include_router(
    strategy_router,
    prefix="/strategies",
    tags=["Strategies"],
)

__all__ = ["api_router"]
