"""
Dependency Injection Setup
==========================
FastAPI dependency providers.
Endpoints reach services only through these.
"""

from typing import Annotated

from fastapi import Depends

from keyword_strategy.services.strategy_service import (
    StrategyGenerator,
    get_strategy_generator,
)


# =============================================================================
# STRATEGY GENERATOR
# =============================================================================

def get_generator_dep() -> StrategyGenerator:
    """
    Strategy generator dependency.

    Tests replace it through ``app.dependency_overrides[get_generator_dep]``.
    """
    return get_strategy_generator()


StrategyGeneratorDep = Annotated[StrategyGenerator, Depends(get_generator_dep)]
