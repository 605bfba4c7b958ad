"""
Prompt Templates Module
=======================
Centralized prompt management for strategy generation.
"""

from keyword_strategy.prompts.base import (
    # Models
    PromptMetadata,
    PromptTemplate,
    # Manager
    PromptManager,
    # Constants
    PROMPTS_DIR,
    TEMPLATES_DIR,
)

__all__ = [
    # Models
    "PromptMetadata",
    "PromptTemplate",
    # Manager
    "PromptManager",
    # Constants
    "PROMPTS_DIR",
    "TEMPLATES_DIR",
]
