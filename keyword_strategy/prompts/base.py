"""
Prompt Template Management System
=================================
Centralized prompt management using Jinja2 templates.

Features:
- External template files (YAML/Jinja2)
- Variable injection at render time
- Version tracking for prompts

Design Principles:
- Prompts are data, not code - externalize them
- Clear separation between system prompts and user prompts
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from jinja2 import Environment, StrictUndefined
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# Base path for prompt templates
PROMPTS_DIR = Path(__file__).parent
TEMPLATES_DIR = PROMPTS_DIR / "templates"


# =============================================================================
# PROMPT TEMPLATE MODELS
# =============================================================================

class PromptMetadata(BaseModel):
    """Metadata for a prompt template."""
    name: str
    version: str = "1.0.0"
    description: str = ""
    author: str = "system"
    tags: list[str] = Field(default_factory=list)


class PromptTemplate(BaseModel):
    """Complete prompt template with metadata."""
    metadata: PromptMetadata
    system_prompt: str
    user_prompt_template: str = "{{ input }}"
    variables: list[str] = Field(default_factory=list)


# =============================================================================
# PROMPT MANAGER
# =============================================================================

class PromptManager:
    """
    Centralized prompt template manager.

    Loads, caches, and renders prompt templates from external files.

    Usage:
        >>> manager = PromptManager()
        >>> system, user = manager.get_full_prompt("keyword_strategy", topic="...")
    """

    _instance: PromptManager | None = None

    def __init__(self, templates_dir: Path | None = None):
        """
        Initialize the prompt manager.

        Args:
            templates_dir: Path to templates directory (default: prompts/templates)
        """
        self.templates_dir = templates_dir or TEMPLATES_DIR
        self._templates: dict[str, PromptTemplate] = {}

        # Undefined variables are template bugs, fail loudly
        self.jinja_env = Environment(
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
        )

        self._load_templates()

        logger.info(f"PromptManager initialized with {len(self._templates)} templates")

    @classmethod
    def get_instance(cls) -> PromptManager:
        """Get singleton instance of PromptManager."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def _load_templates(self) -> None:
        """Load all YAML templates from templates directory."""
        if not self.templates_dir.exists():
            logger.warning(f"Templates directory not found: {self.templates_dir}")
            return

        for yaml_file in sorted(self.templates_dir.glob("*.yaml")):
            self._load_template_file(yaml_file)

    def _load_template_file(self, file_path: Path) -> None:
        """Load a single template file."""
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if not data:
            return

        # Handle single template or multiple templates in one file
        templates = data if isinstance(data, list) else [data]

        for template_data in templates:
            prompt = PromptTemplate(
                metadata=PromptMetadata(**template_data.get("metadata", {})),
                system_prompt=template_data.get("system_prompt", ""),
                user_prompt_template=template_data.get("user_prompt_template", "{{ input }}"),
                variables=template_data.get("variables", []),
            )
            self._templates[prompt.metadata.name] = prompt
            logger.debug(f"Loaded template: {prompt.metadata.name} v{prompt.metadata.version}")

    def get_prompt(self, name: str) -> PromptTemplate | None:
        """
        Get a prompt template by name.

        Args:
            name: Template name

        Returns:
            PromptTemplate or None if not found
        """
        return self._templates.get(name)

    def _require(self, name: str) -> PromptTemplate:
        template = self.get_prompt(name)
        if not template:
            raise KeyError(f"Prompt template not found: {name}")
        return template

    def render(self, name: str, /, **variables: Any) -> str:
        """
        Render the system prompt of a template.

        Raises:
            KeyError: If template not found
        """
        template = self._require(name)
        return self.jinja_env.from_string(template.system_prompt).render(**variables).strip()

    def render_user_prompt(self, name: str, /, **variables: Any) -> str:
        """Render the user prompt template."""
        template = self._require(name)
        return self.jinja_env.from_string(template.user_prompt_template).render(**variables).strip()

    def get_full_prompt(self, name: str, /, **variables: Any) -> tuple[str, str]:
        """
        Get both system and user prompts rendered.

        Args:
            name: Template name
            **variables: Variables for rendering

        Returns:
            Tuple of (system_prompt, user_prompt)
        """
        return self.render(name, **variables), self.render_user_prompt(name, **variables)

    def list_templates(self) -> list[str]:
        """List available template names."""
        return list(self._templates.keys())

    def register_template(self, template: PromptTemplate) -> None:
        """
        Register a template programmatically.

        Args:
            template: PromptTemplate to register
        """
        self._templates[template.metadata.name] = template
        logger.info(f"Registered template: {template.metadata.name}")


# =============================================================================
# EXPORTS
# =============================================================================

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
