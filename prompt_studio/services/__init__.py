"""Service layer for prompt assembly, narrative parsing and the overlay channel."""

from __future__ import annotations

from .narrative import NarrativeMatch, parse_narrative  # noqa: F401
from .prompt_builder import PROSE, SECTIONS, PromptInputs, StyleSettings, render_prompt  # noqa: F401
from .template_generation import (  # noqa: F401
    GeneratedTemplate,
    TemplateGenerationError,
    TemplateRequest,
    generate_template,
)

__all__ = [
    "GeneratedTemplate",
    "NarrativeMatch",
    "PROSE",
    "PromptInputs",
    "SECTIONS",
    "StyleSettings",
    "TemplateGenerationError",
    "TemplateRequest",
    "generate_template",
    "parse_narrative",
    "render_prompt",
]
