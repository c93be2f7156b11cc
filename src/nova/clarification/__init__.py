"""
Clarification Template System

Maps ClarificationReason -> template -> rendered French prompt.

Templates are loaded from store/templates/responses.json.
"""

from .models import Clarification
from .reasons import ClarificationReason
from .renderer import TemplateRenderer, load_templates, render_clarification

__all__ = [
    "Clarification",
    "ClarificationReason",
    "TemplateRenderer",
    "load_templates",
    "render_clarification",
]
