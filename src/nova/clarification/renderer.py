"""
Template Renderer

Deterministic rendering of the French response and clarification
templates. Templates live in store/templates/responses.json as
{key: {template, required_fields}} with {{placeholder}} fields.
"""
import json
import re
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from .models import Clarification

TEMPLATES_FILE = Path("templates") / "responses.json"

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")


def load_templates(store_dir: Optional[Union[str, Path]] = None) -> Dict[str, Dict[str, Any]]:
    """
    Load response templates from the store directory.

    Raises:
        FileNotFoundError: If templates/responses.json is missing
        json.JSONDecodeError: If the JSON is invalid
    """
    if store_dir is None:
        from ..config.config import NovaConfig
        store_dir = NovaConfig().STORE_DIR
    templates_path = Path(store_dir) / TEMPLATES_FILE

    if not templates_path.exists():
        raise FileNotFoundError(f"Response templates not found at {templates_path}")

    with open(templates_path, "r", encoding="utf-8") as f:
        return json.load(f)


class TemplateRenderer:
    """
    Renders templates by key.

    Rules:
    - Every required field must be present in data
    - Every {{placeholder}} is replaced; none may be left over
    - No fallback text

    Example:
        >>> renderer = TemplateRenderer(load_templates())
        >>> renderer.render("availability_none", {"date": "mardi 20 octobre 2026"})
    """

    def __init__(self, templates: Mapping[str, Mapping[str, Any]]):
        self.templates = dict(templates)

    def has(self, key: str) -> bool:
        return key in self.templates

    def render(self, key: str, data: Optional[Mapping[str, Any]] = None) -> str:
        """
        Raises:
            KeyError: If no template exists for key
            ValueError: If required fields are missing from data
        """
        data = data or {}
        if key not in self.templates:
            raise KeyError(
                f"No template found for {key}. "
                f"Available templates: {list(self.templates.keys())}"
            )

        template_config = self.templates[key]
        template = template_config["template"]
        required_fields = template_config.get("required_fields", [])

        missing_fields = [f for f in required_fields if f not in data]
        if missing_fields:
            raise ValueError(
                f"Missing required fields for {key}: {missing_fields}. "
                f"Provided data: {dict(data)}"
            )

        def _substitute(match: "re.Match[str]") -> str:
            placeholder = match.group(1)
            if placeholder not in data:
                raise ValueError(
                    f"Placeholder '{placeholder}' found in template {key} but missing from data"
                )
            return str(data[placeholder])

        return _PLACEHOLDER.sub(_substitute, template)


def render_clarification(clarification: Clarification, renderer: TemplateRenderer) -> str:
    """Render the prompt for a clarification reason."""
    return renderer.render(clarification.reason.value, clarification.data)
