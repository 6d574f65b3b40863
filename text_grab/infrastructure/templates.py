"""
Built-in template registry.
Loaded once from the packaged templates.yml into a read-only mapping.
"""

from pathlib import Path
from types import MappingProxyType
from typing import List, Mapping, Optional

import yaml

from ..domain.entities import Template


NO_TEMPLATE = "none"

TEMPLATES_FILE = Path(__file__).with_name("templates.yml")


class TemplateNotFoundError(KeyError):
    """Raised when a template name is not in the registry."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        available = ", ".join(template_names())
        return f"Template '{self.name}' not found. Available templates: {available}"


def _load_templates(path: Path) -> Mapping[str, Template]:
    with open(path, "r", encoding="utf-8") as file:
        raw = yaml.safe_load(file) or {}

    templates = {
        name: Template(
            name=name,
            extensions=data.get("extensions", []),
            exclude=data.get("exclude", []),
        )
        for name, data in raw.items()
    }
    return MappingProxyType(templates)


TEMPLATES: Mapping[str, Template] = _load_templates(TEMPLATES_FILE)


def template_names() -> List[str]:
    """Names of all built-in templates, in registry order."""
    return list(TEMPLATES.keys())


def find_template(name: Optional[str]) -> Optional[Template]:
    """Look up a template, returning None for unknown or empty names."""
    if not name:
        return None
    return TEMPLATES.get(name)


def get_template(name: str) -> Template:
    """Look up a template or raise TemplateNotFoundError."""
    template = find_template(name)
    if template is None:
        raise TemplateNotFoundError(name)
    return template
