"""Built-in Jinja2 output templates and the manager that renders them."""

from eol.templates.manager import (
    BUILTIN_TEMPLATE_DIR,
    TEMPLATE_DESCRIPTIONS,
    TEMPLATE_SUFFIX,
    TemplateManager,
)

__all__ = [
    "BUILTIN_TEMPLATE_DIR",
    "TEMPLATE_DESCRIPTIONS",
    "TEMPLATE_SUFFIX",
    "TemplateManager",
]
