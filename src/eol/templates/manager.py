"""Jinja2 text rendering of API responses.

Every text-mode command renders its response through one named template.
Built-in templates live next to this module as ``<name>.j2``; a user
override directory (``--template-dir`` / ``output.template_dir``) is
searched first, so dropping a ``products.j2`` there replaces the built-in
one. An inline template (``--template``) bypasses both.

Templates receive the response's fields as top-level variables; see
:mod:`eol.client.response` for what each command passes.
"""

from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import Any, Mapping, Optional

import jinja2
from jinja2 import ChoiceLoader, Environment, FileSystemLoader

from eol.exceptions import TemplateError


BUILTIN_TEMPLATE_DIR = Path(__file__).parent
"""Directory holding the built-in ``*.j2`` templates."""

TEMPLATE_SUFFIX = ".j2"

TEMPLATE_DESCRIPTIONS: dict[str, str] = {
    "cache_stats": "Cache statistics display template",
    "categories": "Categories list display template",
    "identifiers": "Identifier types list display template",
    "identifiers_by_type": "Identifiers by type display template",
    "index": "API endpoints list display template",
    "product_details": "Product details display template",
    "product_release": "Product release display template",
    "products": "Products list display template",
    "products_by_category": "Products by category display template",
    "products_by_tag": "Products by tag display template",
    "tags": "Tags list display template",
    "templates": "Templates list display template",
}


def _to_json(value: Any, indent: Optional[int] = None) -> str:
    return json.dumps(value, indent=indent, ensure_ascii=False, default=str)


def _yes_no(value: Any) -> str:
    return "yes" if value else "no"


def _or_dash(value: Any) -> Any:
    return "-" if value is None or value == "" else value


def _human_size(size: Any) -> str:
    value = float(size or 0)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024 or unit == "GB":
            return f"{value:.0f} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"  # pragma: no cover


class TemplateManager:
    """Loads, renders, lists, and exports output templates.

    Args:
        override_dir: Optional directory searched before the built-in
            templates. Missing directories are ignored.
    """

    def __init__(self, override_dir: Optional[str | Path] = None) -> None:
        self._override_dir = Path(override_dir).expanduser() if override_dir else None
        loaders: list[jinja2.BaseLoader] = []
        if self._override_dir is not None:
            loaders.append(FileSystemLoader(str(self._override_dir)))
        loaders.append(FileSystemLoader(str(BUILTIN_TEMPLATE_DIR)))

        self._env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self._env.filters["to_json"] = _to_json
        self._env.filters["yes_no"] = _yes_no
        self._env.filters["or_dash"] = _or_dash
        self._env.filters["human_size"] = _human_size

    @property
    def override_dir(self) -> Optional[Path]:
        return self._override_dir

    def render(self, name: str, context: Mapping[str, Any]) -> str:
        """Render the template called *name* (without suffix).

        Raises:
            TemplateError: If the template is missing, invalid, or fails
                while rendering.
        """
        try:
            template = self._env.get_template(f"{name}{TEMPLATE_SUFFIX}")
            return template.render(dict(context))
        except jinja2.TemplateNotFound as exc:
            raise TemplateError(f"Template '{name}' not found") from exc
        except jinja2.TemplateSyntaxError as exc:
            raise TemplateError(
                f"Syntax error in template '{name}' line {exc.lineno}: {exc.message}"
            ) from exc
        except (jinja2.TemplateError, TypeError, ValueError) as exc:
            raise TemplateError(f"Failed to render template '{name}': {exc}") from exc

    def render_inline(self, source: str, context: Mapping[str, Any]) -> str:
        """Render an inline template string with the same filters as file templates."""
        try:
            return self._env.from_string(source).render(dict(context))
        except jinja2.TemplateSyntaxError as exc:
            raise TemplateError(f"Syntax error in inline template: {exc.message}") from exc
        except (jinja2.TemplateError, TypeError, ValueError) as exc:
            raise TemplateError(f"Failed to render inline template: {exc}") from exc

    def list_templates(self) -> list[dict[str, str]]:
        """Describe every known template and where it would be loaded from."""
        templates = []
        for name, description in sorted(TEMPLATE_DESCRIPTIONS.items()):
            filename = f"{name}{TEMPLATE_SUFFIX}"
            source = "builtin"
            if self._override_dir is not None and (self._override_dir / filename).is_file():
                source = "override"
            templates.append({"name": name, "description": description, "source": source})
        return templates

    def export(self, directory: str | Path) -> list[Path]:
        """Copy every built-in template into *directory* for customisation.

        Existing files with the same name are overwritten.

        Returns:
            The written file paths, sorted by name.

        Raises:
            TemplateError: If the directory or a file cannot be written.
        """
        target = Path(directory).expanduser()
        written = []
        try:
            target.mkdir(parents=True, exist_ok=True)
            for name in sorted(TEMPLATE_DESCRIPTIONS):
                filename = f"{name}{TEMPLATE_SUFFIX}"
                dest = target / filename
                shutil.copyfile(BUILTIN_TEMPLATE_DIR / filename, dest)
                written.append(dest)
        except OSError as exc:
            raise TemplateError(f"Failed to export templates to {target}: {exc}") from exc
        return written
