"""Response rendering bridge -- maps API payloads to the output system.

After a command has its data (from the API or the cache), it calls
:func:`render_response` with the name of the template that fits the
response. The bridge then picks one of three paths:

* ``--format json`` -- the payload is printed verbatim as JSON.
* ``--template`` -- the inline Jinja2 string is rendered with the
  template context.
* otherwise -- the named template is rendered through
  :class:`~eol.templates.TemplateManager`.

Single-entity responses (a product, a release) expose their ``result``
object's fields as top-level template variables; list responses expose
``schema_version``, ``total`` and ``result``, plus any extra context such
as the category or tag name.

See Also:
    :mod:`eol.output` -- the output manager that writes to stdout.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from eol.output import get_output
from eol.templates import TemplateManager

SEPARATOR = "-" * 80

_SINGLE_RESULT_TEMPLATES = frozenset({"product_details", "product_release"})


def template_context(name: str, data: Any, extra: Optional[Mapping[str, Any]] = None) -> dict[str, Any]:
    """Build the variables passed to template *name* for *data*."""
    if name in _SINGLE_RESULT_TEMPLATES and isinstance(data, dict) and isinstance(data.get("result"), dict):
        context = dict(data["result"])
    elif isinstance(data, dict):
        context = dict(data)
    else:
        context = {"result": data}
    if extra:
        context.update(extra)
    return context


def render_response(
    templates: TemplateManager,
    name: str,
    data: Any,
    inline_template: Optional[str] = None,
    **extra: Any,
) -> None:
    """Write *data* to stdout in the active output format.

    Args:
        templates: Template manager used for text output.
        name: Built-in template name for text output.
        data: Decoded API payload (or another JSON-serialisable mapping).
        inline_template: Optional Jinja2 source overriding *name*.
        **extra: Additional template variables (``category``, ``tag``, ...).

    Raises:
        TemplateError: If the template cannot be rendered.
    """
    output = get_output()
    if output.is_json:
        output.print_json(data)
        return

    context = template_context(name, data, extra)
    if inline_template:
        output.print_data(templates.render_inline(inline_template, context))
    else:
        output.print_data(templates.render(name, context))


def render_full_catalog(
    templates: TemplateManager,
    data: Any,
    inline_template: Optional[str] = None,
) -> None:
    """Write the full product catalog.

    Text output renders ``product_details`` once per product, separated
    by a horizontal rule. JSON output and inline templates receive the
    whole response.
    """
    output = get_output()
    if output.is_json:
        output.print_json(data)
        return
    if inline_template:
        output.print_data(templates.render_inline(inline_template, template_context("products", data)))
        return

    products = data.get("result", []) if isinstance(data, dict) else []
    sections = [
        templates.render("product_details", product).rstrip("\n")
        for product in products
        if isinstance(product, dict)
    ]
    output.print_data(f"\n{SEPARATOR}\n".join(sections))
