"""API commands -- query endoflife.date.

Each command fetches one endpoint through
:class:`~eol.client.sync_client.EolClient` (which answers from the cache
when it can) and renders the response with the matching template, or as
JSON with ``--json``.

Example::

    eol products --full
    eol release go 1.23.4
    eol --json categories os
"""

from __future__ import annotations

from typing import Optional

import typer

from eol.client.response import render_full_catalog, render_response
from eol.commands.common import handle_errors, inline_template, make_client, make_templates


def index_command(ctx: typer.Context) -> None:
    """List the API's main endpoints."""
    with handle_errors():
        templates = make_templates(ctx)
        with make_client(ctx) as client:
            data = client.index()
        render_response(templates, "index", data, inline_template(ctx))


def products_command(
    ctx: typer.Context,
    full: bool = typer.Option(
        False, "--full", help="Include every release cycle (cached for 24h)."
    ),
) -> None:
    """List all products.

    With ``--full`` the complete catalog is fetched. It is cached for a
    day, even with ``--disable-cache``, and most other commands can be
    answered from it without further requests.
    """
    with handle_errors():
        templates = make_templates(ctx)
        with make_client(ctx) as client:
            if full:
                data = client.products_full()
            else:
                data = client.products()
        if full:
            render_full_catalog(templates, data, inline_template(ctx))
        else:
            render_response(templates, "products", data, inline_template(ctx))


def product_command(
    ctx: typer.Context,
    name: str = typer.Argument(help="Product name, e.g. 'python'."),
) -> None:
    """Show a product and all of its release cycles."""
    with handle_errors():
        templates = make_templates(ctx)
        with make_client(ctx) as client:
            data = client.product(name)
        render_response(templates, "product_details", data, inline_template(ctx))


def release_command(
    ctx: typer.Context,
    product: str = typer.Argument(help="Product name, e.g. 'go'."),
    release: str = typer.Argument(help="Release cycle or version, e.g. '1.23' or '1.23.4'."),
) -> None:
    """Show one release cycle of a product.

    Full versions are reduced to their cycle: ``1.23.4`` is looked up as
    ``1.23`` first, then literally.
    """
    with handle_errors():
        templates = make_templates(ctx)
        with make_client(ctx) as client:
            data = client.release(product, release)
        render_response(templates, "product_release", data, inline_template(ctx))


def latest_command(
    ctx: typer.Context,
    product: str = typer.Argument(help="Product name."),
) -> None:
    """Show the latest release cycle of a product."""
    with handle_errors():
        templates = make_templates(ctx)
        with make_client(ctx) as client:
            data = client.latest_release(product)
        render_response(templates, "product_release", data, inline_template(ctx))


def categories_command(
    ctx: typer.Context,
    category: Optional[str] = typer.Argument(None, help="List the products in this category."),
) -> None:
    """List categories, or the products in one category."""
    with handle_errors():
        templates = make_templates(ctx)
        with make_client(ctx) as client:
            if category is None:
                data = client.categories()
            else:
                data = client.products_by_category(category)
        if category is None:
            render_response(templates, "categories", data, inline_template(ctx))
        else:
            render_response(
                templates, "products_by_category", data, inline_template(ctx), category=category
            )


def tags_command(
    ctx: typer.Context,
    tag: Optional[str] = typer.Argument(None, help="List the products with this tag."),
) -> None:
    """List tags, or the products carrying one tag."""
    with handle_errors():
        templates = make_templates(ctx)
        with make_client(ctx) as client:
            if tag is None:
                data = client.tags()
            else:
                data = client.products_by_tag(tag)
        if tag is None:
            render_response(templates, "tags", data, inline_template(ctx))
        else:
            render_response(templates, "products_by_tag", data, inline_template(ctx), tag=tag)


def identifiers_command(
    ctx: typer.Context,
    identifier_type: Optional[str] = typer.Argument(
        None, metavar="TYPE", help="List identifiers of this type, e.g. 'purl' or 'cpe'."
    ),
) -> None:
    """List identifier types, or the identifiers of one type."""
    with handle_errors():
        templates = make_templates(ctx)
        with make_client(ctx) as client:
            if identifier_type is None:
                data = client.identifier_types()
            else:
                data = client.identifiers_by_type(identifier_type)
        if identifier_type is None:
            render_response(templates, "identifiers", data, inline_template(ctx))
        else:
            render_response(
                templates, "identifiers_by_type", data, inline_template(ctx), type=identifier_type
            )


def register(app: typer.Typer) -> None:
    """Attach the API commands to the root application."""
    app.command("index")(index_command)
    app.command("products")(products_command)
    app.command("product")(product_command)
    app.command("release")(release_command)
    app.command("latest")(latest_command)
    app.command("categories")(categories_command)
    app.command("tags")(tags_command)
    app.command("identifiers")(identifiers_command)
