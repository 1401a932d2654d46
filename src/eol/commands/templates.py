"""Template commands -- list and export output templates."""

from __future__ import annotations

from pathlib import Path

import typer

from eol.client.response import render_response
from eol.commands.common import handle_errors, inline_template, make_templates
from eol.output import info, success


templates_app = typer.Typer(no_args_is_help=True)


@templates_app.command("list")
def templates_list(ctx: typer.Context) -> None:
    """List the available output templates and whether each is overridden."""
    with handle_errors():
        manager = make_templates(ctx)
        data = {
            "override_dir": str(manager.override_dir) if manager.override_dir else None,
            "templates": manager.list_templates(),
        }
        render_response(manager, "templates", data, inline_template(ctx))


@templates_app.command("export")
def templates_export(
    ctx: typer.Context,
    directory: Path = typer.Argument(help="Directory to write the templates into."),
) -> None:
    """Copy the built-in templates to DIRECTORY for customisation.

    Point ``--template-dir`` (or ``output.template_dir``) at the directory
    afterwards to use the edited copies.

    Example::

        eol templates export ~/.config/eol/templates
        eol --template-dir ~/.config/eol/templates products
    """
    with handle_errors():
        written = make_templates(ctx).export(directory)
    for path in written:
        info(f"  {path.name}")
    success(f"Exported {len(written)} templates to {directory}")
