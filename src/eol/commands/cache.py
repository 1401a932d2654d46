"""Cache commands -- inspect and empty the response cache.

Provides the ``eol cache`` sub-command group. All three commands act on
the directory resolved from ``--cache-dir`` / ``EOL_CACHE_DIR`` / the
config file / the platform default.
"""

from __future__ import annotations

import typer

from eol.client.response import render_response
from eol.commands.common import handle_errors, inline_template, make_cache, make_templates
from eol.output import success


cache_app = typer.Typer(no_args_is_help=True)


@cache_app.command("stats")
def cache_stats(ctx: typer.Context) -> None:
    """Show cache statistics.

    Counts entry files, their total size, and how many are still valid.
    Nothing is modified, expired entries included.

    Example::

        eol cache stats
        eol --json cache stats
    """
    with handle_errors():
        stats = make_cache(ctx).get_stats()
        render_response(
            make_templates(ctx), "cache_stats", stats.model_dump(mode="json"), inline_template(ctx)
        )


@cache_app.command("clear")
def cache_clear(ctx: typer.Context) -> None:
    """Remove every cached response.

    Refuses to touch directories not named ``eol``, ``eol-cache`` or
    ``.eol-cache``, so a mistyped ``--cache-dir`` cannot empty an
    unrelated folder.
    """
    with handle_errors():
        cache = make_cache(ctx)
        removed = cache.clear()
    success(f"Removed {removed} cache file(s) from {cache.directory}")


@cache_app.command("clear-expired")
def cache_clear_expired(ctx: typer.Context) -> None:
    """Remove cached responses whose TTL has passed."""
    with handle_errors():
        cache = make_cache(ctx)
        removed = cache.clear_expired()
    success(f"Removed {removed} expired cache file(s) from {cache.directory}")
