"""Shared plumbing for command modules.

The root callback in :mod:`eol.app` stores the resolved
:class:`~eol.models.GlobalConfig` and per-invocation options in
``ctx.obj``. The helpers here turn that state into the collaborators a
command needs, and :func:`handle_errors` converts
:class:`~eol.exceptions.EolError` into a clean exit with its code.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Optional

import typer

from eol.cache.manager import CacheManager
from eol.client.sync_client import EolClient
from eol.exceptions import EolError
from eol.models import GlobalConfig
from eol.output import error
from eol.templates import TemplateManager


def _obj(ctx: typer.Context) -> dict[str, Any]:
    root = ctx.find_root()
    if not isinstance(root.obj, dict):
        root.obj = {}
    return root.obj


def get_config(ctx: typer.Context) -> GlobalConfig:
    """Return the configuration resolved by the root callback."""
    config = _obj(ctx).get("config")
    if config is None:
        from eol.config import resolve_config

        config = resolve_config()
        _obj(ctx)["config"] = config
    return config


def inline_template(ctx: typer.Context) -> Optional[str]:
    return _obj(ctx).get("template")


def make_cache(ctx: typer.Context) -> CacheManager:
    config = get_config(ctx)
    return CacheManager(config.cache, base_url=config.request.base_url)


def make_client(ctx: typer.Context) -> EolClient:
    """Build an :class:`EolClient` wired to the configured cache.

    A ``transport`` placed in ``ctx.obj`` (tests pass one through
    ``CliRunner.invoke(..., obj=...)``) is handed to httpx.
    """
    config = get_config(ctx)
    return EolClient(config.request, cache=make_cache(ctx), transport=_obj(ctx).get("transport"))


def make_templates(ctx: typer.Context) -> TemplateManager:
    return TemplateManager(get_config(ctx).output.template_dir)


@contextmanager
def handle_errors() -> Iterator[None]:
    """Report an :class:`EolError` on stderr and exit with its code."""
    try:
        yield
    except EolError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
