"""Typer application and CLI entry point for eol.

This module wires together the top-level Typer application: the root
callback that resolves configuration and output settings, the API query
commands, and the ``cache``, ``templates`` and ``config`` sub-groups.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
:class:`~eol.exceptions.EolError` escaping a command exits with the
error's code; any other exception is written to a crash log under the
data directory.

See Also:
    :mod:`eol.config`: Configuration resolution (flags > env > file > defaults).
    :mod:`eol.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from eol import __version__
from eol.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="eol",
    help="Query endoflife.date for product support lifecycles, with a local cache.",
    no_args_is_help=True,
    add_completion=True,
    rich_markup_mode="rich",
)

# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #

from eol.commands import api as api_commands  # noqa: E402
from eol.commands.cache import cache_app  # noqa: E402
from eol.commands.config import config_app  # noqa: E402
from eol.commands.templates import templates_app  # noqa: E402

api_commands.register(app)
app.add_typer(cache_app, name="cache", help="Inspect and clear the response cache.")
app.add_typer(templates_app, name="templates", help="List and export output templates.")
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"eol {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Send ``eol.*`` log records to stderr through rich when verbose."""
    from rich.console import Console
    from rich.logging import RichHandler

    logger = logging.getLogger("eol")
    if not verbose:
        logger.setLevel(logging.WARNING)
        return
    logger.setLevel(logging.DEBUG)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=Console(stderr=True), show_path=False)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        logger.addHandler(handler)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    output_format: Optional[str] = typer.Option(
        None, "--format", "-f", help="Output format: text or json."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Shortcut for --format json."
    ),
    template: Optional[str] = typer.Option(
        None, "--template", "-t", help="Inline Jinja2 template for text output."
    ),
    template_dir: Optional[str] = typer.Option(
        None, "--template-dir", help="Directory with template overrides."
    ),
    disable_cache: bool = typer.Option(
        False, "--disable-cache", help="Bypass the cache (the full catalog is still cached)."
    ),
    cache_dir: Optional[str] = typer.Option(
        None, "--cache-dir", help="Cache directory."
    ),
    cache_for: Optional[str] = typer.Option(
        None, "--cache-for", help="Cache TTL, e.g. 30m, 2h, 1d, 1wk."
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="API base URL."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Resolves the effective configuration from flags, environment, and
    config file, initialises the global
    :class:`~eol.output.OutputManager`, and stores the configuration and
    the inline template in ``ctx.obj`` for the commands.

    Raises:
        typer.Exit: With the error's exit code if the configuration is
            invalid (unknown format, bad duration, unreadable config file).
    """
    from eol.config import resolve_config
    from eol.exceptions import ConfigError
    from eol.output import OutputFormat, OutputManager, error, set_output

    set_output(OutputManager(no_color=no_color, quiet=quiet, verbose=verbose))
    _configure_logging(verbose)

    try:
        config = resolve_config(
            cli_cache_dir=cache_dir,
            cli_disable_cache=disable_cache,
            cli_cache_for=cache_for,
            cli_base_url=base_url,
            cli_format="json" if json_output else output_format,
            cli_template_dir=template_dir,
        )
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    set_output(
        OutputManager(
            format=OutputFormat(config.output.format),
            no_color=no_color,
            quiet=quiet,
            verbose=verbose,
        )
    )

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["template"] = template
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from eol.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``eol`` console script.

    Unhandled :class:`~eol.exceptions.EolError` instances cause a clean
    exit with the error's ``exit_code``. All other exceptions produce a
    crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from eol.exceptions import EolError
        from eol.output import error

        if isinstance(exc, EolError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
