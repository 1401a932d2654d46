"""Config commands -- view and modify the global configuration.

Provides the ``eol config`` sub-command group for reading, updating, and
resetting the user's configuration file
(:class:`~eol.models.GlobalConfig`). Settings are persisted in the eol
config directory and supply defaults for the cache, HTTP requests, and
output; environment variables and CLI flags still override them.
"""

from __future__ import annotations

import typer
from pydantic import ValidationError

from eol.commands.common import handle_errors
from eol.exit_codes import EXIT_INVALID_USAGE
from eol.output import error, get_output, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the stored configuration.

    Prints the config directory to stderr and the configuration as JSON
    to stdout. Flags and environment variables are not applied here.

    Example::

        eol config show
    """
    from eol.config import get_config_dir, load_global_config

    with handle_errors():
        config = load_global_config()
    info(f"Config directory: {get_config_dir()}")
    get_output().print_json(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'cache.ttl_seconds')."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    Uses dot notation for nested keys. The value is coerced to the type of
    the existing field (bool or int). For ``cache.ttl_seconds`` and
    ``cache.full_ttl_seconds`` a duration such as ``2h`` or ``1d`` is also
    accepted. An empty string clears an optional field.

    Example::

        eol config set output.format json
        eol config set cache.ttl_seconds 2h
        eol config set cache.directory ""
    """
    from eol.config import load_global_config, parse_duration, save_global_config
    from eol.exceptions import ConfigError
    from eol.models import GlobalConfig

    with handle_errors():
        config = load_global_config()
    data = config.model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    current = target[final_key]
    coerced: object
    if isinstance(current, bool):
        coerced = value.lower() in ("true", "1", "yes", "on")
    elif isinstance(current, int):
        try:
            coerced = int(value)
        except ValueError:
            try:
                coerced = int(parse_duration(value).total_seconds())
            except ConfigError:
                error(f"Expected integer or duration for {key}, got: {value}")
                raise typer.Exit(code=EXIT_INVALID_USAGE) from None
    elif current is None or value == "":
        coerced = value or None
    else:
        coerced = value

    target[final_key] = coerced

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    with handle_errors():
        save_global_config(new_config)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
) -> None:
    """Reset configuration to defaults.

    Replaces the persisted config with a fresh
    :class:`~eol.models.GlobalConfig`. Asks for confirmation unless
    ``--yes`` is given.

    Example::

        eol config reset --yes
    """
    from eol.config import save_global_config
    from eol.models import GlobalConfig

    if not yes:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    with handle_errors():
        save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
