"""Configuration management with platform paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for eol:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.eol/`` on macOS and Windows for config and data. The response cache
  uses the native per-OS cache location; see :func:`default_cache_dir`.
* **Global config** -- A single :class:`~eol.models.GlobalConfig` JSON file
  storing defaults (cache settings, base URL, output format).
* **Durations** -- :func:`parse_duration` accepts Go-style strings
  (``"90s"``, ``"1h30m"``) plus ``d``, ``wk`` and ``mo`` units.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, and the config file into the effective settings.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`).
"""

from __future__ import annotations

import json
import os
import platform
import re
import tempfile
from datetime import timedelta
from pathlib import Path
from typing import Optional

from eol.exceptions import ConfigError
from eol.models import GlobalConfig

_APP_NAME = "eol"
_CONFIG_FILENAME = "config.json"

_TRUTHY = ("1", "true", "yes", "on")
_OUTPUT_FORMATS = ("text", "json")


# --- Platform path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG base directories (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/eol/`` (default ``~/.config/eol/``).
    On macOS/Windows: ``~/.eol/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/eol/`` (default ``~/.local/share/eol/``).
    On macOS/Windows: ``~/.eol/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def default_cache_dir() -> Path:
    """Return the platform default response-cache directory.

    * Linux/BSD: ``$XDG_CACHE_HOME/eol`` (default ``~/.cache/eol``)
    * macOS: ``~/Library/Caches/eol``
    * Windows: ``~/AppData/Local/eol-cache``
    * No resolvable home directory: ``.eol-cache`` (relative)

    The directory is not created here; the cache creates it on first write.
    Every variant ends in a name that ``cache clear`` is allowed to empty.
    """
    try:
        home = Path.home()
    except RuntimeError:
        return Path(".eol-cache")

    system = platform.system()
    if system == "Windows":
        return home / "AppData" / "Local" / "eol-cache"
    if system == "Darwin":
        return home / "Library" / "Caches" / _APP_NAME
    return _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed and the exception re-raised.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~eol.models.GlobalConfig`, or a default
        instance when the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Durations ---

_EXTENDED_DURATION = re.compile(r"^(\d+)(d|wk|mo)$")
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")

_EXTENDED_UNIT_DAYS = {"d": 1, "wk": 7, "mo": 30}
_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(value: str) -> timedelta:
    """Parse a duration string into a :class:`~datetime.timedelta`.

    Accepts Go-style durations made of one or more ``<number><unit>``
    pairs (``ns``, ``us``, ``ms``, ``s``, ``m``, ``h``), e.g. ``"45m"`` or
    ``"1h30m"``, the bare value ``"0"``, and a single extended unit:
    ``"2d"`` (days), ``"1wk"`` (7 days), ``"3mo"`` (30-day months).

    Raises:
        ConfigError: If *value* is empty or not a recognised duration.
    """
    text = value.strip()
    if not text:
        raise ConfigError(f"Invalid duration: {value!r}")
    if text == "0":
        return timedelta(0)

    extended = _EXTENDED_DURATION.match(text)
    if extended:
        return timedelta(days=int(extended.group(1)) * _EXTENDED_UNIT_DAYS[extended.group(2)])

    seconds = 0.0
    pos = 0
    for part in _DURATION_PART.finditer(text):
        if part.start() != pos:
            break
        seconds += float(part.group(1)) * _UNIT_SECONDS[part.group(2)]
        pos = part.end()
    if pos == 0 or pos != len(text):
        raise ConfigError(f"Invalid duration: {value!r}")
    return timedelta(seconds=seconds)


def format_duration(value: timedelta) -> str:
    """Render a duration the way it is accepted on the command line (``"1h0m0s"``)."""
    total = int(value.total_seconds())
    sign = "-" if total < 0 else ""
    hours, rem = divmod(abs(total), 3600)
    minutes, seconds = divmod(rem, 60)
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


# --- Precedence resolution ---


def resolve_config(
    cli_cache_dir: Optional[str] = None,
    cli_disable_cache: bool = False,
    cli_cache_for: Optional[str] = None,
    cli_base_url: Optional[str] = None,
    cli_format: Optional[str] = None,
    cli_template_dir: Optional[str] = None,
) -> GlobalConfig:
    """Resolve the effective configuration.

    Precedence (high to low):
        1. CLI flags (``--cache-dir``, ``--disable-cache``, ``--cache-for``,
           ``--base-url``, ``--format``, ``--template-dir``)
        2. Environment variables (``EOL_CACHE_DIR``, ``EOL_DISABLE_CACHE``,
           ``EOL_CACHE_TTL``, ``EOL_BASE_URL``, ``EOL_FORMAT``,
           ``EOL_TEMPLATE_DIR``)
        3. User config (``~/.config/eol/config.json``)
        4. Defaults

    Raises:
        ConfigError: On an unreadable config file, an invalid duration, or
            an unknown output format.
    """
    config = load_global_config()

    # 2. Environment variables
    env_dir = os.environ.get("EOL_CACHE_DIR")
    if env_dir:
        config.cache.directory = env_dir
    if os.environ.get("EOL_DISABLE_CACHE", "").strip().lower() in _TRUTHY:
        config.cache.enabled = False
    env_ttl = os.environ.get("EOL_CACHE_TTL")
    if env_ttl:
        config.cache.ttl_seconds = int(parse_duration(env_ttl).total_seconds())
    env_base_url = os.environ.get("EOL_BASE_URL")
    if env_base_url:
        config.request.base_url = env_base_url
    env_format = os.environ.get("EOL_FORMAT")
    if env_format:
        config.output.format = env_format
    env_template_dir = os.environ.get("EOL_TEMPLATE_DIR")
    if env_template_dir:
        config.output.template_dir = env_template_dir

    # 1. CLI flags
    if cli_cache_dir:
        config.cache.directory = cli_cache_dir
    if cli_disable_cache:
        config.cache.enabled = False
    if cli_cache_for:
        config.cache.ttl_seconds = int(parse_duration(cli_cache_for).total_seconds())
    if cli_base_url:
        config.request.base_url = cli_base_url
    if cli_format:
        config.output.format = cli_format
    if cli_template_dir:
        config.output.template_dir = cli_template_dir

    if config.output.format not in _OUTPUT_FORMATS:
        raise ConfigError(
            f"Unsupported format '{config.output.format}' (expected one of: "
            f"{', '.join(_OUTPUT_FORMATS)})"
        )

    return config
