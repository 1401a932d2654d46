"""Shared test fixtures for eol.

Provides reusable fixtures for API payloads, isolated config and cache
directories, a controllable clock, output state, and running CLI commands.
These fixtures are automatically discovered by pytest and available to
all test modules without explicit imports.
"""

from __future__ import annotations

import copy
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import pytest

from eol.cache import CacheManager
from eol.models import CacheConfig
from eol.output import OutputFormat, OutputManager, reset_output, set_output


BASE_URL = "https://endoflife.date/api/v1"

START = datetime(2025, 1, 11, 10, 0, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    Resetting forces a fresh manager to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


class FakeClock:
    """A settable clock for expiry tests."""

    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# API payload fixtures
# ---------------------------------------------------------------------------


_CATALOG: dict[str, Any] = {
    "schema_version": "1.2.0",
    "generated_at": "2025-01-11T08:00:00+00:00",
    "last_modified": "2025-01-10T21:00:00+00:00",
    "total": 3,
    "result": [
        {
            "name": "go",
            "label": "Go",
            "aliases": ["golang"],
            "category": "lang",
            "tags": ["google", "lang"],
            "links": {"html": "https://endoflife.date/go"},
            "releases": [
                {
                    "name": "1.24",
                    "label": "1.24",
                    "releaseDate": "2025-02-11",
                    "isLts": False,
                    "isEol": False,
                    "eolFrom": None,
                    "isMaintained": True,
                    "latest": {"name": "1.24.1", "date": "2025-03-04"},
                },
                {
                    "name": "1.23",
                    "label": "1.23",
                    "releaseDate": "2024-08-13",
                    "isLts": False,
                    "isEol": False,
                    "eolFrom": None,
                    "isMaintained": True,
                    "latest": {"name": "1.23.7", "date": "2025-03-04"},
                },
            ],
        },
        {
            "name": "python",
            "label": "Python",
            "aliases": [],
            "category": "lang",
            "tags": ["lang", "python-software-foundation"],
            "links": {"html": "https://endoflife.date/python"},
            "releases": [
                {
                    "name": "3.13",
                    "label": "3.13",
                    "releaseDate": "2024-10-07",
                    "isLts": False,
                    "isEol": False,
                    "eolFrom": "2029-10-31",
                    "isMaintained": True,
                    "latest": {"name": "3.13.2", "date": "2025-02-04"},
                },
            ],
        },
        {
            "name": "ubuntu",
            "label": "Ubuntu",
            "aliases": [],
            "category": "os",
            "tags": ["canonical", "os"],
            "links": {"html": "https://endoflife.date/ubuntu"},
            "releases": [
                {
                    "name": "24.04",
                    "label": "24.04 'Noble Numbat' (LTS)",
                    "codename": "Noble Numbat",
                    "releaseDate": "2024-04-25",
                    "isLts": True,
                    "isEol": False,
                    "eolFrom": "2029-05-31",
                    "isMaintained": True,
                    "latest": {"name": "24.04.2", "date": "2025-02-20"},
                },
            ],
        },
    ],
}


@pytest.fixture
def catalog() -> dict[str, Any]:
    """A small ``/products/full`` response: go, python (lang) and ubuntu (os)."""
    return copy.deepcopy(_CATALOG)


@pytest.fixture
def go_product(catalog: dict[str, Any]) -> dict[str, Any]:
    """A ``/products/go`` response."""
    return {
        "schema_version": catalog["schema_version"],
        "last_modified": catalog["last_modified"],
        "result": copy.deepcopy(catalog["result"][0]),
    }


# ---------------------------------------------------------------------------
# Cache fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    """An allow-listed cache directory (not yet created)."""
    return tmp_path / "eol"


@pytest.fixture
def cache(cache_dir: Path, clock: FakeClock) -> CacheManager:
    """An enabled CacheManager on :func:`cache_dir` driven by :func:`clock`."""
    return CacheManager(CacheConfig(directory=str(cache_dir)), base_url=BASE_URL, clock=clock)


@pytest.fixture
def disabled_cache(cache_dir: Path, clock: FakeClock) -> CacheManager:
    """A CacheManager with caching disabled."""
    config = CacheConfig(enabled=False, directory=str(cache_dir))
    return CacheManager(config, base_url=BASE_URL, clock=clock)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME, XDG_CACHE_HOME, and XDG_DATA_HOME to
    subdirectories of tmp_path so that tests never touch real user
    config. Clears all EOL_* environment variables and changes the
    working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "EOL_CACHE_DIR",
        "EOL_DISABLE_CACHE",
        "EOL_CACHE_TTL",
        "EOL_BASE_URL",
        "EOL_FORMAT",
        "EOL_TEMPLATE_DIR",
        "NO_COLOR",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, colourless text OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.TEXT, no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.JSON, no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
