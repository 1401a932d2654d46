"""Exception hierarchy for eol.

All exceptions inherit from :class:`EolError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`eol.exit_codes`.
The top-level handler in :func:`eol.app.main` catches ``EolError`` and
exits with the matching code, while unexpected exceptions produce a crash
log and exit with :data:`EXIT_GENERIC_FAILURE`.

A cache *miss* is never an exception: lookups return ``None`` and the
caller falls through to the network. Only write failures and refusals
surface as :class:`CacheError` subclasses.

Subclass hierarchy::

    EolError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- NotFoundError       (exit 3)
    +-- ServerError         (exit 4)
    +-- ConnectionError_    (exit 5)
    +-- ConfigError         (exit 1)
    +-- TemplateError       (exit 7)
    +-- CacheError          (exit 1)
        +-- CacheWriteError     (exit 1)
        +-- CacheRefusalError   (exit 6)
"""

from __future__ import annotations

from pathlib import Path

from eol.exit_codes import (
    EXIT_CACHE_REFUSED,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
    EXIT_TEMPLATE_ERROR,
)


class EolError(Exception):
    """Base exception for all eol errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(EolError):
    """Raised for invalid CLI arguments or empty required names."""

    exit_code = EXIT_INVALID_USAGE


class NotFoundError(EolError):
    """Raised when the API returns HTTP 404."""

    exit_code = EXIT_NOT_FOUND


class ServerError(EolError):
    """Raised when the API returns HTTP 5xx or an unexpected 4xx status."""

    exit_code = EXIT_SERVER_ERROR


class ConnectionError_(EolError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class ConfigError(EolError):
    """Raised for configuration problems (invalid JSON, bad durations, unknown keys)."""

    exit_code = EXIT_GENERIC_FAILURE


class TemplateError(EolError):
    """Raised when an output template cannot be found, parsed, or rendered."""

    exit_code = EXIT_TEMPLATE_ERROR


class CacheError(EolError):
    """Base class for cache failures that callers may want to report."""


class CacheWriteError(CacheError):
    """Raised when a cache entry cannot be serialised or written to disk.

    Callers that already hold the fetched data should report this and
    carry on; caching is an optimisation, not a correctness requirement.
    """


class CacheRefusalError(CacheError):
    """Raised when ``clear`` is asked to empty a directory outside the allow-list.

    Args:
        directory: The configured cache directory that was left untouched.
    """

    exit_code = EXIT_CACHE_REFUSED

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)
        super().__init__(
            f"Refusing to clear non-default cache folder '{self.directory.name}' "
            f"({self.directory}). Remove the files manually or point --cache-dir "
            f"at a directory named 'eol', 'eol-cache' or '.eol-cache'."
        )
