"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~eol.exceptions.EolError` subclass. Shell scripts
can inspect the exit code to tell a missing product from a network outage
without parsing stderr.

Example::

    $ eol product no-such-thing
    $ echo $?
    3   # EXIT_NOT_FOUND
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_NOT_FOUND = 3
"""The requested product, release, category or tag does not exist (HTTP 404)."""

EXIT_SERVER_ERROR = 4
"""The API answered with an error status (HTTP 5xx or an unexpected 4xx)."""

EXIT_CONNECTION_ERROR = 5
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_CACHE_REFUSED = 6
"""``cache clear`` refused to touch a directory outside the allow-list."""

EXIT_TEMPLATE_ERROR = 7
"""A built-in, override, or inline output template failed to parse or render."""
