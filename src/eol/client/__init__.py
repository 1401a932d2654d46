"""HTTP client for the endoflife.date API.

:class:`EolClient` performs cache-aware GET requests with retry, and
:mod:`eol.client.response` renders the results for the CLI.
"""

from eol.client.sync_client import USER_AGENT, EolClient

__all__ = ["USER_AGENT", "EolClient"]
