"""Built-in CLI sub-commands for eol.

This package groups the Typer command modules that form the CLI's
command tree:

* :mod:`~eol.commands.api` -- ``index``, ``products``, ``product``,
  ``release``, ``latest``, ``categories``, ``tags``, ``identifiers``.
* :mod:`~eol.commands.cache` -- ``cache stats | clear | clear-expired``.
* :mod:`~eol.commands.templates` -- ``templates list | export``.
* :mod:`~eol.commands.config` -- ``config show | set | reset``.

API commands are plain callbacks registered on the root app by
:func:`~eol.commands.api.register`; the other modules each export a
:class:`typer.Typer` sub-application.
"""
