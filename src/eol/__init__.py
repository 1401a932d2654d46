"""eol -- Command-line client and library for the endoflife.date API.

This package queries the read-only endoflife.date REST API for support
lifecycle data (release cycles, end-of-life dates, LTS status) and keeps a
local disk cache of every response. The cache can answer narrower queries
from broader snapshots: once the full product catalog is cached, single
products, single releases, categories and tags are all served locally.

Typical usage::

    eol products --full        # fetch and cache the full catalog (24h)
    eol release go 1.23.4      # answered from the cached catalog
    eol cache stats

Library usage::

    from eol.cache import CacheManager
    from eol.client import EolClient
    from eol.models import GlobalConfig

    config = GlobalConfig()
    with EolClient(config.request, cache=CacheManager(config.cache)) as client:
        release = client.release("go", "1.23.4")

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models for configuration and cache records.
    config: Platform paths, config file handling, and precedence resolution.
    cache: Disk cache with hierarchical extraction.
    client: HTTP client for the endoflife.date API.
    templates: Jinja2 text rendering of API responses.
    output: stdout/stderr output discipline.
"""

__version__ = "0.4.0"
