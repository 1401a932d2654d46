"""Disk-based response caching for eol.

This package provides :class:`CacheManager`, a file-per-entry cache of
endoflife.date API responses. Besides exact lookups it can answer a
request from a broader cached response -- a single release from its
product, or almost anything from the full product catalog -- without a
network call.

Layers, leaf first:

* :mod:`eol.cache.storage` -- entry files, keys, TTL stamping, lazy expiry.
* :mod:`eol.cache.extractors` -- pure "derive X from cached Y" functions.
* :mod:`eol.cache.manager` -- per-request strategy lists, TTL policy,
  clear / sweep / statistics.

The cache is consumed by :class:`~eol.client.sync_client.EolClient` and is
controlled by the ``cache`` section of the configuration
(:class:`~eol.models.CacheConfig`).
"""

from eol.cache.manager import (
    CLEAR_ALLOWED_DIRS,
    FULL_CATALOG_ENDPOINT,
    CacheManager,
    CacheStrategy,
    build_strategies,
)
from eol.cache.storage import CACHE_EXTENSION, CacheStorage, generate_cache_key

__all__ = [
    "CACHE_EXTENSION",
    "CLEAR_ALLOWED_DIRS",
    "FULL_CATALOG_ENDPOINT",
    "CacheManager",
    "CacheStorage",
    "CacheStrategy",
    "build_strategies",
    "generate_cache_key",
]
