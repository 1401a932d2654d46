"""Cache manager: strategy-driven lookups, TTL policy, and lifecycle operations.

:class:`CacheManager` sits between the API client and
:class:`~eol.cache.storage.CacheStorage`. For every lookup it builds an
ordered list of :class:`CacheStrategy` candidates from the shape of the
requested endpoint, most specific first::

    GET /products/go/releases/1.23.4   params ["go", "1.23.4"]

    1. products-go-releases-1.23.4-<hash>   identity
    2. products-go-<hash>                   release_from_product("1.23.4")
    3. products-full                        release_from_catalog("go", "1.23.4")

The first candidate that is present, unexpired, and yields a result wins.
An exact entry therefore always beats a derived one. The manager never
talks to the network; on a miss the caller fetches and calls :meth:`set`.

The full product catalog (``/products/full``) is special: it is cached for
24 hours and is read and written even when caching is disabled, because
it is expensive to fetch and feeds every other derivation.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from functools import partial
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from eol.cache import extractors
from eol.cache.extractors import Extractor
from eol.cache.storage import CacheStorage, generate_cache_key, load_entry, utcnow
from eol.config import default_cache_dir, format_duration
from eol.exceptions import CacheError, CacheRefusalError
from eol.models import DEFAULT_BASE_URL, CacheConfig, CacheStats

logger = logging.getLogger(__name__)

FULL_CATALOG_ENDPOINT = "/products/full"

CLEAR_ALLOWED_DIRS = (".eol-cache", "eol-cache", "eol")
"""Directory names :meth:`CacheManager.clear` is willing to empty."""


@dataclass(frozen=True)
class CacheStrategy:
    """One candidate location for a cached answer.

    Attributes:
        endpoint: Endpoint whose cache entry is read.
        params: Parameter list of that entry.
        extractor: Turns the entry's payload into the requested response.
        description: Short label used in debug logs.
    """

    endpoint: str
    params: tuple[str, ...]
    extractor: Extractor
    description: str

    @property
    def key(self) -> str:
        return generate_cache_key(self.endpoint, self.params)


# --- Strategy construction ---


def _exact(endpoint: str, params: Sequence[str]) -> CacheStrategy:
    return CacheStrategy(endpoint, tuple(params), extractors.identity, "exact")


def _from_catalog(extractor: Extractor, description: str) -> CacheStrategy:
    return CacheStrategy(FULL_CATALOG_ENDPOINT, (), extractor, description)


_StrategyBuilder = Callable[["re.Match[str]", str], list[CacheStrategy]]


def _products_list(match: re.Match[str], base_url: str) -> list[CacheStrategy]:
    return [
        _from_catalog(
            partial(extractors.products_from_catalog, base_url=base_url),
            "products from catalog",
        )
    ]


def _product(match: re.Match[str], base_url: str) -> list[CacheStrategy]:
    product = match.group("product")
    return [
        _from_catalog(
            partial(extractors.product_from_catalog, product=product),
            f"product {product} from catalog",
        )
    ]


def _release(match: re.Match[str], base_url: str) -> list[CacheStrategy]:
    product, release = match.group("product"), match.group("release")
    return [
        CacheStrategy(
            f"/products/{product}",
            (product,),
            partial(extractors.release_from_product, release=release),
            f"release {release} from product {product}",
        ),
        _from_catalog(
            partial(extractors.release_from_catalog, product=product, release=release),
            f"release {product}/{release} from catalog",
        ),
    ]


def _categories(match: re.Match[str], base_url: str) -> list[CacheStrategy]:
    return [
        _from_catalog(
            partial(extractors.categories_from_catalog, base_url=base_url),
            "categories from catalog",
        )
    ]


def _category(match: re.Match[str], base_url: str) -> list[CacheStrategy]:
    category = match.group("category")
    return [
        _from_catalog(
            partial(extractors.products_by_category, category=category, base_url=base_url),
            f"category {category} from catalog",
        )
    ]


def _tags(match: re.Match[str], base_url: str) -> list[CacheStrategy]:
    return [
        _from_catalog(
            partial(extractors.tags_from_catalog, base_url=base_url),
            "tags from catalog",
        )
    ]


def _tag(match: re.Match[str], base_url: str) -> list[CacheStrategy]:
    tag = match.group("tag")
    return [
        _from_catalog(
            partial(extractors.products_by_tag, tag=tag, base_url=base_url),
            f"tag {tag} from catalog",
        )
    ]


def _exact_only(match: re.Match[str], base_url: str) -> list[CacheStrategy]:
    return []


# First matching pattern wins; paths are matched without surrounding slashes.
_ENDPOINT_RULES: list[tuple[re.Pattern[str], _StrategyBuilder]] = [
    (re.compile(r"^products/full$"), _exact_only),
    (re.compile(r"^products$"), _products_list),
    (re.compile(r"^products/(?P<product>[^/]+)/releases/latest$"), _exact_only),
    (re.compile(r"^products/(?P<product>[^/]+)/releases/(?P<release>[^/]+)$"), _release),
    (re.compile(r"^products/(?P<product>[^/]+)$"), _product),
    (re.compile(r"^categories$"), _categories),
    (re.compile(r"^categories/(?P<category>[^/]+)$"), _category),
    (re.compile(r"^tags$"), _tags),
    (re.compile(r"^tags/(?P<tag>[^/]+)$"), _tag),
]


def build_strategies(
    endpoint: str,
    params: Sequence[str] = (),
    base_url: str = DEFAULT_BASE_URL,
) -> list[CacheStrategy]:
    """Return the ordered cache candidates for *endpoint* and *params*.

    The first candidate is always the exact entry with the identity
    extractor. Endpoints derivable from a narrower relative or from the
    full catalog get further candidates, broadest last. Endpoints with no
    derivable relationship (index, identifiers, latest release, the
    catalog itself) get the exact candidate only.
    """
    strategies = [_exact(endpoint, params)]
    path = endpoint.strip("/")
    for pattern, builder in _ENDPOINT_RULES:
        match = pattern.match(path)
        if match:
            strategies.extend(builder(match, base_url))
            break
    return strategies


def is_full_endpoint(endpoint: str) -> bool:
    """Return ``True`` for the full product catalog endpoint."""
    return endpoint in (FULL_CATALOG_ENDPOINT, FULL_CATALOG_ENDPOINT.lstrip("/"))


# --- Manager ---


class CacheManager:
    """Disk cache for endoflife.date responses with hierarchical fallback.

    Args:
        config: Cache settings. ``config.directory`` empty means the
            platform default from :func:`~eol.config.default_cache_dir`.
        base_url: API root used to synthesise ``uri`` fields in derived
            list responses.
        clock: Source of the current time, passed to the storage layer.

    Example::

        cache = CacheManager(CacheConfig(directory="/tmp/eol"))
        cache.set("/products/full", catalog)
        cache.get("/products/go/releases/1.23.4", ["go", "1.23.4"])
    """

    def __init__(
        self,
        config: Optional[CacheConfig] = None,
        base_url: str = DEFAULT_BASE_URL,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._config = config or CacheConfig()
        self._base_url = base_url
        directory = Path(self._config.directory) if self._config.directory else default_cache_dir()
        self._storage = CacheStorage(directory, clock=clock)

    @property
    def directory(self) -> Path:
        return self._storage.directory

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    @property
    def storage(self) -> CacheStorage:
        return self._storage

    def must_use_cache(self, endpoint: str) -> bool:
        """Return ``True`` if *endpoint* is cached even when caching is disabled."""
        return is_full_endpoint(endpoint)

    def build_strategies(self, endpoint: str, params: Sequence[str] = ()) -> list[CacheStrategy]:
        """Ordered cache candidates for *endpoint*; see :func:`build_strategies`."""
        return build_strategies(endpoint, params, self._base_url)

    def _bypassed(self, endpoint: str) -> bool:
        return not self._config.enabled and not self.must_use_cache(endpoint)

    def get(self, endpoint: str, params: Sequence[str] = ()) -> Optional[Any]:
        """Return the cached (or derived) response for *endpoint*, or ``None``.

        Candidates from :meth:`build_strategies` are tried in order; the
        first one whose entry exists, has not expired, and whose extractor
        succeeds is returned. Expired entries met along the way are deleted.
        """
        if self._bypassed(endpoint):
            return None

        for strategy in self.build_strategies(endpoint, params):
            payload = self._storage.read(strategy.endpoint, strategy.params)
            if payload is None:
                continue
            result = strategy.extractor(payload)
            if result is not None:
                logger.debug("Cache hit for %s (%s)", endpoint, strategy.description)
                return result
            logger.debug("Cache entry %s cannot answer %s", strategy.key, endpoint)

        logger.debug("Cache miss for %s", endpoint)
        return None

    def set(self, endpoint: str, data: Any, params: Sequence[str] = ()) -> None:
        """Store *data* as the response of *endpoint* under its own key.

        The full catalog is kept for ``full_ttl`` (24 hours by default);
        every other endpoint for the configured default TTL. Does nothing
        when caching is disabled, except for the full catalog. A ``None``
        payload (JSON ``null``) is not stored, since lookups report it as a
        miss.

        Raises:
            CacheWriteError: If the entry cannot be serialised or written.
        """
        if self._bypassed(endpoint):
            return
        if data is None:
            logger.debug("Not caching empty response for %s", endpoint)
            return
        ttl = self._config.full_ttl if is_full_endpoint(endpoint) else self._config.default_ttl
        path = self._storage.write(endpoint, params, data, ttl)
        logger.debug("Cached %s in %s", endpoint, path.name)

    # --- Lifecycle ---

    def clear(self) -> int:
        """Delete every cache-entry file in the cache directory.

        Only files with the cache-entry extension are removed; other files
        and subdirectories are left alone.

        Returns:
            The number of files removed.

        Raises:
            CacheRefusalError: If the directory name is not one of
                :data:`CLEAR_ALLOWED_DIRS`. Nothing is deleted.
            CacheError: If a file cannot be removed.
        """
        if self.directory.name not in CLEAR_ALLOWED_DIRS:
            raise CacheRefusalError(self.directory)

        removed = 0
        for path in self._storage.entry_files():
            try:
                path.unlink()
            except OSError as exc:
                raise CacheError(f"Failed to remove cache file {path}: {exc}") from exc
            removed += 1
        logger.debug("Removed %d cache files from %s", removed, self.directory)
        return removed

    def clear_expired(self) -> int:
        """Delete entries whose ``expires_at`` has passed.

        Files that cannot be read or parsed are skipped, not deleted.

        Returns:
            The number of files removed.
        """
        now = self._storage.now()
        removed = 0
        for path in self._storage.entry_files():
            entry = load_entry(path)
            if entry is None or not entry.is_expired(now):
                continue
            try:
                path.unlink()
            except OSError:
                continue
            removed += 1
        return removed

    def get_stats(self) -> CacheStats:
        """Scan the cache directory and summarise its entries.

        Read-only: nothing is deleted, even entries found to be expired.
        """
        stats = CacheStats(
            cache_dir=str(self.directory),
            default_ttl=format_duration(self._config.default_ttl),
            full_ttl=format_duration(self._config.full_ttl),
            enabled=self._config.enabled,
        )
        now = self._storage.now()
        for path in self._storage.entry_files():
            stats.total_files += 1
            try:
                stats.total_size += path.stat().st_size
            except OSError:
                continue

            entry = load_entry(path)
            if entry is None:
                continue
            if entry.is_expired(now):
                stats.expired_files += 1
            else:
                stats.valid_files += 1
        return stats
