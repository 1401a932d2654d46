"""Synchronous endoflife.date API client with caching and retry.

This module provides :class:`EolClient`, the blocking HTTP client used by
the eol CLI commands. It wraps :class:`httpx.Client` and layers on:

- **Response caching** -- every endpoint consults
  :class:`~eol.cache.manager.CacheManager` first, which may answer from an
  exact entry or derive the response from a broader cached one (a product,
  or the full catalog). Fetched responses are stored back.
- **Retry with backoff** -- retries on 5xx and network errors with
  exponential delay (1 s, 2 s, 4 s, ...).
- **Error mapping** -- HTTP failures become typed
  :class:`~eol.exceptions.EolError` subclasses with distinct exit codes.
- **Release normalization** -- ``release("go", "1.23.4")`` asks for the
  ``1.23`` cycle first and falls back to the literal name.

Endpoint methods return the decoded JSON body exactly as the API sends it.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional, Sequence

import httpx

from eol import __version__
from eol.cache.manager import CacheManager
from eol.exceptions import (
    CacheWriteError,
    ConnectionError_,
    InvalidUsageError,
    NotFoundError,
    ServerError,
)
from eol.models import RequestConfig
from eol.output import get_output
from eol.version import is_semantic_version, normalize_version

logger = logging.getLogger(__name__)

USER_AGENT = f"eol-python-client/{__version__}"


def _require(value: str, what: str) -> str:
    if not value or not value.strip():
        raise InvalidUsageError(f"{what} cannot be empty")
    return value.strip()


class EolClient:
    """Client for the endoflife.date API v1.

    Must be used as a context manager so that the underlying transport is
    properly opened and closed.

    Args:
        config: Base URL, timeout, and retry settings. Defaults to
            :class:`~eol.models.RequestConfig` defaults.
        cache: Optional cache manager. When ``None``, every call goes to
            the network and nothing is stored.
        transport: Optional :class:`httpx.BaseTransport`, mainly for tests
            (``httpx.MockTransport``).

    Example::

        with EolClient(RequestConfig(), cache=CacheManager()) as client:
            client.products_full()
            client.release("go", "1.23.4")   # served from the cached catalog
    """

    def __init__(
        self,
        config: Optional[RequestConfig] = None,
        cache: Optional[CacheManager] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config or RequestConfig()
        self._cache = cache
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    @property
    def base_url(self) -> str:
        return self._config.base_url

    @property
    def cache(self) -> Optional[CacheManager]:
        return self._cache

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> EolClient:
        self._client = httpx.Client(
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Core fetch
    # ------------------------------------------------------------------ #

    def fetch(self, endpoint: str, params: Sequence[str] = ()) -> Any:
        """Return the response for *endpoint*, from the cache if possible.

        Args:
            endpoint: API path relative to the base URL, e.g. ``"/products/go"``.
            params: Cache parameter list; part of the cache key.

        Returns:
            The decoded JSON body.

        Raises:
            NotFoundError: On 404.
            ServerError: On 5xx after all retries, other 4xx, or a body
                that is not JSON.
            ConnectionError_: On network / timeout errors after all retries.
        """
        if self._cache is not None:
            cached = self._cache.get(endpoint, params)
            if cached is not None:
                get_output().debug(f"Cache hit: {endpoint}")
                return cached

        response = self._execute_with_retry(endpoint)
        self._map_response_error(response)

        try:
            data = response.json()
        except ValueError as exc:
            raise ServerError(f"Invalid JSON in response from {endpoint}: {exc}") from exc

        self._cache_set(endpoint, data, params)
        return data

    def _execute_with_retry(self, endpoint: str) -> httpx.Response:
        """Execute a GET with exponential-backoff retry.

        Retries on 5xx status codes and connection / timeout errors up to
        ``max_retries`` times. The delay doubles each attempt: 1 s, 2 s, 4 s, ...
        """
        assert self._client is not None, "Client not initialised -- use as context manager"

        max_retries = self._config.max_retries
        output = get_output()

        for attempt in range(max_retries + 1):
            try:
                response = self._client.get(endpoint)
            except (httpx.ConnectError, httpx.TimeoutException, httpx.NetworkError) as exc:
                if attempt < max_retries:
                    delay = 2 ** attempt
                    output.debug(
                        f"Connection error: {exc}, retrying in {delay}s "
                        f"(attempt {attempt + 1}/{max_retries})"
                    )
                    time.sleep(delay)
                    continue
                raise ConnectionError_(
                    f"Connection failed after {max_retries + 1} attempts: {exc}"
                ) from exc

            if response.status_code >= 500 and attempt < max_retries:
                delay = 2 ** attempt
                output.debug(
                    f"Server error {response.status_code}, retrying in {delay}s "
                    f"(attempt {attempt + 1}/{max_retries})"
                )
                time.sleep(delay)
                continue

            logger.debug("GET %s -> %d", endpoint, response.status_code)
            return response

        raise ServerError("Request failed after all retries")  # pragma: no cover

    def _map_response_error(self, response: httpx.Response) -> None:
        """Raise a typed exception for error HTTP status codes."""
        status = response.status_code
        if status < 400:
            return

        try:
            detail = response.json()
            if isinstance(detail, dict):
                msg = detail.get("message") or detail.get("error") or ""
            else:
                msg = str(detail)
        except ValueError:
            msg = response.text[:200] if response.text else ""

        reason = response.reason_phrase or ""
        prefix = f"HTTP {status} {reason}".rstrip()
        full_msg = f"{prefix}: {msg}" if msg else prefix

        if status == 404:
            raise NotFoundError(full_msg)
        raise ServerError(full_msg)

    def _cache_set(self, endpoint: str, data: Any, params: Sequence[str]) -> None:
        """Store a fetched response; a failed write is reported, never fatal."""
        if self._cache is None:
            return
        try:
            self._cache.set(endpoint, data, params)
        except CacheWriteError as exc:
            get_output().warning(f"Could not cache {endpoint}: {exc}")

    # ------------------------------------------------------------------ #
    # Endpoints
    # ------------------------------------------------------------------ #

    def index(self) -> Any:
        """``GET /`` -- the API's main endpoints."""
        return self.fetch("/")

    def products(self) -> Any:
        """``GET /products`` -- summary list of every product."""
        return self.fetch("/products")

    def products_full(self) -> Any:
        """``GET /products/full`` -- every product with all release cycles."""
        return self.fetch("/products/full")

    def product(self, name: str) -> Any:
        """``GET /products/{name}``."""
        name = _require(name, "Product name")
        return self.fetch(f"/products/{name}", [name])

    def release(self, product: str, release: str) -> Any:
        """``GET /products/{product}/releases/{release}``.

        A semantic version is first looked up as its ``major.minor`` cycle;
        if that fails, the literal release name is tried once.

        Raises:
            NotFoundError: If neither form exists. The message names both.
        """
        product = _require(product, "Product name")
        release = _require(release, "Release name")
        normalized = normalize_version(release)
        if is_semantic_version(release):
            logger.debug("Normalized release %s to %s", release, normalized)

        try:
            return self.fetch(
                f"/products/{product}/releases/{normalized}", [product, normalized]
            )
        except (NotFoundError, ServerError) as exc:
            if normalized == release:
                raise type(exc)(
                    f"Failed to get release {release} for product {product}: {exc}"
                ) from exc
            first_error = exc

        logger.debug("Release %s not found, retrying as %s", normalized, release)
        try:
            return self.fetch(f"/products/{product}/releases/{release}", [product, release])
        except (NotFoundError, ServerError) as exc:
            raise type(first_error)(
                f"Failed to get release {release} for product {product} "
                f"(also tried {normalized}): {first_error}"
            ) from exc

    def latest_release(self, product: str) -> Any:
        """``GET /products/{product}/releases/latest``."""
        product = _require(product, "Product name")
        return self.fetch(f"/products/{product}/releases/latest", [product, "latest"])

    def categories(self) -> Any:
        """``GET /categories``."""
        return self.fetch("/categories")

    def products_by_category(self, category: str) -> Any:
        """``GET /categories/{category}``."""
        category = _require(category, "Category name")
        return self.fetch(f"/categories/{category}", ["category", category])

    def tags(self) -> Any:
        """``GET /tags``."""
        return self.fetch("/tags")

    def products_by_tag(self, tag: str) -> Any:
        """``GET /tags/{tag}``."""
        tag = _require(tag, "Tag name")
        return self.fetch(f"/tags/{tag}", ["tag", tag])

    def identifier_types(self) -> Any:
        """``GET /identifiers``."""
        return self.fetch("/identifiers")

    def identifiers_by_type(self, identifier_type: str) -> Any:
        """``GET /identifiers/{type}``."""
        identifier_type = _require(identifier_type, "Identifier type")
        return self.fetch(f"/identifiers/{identifier_type}", ["identifier", identifier_type])
