"""Canonical Pydantic models shared across all eol modules.

The models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`CacheConfig`, :class:`RequestConfig`, :class:`OutputConfig`,
    and :class:`GlobalConfig`.

**Cache records** -- the on-disk cache envelope and the statistics report:
    :class:`CacheEntry` and :class:`CacheStats`.

API payloads themselves are not modelled here. The cache stores them
verbatim and the extraction layer works on the decoded JSON directly, so
that a derived response has exactly the shape the API would have sent.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


DEFAULT_BASE_URL = "https://endoflife.date/api/v1"
"""Root of the endoflife.date API v1."""

DEFAULT_CACHE_TTL_SECONDS = 3600
FULL_CATALOG_TTL_SECONDS = 24 * 3600


# --- Configuration ---


class CacheConfig(BaseModel):
    """Response cache settings stored in :class:`GlobalConfig`.

    ``directory`` left empty means "use the platform default" (see
    :func:`~eol.config.default_cache_dir`). ``full_ttl_seconds`` applies
    only to the full product catalog, which is always cached even when
    ``enabled`` is false.
    """

    enabled: bool = Field(default=True, description="Enable response caching")
    directory: Optional[str] = Field(
        default=None, description="Cache directory (empty = platform default)"
    )
    ttl_seconds: int = Field(
        default=DEFAULT_CACHE_TTL_SECONDS, description="Default cache TTL in seconds"
    )
    full_ttl_seconds: int = Field(
        default=FULL_CATALOG_TTL_SECONDS,
        description="TTL in seconds for the full product catalog",
    )

    @property
    def default_ttl(self) -> timedelta:
        return timedelta(seconds=self.ttl_seconds)

    @property
    def full_ttl(self) -> timedelta:
        return timedelta(seconds=self.full_ttl_seconds)


class RequestConfig(BaseModel):
    """HTTP settings applied to every API call."""

    base_url: str = Field(default=DEFAULT_BASE_URL, description="API base URL")
    timeout: int = Field(default=30, description="Request timeout in seconds")
    max_retries: int = Field(default=2, description="Max retry attempts")


class OutputConfig(BaseModel):
    """Default output preferences stored in :class:`GlobalConfig`."""

    format: str = Field(default="text", description="Output format: text, json")
    template_dir: Optional[str] = Field(
        default=None, description="Directory with template overrides"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/eol/config.json``.

    Loaded and saved by :func:`~eol.config.load_global_config` and
    :func:`~eol.config.save_global_config`. Environment variables and CLI
    flags take precedence; see :func:`~eol.config.resolve_config`.
    """

    cache: CacheConfig = Field(default_factory=CacheConfig)
    request: RequestConfig = Field(default_factory=RequestConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Cache records ---


class CacheEntry(BaseModel):
    """One cached API response, stored as a single pretty-printed JSON file.

    ``expires_at`` is fixed when the entry is written and never refreshed
    in place; re-caching always writes a whole new entry. ``parameters``
    is the pipe-joined parameter list used to build the file name, kept
    for human inspection only.
    """

    timestamp: datetime
    expires_at: datetime
    endpoint: str
    parameters: str = ""
    data: Any = None

    @field_validator("timestamp", "expires_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive timestamps (hand-edited files) are read as UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def is_expired(self, now: datetime) -> bool:
        """Return ``True`` when *now* is past :attr:`expires_at`."""
        return now > self.expires_at


class CacheStats(BaseModel):
    """Aggregate view of the cache directory, recomputed on every request.

    Files that cannot be read or parsed count towards ``total_files`` (and
    towards ``total_size`` when their size is known) but towards neither
    ``valid_files`` nor ``expired_files``.
    """

    cache_dir: str
    default_ttl: str
    full_ttl: str
    total_size: int = 0
    total_files: int = 0
    expired_files: int = 0
    valid_files: int = 0
    enabled: bool = True
