"""File-per-entry cache storage.

Each cached response lives in its own pretty-printed JSON file inside the
cache directory. The file name is derived from the endpoint and its
parameter list by :func:`generate_cache_key`::

    /products/go                  ["go"]        -> products-go-34d1f91f.eol_cache.json
    /products/full                []            -> products-full.eol_cache.json
    /                             []            -> index.eol_cache.json

File contents are a :class:`~eol.models.CacheEntry` envelope::

    {
      "timestamp": "2025-01-11T10:00:00Z",
      "expires_at": "2025-01-11T11:00:00Z",
      "endpoint": "/products/go",
      "parameters": "go",
      "data": { ... response exactly as received ... }
    }

Reads treat missing, unparsable, and expired files identically (``None``),
so every failure mode upstream degrades to a network fetch. Writes raise
:class:`~eol.exceptions.CacheWriteError`.
"""

from __future__ import annotations

import hashlib
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from pydantic import ValidationError

from eol.exceptions import CacheWriteError
from eol.models import CacheEntry


CACHE_EXTENSION = ".eol_cache.json"
INDEX_KEY = "index"
PARAMETER_SEPARATOR = "|"


def utcnow() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def generate_cache_key(endpoint: str, params: Sequence[str] = ()) -> str:
    """Return the cache file name for *endpoint* and *params*.

    One leading slash is removed and the remaining slashes become
    hyphens; an empty path maps to ``index``. When parameters are given,
    the first 8 hex digits of the MD5 of their pipe-joined form are
    appended, so the same parameters in a different order yield a
    different key.
    """
    name = endpoint.removeprefix("/").replace("/", "-") or INDEX_KEY
    if not params:
        return f"{name}{CACHE_EXTENSION}"
    joined = PARAMETER_SEPARATOR.join(params)
    digest = hashlib.md5(joined.encode("utf-8")).hexdigest()
    return f"{name}-{digest[:8]}{CACHE_EXTENSION}"


def load_entry(path: Path) -> Optional[CacheEntry]:
    """Parse the entry stored at *path*, or return ``None`` if it is unreadable."""
    try:
        return CacheEntry.model_validate_json(path.read_bytes())
    except (OSError, ValidationError, ValueError):
        return None


class CacheStorage:
    """Reads and writes :class:`~eol.models.CacheEntry` files in one directory.

    Args:
        directory: Directory holding the entry files. Created on first write.
        clock: Callable returning the current aware ``datetime``. Tests
            substitute a fixed clock to exercise expiry.
    """

    def __init__(
        self,
        directory: str | Path,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._directory = Path(directory)
        self._clock = clock

    @property
    def directory(self) -> Path:
        return self._directory

    def now(self) -> datetime:
        return self._clock()

    def path_for(self, endpoint: str, params: Sequence[str] = ()) -> Path:
        """Return the full path of the entry file for *endpoint* and *params*."""
        return self._directory / generate_cache_key(endpoint, params)

    def entry_files(self) -> list[Path]:
        """Return every cache-entry file in the directory, sorted by name."""
        if not self._directory.is_dir():
            return []
        return sorted(
            p for p in self._directory.glob(f"*{CACHE_EXTENSION}") if p.is_file()
        )

    def ensure_directory(self) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)

    def write(
        self,
        endpoint: str,
        params: Sequence[str],
        data: Any,
        ttl: timedelta,
    ) -> Path:
        """Store *data* under the key for *endpoint* and *params*.

        A new entry is always written in full: ``timestamp`` is now and
        ``expires_at`` is now + *ttl*. The file is written to a temporary
        sibling and renamed into place.

        Returns:
            The path of the written entry file.

        Raises:
            CacheWriteError: If the directory cannot be created, *data*
                cannot be serialised, or the file cannot be written.
        """
        try:
            self.ensure_directory()
        except OSError as exc:
            raise CacheWriteError(
                f"Failed to create cache directory {self._directory}: {exc}"
            ) from exc

        now = self.now()
        entry = CacheEntry(
            timestamp=now,
            expires_at=now + ttl,
            endpoint=endpoint,
            parameters=PARAMETER_SEPARATOR.join(params),
            data=data,
        )
        try:
            text = entry.model_dump_json(indent=2)
        except (TypeError, ValueError) as exc:
            raise CacheWriteError(
                f"Failed to serialise data for {endpoint}: {exc}"
            ) from exc

        path = self.path_for(endpoint, params)
        tmp_path = path.with_name(f".{path.name}.tmp")
        try:
            tmp_path.write_text(text + "\n", encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as exc:
            try:
                tmp_path.unlink()
            except OSError:
                pass
            raise CacheWriteError(f"Failed to write cache file {path}: {exc}") from exc
        return path

    def read(self, endpoint: str, params: Sequence[str] = ()) -> Optional[Any]:
        """Return the payload cached for *endpoint* and *params*, or ``None``.

        A corrupt file is left in place and reported as a miss. An expired
        entry is deleted and reported as a miss. A stored JSON ``null``
        payload is indistinguishable from a miss.
        """
        path = self.path_for(endpoint, params)
        if not path.is_file():
            return None

        entry = load_entry(path)
        if entry is None:
            return None

        if entry.is_expired(self.now()):
            try:
                path.unlink()
            except OSError:
                pass
            return None

        return entry.data
