"""Tests for CacheManager: strategy ordering, fallback, TTLs, and lifecycle."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from eol.cache import CacheManager, build_strategies, generate_cache_key
from eol.cache.storage import CACHE_EXTENSION
from eol.exceptions import CacheRefusalError, CacheWriteError
from eol.models import CacheConfig

BASE_URL = "https://endoflife.date/api/v1"


def _keys(endpoint: str, params: list[str]) -> list[str]:
    return [s.key for s in build_strategies(endpoint, params, BASE_URL)]


# ------------------------------------------------------------------ #
# Strategy construction
# ------------------------------------------------------------------ #


class TestBuildStrategies:
    def test_release_order(self) -> None:
        assert _keys("/products/go/releases/1.23.4", ["go", "1.23.4"]) == [
            generate_cache_key("/products/go/releases/1.23.4", ["go", "1.23.4"]),
            generate_cache_key("/products/go", ["go"]),
            generate_cache_key("/products/full"),
        ]

    def test_product_falls_back_to_catalog(self) -> None:
        assert _keys("/products/go", ["go"]) == [
            generate_cache_key("/products/go", ["go"]),
            generate_cache_key("/products/full"),
        ]

    @pytest.mark.parametrize(
        "endpoint, params",
        [
            ("/products", []),
            ("/categories", []),
            ("/categories/os", ["category", "os"]),
            ("/tags", []),
            ("/tags/lang", ["tag", "lang"]),
        ],
    )
    def test_catalog_derivable_endpoints(self, endpoint: str, params: list[str]) -> None:
        keys = _keys(endpoint, params)
        assert len(keys) == 2
        assert keys[0] == generate_cache_key(endpoint, params)
        assert keys[-1] == generate_cache_key("/products/full")

    @pytest.mark.parametrize(
        "endpoint, params",
        [
            ("/", []),
            ("/products/full", []),
            ("/products/go/releases/latest", ["go", "latest"]),
            ("/identifiers", []),
            ("/identifiers/purl", ["identifier", "purl"]),
        ],
    )
    def test_exact_only_endpoints(self, endpoint: str, params: list[str]) -> None:
        assert _keys(endpoint, params) == [generate_cache_key(endpoint, params)]

    def test_first_strategy_is_identity(self) -> None:
        first = build_strategies("/products/go", ["go"], BASE_URL)[0]
        assert first.extractor({"x": 1}) == {"x": 1}

    def test_endpoint_without_leading_slash(self) -> None:
        assert len(build_strategies("products/go", ["go"], BASE_URL)) == 2


# ------------------------------------------------------------------ #
# get / set
# ------------------------------------------------------------------ #


class TestGetSet:
    def test_exact_round_trip(self, cache: CacheManager, go_product: dict[str, Any]) -> None:
        cache.set("/products/go", go_product, ["go"])
        assert cache.get("/products/go", ["go"]) == go_product

    def test_miss_on_empty_cache(self, cache: CacheManager) -> None:
        assert cache.get("/products/go", ["go"]) is None
        assert cache.get("/") is None

    def test_set_writes_only_its_own_key(self, cache: CacheManager, catalog: dict[str, Any]) -> None:
        cache.set("/products/full", catalog)
        assert [p.name for p in cache.storage.entry_files()] == [f"products-full{CACHE_EXTENSION}"]

    def test_release_from_catalog_with_normalization(
        self, cache: CacheManager, catalog: dict[str, Any]
    ) -> None:
        cache.set("/products/full", catalog)
        result = cache.get("/products/go/releases/1.23.4", ["go", "1.23.4"])
        assert result["result"]["name"] == "1.23"
        assert result["schema_version"] == "1.2.0"

    def test_release_from_product_cache(self, cache: CacheManager, go_product: dict[str, Any]) -> None:
        cache.set("/products/go", go_product, ["go"])
        result = cache.get("/products/go/releases/1.24", ["go", "1.24"])
        assert result["result"]["latest"]["name"] == "1.24.1"

    def test_exact_entry_beats_derived(self, cache: CacheManager, catalog: dict[str, Any]) -> None:
        cache.set("/products/full", catalog)
        exact = {"schema_version": "1.2.0", "result": {"name": "1.23", "label": "exact"}}
        cache.set("/products/go/releases/1.23", exact, ["go", "1.23"])
        assert cache.get("/products/go/releases/1.23", ["go", "1.23"]) == exact

    def test_product_entry_beats_catalog(
        self, cache: CacheManager, catalog: dict[str, Any], go_product: dict[str, Any]
    ) -> None:
        go_product["result"]["releases"][0]["label"] = "from product"
        cache.set("/products/full", catalog)
        cache.set("/products/go", go_product, ["go"])
        result = cache.get("/products/go/releases/1.24", ["go", "1.24"])
        assert result["result"]["label"] == "from product"
        assert catalog["result"][0]["releases"][0]["label"] == "1.24"

    def test_falls_through_when_product_lacks_release(
        self, cache: CacheManager, catalog: dict[str, Any], go_product: dict[str, Any]
    ) -> None:
        go_product["result"]["releases"] = []
        cache.set("/products/go", go_product, ["go"])
        cache.set("/products/full", catalog)
        assert cache.get("/products/go", ["go"])["result"]["releases"] == []
        result = cache.get("/products/go/releases/1.24", ["go", "1.24"])
        assert result["result"]["name"] == "1.24"
        assert result["result"]["latest"]["name"] == "1.24.1"

    def test_null_payload_is_not_stored(self, cache: CacheManager) -> None:
        cache.set("/products", None)
        assert cache.storage.entry_files() == []
        assert cache.get("/products") is None

    def test_product_fixture_is_independent_of_catalog(
        self, catalog: dict[str, Any], go_product: dict[str, Any]
    ) -> None:
        assert go_product["result"] == catalog["result"][0]
        assert go_product["result"] is not catalog["result"][0]

    def test_product_from_catalog(self, cache: CacheManager, catalog: dict[str, Any]) -> None:
        cache.set("/products/full", catalog)
        result = cache.get("/products/ubuntu", ["ubuntu"])
        assert result["result"]["label"] == "Ubuntu"
        assert result["last_modified"] == catalog["last_modified"]

    def test_unknown_product_is_miss(self, cache: CacheManager, catalog: dict[str, Any]) -> None:
        cache.set("/products/full", catalog)
        assert cache.get("/products/rust", ["rust"]) is None
        assert cache.get("/tags/database", ["tag", "database"]) is None

    def test_lists_from_catalog(self, cache: CacheManager, catalog: dict[str, Any]) -> None:
        cache.set("/products/full", catalog)
        assert cache.get("/products")["total"] == 3
        assert [c["name"] for c in cache.get("/categories")["result"]] == ["lang", "os"]
        assert cache.get("/categories/os", ["category", "os"])["result"][0]["name"] == "ubuntu"
        assert cache.get("/tags")["total"] == 5
        assert cache.get("/tags/google", ["tag", "google"])["total"] == 1

    def test_latest_is_not_derived(self, cache: CacheManager, catalog: dict[str, Any]) -> None:
        cache.set("/products/full", catalog)
        assert cache.get("/products/go/releases/latest", ["go", "latest"]) is None

    def test_uri_follows_base_url(self, cache_dir: Path, clock, catalog: dict[str, Any]) -> None:
        cache = CacheManager(
            CacheConfig(directory=str(cache_dir)), base_url="http://127.0.0.1:9999/v1", clock=clock
        )
        cache.set("/products/full", catalog)
        assert cache.get("/products")["result"][0]["uri"] == "http://127.0.0.1:9999/v1/products/go"

    def test_unserialisable_data_raises(self, cache: CacheManager) -> None:
        with pytest.raises(CacheWriteError):
            cache.set("/products", {"bad": object()})


# ------------------------------------------------------------------ #
# TTLs
# ------------------------------------------------------------------ #


class TestTTL:
    def test_default_ttl_applies(self, cache: CacheManager, clock, go_product: dict[str, Any]) -> None:
        cache.set("/products/go", go_product, ["go"])
        clock.advance(minutes=59)
        assert cache.get("/products/go", ["go"]) is not None
        clock.advance(minutes=2)
        assert cache.get("/products/go", ["go"]) is None

    def test_full_catalog_lives_a_day(self, cache: CacheManager, clock, catalog: dict[str, Any]) -> None:
        cache.set("/products/full", catalog)
        clock.advance(hours=23)
        assert cache.get("/products/go", ["go"]) is not None
        clock.advance(hours=2)
        assert cache.get("/products/full") is None

    def test_expires_at_matches_ttl(self, cache: CacheManager, catalog: dict[str, Any]) -> None:
        cache.set("/products/full", catalog)
        envelope = json.loads(cache.storage.path_for("/products/full").read_text())
        assert envelope["timestamp"].startswith("2025-01-11T10:00:00")
        assert envelope["expires_at"].startswith("2025-01-12T10:00:00")

    def test_custom_ttl(self, cache_dir: Path, clock) -> None:
        cache = CacheManager(CacheConfig(directory=str(cache_dir), ttl_seconds=60), clock=clock)
        cache.set("/tags", {"result": []})
        clock.advance(seconds=61)
        assert cache.get("/tags") is None

    def test_expired_exact_falls_back_to_catalog(
        self, cache: CacheManager, clock, catalog: dict[str, Any], go_product: dict[str, Any]
    ) -> None:
        cache.set("/products/full", catalog)
        clock.advance(minutes=30)
        go_product["result"]["label"] = "stale"
        cache.set("/products/go", go_product, ["go"])
        clock.advance(hours=2)
        result = cache.get("/products/go", ["go"])
        assert result["result"]["label"] == "Go"
        assert not cache.storage.path_for("/products/go", ["go"]).exists()


# ------------------------------------------------------------------ #
# Disabled cache
# ------------------------------------------------------------------ #


class TestDisabled:
    def test_regular_endpoints_bypassed(self, disabled_cache: CacheManager, cache_dir: Path) -> None:
        disabled_cache.set("/products", {"result": []})
        assert disabled_cache.get("/products") is None
        assert not cache_dir.exists()

    def test_full_catalog_still_cached(self, disabled_cache: CacheManager, catalog: dict[str, Any]) -> None:
        disabled_cache.set("/products/full", catalog)
        assert disabled_cache.get("/products/full") == catalog

    def test_no_derivation_when_disabled(self, disabled_cache: CacheManager, catalog: dict[str, Any]) -> None:
        disabled_cache.set("/products/full", catalog)
        assert disabled_cache.get("/products/go", ["go"]) is None

    def test_must_use_cache(self, disabled_cache: CacheManager) -> None:
        assert disabled_cache.must_use_cache("/products/full")
        assert disabled_cache.must_use_cache("products/full")
        assert not disabled_cache.must_use_cache("/products")


# ------------------------------------------------------------------ #
# Lifecycle
# ------------------------------------------------------------------ #


class TestClear:
    def test_removes_only_entry_files(self, cache: CacheManager, cache_dir: Path) -> None:
        cache.set("/products", {"v": 1})
        cache.set("/tags", {"v": 2})
        (cache_dir / "README").write_text("not a cache file")
        (cache_dir / "sub").mkdir()
        assert cache.clear() == 2
        assert sorted(p.name for p in cache_dir.iterdir()) == ["README", "sub"]

    @pytest.mark.parametrize("name", [".eol-cache", "eol-cache", "eol"])
    def test_allowed_names(self, tmp_path: Path, clock, name: str) -> None:
        cache = CacheManager(CacheConfig(directory=str(tmp_path / name)), clock=clock)
        cache.set("/products", {"v": 1})
        assert cache.clear() == 1

    def test_refuses_other_directories(self, tmp_path: Path, clock) -> None:
        target = tmp_path / "important"
        cache = CacheManager(CacheConfig(directory=str(target)), clock=clock)
        cache.set("/products", {"v": 1})
        with pytest.raises(CacheRefusalError) as excinfo:
            cache.clear()
        assert excinfo.value.directory == target
        assert "important" in str(excinfo.value)
        assert len(cache.storage.entry_files()) == 1

    def test_missing_directory(self, cache: CacheManager) -> None:
        assert cache.clear() == 0


class TestClearExpired:
    def test_removes_only_expired(self, cache: CacheManager, clock, catalog: dict[str, Any]) -> None:
        cache.set("/products/full", catalog)
        cache.set("/products", {"v": 1})
        clock.advance(hours=2)
        cache.set("/tags", {"v": 2})
        assert cache.clear_expired() == 1
        names = {p.name for p in cache.storage.entry_files()}
        assert names == {f"products-full{CACHE_EXTENSION}", f"tags{CACHE_EXTENSION}"}

    def test_skips_corrupt_files(self, cache: CacheManager, cache_dir: Path, clock) -> None:
        cache.set("/products", {"v": 1})
        (cache_dir / f"broken{CACHE_EXTENSION}").write_text("garbage")
        clock.advance(hours=2)
        assert cache.clear_expired() == 1
        assert (cache_dir / f"broken{CACHE_EXTENSION}").exists()

    def test_missing_directory(self, cache: CacheManager, cache_dir: Path) -> None:
        assert cache.clear_expired() == 0
        assert not cache_dir.exists()


class TestStats:
    def test_counts(self, cache: CacheManager, cache_dir: Path, clock, catalog: dict[str, Any]) -> None:
        cache.set("/products/full", catalog)
        cache.set("/products", {"v": 1})
        clock.advance(hours=2)
        cache.set("/tags", {"v": 2})
        (cache_dir / f"broken{CACHE_EXTENSION}").write_text("garbage")
        (cache_dir / "other.json").write_text("{}")

        stats = cache.get_stats()
        assert stats.total_files == 4
        assert stats.valid_files == 2
        assert stats.expired_files == 1
        assert stats.total_size == sum(p.stat().st_size for p in cache.storage.entry_files())
        assert stats.cache_dir == str(cache_dir)
        assert stats.default_ttl == "1h0m0s"
        assert stats.full_ttl == "24h0m0s"
        assert stats.enabled is True

    def test_does_not_delete_expired(self, cache: CacheManager, clock) -> None:
        cache.set("/products", {"v": 1})
        clock.advance(hours=2)
        cache.get_stats()
        assert len(cache.storage.entry_files()) == 1

    def test_missing_directory(self, cache: CacheManager, cache_dir: Path) -> None:
        stats = cache.get_stats()
        assert (stats.total_files, stats.total_size, stats.valid_files, stats.expired_files) == (0, 0, 0, 0)
        assert not cache_dir.exists()

    def test_unstatable_file_still_counted(
        self, cache: CacheManager, cache_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        cache.set("/products", {"v": 1})
        listed = cache.storage.entry_files()
        vanished = cache_dir / f"vanished{CACHE_EXTENSION}"
        monkeypatch.setattr(cache.storage, "entry_files", lambda: [*listed, vanished])

        stats = cache.get_stats()
        assert stats.total_files == 2
        assert stats.valid_files == 1
        assert stats.expired_files == 0
        assert stats.total_size == listed[0].stat().st_size

    def test_reports_disabled(self, disabled_cache: CacheManager) -> None:
        assert disabled_cache.get_stats().enabled is False


def test_default_directory_follows_platform(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr("eol.config.platform.system", lambda: "Linux")
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg"))
    cache = CacheManager(CacheConfig())
    assert cache.directory == tmp_path / "xdg" / "eol"
