"""Derive narrower API responses from broader cached ones.

Every extractor takes a decoded cached payload (plus the names it is
looking for) and returns the response the narrower endpoint would have
produced, or ``None`` when the payload does not contain it. ``None`` is a
normal outcome, not an error: the strategy list simply moves on to the
next candidate.

Derived responses reuse the cached envelope: ``schema_version`` is copied
from the source, ``result`` holds the extracted piece, and list-shaped
results carry ``total``. List outputs keep catalog order. Category and
tag lists contain each distinct value once, in first-seen order.

Relationships implemented here::

    /products/full ──┬─> /products                  products_from_catalog
                     ├─> /products/{p}              product_from_catalog
                     ├─> /products/{p}/releases/{r} release_from_catalog
                     ├─> /categories                categories_from_catalog
                     ├─> /categories/{c}            products_by_category
                     ├─> /tags                      tags_from_catalog
                     └─> /tags/{t}                  products_by_tag
    /products/{p} ───> /products/{p}/releases/{r}   release_from_product
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Optional

from eol.version import normalize_version


Extractor = Callable[[Any], Optional[Any]]
"""A cached payload in, a derived response (or ``None``) out."""


def identity(payload: Any) -> Optional[Any]:
    """Return *payload* unchanged; used for exact-key candidates."""
    return payload


# --- Helpers ---


def _dict_items(values: Any) -> list[dict[str, Any]]:
    if not isinstance(values, list):
        return []
    return [item for item in values if isinstance(item, dict)]


def _catalog_items(payload: Any) -> Optional[list[dict[str, Any]]]:
    """Return the product dicts of a full-catalog response, or ``None``."""
    if not isinstance(payload, dict):
        return None
    result = payload.get("result")
    if not isinstance(result, list):
        return None
    return _dict_items(result)


def _find_product(items: Iterable[dict[str, Any]], name: str) -> Optional[dict[str, Any]]:
    for item in items:
        if item.get("name") == name:
            return item
    return None


def find_release(releases: Any, name: str) -> Optional[dict[str, Any]]:
    """Locate a release cycle by exact name, then by its normalized name.

    ``"1.23.4"`` matches a cycle named ``"1.23"`` when no cycle is named
    ``"1.23.4"`` exactly.
    """
    candidates = _dict_items(releases)
    for release in candidates:
        if release.get("name") == name:
            return release
    normalized = normalize_version(name)
    if normalized == name:
        return None
    for release in candidates:
        if release.get("name") == normalized:
            return release
    return None


def _uri(base_url: str, *segments: str) -> str:
    return "/".join([base_url.rstrip("/"), *segments])


def product_summary(product: dict[str, Any], base_url: str) -> dict[str, Any]:
    """Map a full catalog entry to the ``/products`` list item shape."""
    summary = {
        "name": product.get("name"),
        "label": product.get("label"),
        "category": product.get("category"),
        "uri": _uri(base_url, "products", str(product.get("name"))),
    }
    if "aliases" in product:
        summary["aliases"] = product["aliases"]
    if "tags" in product:
        summary["tags"] = product["tags"]
    return summary


def _list_response(source: dict[str, Any], result: list[Any]) -> dict[str, Any]:
    return {
        "schema_version": source.get("schema_version"),
        "total": len(result),
        "result": result,
    }


def _uri_list(base_url: str, kind: str, names: Iterable[str]) -> list[dict[str, str]]:
    return [{"name": name, "uri": _uri(base_url, kind, name)} for name in names]


# --- Single entities ---


def product_from_catalog(payload: Any, product: str) -> Optional[dict[str, Any]]:
    """``/products/{product}`` from the full catalog."""
    items = _catalog_items(payload)
    if items is None:
        return None
    match = _find_product(items, product)
    if match is None:
        return None
    response: dict[str, Any] = {"schema_version": payload.get("schema_version")}
    if "last_modified" in payload:
        response["last_modified"] = payload["last_modified"]
    response["result"] = match
    return response


def release_from_product(payload: Any, release: str) -> Optional[dict[str, Any]]:
    """``/products/{p}/releases/{release}`` from a cached ``/products/{p}`` response."""
    if not isinstance(payload, dict):
        return None
    product = payload.get("result")
    if not isinstance(product, dict):
        return None
    match = find_release(product.get("releases"), release)
    if match is None:
        return None
    return {"schema_version": payload.get("schema_version"), "result": match}


def release_from_catalog(payload: Any, product: str, release: str) -> Optional[dict[str, Any]]:
    """``/products/{product}/releases/{release}`` from the full catalog."""
    items = _catalog_items(payload)
    if items is None:
        return None
    entry = _find_product(items, product)
    if entry is None:
        return None
    match = find_release(entry.get("releases"), release)
    if match is None:
        return None
    return {"schema_version": payload.get("schema_version"), "result": match}


# --- Lists ---


def products_from_catalog(payload: Any, base_url: str) -> Optional[dict[str, Any]]:
    """``/products`` (summary list) from the full catalog."""
    items = _catalog_items(payload)
    if items is None:
        return None
    return _list_response(payload, [product_summary(p, base_url) for p in items])


def categories_from_catalog(payload: Any, base_url: str) -> Optional[dict[str, Any]]:
    """``/categories`` from the distinct ``category`` values of the full catalog."""
    items = _catalog_items(payload)
    if items is None:
        return None
    names = dict.fromkeys(
        p["category"] for p in items if isinstance(p.get("category"), str) and p["category"]
    )
    return _list_response(payload, _uri_list(base_url, "categories", names))


def products_by_category(payload: Any, category: str, base_url: str) -> Optional[dict[str, Any]]:
    """``/categories/{category}`` by exact category match over the full catalog."""
    items = _catalog_items(payload)
    if items is None:
        return None
    matches = [product_summary(p, base_url) for p in items if p.get("category") == category]
    if not matches:
        return None
    return _list_response(payload, matches)


def tags_from_catalog(payload: Any, base_url: str) -> Optional[dict[str, Any]]:
    """``/tags`` from the distinct tag values of the full catalog."""
    items = _catalog_items(payload)
    if items is None:
        return None
    names: dict[str, None] = {}
    for product in items:
        tags = product.get("tags")
        if not isinstance(tags, list):
            continue
        for tag in tags:
            if isinstance(tag, str) and tag:
                names.setdefault(tag)
    return _list_response(payload, _uri_list(base_url, "tags", names))


def products_by_tag(payload: Any, tag: str, base_url: str) -> Optional[dict[str, Any]]:
    """``/tags/{tag}``: catalog products whose tag list contains *tag*."""
    items = _catalog_items(payload)
    if items is None:
        return None
    matches = [
        product_summary(p, base_url)
        for p in items
        if isinstance(p.get("tags"), list) and tag in p["tags"]
    ]
    if not matches:
        return None
    return _list_response(payload, matches)
