"""
Query cache for listing pages, property details and reference data.

In-memory, TTL based, keyed by versioned strings so a version bump makes
every old entry unreachable. Invalidation works on exact keys or glob
patterns (``v1:properties:list:*``).
"""

import threading
import time
import logging
from fnmatch import fnmatchcase
from typing import Any, Optional

from listings.core.config import settings

logger = logging.getLogger(__name__)

CACHE_VERSION = "1"

# Operation status ids that have their own listing filters
OPERATION_FILTERS = {1: "sale", 2: "rent"}

_cache: dict[str, dict] = {}
_stats = {"hits": 0, "misses": 0}
# Request handlers run on a thread pool
_lock = threading.Lock()


# --- Key builder ---

def _v(key: str) -> str:
    return f"v{CACHE_VERSION}:{key}"


def _filters_suffix(filters: Optional[dict]) -> str:
    """Stable suffix for a filter dict: ``city=austin&op=sale``."""
    if not filters:
        return "all"
    parts = [
        f"{name}={str(value).lower()}"
        for name, value in sorted(filters.items())
        if value is not None
    ]
    return "&".join(parts) or "all"


def property_key(property_id: str) -> str:
    return _v(f"property:{property_id}")


def properties_list_key(filters: Optional[dict] = None) -> str:
    return _v(f"properties:list:{_filters_suffix(filters)}")


def seller_list_key(seller_id: str, filters: Optional[dict] = None) -> str:
    return _v(f"seller:{seller_id}:list:{_filters_suffix(filters)}")


def reference_key(name: str) -> str:
    """Lookup lists: property-types, property-statuses, property-features..."""
    return _v(f"{name}:list")


def property_invalidation_patterns(
    property: dict,
    include_global: bool = True,
    include_seller: bool = True,
) -> list[str]:
    """
    Every listing pattern a change to this property may affect.

    Always the global list and the seller's list; narrower city and
    operation patterns are added when the property carries those fields.
    """
    patterns: list[str] = []

    def add(pattern: str):
        if pattern not in patterns:
            patterns.append(pattern)

    seller_id = property.get("seller_id")
    city = property.get("city")
    operation = OPERATION_FILTERS.get(property.get("operation_status_id"))

    if include_global:
        add(_v("properties:list:*"))
        if city:
            add(_v(f"properties:list:*city={city.lower()}*"))
        if operation:
            add(_v(f"properties:list:*op={operation}*"))

    if include_seller and seller_id:
        add(_v(f"seller:{seller_id}:list:*"))
        if city:
            add(_v(f"seller:{seller_id}:list:*city={city.lower()}*"))
        if operation:
            add(_v(f"seller:{seller_id}:list:*op={operation}*"))

    return patterns


# --- Get / set ---

def cache_get(key: str) -> Optional[Any]:
    """Return the cached value, or None if not cached/expired."""
    with _lock:
        entry = _cache.get(key)
        if entry is not None and time.time() < entry["expires_at"]:
            _stats["hits"] += 1
            logger.debug(f"Cache hit for {key}")
            return entry["value"]
        if entry is not None:
            del _cache[key]
        _stats["misses"] += 1
        return None


def cache_set(key: str, value: Any, ttl: Optional[int] = None):
    ttl = settings.CACHE_TTL if ttl is None else ttl
    now = time.time()
    with _lock:
        _cache[key] = {
            "value": value,
            "_cached_at": now,
            "expires_at": now + ttl,
        }
    logger.debug(f"Cached {key} for {ttl}s")


def cache_delete(key: str) -> bool:
    with _lock:
        return _cache.pop(key, None) is not None


def cache_invalidate_pattern(pattern: str) -> int:
    """Drop every key matching a glob pattern; returns how many were removed."""
    with _lock:
        matched = [key for key in _cache if fnmatchcase(key, pattern)]
        for key in matched:
            del _cache[key]
    if matched:
        logger.debug(f"Invalidated {len(matched)} keys for {pattern}")
    return len(matched)


def invalidate_property(property: dict) -> int:
    """Drop the property's detail entry and every listing it may appear in."""
    removed = 0
    if property.get("id") is not None:
        removed += int(cache_delete(property_key(str(property["id"]))))
    for pattern in property_invalidation_patterns(property):
        removed += cache_invalidate_pattern(pattern)
    return removed


# --- Cache Management ---

def clear_cache():
    """Clear every cached entry and reset counters."""
    with _lock:
        _cache.clear()
        _stats["hits"] = 0
        _stats["misses"] = 0
    logger.info("Query cache cleared")


def get_cache_stats() -> dict:
    """Get cache statistics."""
    now = time.time()
    with _lock:
        total = len(_cache)
        valid = sum(1 for entry in _cache.values() if now < entry["expires_at"])
        hits, misses = _stats["hits"], _stats["misses"]
    return {
        "version": CACHE_VERSION,
        "total_entries": total,
        "valid_entries": valid,
        "ttl_seconds": settings.CACHE_TTL,
        "hits": hits,
        "misses": misses,
    }
