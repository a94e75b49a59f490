# Overview: Read-through helpers over Flask-Caching with per-prefix generation keys.

"""
Read-through cache for hot read paths (barcode scans, dashboard stats).

Backed by the Flask-Caching instance in extensions (CACHE_TYPE from config:
SimpleCache in a single process, NullCache to disable). Values are plain
dicts/lists, never ORM instances.

Every key carries the current generation token of its prefix:

    "<prefix>:<generation>:<part>:<part>..."

invalidate(prefix) swaps the token, so all older entries become unreachable
at once and age out through CACHE_DEFAULT_TIMEOUT. A loader that was running
while an invalidation happened stores its result under the old token, where
no reader will look for it.
"""

from __future__ import annotations

import uuid
from typing import Any, Callable

from ..extensions import cache

PREFIX_ITEMS = "items"
PREFIX_DASHBOARD = "dashboard"

# Generation tokens never expire (timeout=0).
GENERATION_TIMEOUT = 0


def make_key(prefix: str, *parts, **kwargs) -> str:
    key_parts = [prefix]
    key_parts.extend(str(p) for p in parts)
    for name, value in sorted(kwargs.items()):
        key_parts.append(f"{name}={value}")
    return ":".join(key_parts)


def _generation_key(prefix: str) -> str:
    return make_key(prefix, "__generation__")


def _new_generation() -> str:
    return uuid.uuid4().hex[:12]


def current_generation(prefix: str) -> str:
    key = _generation_key(prefix)
    generation = cache.get(key)
    if generation is None:
        # Missing (first use or evicted): a fresh token, so no older entry can match.
        generation = _new_generation()
        cache.set(key, generation, timeout=GENERATION_TIMEOUT)
    return generation


def get_or_load(prefix: str, parts: tuple, loader: Callable[[], Any], timeout: int | None = None) -> Any:
    """
    Return the cached value for (prefix, parts), calling loader on a miss.

    A loader returning None is not cached (e.g. unknown barcode), so a
    later insert is visible without an explicit invalidation.
    """
    key = make_key(prefix, current_generation(prefix), *parts)
    value = cache.get(key)
    if value is not None:
        return value

    value = loader()
    if value is not None:
        cache.set(key, value, timeout=timeout)
    return value


def invalidate(*prefixes: str) -> None:
    """Drop every entry under the given prefixes."""
    for prefix in prefixes:
        cache.set(_generation_key(prefix), _new_generation(), timeout=GENERATION_TIMEOUT)


def invalidate_catalog() -> None:
    """Stock, prices, and sales all feed both the scan path and the dashboard."""
    invalidate(PREFIX_ITEMS, PREFIX_DASHBOARD)
