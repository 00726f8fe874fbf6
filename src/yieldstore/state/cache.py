"""Token-gated cache living under the reserved ``cache`` state field."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from yieldstore.models.cache import CacheEntry
from yieldstore.state.merge import CACHE_KEY


def build_cache_modifier(key: str, value: Any, token: str | None = None) -> dict[str, Any]:
    """Modifier that stores *value* under *key*, replacing token and value together."""
    if not isinstance(key, str):
        raise TypeError(f"Cache key must be a string, got {type(key).__name__}")
    entry = CacheEntry(token=token, value=value)
    return {CACHE_KEY: {key: {"token": entry.token, "value": entry.value}}}


def read_cache_entry(state: Mapping[str, Any], key: str) -> CacheEntry | None:
    """Return the entry stored under *key*, or ``None`` if there is none."""
    cache = state.get(CACHE_KEY)
    if not isinstance(cache, Mapping):
        return None
    raw = cache.get(key)
    if not isinstance(raw, Mapping):
        return None
    return CacheEntry.model_construct(token=raw.get("token"), value=raw.get("value"))


def read_cache(state: Mapping[str, Any], key: str, token: str | None = None) -> Any:
    """Return the cached value if *key* exists and *token* matches, else ``None``."""
    entry = read_cache_entry(state, key)
    if entry is None or not entry.matches(token):
        return None
    return entry.value
