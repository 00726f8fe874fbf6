"""Immutable records exchanged with the store."""

from yieldstore.models.action import Action
from yieldstore.models.cache import CacheEntry
from yieldstore.models.history import HistoryEntry

__all__ = [
    "Action",
    "CacheEntry",
    "HistoryEntry",
]
