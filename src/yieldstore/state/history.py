"""Bounded change history and the storage listener bus."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from typing import Any

from yieldstore.config import DEFAULT_HISTORY_MAX_SIZE, validate_history_max_size
from yieldstore.models.history import HistoryEntry

_logger = logging.getLogger(__name__)

StorageListener = Callable[[dict[str, Any], HistoryEntry], None]


class HistoryBuffer:
    """FIFO ring of the most recent :class:`HistoryEntry` records."""

    def __init__(self, max_size: int = DEFAULT_HISTORY_MAX_SIZE) -> None:
        self._entries: deque[HistoryEntry] = deque(maxlen=validate_history_max_size(max_size))

    @property
    def max_size(self) -> int:
        maxlen = self._entries.maxlen
        assert maxlen is not None  # noqa: S101
        return maxlen

    def resize(self, max_size: int) -> None:
        """Change the capacity, evicting the oldest entries if it shrinks."""
        max_size = validate_history_max_size(max_size)
        evicted = max(0, len(self._entries) - max_size)
        self._entries = deque(self._entries, maxlen=max_size)
        if evicted:
            _logger.debug("History resized to %d, evicted %d entries", max_size, evicted)

    def append(self, entry: HistoryEntry) -> None:
        self._entries.append(entry)

    def entries(self) -> list[HistoryEntry]:
        """Oldest-first copy of the retained entries."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class ListenerBus:
    """Ordered set of storage listeners.

    Adding a listener that is already registered is a no-op, so every
    listener fires at most once per commit, in first-registration order.
    """

    def __init__(self) -> None:
        # dict keys keep insertion order and give set semantics.
        self._listeners: dict[StorageListener, None] = {}

    def add(self, listener: StorageListener) -> None:
        if not callable(listener):
            raise TypeError(f"Storage listener must be callable, got {type(listener).__name__}")
        self._listeners.setdefault(listener, None)

    def remove(self, listener: StorageListener) -> None:
        self._listeners.pop(listener, None)

    def notify(self, state: dict[str, Any], entry: HistoryEntry) -> None:
        """Call every listener with the live state and the committed entry.

        A failing listener is logged and skipped; it cannot undo the commit
        or keep later listeners from running.
        """
        # Snapshot so listeners may (un)register others while being notified.
        for listener in tuple(self._listeners):
            try:
                listener(state, entry)
            except Exception:
                _logger.debug("Storage listener %r failed", listener, exc_info=True)

    def __contains__(self, listener: object) -> bool:
        return listener in self._listeners

    def __len__(self) -> int:
        return len(self._listeners)
