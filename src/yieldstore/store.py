"""Observable state store driven by generator reducers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from typing import Any

from yieldstore._dispatch import DispatchPipeline, Reducer
from yieldstore._redact import redact_for_log
from yieldstore.config import StoreConfig
from yieldstore.exceptions import InvalidModifierError
from yieldstore.models.action import Action
from yieldstore.models.history import HistoryEntry
from yieldstore.state.cache import build_cache_modifier, read_cache
from yieldstore.state.history import HistoryBuffer, ListenerBus, StorageListener
from yieldstore.state.merge import ACTIONS_KEY, CACHE_KEY, apply_modifiers, normalize_modifier

_logger = logging.getLogger(__name__)


def _initial_state() -> dict[str, Any]:
    return {ACTIONS_KEY: [], CACHE_KEY: {}}


class Store:
    """Single mutable state tree updated by dispatched actions.

    Usage::

        store = create_store()

        def counter(action):
            match action.type:
                case "ADD":
                    yield {"count": store.get_state().get("count", 0) + action.payload}

        store.replace_reducers(counter)
        state = await store.dispatch({"type": "ADD", "payload": 2})

    Every committed modifier is merged into the live state, appended to the
    bounded history and published to the storage listeners before the next
    modifier is produced.
    """

    def __init__(self, config: StoreConfig | None = None) -> None:
        self._config = config or StoreConfig()
        self._state: dict[str, Any] = _initial_state()
        self._reducers: tuple[Reducer, ...] = ()
        self._history = HistoryBuffer(self._config.history_max_size)
        self._listeners = ListenerBus()
        self._pipeline = DispatchPipeline(self._commit_from_reducer, self._take_chained)
        self._dispatch_lock = asyncio.Lock()
        # Tasks currently running a dispatch tree, for nested dispatch detection.
        self._active_tasks: set[asyncio.Task[Any]] = set()

    @property
    def config(self) -> StoreConfig:
        return self._config

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def state(self) -> dict[str, Any]:
        """The live state (see :meth:`get_state`)."""
        return self._state

    def get_state(self) -> dict[str, Any]:
        """Return the live state object.

        This is not a copy: it reflects every commit as it happens. Change
        it through :meth:`update`, never by mutating it directly.
        """
        return self._state

    # ------------------------------------------------------------------
    # Commits
    # ------------------------------------------------------------------

    def _commit(
        self,
        modifier: Any,
        action: Action | None,
        *,
        prepare: Callable[[dict[str, Any]], None] | None = None,
    ) -> HistoryEntry:
        """Merge, record and publish one modifier.

        ``prepare`` runs against the state right before the merge, inside
        the same commit.
        """
        changes = normalize_modifier(modifier)
        entry = HistoryEntry(action=action, changes=changes)
        if prepare is not None:
            prepare(self._state)
        apply_modifiers(self._state, changes)
        self._history.append(entry)
        if _logger.isEnabledFor(logging.DEBUG):
            _logger.debug(
                "Committed action=%s changes=%s",
                action.type if action is not None else None,
                redact_for_log(changes),
            )
        self._listeners.notify(self._state, entry)
        return entry

    def _commit_from_reducer(self, modifier: Any, action: Action) -> HistoryEntry:
        return self._commit(modifier, action)

    def _take_chained(self) -> list[Action]:
        queued = self._state.get(ACTIONS_KEY)
        if not queued:
            return []
        # Hand the queue over to the pipeline; reducers start from a fresh one.
        self._state[ACTIONS_KEY] = []
        return [Action.coerce(item) for item in queued]

    def update(self, modifier: Mapping[str, Any]) -> None:
        """Merge *modifier* into state without running any reducer.

        Raises
        ------
        InvalidModifierError
            If *modifier* is invalid, or touches ``actions`` while no
            dispatch is running to drain them.
        """
        if isinstance(modifier, Mapping) and ACTIONS_KEY in modifier and not self._active_tasks:
            raise InvalidModifierError(
                f"'{ACTIONS_KEY}' can only be queued while a dispatch is running",
                key=ACTIONS_KEY,
            )
        self._commit(modifier, None)

    def clear(self) -> None:
        """Reset state to ``{"actions": [], "cache": {}}``.

        The state object itself is reset in place, so references obtained
        from :meth:`get_state` stay valid.
        """
        self._commit(_initial_state(), None, prepare=dict.clear)

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------

    def set_cache(self, key: str, value: Any, token: str | None = None) -> None:
        """Store *value* under *key*, gated by *token*.

        An existing entry is replaced as a whole (token and value) in a
        single commit recorded with ``action=None``.
        """
        modifier = build_cache_modifier(key, value, token)

        def _drop_entry(state: dict[str, Any]) -> None:
            cache = state.get(CACHE_KEY)
            if isinstance(cache, dict):
                cache.pop(key, None)

        self._commit(modifier, None, prepare=_drop_entry)

    def get_cache(self, key: str, token: str | None = None) -> Any:
        """Return the value cached under *key* if *token* matches, else ``None``."""
        return read_cache(self._state, key, token)

    # ------------------------------------------------------------------
    # History and listeners
    # ------------------------------------------------------------------

    def history(self) -> list[HistoryEntry]:
        """Retained history entries, oldest first."""
        return self._history.entries()

    def set_history_max_size(self, max_size: int) -> None:
        """Change the history capacity; shrinking evicts the oldest entries."""
        self._history.resize(max_size)

    def add_storage_listener(self, listener: StorageListener) -> None:
        """Call *listener* with ``(state, entry)`` after every commit.

        Registering the same listener twice has no effect.
        """
        self._listeners.add(listener)

    def remove_storage_listener(self, listener: StorageListener) -> None:
        """Stop notifying *listener*; unknown listeners are ignored."""
        self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def replace_reducers(self, *reducers: Reducer) -> None:
        """Replace the whole reducer list.

        Dispatches already issued keep the list they started with.
        """
        for reducer in reducers:
            if not callable(reducer):
                raise TypeError(f"Reducer must be callable, got {type(reducer).__name__}")
        self._reducers = tuple(reducers)

    @property
    def reducers(self) -> tuple[Reducer, ...]:
        return self._reducers

    async def dispatch(self, action: Action | Mapping[str, Any]) -> dict[str, Any]:
        """Run *action* through every reducer and return the settled state.

        Resolves once the action and every action it chained have been
        fully applied. Concurrent calls are serialized unless the store was
        configured with ``queue_dispatches=False``. Awaiting ``dispatch``
        from inside a reducer runs the new action immediately as a nested
        dispatch.

        Raises
        ------
        InvalidActionError
            If *action* cannot be read as an action.
        Exception
            Whatever a reducer raises; modifiers committed before the
            failure stay committed.
        """
        resolved = Action.coerce(action)
        reducers = self._reducers
        current = asyncio.current_task()

        if current is not None and current in self._active_tasks:
            await self._run_nested(resolved, reducers)
            return self._state

        if not self._config.queue_dispatches:
            await self._run_tree(resolved, reducers, current)
            return self._state

        async with self._dispatch_lock:
            await self._run_tree(resolved, reducers, current)
        return self._state

    async def _run_tree(
        self,
        action: Action,
        reducers: tuple[Reducer, ...],
        task: asyncio.Task[Any] | None,
    ) -> None:
        _logger.debug("Dispatching %s to %d reducer(s)", action.type, len(reducers))
        if task is not None:
            self._active_tasks.add(task)
        try:
            await self._pipeline.run(action, reducers)
        except BaseException:
            pending = self._state.get(ACTIONS_KEY)
            if pending:
                _logger.debug("Dispatch of %s failed; dropping %d queued action(s)", action.type, len(pending))
                self._state[ACTIONS_KEY] = []
            raise
        finally:
            if task is not None:
                self._active_tasks.discard(task)

    async def _run_nested(self, action: Action, reducers: tuple[Reducer, ...]) -> None:
        """Run *action* inside a running dispatch without touching its queue.

        The outer action's pending chain is set aside so the nested run only
        drains what it queues itself, then restored ahead of anything left.
        """
        pending = list(self._state.get(ACTIONS_KEY) or [])
        _logger.debug(
            "Nested dispatch of %s inside a running dispatch (%d outer action(s) pending)",
            action.type,
            len(pending),
        )
        self._state[ACTIONS_KEY] = []
        try:
            await self._pipeline.run(action, reducers)
        except BaseException:
            # Whatever the failed nested run queued is dropped with it.
            self._state[ACTIONS_KEY] = pending
            raise
        self._state[ACTIONS_KEY] = [*pending, *(self._state.get(ACTIONS_KEY) or [])]


def create_store(*reducers: Reducer, config: StoreConfig | None = None) -> Store:
    """Create a store with an empty state and, optionally, its reducers."""
    store = Store(config)
    if reducers:
        store.replace_reducers(*reducers)
    return store
