"""Dispatch pipeline.

Drains each reducer's lazy sequence of modifiers in a strict global order
and recursively dispatches the actions reducers chain through the
reserved ``actions`` field.

Ordering rules:

- reducers run one after another, in registration order;
- within a reducer, every item is resolved (awaited if needed) and
  committed before the next item is requested;
- once every reducer drained an action, the queued chained actions are
  taken from state and each one is dispatched as a full nested run, so a
  nested run's own chain settles before its queued siblings start.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import AsyncIterable, Callable, Iterable, Mapping, Sequence
from typing import Any

from yieldstore.models.action import Action

_logger = logging.getLogger(__name__)

#: A reducer maps an action to a (sync or async) iterable of modifiers,
#: awaitables resolving to modifiers, or ``None`` items. Returning ``None``
#: means the reducer ignores the action.
Reducer = Callable[[Action], Iterable[Any] | AsyncIterable[Any] | None]

CommitFn = Callable[[Any, Action], object]
TakeChainedFn = Callable[[], list[Action]]


def _reducer_name(reducer: Reducer) -> str:
    return getattr(reducer, "__qualname__", None) or repr(reducer)


async def _resolve(item: Any) -> Any:
    """Wait for *item* if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(item):
        return await item
    return item


class DispatchPipeline:
    """Runs an action (and everything it chains) through a reducer list.

    Parameters
    ----------
    commit
        Called with ``(modifier, action)`` for every produced modifier.
        It must merge, record and publish the change before returning.
    take_chained
        Called once per run after all reducers finished. It must empty
        the pending action queue and return what it held, in order.
    """

    def __init__(self, commit: CommitFn, take_chained: TakeChainedFn) -> None:
        self._commit = commit
        self._take_chained = take_chained

    async def run(self, action: Action, reducers: Sequence[Reducer]) -> None:
        """Dispatch *action* and, depth-first, every action it chains."""
        for reducer in reducers:
            await self._drain(reducer, action)

        chained = self._take_chained()
        if not chained:
            return
        _logger.debug(
            "Action %s chained %d action(s): %s",
            action.type,
            len(chained),
            [queued.type for queued in chained],
        )
        for queued in chained:
            await self.run(queued, reducers)

    async def _drain(self, reducer: Reducer, action: Action) -> None:
        produced = reducer(action)
        if produced is None:
            return

        if isinstance(produced, AsyncIterable):
            await self._drain_async(reducer, action, produced)
        elif isinstance(produced, Iterable) and not isinstance(produced, (Mapping, str, bytes)):
            await self._drain_sync(reducer, action, produced)
        elif inspect.iscoroutine(produced):
            produced.close()
            raise TypeError(
                f"Reducer {_reducer_name(reducer)} is a coroutine function; "
                "reducers must be generators or async generators that yield modifiers"
            )
        else:
            raise TypeError(
                f"Reducer {_reducer_name(reducer)} returned {type(produced).__name__}; "
                "expected an iterable or async iterable of modifiers"
            )

    async def _drain_sync(self, reducer: Reducer, action: Action, produced: Iterable[Any]) -> None:
        iterator = iter(produced)
        count = 0
        try:
            for item in iterator:
                modifier = await _resolve(item)
                if modifier is None:
                    continue
                self._commit(modifier, action)
                count += 1
        except Exception:
            _logger.debug("Reducer %s failed on action %s", _reducer_name(reducer), action.type, exc_info=True)
            raise
        finally:
            close = getattr(iterator, "close", None)
            if close is not None:
                close()
        if count:
            _logger.debug("Reducer %s committed %d modifier(s) for %s", _reducer_name(reducer), count, action.type)

    async def _drain_async(self, reducer: Reducer, action: Action, produced: AsyncIterable[Any]) -> None:
        iterator = aiter(produced)
        count = 0
        try:
            async for item in iterator:
                modifier = await _resolve(item)
                if modifier is None:
                    continue
                self._commit(modifier, action)
                count += 1
        except Exception:
            _logger.debug("Reducer %s failed on action %s", _reducer_name(reducer), action.type, exc_info=True)
            raise
        finally:
            aclose = getattr(iterator, "aclose", None)
            if aclose is not None:
                await aclose()
        if count:
            _logger.debug("Reducer %s committed %d modifier(s) for %s", _reducer_name(reducer), count, action.type)
