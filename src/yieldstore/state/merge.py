"""Modifier merge engine.

A modifier is a partial state tree. Merging it walks the modifier and, key
by key, either recurses (both sides are mappings) or overwrites. Keys are
never deleted and lists are replaced wholesale, never merged element-wise.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping, MutableMapping
from typing import Any, Final

from yieldstore.exceptions import InvalidActionError, InvalidModifierError
from yieldstore.models.action import Action

#: Reserved field holding the chained-action queue.
ACTIONS_KEY: Final = "actions"
#: Reserved field holding cache entries.
CACHE_KEY: Final = "cache"


class _Unset:
    """Sentinel type for "no value"; merging it leaves the key untouched."""

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Unset:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> _Unset:
        return self


UNSET: Final = _Unset()


def _is_mapping(value: Any) -> bool:
    return isinstance(value, Mapping)


def _copy_value(value: Any) -> Any:
    """Copy the containers of *value* so state never aliases a modifier.

    Leaves (user objects, actions, primitives) are shared by reference.
    """
    if _is_mapping(value):
        return {key: _copy_value(item) for key, item in value.items() if item is not UNSET}
    if isinstance(value, list):
        return [_copy_value(item) for item in value]
    return value


def apply_modifiers(target: MutableMapping[str, Any], modifier: Mapping[str, Any]) -> None:
    """Deep-merge *modifier* into *target* in place.

    - mapping over mapping: recurse
    - anything else (primitive, list, ``None``, type mismatch): overwrite
    - :data:`UNSET`: leave the key as it is
    """
    for key, value in modifier.items():
        if value is UNSET:
            continue
        existing = target.get(key)
        if _is_mapping(value) and isinstance(existing, MutableMapping):
            apply_modifiers(existing, value)
        else:
            target[key] = _copy_value(value)


def merged(target: Mapping[str, Any], modifier: Mapping[str, Any]) -> dict[str, Any]:
    """Return the result of merging *modifier* into a copy of *target*.

    Neither argument is mutated.
    """
    result = copy.deepcopy(dict(target))
    apply_modifiers(result, modifier)
    return result


def normalize_modifier(modifier: Any) -> dict[str, Any]:
    """Validate *modifier* and return it ready to commit.

    Chained actions under ``actions`` are coerced to :class:`Action`, so
    reducers may yield plain ``{"type": ...}`` mappings.

    Raises
    ------
    InvalidModifierError
        If *modifier* is not a mapping with string keys, ``actions`` is not
        a list of actions, or ``cache`` is not a mapping of entry mappings.
    """
    if not _is_mapping(modifier):
        raise InvalidModifierError(f"Modifier must be a mapping, got {type(modifier).__name__}")

    normalized: dict[str, Any] = {}
    for key, value in modifier.items():
        if not isinstance(key, str):
            raise InvalidModifierError(f"Modifier keys must be strings, got {key!r}", key=str(key))
        normalized[key] = value

    actions = normalized.get(ACTIONS_KEY, UNSET)
    if actions is not UNSET:
        if not isinstance(actions, (list, tuple)):
            raise InvalidModifierError(
                f"'{ACTIONS_KEY}' must be a list of actions, got {type(actions).__name__}",
                key=ACTIONS_KEY,
            )
        try:
            normalized[ACTIONS_KEY] = [Action.coerce(item) for item in actions]
        except InvalidActionError as exc:
            raise InvalidModifierError(f"'{ACTIONS_KEY}' holds an invalid action: {exc}", key=ACTIONS_KEY) from exc

    cache = normalized.get(CACHE_KEY, UNSET)
    if cache is not UNSET:
        if not _is_mapping(cache):
            raise InvalidModifierError(
                f"'{CACHE_KEY}' must be a mapping, got {type(cache).__name__}",
                key=CACHE_KEY,
            )
        for cache_key, entry in cache.items():
            if entry is not UNSET and not _is_mapping(entry):
                raise InvalidModifierError(
                    f"Cache entry {cache_key!r} must be a mapping, got {type(entry).__name__}",
                    key=CACHE_KEY,
                )

    return normalized
