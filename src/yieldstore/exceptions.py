"""Custom exception hierarchy for yieldstore.

Reducer failures are deliberately absent: whatever a reducer raises
propagates unchanged out of :meth:`yieldstore.Store.dispatch`.
"""

from __future__ import annotations


class StoreError(Exception):
    """Base exception for all yieldstore errors."""


class StoreConfigError(StoreError):
    """Invalid store configuration (e.g. a negative history size)."""


class InvalidActionError(StoreError):
    """A dispatched or chained value could not be read as an action."""

    def __init__(self, message: str, *, value: object = None) -> None:
        self.value = value
        super().__init__(message)


class InvalidModifierError(StoreError):
    """A modifier is not a mapping or breaks a reserved field's shape.

    Raised before the modifier touches state, so nothing is committed.
    Ordinary shape conflicts (an object merged over a primitive) are not
    errors; the merge simply overwrites.
    """

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)
