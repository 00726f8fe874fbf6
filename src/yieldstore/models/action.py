"""Action model."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import Field, ValidationError, field_validator

from yieldstore.exceptions import InvalidActionError
from yieldstore.models._base import StoreBaseModel


class Action(StoreBaseModel):
    """A tagged request dispatched to the reducers.

    Reducers branch on :attr:`type`::

        def counter(action):
            match action.type:
                case "INCREMENT":
                    yield {"count": store.get_state().get("count", 0) + action.payload}
    """

    type: str = Field(..., description="Discriminant reducers branch on")
    payload: Any = None

    @field_validator("type")
    @classmethod
    def _normalize_type(cls, value: str) -> str:
        action_type = value.strip()
        if not action_type:
            raise ValueError("type must be non-empty")
        return action_type

    @classmethod
    def coerce(cls, value: Any) -> Action:
        """Return *value* as an :class:`Action`.

        Accepts an ``Action`` (returned as-is) or a mapping with ``type``
        and an optional ``payload``.

        Raises
        ------
        InvalidActionError
            If *value* cannot be read as an action.
        """
        if isinstance(value, Action):
            return value
        if not isinstance(value, Mapping):
            raise InvalidActionError(
                f"Expected an Action or a mapping, got {type(value).__name__}",
                value=value,
            )
        try:
            return cls.model_validate(dict(value))
        except ValidationError as exc:
            raise InvalidActionError(f"Invalid action: {exc}", value=value) from exc
