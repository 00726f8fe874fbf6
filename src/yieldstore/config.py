"""Store configuration for yieldstore."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from yieldstore.exceptions import StoreConfigError

#: Default number of history entries kept by a store.
DEFAULT_HISTORY_MAX_SIZE: int = 10


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    raise StoreConfigError(f"Not a boolean value: {value!r}")


def validate_history_max_size(value: Any) -> int:
    """Return *value* as a history capacity or raise :class:`StoreConfigError`."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise StoreConfigError(f"history_max_size must be an int, got {type(value).__name__}")
    if value < 0:
        raise StoreConfigError(f"history_max_size must be >= 0, got {value}")
    return value


@dataclasses.dataclass(frozen=True)
class StoreConfig:
    """Store configuration.

    Parameters
    ----------
    history_max_size : int
        Capacity of the history ring. The oldest entry is evicted first
        once the ring is full. ``0`` keeps no history at all.
    queue_dispatches : bool
        Run concurrent top-level ``dispatch`` calls one full action tree
        at a time. When ``False``, concurrent dispatches may interleave
        between individual commits.
    """

    history_max_size: int = DEFAULT_HISTORY_MAX_SIZE
    queue_dispatches: bool = True

    def __post_init__(self) -> None:
        validate_history_max_size(self.history_max_size)

    @classmethod
    def from_env(cls, **overrides: Any) -> StoreConfig:
        """Create configuration from environment variables.

        Reads ``YIELDSTORE_HISTORY_MAX_SIZE`` and ``YIELDSTORE_QUEUE_DISPATCHES``.
        Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        StoreConfig
            Populated configuration.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        size_env = env.get("YIELDSTORE_HISTORY_MAX_SIZE")
        if size_env is not None and "history_max_size" not in overrides:
            try:
                config_kwargs["history_max_size"] = int(size_env)
            except ValueError as exc:
                raise StoreConfigError(f"YIELDSTORE_HISTORY_MAX_SIZE is not an int: {size_env!r}") from exc

        if "queue_dispatches" not in overrides:
            config_kwargs["queue_dispatches"] = _env_bool(env.get("YIELDSTORE_QUEUE_DISPATCHES"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
