"""Cache entry model."""

from __future__ import annotations

from typing import Any

from yieldstore.models._base import StoreBaseModel


class CacheEntry(StoreBaseModel):
    """A token-gated value stored under ``state["cache"][key]``."""

    token: str | None = None
    value: Any = None

    def matches(self, token: str | None) -> bool:
        """Whether *token* unlocks this entry (``None`` matches ``None``)."""
        return self.token == token
