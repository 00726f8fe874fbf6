"""History entry model."""

from __future__ import annotations

from typing import Any

from yieldstore.models._base import StoreBaseModel
from yieldstore.models.action import Action


class HistoryEntry(StoreBaseModel):
    """One committed modifier and the action that caused it.

    ``action`` is ``None`` for changes made through ``update``, ``clear``
    or ``set_cache`` rather than a dispatch.
    """

    action: Action | None = None
    changes: dict[str, Any]
