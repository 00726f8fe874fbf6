"""Base model for yieldstore records.

Every record the store hands out (actions, history entries, cache
entries) inherits from :class:`StoreBaseModel` which provides:

* ``frozen=True`` so records can be shared and duplicated freely.
* ``extra="forbid"`` so a misspelt field fails loudly instead of being
  silently dropped.
* ``arbitrary_types_allowed`` because payloads and cached values are
  user objects the store never inspects.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class StoreBaseModel(BaseModel):
    """Base for immutable store records."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        arbitrary_types_allowed=True,
    )
