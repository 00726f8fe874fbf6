"""yieldstore - Observable state container driven by generator reducers."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("yieldstore")
except PackageNotFoundError:
    __version__ = "0+local"
from yieldstore._dispatch import Reducer
from yieldstore.config import StoreConfig
from yieldstore.exceptions import (
    InvalidActionError,
    InvalidModifierError,
    StoreConfigError,
    StoreError,
)
from yieldstore.models import Action, CacheEntry, HistoryEntry
from yieldstore.state import UNSET, apply_modifiers, merged
from yieldstore.state.history import StorageListener
from yieldstore.store import Store, create_store

__all__ = [
    "__version__",
    "UNSET",
    "Action",
    "CacheEntry",
    "HistoryEntry",
    "InvalidActionError",
    "InvalidModifierError",
    "Reducer",
    "StorageListener",
    "Store",
    "StoreConfig",
    "StoreConfigError",
    "StoreError",
    "apply_modifiers",
    "create_store",
    "merged",
]
