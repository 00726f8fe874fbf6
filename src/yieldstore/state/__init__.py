"""State layer.

The merge engine, the cache helpers and the history/listener bus. The
:class:`yieldstore.Store` facade is the only component that commits
modifiers to a live state through these pieces.
"""

from yieldstore.state.merge import ACTIONS_KEY, CACHE_KEY, UNSET, apply_modifiers, merged

__all__ = [
    "ACTIONS_KEY",
    "CACHE_KEY",
    "UNSET",
    "apply_modifiers",
    "merged",
]
