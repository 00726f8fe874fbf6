from __future__ import annotations

import pytest

from yieldstore import CacheEntry, create_store
from yieldstore.state.cache import build_cache_modifier, read_cache, read_cache_entry


def test_value_without_token_is_read_without_token() -> None:
    store = create_store()
    store.set_cache("k", "v1")

    assert store.get_cache("k") == "v1"
    assert store.get_cache("k", "t") is None


def test_token_gates_the_value() -> None:
    store = create_store()
    store.set_cache("k", "v1")
    store.set_cache("k", "v2", "t")

    assert store.get_cache("k", "t") == "v2"
    assert store.get_cache("k") is None
    assert store.get_cache("k", "other") is None


def test_missing_key_is_a_miss_regardless_of_token() -> None:
    store = create_store()
    assert store.get_cache("missing") is None
    assert store.get_cache("missing", "t") is None


def test_set_cache_replaces_the_whole_entry() -> None:
    store = create_store()
    store.set_cache("profile", {"name": "a", "age": 3}, "t1")
    store.set_cache("profile", {"name": "b"}, "t2")

    assert store.get_cache("profile", "t2") == {"name": "b"}
    assert store.get_state()["cache"]["profile"] == {"token": "t2", "value": {"name": "b"}}


def test_set_cache_is_recorded_as_a_manual_change() -> None:
    store = create_store()
    seen = []
    store.add_storage_listener(lambda state, entry: seen.append(entry))

    store.set_cache("k", 42, "t")

    (entry,) = store.history()
    assert entry.action is None
    assert entry.changes == {"cache": {"k": {"token": "t", "value": 42}}}
    assert seen == [entry]


def test_set_cache_rejects_non_string_keys() -> None:
    store = create_store()
    with pytest.raises(TypeError):
        store.set_cache(1, "v")  # type: ignore[arg-type]
    assert store.history() == []


def test_cached_values_are_kept_as_given() -> None:
    marker = object()
    store = create_store()
    store.set_cache("obj", marker)
    assert store.get_cache("obj") is marker


def test_helpers_read_plain_state() -> None:
    state = {"cache": {"k": {"token": None, "value": 0}}}

    assert read_cache(state, "k") == 0
    assert read_cache({}, "k") is None
    assert read_cache({"cache": {"k": "not-an-entry"}}, "k") is None
    entry = read_cache_entry(state, "k")
    assert isinstance(entry, CacheEntry)
    assert entry.token is None
    assert entry.value == 0
    assert build_cache_modifier("k", 1, "t") == {"cache": {"k": {"token": "t", "value": 1}}}
