from __future__ import annotations

import pytest

from yieldstore import UNSET, Action, apply_modifiers, merged
from yieldstore.exceptions import InvalidModifierError
from yieldstore.state.merge import normalize_modifier


def test_empty_modifier_leaves_state_unchanged() -> None:
    state = {"a": {"x": 1}, "b": [1, 2], "c": None}
    apply_modifiers(state, {})
    assert state == {"a": {"x": 1}, "b": [1, 2], "c": None}


def test_nested_mappings_are_deep_merged() -> None:
    state = {"a": {"x": 1, "y": 2}}
    apply_modifiers(state, {"a": {"y": 3}})
    assert state == {"a": {"x": 1, "y": 3}}


def test_lists_are_overwritten_not_merged() -> None:
    state = {"a": [1, 2]}
    apply_modifiers(state, {"a": [3]})
    assert state == {"a": [3]}


def test_type_mismatch_overwrites() -> None:
    state = {"a": 5, "b": {"x": 1}}
    apply_modifiers(state, {"a": {"nested": True}, "b": "flat"})
    assert state == {"a": {"nested": True}, "b": "flat"}


def test_none_overwrites_but_unset_is_a_no_op() -> None:
    state = {"a": 1, "b": 2}
    apply_modifiers(state, {"a": None, "b": UNSET})
    assert state == {"a": None, "b": 2}


def test_absent_key_is_created_and_keys_are_never_deleted() -> None:
    state = {"keep": 1}
    apply_modifiers(state, {"new": {"deep": {"value": 1}}})
    assert state == {"keep": 1, "new": {"deep": {"value": 1}}}


def test_state_does_not_alias_modifier_containers() -> None:
    modifier = {"a": {"items": [1, 2]}}
    state: dict = {}
    apply_modifiers(state, modifier)

    state["a"]["items"].append(3)
    state["a"]["extra"] = True

    assert modifier == {"a": {"items": [1, 2]}}


def test_merged_does_not_mutate_inputs() -> None:
    state = {"a": {"x": 1, "y": 2}}
    modifier = {"a": {"y": 3}, "b": 1}

    result = merged(state, modifier)

    assert result == {"a": {"x": 1, "y": 3}, "b": 1}
    assert state == {"a": {"x": 1, "y": 2}}
    assert modifier == {"a": {"y": 3}, "b": 1}


class TestNormalizeModifier:
    def test_chained_action_mappings_become_actions(self) -> None:
        normalized = normalize_modifier({"actions": [{"type": "B", "payload": 1}, Action(type="C")]})
        assert normalized["actions"] == [Action(type="B", payload=1), Action(type="C")]

    def test_rejects_non_mapping(self) -> None:
        with pytest.raises(InvalidModifierError):
            normalize_modifier([("a", 1)])

    def test_rejects_non_string_keys(self) -> None:
        with pytest.raises(InvalidModifierError):
            normalize_modifier({1: "a"})

    def test_rejects_actions_that_are_not_a_list(self) -> None:
        with pytest.raises(InvalidModifierError) as excinfo:
            normalize_modifier({"actions": {"type": "B"}})
        assert excinfo.value.key == "actions"

    def test_rejects_invalid_chained_action(self) -> None:
        with pytest.raises(InvalidModifierError):
            normalize_modifier({"actions": [{"payload": 1}]})

    def test_rejects_cache_entries_that_are_not_mappings(self) -> None:
        with pytest.raises(InvalidModifierError) as excinfo:
            normalize_modifier({"cache": {"k": "v"}})
        assert excinfo.value.key == "cache"
