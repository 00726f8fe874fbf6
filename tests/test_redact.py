from __future__ import annotations

from yieldstore import Action
from yieldstore._redact import redact_for_log


def test_redact_for_log_redacts_cache_tokens() -> None:
    modifier = {"cache": {"session": {"token": "secret-token", "value": {"user": "ada"}}}}

    redacted = redact_for_log(modifier)

    assert redacted["cache"]["session"]["token"] == "<redacted>"
    assert redacted["cache"]["session"]["value"] == {"user": "ada"}


def test_redact_for_log_keeps_missing_tokens_visible() -> None:
    assert redact_for_log({"token": None}) == {"token": None}


def test_redact_for_log_truncates_long_strings_and_lists() -> None:
    redacted = redact_for_log({"value": "x" * 600, "items": list(range(10))}, max_string=10, max_items=3)

    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]
    assert redacted["items"] == [0, 1, 2, "<7 more>"]


def test_redact_for_log_dumps_actions() -> None:
    redacted = redact_for_log({"actions": [Action(type="A", payload={"token": "t"})]})
    assert redacted == {"actions": [{"type": "A", "payload": {"token": "<redacted>"}}]}


def test_redact_for_log_only_masks_token_fields() -> None:
    redacted = redact_for_log({"TOKEN": "t", "user": "ada", "value": {"token": "inner"}})
    assert redacted == {"TOKEN": "<redacted>", "user": "ada", "value": {"token": "<redacted>"}}
