"""Tests for the correlation-aware log formatter."""

from __future__ import annotations

import json
import logging

from gradarchive.utils.logger import (
    CorrelationJsonFormatter,
    _build_formatter,
    ctx_request_id,
    ctx_stage,
    ctx_username,
)


def _record(msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord("gradarchive.test", logging.WARNING, __file__, 1, msg, None, None)


def test_json_formatter_injects_request_context():
    formatter = _build_formatter("json")
    assert isinstance(formatter, CorrelationJsonFormatter)

    tokens = [
        ctx_request_id.set("req-1"),
        ctx_username.set("alice"),
        ctx_stage.set("authorizing"),
    ]
    try:
        payload = json.loads(formatter.format(_record()))
    finally:
        ctx_stage.reset(tokens[2])
        ctx_username.reset(tokens[1])
        ctx_request_id.reset(tokens[0])

    assert payload["message"] == "hello"
    assert payload["level"] == "WARNING"
    assert payload["request_id"] == "req-1"
    assert payload["username"] == "alice"
    assert payload["stage"] == "authorizing"


def test_json_formatter_omits_unset_context():
    payload = json.loads(_build_formatter("json").format(_record()))
    assert "request_id" not in payload
    assert "username" not in payload


def test_text_formatter():
    line = _build_formatter("text").format(_record("plain"))
    assert "gradarchive.test - WARNING - plain" in line
