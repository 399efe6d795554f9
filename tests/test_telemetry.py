"""Tests for logging setup and structured error events."""

from __future__ import annotations

import json
import logging

from proctor.errors import SetupError
from proctor.telemetry import (
    ErrorCategory,
    ErrorSeverity,
    JsonFormatter,
    SessionSnapshot,
    log_error_event,
)


def test_log_error_event_payload(caplog):
    snapshot = SessionSnapshot(problem_id="two_sum", language="go", test_count=3, timeout=30)
    with caplog.at_level(logging.ERROR, logger="proctor.errors"):
        event = log_error_event(
            SetupError("disk full"), ErrorCategory.FILE_OPERATIONS, "create_temp_dir", snapshot, path="/tmp"
        )
    assert event["category"] == "file_operations"
    assert event["severity"] == ErrorSeverity.HIGH.value
    assert event["error_type"] == "SetupError"
    assert event["session"]["problem_id"] == "two_sum"
    assert event["details"] == {"path": "/tmp"}
    assert caplog.records[0].event is event


def test_json_formatter_includes_event():
    record = logging.LogRecord("proctor.errors", logging.ERROR, __file__, 1, "boom %s", ("x",), None)
    record.event = {"category": "test_execution"}
    payload = json.loads(JsonFormatter().format(record))
    assert payload["msg"] == "boom x"
    assert payload["level"] == "ERROR"
    assert payload["event"] == {"category": "test_execution"}
