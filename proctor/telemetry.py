"""Logging setup and structured error events."""

from __future__ import annotations

import enum
import json
import logging
import sys
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone

logger = logging.getLogger("proctor.errors")


class ErrorCategory(enum.Enum):
    TEST_EXECUTION = "test_execution"
    FILE_OPERATIONS = "file_operations"
    SYSTEM_SETUP = "system_setup"
    UNKNOWN = "unknown"


class ErrorSeverity(enum.Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass
class SessionSnapshot:
    """State of the execution a failure happened in."""

    problem_id: str
    language: str
    code_length: int = 0
    test_count: int = 0
    timeout: float = 0.0
    workspace: str = ""
    code_file: str = ""
    started_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(timespec="seconds")
    )


class JsonFormatter(logging.Formatter):
    def format(self, record):
        payload = {
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
            "time": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S"),
        }
        event = getattr(record, "event", None)
        if event is not None:
            payload["event"] = event
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def setup_logging(level: str = "INFO", json_output: bool = False) -> None:
    h = logging.StreamHandler(sys.stderr)
    if json_output:
        h.setFormatter(JsonFormatter())
    else:
        h.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root = logging.getLogger()
    root.setLevel(level.upper())
    root.handlers = [h]


def log_error_event(
    error: BaseException,
    category: ErrorCategory,
    operation: str,
    snapshot: SessionSnapshot | None = None,
    severity: ErrorSeverity = ErrorSeverity.HIGH,
    **details: str,
) -> dict:
    """Emit one structured error event and return its payload."""
    event = {
        "category": category.value,
        "severity": severity.value,
        "operation": operation,
        "error_type": type(error).__name__,
        "message": str(error),
        "session": asdict(snapshot) if snapshot else None,
    }
    if details:
        event["details"] = details
    logger.error("%s failed: %s", operation, error, extra={"event": event})
    return event
