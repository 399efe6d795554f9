"""Engine-level errors.

A solution that runs and fails its tests is not an error: that outcome is
reported through ``TestResult.passed``. Everything here means the engine
itself could not produce a verdict.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from proctor.models import TestResult


class EngineError(Exception):
    """Base class for failures of the execution engine."""


class SetupError(EngineError):
    """Workspace creation or harness write failed."""


class HarnessGenerationError(EngineError):
    """The harness source could not be produced."""


class ToolchainNotFoundError(EngineError):
    """The language toolchain could not be started."""

    def __init__(self, command: list[str], reason: str = "") -> None:
        self.command = command
        detail = f": {reason}" if reason else ""
        super().__init__(f"failed to start {command[0]!r}{detail}")


class ExecutionTimeoutError(EngineError):
    """The harness ran past its deadline and was killed.

    ``results`` holds whatever the harness reported before it was killed,
    one entry per test case.
    """

    def __init__(
        self,
        timeout: float,
        results: list[TestResult] | None = None,
        cancelled: bool = False,
    ) -> None:
        self.timeout = timeout
        self.results = results or []
        self.cancelled = cancelled
        if cancelled:
            super().__init__("execution cancelled before completion")
        else:
            super().__init__(f"command timed out after {timeout:g}s")


class ExecutorError(EngineError):
    """A remote execution backend failed to answer."""


class RunnerNotFoundError(EngineError, LookupError):
    def __init__(self, language: str) -> None:
        self.language = language
        super().__init__(f"no test runner available for language: {language}")


class RegistrationError(EngineError, ValueError):
    """A runner was rejected by the registry."""
