"""Abstract interfaces for executors and test runners."""

from __future__ import annotations

import threading
from typing import Protocol, runtime_checkable

from proctor.models import ExecutionResult, Problem, TestResult


@runtime_checkable
class CommandExecutor(Protocol):
    def run(
        self,
        command: list[str],
        timeout: float,
        cwd: str | None = None,
        env: dict[str, str] | None = None,
        cancel: threading.Event | None = None,
    ) -> ExecutionResult: ...


@runtime_checkable
class Runner(Protocol):
    @property
    def language(self) -> str: ...

    def execute_tests(
        self,
        problem: Problem,
        code: str,
        timeout: float | None = None,
        cancel: threading.Event | None = None,
    ) -> tuple[list[TestResult], bool]: ...

    def generate_test_code(self, problem: Problem, solution_code: str) -> str: ...

    def get_function_name(self, code: str) -> str: ...


@runtime_checkable
class HarnessGenerator(Protocol):
    language: str
    file_name: str

    def get_function_name(self, code: str) -> str: ...

    def generate(self, problem: Problem, solution_code: str, function_name: str) -> str: ...
