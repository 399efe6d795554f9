"""Language-keyed lookup of test runners."""

from __future__ import annotations

import threading

from proctor.config import Config
from proctor.errors import RegistrationError, RunnerNotFoundError
from proctor.executor_base import Runner
from proctor.executor_factory import create_runner
from proctor.languages import BUILTIN_LANGUAGES
from proctor.models import Problem, TestResult


class RunnerRegistry:
    """Maps a language identifier to its runner.

    Safe for concurrent use. The lock only guards the mapping and is never
    held while tests execute.
    """

    def __init__(self) -> None:
        self._runners: dict[str, Runner] = {}
        self._lock = threading.Lock()

    def get_runner(self, language: str) -> Runner:
        with self._lock:
            runner = self._runners.get(language)
        if runner is None:
            raise RunnerNotFoundError(language)
        return runner

    def register_runner(self, runner: Runner) -> None:
        language = runner.language
        if not language:
            raise RegistrationError("test runner must specify a language")
        with self._lock:
            self._runners[language] = runner

    def get_supported_languages(self) -> list[str]:
        with self._lock:
            return list(self._runners)


def create_default_registry(config: Config | None = None) -> RunnerRegistry:
    """Build a registry holding the Go, Python and JavaScript runners."""
    config = config or Config()
    registry = RunnerRegistry()
    for spec in BUILTIN_LANGUAGES:
        registry.register_runner(create_runner(spec, config))
    return registry


def execute_tests(
    registry: RunnerRegistry,
    problem: Problem,
    code: str,
    language: str,
    timeout: float | None = None,
) -> tuple[list[TestResult], bool]:
    """Look up the runner for ``language`` and run the problem's tests."""
    return registry.get_runner(language).execute_tests(problem, code, timeout)
