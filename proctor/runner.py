"""Generic test runner: harness generation, execution and result parsing."""

from __future__ import annotations

import logging
import os
import tempfile
import threading
import time
from contextlib import contextmanager
from pathlib import Path

from proctor.config import Config
from proctor.errors import (
    EngineError,
    ExecutionTimeoutError,
    HarnessGenerationError,
    SetupError,
    ToolchainNotFoundError,
)
from proctor.executor import LocalExecutor
from proctor.executor_base import CommandExecutor
from proctor.executor_judge0 import Judge0Executor
from proctor.languages import LanguageSpec
from proctor.models import ExecutionResult, Problem, TestResult
from proctor.parser import add_error_to_results, all_tests_passed, parse_test_output
from proctor.telemetry import ErrorCategory, ErrorSeverity, SessionSnapshot, log_error_event

logger = logging.getLogger(__name__)


class TestRunner:
    """Runs a problem's test cases against a solution in one language."""

    __test__ = False

    def __init__(
        self,
        spec: LanguageSpec,
        executor: CommandExecutor | None = None,
        config: Config | None = None,
    ) -> None:
        self.spec = spec
        self.config = config or Config()
        self._executor: CommandExecutor | None = executor or self._default_executor()

    def _default_executor(self) -> CommandExecutor | None:
        return LocalExecutor(max_output_bytes=self.config.max_output_bytes)

    @property
    def language(self) -> str:
        return self.spec.language

    def get_function_name(self, code: str) -> str:
        return self.spec.harness.get_function_name(code)

    def generate_test_code(self, problem: Problem, solution_code: str) -> str:
        function_name = (
            problem.function_name
            or self.get_function_name(solution_code)
            or self.config.default_function_name
        )
        try:
            return self.spec.harness.generate(problem, solution_code, function_name)
        except (TypeError, ValueError) as e:
            raise HarnessGenerationError(
                f"failed to generate {self.language} test code for {problem.id}: {e}"
            ) from e

    def execute_tests(
        self,
        problem: Problem,
        code: str,
        timeout: float | None = None,
        cancel: threading.Event | None = None,
    ) -> tuple[list[TestResult], bool]:
        """Run every test case and return ``(results, all_passed)``.

        Raises ``EngineError`` subclasses when no verdict could be produced;
        a timeout raises ``ExecutionTimeoutError`` with the partial results.
        """
        timeout = timeout or self.config.execution_timeout
        snapshot = SessionSnapshot(
            problem_id=problem.id,
            language=self.language,
            code_length=len(code),
            test_count=len(problem.test_cases),
            timeout=timeout,
        )
        started = time.monotonic()
        logger.info(
            "Executing %d %s test(s) for problem %s", len(problem.test_cases), self.language, problem.id
        )
        try:
            with self._workspace(snapshot) as workdir:
                harness = self.generate_test_code(problem, code)
                harness_path = self._write_harness(workdir, harness, snapshot)
                execution = self._execute(harness_path, harness, timeout, cancel)
        except EngineError as e:
            log_error_event(e, _category(e), f"execute_{self.language}_tests", snapshot)
            raise

        results = parse_test_output(execution.stdout, problem.test_cases)
        failed = execution.timed_out or execution.exit_code != 0
        if failed and execution.stderr.strip():
            logger.warning("%s test execution failed with errors: %s", self.language, execution.stderr)
            add_error_to_results(results, execution.stderr)
        if execution.truncated:
            logger.warning("Output of %s harness was truncated", self.language)

        if execution.timed_out:
            error = ExecutionTimeoutError(timeout, results, cancelled=bool(cancel and cancel.is_set()))
            log_error_event(
                error, ErrorCategory.TEST_EXECUTION, f"execute_{self.language}_tests", snapshot,
                severity=ErrorSeverity.MEDIUM,
            )
            raise error

        passed = all_tests_passed(results)
        logger.info(
            "Test execution completed in %.2fs: %d tests, all passed: %s",
            time.monotonic() - started, len(results), passed,
        )
        return results, passed

    def _execute(
        self,
        harness_path: Path,
        harness: str,
        timeout: float,
        cancel: threading.Event | None,
    ) -> ExecutionResult:
        command = self.spec.build_command(str(harness_path), self.config)
        env = dict(os.environ)
        env.update(self.spec.env)
        return self._executor.run(
            command, timeout, cwd=str(harness_path.parent), env=env, cancel=cancel
        )

    @contextmanager
    def _workspace(self, snapshot: SessionSnapshot):
        try:
            tmp = tempfile.TemporaryDirectory(prefix=f"proctor-{self.language}-")
        except OSError as e:
            raise SetupError(f"failed to create test directory: {e}") from e
        with tmp as workdir:
            snapshot.workspace = workdir
            yield Path(workdir)

    def _write_harness(self, workdir: Path, harness: str, snapshot: SessionSnapshot) -> Path:
        path = workdir / self.spec.file_name
        snapshot.code_file = str(path)
        try:
            path.write_text(harness, encoding="utf-8")
        except (OSError, UnicodeError) as e:
            raise SetupError(f"failed to write test file: {e}") from e
        return path


class Judge0TestRunner(TestRunner):
    """Sends the generated harness to a Judge0 server instead of a local toolchain."""

    def __init__(self, spec: LanguageSpec, executor: Judge0Executor, config: Config | None = None) -> None:
        super().__init__(spec, config=config)
        self._judge0 = executor

    def _default_executor(self) -> CommandExecutor | None:
        return None

    def _execute(
        self,
        harness_path: Path,
        harness: str,
        timeout: float,
        cancel: threading.Event | None,
    ) -> ExecutionResult:
        return self._judge0.run_source(harness, self.spec.judge0_language_id, timeout, cancel=cancel)


def _category(error: EngineError) -> ErrorCategory:
    if isinstance(error, SetupError):
        return ErrorCategory.FILE_OPERATIONS
    if isinstance(error, ToolchainNotFoundError):
        return ErrorCategory.SYSTEM_SETUP
    return ErrorCategory.TEST_EXECUTION
