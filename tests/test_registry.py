"""Tests for the runner registry."""

from __future__ import annotations

import threading

import pytest

from proctor.config import Config
from proctor.errors import RegistrationError, RunnerNotFoundError
from proctor.executor_base import Runner
from proctor.models import Problem, TestCase, TestResult
from proctor.registry import RunnerRegistry, create_default_registry, execute_tests
from proctor.runner import Judge0TestRunner, TestRunner


class MockRunner:
    def __init__(self, language: str, outcome=None) -> None:
        self._language = language
        self.outcome = outcome

    @property
    def language(self) -> str:
        return self._language

    def execute_tests(self, problem, code, timeout=None, cancel=None):
        return self.outcome

    def generate_test_code(self, problem, solution_code):
        return "mock test code"

    def get_function_name(self, code):
        return ""


def test_default_registry_languages():
    registry = create_default_registry()
    langs = registry.get_supported_languages()
    assert sorted(langs) == ["go", "javascript", "python"]
    for lang in langs:
        runner = registry.get_runner(lang)
        assert isinstance(runner, TestRunner)
        assert runner.language == lang


def test_default_registry_judge0_backend():
    config = Config(executor_type="judge0", judge0_url="http://fake:2358")
    runner = create_default_registry(config).get_runner("go")
    assert isinstance(runner, Judge0TestRunner)


def test_unknown_language():
    registry = create_default_registry()
    with pytest.raises(RunnerNotFoundError, match="nonexistent-lang"):
        registry.get_runner("nonexistent-lang")
    with pytest.raises(LookupError):
        RunnerRegistry().get_runner("python")


def test_register_then_get_returns_same_runner():
    registry = RunnerRegistry()
    runner = MockRunner("mock")
    registry.register_runner(runner)
    assert registry.get_runner("mock") is runner
    assert isinstance(runner, Runner)


def test_register_overwrites():
    registry = create_default_registry()
    replacement = MockRunner("python")
    registry.register_runner(replacement)
    assert registry.get_runner("python") is replacement
    assert len(registry.get_supported_languages()) == 3


def test_empty_language_rejected():
    registry = RunnerRegistry()
    with pytest.raises(RegistrationError):
        registry.register_runner(MockRunner(""))
    assert registry.get_supported_languages() == []


def test_execute_tests_convenience():
    results = [
        TestResult(input="input1", expected="expected1", actual="expected1", passed=True),
        TestResult(input="input2", expected="expected2", actual="wrong", passed=False),
    ]
    registry = RunnerRegistry()
    registry.register_runner(MockRunner("mock", (results, False)))
    problem = Problem(
        id="test-problem",
        test_cases=[TestCase(input="input1", expected="expected1"), TestCase(input="input2", expected="expected2")],
    )
    got, all_passed = execute_tests(registry, problem, "mock code", "mock", timeout=1)
    assert not all_passed
    assert len(got) == 2
    assert got[0].passed and not got[1].passed


def test_concurrent_register_and_lookup():
    registry = RunnerRegistry()
    errors: list[BaseException] = []

    def register(i: int) -> None:
        try:
            registry.register_runner(MockRunner(f"lang-{i}"))
            assert registry.get_runner(f"lang-{i}").language == f"lang-{i}"
            registry.get_supported_languages()
        except BaseException as e:
            errors.append(e)

    threads = [threading.Thread(target=register, args=(i,)) for i in range(32)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert errors == []
    assert len(registry.get_supported_languages()) == 32
