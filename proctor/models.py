"""Data models for proctor."""

from __future__ import annotations

from dataclasses import dataclass, field

NO_OUTPUT = "No output captured"


@dataclass
class TestCase:
    __test__ = False

    input: str
    expected: str


@dataclass
class Problem:
    id: str
    test_cases: list[TestCase] = field(default_factory=list)
    title: str = ""
    description: str = ""
    function_name: str | None = None  # pins the entry point, e.g. "twoSum"


@dataclass
class ExecutionResult:
    stdout: str
    stderr: str
    exit_code: int
    timed_out: bool = False
    truncated: bool = False  # output exceeded the executor's byte cap


@dataclass
class TestResult:
    __test__ = False

    input: str
    expected: str
    actual: str = NO_OUTPUT
    passed: bool = False

    @classmethod
    def pending(cls, test_case: TestCase) -> TestResult:
        return cls(input=test_case.input, expected=test_case.expected)
