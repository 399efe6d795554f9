"""Parsing of the harness marker protocol.

A harness reports each test as::

    Test <n>
    ✅ PASSED

or::

    Test <n>
    ❌ FAILED
    Expected: <expected>
    Got: <actual>

Anything else on stdout is ignored, so solutions may print freely.
"""

from __future__ import annotations

import re

from proctor.models import TestCase, TestResult

TEST_PREFIX = "Test "
PASSED_MARKER = "✅ PASSED"
FAILED_MARKER = "❌ FAILED"
GOT_PREFIX = "Got: "

_TEST_NUMBER = re.compile(r"\s*([+-]?\d+)")


def parse_test_output(output: str, test_cases: list[TestCase]) -> list[TestResult]:
    """Build one result per test case from harness stdout."""
    results = [TestResult.pending(tc) for tc in test_cases]
    current = -1

    for line in output.split("\n"):
        line = line.rstrip("\r")
        if line.startswith(TEST_PREFIX):
            match = _TEST_NUMBER.match(line[len(TEST_PREFIX):])
            if match:
                number = int(match.group(1))
                if 1 <= number <= len(results):
                    current = number - 1
            continue

        if current < 0:
            continue
        result = results[current]
        if PASSED_MARKER in line:
            result.passed = True
            result.actual = result.expected
        elif FAILED_MARKER in line:
            result.passed = False
            idx = line.find(GOT_PREFIX)
            if idx >= 0:
                result.actual = line[idx + len(GOT_PREFIX):].strip()
        elif line.startswith(GOT_PREFIX):
            result.actual = line[len(GOT_PREFIX):]

    return results


def add_error_to_results(results: list[TestResult], error_text: str) -> list[TestResult]:
    """Mark every failed result with the process's error output."""
    for result in results:
        if not result.passed:
            result.actual = f"Error: {error_text}"
    return results


def all_tests_passed(results: list[TestResult]) -> bool:
    return all(r.passed for r in results)
