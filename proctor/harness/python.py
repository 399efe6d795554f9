"""Python harness generator."""

from __future__ import annotations

import re

from proctor.models import Problem

_TOP_LEVEL_FUNCTION = re.compile(r"^def\s+([a-zA-Z0-9_]+)\s*\(", re.MULTILINE)
_METHOD = re.compile(r"^[ \t]+def\s+([a-zA-Z0-9_]+)\s*\(\s*self\b", re.MULTILINE)
_CLASS = re.compile(r"^class\s+(\w+)", re.MULTILINE)
_TOP_LEVEL_STATEMENT = re.compile(r"^[^\s#]", re.MULTILINE)

_PRELUDE = '''

# ---- test driver ----
import json as _proctor_json
import sys as _proctor_sys

_proctor_sys.stdout.reconfigure(encoding="utf-8", line_buffering=True)


def _proctor_plain(value):
    if isinstance(value, (list, tuple)):
        return [_proctor_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _proctor_plain(v) for k, v in value.items()}
    return value


def _proctor_encode(value):
    try:
        return _proctor_json.dumps(_proctor_plain(value), separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError):
        return str(value)


def _proctor_matches(result, expected_text):
    try:
        expected = _proctor_json.loads(expected_text)
    except ValueError:
        return str(result) == expected_text
    return _proctor_plain(result) == expected


_proctor_failures = 0


def _proctor_run_case(entry, number, input_text, expected_text):
    global _proctor_failures
    print(f"Test {number}")
    try:
        args = _proctor_json.loads("[" + input_text + "]")
        result = entry(*args)
    except Exception as e:
        print("\\u274c FAILED")
        print(f"Expected: {expected_text}")
        print(f"Got: {type(e).__name__}: {e}")
        _proctor_failures += 1
        return
    if _proctor_matches(result, expected_text):
        print("\\u2705 PASSED")
    else:
        print("\\u274c FAILED")
        print(f"Expected: {expected_text}")
        print(f"Got: {_proctor_encode(result)}")
        _proctor_failures += 1

'''


class PythonHarness:
    language = "python"
    file_name = "test_solution.py"

    def get_function_name(self, code: str) -> str:
        match = _TOP_LEVEL_FUNCTION.search(code)
        if match:
            return match.group(1)
        for match in _METHOD.finditer(code):
            if not match.group(1).startswith("__"):
                return match.group(1)
        return ""

    def generate(self, problem: Problem, solution_code: str, function_name: str) -> str:
        parts = [solution_code.rstrip("\n"), _PRELUDE]
        parts.append(f"_proctor_entry = {_entry_expression(solution_code, function_name)}")
        for number, tc in enumerate(problem.test_cases, 1):
            parts.append(f"_proctor_run_case(_proctor_entry, {number}, {tc.input!r}, {tc.expected!r})")
        parts.append("_proctor_sys.stdout.flush()")
        parts.append("if _proctor_failures:")
        parts.append("    _proctor_sys.exit(1)")
        return "\n".join(parts) + "\n"


def _entry_expression(solution_code: str, function_name: str) -> str:
    """Call target: a top-level function, else ``Owner().method`` for a LeetCode-style class."""
    for match in _TOP_LEVEL_FUNCTION.finditer(solution_code):
        if match.group(1) == function_name:
            return function_name
    owner = _method_owner(solution_code, function_name)
    if owner:
        return f"{owner}().{function_name}"
    return function_name


def _method_owner(code: str, method_name: str) -> str | None:
    """Name of the first top-level class defining ``method_name(self, ...)``."""
    for match in _CLASS.finditer(code):
        end = _TOP_LEVEL_STATEMENT.search(code, match.end())
        body = code[match.end():end.start() if end else len(code)]
        if any(m.group(1) == method_name for m in _METHOD.finditer(body)):
            return match.group(1)
    return None
