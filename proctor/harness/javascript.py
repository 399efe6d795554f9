"""JavaScript (Node.js) harness generator."""

from __future__ import annotations

import json
import re

from proctor.models import Problem

# function declarations, then arrow functions bound with const/let/var
_FUNCTION = re.compile(
    r"function\s+([a-zA-Z0-9_$]+)\s*\("
    r"|(?:const|let|var)\s+([a-zA-Z0-9_$]+)\s*=\s*(?:async\s*)?\(?[^=;]*\)?\s*=>"
)

_PRELUDE = r"""

// ---- test driver ----
function __proctorEncode(value) {
  if (value === undefined) return "undefined";
  try {
    const text = JSON.stringify(value);
    return text === undefined ? String(value) : text;
  } catch (e) {
    return String(value);
  }
}

function __proctorEqual(a, b) {
  if (a === b) return true;
  if (typeof a !== "object" || typeof b !== "object" || a === null || b === null) return false;
  if (Array.isArray(a) !== Array.isArray(b)) return false;
  const keysA = Object.keys(a);
  const keysB = Object.keys(b);
  if (keysA.length !== keysB.length) return false;
  return keysA.every((k) => Object.prototype.hasOwnProperty.call(b, k) && __proctorEqual(a[k], b[k]));
}

function __proctorMatches(result, expectedText) {
  let expected;
  try {
    expected = JSON.parse(expectedText);
  } catch (e) {
    return String(result) === expectedText;
  }
  let actual;
  try {
    actual = JSON.parse(__proctorEncode(result));
  } catch (e) {
    return false;
  }
  return __proctorEqual(actual, expected);
}

let __proctorFailures = 0;

function __proctorRunCase(entry, number, inputText, expectedText) {
  console.log(`Test ${number}`);
  let result;
  try {
    const args = JSON.parse("[" + inputText + "]");
    result = entry()(...args);
  } catch (e) {
    console.log("❌ FAILED");
    console.log(`Expected: ${expectedText}`);
    console.log(`Got: ${e && e.name ? `${e.name}: ${e.message}` : String(e)}`);
    __proctorFailures++;
    return;
  }
  if (__proctorMatches(result, expectedText)) {
    console.log("✅ PASSED");
  } else {
    console.log("❌ FAILED");
    console.log(`Expected: ${expectedText}`);
    console.log(`Got: ${__proctorEncode(result)}`);
    __proctorFailures++;
  }
}

"""


class JavaScriptHarness:
    language = "javascript"
    file_name = "test_solution.js"

    def get_function_name(self, code: str) -> str:
        match = _FUNCTION.search(code)
        if not match:
            return ""
        return match.group(1) or match.group(2) or ""

    def generate(self, problem: Problem, solution_code: str, function_name: str) -> str:
        parts = [solution_code.rstrip("\n"), _PRELUDE]
        # resolved per call so a missing entry point fails each test instead of the whole file
        parts.append(f"const __proctorEntry = () => {function_name};")
        for number, tc in enumerate(problem.test_cases, 1):
            parts.append(
                f"__proctorRunCase(__proctorEntry, {number}, "
                f"{_js_string(tc.input)}, {_js_string(tc.expected)});"
            )
        # exitCode rather than process.exit() so piped stdout is flushed
        parts.append("if (__proctorFailures > 0) process.exitCode = 1;")
        return "\n".join(parts) + "\n"


def _js_string(text: str) -> str:
    return json.dumps(text)
