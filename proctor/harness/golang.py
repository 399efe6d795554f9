"""Go harness generator.

Arguments are decoded with ``reflect`` and ``encoding/json`` into the
parameter types of the entry point, so any signature built from
JSON-representable types works without per-problem code.
"""

from __future__ import annotations

import json
import re

from proctor.models import Problem

_FUNCTION = re.compile(r"func\s+([a-zA-Z0-9_]+)\s*\(")
_PACKAGE = re.compile(r"^\s*package\s+\w+\s*$", re.MULTILINE)
_IMPORT_BLOCK = re.compile(r"^\s*import\s*\((.*?)\)", re.MULTILINE | re.DOTALL)
_IMPORT_LINE = re.compile(r"^\s*import\s+((?:\w+\s+)?\"[^\"]+\")\s*$", re.MULTILINE)
_USER_MAIN = re.compile(r"^func\s+main\s*\(\s*\)", re.MULTILINE)

_HARNESS_IMPORTS = ['"encoding/json"', '"fmt"', '"os"', '"reflect"']

_HELPERS = """

// ---- test driver ----

func proctorDecodeArgs(fn reflect.Value, input string) ([]reflect.Value, error) {
	var raw []json.RawMessage
	if err := json.Unmarshal([]byte("["+input+"]"), &raw); err != nil {
		return nil, err
	}
	fnType := fn.Type()
	if len(raw) != fnType.NumIn() {
		return nil, fmt.Errorf("expected %d arguments, got %d", fnType.NumIn(), len(raw))
	}
	args := make([]reflect.Value, len(raw))
	for i, msg := range raw {
		ptr := reflect.New(fnType.In(i))
		if err := json.Unmarshal(msg, ptr.Interface()); err != nil {
			return nil, fmt.Errorf("argument %d: %v", i+1, err)
		}
		args[i] = ptr.Elem()
	}
	return args, nil
}

func proctorEncode(values []reflect.Value) string {
	var out interface{}
	if len(values) == 1 {
		out = values[0].Interface()
	} else {
		items := make([]interface{}, len(values))
		for i, v := range values {
			items[i] = v.Interface()
		}
		out = items
	}
	data, err := json.Marshal(out)
	if err != nil {
		return fmt.Sprintf("%v", out)
	}
	return string(data)
}

func proctorMatches(actual string, expected string) bool {
	var want, got interface{}
	if err := json.Unmarshal([]byte(expected), &want); err != nil {
		return actual == expected
	}
	if err := json.Unmarshal([]byte(actual), &got); err != nil {
		return false
	}
	return reflect.DeepEqual(want, got)
}

func proctorRunCase(fn reflect.Value, number int, input string, expected string) (passed bool) {
	fmt.Printf("Test %d\\n", number)
	defer func() {
		if r := recover(); r != nil {
			fmt.Println("❌ FAILED")
			fmt.Printf("Expected: %s\\nGot: panic: %v\\n", expected, r)
			passed = false
		}
	}()
	args, err := proctorDecodeArgs(fn, input)
	if err != nil {
		fmt.Println("❌ FAILED")
		fmt.Printf("Expected: %s\\nGot: invalid input: %v\\n", expected, err)
		return false
	}
	actual := proctorEncode(fn.Call(args))
	if proctorMatches(actual, expected) {
		fmt.Println("✅ PASSED")
		return true
	}
	fmt.Println("❌ FAILED")
	fmt.Printf("Expected: %s\\nGot: %s\\n", expected, actual)
	return false
}
"""


class GoHarness:
    language = "go"
    file_name = "main.go"

    def get_function_name(self, code: str) -> str:
        for match in _FUNCTION.finditer(code):
            if match.group(1) != "main":
                return match.group(1)
        return ""

    def generate(self, problem: Problem, solution_code: str, function_name: str) -> str:
        body, user_imports = _split_imports(solution_code)
        imports = list(_HARNESS_IMPORTS)
        for spec in user_imports:
            if spec not in imports:
                imports.append(spec)

        lines = ["package main", "", "import ("]
        lines.extend(f"\t{spec}" for spec in imports)
        lines.append(")")
        lines.append("")
        lines.append(body.strip("\n"))
        lines.append(_HELPERS)
        lines.append("func main() {")
        lines.append(f"\tfn := reflect.ValueOf({function_name})")
        lines.append("\tallPassed := true")
        for number, tc in enumerate(problem.test_cases, 1):
            lines.append(
                f"\tif !proctorRunCase(fn, {number}, {_go_string(tc.input)}, {_go_string(tc.expected)}) {{"
            )
            lines.append("\t\tallPassed = false")
            lines.append("\t}")
        lines.append("\tif !allPassed {")
        lines.append("\t\tos.Exit(1)")
        lines.append("\t}")
        lines.append("}")
        return "\n".join(lines) + "\n"


def _split_imports(code: str) -> tuple[str, list[str]]:
    """Strip the package clause and import declarations, and rename any user ``main``."""
    specs: list[str] = []

    def take_block(match: re.Match) -> str:
        for line in match.group(1).splitlines():
            line = line.split("//", 1)[0].strip()
            if line:
                specs.append(line)
        return ""

    def take_line(match: re.Match) -> str:
        specs.append(match.group(1).strip())
        return ""

    code = _PACKAGE.sub("", code, count=1)
    code = _IMPORT_BLOCK.sub(take_block, code)
    code = _IMPORT_LINE.sub(take_line, code)
    # the driver owns main
    code = _USER_MAIN.sub("func proctorUserMain()", code)
    return code, [" ".join(s.split()) for s in specs]


def _go_string(text: str) -> str:
    # JSON string escapes are valid Go escapes; raw UTF-8 avoids surrogate \u pairs Go rejects
    return json.dumps(text, ensure_ascii=False)
