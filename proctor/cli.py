"""CLI interface for proctor."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path

from proctor.config import TIMEOUT_PROFILES, Config
from proctor.errors import EngineError, ExecutionTimeoutError
from proctor.models import Problem, TestCase, TestResult
from proctor.registry import create_default_registry
from proctor.telemetry import setup_logging

_EXTENSIONS = {".py": "python", ".js": "javascript", ".go": "go"}


def load_problem(path: str) -> Problem:
    """Load a problem from a JSON file."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    test_cases = [
        TestCase(
            input=str(tc["input"]),
            expected=str(tc["expected"] if "expected" in tc else tc["expected_output"]),
        )
        for tc in data.get("test_cases", [])
    ]
    return Problem(
        id=data.get("id") or Path(path).stem,
        test_cases=test_cases,
        title=data.get("title", ""),
        description=data.get("description", ""),
        function_name=data.get("function_name"),
    )


def format_results(results: list[TestResult]) -> str:
    lines = []
    for i, tr in enumerate(results, 1):
        status = "PASS" if tr.passed else "FAIL"
        lines.append(f"Test {i}: {status}")
        lines.append(f"  Input:    {tr.input}")
        lines.append(f"  Expected: {tr.expected}")
        lines.append(f"  Actual:   {tr.actual[:500]}")
    passed = sum(1 for tr in results if tr.passed)
    lines.append(f"{passed}/{len(results)} test(s) passed.")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="proctor",
        description="proctor: run a solution against a problem's test cases",
    )
    parser.add_argument("--log-level", type=str, default=None)
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Run a solution against a problem")
    run_parser.add_argument("problem", help="Path to problem JSON file")
    run_parser.add_argument("solution", help="Path to the solution source file")
    run_parser.add_argument(
        "-l", "--language", type=str, default=None, help="Language (default: from file extension)"
    )
    run_parser.add_argument("--timeout", type=float, default=None, help="Timeout in seconds")
    run_parser.add_argument("--profile", choices=sorted(TIMEOUT_PROFILES), default=None)
    run_parser.add_argument("--function", type=str, default=None, help="Entry point name")
    run_parser.add_argument(
        "--executor", choices=["local", "judge0"], default=None, help="Execution backend"
    )
    run_parser.add_argument("--judge0-url", type=str, default=None, help="Judge0 API base URL")
    run_parser.add_argument("--judge0-api-key", type=str, default=None, help="Judge0 API key")
    run_parser.add_argument("--json", action="store_true", default=False, help="Print JSON")

    subparsers.add_parser("languages", help="List supported languages")

    args = parser.parse_args(argv)

    if args.command not in ("run", "languages"):
        parser.print_help()
        sys.exit(1)

    # Build config from env + CLI overrides
    overrides = {}
    if args.log_level is not None:
        overrides["log_level"] = args.log_level
    if args.command == "run":
        if args.timeout is not None:
            overrides["execution_timeout"] = args.timeout
        if args.profile is not None:
            overrides["timeout_profile"] = args.profile
        if args.executor is not None:
            overrides["executor_type"] = args.executor
        if args.judge0_url is not None:
            overrides["judge0_url"] = args.judge0_url
        if args.judge0_api_key is not None:
            overrides["judge0_api_key"] = args.judge0_api_key

    try:
        config = Config.from_env(**overrides)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(config.log_level, config.log_json)
    registry = create_default_registry(config)

    if args.command == "languages":
        for language in sorted(registry.get_supported_languages()):
            print(language)
        return

    language = args.language or _EXTENSIONS.get(Path(args.solution).suffix)
    if language is None:
        print(f"Error: cannot infer language of {args.solution}; pass --language", file=sys.stderr)
        sys.exit(1)

    problem = load_problem(args.problem)
    if args.function:
        problem.function_name = args.function
    code = Path(args.solution).read_text(encoding="utf-8")

    error: EngineError | None = None
    try:
        results, all_passed = registry.get_runner(language).execute_tests(problem, code)
    except ExecutionTimeoutError as e:
        results, all_passed, error = e.results, False, e
    except EngineError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    if args.json:
        payload: dict = {
            "passed": all_passed,
            "test_results": [asdict(r) for r in results],
        }
        if error is not None:
            payload["error"] = str(error)
        print(json.dumps(payload, ensure_ascii=False))
    else:
        print(format_results(results))
        if error is not None:
            print(f"Error: {error}", file=sys.stderr)

    if not all_passed:
        sys.exit(1)


if __name__ == "__main__":
    main()
