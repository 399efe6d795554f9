"""Factory for creating test runners based on configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from proctor.executor import LocalExecutor
from proctor.runner import TestRunner

if TYPE_CHECKING:
    from proctor.config import Config
    from proctor.languages import LanguageSpec


def create_runner(spec: LanguageSpec, config: Config) -> TestRunner:
    """Create a runner for ``spec`` backed by config.executor_type."""
    if config.executor_type == "judge0":
        from proctor.executor_judge0 import Judge0Config, Judge0Executor
        from proctor.runner import Judge0TestRunner

        return Judge0TestRunner(
            spec,
            Judge0Executor(
                Judge0Config(
                    base_url=config.judge0_url,
                    api_key=config.judge0_api_key,
                    max_output_bytes=config.max_output_bytes,
                )
            ),
            config=config,
        )
    return TestRunner(spec, LocalExecutor(max_output_bytes=config.max_output_bytes), config=config)
