"""Per-language customization points for the generic test runner."""

from __future__ import annotations

from dataclasses import dataclass, field

from proctor.config import Config
from proctor.executor_base import HarnessGenerator
from proctor.harness.golang import GoHarness
from proctor.harness.javascript import JavaScriptHarness
from proctor.harness.python import PythonHarness


@dataclass(frozen=True)
class LanguageSpec:
    language: str
    harness: HarnessGenerator
    # "{file}" is the harness path; "{python}", "{node}" and "{go}" are the
    # configured toolchain commands
    command: tuple[str, ...]
    judge0_language_id: int = 0
    env: dict[str, str] = field(default_factory=dict)

    @property
    def file_name(self) -> str:
        return self.harness.file_name

    def build_command(self, file_path: str, config: Config) -> list[str]:
        values = {
            "file": file_path,
            "python": config.python_command,
            "node": config.node_command,
            "go": config.go_command,
        }
        return [part.format(**values) for part in self.command]


PYTHON = LanguageSpec(
    language="python",
    harness=PythonHarness(),
    command=("{python}", "-u", "{file}"),
    judge0_language_id=71,  # Python 3.8.1
    env={"PYTHONIOENCODING": "utf-8"},
)

JAVASCRIPT = LanguageSpec(
    language="javascript",
    harness=JavaScriptHarness(),
    command=("{node}", "{file}"),
    judge0_language_id=63,  # JavaScript (Node.js 12.14.0)
)

GO = LanguageSpec(
    language="go",
    harness=GoHarness(),
    command=("{go}", "run", "{file}"),
    judge0_language_id=60,  # Go 1.13.5
)

BUILTIN_LANGUAGES: tuple[LanguageSpec, ...] = (GO, PYTHON, JAVASCRIPT)
