"""Subprocess-based executor with a wall-clock deadline and output caps."""

from __future__ import annotations

import logging
import subprocess
import threading
import time

import psutil

from proctor.errors import ToolchainNotFoundError
from proctor.models import ExecutionResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_OUTPUT_BYTES = 1024 * 1024
_READ_CHUNK = 64 * 1024


class LocalExecutor:
    """Runs a command locally, killing its whole process tree on timeout.

    ``go run`` and similar drivers spawn the real program as a child, so the
    tree is collected before the parent is killed.
    """

    def __init__(
        self,
        max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES,
        poll_interval: float = 0.05,
        kill_grace: float = 2.0,
    ) -> None:
        self.max_output_bytes = max_output_bytes
        self.poll_interval = poll_interval
        self.kill_grace = kill_grace

    def run(
        self,
        command: list[str],
        timeout: float,
        cwd: str | None = None,
        env: dict[str, str] | None = None,
        cancel: threading.Event | None = None,
    ) -> ExecutionResult:
        try:
            proc = subprocess.Popen(
                command,
                cwd=cwd,
                env=env,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            raise ToolchainNotFoundError(command, str(e)) from e

        out = _StreamCollector(proc.stdout, self.max_output_bytes)
        err = _StreamCollector(proc.stderr, self.max_output_bytes)
        out.start()
        err.start()

        deadline = time.monotonic() + timeout
        timed_out = False
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0 or (cancel is not None and cancel.is_set()):
                timed_out = True
                break
            try:
                proc.wait(timeout=min(self.poll_interval, remaining))
                break
            except subprocess.TimeoutExpired:
                continue

        if timed_out:
            logger.warning("Killing %s (pid %d) after %.1fs", command[0], proc.pid, timeout)
            self._kill_tree(proc)

        out.join(self.kill_grace)
        err.join(self.kill_grace)
        return ExecutionResult(
            stdout=out.text(),
            stderr=err.text(),
            exit_code=-1 if timed_out else proc.returncode,
            timed_out=timed_out,
            truncated=out.truncated or err.truncated,
        )

    def _kill_tree(self, proc: subprocess.Popen) -> None:
        try:
            children = psutil.Process(proc.pid).children(recursive=True)
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            children = []
        for child in children:
            try:
                child.kill()
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                pass
        proc.kill()
        proc.wait()
        psutil.wait_procs(children, timeout=self.kill_grace)


class _StreamCollector(threading.Thread):
    """Drains a pipe, keeping at most ``limit`` bytes."""

    def __init__(self, stream, limit: int) -> None:
        super().__init__(daemon=True)
        self._stream = stream
        self._limit = limit
        self._chunks: list[bytes] = []
        self._size = 0
        self.truncated = False

    def run(self) -> None:
        with self._stream:
            while chunk := self._stream.read1(_READ_CHUNK):
                room = self._limit - self._size
                if room <= 0:
                    self.truncated = True
                    continue  # keep draining so the child never blocks on a full pipe
                if len(chunk) > room:
                    chunk = chunk[:room]
                    self.truncated = True
                self._chunks.append(chunk)
                self._size += len(chunk)

    def text(self) -> str:
        return b"".join(self._chunks).decode("utf-8", errors="replace")
