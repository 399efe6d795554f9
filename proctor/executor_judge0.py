"""Judge0 REST API executor for remote harness execution."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass

import httpx

from proctor.errors import ExecutorError
from proctor.models import ExecutionResult

logger = logging.getLogger(__name__)

# Judge0 status codes
_STATUS_IN_QUEUE = 1
_STATUS_PROCESSING = 2
_STATUS_ACCEPTED = 3  # ran successfully (exit code 0)
_STATUS_TLE = 5
_STATUS_COMPILATION_ERROR = 6


@dataclass
class Judge0Config:
    base_url: str = "http://localhost:2358"
    api_key: str = ""
    poll_interval: float = 0.5
    max_poll_attempts: int = 60
    max_output_bytes: int = 1024 * 1024
    max_wall_time: float = 20.0  # server-side MAX_WALL_TIME_LIMIT


class Judge0Executor:
    """Submits a single harness source file to a Judge0 server."""

    def __init__(self, config: Judge0Config | None = None) -> None:
        self._config = config or Judge0Config()

    def run_source(
        self,
        source: str,
        language_id: int,
        timeout: float,
        cancel: threading.Event | None = None,
    ) -> ExecutionResult:
        """Run ``source`` remotely. ``cancel`` is checked before submitting and between polls."""
        if cancel is not None and cancel.is_set():
            return ExecutionResult(stdout="", stderr="", exit_code=-1, timed_out=True)
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._config.api_key:
            headers["X-Auth-Token"] = self._config.api_key

        payload: dict = {
            "source_code": source,
            "language_id": language_id,
            "stdin": "",
            "wall_time_limit": min(timeout, self._config.max_wall_time),
        }
        base = self._config.base_url.rstrip("/")

        try:
            resp = httpx.post(
                f"{base}/submissions?base64_encoded=false&wait=true",
                json=payload,
                headers=headers,
                timeout=timeout + 30,  # extra margin for network
            )
            resp.raise_for_status()
            data = resp.json()

            # If we got a token but no status, the server didn't wait; poll
            if "status" not in data or data.get("status", {}).get("id") in (
                _STATUS_IN_QUEUE,
                _STATUS_PROCESSING,
            ):
                token = data.get("token", "")
                if not token:
                    raise ExecutorError("Judge0 returned neither a status nor a token")
                data = self._poll(token, headers, base, cancel)
        except httpx.TimeoutException:
            logger.warning("Judge0 request to %s timed out", base)
            return ExecutionResult(stdout="", stderr="", exit_code=-1, timed_out=True)
        except httpx.HTTPError as e:
            raise ExecutorError(f"Judge0 request failed: {e}") from e
        except ValueError as e:
            raise ExecutorError(f"Judge0 returned an invalid response: {e}") from e

        return self._parse_response(data)

    def _poll(
        self, token: str, headers: dict[str, str], base: str, cancel: threading.Event | None
    ) -> dict:
        for _ in range(self._config.max_poll_attempts):
            if cancel is not None and cancel.is_set():
                break
            time.sleep(self._config.poll_interval)
            resp = httpx.get(
                f"{base}/submissions/{token}?base64_encoded=false",
                headers=headers,
                timeout=30,
            )
            resp.raise_for_status()
            data = resp.json()
            status_id = data.get("status", {}).get("id", 0)
            if status_id not in (_STATUS_IN_QUEUE, _STATUS_PROCESSING):
                return data
        return {"status": {"id": _STATUS_TLE}, "stdout": "", "stderr": ""}

    def _parse_response(self, data: dict) -> ExecutionResult:
        status = data.get("status", {})
        status_id = status.get("id", 0)
        stdout, out_cut = self._cap(data.get("stdout") or "")
        stderr, err_cut = self._cap(data.get("stderr") or "")
        truncated = out_cut or err_cut

        if status_id == _STATUS_ACCEPTED:
            return ExecutionResult(stdout=stdout, stderr=stderr, exit_code=0, truncated=truncated)

        if status_id == _STATUS_TLE:
            return ExecutionResult(
                stdout=stdout, stderr=stderr, exit_code=-1, timed_out=True, truncated=truncated
            )

        if status_id == _STATUS_COMPILATION_ERROR:
            compile_output, _ = self._cap(data.get("compile_output") or "")
            return ExecutionResult(
                stdout="", stderr=compile_output or "Compilation error", exit_code=-1
            )

        # Runtime errors (7-12) and other failures
        exit_code = data.get("exit_code")
        return ExecutionResult(
            stdout=stdout,
            stderr=stderr or status.get("description", "Unknown error"),
            exit_code=exit_code if isinstance(exit_code, int) and exit_code != 0 else 1,
            truncated=truncated,
        )

    def _cap(self, text: str) -> tuple[str, bool]:
        data = text.encode("utf-8")
        if len(data) <= self._config.max_output_bytes:
            return text, False
        return data[: self._config.max_output_bytes].decode("utf-8", errors="ignore"), True
