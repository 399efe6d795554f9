"""Tests for the Judge0 executor (mocked, no real server needed)."""

from __future__ import annotations

import threading
from unittest.mock import MagicMock, patch

import httpx
import pytest

from proctor.errors import ExecutorError
from proctor.executor_judge0 import Judge0Config, Judge0Executor


def _make_response(status_id: int, stdout: str = "", stderr: str = "", compile_output: str = ""):
    """Build a mock Judge0 API response."""
    resp = MagicMock()
    resp.json.return_value = {
        "status": {"id": status_id, "description": ""},
        "stdout": stdout,
        "stderr": stderr,
        "compile_output": compile_output,
        "token": "abc123",
    }
    resp.raise_for_status = MagicMock()
    return resp


def _executor(**overrides) -> Judge0Executor:
    return Judge0Executor(Judge0Config(base_url="http://fake:2358", **overrides))


class TestJudge0Success:
    @patch("proctor.executor_judge0.httpx.post")
    def test_successful_execution(self, mock_post):
        mock_post.return_value = _make_response(3, stdout="Test 1\n✅ PASSED\n")
        result = _executor().run_source("print('hello')", 71, timeout=5)
        assert result.exit_code == 0
        assert result.stdout == "Test 1\n✅ PASSED\n"
        assert not result.timed_out

    @patch("proctor.executor_judge0.httpx.post")
    def test_payload_fields(self, mock_post):
        mock_post.return_value = _make_response(3)
        _executor(api_key="secret").run_source("print(1)", 63, timeout=5)
        call_kwargs = mock_post.call_args
        payload = call_kwargs.kwargs["json"]
        assert payload["source_code"] == "print(1)"
        assert payload["language_id"] == 63
        assert payload["wall_time_limit"] == 5
        assert call_kwargs.kwargs["headers"]["X-Auth-Token"] == "secret"

    @patch("proctor.executor_judge0.httpx.post")
    def test_output_is_capped(self, mock_post):
        mock_post.return_value = _make_response(3, stdout="x" * 50)
        result = _executor(max_output_bytes=10).run_source("", 71, timeout=5)
        assert result.stdout == "x" * 10
        assert result.truncated

    @patch("proctor.executor_judge0.httpx.post")
    def test_wall_time_clamped_to_server_limit(self, mock_post):
        mock_post.return_value = _make_response(3)
        _executor().run_source("print(1)", 71, timeout=30)
        assert mock_post.call_args.kwargs["json"]["wall_time_limit"] == 20

        _executor(max_wall_time=60).run_source("print(1)", 71, timeout=30)
        assert mock_post.call_args.kwargs["json"]["wall_time_limit"] == 30


class TestJudge0Errors:
    @patch("proctor.executor_judge0.httpx.post")
    def test_time_limit_exceeded(self, mock_post):
        mock_post.return_value = _make_response(5, stdout="Test 1\n")
        result = _executor().run_source("while True: pass", 71, timeout=1)
        assert result.timed_out
        assert result.exit_code == -1
        assert result.stdout == "Test 1\n"

    @patch("proctor.executor_judge0.httpx.post")
    def test_compilation_error(self, mock_post):
        mock_post.return_value = _make_response(6, compile_output="main.go:3: syntax error")
        result = _executor().run_source("func", 60, timeout=5)
        assert result.exit_code == -1
        assert "syntax error" in result.stderr

    @patch("proctor.executor_judge0.httpx.post")
    def test_runtime_error_nzec(self, mock_post):
        mock_post.return_value = _make_response(11, stderr="ValueError: boom")
        result = _executor().run_source("raise ValueError('boom')", 71, timeout=5)
        assert result.exit_code == 1
        assert "ValueError" in result.stderr

    @patch("proctor.executor_judge0.httpx.post")
    def test_request_timeout_is_a_timeout(self, mock_post):
        mock_post.side_effect = httpx.ReadTimeout("slow")
        result = _executor().run_source("print(1)", 71, timeout=5)
        assert result.timed_out

    @patch("proctor.executor_judge0.httpx.post")
    def test_connection_failure_raises(self, mock_post):
        mock_post.side_effect = httpx.ConnectError("refused")
        with pytest.raises(ExecutorError):
            _executor().run_source("print(1)", 71, timeout=5)

    @patch("proctor.executor_judge0.httpx.post")
    def test_non_json_body_raises(self, mock_post):
        resp = MagicMock()
        resp.raise_for_status = MagicMock()
        resp.json.side_effect = ValueError("Expecting value: line 1 column 1 (char 0)")
        mock_post.return_value = resp
        with pytest.raises(ExecutorError, match="invalid response"):
            _executor().run_source("print(1)", 71, timeout=5)

    @patch("proctor.executor_judge0.httpx.post")
    def test_cancelled_before_submit(self, mock_post):
        cancel = threading.Event()
        cancel.set()
        result = _executor().run_source("print(1)", 71, timeout=5, cancel=cancel)
        assert result.timed_out
        mock_post.assert_not_called()


class TestJudge0PollFallback:
    @patch("proctor.executor_judge0.httpx.get")
    @patch("proctor.executor_judge0.httpx.post")
    def test_poll_when_not_ready(self, mock_post, mock_get):
        # Initial response: still processing
        initial = MagicMock()
        initial.json.return_value = {
            "token": "tok123",
            "status": {"id": 2, "description": "Processing"},
        }
        initial.raise_for_status = MagicMock()
        mock_post.return_value = initial

        # Poll response: done
        mock_get.return_value = _make_response(3, stdout="done\n")

        executor = _executor(poll_interval=0.01, max_poll_attempts=3)
        result = executor.run_source("print('done')", 71, timeout=5)
        assert result.exit_code == 0
        assert result.stdout == "done\n"
        mock_get.assert_called_once()

    @patch("proctor.executor_judge0.httpx.get")
    @patch("proctor.executor_judge0.httpx.post")
    def test_poll_gives_up(self, mock_post, mock_get):
        initial = MagicMock()
        initial.json.return_value = {"token": "tok123"}
        initial.raise_for_status = MagicMock()
        mock_post.return_value = initial
        mock_get.return_value = _make_response(1)

        executor = _executor(poll_interval=0.0, max_poll_attempts=2)
        result = executor.run_source("print(1)", 71, timeout=5)
        assert result.timed_out
        assert mock_get.call_count == 2
