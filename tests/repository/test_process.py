"""Tests for ProcessRunner."""

from __future__ import annotations

import subprocess
import sys
from unittest.mock import MagicMock, patch

from svnscope.repository.process import ProcessRunner


class TestProcessRunner:
    def test_runs_without_shell(self) -> None:
        completed = subprocess.CompletedProcess(args=[], returncode=0, stdout="OK", stderr="")

        with patch("svnscope.repository.process.subprocess.run", return_value=completed) as run:
            result = ProcessRunner(timeout=30).run("svn --non-interactive info --xml '/a b'")

        args, kwargs = run.call_args
        assert args[0] == ["svn", "--non-interactive", "info", "--xml", "/a b"]
        assert kwargs["timeout"] == 30
        assert "shell" not in kwargs
        assert result.success is True
        assert result.stdout == "OK"

    def test_quoted_single_quote_survives(self) -> None:
        completed = subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr="")

        with patch("svnscope.repository.process.subprocess.run", return_value=completed) as run:
            ProcessRunner().run("svn info 'it'\"'\"'s'")

        assert run.call_args[0][0] == ["svn", "info", "it's"]

    def test_timeout_is_failure(self) -> None:
        with patch(
            "svnscope.repository.process.subprocess.run",
            side_effect=subprocess.TimeoutExpired(cmd="svn", timeout=1),
        ):
            result = ProcessRunner(timeout=1).run("svn log")

        assert result.success is False
        assert "timed out" in result.stderr

    def test_missing_binary_is_failure(self) -> None:
        result = ProcessRunner().run("definitely-not-an-svn-binary-xyz --version")

        assert result.success is False
        assert "Unable to start" in result.stderr

    def test_real_process(self) -> None:
        command_line = f"'{sys.executable}' -c 'print(\"hi\")'"

        result = ProcessRunner(timeout=30).run(command_line)

        assert result.returncode == 0
        assert result.stdout.strip() == "hi"

    def test_nonzero_exit(self) -> None:
        completed = MagicMock(returncode=1, stdout="", stderr="svn: E1: boom")

        with patch("svnscope.repository.process.subprocess.run", return_value=completed):
            result = ProcessRunner().run("svn log")

        assert result.success is False
        assert result.stderr == "svn: E1: boom"
