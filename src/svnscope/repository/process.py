"""Blocking execution of external commands."""

from __future__ import annotations

import shlex
import subprocess
from dataclasses import dataclass

DEFAULT_TIMEOUT_SEC = 1200


@dataclass(frozen=True, slots=True)
class ProcessResult:
    """Outcome of one finished process."""

    command_line: str
    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0


class ProcessRunner:
    """Runs a shell-quoted command line without a shell and waits for it."""

    def __init__(self, timeout: int = DEFAULT_TIMEOUT_SEC) -> None:
        self.timeout = timeout

    def run(self, command_line: str) -> ProcessResult:
        args = shlex.split(command_line)
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            return ProcessResult(
                command_line=command_line,
                returncode=-1,
                stdout="",
                stderr=f"Command timed out after {self.timeout}s",
            )
        except (FileNotFoundError, PermissionError) as e:
            return ProcessResult(
                command_line=command_line,
                returncode=-1,
                stdout="",
                stderr=f"Unable to start {args[0]}: {e}",
            )

        return ProcessResult(
            command_line=command_line,
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )
