"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import sys
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

from svnscope.repository.process import ProcessResult  # noqa: E402


class FakeRunner:
    """Stands in for ProcessRunner: replays scripted results per command line.

    Scripted results for a command line are returned in order; once they run
    out, the last one served repeats.
    """

    def __init__(self) -> None:
        self.calls: list[str] = []
        self._results: dict[str, list[ProcessResult]] = {}
        self._last: dict[str, ProcessResult] = {}

    def expect(
        self, command_line: str, stdout: str = "", stderr: str = "", returncode: int = 0
    ) -> None:
        self._results.setdefault(command_line, []).append(
            ProcessResult(command_line, returncode, stdout, stderr)
        )

    def expect_error(self, command_line: str, code: int, message: str) -> None:
        self.expect(command_line, stderr=f"svn: E{code}: {message}\n", returncode=1)

    def run(self, command_line: str) -> ProcessResult:
        self.calls.append(command_line)
        queue = self._results.get(command_line)
        if queue:
            self._last[command_line] = queue.pop(0)
        elif command_line not in self._last:
            raise AssertionError(f"Unexpected command: {command_line}")
        return self._last[command_line]


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()
