"""Tests for svn command error parsing."""

from svnscope.repository.errors import (
    SVN_ERR_WC_UPGRADE_REQUIRED,
    RepositoryCommandError,
    WorkingCopyInfoError,
)


class TestRepositoryCommandError:
    def test_parses_code_and_message(self) -> None:
        error = RepositoryCommandError(
            "svn --non-interactive info", "svn: E155007: '/tmp/x' is not a working copy\n"
        )

        assert error.code == 155007
        assert error.error_message == "'/tmp/x' is not a working copy"
        assert error.command == "svn --non-interactive info"

    def test_first_code_wins(self) -> None:
        error = RepositoryCommandError(
            "svn log",
            "svn: E155036: Please see the 'svn upgrade' command\n"
            "svn: E155036: The working copy at '/wc' is too old\n",
        )

        assert error.code == SVN_ERR_WC_UPGRADE_REQUIRED
        assert error.is_upgrade_required is True
        assert error.error_message.splitlines() == [
            "Please see the 'svn upgrade' command",
            "The working copy at '/wc' is too old",
        ]

    def test_output_without_code(self) -> None:
        error = RepositoryCommandError("svn log", "Command timed out after 5s")

        assert error.code == 0
        assert error.is_upgrade_required is False
        assert error.error_message == "Command timed out after 5s"

    def test_str_carries_command_and_message(self) -> None:
        error = RepositoryCommandError("svn log", "svn: E170000: URL doesn't exist\n")

        assert str(error) == "Command:\nsvn log\nError #170000:\nURL doesn't exist"


class TestWorkingCopyInfoError:
    def test_message(self) -> None:
        error = WorkingCopyInfoError("/path/to/working-copy")

        assert str(error) == (
            'The directory "/path/to/working-copy" not found in "svn info" command results.'
        )
