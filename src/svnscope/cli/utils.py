"""CLI utilities."""

from collections.abc import Generator
from contextlib import contextmanager

import click
import structlog

from svnscope.context import AppContext
from svnscope.core.errors import ErrorCode, OperationError, SvnScopeError
from svnscope.core.logging import get_log_file_path
from svnscope.repository.errors import (
    InvalidUrlError,
    RepositoryCommandError,
    RepositoryError,
    WorkingCopyInfoError,
)
from svnscope.revlog.errors import (
    MalformedLogEntryError,
    MissingRevisionsError,
    ProjectNotFoundError,
    RevisionLogError,
    UnknownPluginError,
    UnsupportedCriterionError,
)

logger = structlog.get_logger()

# Most specific first
_ERROR_CODES: list[tuple[type[Exception], ErrorCode]] = [
    (InvalidUrlError, ErrorCode.INVALID_URL),
    (WorkingCopyInfoError, ErrorCode.WC_INFO_MISSING),
    (MalformedLogEntryError, ErrorCode.MALFORMED_LOG),
    (UnsupportedCriterionError, ErrorCode.UNSUPPORTED_CRITERION),
    (ProjectNotFoundError, ErrorCode.PROJECT_NOT_FOUND),
    (MissingRevisionsError, ErrorCode.MISSING_REVISIONS),
    (UnknownPluginError, ErrorCode.UNKNOWN_PLUGIN),
    (RepositoryError, ErrorCode.SVN_COMMAND_FAILED),
    (RevisionLogError, ErrorCode.INTERNAL_ERROR),
]


def get_app_context(ctx: click.Context) -> AppContext:
    """AppContext stored on the click context by the ``svnscope`` group."""
    app = ctx.find_object(AppContext)
    if app is None:
        raise click.ClickException("Application context is not initialized.")
    return app


def to_operation_error(error: RepositoryError | RevisionLogError) -> OperationError:
    """Attach an error code to a repository or index failure."""
    if isinstance(error, RepositoryCommandError):
        if error.is_upgrade_required:
            return OperationError.wrap(
                error, ErrorCode.WC_UPGRADE_REQUIRED, svn_code=error.code
            )
        return OperationError.wrap(
            error, ErrorCode.SVN_COMMAND_FAILED, retryable=True, svn_code=error.code
        )

    code = next(code for kind, code in _ERROR_CODES if isinstance(error, kind))
    return OperationError.wrap(error, code)


@contextmanager
def reported_errors() -> Generator[None, None, None]:
    """Turn domain errors into a single-message CLI failure."""
    try:
        yield
    except (RepositoryError, RevisionLogError) as e:
        error = to_operation_error(e)
        logger.debug("operation_failed", **error.to_dict())
        message = str(error)
        if (log_file := get_log_file_path()) is not None:
            message += f"\nSee {log_file} for details."
        raise click.ClickException(message) from e
    except SvnScopeError as e:
        raise click.ClickException(str(e)) from e
