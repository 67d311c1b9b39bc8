"""Core module exports."""

from svnscope.core.errors import (
    ConfigError,
    ErrorCode,
    OperationError,
    SvnScopeError,
)
from svnscope.core.logging import (
    clear_run_id,
    configure_logging,
    get_logger,
    get_run_id,
    set_run_id,
)

__all__ = [
    # Errors
    "SvnScopeError",
    "ConfigError",
    "ErrorCode",
    "OperationError",
    # Logging
    "clear_run_id",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "set_run_id",
]
