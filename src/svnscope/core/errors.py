"""svnscope error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Repository (svn client, working copy)
- 4xxx: Index (revision log, plugins, queries)
- 9xxx: Internal

Lower layers raise plain exceptions of their own packages; the CLI turns
them into an OperationError so every failure reports a code.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Repository (3xxx)
    SVN_COMMAND_FAILED = 3001
    WC_UPGRADE_REQUIRED = 3002
    INVALID_URL = 3003
    WC_INFO_MISSING = 3004

    # Index (4xxx)
    MALFORMED_LOG = 4001
    UNSUPPORTED_CRITERION = 4002
    PROJECT_NOT_FOUND = 4003
    MISSING_REVISIONS = 4004
    UNKNOWN_PLUGIN = 4005

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class SvnScopeError(Exception):
    """Base error with structured context for CLI and JSON output."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(SvnScopeError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class OperationError(SvnScopeError):
    """A repository or index operation failed."""

    @classmethod
    def wrap(
        cls, error: Exception, code: ErrorCode, *, retryable: bool = False, **details: Any
    ) -> "OperationError":
        return cls(
            code=code,
            message=str(error),
            retryable=retryable,
            details={"exception": type(error).__name__, **details},
        )
