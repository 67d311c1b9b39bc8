"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (SVNSCOPE__SECTION__KEY)
3. Working directory YAML (.svnscope/config.yaml)
4. Global YAML (~/.config/svnscope/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    SVNSCOPE__<SECTION>__<KEY>=<VALUE>

Examples:
    SVNSCOPE__LOGGING__LEVEL=DEBUG
    SVNSCOPE__CONNECTOR__USERNAME=alice
    SVNSCOPE__CACHE__ENABLED=false
    SVNSCOPE__INDEX__LOG_BATCH_SIZE=500
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DEFAULT_WORKING_DIRECTORY = "~/.svnscope"


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        SVNSCOPE__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG traces every svn command and cache lookup.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ConnectorConfig(BaseModel):
    """Subversion client configuration.

    Env vars:
        SVNSCOPE__CONNECTOR__USERNAME: Passed as --username when non-empty
        SVNSCOPE__CONNECTOR__PASSWORD: Passed as --password when non-empty
        SVNSCOPE__CONNECTOR__COMMAND_TIMEOUT_SEC: Wall-clock ceiling per svn call
        SVNSCOPE__CONNECTOR__LAST_REVISION_CACHE_DURATION: TTL of "svn info" lookups
    """

    binary: str = Field(
        default="svn",
        description="Subversion client executable.",
    )
    username: str = Field(default="", description="Repository username.")
    password: str = Field(default="", description="Repository password.")
    command_timeout_sec: int = Field(
        default=1200,
        description="Wall-clock ceiling for a single svn invocation. "
        "Generous on purpose: initial indexing of big repositories is slow.",
    )
    last_revision_cache_duration: str = Field(
        default="10 minutes",
        description="How long the repository head revision is cached. "
        "TRADEOFF: Longer = fewer round-trips but newer commits show up later.",
    )

    @field_validator("command_timeout_sec")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"Timeout must be positive, got {v}")
        return v


class CacheConfig(BaseModel):
    """Result cache configuration.

    Env vars:
        SVNSCOPE__CACHE__ENABLED: Disable to bypass all file caching
        SVNSCOPE__CACHE__DIRECTORY: Where cache files and databases are stored
    """

    enabled: bool = Field(
        default=True,
        description="When false, cache reads always miss and writes are skipped.",
    )
    directory: str = Field(
        default=DEFAULT_WORKING_DIRECTORY,
        description="Cache root. Holds one file per cache entry.",
    )

    @property
    def path(self) -> Path:
        return Path(self.directory).expanduser()


class IndexConfig(BaseModel):
    """Revision log index configuration.

    Env vars:
        SVNSCOPE__INDEX__LOG_BATCH_SIZE: Revisions per "svn log" call
        SVNSCOPE__INDEX__DATABASE_DIRECTORY: Override database location
    """

    log_batch_size: int = Field(
        default=1000,
        description="Revisions fetched per svn log call. "
        "TRADEOFF: Larger batches = fewer calls but more memory per batch.",
    )
    database_directory: str | None = Field(
        default=None,
        description="Where per-repository SQLite files live. Default: cache directory.",
    )

    @field_validator("log_batch_size")
    @classmethod
    def validate_batch_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Batch size must be at least 1, got {v}")
        return v


class SvnScopeConfig(BaseModel):
    """Root configuration for svnscope.

    All settings can be configured via:
    1. Environment variables: SVNSCOPE__SECTION__KEY
    2. YAML config files (working directory or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    connector: ConnectorConfig = Field(default_factory=ConnectorConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    index: IndexConfig = Field(default_factory=IndexConfig)

    @property
    def database_path(self) -> Path:
        if self.index.database_directory:
            return Path(self.index.database_directory).expanduser()
        return self.cache.path
