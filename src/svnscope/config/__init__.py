"""Config module exports."""

from svnscope.config.loader import SvnScopeSettings, load_config
from svnscope.config.models import (
    CacheConfig,
    ConnectorConfig,
    IndexConfig,
    LoggingConfig,
    SvnScopeConfig,
)

__all__ = [
    "load_config",
    "SvnScopeConfig",
    "SvnScopeSettings",
    "ConnectorConfig",
    "CacheConfig",
    "IndexConfig",
    "LoggingConfig",
]
