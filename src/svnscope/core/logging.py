"""Structured logging for svnscope.

Everything logs through structlog; records are rendered by stdlib handlers
so console and file outputs can filter at different levels. Every record of
one CLI invocation carries the same ``run_id``.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import structlog

if TYPE_CHECKING:
    from svnscope.config.models import LoggingConfig, LogOutputConfig

_run_id: ContextVar[str | None] = ContextVar("run_id", default=None)

# First file output of the active configuration
_log_file_path: Path | None = None

# Third-party loggers kept quiet unless they report a problem
_QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool")


def get_run_id() -> str | None:
    return _run_id.get()


def set_run_id(run_id: str | None = None) -> str:
    """Set or generate the id correlating one invocation's records."""
    rid = run_id or uuid4().hex[:12]
    _run_id.set(rid)
    return rid


def clear_run_id() -> None:
    _run_id.set(None)


def get_log_file_path() -> Path | None:
    """File the CLI can point users to after a failure, if one is configured."""
    return _log_file_path


def _add_run_id(
    _logger: structlog.types.WrappedLogger,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    if rid := get_run_id():
        event_dict["run_id"] = rid
    return event_dict


def configure_logging(config: LoggingConfig | None = None, *, verbose: bool = False) -> None:
    """Install structlog and the configured outputs on the root logger.

    Args:
        config: Logging configuration; defaults to INFO on stderr.
        verbose: Force DEBUG for the root level and every output.
    """
    global _log_file_path
    from svnscope.config.models import LoggingConfig

    config = config or LoggingConfig()
    root_level = logging.DEBUG if verbose else logging.getLevelName(config.level)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
        _add_run_id,  # type: ignore[list-item]
    ]
    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(root_level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _log_file_path = None
    for output in config.outputs:
        handler = _create_handler(output.destination)
        if verbose:
            handler.setLevel(logging.DEBUG)
        else:
            handler.setLevel(logging.getLevelName(output.level or config.level))
        handler.setFormatter(_create_formatter(output, shared_processors))
        root_logger.addHandler(handler)

        if isinstance(handler, logging.FileHandler) and _log_file_path is None:
            _log_file_path = Path(output.destination)


def _create_handler(destination: str) -> logging.Handler:
    if destination == "stderr":
        return logging.StreamHandler(sys.stderr)
    if destination == "stdout":
        return logging.StreamHandler(sys.stdout)
    path = Path(destination)
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, mode="a", encoding="utf-8")


def _create_formatter(
    output: LogOutputConfig, shared_processors: list[structlog.types.Processor]
) -> logging.Formatter:
    if output.format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        stream = sys.stdout if output.destination == "stdout" else sys.stderr
        is_terminal = output.destination in ("stderr", "stdout") and stream.isatty()
        renderer = structlog.dev.ConsoleRenderer(colors=is_terminal, pad_event_to=0)
    return structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger=name)
    return logger  # type: ignore[no-any-return]
