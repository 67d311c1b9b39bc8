"""Application wiring: one object holding the configured collaborators."""

from __future__ import annotations

from dataclasses import dataclass

from rich.console import Console

from svnscope.cache.manager import CacheManager
from svnscope.config.models import SvnScopeConfig
from svnscope.repository.connector import Confirm, Connector, ask_confirmation
from svnscope.repository.process import ProcessRunner
from svnscope.revlog.revision_log import RevisionLogFactory


@dataclass
class AppContext:
    config: SvnScopeConfig
    cache_manager: CacheManager
    connector: Connector
    revision_log_factory: RevisionLogFactory

    @classmethod
    def create(
        cls,
        config: SvnScopeConfig,
        *,
        runner: ProcessRunner | None = None,
        confirm: Confirm = ask_confirmation,
        console: Console | None = None,
    ) -> AppContext:
        """Build the collaborators from configuration.

        ``runner`` and ``confirm`` replace the subprocess runner and the
        interactive prompt (tests, non-interactive callers).
        """
        cache_manager = CacheManager(config.cache.path, enabled=config.cache.enabled)
        connector = Connector(
            config.connector,
            runner or ProcessRunner(timeout=config.connector.command_timeout_sec),
            cache_manager,
            confirm=confirm,
            console=console,
        )
        return cls(
            config=config,
            cache_manager=cache_manager,
            connector=connector,
            revision_log_factory=RevisionLogFactory(config, connector),
        )
