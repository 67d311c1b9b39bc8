"""Revision log plugins."""

from svnscope.revlog.plugins.base import (
    FLAG_VERBOSE,
    PluginBookkeeping,
    RevisionLogPlugin,
)
from svnscope.revlog.plugins.paths import PathsPlugin
from svnscope.revlog.plugins.refs import RefsPlugin
from svnscope.revlog.plugins.summary import SummaryPlugin

__all__ = [
    "FLAG_VERBOSE",
    "PathsPlugin",
    "PluginBookkeeping",
    "RefsPlugin",
    "RevisionLogPlugin",
    "SummaryPlugin",
]
