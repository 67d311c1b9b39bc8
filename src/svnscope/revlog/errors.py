"""Revision log error types."""


class RevisionLogError(Exception):
    """Base error for revision log indexing and queries."""

    pass


class MalformedLogEntryError(RevisionLogError):
    """svn log output does not match what the indexer relies on."""

    pass


class UnsupportedCriterionError(RevisionLogError):
    """A find() criterion uses a field the plugin does not index."""

    def __init__(self, field: str, plugin_name: str) -> None:
        super().__init__(f'Searching by "{field}" is not supported by "{plugin_name}" plugin.')
        self.field = field
        self.plugin_name = plugin_name


class ProjectNotFoundError(RevisionLogError):
    """Project path is not in the index."""

    def __init__(self, project_path: str) -> None:
        super().__init__(f'The project with "{project_path}" path not found.')
        self.project_path = project_path


class MissingRevisionsError(RevisionLogError):
    """Requested revisions have no data in a plugin."""

    def __init__(self, plugin_name: str, revisions: list[int]) -> None:
        listed = ", ".join(str(revision) for revision in revisions)
        super().__init__(f'Revision(-s) "{listed}" not found by "{plugin_name}" plugin.')
        self.plugin_name = plugin_name
        self.revisions = revisions


class UnknownPluginError(RevisionLogError):
    """No plugin registered under the given name."""

    def __init__(self, name: str) -> None:
        super().__init__(f'The "{name}" revision log plugin is unknown.')
        self.name = name


class DuplicatePluginError(RevisionLogError):
    """A plugin with the same name is already registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f'The "{name}" revision log plugin is already registered.')
        self.name = name
