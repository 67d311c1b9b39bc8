"""SQLModel definitions for the revision log index.

Single source of truth for all table schemas. Plugins read and write these
tables through parameterized SQL (see db.py); the models only define the
schema and its constraints.

Ownership:
- paths plugin: paths, projects, project_refs, commit_paths, commit_projects, commit_refs
- summary plugin: commits
- every plugin: one plugin_data row (its watermark)
"""

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class IndexedPath(SQLModel, table=True):
    """A file or directory path ever seen in the repository history.

    Directories carry a trailing "/" so "lib" (file) and "lib/" (directory)
    are distinct rows. Deletion is a status, rows are never removed.
    """

    __tablename__ = "paths"

    id: int | None = Field(default=None, primary_key=True)
    path: str = Field(index=True)
    path_nesting_level: int
    path_hash: str = Field(unique=True, index=True)
    ref_name: str = Field(default="")
    project_path: str = Field(default="", index=True)
    revision_added: int
    revision_deleted: int | None = None
    revision_last_seen: int


class Project(SQLModel, table=True):
    """Root folder of a trunk/branches/tags layout."""

    __tablename__ = "projects"

    id: int | None = Field(default=None, primary_key=True)
    path: str = Field(unique=True, index=True)


class ProjectRef(SQLModel, table=True):
    """Named line of history inside a project (trunk, branches/x, tags/y)."""

    __tablename__ = "project_refs"
    __table_args__ = (UniqueConstraint("project_id", "name"),)

    id: int | None = Field(default=None, primary_key=True)
    project_id: int = Field(foreign_key="projects.id", index=True)
    name: str


class Commit(SQLModel, table=True):
    """Revision metadata. Revision numbers come from the repository."""

    __tablename__ = "commits"

    revision: int = Field(primary_key=True)
    author: str = Field(default="", index=True)
    date: int | None = None  # unix timestamp
    message: str = ""


class CommitPath(SQLModel, table=True):
    """Path touched by a revision. Append-only, one row per (revision, path)."""

    __tablename__ = "commit_paths"
    __table_args__ = (UniqueConstraint("revision", "path_id"),)

    id: int | None = Field(default=None, primary_key=True)
    revision: int = Field(index=True)
    path_id: int = Field(foreign_key="paths.id", index=True)
    action: str  # A, M, D, R
    kind: str  # file, dir
    copy_revision: int | None = None
    copy_path_id: int | None = Field(default=None, foreign_key="paths.id")


class CommitProject(SQLModel, table=True):
    """Revision touched a project."""

    __tablename__ = "commit_projects"

    revision: int = Field(primary_key=True)
    project_id: int = Field(primary_key=True, foreign_key="projects.id", index=True)


class CommitRef(SQLModel, table=True):
    """Revision touched a ref."""

    __tablename__ = "commit_refs"

    revision: int = Field(primary_key=True)
    ref_id: int = Field(primary_key=True, foreign_key="project_refs.id", index=True)


class PluginData(SQLModel, table=True):
    """Last revision fully processed by a plugin."""

    __tablename__ = "plugin_data"

    name: str = Field(primary_key=True)
    last_revision: int = 0
