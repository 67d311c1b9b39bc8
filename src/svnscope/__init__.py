"""svnscope - local, incrementally maintained index of Subversion history."""

__version__ = "0.1.0"
