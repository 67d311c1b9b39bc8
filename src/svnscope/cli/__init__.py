"""svnscope command line interface."""
