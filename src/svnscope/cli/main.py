"""svnscope CLI - svnscope command."""

import click

from svnscope.cli.cache import cache_group
from svnscope.cli.find import find_command
from svnscope.cli.index import index_command, stats_command
from svnscope.config.loader import load_config
from svnscope.context import AppContext
from svnscope.core.errors import ConfigError
from svnscope.core.logging import configure_logging, set_run_id


@click.group()
@click.version_option(version="0.1.0", prog_name="svnscope")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """svnscope - Local index of Subversion repository history."""
    try:
        config = load_config()
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    configure_logging(config.logging, verbose=verbose)
    set_run_id()

    # Callers (tests, embedding) may supply a ready context
    if not isinstance(ctx.obj, AppContext):
        ctx.obj = AppContext.create(config)


cli.add_command(index_command, name="index")
cli.add_command(stats_command, name="stats")
cli.add_command(find_command, name="find")
cli.add_command(cache_group, name="cache")


if __name__ == "__main__":
    cli()
