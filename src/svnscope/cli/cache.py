"""svnscope cache commands - manage cached svn results."""

import click
from rich.console import Console

from svnscope.cli.utils import get_app_context


@click.group()
def cache_group() -> None:
    """Manage cached svn command results."""


@click.command()
@click.option("-n", "--namespace", default=None, help="Only remove entries of this namespace")
@click.pass_context
def clear_command(ctx: click.Context, namespace: str | None) -> None:
    """Remove cached entries."""
    app = get_app_context(ctx)
    removed = app.cache_manager.clear(namespace)

    console = Console(stderr=True)
    if removed:
        console.print(f"  [green]✓[/green] Removed {removed} cache entr{'y' if removed == 1 else 'ies'}")
    else:
        console.print("[yellow]Nothing to clear[/yellow]")


cache_group.add_command(clear_command, name="clear")
