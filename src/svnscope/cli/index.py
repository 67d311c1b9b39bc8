"""svnscope index / stats commands - bring the local index up to date."""

import click
from rich.console import Console
from rich.table import Table

from svnscope.cli.utils import get_app_context, reported_errors


@click.command()
@click.argument("target", default=".")
@click.pass_context
def index_command(ctx: click.Context, target: str) -> None:
    """Index revisions committed since the last run.

    TARGET is a working copy path or repository URL (default: current directory).
    """
    app = get_app_context(ctx)
    console = Console(stderr=True)

    with reported_errors(), app.revision_log_factory.get_revision_log(target) as revision_log:
        with console.status("[cyan]Indexing revisions...[/cyan]", spinner="dots"):
            fetched = revision_log.refresh()
        last_revision = revision_log.get_last_revision()

    if fetched:
        console.print(f"  [green]✓[/green] {fetched} revision(s) indexed, up to r{last_revision}")
    else:
        console.print(f"  [green]✓[/green] Already up to date at r{last_revision}")


@click.command()
@click.argument("target", default=".")
@click.pass_context
def stats_command(ctx: click.Context, target: str) -> None:
    """Index new revisions and show what each plugin recorded.

    TARGET is a working copy path or repository URL (default: current directory).
    """
    app = get_app_context(ctx)

    with reported_errors(), app.revision_log_factory.get_revision_log(target) as revision_log:
        revision_log.refresh()

        table = Table(title=f"{revision_log.project_path} ({revision_log.ref_name or 'no ref'})")
        table.add_column("Plugin", style="cyan")
        table.add_column("Last revision", justify="right")
        table.add_column("Statistic")
        table.add_column("Count", justify="right")

        for plugin in revision_log.plugins:
            statistics = plugin.get_statistics() or {"-": 0}
            for position, (name, count) in enumerate(sorted(statistics.items())):
                table.add_row(
                    plugin.name if position == 0 else "",
                    str(plugin.get_last_revision()) if position == 0 else "",
                    name,
                    str(count),
                )

    Console().print(table)
