"""svnscope find command - query the local index."""

from datetime import UTC, datetime

import click
from rich.console import Console
from rich.table import Table

from svnscope.cli.utils import get_app_context, reported_errors


@click.command()
@click.argument("criteria", nargs=-1)
@click.option("-t", "--target", default=".", help="Working copy path or repository URL")
@click.option("-p", "--plugin", "plugin_name", default="paths", show_default=True)
@click.option("--refresh/--no-refresh", default=True, help="Index new revisions first")
@click.option("--details", is_flag=True, help="Show author, date and message")
@click.pass_context
def find_command(
    ctx: click.Context,
    criteria: tuple[str, ...],
    target: str,
    plugin_name: str,
    refresh: bool,
    details: bool,
) -> None:
    """Print revisions of the target's project matching any CRITERIA.

    \b
    Examples (paths plugin):
        svnscope find ''                     every revision of the project
        svnscope find /proj/trunk/src/       changes below a directory
        svnscope find action:D kind:dir      deleted directories
    """
    app = get_app_context(ctx)

    with reported_errors(), app.revision_log_factory.get_revision_log(target) as revision_log:
        if refresh:
            revision_log.refresh()
        revisions = revision_log.find(plugin_name, list(criteria))
        summaries = revision_log.get_revisions_data("summary", revisions) if details and revisions else {}

    if not details:
        for revision in revisions:
            click.echo(revision)
        return

    table = Table()
    table.add_column("Revision", justify="right", style="cyan")
    table.add_column("Author")
    table.add_column("Date")
    table.add_column("Message")
    for revision in revisions:
        summary = summaries[revision]
        date = (
            datetime.fromtimestamp(summary["date"], UTC).strftime("%Y-%m-%d %H:%M")
            if summary["date"] is not None
            else ""
        )
        table.add_row(str(revision), summary["author"], date, summary["message"].strip())
    Console().print(table)
