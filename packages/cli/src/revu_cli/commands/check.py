"""check command: load every stored document and report failures."""

from __future__ import annotations

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from revu_cli.workspace import load_store, require_store

console = Console()


@click.command("check")
@click.pass_context
def check_cmd(ctx):
    """Validate every review document in the store.

    Exits with status 1 when at least one document fails to load, so the
    command can gate CI. Issues outside their review's file scope or pointing
    at unknown referential entries are reported as warnings.
    """
    store = require_store(ctx)
    _, result = load_store(store)

    _print_issue_problems(result.reviews)

    if result.ok:
        console.print(f"[green]{len(result.reviews)} review(s) loaded, no errors.[/green]")
        return

    table = Table(title="Review documents with errors", show_header=True, header_style="bold red")
    table.add_column("Source")
    table.add_column("Review")
    table.add_column("Error", style="red")
    table.add_column("Message")

    for source, error in sorted(result.errors.items()):
        table.add_row(escape(source), escape(error.review_name or ""), type(error).__name__, escape(str(error)))

    console.print(table)
    console.print(f"{len(result.reviews)} review(s) loaded, [red]{len(result.errors)} failed[/red].")
    ctx.exit(1)


def _print_issue_problems(reviews) -> None:
    rows = [(review.name, issue, message) for review in reviews for issue, message in review.issue_problems()]
    if not rows:
        return

    table = Table(title="Issue warnings", show_header=True, header_style="bold yellow")
    table.add_column("Review", no_wrap=True)
    table.add_column("Issue", no_wrap=True)
    table.add_column("Problem", style="yellow")
    for name, issue, message in rows:
        table.add_row(escape(name), escape(issue.summary), escape(message))
    console.print(table)
