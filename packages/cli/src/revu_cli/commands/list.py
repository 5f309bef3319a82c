"""list command: table of the reviews held by the store."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from revu_cli.workspace import load_store, require_store
from revu_core.config import visible_statuses
from revu_core.errors import StructuralParseError
from revu_core.model import ReviewStatus

console = Console()

STATUS_STYLE = {
    ReviewStatus.DRAFT: "dim",
    ReviewStatus.FIXING: "yellow",
    ReviewStatus.REVIEWING: "cyan",
    ReviewStatus.FIXED: "green",
    ReviewStatus.CLOSED: "white",
}


@click.command("list")
@click.option(
    "--status",
    "statuses",
    multiple=True,
    type=click.Choice([s.value for s in ReviewStatus], case_sensitive=False),
    help="Only show reviews in this status (repeatable).",
)
@click.option("--all", "show_all", is_flag=True, help="Show reviews in every status.")
@click.option("--mine", is_flag=True, help="Only show reviews listing the configured user.")
@click.pass_context
def list_cmd(ctx, statuses: tuple[str, ...], show_all: bool, mine: bool):
    """List reviews with their status and issue counts.

    By default only reviews in the configured visible statuses (draft,
    fixing, reviewing) are shown.
    """
    store = require_store(ctx)
    config = ctx.obj.get("config", {})

    if show_all:
        wanted = None
    elif statuses:
        wanted = {ReviewStatus.parse(s) for s in statuses}
    else:
        try:
            wanted = visible_statuses(config)
        except StructuralParseError as e:
            raise click.UsageError(f"Bad visible_statuses in configuration: {e}") from e

    user = None
    if mine:
        user = config.get("user")
        if not user:
            raise click.UsageError("--mine needs a user: set `user` in .revu.yml or REVU_USER.")

    repository, result = load_store(store)
    if result.errors:
        console.print(f"[yellow]{len(result.errors)} document(s) failed to load, run `revu check`.[/yellow]")

    reviews = repository.reviews(statuses=wanted, user=user)
    if not reviews:
        console.print("[yellow]No reviews found.[/yellow]")
        return

    table = Table(title="Reviews", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="bold")
    table.add_column("Status", width=10)
    table.add_column("Shared", width=6)
    table.add_column("Extends")
    table.add_column("Issues", justify="right", width=7)
    table.add_column("Files", justify="right", width=6)

    for review in reviews:
        style = STATUS_STYLE.get(review.status, "white")
        table.add_row(
            review.name,
            f"[{style}]{review.status.value}[/{style}]",
            "yes" if review.shared else "no",
            review.extends or "",
            str(len(review.issues)),
            str(len(review.issues_by_file)),
        )

    console.print(table)
