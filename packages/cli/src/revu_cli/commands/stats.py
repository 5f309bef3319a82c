"""stats command: aggregate issues across reviews."""

from __future__ import annotations

from collections import Counter

import click
from rich.console import Console
from rich.table import Table

from revu_cli.workspace import load_store, require_store
from revu_core.model import IssueStatus

console = Console()

_STATUS_STYLE = {IssueStatus.TO_RESOLVE: "red", IssueStatus.RESOLVED: "yellow", IssueStatus.CLOSED: "green"}


@click.command("stats")
@click.option("--review", "review_name", default=None, help="Only count issues of this review.")
@click.option("--top", default=10, show_default=True, help="Number of most flagged files to show.")
@click.pass_context
def stats_cmd(ctx, review_name: str | None, top: int):
    """Show issue counts by status, priority and file.

    Useful to see which files keep collecting review issues and how much of
    the backlog is still open.
    """
    store = require_store(ctx)
    repository, _ = load_store(store)

    if review_name is not None:
        review = repository.lookup_by_name(review_name)
        if review is None or review.is_stub:
            raise click.ClickException(f"No review named {review_name!r}.")
        reviews = [review]
    else:
        reviews = repository.reviews()

    issues = [issue for review in reviews for issue in review.issues]
    if not issues:
        console.print("[yellow]No issues recorded.[/yellow]")
        return

    status_counter: Counter[IssueStatus] = Counter(i.status for i in issues)
    priority_counter: Counter[str] = Counter(i.priority or "(none)" for i in issues)
    file_counter: Counter[str] = Counter(i.file_path or "(no file)" for i in issues)

    # --- Summary ---
    console.print(f"\n[bold]Issue stats for {len(reviews)} review(s)[/bold]")
    console.print(f"  Total issues: {len(issues)}")
    console.print(f"  Still open:   {status_counter.get(IssueStatus.TO_RESOLVE, 0)}")

    # --- Status breakdown ---
    status_table = Table(title="Status Breakdown", show_header=True)
    status_table.add_column("Status", style="bold")
    status_table.add_column("Count", justify="right")
    status_table.add_column("% of total", justify="right")
    for status in IssueStatus:
        count = status_counter.get(status, 0)
        style = _STATUS_STYLE[status]
        status_table.add_row(f"[{style}]{status.value}[/{style}]", str(count), f"{count / len(issues) * 100:.1f}%")
    console.print(status_table)

    # --- Priority breakdown ---
    priority_table = Table(title="Priority Breakdown", show_header=True)
    priority_table.add_column("Priority", style="bold")
    priority_table.add_column("Count", justify="right")
    for priority, count in _by_priority_order(priority_counter, reviews):
        priority_table.add_row(priority, str(count))
    console.print(priority_table)

    # --- Most flagged files ---
    file_table = Table(title=f"Top {top} Most Flagged Files", show_header=True)
    file_table.add_column("File")
    file_table.add_column("Issues", justify="right")
    for file_path, count in file_counter.most_common(top):
        file_table.add_row(file_path, str(count))
    console.print(file_table)


def _by_priority_order(counter: Counter[str], reviews) -> list[tuple[str, int]]:
    """Order priorities as the referentials rank them; unknown names go last, alphabetically."""
    rank: dict[str, int] = {}
    for review in reviews:
        for priority in review.data_referential.priorities:
            rank.setdefault(priority.name, priority.order)
    return sorted(counter.items(), key=lambda item: (item[0] not in rank, rank.get(item[0], 0), item[0]))
