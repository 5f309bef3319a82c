"""format command: rewrite stored documents in canonical form."""

from __future__ import annotations

import click
from rich.console import Console
from rich.markup import escape

from revu_cli.workspace import require_store
from revu_core.loader import dump_reviews, load_documents
from revu_core.repository import ReviewRepository

console = Console()


@click.command("format")
@click.option("--dry-run", is_flag=True, help="Only report which documents would change.")
@click.pass_context
def format_cmd(ctx, dry_run: bool):
    """Re-serialize every review so stored documents are canonical.

    Documents that fail to load are left untouched.
    """
    store = require_store(ctx)
    config = ctx.obj.get("config", {})

    documents = store.list_documents()
    current = {doc.source: doc for doc in documents}
    result = load_documents([(doc.source, doc.content) for doc in documents], ReviewRepository())

    canonical = dump_reviews(result.reviews, indent=config.get("indent", 2))

    changed = 0
    for name, content in canonical.items():
        doc = current[result.sources[name]]
        if doc.content == content:
            continue
        changed += 1
        if dry_run:
            console.print(f"would reformat [bold]{escape(name)}[/bold]")
        else:
            # Save under the key it was read from so the old document is replaced.
            store.save(doc.key, content)
            console.print(f"reformatted [bold]{escape(name)}[/bold]")

    if result.errors:
        console.print(f"[yellow]Skipped {len(result.errors)} document(s) that failed to load.[/yellow]")
    verb = "would be reformatted" if dry_run else "reformatted"
    console.print(f"{changed} of {len(canonical)} review(s) {verb}.")
