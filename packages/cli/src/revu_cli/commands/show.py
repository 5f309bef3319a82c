"""show command: print one review in canonical XML."""

from __future__ import annotations

import click

from revu_cli.workspace import load_store, require_store
from revu_core.externalizing.serializer import serialize


@click.command("show")
@click.argument("name")
@click.pass_context
def show_cmd(ctx, name: str):
    """Print review NAME as the XML document revu would save."""
    store = require_store(ctx)
    config = ctx.obj.get("config", {})

    repository, result = load_store(store)
    review = repository.lookup_by_name(name)
    if review is None:
        failed = [e for e in result.errors.values() if e.review_name == name]
        if failed:
            raise click.ClickException(f"Review {name!r} failed to load: {failed[0]}")
        raise click.ClickException(f"No review named {name!r}.")

    click.echo(serialize(review, indent=config.get("indent", 2)), nl=False)
