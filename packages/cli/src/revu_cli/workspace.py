"""Loading the store's documents into a fresh repository for a command run."""

from __future__ import annotations

import click

from revu_core.loader import LoadResult, load_documents
from revu_core.repository import ReviewRepository
from revu_store.base import BaseStore


def load_store(store: BaseStore) -> tuple[ReviewRepository, LoadResult]:
    repository = ReviewRepository()
    documents = [(doc.source, doc.content) for doc in store.list_documents()]
    return repository, load_documents(documents, repository)


def require_store(ctx) -> BaseStore:
    store = ctx.obj.get("store") if ctx.obj else None
    if store is None:
        raise click.UsageError("No store configured. Run `revu init` or add a `store:` entry to .revu.yml.")
    return store
