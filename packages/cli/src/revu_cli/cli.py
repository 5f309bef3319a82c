"""CLI entry point for revu.

Commands:
  list    table of the reviews in the configured store
  show    print one review in canonical XML
  check   load every document and report the ones that fail
  format  rewrite every document in canonical form
  stats   issue counts by status, priority and file
  init    write .revu.yml (and create the Gist for a shared store)
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console

from revu_cli.commands.check import check_cmd
from revu_cli.commands.format import format_cmd
from revu_cli.commands.init import init_cmd
from revu_cli.commands.list import list_cmd
from revu_cli.commands.show import show_cmd
from revu_cli.commands.stats import stats_cmd

console = Console()


def _build_store(config: dict):
    """Instantiate the configured store from .revu.yml settings.

    Store selection hierarchy:
      store: gist      → GistStore      (requires gist_id and github_token)
      store: sqlite    → SQLiteStore    (store_path, default .revu.db)
      (default)        → DirectoryStore (store_path, default .revu)

    This factory lives in cli.py so neither revu_core nor revu_store
    know about the CLI config format.
    """
    from revu_store.directory import DirectoryStore

    store_type = config.get("store", "directory")

    if store_type == "gist":
        from revu_store.gist import GistStore

        gist_id = config.get("gist_id")
        token = config.get("github_token")
        if not gist_id or not token:
            console.print(
                "[yellow]GistStore requires gist_id and a GitHub token. Falling back to the .revu directory.[/yellow]"
            )
            return DirectoryStore()
        return GistStore(gist_id=gist_id, token=token)

    if store_type == "sqlite":
        from revu_store.sqlite import SQLiteStore

        db_path = config.get("store_path") or ".revu.db"
        if db_path == ".revu":
            db_path = ".revu.db"
        return SQLiteStore(db_path=db_path)

    return DirectoryStore(path=config.get("store_path") or ".revu")


@click.group()
@click.version_option(
    version=importlib.metadata.version("revu"),
    prog_name="revu",
)
@click.option(
    "--config",
    "config_path",
    default=".revu.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="REVU_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Code review documents: list, check and normalize revu XML reviews."""
    from revu_core.config import load_config

    if verbose:
        logging.basicConfig(level=logging.DEBUG)

    ctx.ensure_object(dict)

    config = load_config(config_path)

    if config.get("store") == "gist" and not config.get("github_token"):
        from revu_cli.auth import github_token

        config["github_token"] = github_token(config)

    store = _build_store(config)
    ctx.obj["store"] = store
    ctx.obj["config"] = config
    ctx.obj["config_path"] = config_path
    ctx.call_on_close(store.close)


main.add_command(list_cmd)
main.add_command(show_cmd)
main.add_command(check_cmd)
main.add_command(format_cmd)
main.add_command(stats_cmd)
main.add_command(init_cmd)
