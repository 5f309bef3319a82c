"""init command: write .revu.yml for a project.

Why an init command:
- Picks the store once so every later `revu` run just works.
- For a shared store, creates the team Gist so nobody needs to know the
  GitHub API to set it up.
"""

from __future__ import annotations

from pathlib import Path

import click
import yaml
from rich.console import Console

console = Console()

_DEFAULT_PATHS = {"directory": ".revu", "sqlite": ".revu.db"}


@click.command("init")
@click.option(
    "--store",
    "store_type",
    type=click.Choice(["directory", "sqlite", "gist"]),
    default=None,
    help="Where review documents are kept. Prompted for when omitted.",
)
@click.option("--user", default=None, help="Your login as listed in review referentials.")
@click.option("--force", is_flag=True, help="Overwrite an existing configuration file.")
@click.pass_context
def init_cmd(ctx, store_type: str | None, user: str | None, force: bool):
    """Set up revu for this project.

    Writes the configuration file and, for a gist store, creates the Gist
    that holds shared reviews.
    """
    config_path = Path((ctx.obj or {}).get("config_path", ".revu.yml"))
    if config_path.exists() and not force:
        raise click.UsageError(f"{config_path} already exists. Use --force to overwrite it.")

    if store_type is None:
        store_type = click.prompt(
            "Store",
            type=click.Choice(["directory", "sqlite", "gist"]),
            default="directory",
        )

    config: dict = {"store": store_type}
    if store_type in _DEFAULT_PATHS:
        config["store_path"] = _DEFAULT_PATHS[store_type]
    else:
        config["gist_id"] = _create_gist((ctx.obj or {}).get("config", {}))

    if user:
        config["user"] = user

    config_path.write_text(yaml.safe_dump(config, sort_keys=False))
    console.print(f"[green]Wrote {config_path}[/green]")


def _create_gist(settings: dict) -> str:
    """Create an empty secret Gist for shared reviews and return its id."""
    from github import Github, InputFileContent

    from revu_cli.auth import GH_LOGIN_HINT, github_token

    token = github_token(settings)
    if not token:
        raise click.UsageError(f"A GitHub token is needed to create the Gist: {GH_LOGIN_HINT}.")

    user = Github(token).get_user()
    gist = user.create_gist(
        public=False,
        files={"README.md": InputFileContent("Shared revu review documents.\n")},
        description="revu shared reviews",
    )
    console.print(f"[dim]Created Gist {gist.id}[/dim]")
    return gist.id
