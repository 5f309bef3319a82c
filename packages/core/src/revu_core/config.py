import os
from pathlib import Path
from typing import Optional

import yaml

from revu_core.model import ReviewStatus

DEFAULT_CONFIG: dict = {
    "store": "directory",  # "directory" | "sqlite" | "gist"
    "store_path": ".revu",  # directory for "directory", database file for "sqlite"
    "gist_id": None,
    "visible_statuses": ["draft", "fixing", "reviewing"],  # reviews listed by default
    "indent": 2,
}


def load_config(config_path: str = ".revu.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .revu.yml in the current directory
      3. CLI argument overrides
    """
    config = {**DEFAULT_CONFIG, "visible_statuses": list(DEFAULT_CONFIG["visible_statuses"])}

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Resolve credentials and identity from environment variables
    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    config["user"] = config.get("user") or os.environ.get("REVU_USER") or os.environ.get("USER")

    return config


def visible_statuses(config: dict) -> set[ReviewStatus]:
    """Statuses listed when no explicit filter is given. Unknown names raise StructuralParseError."""
    return {ReviewStatus.parse(s) for s in config.get("visible_statuses") or []}
