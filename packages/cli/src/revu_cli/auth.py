"""GitHub credentials for the shared Gist store.

Only ``store: gist`` and ``revu init --store gist`` talk to GitHub. The token
comes from the loaded configuration (which already folds in GITHUB_TOKEN) and,
failing that, from the developer's ``gh`` login.
"""

from __future__ import annotations

import logging
import subprocess

logger = logging.getLogger(__name__)

GH_LOGIN_HINT = "set GITHUB_TOKEN or run `gh auth login`"


def github_token(config: dict) -> str | None:
    """Token to use for Gist access, or None when no credential is available."""
    token = config.get("github_token")
    if token:
        return token
    return _gh_session_token()


def _gh_session_token() -> str | None:
    try:
        completed = subprocess.run(["gh", "auth", "token"], capture_output=True, text=True, timeout=5)
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        logger.debug("No gh CLI session available: %s", e)
        return None
    if completed.returncode != 0:
        logger.debug("`gh auth token` exited with %d", completed.returncode)
        return None
    return completed.stdout.strip() or None
