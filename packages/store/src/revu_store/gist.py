"""GistStore: shared reviews published to a GitHub Gist.

Why a Gist for shared reviews:
- Zero infra: no server to maintain, the team already has GitHub accounts.
- Built-in access control: whoever can read the Gist can load the reviews.
- Works in GitHub Actions with a PAT that has the 'gist' scope.

Data format: one file per review inside the Gist, named
``revu_<safe key>.xml`` and holding the canonical review XML.
"""

from __future__ import annotations

import logging
import os

from revu_store.base import BaseStore
from revu_store.models import StoredDocument, safe_key

logger = logging.getLogger(__name__)

_FILE_PREFIX = "revu_"
_FILE_SUFFIX = ".xml"


def gist_filename(key: str) -> str:
    return f"{_FILE_PREFIX}{safe_key(key)}{_FILE_SUFFIX}"


class GistStore(BaseStore):
    """Stores review documents as files of a single GitHub Gist.

    The Gist ID is stored in .revu.yml under `gist_id`. Running
    `revu init --store gist` creates the Gist and writes the ID automatically.
    """

    def __init__(self, gist_id: str, token: str):
        try:
            from github import Github
        except ImportError:
            raise ImportError("PyGithub is required for GistStore. Install revu with its default dependencies.")
        self._gist_id = gist_id
        self._gh = Github(token)

    def _get_gist(self):
        return self._gh.get_gist(self._gist_id)

    def save(self, key: str, content: str) -> None:
        """Create or replace the review file in the Gist."""
        from github import InputFileContent

        try:
            gist = self._get_gist()
            gist.edit(files={gist_filename(key): InputFileContent(content)})
        except Exception as e:
            # The review is still in memory and can be saved again; report and carry on.
            logger.warning("GistStore.save() failed (%s): %s", type(e).__name__, e)
            msg = f"Warning: could not save review {key!r} to Gist ({type(e).__name__}: {e})"
            if os.environ.get("GITHUB_ACTIONS") == "true":
                msg += (
                    "\nThe built-in GITHUB_TOKEN does not have Gist permissions. "
                    "Use a PAT with 'gist' scope stored as a repository secret."
                )
            print(msg)

    def list_documents(self) -> list[StoredDocument]:
        try:
            gist = self._get_gist()
            files = dict(gist.files)
        except Exception as e:
            logger.warning("GistStore.list_documents() failed: %s", e)
            return []

        documents = []
        for filename in sorted(files):
            if not (filename.startswith(_FILE_PREFIX) and filename.endswith(_FILE_SUFFIX)):
                continue
            content = getattr(files[filename], "content", None)
            if not content:
                continue
            key = filename[len(_FILE_PREFIX) : -len(_FILE_SUFFIX)]
            documents.append(StoredDocument(key=key, content=content, source=f"gist:{self._gist_id}/{filename}"))
        return documents

    def delete(self, key: str) -> bool:
        gist = self._get_gist()
        filename = gist_filename(key)
        if filename not in gist.files:
            return False
        # A file mapped to None is deleted from the gist.
        gist.edit(files={filename: None})
        return True
