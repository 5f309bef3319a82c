"""DirectoryStore: one XML file per review, meant to live in the project tree.

This is the default store: review documents sit next to the code they review,
get committed with it and diff cleanly because the serializer output is
canonical.

Layout: ``<path>/<safe key>.xml``. The directory is created on first save.
"""

from __future__ import annotations

import logging
from pathlib import Path

from revu_store.base import BaseStore
from revu_store.models import StoredDocument, safe_key

logger = logging.getLogger(__name__)

_SUFFIX = ".xml"


class DirectoryStore(BaseStore):
    """Stores review documents as files under a directory (default ``.revu``)."""

    def __init__(self, path: str = ".revu", encoding: str = "utf-8"):
        self._path = Path(path)
        self._encoding = encoding

    def _file_for(self, key: str) -> Path:
        # Keys read back from list_documents() are file stems; keep writing to that file.
        existing = self._path / f"{key}{_SUFFIX}"
        if Path(key).name == key and existing.is_file():
            return existing
        return self._path / f"{safe_key(key)}{_SUFFIX}"

    def save(self, key: str, content: str) -> None:
        self._path.mkdir(parents=True, exist_ok=True)
        target = self._file_for(key)
        # Write then rename so a crash never leaves a truncated document behind.
        tmp = target.with_suffix(target.suffix + ".tmp")
        tmp.write_text(content, encoding=self._encoding)
        tmp.replace(target)
        logger.debug("Saved review %r to %s", key, target)

    def list_documents(self) -> list[StoredDocument]:
        if not self._path.is_dir():
            return []
        return [
            StoredDocument(key=f.stem, content=f.read_text(encoding=self._encoding), source=str(f))
            for f in sorted(self._path.glob(f"*{_SUFFIX}"))
            if f.is_file()
        ]

    def delete(self, key: str) -> bool:
        target = self._file_for(key)
        if not target.exists():
            return False
        target.unlink()
        return True
