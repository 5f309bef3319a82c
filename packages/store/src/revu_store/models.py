"""Stored document model.

Stores persist serialized reviews as opaque text keyed by review name; they
never parse documents, so revu_store has no dependency on revu_core.
"""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass

_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass
class StoredDocument:
    """One serialized review as held by a store."""

    key: str
    content: str
    source: str  # where it came from: file path, db row, gist file name


def safe_key(name: str) -> str:
    """Map a review name to a key usable as a file name.

    Names that are already safe are kept as they are. Otherwise runs of unsafe
    characters collapse to "_" and a short digest of the full name is appended,
    so "sprint 1" and "sprint/1" never share a file.
    """
    key = _UNSAFE_CHARS_RE.sub("_", name).strip("._")
    if key and key == name:
        return key
    digest = hashlib.sha1(name.encode("utf-8")).hexdigest()[:8]
    return f"{key or 'review'}-{digest}"
