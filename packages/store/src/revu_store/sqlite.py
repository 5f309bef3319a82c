"""SQLiteStore: single-file store for users who keep reviews out of the tree.

Why SQLite:
- Batteries included: ships with Python, no extra dependencies.
- One file holds every review, so it can be copied or cached between CI jobs.

Schema:
  review_documents: one row per review, keyed by review name, holding the
                     canonical XML text.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone

from revu_store.base import BaseStore
from revu_store.models import StoredDocument

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS review_documents (
    key         TEXT PRIMARY KEY,
    content     TEXT NOT NULL,
    updated_at  TEXT
);
"""


class SQLiteStore(BaseStore):
    """Stores review documents in a local SQLite database file.

    The database file path defaults to `.revu.db` in the current working
    directory. Configure via .revu.yml: `store: sqlite` and `store_path: ...`.
    """

    def __init__(self, db_path: str = ".revu.db"):
        self._db_path = db_path
        self._conn = sqlite3.connect(db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    def save(self, key: str, content: str) -> None:
        self._conn.execute(
            """
            INSERT INTO review_documents (key, content, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET content=excluded.content, updated_at=excluded.updated_at
            """,
            (key, content, datetime.now(timezone.utc).isoformat()),
        )
        self._conn.commit()

    def list_documents(self) -> list[StoredDocument]:
        rows = self._conn.execute("SELECT key, content FROM review_documents ORDER BY key").fetchall()
        return [self._row_to_document(r) for r in rows]

    def delete(self, key: str) -> bool:
        cursor = self._conn.execute("DELETE FROM review_documents WHERE key=?", (key,))
        self._conn.commit()
        return cursor.rowcount > 0

    def close(self) -> None:
        self._conn.close()

    def _row_to_document(self, row: sqlite3.Row) -> StoredDocument:
        return StoredDocument(key=row["key"], content=row["content"], source=f"{self._db_path}#{row['key']}")
