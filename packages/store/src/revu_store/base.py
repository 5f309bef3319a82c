"""Abstract store interface.

Any storage backend (directory, SQLite, Gist) implements this interface. The
CLI depends on BaseStore rather than a concrete backend, so backends are
swappable without touching CLI code.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from revu_store.models import StoredDocument


class BaseStore(ABC):
    """Pluggable persistence layer for serialized review documents."""

    @abstractmethod
    def save(self, key: str, content: str) -> None:
        """Create or replace the document stored under ``key``."""

    @abstractmethod
    def list_documents(self) -> list[StoredDocument]:
        """Return every stored document in a stable order.

        Returns an empty list if the store is empty; never raises for that.
        """

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove the document stored under ``key``; return False if there was none."""

    def close(self) -> None:
        """Release any resources held by the store (connections, file handles).

        Optional: subclasses that need cleanup should override this.
        Default is a no-op so callers can always call close() safely.
        """
