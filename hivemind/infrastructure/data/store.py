"""
Data store contract shared by every persistence adapter.

Stores deal in plain JSON documents (dicts). Mapping to entity models is the
service layer's job, so adapters stay interchangeable.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

USERS = "users"
PROJECTS = "projects"
TASKS = "tasks"
SESSION = "session"

COLLECTIONS = (USERS, PROJECTS, TASKS)


def check_collection(collection: str) -> None:
    if collection not in COLLECTIONS:
        raise ValueError(f"Unknown collection: {collection!r}")


class DataStore(ABC):
    """Key-value JSON collections plus named singleton records."""

    @abstractmethod
    def list_all(self, collection: str) -> list[dict[str, Any]]:
        """Every document in the collection, in insertion order."""

    @abstractmethod
    def get_by_id(self, collection: str, entity_id: str) -> dict[str, Any] | None:
        """The document with this id, or None."""

    @abstractmethod
    def upsert(self, collection: str, doc: dict[str, Any]) -> dict[str, Any]:
        """Insert when the document has no id (one is assigned), else replace by id."""

    @abstractmethod
    def delete(self, collection: str, entity_id: str) -> bool:
        """Remove a document. Returns False when nothing was removed."""

    @abstractmethod
    def get_singleton(self, name: str) -> dict[str, Any] | None:
        ...

    @abstractmethod
    def set_singleton(self, name: str, value: dict[str, Any]) -> dict[str, Any]:
        ...

    @abstractmethod
    def clear_singleton(self, name: str) -> None:
        ...

    def find_by(self, collection: str, **criteria: Any) -> list[dict[str, Any]]:
        """Documents whose fields equal every given criterion."""
        return [
            doc
            for doc in self.list_all(collection)
            if all(doc.get(k) == v for k, v in criteria.items())
        ]
