"""
In-process data store. Backs tests and embedding; also the base for the JSON
file store, which adds loading and flushing around the same dict layout.
"""

from __future__ import annotations

import copy
import threading
from typing import Any

from hivemind.domains.models import new_id
from hivemind.infrastructure.data.store import COLLECTIONS, DataStore, check_collection


class MemoryStore(DataStore):
    """
    Collections are dicts keyed by id (insertion ordered). Documents are deep
    copied in and out so callers never share state with the store.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._collections: dict[str, dict[str, dict[str, Any]]] = {c: {} for c in COLLECTIONS}
        self._singletons: dict[str, dict[str, Any]] = {}

    def _changed(self, collection: str | None) -> None:
        """Hook for subclasses that persist. `None` means the singletons changed."""

    def list_all(self, collection: str) -> list[dict[str, Any]]:
        check_collection(collection)
        with self._lock:
            return [copy.deepcopy(d) for d in self._collections[collection].values()]

    def get_by_id(self, collection: str, entity_id: str) -> dict[str, Any] | None:
        check_collection(collection)
        with self._lock:
            doc = self._collections[collection].get(str(entity_id))
            return copy.deepcopy(doc) if doc is not None else None

    def upsert(self, collection: str, doc: dict[str, Any]) -> dict[str, Any]:
        check_collection(collection)
        stored = copy.deepcopy(doc)
        if not stored.get("id"):
            stored["id"] = new_id()
        stored["id"] = str(stored["id"])
        with self._lock:
            items = self._collections[collection]
            previous = items.get(stored["id"])
            items[stored["id"]] = stored
            try:
                self._changed(collection)
            except Exception:
                if previous is None:
                    items.pop(stored["id"], None)
                else:
                    items[stored["id"]] = previous
                raise
        return copy.deepcopy(stored)

    def delete(self, collection: str, entity_id: str) -> bool:
        check_collection(collection)
        with self._lock:
            snapshot = dict(self._collections[collection])
            removed = self._collections[collection].pop(str(entity_id), None)
            if removed is not None:
                try:
                    self._changed(collection)
                except Exception:
                    self._collections[collection] = snapshot
                    raise
        return removed is not None

    def get_singleton(self, name: str) -> dict[str, Any] | None:
        with self._lock:
            val = self._singletons.get(name)
            return copy.deepcopy(val) if val is not None else None

    def set_singleton(self, name: str, value: dict[str, Any]) -> dict[str, Any]:
        with self._lock:
            snapshot = dict(self._singletons)
            self._singletons[name] = copy.deepcopy(value)
            try:
                self._changed(None)
            except Exception:
                self._singletons = snapshot
                raise
        return copy.deepcopy(value)

    def clear_singleton(self, name: str) -> None:
        with self._lock:
            snapshot = dict(self._singletons)
            if self._singletons.pop(name, None) is not None:
                try:
                    self._changed(None)
                except Exception:
                    self._singletons = snapshot
                    raise
