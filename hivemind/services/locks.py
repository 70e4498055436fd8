"""Per-entity write serialisation for read-modify-write operations."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

Key = tuple[str, str]


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.users = 0


class KeyedLocks:
    """
    One re-entrant lock per (collection, id) key.

    `hold` acquires several keys in sorted order, so two operations touching the
    same pair of entities cannot deadlock. A key's lock is dropped once no caller
    holds or waits on it, so the table only tracks entities in use.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Key, _Entry] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    def _checkout(self, key: Key) -> _Entry:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = _Entry()
            entry.users += 1
            return entry

    def _checkin(self, key: Key) -> None:
        with self._guard:
            entry = self._locks[key]
            entry.users -= 1
            if entry.users == 0:
                del self._locks[key]

    @contextmanager
    def hold(self, *keys: Key) -> Iterator[None]:
        ordered = sorted(set(keys))
        checked_out: list[Key] = []
        acquired: list[threading.RLock] = []
        try:
            for key in ordered:
                entry = self._checkout(key)
                checked_out.append(key)
                entry.lock.acquire()
                acquired.append(entry.lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
            for key in reversed(checked_out):
                self._checkin(key)
