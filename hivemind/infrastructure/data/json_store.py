"""
Local persistent store: one JSON file per collection under a data directory.

Layout::

    <data_dir>/users.json      list of user documents
    <data_dir>/projects.json   list of project documents
    <data_dir>/tasks.json      list of task documents
    <data_dir>/session.json    {name: record} for singleton records

Every write rewrites the touched file through a temp file and `os.replace`, so a
crash never leaves a half-written collection behind.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from hivemind.domains.errors import StorageError
from hivemind.infrastructure.data.memory_store import MemoryStore
from hivemind.infrastructure.data.store import COLLECTIONS, SESSION
from hivemind.utils.config import data_dir
from hivemind.utils.logger import get_logger

logger = get_logger()


class JsonFileStore(MemoryStore):
    """MemoryStore that loads from and flushes to JSON files."""

    def __init__(self, path: Path | None = None) -> None:
        super().__init__()
        self._dir = Path(path) if path is not None else data_dir()
        self._load()

    @property
    def path(self) -> Path:
        return self._dir

    def _file(self, name: str) -> Path:
        return self._dir / f"{name}.json"

    def _read(self, name: str) -> Any:
        p = self._file(name)
        if not p.is_file():
            return None
        try:
            with open(p, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.exception("Failed to read store file %s: %s", p, e)
            raise StorageError(f"Cannot read {p}: {e}", original=e) from e

    def _load(self) -> None:
        for collection in COLLECTIONS:
            raw = self._read(collection)
            if raw is None:
                continue
            if not isinstance(raw, list):
                raise StorageError(f"{self._file(collection)} must hold a JSON list")
            items: dict[str, dict[str, Any]] = {}
            for n, doc in enumerate(raw):
                # Rewriting the file would drop anything that cannot be keyed.
                if not isinstance(doc, dict) or not doc.get("id"):
                    raise StorageError(f"{self._file(collection)}: entry {n} has no id")
                items[str(doc["id"])] = doc
            self._collections[collection] = items
        raw = self._read(SESSION)
        if isinstance(raw, dict):
            self._singletons = {k: v for k, v in raw.items() if isinstance(v, dict)}
        logger.info(
            "Loaded JSON store from %s (%s)",
            self._dir,
            ", ".join(f"{c}={len(self._collections[c])}" for c in COLLECTIONS),
        )

    def _write(self, name: str, data: Any) -> None:
        target = self._file(name)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=f".{name}.", suffix=".tmp", dir=self._dir)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)
                os.replace(tmp, target)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except OSError as e:
            logger.exception("Failed to write store file %s: %s", target, e)
            raise StorageError(f"Cannot write {target}: {e}", original=e) from e

    def _changed(self, collection: str | None) -> None:
        if collection is None:
            self._write(SESSION, self._singletons)
        else:
            self._write(collection, list(self._collections[collection].values()))
