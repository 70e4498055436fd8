"""Data stores: in-memory, local JSON files and a json-server REST API."""

from hivemind.infrastructure.data.api_store import ApiStore
from hivemind.infrastructure.data.json_store import JsonFileStore
from hivemind.infrastructure.data.memory_store import MemoryStore
from hivemind.infrastructure.data.store import DataStore

__all__ = ["ApiStore", "DataStore", "JsonFileStore", "MemoryStore"]
