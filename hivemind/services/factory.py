"""
Build a data store from configuration and wire the services around it.
"""

from __future__ import annotations

from dataclasses import dataclass

from hivemind.infrastructure.data.api_store import ApiStore
from hivemind.infrastructure.data.json_store import JsonFileStore
from hivemind.infrastructure.data.memory_store import MemoryStore
from hivemind.infrastructure.data.seed import initialize_demo_data
from hivemind.infrastructure.data.store import DataStore
from hivemind.services.accounts import AccountService
from hivemind.services.locks import KeyedLocks
from hivemind.services.projects import ProjectService
from hivemind.services.queries import ProjectQueries
from hivemind.services.session import SessionManager
from hivemind.utils.config import log_file, log_level, seed_demo, store_backend
from hivemind.utils.logger import get_logger, setup_logger

logger = get_logger()


def build_store(backend: str | None = None) -> DataStore:
    """Return the store named by `backend` (default: HIVEMIND_STORE)."""
    backend = (backend or store_backend()).strip().lower()
    if backend == "json":
        return JsonFileStore()
    if backend == "api":
        return ApiStore()
    if backend == "memory":
        return MemoryStore()
    raise ValueError(f"Unknown store backend: {backend!r}")


@dataclass
class HiveMind:
    """The services a presentation layer talks to, sharing one store and one lock table."""

    store: DataStore
    projects: ProjectService
    accounts: AccountService
    sessions: SessionManager
    queries: ProjectQueries


def build_app(store: DataStore | None = None, seed: bool | None = None) -> HiveMind:
    setup_logger(level=log_level(), log_file=log_file())
    store = store if store is not None else build_store()
    if seed is None:
        seed = seed_demo()
    if seed:
        initialize_demo_data(store)
    locks = KeyedLocks()
    logger.info("HiveMind services ready on %s", type(store).__name__)
    return HiveMind(
        store=store,
        projects=ProjectService(store, locks=locks),
        accounts=AccountService(store, locks=locks),
        sessions=SessionManager(store),
        queries=ProjectQueries(store),
    )
