"""
Session manager: the single "current user" pointer held in the data store.

There is at most one active session per store. Callers resolve the current user
here and pass its id into the domain services explicitly.
"""

from __future__ import annotations

from hivemind.domains.errors import NotFound, Unauthorized
from hivemind.domains.models import User
from hivemind.infrastructure.data.store import SESSION, USERS, DataStore
from hivemind.utils.logger import get_logger

logger = get_logger()


class SessionManager:
    def __init__(self, store: DataStore) -> None:
        self._store = store

    def sign_in(self, user_id: str) -> User:
        doc = self._store.get_by_id(USERS, user_id) if user_id else None
        if doc is None:
            raise NotFound("User", user_id)
        self._store.set_singleton(SESSION, {"userId": user_id})
        logger.info("Signed in %s", user_id)
        return User.model_validate(doc)

    def current_user_id(self) -> str | None:
        record = self._store.get_singleton(SESSION)
        if not record:
            return None
        return record.get("userId") or None

    def current_user(self) -> User | None:
        """Resolve the pointer. A pointer to a user that no longer exists resolves to None."""
        user_id = self.current_user_id()
        if user_id is None:
            return None
        doc = self._store.get_by_id(USERS, user_id)
        if doc is None:
            logger.warning("Session points at missing user %s", user_id)
            return None
        return User.model_validate(doc)

    def require_user(self) -> User:
        user = self.current_user()
        if user is None:
            raise Unauthorized("Not signed in")
        return user

    def sign_out(self) -> None:
        user_id = self.current_user_id()
        self._store.clear_singleton(SESSION)
        if user_id:
            logger.info("Signed out %s", user_id)
