"""
Tests for SessionManager: sign-in pointer, dangling pointers, sign-out.
"""

from __future__ import annotations

import pytest

from hivemind.domains.errors import NotFound, Unauthorized
from hivemind.domains.models import User
from hivemind.infrastructure.data.memory_store import MemoryStore
from hivemind.infrastructure.data.store import SESSION, USERS
from hivemind.services.session import SessionManager


@pytest.fixture
def store() -> MemoryStore:
    s = MemoryStore()
    s.upsert(USERS, User(id="1", email="demo@hivemind.com", name="Demo").model_dump(by_alias=True))
    return s


def test_sign_in_and_out(store: MemoryStore) -> None:
    sessions = SessionManager(store)
    assert sessions.current_user() is None

    user = sessions.sign_in("1")
    assert user.name == "Demo"
    assert store.get_singleton(SESSION) == {"userId": "1"}
    assert sessions.current_user_id() == "1"
    assert sessions.require_user().id == "1"

    sessions.sign_out()
    assert sessions.current_user_id() is None
    with pytest.raises(Unauthorized):
        sessions.require_user()


def test_sign_in_unknown_user(store: MemoryStore) -> None:
    with pytest.raises(NotFound):
        SessionManager(store).sign_in("ghost")
    assert store.get_singleton(SESSION) is None


def test_dangling_pointer_resolves_to_none(store: MemoryStore) -> None:
    """A session whose user was deleted behaves as signed out."""
    sessions = SessionManager(store)
    sessions.sign_in("1")
    store.delete(USERS, "1")
    assert sessions.current_user_id() == "1"
    assert sessions.current_user() is None


def test_sign_in_replaces_previous_session(store: MemoryStore) -> None:
    store.upsert(USERS, User(id="2", email="b@hive.io", name="B").model_dump(by_alias=True))
    sessions = SessionManager(store)
    sessions.sign_in("1")
    sessions.sign_in("2")
    assert sessions.current_user().id == "2"


def test_sign_out_when_signed_out_is_noop(store: MemoryStore) -> None:
    sessions = SessionManager(store)
    sessions.sign_out()
    assert sessions.current_user() is None
