"""
Tests for AccountService: registration, sign-in checks, profile and password edits.
"""

from __future__ import annotations

import pytest

from hivemind.domains.errors import NotFound, Unauthorized, ValidationError
from hivemind.infrastructure.data.memory_store import MemoryStore
from hivemind.infrastructure.data.store import USERS
from hivemind.services.accounts import AccountService, is_valid_email, normalize_email


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def accounts(store: MemoryStore) -> AccountService:
    return AccountService(store)


def test_register_hashes_password(accounts: AccountService, store: MemoryStore) -> None:
    """The stored document never carries the plain password."""
    user = accounts.register(" Ada@Hive.IO ", "secret1", " Ada ")
    assert (user.email, user.name, user.points, user.badges) == ("ada@hive.io", "Ada", 0, [])
    doc = store.get_by_id(USERS, user.id)
    assert "password" not in doc
    assert doc["passwordHash"] and doc["passwordHash"] != "secret1"
    assert doc["joinedDate"]


def test_register_validation(accounts: AccountService) -> None:
    with pytest.raises(ValidationError):
        accounts.register("not-an-email", "secret1", "Ada")
    with pytest.raises(ValidationError):
        accounts.register("ada@hive.io", "123", "Ada")
    with pytest.raises(ValidationError):
        accounts.register("ada@hive.io", "secret1", "  ")


def test_register_duplicate_email(accounts: AccountService) -> None:
    accounts.register("ada@hive.io", "secret1", "Ada")
    with pytest.raises(ValidationError):
        accounts.register("ADA@hive.io", "secret2", "Other Ada")
    assert len(accounts.list_users()) == 1


def test_authenticate(accounts: AccountService) -> None:
    user = accounts.register("ada@hive.io", "secret1", "Ada")
    assert accounts.authenticate("ADA@hive.io", "secret1").id == user.id
    with pytest.raises(Unauthorized):
        accounts.authenticate("ada@hive.io", "wrong!!")
    with pytest.raises(Unauthorized):
        accounts.authenticate("nobody@hive.io", "secret1")


def test_authenticate_user_without_hash(accounts: AccountService, store: MemoryStore) -> None:
    """Accounts stored without a hash cannot sign in with any password."""
    store.upsert(USERS, {"id": "legacy", "email": "old@hive.io", "name": "Old"})
    with pytest.raises(Unauthorized):
        accounts.authenticate("old@hive.io", "")


def test_update_profile_keeps_points(accounts: AccountService, store: MemoryStore) -> None:
    user = accounts.register("ada@hive.io", "secret1", "Ada")
    doc = store.get_by_id(USERS, user.id)
    doc["points"] = 40
    store.upsert(USERS, doc)

    updated = accounts.update_profile(user.id, name="Ada L.", bio=" builds things ")
    assert (updated.name, updated.bio, updated.points) == ("Ada L.", "builds things", 40)
    with pytest.raises(ValidationError):
        accounts.update_profile(user.id, name=" ")
    with pytest.raises(NotFound):
        accounts.update_profile("ghost", bio="hi")


def test_change_password(accounts: AccountService) -> None:
    user = accounts.register("ada@hive.io", "secret1", "Ada")
    with pytest.raises(Unauthorized):
        accounts.change_password(user.id, "wrong!!", "newsecret")
    with pytest.raises(ValidationError):
        accounts.change_password(user.id, "secret1", "x")
    accounts.change_password(user.id, "secret1", "newsecret")
    assert accounts.authenticate("ada@hive.io", "newsecret").id == user.id
    with pytest.raises(Unauthorized):
        accounts.authenticate("ada@hive.io", "secret1")


def test_email_helpers() -> None:
    assert normalize_email("  A@B.Co ") == "a@b.co"
    assert is_valid_email("a@b.co")
    assert not is_valid_email("a@b")
    assert not is_valid_email("a b@c.io")
