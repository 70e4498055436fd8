"""
Accounts: registration, authentication and profile edits.

Passwords are only ever stored as werkzeug hashes.
"""

from __future__ import annotations

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as SchemaError

from hivemind.domains.errors import NotFound, Unauthorized, ValidationError
from hivemind.domains.models import User, new_id, to_iso, utc_now
from hivemind.infrastructure.data.store import USERS, DataStore
from hivemind.services.locks import KeyedLocks
from hivemind.utils.logger import get_logger
from hivemind.utils.passwords import hash_password, verify_password

logger = get_logger()

MIN_PASSWORD_LENGTH = 6
_EMAIL = TypeAdapter(EmailStr)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def is_valid_email(email: str) -> bool:
    try:
        _EMAIL.validate_python(email or "")
    except SchemaError:
        return False
    return True


class AccountService:
    def __init__(self, store: DataStore, locks: KeyedLocks | None = None) -> None:
        self._store = store
        self._locks = locks or KeyedLocks()

    def get(self, user_id: str) -> User:
        doc = self._store.get_by_id(USERS, user_id) if user_id else None
        if doc is None:
            raise NotFound("User", user_id)
        return User.model_validate(doc)

    def get_by_email(self, email: str) -> User | None:
        email = normalize_email(email)
        if not email:
            return None
        matches = self._store.find_by(USERS, email=email)
        return User.model_validate(matches[0]) if matches else None

    def list_users(self) -> list[User]:
        return [User.model_validate(d) for d in self._store.list_all(USERS)]

    def register(self, email: str, password: str, name: str, bio: str = "") -> User:
        email = normalize_email(email)
        name = (name or "").strip()
        if not is_valid_email(email):
            raise ValidationError(f"Invalid email address: {email!r}")
        if not name:
            raise ValidationError("Name is required")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        user = User(
            id=new_id(),
            email=email,
            name=name,
            password_hash=hash_password(password),
            bio=(bio or "").strip(),
            points=0,
            badges=[],
            joined_date=to_iso(utc_now()),
        )
        with self._locks.hold((USERS, f"email:{email}")):
            if self.get_by_email(email) is not None:
                raise ValidationError(f"The email {email} is already registered")
            saved = User.model_validate(self._store.upsert(USERS, user.model_dump(by_alias=True)))
        logger.info("Registered user %s (%s)", saved.id, email)
        return saved

    def authenticate(self, email: str, password: str) -> User:
        user = self.get_by_email(email)
        if user is None or not verify_password(password or "", user.password_hash):
            logger.warning("Failed sign-in attempt for %s", normalize_email(email))
            raise Unauthorized("Invalid email or password")
        return user

    def update_profile(self, user_id: str, name: str | None = None, bio: str | None = None) -> User:
        if name is not None and not name.strip():
            raise ValidationError("Name is required")
        with self._locks.hold((USERS, user_id)):
            user = self.get(user_id)
            if name is not None:
                user.name = name.strip()
            if bio is not None:
                user.bio = bio.strip()
            saved = User.model_validate(self._store.upsert(USERS, user.model_dump(by_alias=True)))
        logger.info("Profile updated for %s", user_id)
        return saved

    def change_password(self, user_id: str, current: str, new: str) -> User:
        if len(new or "") < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        with self._locks.hold((USERS, user_id)):
            user = self.get(user_id)
            if not verify_password(current or "", user.password_hash):
                raise Unauthorized("Current password is incorrect")
            user.password_hash = hash_password(new)
            saved = User.model_validate(self._store.upsert(USERS, user.model_dump(by_alias=True)))
        logger.info("Password changed for %s", user_id)
        return saved
