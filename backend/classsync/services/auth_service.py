from __future__ import annotations

import logging

import bcrypt

from ..config import BCRYPT_PREFIX, BCRYPT_ROUNDS
from ..schemas import User
from .identity_service import normalize_text

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS, prefix=b"2a")
    return bcrypt.hashpw((password or "").encode("utf-8"), salt).decode("utf-8")


def looks_hashed(stored: str | None) -> bool:
    return normalize_text(stored).startswith(BCRYPT_PREFIX)


def check_password(stored: str | None, provided: str) -> bool:
    """bcrypt for hashed credentials, exact match for legacy plaintext ones."""
    if not stored:
        return False
    if looks_hashed(stored):
        try:
            return bcrypt.checkpw((provided or "").encode("utf-8"), stored.encode("utf-8"))
        except ValueError as exc:
            logger.error("Error comparing password hash: %s", exc)
            return False
    return stored == provided


def find_login_candidate(users: list[User], username: str) -> User | None:
    user = next((item for item in users if item.username == username), None)
    if user is None or not user.is_active or not user.password:
        return None
    return user


def authenticate_locally(users: list[User], username: str, password: str) -> User | None:
    user = find_login_candidate(users, username)
    if user is None:
        return None
    if not check_password(user.password, password):
        return None
    return user
