"""Credential checks for MVPfin logins.

Passwords are stored as salted werkzeug hashes. The record store only sees
the :class:`CredentialPolicy` interface, so the hashing scheme can change
without touching the store or the UI.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from werkzeug.security import check_password_hash, generate_password_hash

from .models import User

if TYPE_CHECKING:  # pragma: no cover
    from .store import RecordStore

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Usuário ou senha inválidos."


class CredentialPolicy(Protocol):
    def hash(self, password: str) -> str: ...

    def verify(self, stored_hash: str | None, password: str) -> bool: ...


class WerkzeugCredentials:
    """Salted PBKDF2/scrypt hashes via :mod:`werkzeug.security`."""

    def __init__(self, method: str | None = None) -> None:
        self.method = method

    def hash(self, password: str) -> str:
        if self.method:
            return generate_password_hash(password, method=self.method)
        return generate_password_hash(password)

    def verify(self, stored_hash: str | None, password: str) -> bool:
        if not stored_hash:
            return False
        return check_password_hash(stored_hash, password)


@dataclass(frozen=True)
class LoginResult:
    user: User | None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.user is not None


def login(store: "RecordStore", username: str, password: str) -> LoginResult:
    """Authenticate against ``store``.

    Unknown users, wrong passwords and store failures all produce the same
    result so the caller can't tell which part was wrong.
    """

    username = (username or "").strip()
    if not username or not password:
        return LoginResult(None, INVALID_CREDENTIALS_MESSAGE)

    try:
        user = store.authenticate(username, password)
    except Exception:
        logger.exception("Login error for %r", username)
        user = None

    if user is None:
        logger.info("Rejected login for %r", username)
        return LoginResult(None, INVALID_CREDENTIALS_MESSAGE)

    logger.info("User %r logged in", username)
    return LoginResult(user)
