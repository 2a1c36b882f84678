"""
auth/gateway.py -- Register, login, logout and identity resolution.

These functions take their stores as arguments rather than reaching for
request state, so the same code serves the HTTP routes, the seeder and the
unit tests. Cookie handling stays in api/routes/auth.py; this module deals
only in raw session ids.

Login failures are deliberately uniform: missing fields, unknown usernames and
wrong passwords all raise the same Unauthorized("Invalid credentials"). Do not
add detail to that message.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError

from auth.credentials import authenticate_user, hash_password
from auth.models import ANONYMOUS, ROLE_USER, Identity, User
from auth.sessions import SessionStore
from auth.store import UserStore
from core.errors import Conflict, Unauthorized, ValidationError

logger = logging.getLogger("catalogapi.auth")

INVALID_CREDENTIALS = "Invalid credentials"

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6


def normalize_username(username: str) -> str:
    return username.strip().lower()


def register_user(users: UserStore, username: Any, password: Any) -> User:
    """Create a local account with role "user".

    Length rules apply to the trimmed username and to the raw password.
    Raises ValidationError on bad input and Conflict on a taken username.
    """
    if not isinstance(username, str) or len(username.strip()) < MIN_USERNAME_LENGTH:
        raise ValidationError(f"Username must be at least {MIN_USERNAME_LENGTH} chars")
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} chars")

    normalized = normalize_username(username)
    if users.get_by_username(normalized) is not None:
        raise Conflict("User already exists")

    try:
        user_id = users.create_user(User(username=normalized, hashed_password=hash_password(password), role=ROLE_USER))
    except IntegrityError as exc:
        # Lost the check-then-insert race to a concurrent registration.
        raise Conflict("User already exists") from exc

    logger.info("Registered user id=%s", user_id)
    return users.get_by_id(user_id)


def login(users: UserStore, sessions: SessionStore, username: Any, password: Any) -> tuple[str, User]:
    """Verify credentials and open a session.

    Returns (raw_session_id, user). Earlier sessions of the same user stay
    valid; each login gets its own session.

    username and password arrive unconverted from the request body; anything
    other than a non-empty string is a credentials failure like any other.
    """
    if not isinstance(username, str) or not isinstance(password, str) or not username or not password:
        raise Unauthorized(INVALID_CREDENTIALS)

    user = authenticate_user(users, normalize_username(username), password)
    if user is None:
        logger.info("Failed login attempt")
        raise Unauthorized(INVALID_CREDENTIALS)

    session_id = sessions.create(user)
    logger.info("User id=%s logged in", user.id)
    return session_id, user


def logout(sessions: SessionStore, session_id: str | None) -> None:
    """Destroy the session if there is one. Safe to call repeatedly."""
    if session_id:
        sessions.destroy(session_id)


def current_identity(sessions: SessionStore, session_id: str | None) -> Identity:
    """Resolve the caller from the session alone.

    Never consults the users table: the identity is the snapshot taken at
    login, so a later role or username change is not visible here.
    """
    if not session_id:
        return ANONYMOUS
    session = sessions.get(session_id)
    if session is None:
        return ANONYMOUS
    return Identity(user_id=session.user_id, username=session.username, role=session.role)
