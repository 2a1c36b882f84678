"""
auth/credentials.py -- Password hashing and constant-time credential checks.

Security design decisions:
  Passwords: bcrypt, used directly (no passlib wrapper). The cost factor is
       configurable via BCRYPT_ROUNDS so tests can run with a cheap factor.

  Enumeration resistance: authenticate_user() always performs exactly one
       bcrypt comparison. When the username does not exist it compares against
       _DUMMY_HASH, so response time does not reveal whether an account exists.
       Combined with the single "Invalid credentials" message in
       auth/gateway.py, unknown-user and wrong-password failures are
       indistinguishable to the caller.

  Nothing in this module logs or returns a plaintext password or a hash.

Layer rule: no imports from api/ or catalog/. Import from core/ is allowed.
"""

from __future__ import annotations

import bcrypt

from core.config import get_settings

_settings = get_settings()


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password.

    bcrypt only looks at the first 72 bytes of its input; longer passwords
    still hash, but the tail is ignored.
    """
    salt = bcrypt.gensalt(rounds=_settings.bcrypt_rounds)
    return bcrypt.hashpw(plain.encode("utf-8")[:72], salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A malformed or empty hash verifies as False rather than raising.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8")[:72], hashed.encode("utf-8"))
    except ValueError:
        return False


# Computed once at import so the first failed login costs the same as the rest.
_DUMMY_HASH: str = hash_password("catalogapi_timing_dummy")


def authenticate_user(store, username: str, password: str):
    """Return the matching User, or None on any failure.

    Always runs bcrypt whether or not the user exists:
    - Unknown username: bcrypt runs against _DUMMY_HASH
    - Wrong password: bcrypt runs against the real hash

    `username` must already be normalized (trimmed, lowercased).
    """
    user = store.get_by_username(username)
    if user is None:
        verify_password(password, _DUMMY_HASH)
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user
