"""
auth/sessions.py -- Server-side session storage with a fixed TTL.

A session id is 256 bits from secrets.token_urlsafe(). The raw value lives
only in the client's httpOnly cookie; the sessions table is keyed by
HMAC-SHA256(SECRET_KEY, session_id), so a copy of the table cannot be
replayed as cookies. The hash is deterministic, which keeps lookup a single
primary-key read.

Expiry follows the read-time check used by TTL caches: get() treats a row
past expires_at as absent and deletes it, and purge_expired() trims whatever
was never read again. The TTL is fixed at creation; reads do not extend it.

Usage:
    sessions = SessionStore("sqlite:///./sessions.db", ttl_seconds=604800)
    sid = sessions.create(user)           # raw id for the cookie
    record = sessions.get(sid)            # Session or None
    sessions.destroy(sid)
    sessions.purge_expired()

Layer rule: no imports from api/ or catalog/. Import from core/ is allowed.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
import time

from sqlalchemy import Column, Float, Integer, MetaData, String, Table
from sqlalchemy.engine import Engine

from auth.models import Session, User, normalize_role
from auth.store import make_engine
from core.config import get_settings

_settings = get_settings()

_metadata = MetaData()

_sessions = Table(
    "sessions",
    _metadata,
    Column("id_hash", String(64), primary_key=True),  # HMAC-SHA256 hex of the raw id
    Column("user_id", Integer, nullable=False),
    Column("username", String(255), nullable=False),
    Column("role", String(30), nullable=False),
    Column("created_at", Float, nullable=False),
    Column("expires_at", Float, nullable=False, index=True),
)


def hash_session_id(raw_id: str) -> str:
    """Return HMAC-SHA256(SECRET_KEY, raw_id) as a hex string."""
    return hmac.new(
        _settings.secret_key.encode(),
        raw_id.encode(),
        hashlib.sha256,
    ).hexdigest()


class SessionStore:
    def __init__(self, db_url: str, ttl_seconds: int = _settings.session_ttl_seconds) -> None:
        self.ttl = ttl_seconds
        self.engine: Engine = make_engine(db_url)
        _metadata.create_all(self.engine)

    def create(self, user: User) -> str:
        """Persist a snapshot of `user` and return the raw session id."""
        raw_id = secrets.token_urlsafe(32)
        now = time.time()
        with self.engine.connect() as conn:
            conn.execute(
                _sessions.insert().values(
                    id_hash=hash_session_id(raw_id),
                    user_id=user.id,
                    username=user.username,
                    role=user.role,
                    created_at=now,
                    expires_at=now + self.ttl,
                )
            )
            conn.commit()
        return raw_id

    def get(self, raw_id: str) -> Session | None:
        """Return the live session for raw_id, or None if unknown or expired."""
        id_hash = hash_session_id(raw_id)
        with self.engine.connect() as conn:
            row = conn.execute(_sessions.select().where(_sessions.c.id_hash == id_hash)).fetchone()
        if row is None:
            return None
        if row.expires_at <= time.time():
            self._delete(id_hash)
            return None
        return Session(
            user_id=row.user_id,
            username=row.username,
            role=normalize_role(row.role),
            created_at=row.created_at,
            expires_at=row.expires_at,
        )

    def destroy(self, raw_id: str) -> bool:
        """Delete the session. Returns False when there was nothing to delete."""
        return self._delete(hash_session_id(raw_id))

    def purge_expired(self) -> int:
        """Delete all sessions past their expiry. Returns number of rows removed."""
        with self.engine.connect() as conn:
            result = conn.execute(_sessions.delete().where(_sessions.c.expires_at <= time.time()))
            conn.commit()
        return result.rowcount

    def _delete(self, id_hash: str) -> bool:
        with self.engine.connect() as conn:
            result = conn.execute(_sessions.delete().where(_sessions.c.id_hash == id_hash))
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Cookie helpers
# ---------------------------------------------------------------------------


def set_session_cookie(response, raw_id: str) -> None:
    """Write the session id as an httpOnly cookie on the response.

    httponly=True: JS cannot read the cookie.
    samesite="lax": not sent on cross-site POSTs.
    secure: only sent over HTTPS when SECURE_COOKIES=true.
    max_age: matches the server-side TTL so both expire together.
    """
    response.set_cookie(
        _settings.session_cookie_name,
        value=raw_id,
        httponly=True,
        samesite="lax",
        secure=_settings.secure_cookies,
        max_age=_settings.session_ttl_seconds,
    )


def clear_session_cookie(response) -> None:
    response.delete_cookie(
        _settings.session_cookie_name,
        httponly=True,
        samesite="lax",
        secure=_settings.secure_cookies,
    )
