"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, near-zero logic). Mirrors the
approach in catalog/models.py -- dataclasses own domain shape; stores and
services do the work.

Layer rule: no imports from api/ or catalog/.
"""

from __future__ import annotations

from dataclasses import dataclass

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLES = frozenset({ROLE_USER, ROLE_ADMIN})


def normalize_role(value: str | None) -> str:
    """Coerce any stored role outside the enumerated set to "user"."""
    return value if value in ROLES else ROLE_USER


@dataclass
class User:
    """A registered account.

    username is always stored trimmed and lowercased, so lookups are
    effectively case-insensitive. role is not changeable through the public
    API; the seeder and direct DB access are the only ways to mint an admin.
    """

    username: str
    hashed_password: str
    role: str = ROLE_USER
    id: int | None = None
    created_at: str | None = None


@dataclass
class Session:
    """Server-side session record.

    user_id / username / role are a snapshot taken at login. Changes to the
    User row after login are not reflected until the user logs in again.
    expires_at is a UNIX timestamp fixed at creation (no sliding renewal).
    """

    user_id: int
    username: str
    role: str
    created_at: float
    expires_at: float


@dataclass(frozen=True)
class Identity:
    """The caller behind a request: a session snapshot, or anonymous.

    Passed explicitly into every operation that makes an authorization
    decision. user_id is None only for the anonymous identity.
    """

    user_id: int | None = None
    username: str | None = None
    role: str | None = None

    @property
    def is_anonymous(self) -> bool:
        return self.user_id is None

    @property
    def is_admin(self) -> bool:
        return not self.is_anonymous and self.role == ROLE_ADMIN

    def to_public(self) -> dict | None:
        """Return the `{id, username, role}` view used by GET /auth/me, or None."""
        if self.is_anonymous:
            return None
        return {"id": self.user_id, "username": self.username, "role": self.role}


ANONYMOUS = Identity()
