"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

The session cookie is the only auth method. Its raw value is resolved through
the SessionStore on app.state into an Identity snapshot.

get_identity() is the soft variant (returns ANONYMOUS on failure).
require_identity() wraps it and raises Unauthorized if there is no session.
Ownership (Forbidden) is decided later, in catalog/service.py, once the
target item has been loaded.

Layer rule: no imports from api/ or catalog/.
  auth/dependencies.py may import from fastapi because this module is part
  of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Request

from auth.gateway import current_identity
from auth.models import Identity
from core.config import get_settings
from core.errors import Unauthorized


def session_id_from(request: Request) -> str | None:
    return request.cookies.get(get_settings().session_cookie_name) or None


def get_identity(request: Request) -> Identity:
    """Return the caller's Identity, or ANONYMOUS. Never raises.

    Use as a FastAPI dependency:
        @router.get("/public")
        async def route(identity: Identity = Depends(get_identity)): ...
    """
    return current_identity(request.app.state.session_store, session_id_from(request))


def require_identity(request: Request) -> Identity:
    """Require a live session. Raises Unauthorized (401) otherwise."""
    identity = get_identity(request)
    if identity.is_anonymous:
        raise Unauthorized("Unauthorized")
    return identity
