"""
api/routes/auth.py -- Registration, login, logout and identity endpoints.

Routes:
  POST /api/auth/register   -- create a local account (role "user")
  POST /api/auth/login      -- verify credentials; sets the session cookie
  POST /api/auth/logout     -- destroys the session; always 200
  GET  /api/auth/me         -- session identity, or {"user": null}

Security:
  POST /login and POST /register are rate-limited per client IP.
  Login failures of every kind return the same body; see auth/gateway.py.
  Cache-Control: no-store on login responses.

No `from __future__ import annotations` here: @limiter.limit wraps the
handlers, and FastAPI resolves string annotations in the wrapper's module.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter
from api.models import (
    IdentityResponse,
    LoginResponse,
    LogoutResponse,
    MeResponse,
    RegisterResponse,
    UserResponse,
)
from auth import gateway
from auth.dependencies import get_identity, session_id_from
from auth.models import Identity
from auth.sessions import SessionStore, clear_session_cookie, set_session_cookie
from auth.store import UserStore
from core.config import get_settings
from core.errors import Forbidden, Unauthorized

_settings = get_settings()

router = APIRouter(prefix="/auth")


def _credentials(payload: Any) -> tuple[Any, Any]:
    """Pull username and password out of a body of any shape, unconverted."""
    if not isinstance(payload, dict):
        return None, None
    return payload.get("username"), payload.get("password")


@router.post("/register", response_model=RegisterResponse, status_code=201)
@limiter.limit(_settings.register_rate_limit)
def register(request: Request, payload: Any = Body(default=None)) -> RegisterResponse:
    """Create an account. 400 on bad input, 409 if the username is taken."""
    if not _settings.self_registration_enabled:
        raise Forbidden("Registration is disabled")
    username, password = _credentials(payload)
    user_store: UserStore = request.app.state.user_store
    user = gateway.register_user(user_store, username, password)
    return RegisterResponse(user=UserResponse.from_user(user))


@router.post("/login", response_model=LoginResponse)
@limiter.limit(_settings.login_rate_limit)
def login(request: Request, payload: Any = Body(default=None)) -> JSONResponse:
    """Authenticate with username and password; set the session cookie.

    Wrong username, wrong password, missing or non-string fields and
    non-object bodies all produce the same 401 body, byte for byte.
    """
    username, password = _credentials(payload)
    user_store: UserStore = request.app.state.user_store
    session_store: SessionStore = request.app.state.session_store
    try:
        session_id, user = gateway.login(user_store, session_store, username, password)
    except Unauthorized as exc:
        resp = JSONResponse(status_code=401, content={"error": exc.message})
        resp.headers["Cache-Control"] = "no-store"
        return resp

    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(user=UserResponse.from_user(user)).model_dump(by_alias=True),
    )
    set_session_cookie(resp, session_id)
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/logout", response_model=LogoutResponse)
def logout(request: Request) -> JSONResponse:
    """Destroy the current session, if any, and clear the cookie. Idempotent."""
    gateway.logout(request.app.state.session_store, session_id_from(request))
    resp = JSONResponse(content=LogoutResponse().model_dump())
    clear_session_cookie(resp)
    return resp


@router.get("/me", response_model=MeResponse)
def me(identity: Identity = Depends(get_identity)) -> MeResponse:
    """Return the session's identity snapshot. Never reads the users table."""
    public = identity.to_public()
    return MeResponse(user=IdentityResponse(**public) if public else None)
