"""
API response models for the catalog REST endpoints.

These Pydantic v2 models define the HTTP response contract for the auth and
health endpoints. They are intentionally separate from the dataclasses in
auth/models.py and catalog/models.py, which own the internal domain
representation. Route handlers map between the two.

Request bodies are not modelled here. Credentials are read from the raw body
so a malformed login still ends in the uniform 401, and item payloads are
validated field by field in catalog/validation.py. Item responses are the
projection-shaped dicts produced by catalog/store.py.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import User

# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Public view of a User. The password hash never leaves the store."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    username: str
    role: str
    created_at: str = Field(default="", serialization_alias="createdAt")

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(id=user.id, username=user.username, role=user.role, created_at=user.created_at or "")


class RegisterResponse(BaseModel):
    user: UserResponse


class LoginResponse(BaseModel):
    ok: bool = True
    user: UserResponse


class LogoutResponse(BaseModel):
    ok: bool = True


class IdentityResponse(BaseModel):
    """Session snapshot returned by GET /auth/me."""

    id: int
    username: str
    role: str


class MeResponse(BaseModel):
    user: Optional[IdentityResponse] = None


class DeleteResponse(BaseModel):
    deleted: bool = True
    item: dict


class HealthResponse(BaseModel):
    ok: bool = True
    version: str


class ErrorResponse(BaseModel):
    """Uniform error envelope: {"error": "<message>"}."""

    error: str
