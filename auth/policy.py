"""
auth/policy.py -- Ownership-based authorization for item mutations.

An identity may modify an item when it is an admin, or when it created the
item. Anonymous callers never may. This module only answers the ownership
question: "is there a session at all" is the dependency layer's job
(Unauthorized), and the two outcomes must stay distinct.

Layer rule: no imports from api/ or catalog/. Items are duck-typed on
`owner_id`.
"""

from __future__ import annotations

from auth.models import Identity
from core.errors import Forbidden


def can_modify(identity: Identity, item) -> bool:
    if identity.is_anonymous:
        return False
    if identity.is_admin:
        return True
    return item.owner_id is not None and identity.user_id == item.owner_id


def ensure_can_modify(identity: Identity, item) -> None:
    """Raise Forbidden unless can_modify() allows the mutation."""
    if not can_modify(identity, item):
        raise Forbidden("Forbidden: only the owner or an admin can modify this item")
