"""
catalog/service.py -- Item operations with authorization applied.

Every mutation walks the same gates, in order, and each gate has its own
error kind:

  session    -> Unauthorized  (401)   checked by auth.dependencies.require_identity
                                      and re-checked here for non-HTTP callers
  id format  -> ValidationError (400)
  existence  -> NotFound (404)
  ownership  -> Forbidden (403)       auth.policy.ensure_can_modify
  fields     -> ValidationError (400) catalog.validation, before any write

Reads need no identity. Identity is always an explicit argument; nothing here
reads request state.

Existence-then-write is not transactional: an item deleted between the
ownership check and the update surfaces as NotFound.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from auth.models import Identity
from auth.policy import ensure_can_modify
from catalog.models import Item
from catalog.query import ItemQuery
from catalog.store import ItemStore
from catalog.validation import validate_item_patch, validate_new_item
from core.errors import NotFound, Unauthorized, ValidationError

logger = logging.getLogger("catalogapi.catalog")


def parse_item_id(raw: str) -> str:
    """Return `raw` if it is a canonical item id; raise ValidationError otherwise.

    A malformed id is a client error (400), never NotFound.
    """
    try:
        parsed = uuid.UUID(raw)
    except (ValueError, TypeError, AttributeError) as exc:
        raise ValidationError("Invalid id") from exc
    if str(parsed) != raw:
        raise ValidationError("Invalid id")
    return raw


def _require_authenticated(identity: Identity) -> None:
    if identity.is_anonymous:
        raise Unauthorized("Unauthorized")


def _load(store: ItemStore, item_id: str) -> Item:
    item = store.get_item(parse_item_id(item_id))
    if item is None:
        raise NotFound("Not Found")
    return item


def list_items(store: ItemStore, query: ItemQuery) -> list[dict]:
    return store.list_items(query)


def get_item(store: ItemStore, item_id: str) -> Item:
    return _load(store, item_id)


def create_item(store: ItemStore, identity: Identity, payload: Any) -> Item:
    """Validate and insert a new item owned by the caller."""
    _require_authenticated(identity)
    values = validate_new_item(payload)
    new_id = store.create_item(values, owner_id=identity.user_id)
    logger.info("Item %s created by user id=%s", new_id, identity.user_id)
    return store.get_item(new_id)


def update_item(store: ItemStore, identity: Identity, item_id: str, payload: Any) -> Item:
    """Apply a partial update. All provided fields must validate or nothing is written."""
    _require_authenticated(identity)
    item = _load(store, item_id)
    ensure_can_modify(identity, item)
    updates = validate_item_patch(payload)
    if not store.update_item(item.id, updates):
        raise NotFound("Not Found")
    logger.info("Item %s updated by user id=%s (%s)", item.id, identity.user_id, ", ".join(sorted(updates)))
    return store.get_item(item.id)


def delete_item(store: ItemStore, identity: Identity, item_id: str) -> Item:
    """Hard-delete an item and return it as it was."""
    _require_authenticated(identity)
    item = _load(store, item_id)
    ensure_can_modify(identity, item)
    deleted = store.delete_item(item.id)
    if deleted is None:
        raise NotFound("Not Found")
    logger.info("Item %s deleted by user id=%s", item.id, identity.user_id)
    return deleted
