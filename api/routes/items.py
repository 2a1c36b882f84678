"""
api/routes/items.py -- Catalog item REST endpoints.

Routes:
  GET    /api/items         -- filter/sort/project/page; public
  GET    /api/items/{id}    -- single item; public
  POST   /api/items         -- create; session required
  PUT    /api/items/{id}    -- partial update; session + owner/admin
  DELETE /api/items/{id}    -- hard delete; session + owner/admin

Handlers stay thin: the query string goes through catalog/query.py, bodies
and authorization through catalog/service.py. Domain errors propagate to
the handlers in api/main.py.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Request

from api.models import DeleteResponse
from auth.dependencies import require_identity
from auth.models import Identity
from catalog import service
from catalog.query import translate_query
from catalog.store import ItemStore
from core.config import get_settings

_settings = get_settings()

router = APIRouter(prefix="/items")


@router.get("")
def list_items(request: Request) -> list[dict]:
    """List items. Every non-reserved query parameter is a filter."""
    query = translate_query(
        request.query_params.multi_items(),
        default_limit=_settings.default_page_size,
        max_limit=_settings.max_page_size,
    )
    item_store: ItemStore = request.app.state.item_store
    return service.list_items(item_store, query)


@router.get("/{item_id}")
def get_item(request: Request, item_id: str) -> dict:
    item_store: ItemStore = request.app.state.item_store
    return service.get_item(item_store, item_id).to_public()


@router.post("", status_code=201)
def create_item(
    request: Request,
    payload: Any = Body(default=None),
    identity: Identity = Depends(require_identity),
) -> dict:
    item_store: ItemStore = request.app.state.item_store
    return service.create_item(item_store, identity, payload).to_public()


@router.put("/{item_id}")
def update_item(
    request: Request,
    item_id: str,
    payload: Any = Body(default=None),
    identity: Identity = Depends(require_identity),
) -> dict:
    item_store: ItemStore = request.app.state.item_store
    return service.update_item(item_store, identity, item_id, payload).to_public()


@router.delete("/{item_id}", response_model=DeleteResponse)
def delete_item(
    request: Request,
    item_id: str,
    identity: Identity = Depends(require_identity),
) -> DeleteResponse:
    item_store: ItemStore = request.app.state.item_store
    deleted = service.delete_item(item_store, identity, item_id)
    return DeleteResponse(item=deleted.to_public())
