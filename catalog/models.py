"""
catalog/models.py -- Domain dataclass for catalog items.

Pure data container. Validation lives in catalog/validation.py, persistence
in catalog/store.py, and authorization decisions in auth/policy.py.

Clients see camelCase field names (inStock, ownerId, ...). PUBLIC_FIELDS maps
each client-facing name to the dataclass attribute / column name so the query
translator and the store agree on one vocabulary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DEFAULT_CATEGORY = "general"

# client-facing name -> attribute / column name
PUBLIC_FIELDS: dict[str, str] = {
    "id": "id",
    "name": "name",
    "price": "price",
    "category": "category",
    "brand": "brand",
    "sku": "sku",
    "inStock": "in_stock",
    "ownerId": "owner_id",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}


@dataclass
class Item:
    """A product in the catalog.

    id is the canonical string form of a UUID, assigned by the store on insert.
    owner_id is the creating user's id; None for rows seeded without an owner.
    """

    name: str
    price: float
    category: str = DEFAULT_CATEGORY
    brand: str = ""
    sku: str = ""
    in_stock: bool = True
    owner_id: Optional[int] = None
    id: Optional[str] = None
    created_at: str = ""  # ISO 8601, set by store on insert
    updated_at: Optional[str] = None  # ISO 8601, set on every mutation

    def to_public(self) -> dict:
        return {public: getattr(self, attr) for public, attr in PUBLIC_FIELDS.items()}
