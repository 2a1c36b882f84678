"""
catalog/store.py -- SQLAlchemy Core persistence layer for catalog items.

Pattern: Repository + Data Mapper. ItemStore is the repository; _row_to_item
is the mapper. It also compiles an ItemQuery (catalog/query.py) into a
SELECT: filters become WHERE clauses, sort keys ORDER BY, the projection a
column list, limit/skip LIMIT/OFFSET.

Typed matching: every column has a value kind (string, number, bool). A
filter value of a different kind can never be equal to a stored value, so it
compiles to an always-false clause instead of relying on the database's
cross-type comparison rules. The same goes for filter fields that are not
columns at all. Unknown sort and projection fields are ignored.

Security: all queries use bound parameters. Column objects are looked up from
the PUBLIC_FIELDS whitelist, never built from client strings.

Usage:
    store = ItemStore("sqlite:///./catalog.db")
    item_id = store.create_item({"name": "iPad Air", "price": 600, ...}, owner_id=1)
    rows = store.list_items(translate_query([("brand", "Apple,Samsung")]))
    store.close()
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, Column, Float, Integer, MetaData, String, Table, false, func, select
from sqlalchemy.engine import Engine

from auth.store import make_engine
from catalog.models import DEFAULT_CATEGORY, PUBLIC_FIELDS, Item
from catalog.query import FilterValue, ItemQuery, OneOf, ValueKind

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_items = Table(
    "items",
    _metadata,
    Column("id", String(36), primary_key=True),  # canonical UUID string
    Column("name", String(255), nullable=False),
    Column("price", Float, nullable=False),
    Column("category", String(100), nullable=False, server_default=DEFAULT_CATEGORY),
    Column("brand", String(100), nullable=False, server_default=""),
    Column("sku", String(100), nullable=False, server_default=""),
    Column("in_stock", Boolean, nullable=False, server_default="1"),
    Column("owner_id", Integer, index=True),  # users.id; NULL for unowned seed rows
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32)),
)

_COLUMN_KINDS: dict[str, ValueKind] = {
    "id": ValueKind.STRING,
    "name": ValueKind.STRING,
    "price": ValueKind.NUMBER,
    "category": ValueKind.STRING,
    "brand": ValueKind.STRING,
    "sku": ValueKind.STRING,
    "in_stock": ValueKind.BOOL,
    "owner_id": ValueKind.NUMBER,
    "created_at": ValueKind.STRING,
    "updated_at": ValueKind.STRING,
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _price_out(value):
    """Float column values with no fractional part read back as int (850, not 850.0)."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _filter_clause(public_name: str, value: FilterValue):
    """Compile one filter entry into a WHERE clause."""
    attr = PUBLIC_FIELDS.get(public_name)
    if attr is None:
        return false()
    column = _items.c[attr]
    kind = _COLUMN_KINDS[attr]
    if isinstance(value, OneOf):
        candidates = [option.value for option in value.options if option.kind == kind]
        if not candidates:
            return false()
        return column.in_(candidates)
    if value.kind != kind:
        return false()
    return column == value.value


def build_select(query: ItemQuery):
    """Return the SELECT statement and the (public, attr) pairs it yields."""
    if query.fields:
        selected = [(name, PUBLIC_FIELDS[name]) for name in query.fields if name in PUBLIC_FIELDS]
    else:
        selected = list(PUBLIC_FIELDS.items())

    stmt = select(*[_items.c[attr] for _, attr in selected])
    for name, value in query.filters.items():
        stmt = stmt.where(_filter_clause(name, value))
    for key in query.sort:
        attr = PUBLIC_FIELDS.get(key.field)
        if attr is None:
            continue
        column = _items.c[attr]
        stmt = stmt.order_by(column.desc() if key.descending else column.asc())
    stmt = stmt.offset(query.skip).limit(query.limit)
    return stmt, selected


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ItemStore:
    """Repository for catalog items.

    Each create/update/delete is a single-row statement; there are no
    multi-row transactions to reason about.
    """

    def __init__(self, db_url: str) -> None:
        self.engine: Engine = make_engine(db_url)
        _metadata.create_all(self.engine)

    def list_items(self, query: ItemQuery) -> list[dict]:
        """Run a translated query. Rows come back as client-facing dicts
        holding only the projected fields."""
        stmt, selected = build_select(query)
        with self.engine.connect() as conn:
            rows = conn.execute(stmt).fetchall()
        return [
            {name: _price_out(row._mapping[attr]) if attr == "price" else row._mapping[attr] for name, attr in selected}
            for row in rows
        ]

    def get_item(self, item_id: str) -> Optional[Item]:
        with self.engine.connect() as conn:
            row = conn.execute(_items.select().where(_items.c.id == item_id)).fetchone()
        return _row_to_item(row) if row is not None else None

    def create_item(self, values: dict, owner_id: Optional[int]) -> str:
        """Insert a validated item and return its new id."""
        item_id = str(uuid.uuid4())
        with self.engine.connect() as conn:
            conn.execute(
                _items.insert().values(
                    id=item_id,
                    owner_id=owner_id,
                    created_at=_now_iso(),
                    **values,
                )
            )
            conn.commit()
        return item_id

    def update_item(self, item_id: str, updates: dict) -> bool:
        """Apply validated column updates and stamp updated_at.

        Returns False if the row no longer exists.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _items.update().where(_items.c.id == item_id).values(updated_at=_now_iso(), **updates)
            )
            conn.commit()
        return result.rowcount > 0

    def delete_item(self, item_id: str) -> Optional[Item]:
        """Hard-delete an item and return the record as it was, or None."""
        with self.engine.begin() as conn:
            row = conn.execute(_items.select().where(_items.c.id == item_id)).fetchone()
            if row is None:
                return None
            conn.execute(_items.delete().where(_items.c.id == item_id))
        return _row_to_item(row)

    def count(self) -> int:
        with self.engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(_items)).scalar() or 0

    def delete_all(self) -> int:
        """Remove every item. Used by the seeder's --reset flag only."""
        with self.engine.connect() as conn:
            result = conn.execute(_items.delete())
            conn.commit()
        return result.rowcount

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_item(row) -> Item:
    return Item(
        id=row.id,
        name=row.name,
        price=_price_out(row.price),
        category=row.category,
        brand=row.brand,
        sku=row.sku,
        in_stock=bool(row.in_stock),
        owner_id=row.owner_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
