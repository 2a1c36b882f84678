"""
catalog/query.py -- Translate raw query-string parameters into a typed item query.

GET /api/items accepts arbitrary `field=value` pairs plus four reserved keys:

  ?brand=Apple,Samsung     set membership, each element coerced on its own
  &inStock=true            scalar, coerced to bool
  &price=500               scalar, coerced to a number
  &sort=-price,name        multi-key sort, "-" prefix = descending
  &fields=name,price       inclusion projection ("id" always included)
  &limit=20&skip=40        page window

Coercion produces a small closed variant instead of loose Python values:
Scalar(kind, value) or OneOf(options). The comma check runs before any scalar
coercion, so "1,2" is a set of two numbers and never a malformed number.

Coercion order for one raw string:
  1. "true" / "false"                  -> BOOL
  2. a finite decimal number           -> NUMBER (int when integral syntax)
  3. anything else, unchanged          -> STRING

This module knows nothing about the schema. Unknown field names pass
through; catalog/store.py turns them into a filter that matches nothing.

Layer rule: pure functions, no imports from api/ or auth/.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from core.errors import ValidationError

RESERVED_KEYS = frozenset({"sort", "fields", "limit", "skip"})

DEFAULT_LIMIT = 50
MAX_LIMIT = 200
# Largest OFFSET the database driver can bind (signed 64-bit).
MAX_SKIP = 2**63 - 1

_NUMBER_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
_INTEGER_RE = re.compile(r"^[+-]?\d+$")


# ---------------------------------------------------------------------------
# Coerced value variant
# ---------------------------------------------------------------------------


class ValueKind(str, Enum):
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"


@dataclass(frozen=True)
class Scalar:
    kind: ValueKind
    value: Union[bool, int, float, str]


@dataclass(frozen=True)
class OneOf:
    """Set membership: the field must equal one of `options`."""

    options: tuple[Scalar, ...]


FilterValue = Union[Scalar, OneOf]


@dataclass(frozen=True)
class SortKey:
    field: str
    descending: bool = False


@dataclass
class ItemQuery:
    filters: dict[str, FilterValue] = field(default_factory=dict)
    sort: list[SortKey] = field(default_factory=list)
    fields: list[str] = field(default_factory=list)  # empty = every field
    limit: int = DEFAULT_LIMIT
    skip: int = 0


# ---------------------------------------------------------------------------
# Coercion
# ---------------------------------------------------------------------------


def _parse_number(raw: str) -> int | float | None:
    """Return the number `raw` spells out in full, or None."""
    text = raw.strip()
    if not _NUMBER_RE.match(text):
        return None
    if _INTEGER_RE.match(text):
        return int(text)
    number = float(text)
    return number if math.isfinite(number) else None


def coerce_scalar(raw: str) -> Scalar:
    if raw == "true":
        return Scalar(ValueKind.BOOL, True)
    if raw == "false":
        return Scalar(ValueKind.BOOL, False)
    number = _parse_number(raw)
    if number is not None:
        return Scalar(ValueKind.NUMBER, number)
    return Scalar(ValueKind.STRING, raw)


def coerce_value(raw: str) -> FilterValue:
    """Coerce one raw query value. Comma-joined values become a OneOf."""
    if "," in raw:
        return OneOf(tuple(coerce_scalar(part.strip()) for part in raw.split(",")))
    return coerce_scalar(raw)


def _split_list(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


# ---------------------------------------------------------------------------
# Reserved keys
# ---------------------------------------------------------------------------


def parse_filter(params: Iterable[tuple[str, str]]) -> dict[str, FilterValue]:
    """Build the filter from every non-reserved key.

    A key given more than once (?brand=A&brand=B) is treated as set
    membership over all of its values, commas included.
    """
    grouped: dict[str, list[str]] = {}
    for key, value in params:
        if key in RESERVED_KEYS:
            continue
        grouped.setdefault(key, []).append(value)

    filters: dict[str, FilterValue] = {}
    for key, values in grouped.items():
        if len(values) == 1:
            filters[key] = coerce_value(values[0])
            continue
        options: list[Scalar] = []
        for value in values:
            coerced = coerce_value(value)
            options.extend(coerced.options if isinstance(coerced, OneOf) else (coerced,))
        filters[key] = OneOf(tuple(options))
    return filters


def parse_sort(raw: str | None) -> list[SortKey]:
    """Parse "f1,-f2" into ordered sort keys; the first key is primary."""
    keys: list[SortKey] = []
    seen: set[str] = set()
    for part in _split_list(raw):
        descending = part.startswith("-")
        name = part[1:].strip() if descending else part
        if not name or name in seen:
            continue
        seen.add(name)
        keys.append(SortKey(name, descending))
    return keys


def parse_projection(raw: str | None) -> list[str]:
    """Parse "a,b" into an inclusion projection. "id" is always present."""
    names = list(dict.fromkeys(_split_list(raw)))
    if names and "id" not in names:
        names.insert(0, "id")
    return names


def _parse_count(raw: str | None, name: str, default: int) -> int:
    if raw is None or raw.strip() == "":
        return default
    number = _parse_number(raw)
    if number is None:
        raise ValidationError(f"Query parameter '{name}' must be a number")
    return int(number)


def parse_limit(raw: str | None, default: int = DEFAULT_LIMIT, maximum: int = MAX_LIMIT) -> int:
    """Clamp to `maximum`. Zero or negative limits yield an empty page."""
    return max(min(_parse_count(raw, "limit", default), maximum), 0)


def parse_skip(raw: str | None) -> int:
    """Floor at zero and cap at MAX_SKIP; a skip that large is simply an empty page."""
    return min(max(_parse_count(raw, "skip", 0), 0), MAX_SKIP)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def translate_query(
    params: Iterable[tuple[str, str]],
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> ItemQuery:
    """Turn (key, value) query pairs into an ItemQuery.

    For the reserved keys the last occurrence wins.
    """
    pairs = list(params)
    reserved = {key: value for key, value in pairs if key in RESERVED_KEYS}
    return ItemQuery(
        filters=parse_filter(pairs),
        sort=parse_sort(reserved.get("sort")),
        fields=parse_projection(reserved.get("fields")),
        limit=parse_limit(reserved.get("limit"), default_limit, max_limit),
        skip=parse_skip(reserved.get("skip")),
    )
