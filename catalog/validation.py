"""
catalog/validation.py -- Field rules for item create and update payloads.

Payloads arrive as raw decoded JSON (anything json.loads can return), so every
check here is an explicit type check: bool is rejected where a number is
expected even though Python treats it as an int, and NaN / Infinity are
rejected as prices.

Both validators are all-or-nothing. They either return the complete set of
column values to write, or raise ValidationError on the first bad field
before anything reaches the store.
"""

from __future__ import annotations

import math
from typing import Any

from catalog.models import DEFAULT_CATEGORY
from core.errors import ValidationError

MIN_NAME_LENGTH = 2


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _require_object(payload: Any) -> dict:
    if not isinstance(payload, dict):
        raise ValidationError("Body must be a JSON object.")
    return payload


def _check_name(value: Any, required: bool) -> str:
    if not isinstance(value, str) or len(value.strip()) < MIN_NAME_LENGTH:
        if required:
            raise ValidationError(f"Field 'name' is required (min {MIN_NAME_LENGTH} chars).")
        raise ValidationError(f"Field 'name' must be min {MIN_NAME_LENGTH} chars")
    return value.strip()


def _check_price(value: Any, required: bool) -> float:
    if not _is_number(value):
        if required:
            raise ValidationError("Field 'price' is required (number).")
        raise ValidationError("Field 'price' must be a number")
    return value


def _check_text(key: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"Field '{key}' must be a string")
    return value.strip()


def _check_bool(key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"Field '{key}' must be boolean")
    return value


def validate_new_item(payload: Any) -> dict:
    """Validate a create payload and fill in defaults.

    name and price are mandatory; category defaults to "general", brand and
    sku to "", inStock to True. Unknown keys are ignored.
    """
    body = _require_object(payload)
    values = {
        "name": _check_name(body.get("name"), required=True),
        "price": _check_price(body.get("price"), required=True),
        "category": DEFAULT_CATEGORY,
        "brand": "",
        "sku": "",
        "in_stock": True,
    }
    for key in ("category", "brand", "sku"):
        if body.get(key) is not None:
            values[key] = _check_text(key, body[key])
    if body.get("inStock") is not None:
        values["in_stock"] = _check_bool("inStock", body["inStock"])
    return values


def validate_item_patch(payload: Any) -> dict:
    """Validate a partial update. Only keys present in the payload are checked.

    Raises "No valid fields to update" when the payload is empty or carries
    none of the writable fields.
    """
    body = _require_object(payload)
    updates: dict = {}
    if "name" in body:
        updates["name"] = _check_name(body["name"], required=False)
    if "price" in body:
        updates["price"] = _check_price(body["price"], required=False)
    for key in ("category", "brand", "sku"):
        if key in body:
            updates[key] = _check_text(key, body[key])
    if "inStock" in body:
        updates["in_stock"] = _check_bool("inStock", body["inStock"])
    if not updates:
        raise ValidationError("No valid fields to update")
    return updates
