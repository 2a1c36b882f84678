"""Unit tests for catalog/query.py -- query-string translation.

Covers:
- Scalar coercion order: bool literals, then finite numbers, then strings
- Comma values become set membership, each element coerced independently
- Repeated keys become set membership
- sort / fields / limit / skip parsing, clamping and defaults
- Reserved keys never leak into the filter
"""

import pytest

from catalog.query import (
    MAX_LIMIT,
    MAX_SKIP,
    OneOf,
    Scalar,
    SortKey,
    ValueKind,
    coerce_scalar,
    coerce_value,
    parse_limit,
    parse_projection,
    parse_skip,
    parse_sort,
    translate_query,
)
from core.errors import ValidationError

# ---------------------------------------------------------------------------
# Coercion
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("true", Scalar(ValueKind.BOOL, True)),
        ("false", Scalar(ValueKind.BOOL, False)),
        ("500", Scalar(ValueKind.NUMBER, 500)),
        ("-3", Scalar(ValueKind.NUMBER, -3)),
        ("12.5", Scalar(ValueKind.NUMBER, 12.5)),
        ("1e3", Scalar(ValueKind.NUMBER, 1000.0)),
        (" 42 ", Scalar(ValueKind.NUMBER, 42)),
        ("Apple", Scalar(ValueKind.STRING, "Apple")),
        ("True", Scalar(ValueKind.STRING, "True")),
        ("12abc", Scalar(ValueKind.STRING, "12abc")),
        ("", Scalar(ValueKind.STRING, "")),
        ("1e999", Scalar(ValueKind.STRING, "1e999")),
        ("nan", Scalar(ValueKind.STRING, "nan")),
    ],
)
def test_coerce_scalar(raw, expected):
    assert coerce_scalar(raw) == expected


def test_integral_numbers_stay_int():
    value = coerce_scalar("7").value
    assert isinstance(value, int) and not isinstance(value, bool)


def test_comma_value_is_set_membership():
    assert coerce_value("Apple,Samsung") == OneOf(
        (Scalar(ValueKind.STRING, "Apple"), Scalar(ValueKind.STRING, "Samsung"))
    )


def test_set_elements_are_trimmed_and_coerced_independently():
    assert coerce_value("1, true ,x") == OneOf(
        (
            Scalar(ValueKind.NUMBER, 1),
            Scalar(ValueKind.BOOL, True),
            Scalar(ValueKind.STRING, "x"),
        )
    )


def test_set_check_runs_before_numeric_check():
    """"1,5" is a two-element set, never a malformed decimal."""
    value = coerce_value("1,5")
    assert isinstance(value, OneOf)
    assert [option.value for option in value.options] == [1, 5]


# ---------------------------------------------------------------------------
# Reserved keys
# ---------------------------------------------------------------------------


def test_parse_sort_descending_then_ascending():
    assert parse_sort("-price,name") == [SortKey("price", True), SortKey("name", False)]


def test_parse_sort_ignores_blanks_and_duplicates():
    assert parse_sort(" , -price, ,price,-") == [SortKey("price", True)]


def test_parse_sort_empty():
    assert parse_sort(None) == []
    assert parse_sort("") == []


def test_parse_projection_always_includes_id():
    assert parse_projection("name,price") == ["id", "name", "price"]
    assert parse_projection("price,id") == ["price", "id"]
    assert parse_projection(None) == []


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, 50),
        ("", 50),
        ("10", 10),
        ("200", 200),
        ("201", MAX_LIMIT),
        ("100000", MAX_LIMIT),
        ("0", 0),
        ("-5", 0),
        ("7.9", 7),
    ],
)
def test_parse_limit(raw, expected):
    assert parse_limit(raw) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [(None, 0), ("15", 15), ("-4", 0), ("1e30", MAX_SKIP), (str(2**70), MAX_SKIP)],
)
def test_parse_skip(raw, expected):
    assert parse_skip(raw) == expected


@pytest.mark.parametrize("name, parser", [("limit", parse_limit), ("skip", parse_skip)])
def test_non_numeric_page_values_rejected(name, parser):
    with pytest.raises(ValidationError, match=name):
        parser("lots")


# ---------------------------------------------------------------------------
# translate_query
# ---------------------------------------------------------------------------


def test_translate_query_excludes_reserved_keys():
    query = translate_query(
        [
            ("brand", "Apple,Samsung"),
            ("inStock", "true"),
            ("sort", "-price,name"),
            ("fields", "name,price"),
            ("limit", "500"),
            ("skip", "2"),
        ]
    )
    assert set(query.filters) == {"brand", "inStock"}
    assert query.filters["brand"] == OneOf(
        (Scalar(ValueKind.STRING, "Apple"), Scalar(ValueKind.STRING, "Samsung"))
    )
    assert query.filters["inStock"] == Scalar(ValueKind.BOOL, True)
    assert query.sort == [SortKey("price", True), SortKey("name", False)]
    assert query.fields == ["id", "name", "price"]
    assert query.limit == 200
    assert query.skip == 2


def test_translate_query_defaults():
    query = translate_query([])
    assert query.filters == {}
    assert query.sort == []
    assert query.fields == []
    assert query.limit == 50
    assert query.skip == 0


def test_repeated_key_becomes_set_membership():
    query = translate_query([("brand", "Apple"), ("brand", "Sony,JBL")])
    assert query.filters["brand"] == OneOf(
        (
            Scalar(ValueKind.STRING, "Apple"),
            Scalar(ValueKind.STRING, "Sony"),
            Scalar(ValueKind.STRING, "JBL"),
        )
    )


def test_configured_page_size_limits():
    query = translate_query([("limit", "30")], default_limit=10, max_limit=20)
    assert query.limit == 20
    assert translate_query([], default_limit=10, max_limit=20).limit == 10
