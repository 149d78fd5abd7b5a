"""
Tests for parsing operator-typed field values.
"""

from decimal import Decimal

import pytest

from stockroom.models import DEFAULT_CATEGORIES
from stockroom.utils import (
    parse_category_field,
    parse_int_field,
    parse_item_update,
    parse_price_field,
    to_decimal,
)


class TestScalars:
    """Single-field parsers."""

    @pytest.mark.parametrize("value, expected", [
        ("2.50", Decimal("2.50")),
        (3, Decimal("3")),
        (2.1, Decimal("2.1")),
        (Decimal("0"), Decimal("0")),
        ("abc", None),
        ("inf", None),
        (True, None),
    ])
    def test_to_decimal(self, value, expected):
        assert to_decimal(value) == expected

    def test_int_field(self):
        assert parse_int_field("quantity", " 12 ").value == 12
        assert not parse_int_field("quantity", "").supplied
        assert parse_int_field("quantity", "1.5").error
        assert parse_int_field("quantity", "-1", minimum=0).error == "must be at least 0"

    def test_price_field(self):
        assert parse_price_field("price", "$4.25").value == Decimal("4.25")
        assert parse_price_field("price", "  ").ok
        assert parse_price_field("price", "-1").error == "must not be negative"
        assert "not a number" in parse_price_field("price", "cheap").error

    @pytest.mark.parametrize("raw, expected", [
        ("1", "Fruits"),
        ("9", "Other"),
        ("dairy", "Dairy"),
        ("Frozen Foods", "Frozen Foods"),
    ])
    def test_category_field(self, raw, expected):
        assert parse_category_field("category", raw, DEFAULT_CATEGORIES).value == expected

    @pytest.mark.parametrize("raw", ["0", "10", "Toys"])
    def test_category_field_rejects(self, raw):
        assert not parse_category_field("category", raw, DEFAULT_CATEGORIES).ok


class TestItemUpdate:
    """Parsing a whole update form."""

    def test_blank_fields_are_kept(self):
        changes, failures = parse_item_update({"quantity": "5", "name": "  "}, DEFAULT_CATEGORIES)
        assert failures == []
        assert changes.changed_fields() == {"quantity": 5}

    def test_all_fields(self):
        changes, failures = parse_item_update({
            "product_id": "12",
            "name": "Kale",
            "category": "2",
            "quantity": "0",
            "last_price": "1.10",
        }, DEFAULT_CATEGORIES)

        assert failures == []
        assert changes.changed_fields() == {
            "product_id": 12,
            "name": "Kale",
            "category": "Vegetables",
            "quantity": 0,
            "last_price": Decimal("1.10"),
        }

    def test_every_bad_field_is_reported(self):
        changes, failures = parse_item_update({
            "product_id": "0",
            "category": "42",
            "quantity": "many",
            "last_price": "4.00",
        }, DEFAULT_CATEGORIES)

        assert [f.field for f in failures] == ["product_id", "category", "quantity"]
        assert changes.changed_fields() == {"last_price": Decimal("4.00")}

    def test_nothing_supplied(self):
        changes, failures = parse_item_update({}, DEFAULT_CATEGORIES)
        assert failures == []
        assert changes.is_empty()
