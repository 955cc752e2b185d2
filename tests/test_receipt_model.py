"""Tests for receipt totals and manual item edits."""

import math

import pytest

from conftest import make_item
from data_models import ReceiptData
from errors import ValidationError
from receipt_model import (
    add_item,
    delete_item,
    edit_item,
    new_item_id,
    parse_item_fields,
    recompute_totals,
)


class TestRecomputeTotals:
    def test_subtotal_is_sum_of_item_prices(self, dinner):
        dinner.subtotal = 999.0
        result = recompute_totals(dinner)
        assert result.subtotal == pytest.approx(60.0)
        assert result.total == pytest.approx(75.0)

    def test_tax_and_tip_untouched(self, dinner):
        result = recompute_totals(dinner)
        assert result.tax == 6.0
        assert result.tip == 9.0

    def test_idempotent(self, dinner):
        once = recompute_totals(dinner)
        twice = recompute_totals(once)
        assert once == twice

    def test_does_not_mutate_input(self, dinner):
        dinner.subtotal = 1.0
        recompute_totals(dinner)
        assert dinner.subtotal == 1.0

    def test_empty_receipt(self):
        result = recompute_totals(ReceiptData(tax=1.0, tip=2.0))
        assert result.subtotal == 0
        assert result.total == pytest.approx(3.0)

    def test_non_finite_amount_rejected(self, dinner):
        dinner.tax = math.nan
        with pytest.raises(ValidationError):
            recompute_totals(dinner)


class TestParseItemFields:
    def test_strings_are_parsed(self):
        assert parse_item_fields(" Fries ", "4,50", "2") == ("Fries", 4.5, 2.0)

    def test_numbers_pass_through(self):
        assert parse_item_fields("Fries", 4.5, 1) == ("Fries", 4.5, 1.0)

    @pytest.mark.parametrize("name,price,quantity", [
        ("", "1", "1"),
        ("   ", "1", "1"),
        ("Fries", "abc", "1"),
        ("Fries", "1", ""),
        ("Fries", "inf", "1"),
        ("Fries", math.nan, 1),
        ("Fries", None, 1),
    ])
    def test_invalid_candidates(self, name, price, quantity):
        with pytest.raises(ValidationError):
            parse_item_fields(name, price, quantity)


class TestAddEditDelete:
    def test_add_item_appends_unassigned_and_recomputes(self, dinner):
        result = add_item(dinner, "Dessert", "8", "1")
        added = result.items[-1]
        assert added.name == "Dessert"
        assert added.assigned_to == []
        assert added.scan_id is None
        assert result.subtotal == pytest.approx(68.0)
        assert result.total == pytest.approx(83.0)
        assert len(dinner.items) == 3

    def test_add_item_invalid_raises_and_leaves_input(self, dinner):
        with pytest.raises(ValidationError):
            add_item(dinner, "", "8", "1")
        assert len(dinner.items) == 3

    def test_new_ids_are_unique(self):
        assert len({new_item_id() for _ in range(100)}) == 100

    def test_edit_item_keeps_id_assignees_and_scan(self):
        data = recompute_totals(ReceiptData(items=[make_item("a", "Wine", 20.0, 1, ["Ann"], "scan_1")]))
        result = edit_item(data, "a", "Red wine", "25", "1")
        item = result.items[0]
        assert (item.id, item.name, item.price) == ("a", "Red wine", 25.0)
        assert item.assigned_to == ["Ann"]
        assert item.scan_id == "scan_1"
        assert result.subtotal == pytest.approx(25.0)

    def test_edit_unknown_item(self, dinner):
        with pytest.raises(ValidationError):
            edit_item(dinner, "missing", "X", "1", "1")

    def test_delete_item(self, dinner):
        result = delete_item(dinner, "2")
        assert [item.id for item in result.items] == ["1", "3"]
        assert result.subtotal == pytest.approx(40.0)
        assert result.total == pytest.approx(55.0)

    def test_delete_unknown_item_is_noop(self, dinner):
        result = delete_item(dinner, "missing")
        assert result == dinner
