"""Tests for merging or replacing a receipt with a new scan."""

import pytest

from conftest import make_item
from data_models import ReceiptData
from merge_resolver import MergeChoice, merge, needs_decision, replace, resolve


@pytest.fixture
def receipt_a():
    return ReceiptData(
        items=[make_item("a1", "Pasta", 10.0, 1, ["Ann"], "scan_a")],
        subtotal=10.0, tax=1.0, tip=2.0, total=13.0, currency="$",
    )


@pytest.fixture
def receipt_b():
    return ReceiptData(
        items=[make_item("b1", "Gelato", 5.0, 1, [], "scan_b")],
        subtotal=5.0, tax=0.5, tip=0.0, total=5.5, currency="€",
    )


class TestMerge:
    def test_amounts_summed_field_by_field(self, receipt_a, receipt_b):
        merged = merge(receipt_a, receipt_b)
        assert merged.subtotal == pytest.approx(15.0)
        assert merged.tax == pytest.approx(1.5)
        assert merged.tip == pytest.approx(2.0)
        assert merged.total == pytest.approx(18.5)
        assert merged.total == pytest.approx(merged.subtotal + merged.tax + merged.tip)

    def test_items_appended_with_scan_tags(self, receipt_a, receipt_b):
        merged = merge(receipt_a, receipt_b)
        assert [(i.id, i.scan_id) for i in merged.items] == [("a1", "scan_a"), ("b1", "scan_b")]
        assert merged.items[0].assigned_to == ["Ann"]

    def test_existing_currency_wins(self, receipt_a, receipt_b):
        assert merge(receipt_a, receipt_b).currency == "$"

    def test_inputs_not_mutated(self, receipt_a, receipt_b):
        merged = merge(receipt_a, receipt_b)
        merged.items[0].assigned_to.append("Bo")
        assert receipt_a.items[0].assigned_to == ["Ann"]


class TestReplaceAndResolve:
    def test_replace_yields_incoming(self, receipt_a, receipt_b):
        assert replace(receipt_a, receipt_b) == receipt_b

    def test_resolve_dispatch(self, receipt_a, receipt_b):
        assert resolve(receipt_a, receipt_b, MergeChoice.MERGE) == merge(receipt_a, receipt_b)
        assert resolve(receipt_a, receipt_b, "replace") == receipt_b
        assert resolve(receipt_a, receipt_b, MergeChoice.CANCEL) == receipt_a

    def test_needs_decision_only_with_items(self, receipt_a):
        assert needs_decision(receipt_a)
        assert not needs_decision(ReceiptData())
        assert not needs_decision(None)
