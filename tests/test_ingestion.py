"""Tests for OCR payload normalization."""

import pytest

from config import CURRENCY_DEFAULT
from errors import ExternalServiceError
from ingestion import (
    UNKNOWN_ITEM_NAME,
    fill_defaults,
    new_scan_id,
    normalize_scan,
    tax_included_in_items,
)


def payload(prices, subtotal=0, tax=0, tip=0, total=0, currency="€"):
    return {
        'items': [{'name': f"Item {i}", 'price': p, 'quantity': 1} for i, p in enumerate(prices)],
        'subtotal': subtotal,
        'tax': tax,
        'tip': tip,
        'total': total,
        'currency': currency,
    }


class TestFillDefaults:
    def test_missing_fields_filled(self):
        raw = fill_defaults({'items': [{'name': "Soup"}, {'price': "3.50"}]})
        assert raw['items'] == [
            {'name': "Soup", 'price': 0.0, 'quantity': 1.0},
            {'name': UNKNOWN_ITEM_NAME, 'price': 3.5, 'quantity': 1.0},
        ]
        assert (raw['subtotal'], raw['tax'], raw['tip'], raw['total']) == (0.0, 0.0, 0.0, 0.0)
        assert raw['currency'] == CURRENCY_DEFAULT

    def test_null_items(self):
        assert fill_defaults({'items': None})['items'] == []

    def test_currency_symbols_stripped_from_amounts(self):
        assert fill_defaults({'total': "$12.40"})['total'] == pytest.approx(12.4)

    @pytest.mark.parametrize("bad", [
        "not json",
        {'items': {'a': 1}},
        {'items': ["Soup"]},
        {'total': "twelve"},
        {'tax': True},
        {'items': [{'name': "Soup", 'price': [1]}]},
    ])
    def test_malformed(self, bad):
        with pytest.raises(ExternalServiceError):
            fill_defaults(bad)


class TestTaxIncludedHeuristic:
    def test_within_five_percent(self):
        assert tax_included_in_items(19.80, 20.00)

    def test_outside_five_percent(self):
        assert not tax_included_in_items(15.00, 20.00)

    def test_zero_stated_total_never_included(self):
        assert not tax_included_in_items(0.0, 0.0)
        assert not tax_included_in_items(10.0, 0.0)


class TestNormalizeScan:
    def test_tax_included_zeroes_tax(self):
        data = normalize_scan(payload([9.90, 9.90], subtotal=18.0, tax=1.8, total=20.0))
        assert data.tax == 0
        assert data.subtotal == pytest.approx(19.80)
        assert data.total == pytest.approx(19.80)

    def test_tax_not_included_keeps_reported_values(self):
        data = normalize_scan(payload([10.0, 5.0], subtotal=16.0, tax=4.0, total=20.0))
        assert data.tax == 4.0
        assert data.subtotal == 16.0
        assert data.total == pytest.approx(20.0)

    def test_missing_subtotal_uses_item_sum(self):
        data = normalize_scan(payload([10.0, 5.0], tax=2.0, total=30.0))
        assert data.subtotal == pytest.approx(15.0)
        assert data.total == pytest.approx(17.0)

    def test_ids_assignments_and_scan_tag(self):
        data = normalize_scan(payload([1.0, 2.0, 3.0]), scan_id="scan_x")
        assert len({item.id for item in data.items}) == 3
        assert all(item.assigned_to == [] for item in data.items)
        assert {item.scan_id for item in data.items} == {"scan_x"}

    def test_each_ingestion_gets_its_own_scan_id(self):
        first = normalize_scan(payload([1.0]))
        second = normalize_scan(payload([1.0]))
        assert first.items[0].scan_id != second.items[0].scan_id
        assert first.items[0].id != second.items[0].id

    def test_currency_and_tip_carried(self):
        data = normalize_scan(payload([10.0], tip=2.0, total=50.0, currency="£"))
        assert data.currency == "£"
        assert data.tip == 2.0
        assert data.total == pytest.approx(12.0)

    def test_scan_ids_are_unique(self):
        assert new_scan_id() != new_scan_id()
