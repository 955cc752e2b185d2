"""Tests for parsing OCR text into a raw receipt payload."""

import pytest

from receipt_parser import ReceiptParser

RESTAURANT_TEXT = """\
THE CORNER BISTRO
Table 12   Server: Kim
Margherita Pizza 14.50
Caesar Salad 9.00
Cola x2 6.00
2 Espresso 5.00
Soda 2 x 1.50 3.00
Subtotal 37.50
Tax 8% 3.00
Total: $40.50
Thank you!
"""


@pytest.fixture
def parser():
    return ReceiptParser(debug=False)


class TestParse:
    def test_items(self, parser):
        payload = parser.parse(RESTAURANT_TEXT)
        assert [(i['name'], i['quantity'], i['price']) for i in payload['items']] == [
            ("Margherita Pizza", 1, 14.50),
            ("Caesar Salad", 1, 9.00),
            ("Cola", 2, 6.00),
            ("Espresso", 2, 5.00),
            ("Soda", 2, 3.00),
        ]

    def test_amounts(self, parser):
        payload = parser.parse(RESTAURANT_TEXT)
        assert payload['subtotal'] == pytest.approx(37.50)
        assert payload['tax'] == pytest.approx(3.00)
        assert payload['tip'] == 0.0
        assert payload['total'] == pytest.approx(40.50)
        assert payload['currency'] == "$"

    def test_duplicate_overlap_lines_removed(self, parser):
        payload = parser.parse("Burger 12.00\nBurger 12.00\nFries 4.00")
        assert [i['name'] for i in payload['items']] == ["Burger", "Fries"]

    def test_euro_receipt(self, parser):
        payload = parser.parse("Croissant 2,50 €\nCafé 1,80 €\nTOTAL 4,30 EUR")
        assert [i['price'] for i in payload['items']] == [2.5, 1.8]
        assert payload['total'] == pytest.approx(4.3)
        assert payload['currency'] == "€"

    def test_empty_text(self, parser):
        payload = parser.parse("")
        assert payload['items'] == []
        assert payload['total'] == 0.0


class TestHelpers:
    @pytest.mark.parametrize("raw,expected", [
        ("12.50", 12.5),
        ("$12.50", 12.5),
        ("12,50", 12.5),
        ("1.234,56", 1234.56),
        ("1,234.56", 1234.56),
        ("", 0.0),
        ("abc", 0.0),
        ("0.001", 0.0),
    ])
    def test_clean_price(self, parser, raw, expected):
        assert parser._clean_price(raw) == pytest.approx(expected)

    @pytest.mark.parametrize("name,valid", [
        ("Cashew Chicken", True),
        ("Fish Tacos", True),
        ("Subtotal", False),
        ("Card", False),
        ("12", False),
        ("A", False),
    ])
    def test_is_valid_item_name(self, parser, name, valid):
        assert parser._is_valid_item_name(name) is valid
