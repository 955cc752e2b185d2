"""Tests for utility helpers."""

import pytest

from utils import (
    clean_text_for_display,
    format_currency,
    round_money,
    strip_data_url,
    try_parse_float,
    validate_image_path,
    validate_menu_choice,
)


class TestParsing:
    @pytest.mark.parametrize("raw,expected", [(" 3.5 ", 3.5), ("3,5", 3.5), ("x", None), ("", None)])
    def test_try_parse_float(self, raw, expected):
        assert try_parse_float(raw) == expected

    def test_validate_menu_choice(self):
        assert validate_menu_choice(" 2 ", ["1", "2"]) == "2"
        assert validate_menu_choice("9", ["1", "2"]) is None


class TestMoney:
    def test_round_half_up(self):
        assert round_money(2.675) == 2.68
        assert round_money(0.005) == 0.01

    def test_format_currency(self):
        assert format_currency(12.5, "€") == "€12.50"
        assert format_currency(-3, "$") == "-$3.00"
        assert format_currency("n/a", "$") == "$0.00"


class TestText:
    def test_strip_data_url(self):
        assert strip_data_url("data:image/jpeg;base64,QUJD") == "QUJD"
        assert strip_data_url("QUJD") == "QUJD"

    def test_clean_text_for_display(self):
        assert clean_text_for_display("a\x00b   c") == "ab c"
        assert clean_text_for_display("x" * 20, max_length=10) == "xxxxxxx..."


class TestValidateImagePath:
    def test_valid(self, tmp_path):
        path = tmp_path / "receipt.jpg"
        path.write_bytes(b"\xff\xd8\xff")
        assert validate_image_path(str(path))

    def test_missing(self, tmp_path):
        assert not validate_image_path(str(tmp_path / "nope.jpg"))

    def test_wrong_extension(self, tmp_path):
        path = tmp_path / "receipt.txt"
        path.write_text("hi")
        assert not validate_image_path(str(path))
