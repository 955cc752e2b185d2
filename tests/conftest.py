"""Shared fixtures for tabsplit tests."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "Source"))

from data_models import ReceiptData, ReceiptItem  # noqa: E402


def make_item(item_id, name, price, quantity=1, assigned_to=None, scan_id=None):
    return ReceiptItem(
        id=item_id,
        name=name,
        price=price,
        quantity=quantity,
        assigned_to=list(assigned_to or []),
        scan_id=scan_id,
    )


@pytest.fixture
def dinner():
    """Three items, subtotal 60, tax 6, tip 9."""
    return ReceiptData(
        items=[
            make_item("1", "Pizza", 30.0, 1, ["Ann", "Bo"]),
            make_item("2", "Beer", 20.0, 2, ["Bo"]),
            make_item("3", "Salad", 10.0, 1),
        ],
        subtotal=60.0,
        tax=6.0,
        tip=9.0,
        total=75.0,
        currency="$",
    )
