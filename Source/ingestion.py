"""
Ingestion module for tabsplit
Turns a raw OCR payload into a fully populated ReceiptData
"""

import math
import uuid
from typing import Any, Dict, List, Optional

from config import CURRENCY_DEFAULT, TAX_INCLUDED_TOLERANCE
from data_models import ReceiptData, ReceiptItem
from errors import ExternalServiceError
from receipt_model import new_item_id
from utils import try_parse_float

UNKNOWN_ITEM_NAME = "Unknown Item"


def new_scan_id() -> str:
    """Generate an identifier for one ingestion event"""
    return f"scan_{uuid.uuid4().hex}"


def _amount(raw: Dict[str, Any], key: str, default: float = 0.0) -> float:
    value = raw.get(key)
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise ExternalServiceError(f"'{key}' is not a number: {value!r}")
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        number = try_parse_float(value.replace('$', '').replace('€', '').replace('£', ''))
    else:
        number = None
    if number is None or not math.isfinite(number):
        raise ExternalServiceError(f"'{key}' is not a number: {value!r}")
    return number


def fill_defaults(payload: Any) -> Dict[str, Any]:
    """Validate an OCR payload and fill every optional field exactly once.

    Missing amounts become 0, a missing quantity becomes 1, a missing item
    name becomes "Unknown Item" and a missing currency the configured
    fallback symbol. Anything of the wrong shape raises ExternalServiceError.
    """
    if not isinstance(payload, dict):
        raise ExternalServiceError("receipt payload is not a JSON object")

    raw_items = payload.get('items') or []
    if not isinstance(raw_items, list):
        raise ExternalServiceError("receipt 'items' is not a list")

    items: List[Dict[str, Any]] = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            raise ExternalServiceError(f"malformed receipt item: {raw!r}")
        name = raw.get('name')
        name = name.strip() if isinstance(name, str) else ""
        items.append({
            'name': name or UNKNOWN_ITEM_NAME,
            'price': _amount(raw, 'price'),
            'quantity': _amount(raw, 'quantity', default=1.0),
        })

    currency = payload.get('currency')
    if not isinstance(currency, str) or not currency.strip():
        currency = CURRENCY_DEFAULT

    return {
        'items': items,
        'subtotal': _amount(payload, 'subtotal'),
        'tax': _amount(payload, 'tax'),
        'tip': _amount(payload, 'tip'),
        'total': _amount(payload, 'total'),
        'currency': currency.strip(),
    }


def tax_included_in_items(sum_items: float, stated_total: float) -> bool:
    """True when the line items already add up to the stated total (within tolerance).

    Best effort only: receipts far from the threshold are not detected.
    """
    return abs(sum_items - stated_total) < stated_total * TAX_INCLUDED_TOLERANCE


def normalize_scan(payload: Any, scan_id: Optional[str] = None) -> ReceiptData:
    """Build the ReceiptData for one freshly ingested receipt.

    Every item gets a fresh id, no assignees and the shared scan id. When the
    items already include tax, tax is zeroed and the subtotal becomes the item
    sum so tax is not charged twice. Total is then subtotal + tax + tip; the
    stated total only feeds the tax-included check and is never returned.
    """
    raw = fill_defaults(payload)
    scan_id = scan_id or new_scan_id()

    items = [
        ReceiptItem(
            id=new_item_id(),
            name=entry['name'],
            price=entry['price'],
            quantity=entry['quantity'],
            scan_id=scan_id,
        )
        for entry in raw['items']
    ]

    sum_items = sum(item.price for item in items)
    tax = raw['tax']
    subtotal = raw['subtotal'] or sum_items
    if tax_included_in_items(sum_items, raw['total']):
        tax = 0.0
        subtotal = sum_items

    return ReceiptData(
        items=items,
        subtotal=subtotal,
        tax=tax,
        tip=raw['tip'],
        total=subtotal + tax + raw['tip'],
        currency=raw['currency'],
    )
