"""
Receipt model module for tabsplit
Keeps subtotal/total consistent with the items and validates manual edits
"""

import math
import uuid
from typing import Optional, Tuple, Union

from data_models import ReceiptData, ReceiptItem
from errors import ValidationError
from utils import try_parse_float

Number = Union[int, float, str]


def new_item_id() -> str:
    """Generate a unique item ID"""
    return f"item_{uuid.uuid4().hex}"


def recompute_totals(data: ReceiptData) -> ReceiptData:
    """Return a copy whose subtotal is the sum of item prices and total is subtotal + tax + tip.

    Tax and tip are carried over untouched.
    """
    values = [data.tax, data.tip] + [item.price for item in data.items]
    if not all(isinstance(v, (int, float)) and math.isfinite(v) for v in values):
        raise ValidationError("receipt contains a non-finite amount")

    result = data.copy()
    result.subtotal = sum(item.price for item in result.items)
    result.total = result.subtotal + result.tax + result.tip
    return result


def parse_number(value: Number) -> Optional[float]:
    """Read a user-entered amount; None when it is not a finite number"""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        number = try_parse_float(value)
    else:
        return None
    if number is None or not math.isfinite(number):
        return None
    return number


def parse_item_fields(name: str, price: Number, quantity: Number) -> Tuple[str, float, float]:
    """Validate a manual item candidate, raising ValidationError on any bad field"""
    clean_name = name.strip() if isinstance(name, str) else ""
    if not clean_name:
        raise ValidationError("item name is empty")

    parsed_price = parse_number(price)
    if parsed_price is None:
        raise ValidationError(f"price is not a number: {price!r}")

    parsed_quantity = parse_number(quantity)
    if parsed_quantity is None:
        raise ValidationError(f"quantity is not a number: {quantity!r}")

    return clean_name, parsed_price, parsed_quantity


def add_item(data: ReceiptData, name: str, price: Number, quantity: Number = 1) -> ReceiptData:
    """Append a manually entered, unassigned item"""
    clean_name, parsed_price, parsed_quantity = parse_item_fields(name, price, quantity)

    result = data.copy()
    result.items.append(ReceiptItem(
        id=new_item_id(),
        name=clean_name,
        price=parsed_price,
        quantity=parsed_quantity,
    ))
    return recompute_totals(result)


def edit_item(data: ReceiptData, item_id: str, name: str, price: Number, quantity: Number) -> ReceiptData:
    """Change name/price/quantity of one item; id, assignees and scan tag are kept"""
    clean_name, parsed_price, parsed_quantity = parse_item_fields(name, price, quantity)

    result = data.copy()
    item = result.find_item(item_id)
    if item is None:
        raise ValidationError(f"unknown item id: {item_id}")

    item.name = clean_name
    item.price = parsed_price
    item.quantity = parsed_quantity
    return recompute_totals(result)


def delete_item(data: ReceiptData, item_id: str) -> ReceiptData:
    """Remove one item; unknown ids leave the receipt as it was"""
    result = data.copy()
    result.items = [item for item in result.items if item.id != item_id]
    if len(result.items) == len(data.items):
        return result
    return recompute_totals(result)
