"""
Tip calculation module for tabsplit
Each policy selection is a one-shot computation against the current receipt
"""

from enum import Enum
from typing import Optional

from data_models import ReceiptData
from errors import ValidationError
from receipt_model import Number, parse_number


class TipPolicy(str, Enum):
    """How the tip amount is derived"""
    RECEIPT = "receipt"
    PERCENT = "percent"
    FIXED = "fixed"


def compute_tip(data: ReceiptData, policy: TipPolicy, value: Optional[Number] = None) -> float:
    """Return the tip amount the policy yields for the receipt as it is now"""
    policy = TipPolicy(policy)
    if policy is TipPolicy.RECEIPT:
        return data.tip

    amount = parse_number(value)
    if amount is None:
        raise ValidationError(f"{policy.value} tip needs a numeric value, got {value!r}")
    if amount < 0:
        raise ValidationError("tip cannot be negative")

    if policy is TipPolicy.PERCENT:
        return data.subtotal * (amount / 100)
    return amount


def apply_tip(data: ReceiptData, policy: TipPolicy, value: Optional[Number] = None) -> ReceiptData:
    """Store the computed tip and refresh the total.

    The receipt policy keeps the stored tip and triggers no recomputation.
    """
    policy = TipPolicy(policy)
    result = data.copy()
    if policy is TipPolicy.RECEIPT:
        return result

    result.tip = compute_tip(data, policy, value)
    result.total = result.subtotal + result.tax + result.tip
    return result
