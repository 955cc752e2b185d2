"""
Merge resolution module for tabsplit
Combines a newly scanned receipt with the current one, or swaps it in
"""

from enum import Enum
from typing import Optional

from data_models import ReceiptData


class MergeChoice(str, Enum):
    """User decision when a second receipt arrives"""
    MERGE = "merge"
    REPLACE = "replace"
    CANCEL = "cancel"


def needs_decision(current: Optional[ReceiptData]) -> bool:
    """A decision is required only when the current receipt already has items"""
    return current is not None and bool(current.items)


def merge(current: ReceiptData, incoming: ReceiptData) -> ReceiptData:
    """Append incoming items and sum the amounts field by field.

    Scan tags on items are kept; the currency of the current receipt wins.
    """
    return ReceiptData(
        items=[item.copy() for item in current.items] + [item.copy() for item in incoming.items],
        subtotal=current.subtotal + incoming.subtotal,
        tax=current.tax + incoming.tax,
        tip=current.tip + incoming.tip,
        total=current.total + incoming.total,
        currency=current.currency,
    )


def replace(current: ReceiptData, incoming: ReceiptData) -> ReceiptData:
    """Discard the current receipt in favour of the incoming one"""
    return incoming.copy()


def resolve(current: ReceiptData, incoming: ReceiptData, choice: MergeChoice) -> ReceiptData:
    """Apply a merge/replace/cancel decision and return the receipt to keep"""
    choice = MergeChoice(choice)
    if choice is MergeChoice.MERGE:
        return merge(current, incoming)
    if choice is MergeChoice.REPLACE:
        return replace(current, incoming)
    return current.copy()
