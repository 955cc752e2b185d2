"""
Data models for tabsplit - Receipt state and per-person summaries
"""

from dataclasses import dataclass, field
from typing import List, Optional

from config import CURRENCY_DEFAULT


@dataclass
class ReceiptItem:
    """A single receipt line; price is the line total, not a unit price"""
    id: str
    name: str
    price: float = 0.0
    quantity: float = 1.0
    assigned_to: List[str] = field(default_factory=list)
    scan_id: Optional[str] = None

    @property
    def unit_price(self) -> float:
        if not self.quantity:
            return self.price
        return self.price / self.quantity

    def copy(self) -> "ReceiptItem":
        return ReceiptItem(
            id=self.id,
            name=self.name,
            price=self.price,
            quantity=self.quantity,
            assigned_to=list(self.assigned_to),
            scan_id=self.scan_id,
        )


@dataclass
class ReceiptData:
    """The whole receipt"""
    items: List[ReceiptItem] = field(default_factory=list)
    subtotal: float = 0.0
    tax: float = 0.0
    tip: float = 0.0
    total: float = 0.0
    currency: str = CURRENCY_DEFAULT

    def copy(self) -> "ReceiptData":
        return ReceiptData(
            items=[item.copy() for item in self.items],
            subtotal=self.subtotal,
            tax=self.tax,
            tip=self.tip,
            total=self.total,
            currency=self.currency,
        )

    def find_item(self, item_id: str) -> Optional[ReceiptItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None


@dataclass
class SummaryLine:
    """One aggregated item on a person's tab"""
    name: str
    cost: float = 0.0
    quantity: float = 0.0


@dataclass
class PersonSummary:
    """What a single person owes, derived from a ReceiptData"""
    name: str
    items: List[SummaryLine] = field(default_factory=list)
    subtotal: float = 0.0
    tax_share: float = 0.0
    tip_share: float = 0.0
    total: float = 0.0


@dataclass
class ChatMessage:
    """An entry in the session conversation"""
    role: str
    text: str


@dataclass
class ProcessingMetrics:
    """Metrics for parallel OCR processing"""
    workers_used: int = 0
    processing_time: float = 0.0
    items_detected: int = 0
    regions_processed: int = 0


@dataclass
class AssignmentUpdate:
    """New assignee list for one item, as resolved by the command interpreter"""
    item_id: str
    assigned_to: List[str] = field(default_factory=list)


@dataclass
class CommandResult:
    """Validated answer of the command interpreter"""
    updates: List[AssignmentUpdate] = field(default_factory=list)
    people_found: List[str] = field(default_factory=list)
    message: str = ""
