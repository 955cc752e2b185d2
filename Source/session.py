"""
Session module for tabsplit
Owns the single receipt of a session and routes every change through the engine
"""

import json
from dataclasses import asdict
from typing import TYPE_CHECKING, List, Optional

from allocation_engine import allocate
from assignment_updater import apply_updates, build_command_items, parse_command_result
from constants import (
    ANALYZING_MESSAGE,
    ASSISTANT_ROLE,
    COMMAND_FAILED_MESSAGE,
    MERGED_MESSAGE,
    MERGE_PROMPT_MESSAGE,
    QUOTA_MESSAGE,
    RECEIPT_READY_MESSAGE,
    SCAN_FAILED_MESSAGE,
    SYSTEM_ROLE,
    UNASSIGNED,
    USER_ROLE,
    WELCOME_MESSAGE,
)
from data_models import AssignmentUpdate, ChatMessage, PersonSummary, ReceiptData
from errors import ExternalServiceError, QuotaExceededError, SessionBusyError, ValidationError
from ingestion import normalize_scan
from merge_resolver import MergeChoice, needs_decision, resolve
from receipt_model import add_item, delete_item, edit_item
from tip_calculator import TipPolicy, apply_tip
from utils import format_currency, round_money

if TYPE_CHECKING:
    from gateway import GatewayClient


class PendingScan:
    """A scanned receipt waiting for the merge/replace/cancel decision"""

    def __init__(self, receipt: ReceiptData, image_ref: Optional[str] = None):
        self.receipt = receipt
        self.image_ref = image_ref


class SplitSession:
    """Single-user bill splitting session.

    Every operation reads the current receipt, computes a new one through the
    engine modules and swaps it in whole, so no caller ever sees a half-applied
    change.
    """

    def __init__(self, service: Optional["GatewayClient"] = None, receipt: Optional[ReceiptData] = None):
        self.service = service
        self.receipt = receipt if receipt is not None else ReceiptData()
        self.image_ref: Optional[str] = None
        self.pending: Optional[PendingScan] = None
        self.people: List[str] = []
        self.messages: List[ChatMessage] = [ChatMessage(ASSISTANT_ROLE, WELCOME_MESSAGE)]
        self.tip_policy = TipPolicy.RECEIPT
        self.ocr_in_flight = False
        self.chat_in_flight = False

    def _say(self, role: str, text: str):
        self.messages.append(ChatMessage(role, text))

    def _report_failure(self, error: Exception, template: str):
        if isinstance(error, QuotaExceededError):
            self._say(SYSTEM_ROLE, QUOTA_MESSAGE)
        else:
            self._say(SYSTEM_ROLE, template.format(detail=error))

    # ---- ingestion and merge ----

    def scan_image(self, image_base64: str, mime_type: str = "image/jpeg",
                   image_ref: Optional[str] = None) -> bool:
        """Send an image to the OCR service and ingest the result"""
        if self.ocr_in_flight:
            raise SessionBusyError("a receipt scan is already in progress")
        if self.pending is not None:
            raise SessionBusyError("decide whether to merge or replace the previous scan first")
        if self.service is None:
            raise ExternalServiceError("no OCR service configured", status=503)

        self.ocr_in_flight = True
        self._say(SYSTEM_ROLE, ANALYZING_MESSAGE)
        try:
            payload = self.service.scan_receipt(image_base64, mime_type)
            incoming = normalize_scan(payload)
        except Exception as e:
            self._report_failure(e, SCAN_FAILED_MESSAGE)
            return False
        finally:
            self.ocr_in_flight = False

        self.receive_scan(incoming, image_ref)
        return True

    def receive_scan(self, incoming: ReceiptData, image_ref: Optional[str] = None):
        """Adopt a normalized receipt, or hold it until the user picks merge/replace"""
        if self.pending is not None:
            raise SessionBusyError("a merge decision is already pending")

        if needs_decision(self.receipt):
            self.pending = PendingScan(incoming, image_ref)
            self._say(SYSTEM_ROLE, MERGE_PROMPT_MESSAGE.format(count=len(incoming.items)))
            return

        self._adopt(incoming, image_ref)

    def _adopt(self, incoming: ReceiptData, image_ref: Optional[str]):
        self.receipt = incoming.copy()
        self.image_ref = image_ref
        self._say(ASSISTANT_ROLE, RECEIPT_READY_MESSAGE.format(
            count=len(incoming.items),
            total=format_currency(incoming.total, incoming.currency),
        ))

    def resolve_merge(self, choice: MergeChoice) -> bool:
        """Apply the user's decision on the pending scan"""
        if self.pending is None:
            return False

        choice = MergeChoice(choice)
        pending, self.pending = self.pending, None

        if choice is MergeChoice.REPLACE:
            self._adopt(pending.receipt, pending.image_ref)
        elif choice is MergeChoice.MERGE:
            self.receipt = resolve(self.receipt, pending.receipt, choice)
            self._say(SYSTEM_ROLE, MERGED_MESSAGE.format(count=len(pending.receipt.items)))
        return True

    # ---- chat commands ----

    def send_command(self, text: str) -> bool:
        """Resolve a free-text assignment command and apply the returned updates"""
        text = (text or "").strip()
        if not text or not self.receipt.items:
            return False
        if self.chat_in_flight:
            raise SessionBusyError("a command is already being processed")
        if self.service is None:
            raise ExternalServiceError("no command service configured", status=503)

        self.chat_in_flight = True
        self._say(USER_ROLE, text)
        try:
            payload = self.service.interpret_command(build_command_items(self.receipt), text)
            result = parse_command_result(payload)
        except Exception as e:
            self._report_failure(e, COMMAND_FAILED_MESSAGE)
            return False
        finally:
            self.chat_in_flight = False

        self.receipt = apply_updates(self.receipt, result.updates)
        for name in result.people_found:
            if name not in self.people:
                self.people.append(name)
        if result.message:
            self._say(ASSISTANT_ROLE, result.message)
        return True

    def assign(self, updates: List[AssignmentUpdate]):
        """Apply assignment updates chosen by hand"""
        self.receipt = apply_updates(self.receipt, updates)

    # ---- manual edits ----

    def add_item(self, name: str, price, quantity=1) -> bool:
        """Add an item by hand; invalid input leaves the receipt unchanged"""
        try:
            self.receipt = add_item(self.receipt, name, price, quantity)
        except ValidationError:
            return False
        return True

    def edit_item(self, item_id: str, name: str, price, quantity) -> bool:
        try:
            self.receipt = edit_item(self.receipt, item_id, name, price, quantity)
        except ValidationError:
            return False
        return True

    def delete_item(self, item_id: str) -> bool:
        before = len(self.receipt.items)
        self.receipt = delete_item(self.receipt, item_id)
        return len(self.receipt.items) < before

    def set_tip(self, policy: TipPolicy, value=None) -> bool:
        """Select a tip policy; the receipt policy keeps the stored tip"""
        try:
            self.receipt = apply_tip(self.receipt, policy, value)
        except ValidationError:
            return False
        self.tip_policy = TipPolicy(policy)
        return True

    # ---- derived views ----

    def summary(self) -> List[PersonSummary]:
        return allocate(self.receipt)

    def all_assigned(self) -> bool:
        return all(person.name != UNASSIGNED for person in self.summary())

    def export_json(self, path: str):
        """Write receipt and per-person summary to a JSON file"""
        data = {
            'receipt': asdict(self.receipt),
            'people': self.people,
            'tip_policy': self.tip_policy.value,
            'summary': [
                {
                    'name': person.name,
                    'items': [asdict(line) for line in person.items],
                    'subtotal': round_money(person.subtotal),
                    'tax_share': round_money(person.tax_share),
                    'tip_share': round_money(person.tip_share),
                    'total': round_money(person.total),
                }
                for person in self.summary()
            ],
        }
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
