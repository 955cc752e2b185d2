"""
Assignment update module for tabsplit
Applies (item id -> assignees) updates coming from the command interpreter
"""

from typing import Any, Dict, List

from data_models import AssignmentUpdate, CommandResult, ReceiptData
from errors import ExternalServiceError


def apply_updates(data: ReceiptData, updates: List[AssignmentUpdate]) -> ReceiptData:
    """Replace assignees of every referenced item, leaving all other items untouched.

    Unknown ids are ignored. Prices, quantities and totals are not recomputed
    since assignment never changes the subtotal.
    """
    result = data.copy()
    by_id = {item.id: item for item in result.items}

    for update in updates:
        item = by_id.get(update.item_id)
        if item is None:
            continue
        item.assigned_to = list(dict.fromkeys(update.assigned_to))

    return result


def build_command_items(data: ReceiptData) -> List[Dict[str, Any]]:
    """Abbreviated item list sent to the command interpreter"""
    return [
        {
            'id': item.id,
            'name': item.name,
            'price': item.price,
            'current_assignments': list(item.assigned_to),
        }
        for item in data.items
    ]


def _clean_names(raw: Any, field_name: str) -> List[str]:
    if not isinstance(raw, list):
        raise ExternalServiceError(f"'{field_name}' must be a list of names")
    names = []
    for name in raw:
        if not isinstance(name, str):
            raise ExternalServiceError(f"'{field_name}' contains a non-text entry: {name!r}")
        name = name.strip()
        if name and name not in names:
            names.append(name)
    return names


def parse_command_result(payload: Any) -> CommandResult:
    """Validate a loosely-typed interpreter response.

    Accepts both ``people_found``/``response_message`` and the camelCase
    ``peopleFound``/``message`` spellings. Raises ExternalServiceError when
    the shape is unusable.
    """
    if not isinstance(payload, dict):
        raise ExternalServiceError("command response is not a JSON object")

    raw_items = payload.get('items')
    if not isinstance(raw_items, list):
        raise ExternalServiceError("command response has no 'items' list")

    updates = []
    for raw in raw_items:
        if not isinstance(raw, dict) or 'id' not in raw:
            raise ExternalServiceError(f"malformed item update: {raw!r}")
        assigned = raw.get('assignedTo', raw.get('assigned_to', []))
        updates.append(AssignmentUpdate(
            item_id=str(raw['id']),
            assigned_to=_clean_names(assigned, 'assignedTo'),
        ))

    people = payload.get('people_found', payload.get('peopleFound', []))
    message = payload.get('response_message', payload.get('message', ''))
    if not isinstance(message, str):
        raise ExternalServiceError("command response message is not text")

    return CommandResult(
        updates=updates,
        people_found=_clean_names(people or [], 'people_found'),
        message=message.strip(),
    )
