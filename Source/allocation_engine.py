"""
Allocation engine module for tabsplit
Splits item costs across assignees and prorates tax and tip by item subtotal
"""

from typing import Dict, List

import pandas as pd

from config import UNASSIGNED_EPSILON, ZERO_SUBTOTAL_GUARD
from constants import UNASSIGNED
from data_models import PersonSummary, ReceiptData, SummaryLine


def _add_line(person: PersonSummary, name: str, cost: float, quantity: float):
    """Add cost to the person's tab, summing into an existing same-named line"""
    for line in person.items:
        if line.name == name:
            line.cost += cost
            line.quantity += quantity
            break
    else:
        person.items.append(SummaryLine(name=name, cost=cost, quantity=quantity))
    person.subtotal += cost


def allocate(data: ReceiptData) -> List[PersonSummary]:
    """Compute what each person owes.

    Never mutates ``data``. An item with N assignees gives each of them
    price/N and quantity/N; items with nobody assigned land in the
    Unassigned bucket. Tax and tip are shared in proportion to each
    person's item subtotal against the receipt subtotal.

    Ordering: Unassigned first when it holds more than UNASSIGNED_EPSILON
    (and is dropped otherwise), then everyone else by total, highest first.
    Equal totals keep the order in which people were first assigned.
    """
    unassigned = PersonSummary(name=UNASSIGNED)
    people: Dict[str, PersonSummary] = {}

    for item in data.items:
        if not item.assigned_to:
            _add_line(unassigned, item.name, item.price, item.quantity)
            continue

        assignees = list(dict.fromkeys(item.assigned_to))
        share_count = len(assignees)
        split_price = item.price / share_count
        split_quantity = item.quantity / share_count

        for name in assignees:
            person = unassigned if name == UNASSIGNED else people.setdefault(name, PersonSummary(name=name))
            _add_line(person, item.name, split_price, split_quantity)

    for person in [unassigned, *people.values()]:
        ratio = person.subtotal / data.subtotal if data.subtotal > ZERO_SUBTOTAL_GUARD else 0.0
        person.tax_share = data.tax * ratio
        person.tip_share = data.tip * ratio
        person.total = person.subtotal + person.tax_share + person.tip_share

    result = sorted(people.values(), key=lambda p: p.total, reverse=True)
    if unassigned.subtotal > UNASSIGNED_EPSILON:
        result.insert(0, unassigned)
    return result


def summary_to_dataframe(summaries: List[PersonSummary]) -> pd.DataFrame:
    """Tabulate person summaries, one row per person, for display or CSV export"""
    rows = [
        {
            'name': person.name,
            'items': ', '.join(f"{line.quantity:g}x {line.name}" for line in person.items),
            'subtotal': person.subtotal,
            'tax_share': person.tax_share,
            'tip_share': person.tip_share,
            'total': person.total,
        }
        for person in summaries
    ]
    columns = ['name', 'items', 'subtotal', 'tax_share', 'tip_share', 'total']
    return pd.DataFrame(rows, columns=columns)
