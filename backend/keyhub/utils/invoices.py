"""
Invoice helpers - due dates, overdue detection, summaries and numbering
"""
import math
import re
from datetime import timedelta
from typing import Dict, Iterable, List, Optional

from keyhub.config import DEFAULT_INVOICE_PREFIX, NET_TERMS_DAYS
from keyhub.models.enums import InvoiceStatus
from keyhub.utils.dates import to_datetime, utc_now

ENTITY_LABELS = {
    'kd': 'Keynote Digital',
    'kts': 'Key Trade Solutions',
    'kr': 'Key Renovations',
    'customer': 'Customer',
    'subscriber': 'Subscriber',
}

INVOICE_TYPES = {
    ('kd', 'kr'): 'Lead Fee',
    ('kts', 'kr'): 'Labor & Commission',
    ('kr', 'customer'): 'Customer Invoice',
    ('kd', 'subscriber'): 'Subscription',
}


def calculate_due_date(from_date=None):
    """Due date on NET terms from from_date (default now)."""
    start = to_datetime(from_date) or utc_now()
    return start + timedelta(days=NET_TERMS_DAYS)


def get_days_until_due(invoice: dict, now=None) -> Optional[int]:
    """Whole days until the due date (negative once overdue); None for paid or undated invoices."""
    if invoice.get('status') == InvoiceStatus.PAID.value:
        return None
    due = to_datetime(invoice.get('dueDate'))
    if not due:
        return None
    now = to_datetime(now) or utc_now()
    return math.ceil((due - now) / timedelta(days=1))


def is_overdue(invoice: dict, now=None) -> bool:
    if invoice.get('status') == InvoiceStatus.PAID.value:
        return False
    days = get_days_until_due(invoice, now)
    return days is not None and days < 0


def get_invoice_type(invoice: dict) -> str:
    from_entity = (invoice.get('from') or {}).get('entity')
    to_entity = (invoice.get('to') or {}).get('entity')
    return INVOICE_TYPES.get((from_entity, to_entity), 'Invoice')


def format_entity_name(entity: dict) -> str:
    if entity.get('name'):
        return entity['name']
    return ENTITY_LABELS.get(entity.get('entity'), entity.get('entity') or '')


def group_invoices_by_status(invoices: List[dict], now=None) -> Dict[str, List[dict]]:
    """Group by status; unpaid invoices past their due date land in 'overdue'."""
    now = to_datetime(now) or utc_now()
    grouped = {s.value: [] for s in InvoiceStatus}
    for invoice in invoices:
        status = invoice.get('status')
        if status != InvoiceStatus.PAID.value and is_overdue(invoice, now):
            grouped[InvoiceStatus.OVERDUE.value].append(invoice)
        elif status in grouped:
            grouped[status].append(invoice)
        else:
            grouped[InvoiceStatus.DRAFT.value].append(invoice)
    return grouped


def sort_invoices_by_priority(invoices: List[dict], now=None) -> List[dict]:
    """
    Unpaid before paid, overdue first, then earliest due date.

    Invoices without a due date sort after dated ones within their group.
    Equal keys keep input order.
    """
    now = to_datetime(now) or utc_now()

    def priority(invoice):
        paid = invoice.get('status') == InvoiceStatus.PAID.value
        due = to_datetime(invoice.get('dueDate'))
        return (
            paid,
            not is_overdue(invoice, now),
            due is None,
            due.timestamp() if due else 0,
        )

    return sorted(invoices, key=priority)


def get_invoice_summary(invoices: List[dict], now=None) -> Dict[str, object]:
    """Counts per (effective) status with outstanding, overdue and paid totals."""
    now = to_datetime(now) or utc_now()
    grouped = group_invoices_by_status(invoices, now)

    def total_of(group):
        return math.fsum(inv.get('total') or 0 for inv in group)

    unpaid = [inv for inv in invoices if inv.get('status') != InvoiceStatus.PAID.value]

    return {
        'total': len(invoices),
        'byStatus': {status: len(group) for status, group in grouped.items()},
        'outstanding': total_of(unpaid),
        'overdueAmount': total_of(grouped[InvoiceStatus.OVERDUE.value]),
        'paidTotal': total_of(grouped[InvoiceStatus.PAID.value]),
    }


def next_invoice_number(existing_numbers: Iterable[str], prefix: str = DEFAULT_INVOICE_PREFIX, year: Optional[int] = None) -> str:
    """
    Next sequential number in the PREFIX-YYYY-NNNN series.

    Only numbers with the same prefix and year count toward the sequence.
    """
    if year is None:
        year = utc_now().year
    pattern = re.compile(rf"^{re.escape(prefix)}-{year}-(\d+)$")

    highest = 0
    for number in existing_numbers:
        if not number:
            continue
        match = pattern.match(number)
        if match:
            highest = max(highest, int(match.group(1)))

    return f"{prefix}-{year}-{highest + 1:04d}"
