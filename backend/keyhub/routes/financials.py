"""
Financial routes - invoice summaries and numbering
"""
import logging

from flask import Blueprint, jsonify, request

from keyhub.extensions import load_collection, require_firebase_auth, require_permission
from keyhub.utils.dates import utc_now
from keyhub.utils.invoices import (
    format_entity_name,
    get_days_until_due,
    get_invoice_summary,
    get_invoice_type,
    is_overdue,
    next_invoice_number,
    sort_invoices_by_priority,
)
from keyhub.utils.validation import InvoiceNumberRequest, validate_request

logger = logging.getLogger(__name__)

financials_bp = Blueprint("financials", __name__, url_prefix="/api/financials")


@financials_bp.get("/invoices/summary")
@require_firebase_auth
@require_permission('view_financials')
def invoice_summary():
    """Invoice totals plus the invoice queue in payment-priority order."""
    invoices = load_collection('invoices')
    now = utc_now()

    queue = [
        {
            'id': inv['id'],
            'invoiceNumber': inv.get('invoiceNumber'),
            'type': get_invoice_type(inv),
            'to': format_entity_name(inv.get('to') or {}),
            'status': inv.get('status'),
            'total': inv.get('total') or 0,
            'daysUntilDue': get_days_until_due(inv, now),
            'overdue': is_overdue(inv, now),
        }
        for inv in sort_invoices_by_priority(invoices, now)
    ]

    return jsonify({
        'summary': get_invoice_summary(invoices, now),
        'invoices': queue,
    }), 200


@financials_bp.post("/invoices/next-number")
@require_firebase_auth
@require_permission('view_financials')
def invoice_next_number():
    """
    Next free invoice number in a series.
    Body (optional): { "prefix": "INV", "year": 2025 }
    """
    data = validate_request(InvoiceNumberRequest, request.get_json(silent=True) or {})
    existing = [inv.get('invoiceNumber') for inv in load_collection('invoices')]
    number = next_invoice_number(existing, prefix=data['prefix'], year=data.get('year'))
    logger.info("Issued invoice number", extra={'invoice_number': number})
    return jsonify({'invoiceNumber': number}), 200
