"""
Service layer for the Invoice Dashboard backend.

Each function issues a single Supabase statement and returns plain dicts.
Routes own validation, error-to-message mapping, cache invalidation and
redirects.
"""

from .customer_service import fetch_customers
from .invoice_service import (
    cents_to_dollars,
    create_invoice,
    delete_invoice,
    dollars_to_cents,
    fetch_filtered_invoices,
    fetch_invoice_by_id,
    today_iso,
    update_invoice,
)

__all__ = [
    "fetch_customers",
    "create_invoice",
    "update_invoice",
    "delete_invoice",
    "fetch_filtered_invoices",
    "fetch_invoice_by_id",
    "dollars_to_cents",
    "cents_to_dollars",
    "today_iso",
]
