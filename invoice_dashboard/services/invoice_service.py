"""
Invoice persistence service.

RULES:
1. invoices.amount is stored in integer cents; forms speak dollars
2. Each write is exactly one statement against the ``invoices`` table
3. Callers own error handling; these functions let database errors propagate
4. RLS is enforced automatically via the authenticated Supabase client
"""

import logging
import math
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional, Tuple, cast

from supabase import Client

logger = logging.getLogger(__name__)

ITEMS_PER_PAGE = 6

INVOICE_TABLE_COLUMNS = (
    "id, customer_id, amount, date, status, "
    "customers!inner(name, email, image_url)"
)


def dollars_to_cents(amount: Decimal | float | str) -> int:
    """
    Convert a dollar amount to integer cents, rounding half up.

    Goes through Decimal(str(...)) so 19.99 becomes 1999, not 1998.
    """
    cents = Decimal(str(amount)) * 100
    return int(cents.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def cents_to_dollars(amount_in_cents: int) -> float:
    return float(Decimal(int(amount_in_cents)) / 100)


def today_iso() -> str:
    """Current UTC date as YYYY-MM-DD."""
    return datetime.now(timezone.utc).date().isoformat()


async def create_invoice(
    supabase_client: Client,
    customer_id: str,
    amount_in_cents: int,
    status: str,
    date: str,
) -> None:
    """
    Insert one invoice row.

    Args:
        supabase_client: Authenticated Supabase client (with user token)
        customer_id: UUID of the invoiced customer
        amount_in_cents: Amount already converted to cents
        status: 'pending' or 'paid'
        date: Invoice date (YYYY-MM-DD)

    Raises:
        Exception: If the database operation fails
    """
    logger.info(f"Creating invoice for customer {customer_id} (status={status})")

    supabase_client.table("invoices").insert(
        {
            "customer_id": customer_id,
            "amount": amount_in_cents,
            "status": status,
            "date": date,
        }
    ).execute()


async def update_invoice(
    supabase_client: Client,
    invoice_id: str,
    customer_id: str,
    amount_in_cents: int,
    status: str,
) -> None:
    """
    Update customer, amount and status of one invoice. The date is kept.

    Raises:
        Exception: If the database operation fails
    """
    logger.info(f"Updating invoice {invoice_id} (status={status})")

    (
        supabase_client.table("invoices")
        .update(
            {
                "customer_id": customer_id,
                "amount": amount_in_cents,
                "status": status,
            }
        )
        .eq("id", invoice_id)
        .execute()
    )


async def delete_invoice(
    supabase_client: Client,
    invoice_id: str,
) -> None:
    """
    Delete one invoice by id.

    Raises:
        Exception: If the database operation fails
    """
    logger.info(f"Deleting invoice {invoice_id}")

    supabase_client.table("invoices").delete().eq("id", invoice_id).execute()


async def fetch_filtered_invoices(
    supabase_client: Client,
    query: str = "",
    current_page: int = 1,
) -> Tuple[List[Dict[str, Any]], int]:
    """
    Fetch one page of invoices, newest first, joined with their customer.

    Args:
        supabase_client: Authenticated Supabase client
        query: Case-insensitive customer name filter ('' for all)
        current_page: 1-based page number

    Returns:
        (rows, total_pages). Each row is flattened: customer name, email and
        image_url sit next to the invoice columns.
    """
    offset = (max(current_page, 1) - 1) * ITEMS_PER_PAGE

    logger.debug(f"Fetching invoices page={current_page} query={query!r}")

    request = supabase_client.table("invoices").select(INVOICE_TABLE_COLUMNS, count="exact")
    if query:
        request = request.ilike("customers.name", f"%{query}%")

    result = (
        request
        .order("date", desc=True)
        .range(offset, offset + ITEMS_PER_PAGE - 1)
        .execute()
    )

    rows = []
    for row in cast(List[Dict[str, Any]], result.data or []):
        customer = row.get("customers") or {}
        rows.append(
            {
                "id": str(row.get("id")),
                "customer_id": str(row.get("customer_id")),
                "name": customer.get("name"),
                "email": customer.get("email"),
                "image_url": customer.get("image_url"),
                "date": str(row.get("date")),
                "amount": int(row.get("amount") or 0),
                "status": row.get("status"),
            }
        )

    total = result.count if result.count is not None else len(rows)
    total_pages = math.ceil(total / ITEMS_PER_PAGE)

    logger.info(f"Fetched {len(rows)} invoices (total={total}, pages={total_pages})")

    return rows, total_pages


async def fetch_invoice_by_id(
    supabase_client: Client,
    invoice_id: str,
) -> Optional[Dict[str, Any]]:
    """
    Fetch one invoice for the edit form, with ``amount`` in dollars.

    Returns:
        The invoice, or None if it does not exist or RLS hides it
    """
    result = (
        supabase_client.table("invoices")
        .select("id, customer_id, amount, status")
        .eq("id", invoice_id)
        .execute()
    )

    if not result.data:
        logger.warning(f"Invoice {invoice_id} not found")
        return None

    invoice = cast(Dict[str, Any], result.data[0])
    return {
        "id": str(invoice.get("id")),
        "customer_id": str(invoice.get("customer_id")),
        "amount": cents_to_dollars(invoice.get("amount") or 0),
        "status": invoice.get("status"),
    }
