"""
Customer lookups for the invoice forms.
"""

import logging
from typing import Any, Dict, List, cast

from supabase import Client

logger = logging.getLogger(__name__)


async def fetch_customers(supabase_client: Client) -> List[Dict[str, Any]]:
    """Return every customer as ``{"id", "name"}``, ordered by name."""
    result = (
        supabase_client.table("customers")
        .select("id, name")
        .order("name")
        .execute()
    )

    customers = [
        {"id": str(row.get("id")), "name": row.get("name") or ""}
        for row in cast(List[Dict[str, Any]], result.data or [])
    ]

    logger.debug(f"Fetched {len(customers)} customers")

    return customers
