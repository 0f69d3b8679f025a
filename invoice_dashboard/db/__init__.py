"""
Database access layer for the Invoice Dashboard backend.

All database operations MUST:
- Go through a Supabase client created by get_supabase_client()
- Use the signed-in user's access token so Row Level Security applies
- Issue exactly one statement per form action (no multi-step writes)

Tables used: ``invoices`` (id, customer_id, amount in cents, status, date)
and ``customers`` (id, name, email, image_url).
"""

from .client import get_supabase_client

__all__ = ["get_supabase_client"]
