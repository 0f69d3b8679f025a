"""
Supabase client factory.

Two kinds of clients are handed out:

1. An anonymous client (publishable key only). Used by the login form to
   call Supabase Auth before any session exists.
2. A per-request client carrying the signed-in user's access token. Every
   invoice/customer statement goes through this one, so Row Level Security
   policies on the ``invoices`` and ``customers`` tables apply.

NEVER use a service_role key here.
"""

import logging
from typing import Optional

from invoice_dashboard.config import settings
from supabase import Client, create_client

logger = logging.getLogger(__name__)


def get_supabase_client(access_token: Optional[str] = None) -> Client:
    """
    Create a Supabase client, authenticated as the user when a token is given.

    Args:
        access_token: The user's JWT access token from Supabase Auth, as
                      verified in invoice_dashboard/auth/dependencies.py.
                      Omit it for the anonymous client used by sign-in.

    Returns:
        A Supabase client. With a token, PostgREST requests carry the user's
        Authorization header and RLS is enforced.

    Example:
        >>> client = get_supabase_client(auth_user.access_token)
        >>> client.table("invoices").select("*").execute()
    """
    client: Client = create_client(
        supabase_url=settings.SUPABASE_URL,
        supabase_key=settings.SUPABASE_PUBLISHABLE_KEY
    )

    if access_token:
        # Scope database requests to the user; auth.uid() resolves from 'sub'
        client.postgrest.auth(access_token)
        logger.debug("Created authenticated Supabase client (RLS enforced)")
    else:
        logger.debug("Created anonymous Supabase client")

    return client
