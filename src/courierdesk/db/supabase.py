"""Supabase client for the backend."""

import logging
from functools import lru_cache
from supabase import create_client, Client
from ..config import settings
from ..errors import ConfigurationMissing


@lru_cache()
def get_supabase_client() -> Client | None:
    """Get cached Supabase client instance.

    Returns:
        Supabase Client instance if configured, None otherwise.
        Note: This does not test the connection - actual queries may fail with network errors.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logging.warning("Supabase credentials not configured (missing URL or key)")
        return None

    try:
        client = create_client(settings.supabase_url, settings.supabase_key)
        return client
    except Exception as e:
        logging.error(f"Failed to create Supabase client: {e}")
        return None


def require_supabase_client() -> Client:
    """Return the shared client or fail when the data store is not configured."""
    client = get_supabase_client()
    if client is None:
        raise ConfigurationMissing(
            "Database not configured. Set COURIERDESK_SUPABASE_URL and COURIERDESK_SUPABASE_KEY."
        )
    return client
