"""Backing store selection from settings."""

from folio.clients.supabase_client import SupabaseClient, create_supabase_client
from folio.config import Settings
from folio.core.local_store import LocalStore


def create_store(settings: Settings) -> SupabaseClient | LocalStore:
    """Build the configured store. Use it as an async context manager."""
    settings.validate_backend()
    if settings.backend == "local":
        return LocalStore(settings.local_store_file, buckets=(settings.storage_bucket,))
    return create_supabase_client(
        base_url=settings.supabase_url,
        anon_key=settings.supabase_anon_key,
        access_token=settings.supabase_access_token,
        timeout=settings.request_timeout,
    )
