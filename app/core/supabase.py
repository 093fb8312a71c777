"""
Supabase client utilities.
"""
from functools import lru_cache
from supabase import create_client, Client
from supabase.lib.client_options import ClientOptions
from app.core.config import settings


@lru_cache()
def get_supabase() -> Client:
    """Get the service-role Supabase client.

    The client is shared by every request, so it never persists or refreshes
    a session of its own; user tokens are only ever verified against it.
    """
    return create_client(
        settings.supabase_url,
        settings.supabase_service_key,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )
