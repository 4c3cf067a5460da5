"""
Database client factory for Supabase.

The backend talks to Supabase with the service role key: authorization is
enforced by the API's own auth chain, not by row level security.
"""

from typing import Optional
from supabase import create_client, Client

from .config import get_settings
from .exceptions import ConfigurationError

# Module-level client cache
_service_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """
    Get Supabase client with service role (bypasses RLS).

    Returns:
        Supabase client configured with service role key

    Raises:
        ConfigurationError: If the Supabase URL or service key is missing
    """
    global _service_client

    if _service_client is None:
        settings = get_settings()
        if not settings.supabase_url or not settings.supabase_service_role_key:
            raise ConfigurationError(
                "Supabase configuration missing. "
                "Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY environment variables.",
                setting="supabase_url",
            )
        _service_client = create_client(
            settings.supabase_url,
            settings.supabase_service_role_key,
        )

    return _service_client


def reset_client_cache() -> None:
    """
    Reset the cached database client.

    Useful for testing or when configuration changes.
    """
    global _service_client
    _service_client = None
