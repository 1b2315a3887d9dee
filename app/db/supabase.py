"""Process-wide Supabase client.

Created on first use from ``settings`` so importing the app never needs
credentials; tests patch ``get_supabase`` in the module that calls it.
"""

from supabase import Client, create_client

from app.core.config import settings

_client: Client | None = None


def get_supabase() -> Client:
    """Return the shared client.

    Raises ``RuntimeError`` when ``SUPABASE_URL`` or ``SUPABASE_KEY`` is empty.
    """
    global _client
    if _client is not None:
        return _client

    if not (settings.SUPABASE_URL and settings.SUPABASE_KEY):
        raise RuntimeError("SUPABASE_URL and SUPABASE_KEY must be configured")
    _client = create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
    return _client
