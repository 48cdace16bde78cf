import logging
from typing import Optional

from supabase import Client, create_client

from techphone.core.config import SUPABASE_ANON_KEY, SUPABASE_URL

logger = logging.getLogger(__name__)

_client: Optional[Client] = None


def is_configured() -> bool:
    return bool(SUPABASE_URL and SUPABASE_ANON_KEY)


def get_client() -> Client:
    """Shared client for direct catalog reads; created on first use."""
    global _client
    if _client is None:
        if not is_configured():
            raise RuntimeError("SUPABASE_URL / SUPABASE_ANON_KEY not set; direct catalog access is disabled")
        _client = create_client(SUPABASE_URL, SUPABASE_ANON_KEY)
        logger.info(f"[Supabase] Client created for {SUPABASE_URL}")
    return _client
