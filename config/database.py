"""
Supabase connection management.

One project backs three concerns: the `products` table, the `kv_store`
table holding wizard drafts, and the storage bucket for product photos.
"""

from functools import lru_cache
from typing import Optional

import structlog
from supabase import Client, create_client

from config.settings import settings

logger = structlog.get_logger(__name__)


# Tables probed by the health check
HEALTH_TABLES = {
    "products": "id",
    "kv_store": "key",
}


class DatabaseError(Exception):
    """Base exception for database errors."""
    pass


class ConnectionError(DatabaseError):
    """Could not create a Supabase client."""
    pass


def _connect(key: str, role: str) -> Client:
    logger.info("connecting_to_supabase", role=role, url=settings.supabase_url[:30] + "...")
    try:
        client = create_client(settings.supabase_url, key)
    except Exception as e:
        logger.error(
            "supabase_connection_failed",
            role=role,
            error=str(e),
            error_type=type(e).__name__
        )
        raise ConnectionError(f"Failed to connect to Supabase as {role}: {e}") from e
    return client


@lru_cache()
def get_supabase_client() -> Client:
    """
    Cached client using the anon key.

    Raises:
        ConnectionError: Client could not be created
    """
    return _connect(settings.supabase_key, "anon")


@lru_cache()
def get_admin_client() -> Optional[Client]:
    """
    Cached client using the service role key, or None without one.

    Storage uploads prefer it so the photo bucket can stay write-protected.
    """
    if not settings.supabase_service_key:
        logger.info("admin_client_not_configured")
        return None
    try:
        return _connect(settings.supabase_service_key, "service")
    except ConnectionError:
        return None


# Convenience alias
db = get_supabase_client


def check_connection() -> dict:
    """
    Count rows in each table the app depends on.

    Returns:
        {"status": "healthy", "products_count": n, "drafts_count": n}
        or {"status": "unhealthy", "error": "..."}
    """
    try:
        client = get_supabase_client()
        counts = {
            table: client.table(table).select(column, count="exact").execute().count
            for table, column in HEALTH_TABLES.items()
        }
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}

    return {
        "status": "healthy",
        "products_count": counts["products"],
        "drafts_count": counts["kv_store"],
    }


def reset_connection() -> None:
    """Drop cached clients, e.g. after rotating keys."""
    get_supabase_client.cache_clear()
    get_admin_client.cache_clear()
    logger.info("database_connection_reset")
