"""
Supabase client for the importer.

One client serves both halves of the backend: the record tables
(records, record_fields, assets) and the Storage bucket holding asset bytes.
"""

from supabase import create_client, Client
from functools import lru_cache
import structlog

from config.settings import settings

logger = structlog.get_logger(__name__)

HEALTH_TABLES = ("records", "assets")


class DatabaseError(Exception):
    """Base exception for database errors."""
    pass


class ConnectionError(DatabaseError):
    """Supabase could not be reached or rejected the credentials."""
    pass


@lru_cache()
def get_supabase_client() -> Client:
    """
    Cached Supabase client.

    The service role key is used when configured, since Storage uploads
    and record inserts usually sit behind row-level security. Otherwise
    the anon key is used.

    Raises:
        ConnectionError: If the client can't be created or the check query fails
    """
    key = settings.supabase_service_key or settings.supabase_key

    logger.info(
        "connecting_to_supabase",
        url=settings.supabase_url[:30] + "...",
        service_role=bool(settings.supabase_service_key)
    )

    try:
        client = create_client(settings.supabase_url, key)
        client.table(HEALTH_TABLES[0]).select("id").limit(1).execute()
    except Exception as e:
        logger.error(
            "supabase_connection_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        raise ConnectionError(f"Failed to connect to Supabase: {e}") from e

    logger.info("supabase_connected")
    return client


def check_connection() -> dict:
    """
    Connectivity check used at startup and by /health.

    Returns:
        {"status": "healthy", "records_count": N, "assets_count": M}
        or {"status": "unhealthy", "error": "..."}
    """
    try:
        client = get_supabase_client()
        status = {"status": "healthy"}
        for table in HEALTH_TABLES:
            result = client.table(table).select("id", count="exact").execute()
            status[f"{table}_count"] = result.count
        return status

    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e)
        }


def reset_connection():
    """Drop the cached client so the next call reconnects."""
    get_supabase_client.cache_clear()
    logger.info("database_connection_reset")
