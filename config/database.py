"""
Database connection management.

Provides Supabase client singleton for inventory and order reads.
"""

from supabase import create_client, Client
from functools import lru_cache
from typing import Optional
import structlog

from config.settings import settings

logger = structlog.get_logger(__name__)


class DatabaseError(Exception):
    """Base exception for database errors."""
    pass


class ConnectionError(DatabaseError):
    """Failed to connect to database."""
    pass


@lru_cache()
def get_supabase_client() -> Client:
    """
    Get cached Supabase client instance.

    Uses lru_cache to ensure only one client is created.
    Call get_supabase_client.cache_clear() to reconnect.

    Returns:
        Client: Supabase client

    Raises:
        ConnectionError: If the client cannot be created
    """
    try:
        logger.info(
            "connecting_to_supabase",
            url=settings.supabase_url[:30] + "..."  # Log partial URL only
        )

        client = create_client(
            settings.supabase_url,
            settings.supabase_key
        )

        logger.info("supabase_connected", status="success")

        return client

    except Exception as e:
        logger.error(
            "supabase_connection_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        raise ConnectionError(f"Failed to connect to Supabase: {e}") from e



class DatabaseSession:
    """
    Context manager for database operations with logging.

    Usage:
        with DatabaseSession("count_inventory") as db:
            result = db.table("Inventario").select("producto").execute()
    """

    def __init__(self, operation_name: str):
        self.operation_name = operation_name
        self.client: Optional[Client] = None

    def __enter__(self) -> Client:
        logger.debug("db_operation_start", operation=self.operation_name)
        self.client = get_supabase_client()
        return self.client

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            logger.error(
                "db_operation_failed",
                operation=self.operation_name,
                error=str(exc_val),
                error_type=exc_type.__name__
            )
        else:
            logger.debug("db_operation_complete", operation=self.operation_name)
        return False  # Don't suppress exceptions


# ===================
# HELPER FUNCTIONS
# ===================

def check_connection() -> dict:
    """
    Check database connection health.

    Returns:
        dict: Connection status with inventory row count
    """
    try:
        with DatabaseSession("health_check") as client:
            inventory = (
                client.table("Inventario")
                .select("producto", count="exact")
                .limit(1)
                .execute()
            )

        return {
            "status": "healthy",
            "inventory_count": inventory.count,
        }

    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e)
        }

