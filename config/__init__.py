"""
Configuration module.

Exports:
    settings: Application settings instance
    get_settings: Cached settings factory
    get_supabase_client / db: Anon Supabase client
    get_admin_client: Service-role client, or None
    check_connection: Health check used at startup and by /health
"""

from config.settings import settings, get_settings, Settings
from config.database import (
    db,
    get_supabase_client,
    get_admin_client,
    check_connection,
    reset_connection,
    DatabaseError,
    ConnectionError
)

__all__ = [
    # Settings
    "settings",
    "get_settings",
    "Settings",

    # Database
    "db",
    "get_supabase_client",
    "get_admin_client",
    "check_connection",
    "reset_connection",
    "DatabaseError",
    "ConnectionError",
]
