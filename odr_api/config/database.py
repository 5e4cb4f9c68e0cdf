"""
Database configuration module.
Provides a shared Supabase client for the application wiring.
"""

from typing import Optional
from supabase import Client, create_client

from odr_api.config.settings import get_settings


class DatabaseConfig:
    """Holds the Supabase client used by the DAOs created at start up."""

    _instance: Optional[Client] = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create Supabase client instance.

        Returns:
            Client: Supabase client instance

        Raises:
            ValueError: If SUPABASE_URL or SUPABASE_KEY are not set
        """
        if cls._instance is None:
            settings = get_settings()

            if not settings.supabase_url or not settings.supabase_key:
                raise ValueError(
                    "SUPABASE_URL and SUPABASE_KEY must be set in environment variables"
                )

            cls._instance = create_client(settings.supabase_url, settings.supabase_key)

        return cls._instance


def get_db() -> Client:
    """
    Get Supabase database client.

    Returns:
        Client: Supabase client instance
    """
    return DatabaseConfig.get_client()
