"""Configuration module for database, settings and mediation policy."""

from odr_api.config.database import get_db, DatabaseConfig
from odr_api.config.settings import Settings, get_settings
from odr_api.config.policy import MediationPolicy

__all__ = ["get_db", "DatabaseConfig", "Settings", "get_settings", "MediationPolicy"]
