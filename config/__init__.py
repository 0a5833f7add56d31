"""
Configuration module.

Exports:
    settings: Application settings instance
    get_settings: Function to get settings (for dependency injection)
    build_airtable_client: Airtable client from an explicit Settings
    get_airtable_client: Cached Airtable client factory
    check_connection: Health check function
"""

from config.settings import settings, get_settings, Settings
from config.database import (
    build_airtable_client,
    get_airtable_client,
    check_connection,
    reset_connection,
)

__all__ = [
    # Settings
    "settings",
    "get_settings",
    "Settings",

    # Remote database
    "build_airtable_client",
    "get_airtable_client",
    "check_connection",
    "reset_connection",
]
