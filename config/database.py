"""
Remote database connection management.

`build_airtable_client(settings)` makes a client from an explicit Settings
object; services use it with the settings they were constructed with.
`get_airtable_client()` caches one client built from the process settings
for the health check.
The client holds only credentials and an HTTP session, never run data.
"""

from functools import lru_cache
import structlog

from config.settings import Settings, settings
from integrations.airtable import AirtableClient
from exceptions import ConfigurationError

logger = structlog.get_logger(__name__)


def build_airtable_client(config: Settings) -> AirtableClient:
    """
    Create an Airtable client from a Settings object.

    Args:
        config: Settings holding PAT, base id, API root and timeout

    Returns:
        AirtableClient: Client bound to the configured base

    Raises:
        ConfigurationError: If PAT or base id is missing
    """
    if not config.airtable_configured:
        logger.error(
            "airtable_not_configured",
            has_pat=bool(config.airtable_pat),
            has_base_id=bool(config.airtable_base_id)
        )
        raise ConfigurationError("AIRTABLE_PAT and AIRTABLE_BASE_ID must be set")

    logger.info(
        "airtable_client_created",
        base_id=config.airtable_base_id
    )

    return AirtableClient(
        base_id=config.airtable_base_id,
        token=config.airtable_pat,
        api_url=config.airtable_api_url,
        timeout=config.airtable_timeout_seconds
    )


@lru_cache()
def get_airtable_client() -> AirtableClient:
    """
    Get cached Airtable client built from the process settings.

    Call get_airtable_client.cache_clear() (or reset_connection()) after
    config changes.

    Raises:
        ConfigurationError: If PAT or base id is missing
    """
    return build_airtable_client(settings)


# ===================
# HELPER FUNCTIONS
# ===================

def check_connection() -> dict:
    """
    Check remote database connection health.

    Returns:
        dict: Connection status with details
    """
    try:
        client = get_airtable_client()
        tables = client.get_base_schema()

        return {
            "status": "healthy",
            "tables_count": len(tables)
        }

    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e)
        }


def reset_connection():
    """
    Reset the cached client.

    Call this after credential changes.
    """
    get_airtable_client.cache_clear()
    logger.info("airtable_connection_reset")
