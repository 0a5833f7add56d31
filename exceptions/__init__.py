"""
Custom exceptions module.

Import from here rather than from exceptions.errors.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ExternalServiceError,

    # Security / config
    AuthorizationError,
    ConfigurationError,

    # Airtable
    AirtableError,
    SchemaFetchError,
    TableNotFoundError,
    SourceFetchError,
    WriteBatchError,

    # Single record
    RecordFetchError,
    MissingBaseProductLinkError,
    MasterRecordNotFoundError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ExternalServiceError",

    # Security / config
    "AuthorizationError",
    "ConfigurationError",

    # Airtable
    "AirtableError",
    "SchemaFetchError",
    "TableNotFoundError",
    "SourceFetchError",
    "WriteBatchError",

    # Single record
    "RecordFetchError",
    "MissingBaseProductLinkError",
    "MasterRecordNotFoundError",
]
