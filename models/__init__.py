"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema
from models.airtable import (
    SELECT_FIELD_TYPES,
    AirtableRecord,
    FieldChoice,
    TableField,
    TableSchema,
)
from models.sync import (
    UnmatchedSelectPolicy,
    SourceRecord,
    MasterRecord,
    UpdatePayload,
    SyncResult,
    BatchUpdateRequest,
    SingleUpdateRequest,
    UpdateResponse,
    UpdateErrorResponse,
)

__all__ = [
    # Base
    "BaseSchema",

    # Airtable
    "SELECT_FIELD_TYPES",
    "AirtableRecord",
    "FieldChoice",
    "TableField",
    "TableSchema",

    # Sync
    "UnmatchedSelectPolicy",
    "SourceRecord",
    "MasterRecord",
    "UpdatePayload",
    "SyncResult",
    "BatchUpdateRequest",
    "SingleUpdateRequest",
    "UpdateResponse",
    "UpdateErrorResponse",
]
