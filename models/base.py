"""
Base schema for all models.

Airtable field names contain spaces, currency signs and camelCase, so
models accept both the Airtable spelling (alias) and the Python name.
"""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Base for all schemas.

    Features:
        - Populate by field name or by alias (Airtable spelling)
        - Validate on attribute assignment
        - Allow ORM-style objects (from_attributes)

    Strings are never stripped: product names and secrets are compared
    exactly as received.
    """
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        validate_assignment=True
    )
