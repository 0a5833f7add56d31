"""
Airtable wire schemas: records and base schema metadata.
"""

from pydantic import Field
from typing import Any, Optional

from models.base import BaseSchema

SELECT_FIELD_TYPES = ("singleSelect", "multipleSelects")


class AirtableRecord(BaseSchema):
    """A record as returned by the list and get endpoints."""
    id: str
    fields: dict[str, Any] = Field(default_factory=dict)
    created_time: Optional[str] = Field(None, alias="createdTime")


class FieldChoice(BaseSchema):
    """One option of a select field. `id` is server-assigned (sel...)."""
    id: str
    name: str
    color: Optional[str] = None


class TableField(BaseSchema):
    """Field metadata from the base schema."""
    id: Optional[str] = None
    name: str
    type: str
    options: Optional[dict[str, Any]] = None

    @property
    def is_select(self) -> bool:
        return self.type in SELECT_FIELD_TYPES

    @property
    def choices(self) -> list[FieldChoice]:
        """Choices of a select field; empty for other types."""
        if not self.is_select or not self.options:
            return []
        return [FieldChoice.model_validate(c) for c in self.options.get("choices", [])]


class TableSchema(BaseSchema):
    """Table metadata from the base schema."""
    id: Optional[str] = None
    name: str
    fields: list[TableField] = Field(default_factory=list)
