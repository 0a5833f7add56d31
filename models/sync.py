"""
Sync schemas: source/master records, update payloads, run results,
and the request/response bodies of the update endpoints.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Any, Optional
from enum import Enum

from models.base import BaseSchema
from models.airtable import AirtableRecord


class UnmatchedSelectPolicy(str, Enum):
    """What to write when a select value has no matching option."""
    LENIENT = "lenient"  # write the raw text (None clears the field)
    STRICT = "strict"    # omit the field from the payload


# ===================
# RECORDS
# ===================

class SourceRecord(BaseSchema):
    """
    SPT record (one sellable variant).

    Only the fields the reconciler reads are modelled; everything else on
    the record is left untouched by the sync.
    """
    id: str
    internal_name: Optional[str] = Field(None, alias="internalName")
    spt_id: Optional[Any] = Field(None, alias="sptId")
    linked_base_product_id: Optional[str] = Field(None, alias="linkedBaseProductId")

    @field_validator("linked_base_product_id", mode="before")
    @classmethod
    def first_linked_id(cls, v: Any) -> Optional[str]:
        """Lookup/link fields come back as lists; use the first entry."""
        if isinstance(v, list):
            v = v[0] if v else None
        if v is None or v == "":
            return None
        return str(v)

    @classmethod
    def from_airtable(cls, record: AirtableRecord) -> "SourceRecord":
        return cls.model_validate({**record.fields, "id": record.id})


class MasterRecord(BaseSchema):
    """
    MTB record (one base product).

    Price columns have names like "Verkoop 450g (€/kg)", so the raw field
    mapping is kept and read by name.
    """
    id: str
    base_product_id: str
    fields: dict[str, Any] = Field(default_factory=dict)

    def get(self, field_name: str, default: Any = None) -> Any:
        return self.fields.get(field_name, default)


# ===================
# PAYLOADS
# ===================

class UpdatePayload(BaseSchema):
    """One record's PATCH entry: {"id": ..., "fields": {...}}."""
    id: str
    fields: dict[str, Any] = Field(default_factory=dict)

    def to_airtable(self) -> dict:
        return {"id": self.id, "fields": self.fields}


class SyncResult(BaseSchema):
    """Outcome of a batch run, including the human-readable log."""
    success: bool
    message: str
    details: list[str] = Field(default_factory=list)
    error: Optional[str] = None
    updated_count: int = 0
    batches_written: int = 0
    skipped_count: int = 0
    payloads: list[UpdatePayload] = Field(default_factory=list)  # dry run only


# ===================
# API BODIES
# ===================

class BatchUpdateRequest(BaseModel):
    """Body of POST /api/update-batch-products."""
    password: Optional[str] = None


class SingleUpdateRequest(BaseModel):
    """Body of POST /api/update-single-product."""
    spt_record_id: Optional[str] = Field(None, alias="sptRecordId")
    password: Optional[str] = None

    model_config = {"populate_by_name": True}


class UpdateResponse(BaseModel):
    """Successful update response."""
    message: str
    details: list[str] = Field(default_factory=list)


class UpdateErrorResponse(BaseModel):
    """Failed update response."""
    error: str
    details: list[str] = Field(default_factory=list)
