"""
Custom exception classes for the application.

Every error carries a stable code, a message, and an HTTP status so the
routes can turn it into a response without knowing where it came from.
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "TABLE_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


# ===================
# SECURITY / CONFIG ERRORS
# ===================

class AuthorizationError(AppError):
    """Shared secret did not match (401)."""

    def __init__(self):
        super().__init__(
            code="INVALID_PASSWORD",
            message="Invalid password.",
            status_code=401
        )


class ConfigurationError(AppError):
    """Required configuration is missing."""

    def __init__(self, message: str):
        super().__init__(
            code="SYNC_NOT_CONFIGURED",
            message=message,
            status_code=500
        )


# ===================
# AIRTABLE ERRORS
# ===================

class AirtableError(ExternalServiceError):
    """
    Airtable request failed.

    Raised by the client for transport errors and non-2xx responses.
    `response_body` keeps the raw error text returned by the API.
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        response_body: Optional[str] = None
    ):
        super().__init__(
            service="airtable",
            message=message,
            details={"status": status, "response": response_body}
        )
        self.status = status
        self.response_body = response_body


class SchemaFetchError(AppError):
    """Base schema could not be fetched."""

    def __init__(self, reason: str):
        super().__init__(
            code="SCHEMA_FETCH_FAILED",
            message=f"Failed to fetch base schema: {reason}",
            status_code=502
        )


class TableNotFoundError(NotFoundError):
    """Named table is absent from the base schema."""

    def __init__(self, table_name: str):
        super().__init__(
            resource="Table",
            identifier=table_name,
            code="TABLE_NOT_FOUND"
        )
        self.message = f"Table '{table_name}' not found in base schema."
        self.args = (self.message,)


class SourceFetchError(AppError):
    """Listing SPT or MTB records failed."""

    def __init__(self, table_label: str, reason: str):
        super().__init__(
            code="SOURCE_FETCH_FAILED",
            message=f"Failed to fetch {table_label} records: {reason}",
            status_code=502,
            details={"table": table_label}
        )


class WriteBatchError(AppError):
    """A PATCH call was rejected; nothing in that call was written."""

    def __init__(self, reason: str, batch_size: int, written_before: int = 0, batches_before: int = 0):
        super().__init__(
            code="WRITE_BATCH_FAILED",
            message=f"Failed to update batch: {reason}",
            status_code=502,
            details={
                "batch_size": batch_size,
                "written_before": written_before,
                "batches_before": batches_before
            }
        )


# ===================
# SINGLE RECORD ERRORS
# ===================

class RecordFetchError(AppError):
    """Single SPT record could not be fetched."""

    def __init__(self, record_id: str, reason: str):
        super().__init__(
            code="RECORD_FETCH_FAILED",
            message=f"Failed to fetch SPT record: {reason}",
            status_code=502,
            details={"id": record_id}
        )


class MissingBaseProductLinkError(ValidationError):
    """SPT record has an empty linkedBaseProductId."""

    def __init__(self, record_id: str):
        super().__init__(
            code="BASE_PRODUCT_LINK_MISSING",
            message="The 'linkedBaseProductId' field is empty in the SPT record.",
            details={"id": record_id}
        )


class MasterRecordNotFoundError(NotFoundError):
    """No MTB record for a base product id."""

    def __init__(self, base_product_id: str):
        super().__init__(
            resource="Master record",
            identifier=base_product_id,
            code="MASTER_RECORD_NOT_FOUND"
        )
        self.message = f"No matching record found in MTB for baseProductId: {base_product_id}"
        self.args = (self.message,)
