"""
Sync API routes.

POST /api/update-batch-products   — run the batch update (password gated)
POST /api/update-single-product   — update one SPT record (Airtable automation)

Handlers are plain `def` so the blocking Airtable calls and the batch
throttle run in the threadpool instead of the event loop.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from models.sync import BatchUpdateRequest, SingleUpdateRequest, UpdateErrorResponse, UpdateResponse
from services.batch_sync_service import get_batch_sync_service
from services.single_sync_service import get_single_sync_service
from exceptions import AppError, AuthorizationError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["Sync"])


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to the {"error": ...} body the update page expects."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content={"error": e.message, "code": e.code}
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={"error": "An unexpected error occurred"}
    )


# ===================
# ROUTES
# ===================

@router.post(
    "/update-batch-products",
    response_model=UpdateResponse,
    responses={401: {"model": UpdateErrorResponse}, 500: {"model": UpdateErrorResponse}}
)
def update_batch_products(body: BatchUpdateRequest):
    """
    Update every record in the SPT "Batch Update" view.

    Returns the run log in `details` on success and on failure.

    Raises:
        401: Invalid password
        500: Run failed (details holds the log up to the failure)
    """
    try:
        service = get_batch_sync_service()
        result = service.run(body.password)
    except AuthorizationError as e:
        return JSONResponse(status_code=401, content={"error": e.message})
    except Exception as e:
        return handle_error(e)

    if not result.success:
        return JSONResponse(
            status_code=500,
            content={"error": result.error, "details": result.details}
        )

    return UpdateResponse(message=result.message, details=result.details)


@router.post("/update-single-product", response_model=UpdateResponse)
def update_single_product(body: SingleUpdateRequest):
    """
    Update a single SPT record from its MTB master record.

    Raises:
        400: sptRecordId missing
        401: Invalid password
        404: No MTB record for the linked base product
        422: SPT record has no linkedBaseProductId
        502: Airtable rejected a read or the write
    """
    if not body.spt_record_id:
        logger.warning("single_update_missing_record_id")
        return JSONResponse(status_code=400, content={"error": "sptRecordId is required."})

    try:
        service = get_single_sync_service()
        service.update_record(body.spt_record_id, body.password)
    except Exception as e:
        return handle_error(e)

    return UpdateResponse(message="Record updated successfully.")
