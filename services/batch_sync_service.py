"""
Batch sync service.

Runs the full SPT update: select options → "Batch Update" view → MTB
lookup → reconcile → PATCH in batches of 10 with a throttle in between.

Every run keeps two logs: structlog events for operators, and `details`,
a list of plain lines returned to the caller (the update page shows it).
The run stops at the first failure. Batches already written stay written;
`details` shows how far it got.
"""

from hmac import compare_digest
from typing import Optional
import structlog

from config.settings import Settings, get_settings
from config.database import build_airtable_client
from integrations.airtable import AirtableClient
from models.airtable import AirtableRecord
from models.sync import SourceRecord, SyncResult, UnmatchedSelectPolicy, UpdatePayload
from services.option_resolver_service import load_option_resolver
from services.reconciler_service import RecordReconciler, build_master_lookup
from services.throttle_service import Throttle, build_throttle
from exceptions import (
    AirtableError,
    AuthorizationError,
    ConfigurationError,
    SourceFetchError,
    WriteBatchError,
)
from utils.text_utils import chunked

logger = structlog.get_logger(__name__)


def verify_password(provided: Optional[str], expected: Optional[str]) -> None:
    """
    Check the shared secret.

    Raises:
        ConfigurationError: If no password is configured
        AuthorizationError: If the password does not match
    """
    if not expected:
        raise ConfigurationError("UPDATE_PASSWORD is not configured")
    if provided is None or not compare_digest(provided.encode("utf-8"), expected.encode("utf-8")):
        logger.warning("update_password_rejected")
        raise AuthorizationError()


class BatchSyncService:
    """
    Batch update of the SPT "Batch Update" view.

    Usage:
        service = BatchSyncService(settings)
        result = service.run(password)
    """

    def __init__(
        self,
        settings: Settings,
        client: Optional[AirtableClient] = None,
        throttle: Optional[Throttle] = None,
        policy: Optional[UnmatchedSelectPolicy] = None
    ):
        self.settings = settings
        self._client = client
        self.throttle = throttle or build_throttle(settings)
        self.policy = UnmatchedSelectPolicy(policy or settings.unmatched_select_policy)

    @property
    def client(self) -> AirtableClient:
        """Injected client, or one built from this service's settings (after authorization)."""
        if self._client is None:
            self._client = build_airtable_client(self.settings)
        return self._client

    def run(self, password: Optional[str], dry_run: bool = False) -> SyncResult:
        """
        Authorize, then run the whole sync.

        Args:
            password: Shared secret from the caller
            dry_run: Build payloads but skip the PATCH calls; payloads are
                returned in SyncResult.payloads

        Returns:
            SyncResult with success flag, message and details log

        Raises:
            AuthorizationError: Before any remote call, if the password is wrong
            ConfigurationError: If the update password is not configured
        """
        verify_password(password, self.settings.update_password)
        logger.info("batch_update_authorized", dry_run=dry_run)

        details: list[str] = []
        try:
            return self._run(details, dry_run)
        except Exception as e:
            message = getattr(e, "message", None) or str(e)
            logger.error(
                "batch_update_failed",
                error=message,
                error_type=type(e).__name__,
                steps_logged=len(details)
            )
            details.append(f"ERROR: {message}")
            progress = e.details if isinstance(e, WriteBatchError) else {}
            return SyncResult(
                success=False,
                message="Batch update failed.",
                details=details,
                error=message,
                updated_count=progress.get("written_before", 0),
                batches_written=progress.get("batches_before", 0),
            )

    def _run(self, details: list[str], dry_run: bool) -> SyncResult:
        spt_table = self.settings.spt_table_name
        view_name = self.settings.batch_view_name

        # Step 1: select options for the SPT table
        details.append("Fetching field options from Airtable schema...")
        resolver = load_option_resolver(self.client, spt_table)

        # Step 2: records flagged for update
        details.append(f"Fetching records from view: {view_name}")
        spt_records = self._fetch(spt_table, "SPT", view=view_name)

        if not spt_records:
            details.append(f"No records found in the '{view_name}' view. Nothing to do.")
            logger.info("batch_update_nothing_to_do", view=view_name)
            return SyncResult(success=True, message="No records to update.", details=details)

        details.append(f"Found {len(spt_records)} records to update.")

        # Step 3: all MTB records, keyed by baseProductId
        mtb_records = self._fetch(self.settings.mtb_table_name, "MTB")
        lookup = build_master_lookup(mtb_records)
        logger.info("mtb_lookup_built", records=len(mtb_records), keys=len(lookup))

        # Step 4: payloads
        reconciler = RecordReconciler(resolver, self.policy)
        outcome = reconciler.reconcile_all(
            (SourceRecord.from_airtable(r) for r in spt_records),
            lookup
        )
        if outcome.skipped:
            details.append(f"Skipped {len(outcome.skipped)} records without a matching MTB record.")

        # Step 5: writes
        if dry_run:
            details.append(f"Dry run: {len(outcome.payloads)} records prepared, nothing written.")
            return SyncResult(
                success=True,
                message=f"Dry run prepared {len(outcome.payloads)} records.",
                details=details,
                skipped_count=len(outcome.skipped),
                payloads=outcome.payloads,
            )

        written, batches = self._write(outcome.payloads, details)

        logger.info(
            "batch_update_complete",
            updated=written,
            batches=batches,
            skipped=len(outcome.skipped)
        )

        return SyncResult(
            success=True,
            message=f"Successfully processed and updated {written} records.",
            details=details,
            updated_count=written,
            batches_written=batches,
            skipped_count=len(outcome.skipped),
        )

    def _fetch(self, table_name: str, label: str, view: Optional[str] = None) -> list[AirtableRecord]:
        """List a table, converting client failures to SourceFetchError."""
        try:
            raw = self.client.list_records(table_name, view=view)
        except AirtableError as e:
            raise SourceFetchError(label, e.message) from e

        return [AirtableRecord.model_validate(r) for r in raw]

    def _write(self, payloads: list[UpdatePayload], details: list[str]) -> tuple[int, int]:
        """
        PATCH payloads in batches.

        Returns:
            (records written, batches written)

        Raises:
            WriteBatchError: On the first rejected batch
        """
        table = self.settings.spt_table_name
        written = 0
        batches = 0

        for batch in chunked(payloads, self.settings.batch_size):
            if batches:
                self.throttle.wait()

            details.append(f"Updating batch of {len(batch)} records...")
            try:
                self.client.update_records(table, [p.to_airtable() for p in batch])
            except AirtableError as e:
                raise WriteBatchError(
                    e.message,
                    batch_size=len(batch),
                    written_before=written,
                    batches_before=batches
                ) from e

            written += len(batch)
            batches += 1
            details.append("Batch updated successfully.")
            logger.info("batch_written", size=len(batch), total_written=written)

        return written, batches


def get_batch_sync_service() -> BatchSyncService:
    """Create a service for one run from the process settings."""
    return BatchSyncService(get_settings())
