"""
Single-record sync service.

Used by the Airtable automation that fires when one SPT record is ticked
for update: fetch that record, find its MTB master with a formula filter,
reconcile, and PATCH it with the update checkbox cleared.
"""

from typing import Optional
import structlog

from config.settings import Settings, get_settings
from config.database import build_airtable_client
from integrations.airtable import AirtableClient
from models.airtable import AirtableRecord
from models.sync import MasterRecord, SourceRecord, UnmatchedSelectPolicy, UpdatePayload
from services.batch_sync_service import verify_password
from services.option_resolver_service import load_option_resolver
from services.reconciler_service import (
    FIELD_UPDATE_RECORD,
    MTB_BASE_PRODUCT_ID,
    RecordReconciler,
)
from exceptions import (
    AirtableError,
    MasterRecordNotFoundError,
    MissingBaseProductLinkError,
    RecordFetchError,
    SourceFetchError,
    WriteBatchError,
)

logger = structlog.get_logger(__name__)


def base_product_formula(base_product_id: str) -> str:
    """filterByFormula matching one baseProductId; quotes are escaped."""
    escaped = base_product_id.replace("\\", "\\\\").replace("'", "\\'")
    return f"{{{MTB_BASE_PRODUCT_ID}}}='{escaped}'"


class SingleSyncService:
    """Update one SPT record from its MTB master."""

    def __init__(
        self,
        settings: Settings,
        client: Optional[AirtableClient] = None,
        policy: Optional[UnmatchedSelectPolicy] = None
    ):
        self.settings = settings
        self._client = client
        self.policy = UnmatchedSelectPolicy(policy or settings.unmatched_select_policy)

    @property
    def client(self) -> AirtableClient:
        if self._client is None:
            self._client = build_airtable_client(self.settings)
        return self._client

    def update_record(self, spt_record_id: str, password: Optional[str]) -> UpdatePayload:
        """
        Sync one SPT record.

        Args:
            spt_record_id: Airtable record id (rec...)
            password: Shared secret from the caller

        Returns:
            The payload that was written

        Raises:
            AuthorizationError: If the password is wrong (no remote call made)
            RecordFetchError: If the SPT record cannot be fetched
            MissingBaseProductLinkError: If the record has no linkedBaseProductId
            SourceFetchError: If the MTB query fails
            MasterRecordNotFoundError: If no MTB record matches
            SchemaFetchError, TableNotFoundError: If select options cannot be loaded
            WriteBatchError: If the PATCH is rejected
        """
        verify_password(password, self.settings.update_password)

        spt_table = self.settings.spt_table_name
        logger.info("single_update_started", record_id=spt_record_id)

        try:
            raw = self.client.get_record(spt_table, spt_record_id)
        except AirtableError as e:
            raise RecordFetchError(spt_record_id, e.message) from e

        source = SourceRecord.from_airtable(AirtableRecord.model_validate(raw))
        if not source.linked_base_product_id:
            raise MissingBaseProductLinkError(spt_record_id)

        master = self._find_master(source.linked_base_product_id)
        logger.info(
            "master_record_found",
            record_id=spt_record_id,
            base_product_id=master.base_product_id,
            master_id=master.id
        )

        resolver = load_option_resolver(self.client, spt_table)
        payload = RecordReconciler(resolver, self.policy).reconcile(source, master)
        payload.fields[FIELD_UPDATE_RECORD] = False

        try:
            self.client.update_record(spt_table, payload.id, payload.fields)
        except AirtableError as e:
            raise WriteBatchError(e.message, batch_size=1) from e

        logger.info("single_update_complete", record_id=spt_record_id)
        return payload

    def _find_master(self, base_product_id: str) -> MasterRecord:
        try:
            raw = self.client.list_records(
                self.settings.mtb_table_name,
                filter_formula=base_product_formula(base_product_id)
            )
        except AirtableError as e:
            raise SourceFetchError("MTB", e.message) from e

        if not raw:
            raise MasterRecordNotFoundError(base_product_id)

        record = AirtableRecord.model_validate(raw[0])
        return MasterRecord(id=record.id, base_product_id=base_product_id, fields=record.fields)


def get_single_sync_service() -> SingleSyncService:
    """Create a service for one request from the process settings."""
    return SingleSyncService(get_settings())
