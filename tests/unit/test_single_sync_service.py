"""
Unit tests for SingleSyncService.

Run: pytest tests/unit/test_single_sync_service.py -v
"""

import pytest
from unittest.mock import patch

from config.settings import Settings
from services.single_sync_service import SingleSyncService, base_product_formula
from exceptions import (
    AuthorizationError,
    MasterRecordNotFoundError,
    MissingBaseProductLinkError,
    RecordFetchError,
    SchemaFetchError,
    SourceFetchError,
    WriteBatchError,
)
from tests.factories import MTB_TABLE, SPT_TABLE, MasterRecordFactory, SourceRecordFactory


@pytest.fixture
def service(test_settings, mock_airtable) -> SingleSyncService:
    return SingleSyncService(test_settings, mock_airtable)


@pytest.fixture
def loaded(mock_airtable):
    """One SPT record linked to BP-1, and two MTB masters."""
    mock_airtable.set_records(SPT_TABLE, [
        SourceRecordFactory.create(id="recOne", internal_name="Cashew-z1000", base_product_id="BP-1"),
        SourceRecordFactory.create(id="recLoose", internal_name="Loose-z450", base_product_id=None),
    ])
    mock_airtable.set_records(MTB_TABLE, [
        MasterRecordFactory.create(base_product_id="BP-0", id="recOther"),
        MasterRecordFactory.create(base_product_id="BP-1", id="recMaster", **{"Verkoop 1kg (€/kg)": 21.5}),
    ])
    return mock_airtable


class TestBaseProductFormula:
    """Tests for base_product_formula()"""

    def test_plain_id(self):
        assert base_product_formula("BP-1") == "{baseProductId}='BP-1'"

    def test_quotes_escaped(self):
        assert base_product_formula("O'Brien") == "{baseProductId}='O\\'Brien'"


class TestUpdateRecord:
    """Tests for SingleSyncService.update_record()"""

    def test_writes_payload_and_clears_checkbox(self, service, loaded):
        payload = service.update_record("recOne", "s3cret")

        assert payload.id == "recOne"
        [(record_id, fields)] = loaded.written_records
        assert record_id == "recOne"
        assert fields["updateRecord"] is False
        assert fields["packageSize"] == {"id": "selPkg2"}
        assert fields["sellingPrice"] == 21.5
        assert fields["weightGrams"] == 1250

    def test_queries_master_by_formula(self, service, loaded):
        service.update_record("recOne", "s3cret")

        [(_, (table, view, formula))] = [c for c in loaded.calls if c[0] == "list_records"]
        assert table == MTB_TABLE
        assert view is None
        assert formula == "{baseProductId}='BP-1'"

    def test_does_not_copy_group_link(self, service, loaded):
        payload = service.update_record("recOne", "s3cret")

        assert "baseProductGroup" not in payload.fields

    def test_bad_password_makes_no_calls(self, service, loaded):
        with pytest.raises(AuthorizationError):
            service.update_record("recOne", "nope")

        assert loaded.calls == []

    def test_unknown_record(self, service, loaded):
        with pytest.raises(RecordFetchError) as exc_info:
            service.update_record("recMissing", "s3cret")

        assert exc_info.value.details["id"] == "recMissing"
        assert loaded.written_records == []

    def test_missing_link(self, service, loaded):
        with pytest.raises(MissingBaseProductLinkError) as exc_info:
            service.update_record("recLoose", "s3cret")

        assert exc_info.value.status_code == 422
        assert loaded.call_count("list_records") == 0

    def test_master_not_found(self, service, mock_airtable):
        mock_airtable.set_records(SPT_TABLE, [SourceRecordFactory.create(id="recX", base_product_id="BP-404")])
        mock_airtable.set_records(MTB_TABLE, [MasterRecordFactory.create(base_product_id="BP-1")])

        with pytest.raises(MasterRecordNotFoundError) as exc_info:
            service.update_record("recX", "s3cret")

        assert exc_info.value.status_code == 404
        assert mock_airtable.written_records == []

    def test_master_query_fails(self, service, loaded):
        loaded.fail_on("list_records")

        with pytest.raises(SourceFetchError):
            service.update_record("recOne", "s3cret")

    def test_schema_fails(self, service, loaded):
        loaded.fail_on("get_base_schema")

        with pytest.raises(SchemaFetchError):
            service.update_record("recOne", "s3cret")

        assert loaded.written_records == []

    def test_write_rejected(self, service, loaded):
        loaded.fail_on("update_record")

        with pytest.raises(WriteBatchError) as exc_info:
            service.update_record("recOne", "s3cret")

        assert exc_info.value.details["batch_size"] == 1


class TestClientFromSettings:
    """The client is built from the service's own settings."""

    def test_explicit_credentials_used_when_process_settings_empty(self, test_settings, loaded):
        explicit = test_settings.model_copy(update={"airtable_pat": "pat-explicit", "airtable_base_id": "appEXPLICIT"})

        with patch("config.database.settings", Settings(_env_file=None)):
            with patch("config.database.AirtableClient", return_value=loaded) as client_cls:
                SingleSyncService(explicit).update_record("recOne", "s3cret")

        assert client_cls.call_args.kwargs["base_id"] == "appEXPLICIT"
        assert client_cls.call_args.kwargs["token"] == "pat-explicit"
        assert [record_id for record_id, _ in loaded.written_records] == ["recOne"]
