"""
Shared test fixtures.

The Airtable client is replaced by MockAirtableClient, which serves
configured tables and records every call so tests can assert on them.
"""

import sys
from pathlib import Path

# Add project root to Python path
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))

import pytest
from unittest.mock import patch
from typing import Generator, Optional

from config.settings import Settings
from exceptions import AirtableError
from tests.factories import SchemaFactory


# ===================
# MOCK AIRTABLE CLIENT
# ===================

class MockAirtableClient:
    """
    In-memory stand-in for AirtableClient.

    Usage:
        client = MockAirtableClient()
        client.set_schema([SchemaFactory.spt_table()])
        client.set_records(SPT_TABLE, [...], view="Batch Update")
        client.fail_on("update_records", call_number=2)
    """

    def __init__(self):
        self._schema: list[dict] = []
        self._records: dict[tuple[str, Optional[str]], list[dict]] = {}
        self._failures: dict[str, set[int]] = {}
        self._failure_message = "INVALID_REQUEST"
        self.calls: list[tuple[str, tuple]] = []
        self.written_batches: list[list[dict]] = []
        self.written_records: list[tuple[str, dict]] = []

    # Configuration

    def set_schema(self, tables: list[dict]):
        self._schema = tables

    def set_records(self, table_name: str, records: list[dict], view: Optional[str] = None):
        self._records[(table_name, view)] = records

    def fail_on(self, method: str, call_number: int = 1, message: str = "INVALID_REQUEST"):
        """Make the Nth call of a method raise AirtableError."""
        self._failures.setdefault(method, set()).add(call_number)
        self._failure_message = message

    def call_count(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)

    def _record_call(self, method: str, *args):
        self.calls.append((method, args))
        if self.call_count(method) in self._failures.get(method, set()):
            raise AirtableError(
                f'{{"error": {{"type": "{self._failure_message}"}}}}',
                status=422,
                response_body=self._failure_message
            )

    # AirtableClient interface

    def get_base_schema(self) -> list[dict]:
        self._record_call("get_base_schema")
        return self._schema

    def list_records(self, table_name, view=None, filter_formula=None) -> list[dict]:
        self._record_call("list_records", table_name, view, filter_formula)
        records = self._records.get((table_name, view), [])
        if filter_formula and "baseProductId" in filter_formula:
            wanted = filter_formula.split("=", 1)[1].strip("'")
            records = [r for r in records if str(r["fields"].get("baseProductId")) == wanted]
        return records

    def get_record(self, table_name, record_id) -> dict:
        self._record_call("get_record", table_name, record_id)
        for records in (v for (t, _), v in self._records.items() if t == table_name):
            for record in records:
                if record["id"] == record_id:
                    return record
        raise AirtableError('{"error": "NOT_FOUND"}', status=404, response_body="NOT_FOUND")

    def update_records(self, table_name, records) -> list[dict]:
        self._record_call("update_records", table_name, records)
        self.written_batches.append(records)
        return records

    def update_record(self, table_name, record_id, fields) -> dict:
        self._record_call("update_record", table_name, record_id, fields)
        self.written_records.append((record_id, fields))
        return {"id": record_id, "fields": fields}


# ===================
# FIXTURES
# ===================

@pytest.fixture
def test_settings() -> Settings:
    """Settings with credentials set and no real delay between batches."""
    return Settings(
        _env_file=None,
        airtable_pat="pat-test",
        airtable_base_id="appTEST",
        update_password="s3cret",
        batch_throttle="none",
        unmatched_select_policy="lenient",
    )


@pytest.fixture
def mock_airtable() -> MockAirtableClient:
    """
    Mock Airtable client with the standard SPT/MTB schema loaded.

    Usage:
        def test_something(mock_airtable):
            mock_airtable.set_records(SPT_TABLE, [...], view="Batch Update")
    """
    client = MockAirtableClient()
    client.set_schema([SchemaFactory.spt_table(), SchemaFactory.mtb_table()])
    return client


@pytest.fixture
def patched_services(mock_airtable, test_settings) -> Generator:
    """
    Patch the service factories' settings and client lookups.

    Usage:
        def test_endpoint(patched_services, test_client):
            ...
    """
    with patch("services.batch_sync_service.get_settings", return_value=test_settings):
        with patch("services.batch_sync_service.build_airtable_client", return_value=mock_airtable):
            with patch("services.single_sync_service.get_settings", return_value=test_settings):
                with patch("services.single_sync_service.build_airtable_client", return_value=mock_airtable):
                    yield mock_airtable


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.

    Usage:
        def test_endpoint(test_client):
            response = test_client.post("/api/update-batch-products", json={...})
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)
