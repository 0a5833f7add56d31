"""
Airtable REST API client.

Thin wrapper over requests for the calls the sync needs: base schema,
paginated record listing, single record fetch, and PATCH updates.
Every failure is raised as AirtableError with the API's error text.
"""

from typing import Optional, Any
from urllib.parse import quote
import requests
import structlog

from exceptions import AirtableError

logger = structlog.get_logger(__name__)

# Airtable rejects PATCH bodies with more than 10 records
MAX_RECORDS_PER_WRITE = 10


class AirtableClient:
    """
    Client bound to one Airtable base.

    Usage:
        client = AirtableClient(base_id="app123", token="pat...")
        records = client.list_records("SPT - Sellable Product Table", view="Batch Update")
    """

    def __init__(
        self,
        base_id: str,
        token: str,
        api_url: str = "https://api.airtable.com/v0",
        timeout: float = 30.0,
        session: Optional[requests.Session] = None
    ):
        self.base_id = base_id
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {token}"})

    # ===================
    # URLS
    # ===================

    def table_url(self, table_name: str) -> str:
        """URL of a table; names are percent-encoded (spaces, commas)."""
        return f"{self.api_url}/{self.base_id}/{quote(table_name, safe='')}"

    def record_url(self, table_name: str, record_id: str) -> str:
        return f"{self.table_url(table_name)}/{record_id}"

    def schema_url(self) -> str:
        return f"{self.api_url}/meta/bases/{self.base_id}/tables"

    # ===================
    # READS
    # ===================

    def get_base_schema(self) -> list[dict]:
        """
        Fetch table metadata for the whole base.

        Returns:
            List of table dicts: {"id", "name", "fields": [{"name", "type", "options"}]}

        Raises:
            AirtableError: If the request fails
        """
        data = self._request("GET", self.schema_url())
        return data.get("tables", [])

    def list_records(
        self,
        table_name: str,
        view: Optional[str] = None,
        filter_formula: Optional[str] = None
    ) -> list[dict]:
        """
        Fetch all records of a table, following pagination.

        Args:
            table_name: Table name
            view: Optional view name to restrict and order the records
            filter_formula: Optional filterByFormula expression

        Returns:
            List of raw records: {"id", "fields", "createdTime"}

        Raises:
            AirtableError: If any page request fails
        """
        params: dict[str, Any] = {}
        if view:
            params["view"] = view
        if filter_formula:
            params["filterByFormula"] = filter_formula

        records: list[dict] = []
        page = 0

        while True:
            page += 1
            data = self._request("GET", self.table_url(table_name), params=dict(params))
            records.extend(data.get("records", []))

            offset = data.get("offset")
            if not offset:
                break
            params["offset"] = offset

        logger.debug(
            "airtable_records_listed",
            table=table_name,
            view=view,
            pages=page,
            count=len(records)
        )

        return records

    def get_record(self, table_name: str, record_id: str) -> dict:
        """Fetch a single record by id."""
        return self._request("GET", self.record_url(table_name, record_id))

    # ===================
    # WRITES
    # ===================

    def update_records(self, table_name: str, records: list[dict]) -> list[dict]:
        """
        PATCH up to 10 records in one call.

        All-or-nothing: one invalid record fails the whole call.

        Args:
            table_name: Table name
            records: [{"id": ..., "fields": {...}}, ...]

        Returns:
            Updated records as returned by the API

        Raises:
            ValueError: If more than 10 records are passed
            AirtableError: If the request fails
        """
        if len(records) > MAX_RECORDS_PER_WRITE:
            raise ValueError(
                f"Airtable accepts at most {MAX_RECORDS_PER_WRITE} records per update, got {len(records)}"
            )

        data = self._request("PATCH", self.table_url(table_name), json={"records": records})
        return data.get("records", [])

    def update_record(self, table_name: str, record_id: str, fields: dict) -> dict:
        """PATCH a single record's fields."""
        return self._request(
            "PATCH",
            self.record_url(table_name, record_id),
            json={"fields": fields}
        )

    # ===================
    # TRANSPORT
    # ===================

    def _request(self, method: str, url: str, **kwargs) -> dict:
        """Send a request and return decoded JSON, raising AirtableError on failure."""
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error("airtable_request_failed", method=method, url=url, error=str(e))
            raise AirtableError(f"Airtable request failed: {e}") from e

        if not response.ok:
            body = response.text
            logger.error(
                "airtable_api_error",
                method=method,
                url=url,
                status=response.status_code,
                body=body
            )
            raise AirtableError(body, status=response.status_code, response_body=body)

        try:
            return response.json()
        except ValueError as e:
            raise AirtableError(
                f"Airtable returned invalid JSON: {e}",
                status=response.status_code,
                response_body=response.text
            ) from e
