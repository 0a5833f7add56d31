"""
Option resolver service.

Select and multi-select choices in Airtable are addressed by opaque,
server-assigned ids (sel...) that differ between bases. The resolver reads
the live base schema once per run and maps normalized choice labels to
those ids.
"""

from typing import Optional
import structlog

from integrations.airtable import AirtableClient
from models.airtable import TableSchema
from exceptions import AirtableError, SchemaFetchError, TableNotFoundError
from utils.text_utils import normalize_option_name

logger = structlog.get_logger(__name__)


class OptionResolver:
    """
    Read-only lookup of select options for one table.

    Attributes:
        table_name: Table the options belong to
        option_ids: field name → {normalized label → option id}
        option_names: field name → {normalized label → label as stored}
    """

    def __init__(
        self,
        table_name: str,
        option_ids: dict[str, dict[str, str]],
        option_names: Optional[dict[str, dict[str, str]]] = None
    ):
        self.table_name = table_name
        self.option_ids = option_ids
        self.option_names = option_names or {}

    @classmethod
    def from_table_schema(cls, table: TableSchema) -> "OptionResolver":
        """
        Build the lookup from a table's field metadata.

        Only singleSelect and multipleSelects fields are included. When two
        choices normalize to the same label the first one wins.
        """
        option_ids: dict[str, dict[str, str]] = {}
        option_names: dict[str, dict[str, str]] = {}

        for field in table.fields:
            if not field.is_select:
                continue

            ids: dict[str, str] = {}
            names: dict[str, str] = {}
            for choice in field.choices:
                key = normalize_option_name(choice.name)
                if key is None or key in ids:
                    continue
                ids[key] = choice.id
                names[key] = choice.name

            option_ids[field.name] = ids
            option_names[field.name] = names

        return cls(table.name, option_ids, option_names)

    def has_field(self, field_name: str) -> bool:
        return field_name in self.option_ids

    def resolve(self, field_name: str, text: Optional[str]) -> Optional[dict]:
        """
        Resolve a label to an option reference.

        Args:
            field_name: Select field on the table
            text: Label to look up (case and spacing ignored)

        Returns:
            {"id": option_id}, or None if the field is not a select field,
            the text is empty, or no choice matches
        """
        key = normalize_option_name(text)
        if key is None:
            return None

        option_id = self.option_ids.get(field_name, {}).get(key)
        if option_id is None:
            return None

        return {"id": option_id}

    def canonical_name(self, field_name: str, text: Optional[str]) -> Optional[str]:
        """Return the label as stored in Airtable for a matching choice."""
        key = normalize_option_name(text)
        if key is None:
            return None
        return self.option_names.get(field_name, {}).get(key)


def load_option_resolver(client: AirtableClient, table_name: str) -> OptionResolver:
    """
    Fetch the base schema and build the resolver for one table.

    Args:
        client: Airtable client bound to the base
        table_name: Table whose select options are needed

    Returns:
        OptionResolver for the table

    Raises:
        SchemaFetchError: If the schema request fails
        TableNotFoundError: If the table is not in the base
    """
    logger.info("fetching_select_options", table=table_name)

    try:
        tables = client.get_base_schema()
    except AirtableError as e:
        raise SchemaFetchError(e.message) from e

    for raw_table in tables:
        if raw_table.get("name") == table_name:
            resolver = OptionResolver.from_table_schema(TableSchema.model_validate(raw_table))
            logger.info(
                "select_options_loaded",
                table=table_name,
                select_fields=len(resolver.option_ids)
            )
            return resolver

    logger.error(
        "table_not_in_schema",
        table=table_name,
        available=[t.get("name") for t in tables]
    )
    raise TableNotFoundError(table_name)
