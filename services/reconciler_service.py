"""
Record reconciler service.

Joins SPT records to their MTB master record and builds the PATCH payload:
variant-derived price/size/weight, product type and category, allergens,
and the attributes copied straight from MTB.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional
import structlog

from models.airtable import AirtableRecord
from models.sync import MasterRecord, SourceRecord, UnmatchedSelectPolicy, UpdatePayload
from services.option_resolver_service import OptionResolver
from services.variant_rule_service import derive_variant
from services.classifier_service import (
    base_product_group_text,
    classify_category,
    classify_product_type,
)
from services.allergen_service import extract_allergens

logger = structlog.get_logger(__name__)

# SPT fields written by the sync
FIELD_PACKAGE_SIZE = "packageSize"
FIELD_SELLING_PRICE = "sellingPrice"
FIELD_WEIGHT_GRAMS = "weightGrams"
FIELD_PRODUCT_TYPE = "productType"
FIELD_CATEGORY = "category"
FIELD_ALLERGENS = "allergens"
FIELD_IMAGE_URL = "imageUrl"
FIELD_MARKETING_NAME = "marketingName"
FIELD_UPDATE_RECORD = "updateRecord"

# MTB fields read by the sync
MTB_BASE_PRODUCT_ID = "baseProductId"
MTB_BASE_PRODUCT_GROUP = "baseProductGroup"
MTB_INGREDIENTS = "Ingredients"

# Copied from MTB as-is (same name on both tables)
PASS_THROUGH_FIELDS = (
    "supplierProductName",
    "Ingredients",
    "countryOfOrigin",
    "supplierProductUrl",
)

# Copied from MTB; empty checkboxes are absent from the API response
FLAG_FIELDS = (
    "isOrganic",
    "isRaw",
    "isGeroosterd",
    "isGebrand",
    "isSalted",
    "isNutbutterAvailable",
)


@dataclass
class ReconcileOutcome:
    """Payloads ready to write plus the records left out and why."""
    payloads: list[UpdatePayload] = field(default_factory=list)
    skipped: list[tuple[str, str]] = field(default_factory=list)


def build_master_lookup(records: Iterable[AirtableRecord]) -> dict[str, MasterRecord]:
    """
    Key MTB records by baseProductId.

    Records without an id are ignored; on duplicates the last record wins.
    """
    lookup: dict[str, MasterRecord] = {}

    for record in records:
        base_id = record.fields.get(MTB_BASE_PRODUCT_ID)
        if base_id is None or base_id == "":
            continue

        key = str(base_id)
        if key in lookup:
            logger.warning(
                "duplicate_base_product_id",
                base_product_id=key,
                kept=record.id,
                replaced=lookup[key].id
            )

        lookup[key] = MasterRecord(id=record.id, base_product_id=key, fields=record.fields)

    return lookup


class RecordReconciler:
    """
    Builds update payloads for SPT records.

    Select fields are written as {"id": ...} when the option exists. What
    happens otherwise depends on the UnmatchedSelectPolicy.
    """

    def __init__(
        self,
        resolver: OptionResolver,
        policy: UnmatchedSelectPolicy = UnmatchedSelectPolicy.LENIENT
    ):
        self.resolver = resolver
        self.policy = UnmatchedSelectPolicy(policy)

    def reconcile(self, source: SourceRecord, master: MasterRecord) -> UpdatePayload:
        """
        Build the payload for one joined SPT/MTB pair.

        Args:
            source: SPT record
            master: Linked MTB record

        Returns:
            UpdatePayload with every derived and copied field
        """
        mtb = master.fields
        updates: dict[str, Any] = {}

        variant = derive_variant(source.internal_name, mtb)
        self._set_select(updates, FIELD_PACKAGE_SIZE, variant.package_size)
        updates[FIELD_SELLING_PRICE] = variant.selling_price
        updates[FIELD_WEIGHT_GRAMS] = variant.weight_grams

        product_type = classify_product_type(variant.package_size)
        self._set_select(updates, FIELD_PRODUCT_TYPE, product_type)

        group_text = base_product_group_text(mtb.get(MTB_BASE_PRODUCT_GROUP))
        category = classify_category(product_type, group_text)
        self._set_select(updates, FIELD_CATEGORY, category)

        updates[FIELD_ALLERGENS] = [
            {"name": self.resolver.canonical_name(FIELD_ALLERGENS, name) or name}
            for name in extract_allergens(mtb.get(MTB_INGREDIENTS))
        ]

        for name in PASS_THROUGH_FIELDS:
            updates[name] = mtb.get(name)
        for name in FLAG_FIELDS:
            updates[name] = mtb.get(name) or False

        updates[FIELD_IMAGE_URL] = f"/images/{source.spt_id}.jpg"
        updates[FIELD_MARKETING_NAME] = source.internal_name

        if not variant.matched:
            logger.debug(
                "variant_not_recognized",
                record_id=source.id,
                internal_name=source.internal_name,
                suffix=variant.suffix
            )

        return UpdatePayload(id=source.id, fields=updates)

    def reconcile_all(
        self,
        sources: Iterable[SourceRecord],
        lookup: dict[str, MasterRecord]
    ) -> ReconcileOutcome:
        """
        Reconcile every SPT record that links to a known MTB record.

        Records with no link, or a link to an unknown base product, are
        skipped and reported in the outcome.
        """
        outcome = ReconcileOutcome()

        for source in sources:
            if not source.linked_base_product_id:
                outcome.skipped.append((source.id, "no linkedBaseProductId"))
                continue

            master = lookup.get(source.linked_base_product_id)
            if master is None:
                logger.info(
                    "master_record_missing",
                    record_id=source.id,
                    base_product_id=source.linked_base_product_id
                )
                outcome.skipped.append(
                    (source.id, f"no MTB record for {source.linked_base_product_id}")
                )
                continue

            outcome.payloads.append(self.reconcile(source, master))

        return outcome

    def _set_select(self, updates: dict, field_name: str, text: Optional[str]) -> None:
        """Write an option reference, or apply the policy when none matches."""
        ref = self.resolver.resolve(field_name, text)
        if ref is not None:
            updates[field_name] = ref
        elif self.policy == UnmatchedSelectPolicy.LENIENT:
            updates[field_name] = text
