"""
Unit tests for the record reconciler.

Run: pytest tests/unit/test_reconciler_service.py -v
"""

import pytest

from models.airtable import AirtableRecord, TableSchema
from models.sync import MasterRecord, SourceRecord, UnmatchedSelectPolicy
from services.option_resolver_service import OptionResolver
from services.reconciler_service import RecordReconciler, build_master_lookup
from tests.factories import MasterRecordFactory, SchemaFactory, SourceRecordFactory


@pytest.fixture
def resolver() -> OptionResolver:
    return OptionResolver.from_table_schema(TableSchema.model_validate(SchemaFactory.spt_table()))


def source(**kwargs) -> SourceRecord:
    return SourceRecord.from_airtable(AirtableRecord.model_validate(SourceRecordFactory.create(**kwargs)))


def master(**kwargs) -> MasterRecord:
    record = AirtableRecord.model_validate(MasterRecordFactory.create(**kwargs))
    return MasterRecord(id=record.id, base_product_id=record.fields["baseProductId"], fields=record.fields)


class TestReconcile:
    """Tests for RecordReconciler.reconcile()"""

    def test_z450_end_to_end(self, resolver):
        """Product-z450 with a 12.5 price → option refs, price and weight."""
        reconciler = RecordReconciler(resolver)

        payload = reconciler.reconcile(
            source(id="rec1", internal_name="Product-z450", spt_id="SPT0042"),
            master(**{"Verkoop 450g (€/kg)": 12.5})
        )

        assert payload.id == "rec1"
        assert payload.fields["packageSize"] == {"id": "selPkg1"}
        assert payload.fields["sellingPrice"] == 12.5
        assert payload.fields["weightGrams"] == 600
        assert payload.fields["productType"] == {"id": "selType1"}
        assert payload.fields["category"] == {"id": "selCat1"}
        assert payload.fields["imageUrl"] == "/images/SPT0042.jpg"
        assert payload.fields["marketingName"] == "Product-z450"

    def test_jar_is_nut_butters(self, resolver):
        payload = RecordReconciler(resolver).reconcile(
            source(internal_name="Almond Butter-nb365"),
            master(group="Butter Mix")
        )

        assert payload.fields["packageSize"] == {"id": "selPkg4"}
        assert payload.fields["productType"] == {"id": "selType2"}
        assert payload.fields["category"] == {"id": "selCat3"}
        assert payload.fields["sellingPrice"] == 11.95
        assert payload.fields["weightGrams"] == 750

    def test_mix_group_from_name_object(self, resolver):
        payload = RecordReconciler(resolver).reconcile(
            source(internal_name="Student Mix-z1000"),
            master(group={"id": "selG", "name": "Studentenmix"})
        )

        assert payload.fields["category"] == {"id": "selCat2"}

    def test_unknown_variant_lenient(self, resolver):
        """Unknown code: null size/price/weight, category still set."""
        payload = RecordReconciler(resolver, UnmatchedSelectPolicy.LENIENT).reconcile(
            source(internal_name="Pecan-z250"),
            master()
        )

        assert payload.fields["packageSize"] is None
        assert payload.fields["sellingPrice"] is None
        assert payload.fields["weightGrams"] is None
        assert payload.fields["productType"] is None
        assert payload.fields["category"] == {"id": "selCat1"}
        assert payload.fields["supplierProductName"] == "Cashew W320"

    def test_unknown_variant_strict_omits_select_fields(self, resolver):
        payload = RecordReconciler(resolver, UnmatchedSelectPolicy.STRICT).reconcile(
            source(internal_name="Pecan-z250"),
            master()
        )

        assert "packageSize" not in payload.fields
        assert "productType" not in payload.fields
        assert payload.fields["category"] == {"id": "selCat1"}
        assert payload.fields["sellingPrice"] is None
        assert payload.fields["weightGrams"] is None

    def test_unmatched_option_lenient_writes_text(self):
        """Option missing from the schema: lenient writes the label."""
        table = SchemaFactory.table("SPT", [
            SchemaFactory.select_field("packageSize", ["175g Jar"], id_prefix="Pkg"),
        ])
        resolver = OptionResolver.from_table_schema(TableSchema.model_validate(table))

        payload = RecordReconciler(resolver, "lenient").reconcile(source(internal_name="Cashew-z450"), master())

        assert payload.fields["packageSize"] == "450g Bag"
        assert payload.fields["productType"] == "Nut Bag"
        assert payload.fields["category"] == "Whole Nuts"

    def test_unmatched_option_strict_omits(self):
        table = SchemaFactory.table("SPT", [
            SchemaFactory.select_field("packageSize", ["175g Jar"], id_prefix="Pkg"),
        ])
        resolver = OptionResolver.from_table_schema(TableSchema.model_validate(table))

        payload = RecordReconciler(resolver, "strict").reconcile(source(internal_name="Cashew-z450"), master())

        assert "packageSize" not in payload.fields
        assert "productType" not in payload.fields
        assert "category" not in payload.fields
        assert payload.fields["sellingPrice"] == 12.5

    def test_allergens_use_stored_spelling(self, resolver):
        """Known allergens take the schema's spelling; new ones pass through."""
        payload = RecordReconciler(resolver).reconcile(
            source(),
            master(ingredients="SOYA, almonds, MILK powder, SESAME seeds")
        )

        assert payload.fields["allergens"] == [{"name": "Soya"}, {"name": "Milk"}, {"name": "Sesame"}]

    def test_no_ingredients(self, resolver):
        payload = RecordReconciler(resolver).reconcile(source(), master(ingredients=None))

        assert payload.fields["allergens"] == []
        assert payload.fields["Ingredients"] is None

    def test_flags_default_to_false(self, resolver):
        payload = RecordReconciler(resolver).reconcile(source(), master(isRaw=None, isSalted=0))

        assert payload.fields["isOrganic"] is True
        assert payload.fields["isRaw"] is False
        assert payload.fields["isSalted"] is False
        assert payload.fields["isGeroosterd"] is False
        assert payload.fields["isGebrand"] is False
        assert payload.fields["isNutbutterAvailable"] is False

    def test_pass_through_fields(self, resolver):
        payload = RecordReconciler(resolver).reconcile(source(), master(countryOfOrigin="Spain"))

        assert payload.fields["countryOfOrigin"] == "Spain"
        assert payload.fields["supplierProductUrl"] == "https://supplier.example/cashew"
        assert payload.fields["Ingredients"] == "Cashews"

    def test_does_not_write_update_checkbox(self, resolver):
        payload = RecordReconciler(resolver).reconcile(source(), master())

        assert "updateRecord" not in payload.fields


class TestReconcileAll:
    """Tests for RecordReconciler.reconcile_all()"""

    def test_skips_missing_link_and_lookup_miss(self, resolver):
        lookup = build_master_lookup([AirtableRecord.model_validate(MasterRecordFactory.create(base_product_id="BP-1"))])
        sources = [
            source(id="recA", base_product_id="BP-1"),
            source(id="recB", base_product_id="BP-404"),
            source(id="recC", base_product_id=None),
        ]

        outcome = RecordReconciler(resolver).reconcile_all(sources, lookup)

        assert [p.id for p in outcome.payloads] == ["recA"]
        assert [record_id for record_id, _ in outcome.skipped] == ["recB", "recC"]

    def test_linked_id_list(self, resolver):
        """Link fields returned as lists use the first id."""
        lookup = build_master_lookup([AirtableRecord.model_validate(MasterRecordFactory.create(base_product_id="BP-7"))])

        outcome = RecordReconciler(resolver).reconcile_all([source(base_product_id=["BP-7"])], lookup)

        assert len(outcome.payloads) == 1


class TestBuildMasterLookup:
    """Tests for build_master_lookup()"""

    def test_keys_by_base_product_id(self):
        records = [
            AirtableRecord.model_validate(MasterRecordFactory.create(base_product_id="BP-1", id="rec1")),
            AirtableRecord.model_validate(MasterRecordFactory.create(base_product_id="BP-2", id="rec2")),
        ]

        lookup = build_master_lookup(records)

        assert set(lookup) == {"BP-1", "BP-2"}
        assert lookup["BP-2"].id == "rec2"

    def test_ignores_records_without_id(self):
        record = AirtableRecord(id="rec1", fields={"supplierProductName": "x"})

        assert build_master_lookup([record]) == {}

    def test_last_duplicate_wins(self):
        records = [
            AirtableRecord.model_validate(MasterRecordFactory.create(base_product_id="BP-1", id="recOld")),
            AirtableRecord.model_validate(MasterRecordFactory.create(base_product_id="BP-1", id="recNew")),
        ]

        assert build_master_lookup(records)["BP-1"].id == "recNew"

    def test_numeric_ids_become_strings(self):
        record = AirtableRecord(id="rec1", fields={"baseProductId": 17})

        assert "17" in build_master_lookup([record])
