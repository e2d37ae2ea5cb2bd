"""Tests for the product document projection."""

from datetime import datetime
from decimal import Decimal

from catalog_search.services.product_document import build_document, property_list, taxon_closure


class TestBuildDocument:
    """Tests for build_document."""

    def test_single_taxon_without_properties(self, product_factory, taxonomy):
        """A product in a root taxon indexes that taxon only and no properties."""
        product = product_factory(taxons=[taxonomy["root"]])

        document = build_document(product)

        assert document["taxon_ids"] == [1]
        assert "properties" not in document
        assert document["price"] == 19.99
        assert document["sku"] == "ABC123"

    def test_scalar_fields(self, product_factory):
        """Scalar fields are copied and dates serialized as ISO strings."""
        product = product_factory(discontinue_on=datetime(2030, 6, 1))

        document = build_document(product)

        assert document["name"] == "Runner"
        assert document["description"] == "Light running shoe"
        assert document["available_on"] == "2024-01-01T09:30:00"
        assert document["discontinue_on"] == "2030-06-01T00:00:00"

    def test_missing_dates_are_none(self, product_factory):
        """Unset availability dates project to None."""
        product = product_factory(available_on=None)

        document = build_document(product)

        assert document["available_on"] is None
        assert document["discontinue_on"] is None

    def test_no_taxons_omits_taxon_ids(self, product_factory):
        """A product without taxons has no taxon_ids key at all."""
        document = build_document(product_factory())

        assert "taxon_ids" not in document
        assert document["classifications"] == []

    def test_price_and_sku_follow_master_variant(self, product_factory):
        """Price and sku are recomputed from the master variant."""
        product = product_factory()
        product.master.price = Decimal("24.50")
        product.master.sku = "XYZ9"

        document = build_document(product)

        assert document["price"] == 24.5
        assert document["sku"] == "XYZ9"

    def test_properties_are_tokens(self, product_factory):
        """Each product property becomes a name||value token."""
        product = product_factory(properties=[("color", "red"), ("material", "mesh")])

        document = build_document(product)

        assert document["properties"] == ["color||red", "material||mesh"]

    def test_property_without_value(self, product_factory):
        """A property with no value still yields a name|| token."""
        product = product_factory(properties=[("care", None)])

        assert build_document(product)["properties"] == ["care||"]

    def test_classifications_keep_taxon_and_position(self, product_factory, taxonomy):
        """Classifications only carry taxon_id and position."""
        product = product_factory(taxons=[taxonomy["shoes"], taxonomy["accessories"]])

        document = build_document(product)

        assert document["classifications"] == [
            {"taxon_id": 5, "position": 1},
            {"taxon_id": 9, "position": 2},
        ]

    def test_variants_exclude_master(self, product_factory):
        """Non-master variants are nested with their option values."""
        product = product_factory(
            variants=[
                ("ABC123-M", [("size-m", "M"), ("color-red", "Red")]),
                ("ABC123-L", [("size-l", "L")]),
            ]
        )

        document = build_document(product)

        assert document["variants"] == [
            {
                "sku": "ABC123-M",
                "option_values": [
                    {"name": "size-m", "presentation": "M"},
                    {"name": "color-red", "presentation": "Red"},
                ],
            },
            {"sku": "ABC123-L", "option_values": [{"name": "size-l", "presentation": "L"}]},
        ]


class TestTaxonClosure:
    """Tests for taxon_closure."""

    def test_includes_all_ancestors(self, product_factory, taxonomy):
        """Every ancestor of an assigned taxon is included."""
        product = product_factory(taxons=[taxonomy["shoes"]])

        assert taxon_closure(product) == [5, 2, 1]

    def test_shared_ancestors_are_deduplicated(self, product_factory, taxonomy):
        """Ancestors shared by several taxons appear once."""
        product = product_factory(taxons=[taxonomy["shoes"], taxonomy["accessories"]])

        ids = taxon_closure(product)

        assert sorted(ids) == [1, 2, 5, 9]
        assert len(ids) == 4

    def test_empty_without_taxons(self, product_factory):
        """No taxons produce an empty closure."""
        assert taxon_closure(product_factory()) == []


def test_property_list_empty(product_factory):
    """Products without properties produce no tokens."""
    assert property_list(product_factory()) == []
