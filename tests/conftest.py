"""Shared fixtures for catalog search tests."""

import os
from datetime import datetime
from decimal import Decimal

os.environ.setdefault("CATALOG_SEARCH_DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from catalog_search import create_app
from models import (
    Base,
    Classification,
    OptionValue,
    Product,
    ProductProperty,
    Property,
    Taxon,
    Variant,
)


@pytest.fixture
def app():
    return create_app(
        {
            "TESTING": True,
            "ELASTICSEARCH_ENABLED": True,
            "ELASTICSEARCH_AUTO_INDEX": False,
            "ELASTICSEARCH_INDEX": "test-products",
        }
    )


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session():
    """A session on a private in-memory SQLite database."""
    engine = create_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine)()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def taxonomy():
    """Categories -> Clothing -> Shoes, plus a sibling Accessories."""
    root = Taxon(id=1, name="Categories")
    clothing = Taxon(id=2, name="Clothing", parent=root)
    shoes = Taxon(id=5, name="Shoes", parent=clothing)
    accessories = Taxon(id=9, name="Accessories", parent=root)
    return {"root": root, "clothing": clothing, "shoes": shoes, "accessories": accessories}


def make_product(
    name="Runner",
    sku="ABC123",
    price="19.99",
    taxons=(),
    properties=(),
    variants=(),
    available_on=datetime(2024, 1, 1, 9, 30),
    discontinue_on=None,
    description="Light running shoe",
):
    product = Product(
        id=1,
        name=name,
        description=description,
        available_on=available_on,
        discontinue_on=discontinue_on,
    )
    product.variants_including_master.append(
        Variant(sku=sku, price=Decimal(price), is_master=True)
    )
    for variant_sku, option_values in variants:
        variant = Variant(sku=variant_sku, price=Decimal(price))
        variant.option_values = [
            OptionValue(name=option_name, presentation=presentation)
            for option_name, presentation in option_values
        ]
        product.variants_including_master.append(variant)
    for position, taxon in enumerate(taxons, start=1):
        product.classifications.append(
            Classification(taxon=taxon, taxon_id=taxon.id, position=position)
        )
    for property_name, value in properties:
        product.product_properties.append(
            ProductProperty(property=Property(name=property_name), value=value)
        )
    return product


@pytest.fixture
def product_factory():
    return make_product
