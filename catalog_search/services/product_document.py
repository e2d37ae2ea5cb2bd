"""Projection of a product into the document stored in the search index.

Works on any object exposing the product interface used below (name,
description, available_on, discontinue_on, price, sku, taxons,
product_properties, classifications, variants); the SQLAlchemy models in
``models`` are one such provider.
"""

from __future__ import annotations

from helpers import property_token


def _isoformat(value):
    if value is None:
        return None
    return value.isoformat()


def _safe_float(value):
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def taxon_closure(product) -> list:
    """Ids of every assigned taxon and its ancestors, first-seen order."""
    seen = set()
    ids = []
    for taxon in product.taxons:
        for node in taxon.self_and_ancestors:
            if id(node) in seen:
                continue
            seen.add(id(node))
            ids.append(node.id)
    return ids


def property_list(product) -> list[str]:
    return [
        property_token(product_property.property.name, product_property.value)
        for product_property in product.product_properties
    ]


def _classification_document(classification) -> dict:
    return {
        "taxon_id": classification.taxon_id,
        "position": classification.position,
    }


def _variant_document(variant) -> dict:
    return {
        "sku": variant.sku,
        "option_values": [
            {"name": option_value.name, "presentation": option_value.presentation}
            for option_value in variant.option_values
        ],
    }


def build_document(product) -> dict:
    document = {
        "name": product.name,
        "description": product.description,
        "available_on": _isoformat(product.available_on),
        "discontinue_on": _isoformat(product.discontinue_on),
        "price": _safe_float(product.price),
        "sku": product.sku,
        "classifications": [
            _classification_document(classification)
            for classification in product.classifications
        ],
        "variants": [_variant_document(variant) for variant in product.variants],
    }
    properties = property_list(product)
    if properties:
        document["properties"] = properties
    taxon_ids = taxon_closure(product)
    if taxon_ids:
        document["taxon_ids"] = taxon_ids
    return document
