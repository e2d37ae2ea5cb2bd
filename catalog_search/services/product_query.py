"""Compilation of storefront search parameters into an Elasticsearch request.

The body always has the same skeleton and the parameters only fill in the
blanks::

    {
        "min_score": ...,
        "query": {"bool": {"must": <text clause>, "filter": [...]}},
        "sort": [...],
        "from": ...,
        "aggregations": {...},
        "post_filter": {"range": {"price": {...}}},  # optional
    }

Filters inside ``query.bool.filter`` narrow the aggregations, the price
``post_filter`` does not.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from constants import (
    MIN_SCORE,
    NAME_SORT_FIELD,
    SORT_CLASSIFICATION,
    SORT_NAME_ASC,
    SORT_NAME_DESC,
    SORT_PRICE_ASC,
    SORT_PRICE_DESC,
    SORT_SCORE,
    TERMS_AGGREGATION_SIZE,
    TEXT_QUERY_FIELDS,
)
from helpers import property_token


@dataclass
class SearchParams:
    from_: int = 0
    price_min: float | None = None
    price_max: float | None = None
    properties: dict[str, list[str]] = field(default_factory=dict)
    query: str | None = None
    taxons: list[int] = field(default_factory=list)
    # Accepted for API compatibility; compilation always keeps the taxon
    # filter inside the scored query.
    browse_mode: bool = False
    sorting: str | None = None

    def __post_init__(self):
        if self.properties is None:
            self.properties = {}
        if self.taxons is None:
            self.taxons = []


def _text_clause(query):
    if query is None or not query.strip():
        return {"match_all": {}}
    return {
        "query_string": {
            "query": query,
            "fields": list(TEXT_QUERY_FIELDS),
            "default_operator": "AND",
            "type": "best_fields",
            "tie_breaker": 0,
        }
    }


def _property_filters(properties):
    # AND between property names, OR between the values of one name.
    filters = []
    for name, values in properties.items():
        filters.append({"terms": {"properties": [property_token(name, value) for value in values]}})
    return filters


def _name_sort(order):
    return {NAME_SORT_FIELD: {"order": order}}


def _price_sort(order):
    return {"price": {"order": order}}


def _sort_clause(sorting, taxons):
    if sorting == SORT_CLASSIFICATION and not taxons:
        sorting = None

    if sorting == SORT_NAME_ASC:
        return [_name_sort("asc"), _price_sort("asc"), "_score"]
    if sorting == SORT_NAME_DESC:
        return [_name_sort("desc"), _price_sort("asc"), "_score"]
    if sorting == SORT_PRICE_ASC:
        return [_price_sort("asc"), _name_sort("asc"), "_score"]
    if sorting == SORT_PRICE_DESC:
        return [_price_sort("desc"), _name_sort("asc"), "_score"]
    if sorting == SORT_CLASSIFICATION:
        return [
            {
                "classifications.position": {
                    "mode": "min",
                    "order": "asc",
                    "nested": {
                        "path": "classifications",
                        "filter": {"term": {"classifications.taxon_id": taxons[0]}},
                    },
                }
            }
        ]
    if sorting == SORT_SCORE:
        return ["_score", _name_sort("asc"), _price_sort("asc")]
    return [_name_sort("asc"), _price_sort("asc"), "_score"]


def _aggregations():
    return {
        "price": {"stats": {"field": "price"}},
        "properties": {
            "terms": {
                "field": "properties",
                "order": {"_count": "asc"},
                "size": TERMS_AGGREGATION_SIZE,
            }
        },
        "taxon_ids": {"terms": {"field": "taxon_ids", "size": TERMS_AGGREGATION_SIZE}},
    }


def _availability_filters():
    return [
        {"range": {"available_on": {"lte": "now"}}},
        {
            "bool": {
                "should": [
                    {"bool": {"must_not": {"exists": {"field": "discontinue_on"}}}},
                    {"range": {"discontinue_on": {"gte": "now/1h"}}},
                ]
            }
        },
    ]


def _price_filter(price_min, price_max):
    if price_min is None or price_max is None or not price_min < price_max:
        return None
    return {"range": {"price": {"gte": price_min, "lte": price_max}}}


def build_search_body(params: SearchParams) -> dict:
    filters = _property_filters(params.properties)
    if params.taxons:
        filters.append({"terms": {"taxon_ids": list(params.taxons)}})
    filters.extend(_availability_filters())

    body = {
        "min_score": MIN_SCORE,
        "query": {"bool": {"must": _text_clause(params.query), "filter": filters}},
        "sort": _sort_clause(params.sorting, params.taxons),
        "from": params.from_,
        "aggregations": _aggregations(),
    }

    price_filter = _price_filter(params.price_min, params.price_max)
    if price_filter is not None:
        body["post_filter"] = price_filter
    return body
