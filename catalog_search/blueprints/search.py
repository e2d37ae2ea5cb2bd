import math
import re

from flask import Blueprint, current_app, jsonify, request

from catalog_search.services.product_query import SearchParams
from catalog_search.services.search_service import ProductSearchService
from constants import SORT_OPTIONS
from helpers import parse_bool, parse_float, parse_int, split_values


search_bp = Blueprint("search", __name__)

PROPERTY_ARG_PATTERN = re.compile(r"^properties\[(?P<name>[^\]]+)\]$")


class InvalidSearchArgument(ValueError):
    def __init__(self, name, value):
        super().__init__(f"Invalid value for '{name}': {value!r}")
        self.name = name
        self.value = value


def _optional_float(args, name):
    raw = args.get(name)
    if raw in (None, ""):
        return None
    value = parse_float(raw)
    if value is None or not math.isfinite(value):
        raise InvalidSearchArgument(name, raw)
    return value


def _offset(args):
    raw = args.get("from")
    if raw in (None, ""):
        return 0
    value = parse_int(raw)
    if value is None or value < 0:
        raise InvalidSearchArgument("from", raw)
    return value


def _taxons(args):
    taxons = []
    for raw in split_values(args.getlist("taxons")):
        value = parse_int(raw)
        if value is None:
            raise InvalidSearchArgument("taxons", raw)
        taxons.append(value)
    return taxons


def _properties(args):
    properties = {}
    for key in args.keys():
        match = PROPERTY_ARG_PATTERN.match(key)
        if not match:
            continue
        values = [value for value in args.getlist(key) if value.strip()]
        if values:
            properties[match.group("name")] = values
    return properties


def _sorting(args):
    sorting = args.get("sorting")
    return sorting if sorting in SORT_OPTIONS else None


def parse_search_args(args) -> SearchParams:
    return SearchParams(
        from_=_offset(args),
        price_min=_optional_float(args, "price_min"),
        price_max=_optional_float(args, "price_max"),
        properties=_properties(args),
        query=args.get("query"),
        taxons=_taxons(args),
        browse_mode=parse_bool(args.get("browse_mode")),
        sorting=_sorting(args),
    )


def _unavailable():
    return jsonify({"error": "Product search is unavailable."}), 503


@search_bp.errorhandler(InvalidSearchArgument)
def invalid_argument(exc):
    return jsonify({"error": str(exc), "argument": exc.name}), 400


@search_bp.route("/products/search")
def search_products():
    params = parse_search_args(request.args)
    service = ProductSearchService(current_app)
    result = service.search(params)
    if result is None:
        return _unavailable()
    return jsonify(result)


@search_bp.route("/products/<product_id>")
def get_product(product_id):
    service = ProductSearchService(current_app)
    if not service.is_enabled():
        return _unavailable()
    document = service.get(product_id)
    if document is None:
        if not current_app.config.get("ELASTICSEARCH_AVAILABLE", False):
            return _unavailable()
        return jsonify({"error": "Product not found."}), 404
    return jsonify(document)
