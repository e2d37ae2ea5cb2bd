DEFAULT_INDEX_NAME = "catalog-products"
DEFAULT_BATCH_SIZE = 1000

PROPERTY_SEPARATOR = "||"

MIN_SCORE = 0.1
TERMS_AGGREGATION_SIZE = 1000000

TEXT_QUERY_FIELDS = ["name^5", "description", "sku"]

NAME_SORT_FIELD = "name.untouched"

SORT_NAME_ASC = "name_asc"
SORT_NAME_DESC = "name_desc"
SORT_PRICE_ASC = "price_asc"
SORT_PRICE_DESC = "price_desc"
SORT_CLASSIFICATION = "classification"
SORT_SCORE = "score"

SORT_OPTIONS = (
    SORT_NAME_ASC,
    SORT_NAME_DESC,
    SORT_PRICE_ASC,
    SORT_PRICE_DESC,
    SORT_CLASSIFICATION,
    SORT_SCORE,
)

# Mirrors the fields produced by build_document.
INDEX_MAPPING_FIELDS = [
    "name",
    "description",
    "available_on",
    "discontinue_on",
    "price",
    "sku",
    "taxon_ids",
    "properties",
    "classifications",
    "variants",
]
