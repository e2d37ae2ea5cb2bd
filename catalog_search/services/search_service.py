from __future__ import annotations

from typing import Iterable

from elasticsearch import ApiError, Elasticsearch, NotFoundError, TransportError, helpers
from flask import current_app

from catalog_search.services.product_document import build_document
from catalog_search.services.product_query import SearchParams, build_search_body
from constants import DEFAULT_INDEX_NAME


ES_ERRORS = (ApiError, TransportError)


def _index_settings():
    return {
        "settings": {
            "analysis": {
                "filter": {
                    "nGram_filter": {
                        "type": "ngram",
                        "min_gram": 3,
                        "max_gram": 4,
                        "token_chars": ["letter", "digit", "punctuation", "symbol"],
                    }
                },
                "analyzer": {
                    "nGram_analyzer": {
                        "type": "custom",
                        "tokenizer": "whitespace",
                        "filter": ["lowercase", "asciifolding", "nGram_filter"],
                    },
                    "whitespace_analyzer": {
                        "type": "custom",
                        "tokenizer": "whitespace",
                        "filter": ["lowercase", "asciifolding"],
                    },
                },
            },
            "index": {"max_ngram_diff": 1},
        },
        "mappings": {
            "properties": {
                "name": {
                    "type": "text",
                    "analyzer": "nGram_analyzer",
                    "search_analyzer": "whitespace_analyzer",
                    "fields": {"untouched": {"type": "keyword"}},
                },
                "description": {"type": "text", "analyzer": "snowball"},
                "available_on": {"type": "date", "format": "date_optional_time"},
                "discontinue_on": {"type": "date", "format": "date_optional_time"},
                "price": {"type": "double"},
                "sku": {"type": "keyword"},
                "taxon_ids": {"type": "keyword"},
                "properties": {"type": "keyword"},
                "classifications": {
                    "type": "nested",
                    "properties": {
                        "taxon_id": {"type": "integer"},
                        "position": {"type": "integer"},
                    },
                },
                "variants": {
                    "properties": {
                        "sku": {"type": "keyword"},
                        "option_values": {
                            "properties": {
                                "name": {"type": "keyword"},
                                "presentation": {"type": "keyword"},
                            }
                        },
                    }
                },
            }
        },
    }


class ProductSearchService:
    def __init__(self, app=None):
        self.app = app or current_app

    def is_enabled(self) -> bool:
        return bool(self.app.config.get("ELASTICSEARCH_ENABLED", False))

    def _client(self):
        client = self.app.extensions.get("elasticsearch")
        if client is not None:
            return client
        url = self.app.config.get("ELASTICSEARCH_URL")
        if not url:
            return None
        timeout = self.app.config.get("ELASTICSEARCH_TIMEOUT", 5)
        verify_certs = bool(self.app.config.get("ELASTICSEARCH_VERIFY_CERTS", False))
        username = self.app.config.get("ELASTICSEARCH_USERNAME")
        password = self.app.config.get("ELASTICSEARCH_PASSWORD")
        kwargs = {
            "request_timeout": timeout,
            "verify_certs": verify_certs,
        }
        if username and password:
            kwargs["basic_auth"] = (username, password)
        client = Elasticsearch(url, **kwargs)
        self.app.extensions["elasticsearch"] = client
        return client

    def _mark_available(self, ok: bool):
        self.app.config["ELASTICSEARCH_AVAILABLE"] = ok

    def ping(self) -> bool:
        client = self._client()
        if client is None:
            return False
        try:
            ok = bool(client.ping())
        except ES_ERRORS:
            ok = False
        self._mark_available(ok)
        return ok

    def _index_name(self) -> str:
        return self.app.config.get("ELASTICSEARCH_INDEX", DEFAULT_INDEX_NAME)

    def ensure_index(self) -> bool:
        if not self.is_enabled():
            return False
        client = self._client()
        if client is None:
            return False
        index = self._index_name()
        try:
            if not client.indices.exists(index=index):
                client.indices.create(index=index, **_index_settings())
            self._mark_available(True)
            return True
        except ES_ERRORS as exc:
            self.app.logger.warning("Elasticsearch index setup failed: %s", exc)
            self._mark_available(False)
            return False

    def mapping_has_fields(self, fields: list[str]) -> bool:
        if not fields:
            return True
        client = self._client()
        if client is None:
            return False
        index = self._index_name()
        try:
            mapping = client.indices.get_mapping(index=index)
        except ES_ERRORS as exc:
            self.app.logger.warning("Elasticsearch mapping check failed: %s", exc)
            self._mark_available(False)
            return False
        index_mapping = mapping.get(index, {}).get("mappings", {}).get("properties", {})
        self._mark_available(True)
        return all(field in index_mapping for field in fields)

    def rebuild_index(self) -> bool:
        if not self.is_enabled():
            return False
        client = self._client()
        if client is None:
            return False
        index = self._index_name()
        try:
            if client.indices.exists(index=index):
                client.indices.delete(index=index)
            client.indices.create(index=index, **_index_settings())
            self._mark_available(True)
            return True
        except ES_ERRORS as exc:
            self.app.logger.warning("Elasticsearch rebuild failed: %s", exc)
            self._mark_available(False)
            return False

    def count_documents(self) -> int | None:
        if not self.is_enabled():
            return None
        client = self._client()
        if client is None:
            return None
        try:
            response = client.count(index=self._index_name())
            self._mark_available(True)
            return int(response.get("count", 0))
        except ES_ERRORS as exc:
            self.app.logger.warning("Elasticsearch count failed: %s", exc)
            self._mark_available(False)
            return None

    def index_product(self, product) -> bool:
        if not self.is_enabled():
            return False
        client = self._client()
        if client is None:
            return False
        try:
            client.index(index=self._index_name(), id=product.id, document=build_document(product))
            self._mark_available(True)
            return True
        except ES_ERRORS as exc:
            self.app.logger.warning("Elasticsearch index of product %s failed: %s", product.id, exc)
            self._mark_available(False)
            return False

    def bulk_index(self, products: Iterable) -> int:
        if not self.is_enabled():
            return 0
        client = self._client()
        if client is None:
            return 0
        index = self._index_name()
        actions = (
            {
                "_index": index,
                "_id": product.id,
                "_source": build_document(product),
            }
            for product in products
        )
        try:
            success, _ = helpers.bulk(client, actions, raise_on_error=False)
            self._mark_available(True)
            return success or 0
        except ES_ERRORS as exc:
            self.app.logger.warning("Elasticsearch bulk index failed: %s", exc)
            self._mark_available(False)
            return 0

    def search(self, params: SearchParams) -> dict | None:
        if not self.is_enabled():
            return None
        client = self._client()
        if client is None:
            return None

        body = build_search_body(params)
        try:
            response = client.search(index=self._index_name(), body=body)
            self._mark_available(True)
        except ES_ERRORS as exc:
            self.app.logger.warning("Elasticsearch search failed: %s", exc)
            self._mark_available(False)
            return None

        hits = response.get("hits", {})
        total = hits.get("total", {}).get("value", 0)
        products = []
        for hit in hits.get("hits", []):
            document = dict(hit.get("_source", {}))
            document["id"] = hit.get("_id")
            document["score"] = hit.get("_score")
            products.append(document)
        return {
            "total": int(total),
            "hits": products,
            "aggregations": response.get("aggregations", {}),
        }

    def get(self, product_id) -> dict | None:
        if not self.is_enabled():
            return None
        client = self._client()
        if client is None:
            return None
        try:
            response = client.get(index=self._index_name(), id=product_id)
            self._mark_available(True)
        except NotFoundError:
            self._mark_available(True)
            return None
        except ES_ERRORS as exc:
            self.app.logger.warning("Elasticsearch get of product %s failed: %s", product_id, exc)
            self._mark_available(False)
            return None
        document = dict(response.get("_source", {}))
        document["id"] = response.get("_id")
        return document
