"""Reindex every product from the database.

Usage: reindex_products.py [--rebuild]

Without --rebuild an index whose document count already matches the
product count is left untouched.
"""

from __future__ import annotations

import argparse
import os

os.environ.setdefault("ELASTICSEARCH_AUTO_INDEX", "0")

from catalog_search import create_app
from catalog_search.services.search_indexer import reindex
from catalog_search.services.search_service import ProductSearchService
from database import SessionLocal


def _report(indexed, total):
    print(f"Indexed {indexed} / {total}")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Reindex catalog products in Elasticsearch.")
    parser.add_argument("--rebuild", action="store_true", help="drop and recreate the index first")
    args = parser.parse_args(argv)

    app = create_app()
    with app.app_context():
        service = ProductSearchService(app)
        if not service.is_enabled():
            print("Elasticsearch is disabled. Set ELASTICSEARCH_ENABLED=1.")
            return 1

        force = args.rebuild or bool(app.config.get("ELASTICSEARCH_FORCE_REINDEX", False))
        session = SessionLocal()
        try:
            indexed = reindex(app, service, session, force=force, progress=_report)
        finally:
            session.close()

    if indexed is None:
        print("Failed to prepare the product index.")
        return 1
    print(f"Done. Indexed {indexed} products.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
