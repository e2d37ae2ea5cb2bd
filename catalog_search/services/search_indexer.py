from __future__ import annotations

import os
import threading

from database import SessionLocal
from models import Product

from catalog_search.services.search_service import ProductSearchService
from constants import DEFAULT_BATCH_SIZE, INDEX_MAPPING_FIELDS


def iter_product_batches(session, batch_size):
    last_id = 0
    while True:
        batch = (
            session.query(Product)
            .filter(Product.id > last_id)
            .order_by(Product.id)
            .limit(batch_size)
            .all()
        )
        if not batch:
            break
        yield batch
        last_id = batch[-1].id


def _prepare_index(service, force):
    """Return True when the index must be filled from scratch, None on failure."""
    if force:
        return True if service.rebuild_index() else None
    if not service.ensure_index():
        return None
    if not service.mapping_has_fields(INDEX_MAPPING_FIELDS):
        return True if service.rebuild_index() else None
    return False


def reindex(app, service, session, force=False, progress=None):
    """Bring the product index in line with the database.

    An up to date index (same document and product count) is left alone
    unless ``force`` is set. Returns the number of indexed products, or
    None when Elasticsearch could not be prepared.
    """
    if not service.is_enabled():
        return None
    rebuilt = _prepare_index(service, force)
    if rebuilt is None:
        return None

    product_count = session.query(Product.id).count()
    if product_count == 0:
        return 0
    if not rebuilt:
        if service.count_documents() == product_count:
            return 0
        if not service.rebuild_index():
            return None

    batch_size = app.config.get("ELASTICSEARCH_BATCH_SIZE", DEFAULT_BATCH_SIZE)
    indexed = 0
    for batch in iter_product_batches(session, batch_size):
        indexed += service.bulk_index(batch)
        if progress is not None:
            progress(indexed, product_count)
    app.logger.info("Indexed %s of %s products.", indexed, product_count)
    return indexed


def _index_all_products(app):
    with app.app_context():
        service = ProductSearchService(app)
        if not service.is_enabled():
            return
        if not service.ping():
            app.logger.warning("Elasticsearch is not reachable; product search is unavailable.")
            return

        session = SessionLocal()
        try:
            force = bool(app.config.get("ELASTICSEARCH_FORCE_REINDEX", False))
            reindex(app, service, session, force=force)
        finally:
            session.close()


def schedule_search_index(app):
    if not app.config.get("ELASTICSEARCH_AUTO_INDEX", True):
        return None
    if app.debug and os.environ.get("WERKZEUG_RUN_MAIN") != "true":
        return None
    thread = threading.Thread(target=_index_all_products, args=(app,), daemon=True)
    thread.start()
    return thread
