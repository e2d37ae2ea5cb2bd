import os

from flask import Flask

from constants import DEFAULT_BATCH_SIZE, DEFAULT_INDEX_NAME
from database import SessionLocal, init_db
from helpers import parse_bool
from catalog_search.blueprints.search import search_bp
from catalog_search.services.search_indexer import schedule_search_index


def _elasticsearch_config():
    env = os.environ
    return {
        "ELASTICSEARCH_ENABLED": parse_bool(env.get("ELASTICSEARCH_ENABLED")),
        "ELASTICSEARCH_URL": env.get("ELASTICSEARCH_URL", "http://localhost:9200"),
        "ELASTICSEARCH_INDEX": env.get("ELASTICSEARCH_INDEX", DEFAULT_INDEX_NAME),
        "ELASTICSEARCH_TIMEOUT": float(env.get("ELASTICSEARCH_TIMEOUT", 5)),
        "ELASTICSEARCH_VERIFY_CERTS": parse_bool(env.get("ELASTICSEARCH_VERIFY_CERTS")),
        "ELASTICSEARCH_USERNAME": env.get("ELASTICSEARCH_USERNAME"),
        "ELASTICSEARCH_PASSWORD": env.get("ELASTICSEARCH_PASSWORD"),
        "ELASTICSEARCH_AUTO_INDEX": parse_bool(env.get("ELASTICSEARCH_AUTO_INDEX", "1")),
        "ELASTICSEARCH_FORCE_REINDEX": parse_bool(env.get("ELASTICSEARCH_FORCE_REINDEX")),
        "ELASTICSEARCH_BATCH_SIZE": int(env.get("ELASTICSEARCH_BATCH_SIZE", DEFAULT_BATCH_SIZE)),
    }


def create_app(config=None):
    app = Flask(__name__)
    app.config.update(_elasticsearch_config())
    if config:
        app.config.update(config)
    app.register_blueprint(search_bp)
    init_db()

    @app.teardown_appcontext
    def remove_db_session(exception=None):
        SessionLocal.remove()

    schedule_search_index(app)
    return app
