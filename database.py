import os

from sqlalchemy import create_engine
from sqlalchemy.orm import scoped_session, sessionmaker

from models import Base


DATABASE_URL = os.environ.get("CATALOG_SEARCH_DATABASE_URL", "sqlite:///catalog.db")

engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
)
SessionLocal = scoped_session(sessionmaker(bind=engine))


def init_db():
    """Create the catalog tables if they are missing."""
    Base.metadata.create_all(bind=engine)
