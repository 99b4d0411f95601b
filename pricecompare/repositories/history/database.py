"""
Database configuration module for search history.

Exports:
    - Base: Declarative base class for defining ORM models.
    - create_session_factory: Builds the engine and session factory for a URL.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def create_session_factory(database_url: str) -> sessionmaker:
    """Create the engine, ensure tables exist and return a session factory."""
    from pricecompare.repositories.history.models import product_search_model  # noqa: F401

    engine = create_engine(database_url)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
