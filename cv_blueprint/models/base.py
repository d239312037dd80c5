"""SQLAlchemy engine and session setup.

SessionLocal starts bound to DATABASE_URL (or the local SQLite file) and is
rebound by configure_database() once the app config names a database.
"""

import os
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

DEFAULT_DATABASE_URL = "sqlite:///data/cv_blueprint.db"


class Base(DeclarativeBase):
    pass


def normalize_database_url(url: str) -> str:
    # Hosted Postgres often hands out postgres:// but SQLAlchemy 2.x requires postgresql://
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


def _create_engine(url: str) -> Engine:
    return create_engine(normalize_database_url(url), pool_pre_ping=True, echo=False)


engine = _create_engine(os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL))

SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def get_engine() -> Engine:
    return engine


def configure_database(url: str) -> Engine:
    """Point SessionLocal at ``url`` and create any missing tables."""
    global engine

    url = normalize_database_url(url)
    if url.startswith("sqlite:///") and not url.endswith(":memory:"):
        Path(url[len("sqlite:///"):]).parent.mkdir(parents=True, exist_ok=True)

    engine = _create_engine(url)
    SessionLocal.configure(bind=engine)
    Base.metadata.create_all(engine)
    return engine
