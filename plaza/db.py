"""SQLAlchemy engine, session factory and FastAPI session dependency."""

from __future__ import annotations

from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from plaza.config import get_settings

Base = declarative_base()


def build_engine(database_url: str | None = None) -> Engine:
    """Create the process-wide engine. In-memory SQLite shares one connection."""
    settings = get_settings()
    url = database_url or settings.database_url
    if url is None:
        raise ValueError("Database URL is not set.")
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(
        url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_pre_ping=True,
        connect_args={"application_name": settings.app_name},
    )


engine = build_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Iterator[Session]:
    """FastAPI dependency yielding one session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
