from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import BigInteger, Column, DateTime, Integer

# BIGINT identity on PostgreSQL; SQLite only autoincrements INTEGER primary keys.
BigIntId = BigInteger().with_variant(Integer, "sqlite")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CreatedAtMixin:
    """Rows are append-only, so creation time is the only timestamp."""

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
