"""Limit clamping and id-cursor helpers for message feeds and listings."""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy.orm import Query


def clamp_limit(limit: Optional[int], default: int, maximum: int) -> int:
    """Bound a client-supplied page size to [1, maximum]."""
    if limit is None:
        return default
    return max(1, min(int(limit), maximum))


def after_cursor(query: Query, id_column: Any, after_id: Optional[int]) -> Query:
    """Keep rows strictly after after_id, oldest first."""
    if after_id is not None:
        query = query.filter(id_column > after_id)
    return query.order_by(id_column.asc())
