"""Profile model: application-level user record keyed by the auth subject."""

from __future__ import annotations

from sqlalchemy import Column, Integer, String, Text

from plaza.db import Base
from plaza.models.mixins import CreatedAtMixin


class Profile(Base, CreatedAtMixin):
    """One row per identity. Created lazily on first authenticated access."""

    __tablename__ = "profiles"

    id = Column(String(64), primary_key=True)
    username = Column(String(20), unique=True, nullable=True, index=True)
    age = Column(Integer, nullable=True)
    gender = Column(String(30), nullable=True)
    address = Column(Text, nullable=True)
    occupation = Column(Text, nullable=True)
    motivation = Column(Text, nullable=True)
