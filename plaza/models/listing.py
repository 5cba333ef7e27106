"""Listing model: classified ads posted by users."""

from __future__ import annotations

from sqlalchemy import Column, Numeric, String, Text

from plaza.db import Base
from plaza.models.mixins import BigIntId, CreatedAtMixin


class Listing(Base, CreatedAtMixin):
    """A classified ad. username is the owner's name when the listing was posted."""

    __tablename__ = "listings"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    username = Column(String(20), nullable=False, index=True)
    title = Column(String(120), nullable=False)
    address = Column(String(200), nullable=False)
    price = Column(Numeric(14, 2, asdecimal=False), nullable=False)
    description = Column(Text, nullable=False)
    image_url = Column(String(1000), nullable=True)
    region_code = Column(String(8), nullable=True, index=True)
