"""Listing catalog: create, validate, list and fetch classified ads."""

from __future__ import annotations

import math
import re
from typing import Any, List, Optional

from sqlalchemy.orm import Session as DBSession

from plaza.constants.regions import RegionCode
from plaza.exceptions import NotFoundError, ValidationError
from plaza.models.listing import Listing
from plaza.schemas.listing import ListingCreate
from plaza.services.profile_service import ProfileService
from plaza.utils.pagination import clamp_limit

DEFAULT_LIMIT = 50
MAX_LIMIT = 200
MAX_PRICE = 1e9
PRICE_DECIMALS = 2
MAX_IMAGE_URL_LENGTH = 1000
IMAGE_URL_RE = re.compile(r"^https?://", re.IGNORECASE)


def _text(value: Any) -> str:
    return ("" if value is None else str(value)).strip()


def _check_length(value: str, low: int, high: int, message: str) -> str:
    if len(value) < low or len(value) > high:
        raise ValidationError(message)
    return value


def _parse_price(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        raise ValidationError("Price must be a non-negative number up to 1e9")
    try:
        price = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError) as e:
        raise ValidationError("Price must be a non-negative number up to 1e9") from e
    if not math.isfinite(price) or price < 0 or price > MAX_PRICE:
        raise ValidationError("Price must be a non-negative number up to 1e9")
    if round(price, PRICE_DECIMALS) != price:
        raise ValidationError("Price must have at most 2 decimals")
    return price


def _parse_image_url(value: Any) -> Optional[str]:
    if value is None:
        return None
    url = str(value).strip()
    if len(url) > MAX_IMAGE_URL_LENGTH:
        raise ValidationError("image_url too long")
    if not IMAGE_URL_RE.match(url):
        raise ValidationError("image_url must be http(s)")
    return url


class ListingService:
    """Manages classified listings. Listings are never updated or deleted."""

    def __init__(self, db: DBSession) -> None:
        self.db = db
        self.profiles = ProfileService(db)

    def create_listing(self, identity_id: str, data: ListingCreate) -> Listing:
        """Validate every field, then insert with the owner's current username."""
        profile = self.profiles.require_username(identity_id)

        title = _check_length(_text(data.title), 3, 120, "Title must be 3-120 chars")
        address = _check_length(
            _text(data.address), 3, 200, "Address must be 3-200 chars"
        )
        price = _parse_price(data.price)
        description = _check_length(
            _text(data.description), 3, 2000, "Description must be 3-2000 chars"
        )
        region = None
        if data.region_code not in (None, ""):
            region = RegionCode.parse(data.region_code)
            if region is None:
                raise ValidationError("Invalid region_code")
        image_url = _parse_image_url(data.image_url)

        listing = Listing(
            user_id=identity_id,
            username=profile.username,
            title=title,
            address=address,
            price=price,
            description=description,
            image_url=image_url,
            region_code=region.value if region else None,
        )
        self.db.add(listing)
        self.db.commit()
        self.db.refresh(listing)
        return listing

    def get_listing(self, listing_id: int) -> Listing:
        listing = self.db.query(Listing).filter(Listing.id == listing_id).first()
        if listing is None:
            raise NotFoundError("Listing not found")
        return listing

    def list_my_listings(
        self, identity_id: str, limit: int = DEFAULT_LIMIT
    ) -> List[Listing]:
        """The caller's listings, newest first."""
        query = self.db.query(Listing).filter(Listing.user_id == identity_id)
        return self._newest_first(query, limit)

    def list_user_listings(
        self, username: Optional[str], limit: int = DEFAULT_LIMIT
    ) -> List[Listing]:
        """Listings posted under username (as recorded at posting time)."""
        if not username:
            raise ValidationError("Missing username")
        query = self.db.query(Listing).filter(Listing.username == username)
        return self._newest_first(query, limit)

    def list_all_listings(
        self,
        limit: int = DEFAULT_LIMIT,
        region_code: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Listing]:
        """
        All listings, newest first.

        An unknown region_code is ignored rather than rejected. search matches
        a case-insensitive substring of the title.
        """
        query = self.db.query(Listing)
        region = RegionCode.parse(region_code)
        if region is not None:
            query = query.filter(Listing.region_code == region.value)
        term = (search or "").strip()
        if term:
            escaped = (
                term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            )
            query = query.filter(Listing.title.ilike(f"%{escaped}%", escape="\\"))
        return self._newest_first(query, limit)

    def _newest_first(self, query, limit: int) -> List[Listing]:
        return (
            query.order_by(Listing.id.desc())
            .limit(clamp_limit(limit, DEFAULT_LIMIT, MAX_LIMIT))
            .all()
        )
